"""Search filter fingerprinting.

A continuation token carries the fingerprint of the filter and sort it was
produced for. Presenting it with a different filter, sort field or direction
yields a different fingerprint, which the service rejects. Page size is
deliberately left out: it may change between calls of one token sequence.

The fingerprint is a consistency check, not a security boundary; secrecy of
the token comes from the codec.
"""

from __future__ import annotations

import hashlib
import json
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel
from pydantic_core import to_jsonable_python

if TYPE_CHECKING:
    from cursor_pagination.core.pagination.schemas import SortDirection


def _normalize(value: Any) -> Any:
    """Make nested values order-stable: sets become sorted lists."""
    if isinstance(value, (set, frozenset)):
        return sorted((_normalize(v) for v in value), key=str)
    if isinstance(value, Mapping):
        return {str(k): _normalize(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_normalize(v) for v in value]
    return value


def canonical_filter(search_filter: Any) -> str:
    """Return the deterministic string form of a search filter.

    Pydantic models and mappings are rendered as sorted-key JSON with unset
    (None) entries dropped, so ``{"age": None}`` and ``{}`` are the same
    filter. Sets become sorted lists, independent of the hash seed.
    ``None`` renders as the empty string; anything else uses ``str()``.
    """
    if search_filter is None:
        return ""

    if isinstance(search_filter, BaseModel):
        # Python mode keeps sets as sets so they can be ordered before rendering
        data: Any = to_jsonable_python(_normalize(search_filter.model_dump(exclude_none=True)))
    elif isinstance(search_filter, Mapping):
        data = {str(k): v for k, v in search_filter.items() if v is not None}
    else:
        return str(search_filter)

    return json.dumps(_normalize(data), sort_keys=True, separators=(",", ":"), default=str)


def fingerprint(
    search_filter: Any,
    sort_field: str | None,
    direction: SortDirection,
) -> str:
    """Compute the fingerprint of a filter + sort combination.

    Args:
        search_filter: Caller-defined filter (model, mapping or None)
        sort_field: Custom sort field, None when sorting by id only
        direction: Sort direction

    Returns:
        32 character hex digest (128-bit BLAKE2b)
    """
    # A JSON array keeps the three components unambiguous when concatenated
    material = json.dumps(
        [canonical_filter(search_filter), sort_field or "", direction.name],
        separators=(",", ":"),
    )
    return hashlib.blake2b(material.encode("utf-8"), digest_size=16).hexdigest()


__all__ = ["canonical_filter", "fingerprint"]
