"""Result slice assembly.

The executor reads one row more than the page size. If that look-ahead row
exists there is a next page: it is dropped, and the continuation token is
built from the last row that stays on the page.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cursor_pagination.core.pagination.cursor import CursorState
from cursor_pagination.core.pagination.schemas import ResultSlice
from cursor_pagination.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from cursor_pagination.core.pagination.cursor import TokenCodec
    from cursor_pagination.core.pagination.fields import FieldRegistry

logger = get_lazy_logger(__name__)


class SliceAssembler:
    """Turn over-fetched rows into a ``ResultSlice``.

    Args:
        codec: Codec used to encrypt the next continuation token
        registry: Field accessors for reading the boundary row
        id_field: Name of the unique id field
    """

    def __init__(self, codec: TokenCodec, registry: FieldRegistry, *, id_field: str = "id") -> None:
        self.codec = codec
        self.registry = registry
        self.id_field = id_field

    def assemble[T](
        self,
        rows: Sequence[T],
        *,
        size: int,
        fingerprint: str,
        sort_field: str | None = None,
    ) -> ResultSlice[T]:
        """Build the slice for one page.

        Args:
            rows: Rows returned by the executor (up to ``size + 1``)
            size: Effective page size
            fingerprint: Fingerprint of the current filter/sort
            sort_field: Custom sort field, None when sorting by id only

        Raises:
            SchemaError: If the id or sort field has no accessor
            InvalidSortValueError: If the boundary row's value is null or unreadable
        """
        if len(rows) <= size:
            return ResultSlice(content=rows, size=size)

        content = rows[:size]
        state = self.cursor_for(content[-1], fingerprint=fingerprint, sort_field=sort_field)
        payload = state.to_payload()
        logger.debug("Plain continuation token: %s", payload)
        return ResultSlice(content=content, size=size, continuation_token=self.codec.encode(payload))

    def cursor_for(self, row: object, *, fingerprint: str, sort_field: str | None) -> CursorState:
        """Describe the position right after ``row``."""
        last_id = self.registry.serialize(self.id_field, self.registry.read(self.id_field, row))
        if sort_field is None:
            return CursorState(fingerprint=fingerprint, last_id=last_id)

        sort_value = self.registry.serialize(sort_field, self.registry.read(sort_field, row))
        return CursorState(
            fingerprint=fingerprint,
            last_id=last_id,
            sort_field=sort_field,
            sort_value=sort_value,
        )


__all__ = ["SliceAssembler"]
