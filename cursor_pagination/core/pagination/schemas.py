"""Request and result types for cursor pagination.

``PageRequest`` carries what a caller asks for (size, sort, direction and the
continuation token from the previous page). ``ResultSlice`` is what the
engine hands back: the rows of one page plus the token for the next one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field, field_validator

if TYPE_CHECKING:
    from collections.abc import Iterator, Sequence


class SortDirection(StrEnum):
    """Sort direction for both the custom sort field and the id tie-breaker."""

    ASC = "asc"
    DESC = "desc"


class PageRequest(BaseModel):
    """Cursor page request.

    Attributes:
        continuation_token: Opaque token from the previous slice (None for the first page)
        size: Requested page size; values below 1 are replaced by the configured default
        sort: Optional custom sort field; must be in the service's sortable allow-list
        direction: Sort direction applied to the sort field and the id

    Example:
        request = PageRequest(size=3, sort="age", direction=SortDirection.ASC)
        first = await service.fetch_page(request)
        second = await service.fetch_page(request.with_token(first.continuation_token))
    """

    continuation_token: str | None = Field(
        default=None,
        description="Opaque continuation token from the previous page",
    )
    size: int = Field(
        default=20,
        description="Requested page size",
    )
    sort: str | None = Field(
        default=None,
        description="Custom sort field name",
    )
    direction: SortDirection = Field(
        default=SortDirection.DESC,
        description="Sort direction",
    )

    model_config = ConfigDict(frozen=True)

    @field_validator("continuation_token", "sort", mode="before")
    @classmethod
    def _blank_to_none(cls, v: str | None) -> str | None:
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def is_sorted(self) -> bool:
        """Whether a custom sort field was requested."""
        return self.sort is not None

    def with_token(self, continuation_token: str | None) -> PageRequest:
        """Return a copy of this request pointing at another page."""
        return self.model_copy(update={"continuation_token": continuation_token})


@dataclass(slots=True, frozen=True)
class ResultSlice[T]:
    """One page of keyset-paginated results.

    Attributes:
        content: Rows of this page, in query order
        size: Requested page size (echoed, not the row count)
        continuation_token: Token for the next page, None when exhausted

    Example:
        page = await service.fetch_page(PageRequest(size=20))
        print(f"Showing {page.number_of_elements} rows")
        if page.has_next:
            page = await service.fetch_page(request.with_token(page.continuation_token))
    """

    content: Sequence[T] = field(default_factory=tuple)
    size: int = 0
    continuation_token: str | None = None

    def __post_init__(self) -> None:
        # Freeze whatever sequence the caller handed in
        object.__setattr__(self, "content", tuple(self.content))

    @property
    def has_next(self) -> bool:
        """Whether another page follows this one."""
        return self.continuation_token is not None

    @property
    def number_of_elements(self) -> int:
        """Number of rows actually on this page."""
        return len(self.content)

    @property
    def has_content(self) -> bool:
        """Whether this page holds any rows."""
        return bool(self.content)

    def __iter__(self) -> Iterator[T]:
        return iter(self.content)

    def __len__(self) -> int:
        return len(self.content)


__all__ = ["PageRequest", "ResultSlice", "SortDirection"]
