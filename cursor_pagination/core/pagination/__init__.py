"""Keyset (cursor-based) pagination.

Pagination that is:
- Stable: rows inserted or deleted between calls do not shift later pages
- Performant: uses indexed seeks instead of OFFSET scans
- Tamper-evident: continuation tokens are encrypted and bound to the filter/sort

The continuation token encodes the id (and custom sort value) of the last
row of a page. Clients pass it back unchanged to fetch the next page.
"""

from cursor_pagination.core.pagination.assembler import SliceAssembler
from cursor_pagination.core.pagination.cursor import CursorState, TokenCodec
from cursor_pagination.core.pagination.executor import PageExecutor, SQLAlchemyPageExecutor
from cursor_pagination.core.pagination.fields import FieldAccessor, FieldRegistry
from cursor_pagination.core.pagination.filters import KeysetFilter
from cursor_pagination.core.pagination.fingerprint import canonical_filter, fingerprint
from cursor_pagination.core.pagination.query import (
    And,
    Comparison,
    Field,
    KeysetQuery,
    Operator,
    Or,
    Predicate,
    SortKey,
    and_,
    or_,
)
from cursor_pagination.core.pagination.schemas import PageRequest, ResultSlice, SortDirection
from cursor_pagination.core.pagination.service import CursorPaginationService

__all__ = [
    "And",
    "Comparison",
    "CursorPaginationService",
    "CursorState",
    "Field",
    "FieldAccessor",
    "FieldRegistry",
    "KeysetFilter",
    "KeysetQuery",
    "Operator",
    "Or",
    "PageExecutor",
    "PageRequest",
    "Predicate",
    "ResultSlice",
    "SQLAlchemyPageExecutor",
    "SliceAssembler",
    "SortDirection",
    "SortKey",
    "TokenCodec",
    "and_",
    "canonical_filter",
    "fingerprint",
    "or_",
]
