"""Keyset (cursor-based) pagination with encrypted continuation tokens."""

from cursor_pagination.core.exceptions import (
    FingerprintMismatchError,
    InvalidRequestError,
    InvalidSortValueError,
    MalformedTokenError,
    PaginationError,
    QueryExecutionError,
    SchemaError,
    TokenError,
)
from cursor_pagination.core.pagination import (
    CursorPaginationService,
    Field,
    FieldRegistry,
    KeysetQuery,
    PageExecutor,
    PageRequest,
    Predicate,
    ResultSlice,
    SortDirection,
    SQLAlchemyPageExecutor,
    TokenCodec,
)

__version__ = "1.0.0"

__all__ = [
    "CursorPaginationService",
    "Field",
    "FieldRegistry",
    "FingerprintMismatchError",
    "InvalidRequestError",
    "InvalidSortValueError",
    "KeysetQuery",
    "MalformedTokenError",
    "PageExecutor",
    "PageRequest",
    "PaginationError",
    "Predicate",
    "QueryExecutionError",
    "ResultSlice",
    "SQLAlchemyPageExecutor",
    "SchemaError",
    "SortDirection",
    "TokenCodec",
    "TokenError",
    "__version__",
]
