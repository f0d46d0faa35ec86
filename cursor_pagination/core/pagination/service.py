"""Cursor pagination service.

Ties the pieces together for one entity type. A page fetch runs:

    fingerprint filter/sort
      -> decode continuation token (or start at the first page)
      -> build keyset query
      -> execute (size + 1 rows)
      -> assemble slice and next token

Any failure aborts the call with a typed ``PaginationError``; there is no
retry and no partial result. The service holds only immutable configuration,
so one instance can serve concurrent calls.

Example:
    from sqlalchemy.ext.asyncio import async_sessionmaker

    from cursor_pagination import (
        CursorPaginationService,
        Field,
        FieldRegistry,
        PageRequest,
        SQLAlchemyPageExecutor,
    )

    def person_filter(search: PersonSearchFilter | None):
        if search is None or search.age is None:
            return None
        return Field("age") == search.age

    service = CursorPaginationService(
        SQLAlchemyPageExecutor(async_sessionmaker(engine), Person),
        FieldRegistry.from_model(Person),
        sortable_fields=["age", "birthday"],
        secret_key="s3cret",
        filter_builder=person_filter,
    )

    page = await service.fetch_page(PageRequest(size=20, sort="age"), PersonSearchFilter(age=20))
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cursor_pagination.core.exceptions import InvalidRequestError
from cursor_pagination.core.pagination.assembler import SliceAssembler
from cursor_pagination.core.pagination.cursor import CursorState, TokenCodec
from cursor_pagination.core.pagination.filters import KeysetFilter
from cursor_pagination.core.pagination.fingerprint import fingerprint
from cursor_pagination.core.settings import get_pagination_settings
from cursor_pagination.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Callable, Iterable

    from cursor_pagination.core.pagination.executor import PageExecutor
    from cursor_pagination.core.pagination.fields import FieldRegistry
    from cursor_pagination.core.pagination.query import Predicate
    from cursor_pagination.core.pagination.schemas import PageRequest, ResultSlice
    from cursor_pagination.core.settings import PaginationSettings

logger = get_lazy_logger(__name__)


class CursorPaginationService[T, F]:
    """Keyset pagination over one entity type.

    Args:
        executor: Runs keyset queries against the backing store
        registry: Field accessors of the entity type
        sortable_fields: Allow-list of custom sort fields (should be indexed)
        secret_key: Continuation token secret; defaults to ``PAGINATION_SECRET_KEY``
        query_timeout: Per-query deadline in seconds; defaults to ``PAGINATION_QUERY_TIMEOUT``
        id_field: Unique, monotonically assigned id field used as tie-breaker
        filter_builder: Turns a caller search filter into a predicate
        settings: Pagination settings; loaded from the environment when omitted

    Raises:
        ValueError: If no secret key is configured
        SchemaError: If the id field or an allow-listed field has no accessor
    """

    def __init__(
        self,
        executor: PageExecutor[T],
        registry: FieldRegistry,
        *,
        sortable_fields: Iterable[str] = (),
        secret_key: str | bytes | None = None,
        query_timeout: float | None = None,
        id_field: str = "id",
        filter_builder: Callable[[F | None], Predicate | None] | None = None,
        settings: PaginationSettings | None = None,
    ) -> None:
        settings = settings or get_pagination_settings()

        if secret_key is None and settings.secret_key is not None:
            secret_key = settings.secret_key.get_secret_value()
        if not secret_key:
            msg = "A secret key is required to encrypt continuation tokens"
            raise ValueError(msg)

        self.executor = executor
        self.registry = registry
        self.id_field = id_field
        self.sortable_fields = frozenset(sortable_fields)
        self.query_timeout = query_timeout if query_timeout is not None else settings.query_timeout
        self.default_size = settings.default_size
        self.max_size = settings.max_size
        self.filter_builder = filter_builder

        # Fail at construction, not on the first request that needs the field
        registry.resolve(id_field)
        for field_name in self.sortable_fields:
            registry.resolve(field_name)

        codec = TokenCodec(secret_key)
        self._codec = codec
        self._keyset = KeysetFilter(registry, id_field=id_field)
        self._assembler = SliceAssembler(codec, registry, id_field=id_field)

    def effective_size(self, request: PageRequest) -> int:
        """Page size actually used for a request.

        Sizes below 1 fall back to the default so a client can never loop
        forever on empty pages. Sizes above the maximum, the default
        included, are clamped.
        """
        size = self.default_size if request.size < 1 else request.size
        return min(size, self.max_size)

    def _check_sort(self, request: PageRequest) -> None:
        if request.sort is not None and request.sort not in self.sortable_fields:
            msg = f"Sorting is only allowed on fields: {sorted(self.sortable_fields)}"
            raise InvalidRequestError(msg, details={"sort": request.sort})

    async def fetch_page(self, request: PageRequest, search_filter: F | None = None) -> ResultSlice[T]:
        """Fetch the page described by ``request``.

        Args:
            request: Page request, carrying the previous page's token if any
            search_filter: Caller search filter; must not change across a token sequence

        Returns:
            Slice with the page rows and the next continuation token

        Raises:
            InvalidRequestError: Sort field not allowed
            TokenError: Token cannot be decrypted
            FingerprintMismatchError: Filter or sort changed since the token was issued
            MalformedTokenError: Token payload has an unexpected shape or value
            SchemaError: Field accessor or type missing
            InvalidSortValueError: Boundary row has a null or unreadable value
            QueryExecutionError: Backing store failed
        """
        self._check_sort(request)
        size = self.effective_size(request)
        hashed = fingerprint(search_filter, request.sort, request.direction)

        cursor: CursorState | None = None
        if request.continuation_token is not None:
            payload = self._codec.decode(request.continuation_token)
            logger.debug("Decoded continuation token: %s", payload)
            cursor = CursorState.from_payload(payload, expected_fingerprint=hashed)

        where = self.filter_builder(search_filter) if self.filter_builder is not None else None
        query = self._keyset.build(
            request,
            size=size,
            cursor=cursor,
            where=where,
            timeout=self.query_timeout,
        )

        rows = await self.executor.execute(query)
        page = self._assembler.assemble(
            rows,
            size=size,
            fingerprint=hashed,
            sort_field=request.sort,
        )
        logger.debug(
            "Page fetched",
            extra={"rows": page.number_of_elements, "has_next": page.has_next, "first_page": cursor is None},
        )
        return page

    async def iterate_pages(
        self,
        request: PageRequest,
        search_filter: F | None = None,
    ) -> AsyncIterator[ResultSlice[T]]:
        """Yield pages, following continuation tokens until exhausted.

        Example:
            async for page in service.iterate_pages(PageRequest(size=100)):
                for row in page:
                    ...
        """
        while True:
            page = await self.fetch_page(request, search_filter)
            yield page
            if not page.has_next:
                return
            request = request.with_token(page.continuation_token)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(sortable_fields={sorted(self.sortable_fields)!r}, "
            f"id_field={self.id_field!r}, query_timeout={self.query_timeout!r})"
        )


__all__ = ["CursorPaginationService"]
