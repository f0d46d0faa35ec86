"""Page executors.

An executor runs a ``KeysetQuery`` against a backing store and returns the
rows in query order. It carries no policy: it honors the limit, attaches the
per-query deadline, and wraps any store failure in ``QueryExecutionError``.
Nothing is retried.

Usage:
    from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

    engine = create_async_engine("postgresql+asyncpg://...")
    executor = SQLAlchemyPageExecutor(async_sessionmaker(engine), Person)
    rows = await executor.execute(query)
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, Protocol

from sqlalchemy import and_, inspect, or_, select

from cursor_pagination.core.exceptions import QueryExecutionError, SchemaError
from cursor_pagination.core.pagination.query import And, Comparison, Operator, Or
from cursor_pagination.core.pagination.schemas import SortDirection
from cursor_pagination.infra.logging import get_lazy_logger

if TYPE_CHECKING:
    from collections.abc import Sequence

    from sqlalchemy import ColumnElement, Select
    from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

    from cursor_pagination.core.pagination.query import KeysetQuery, Predicate

logger = get_lazy_logger(__name__)


class PageExecutor[T](Protocol):
    """Anything able to run a keyset query and return the matching rows."""

    async def execute(self, query: KeysetQuery) -> Sequence[T]:
        """Return at most ``query.limit`` rows in ``query.order_by`` order.

        Raises:
            QueryExecutionError: If the backing store fails
        """
        ...


class SQLAlchemyPageExecutor[T]:
    """Run keyset queries through SQLAlchemy async sessions.

    A new session is opened for every call, so one executor can serve
    concurrent page fetches.

    Args:
        session_factory: Factory producing ``AsyncSession`` instances
        model: Mapped class the rows are loaded as
        base_statement: Optional starting statement (e.g. with loader options);
            defaults to ``select(model)``
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        model: type[T],
        *,
        base_statement: Select[Any] | None = None,
    ) -> None:
        self.session_factory = session_factory
        self.model = model
        self.base_statement = base_statement
        self._columns = {attr.key for attr in inspect(model).column_attrs}

    def _column(self, name: str) -> Any:
        if name not in self._columns:
            msg = f"{self.model.__name__} has no column {name}"
            raise SchemaError(msg, field_name=name)
        return getattr(self.model, name)

    def to_clause(self, predicate: Predicate) -> ColumnElement[bool]:
        """Translate a store-neutral predicate into a SQLAlchemy clause."""
        if isinstance(predicate, And):
            return and_(*(self.to_clause(p) for p in predicate.predicates))
        if isinstance(predicate, Or):
            return or_(*(self.to_clause(p) for p in predicate.predicates))

        column = self._column(predicate.field)
        match predicate.op:
            case Operator.EQ:
                return column == predicate.value
            case Operator.NE:
                return column != predicate.value
            case Operator.LT:
                return column < predicate.value
            case Operator.LE:
                return column <= predicate.value
            case Operator.GT:
                return column > predicate.value
            case Operator.GE:
                return column >= predicate.value
            case Operator.IN:
                return column.in_(list(predicate.value))
        msg = f"Unsupported operator: {predicate.op}"
        raise ValueError(msg)

    def statement(self, query: KeysetQuery) -> Select[Any]:
        """Render the full select statement for a query."""
        statement = self.base_statement if self.base_statement is not None else select(self.model)

        if query.where is not None:
            statement = statement.where(self.to_clause(query.where))

        for key in query.order_by:
            column = self._column(key.field)
            if key.direction is SortDirection.DESC:
                statement = statement.order_by(column.desc())
            else:
                statement = statement.order_by(column.asc())

        return statement.limit(query.limit)

    async def execute(self, query: KeysetQuery) -> list[T]:
        """Execute a keyset query in a fresh session.

        Raises:
            SchemaError: If the query references an unmapped field
            QueryExecutionError: If the database fails or the deadline expires
        """
        statement = self.statement(query)
        logger.debug("Executing query: %s", lambda: query.to_document())

        try:
            async with self.session_factory() as session:
                async with asyncio.timeout(query.timeout):
                    result = await session.execute(statement)
                rows = list(result.scalars().all())
        except Exception as e:
            logger.exception("Error executing query")
            msg = "Error executing query"
            raise QueryExecutionError(msg, details={"model": self.model.__name__}) from e

        return rows[: query.limit]


__all__ = ["PageExecutor", "SQLAlchemyPageExecutor"]
