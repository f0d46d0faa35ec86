"""Keyset query builder.

Implements the seek method: instead of skipping rows with an offset, the next
page starts strictly after the last row of the previous one.

How it works:
    Sorting by id only, DESC, cursor at id1:
        WHERE id < id1 ORDER BY id DESC

    Sorting by a non-unique field, DESC, cursor at (v1, id1):
        WHERE (field = v1 AND id < id1) OR (field < v1)
        ORDER BY field DESC, id DESC

The unique id is always the last sort key, so the order is total and no row
is duplicated or skipped at a page boundary even when many rows share the
same sort value. Sorting on fields that can be null is not supported: store
null ordering varies, and such rows may be skipped or repeated.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from cursor_pagination.core.exceptions import MalformedTokenError
from cursor_pagination.core.pagination.query import (
    Comparison,
    KeysetQuery,
    Operator,
    Predicate,
    SortKey,
    and_,
    or_,
)
from cursor_pagination.core.pagination.schemas import SortDirection

if TYPE_CHECKING:
    from cursor_pagination.core.pagination.cursor import CursorState
    from cursor_pagination.core.pagination.fields import FieldRegistry
    from cursor_pagination.core.pagination.schemas import PageRequest


class KeysetFilter:
    """Build keyset queries for one entity type.

    Example:
        keyset = KeysetFilter(FieldRegistry.from_model(Person))
        query = keyset.build(PageRequest(size=3, sort="age"), size=3, cursor=state)
        # query.limit == 4, query.order_by == (age DESC, id DESC)

    Attributes:
        registry: Field accessors used to type cursor values
        id_field: Name of the unique, monotonically assigned id field
    """

    def __init__(self, registry: FieldRegistry, *, id_field: str = "id") -> None:
        self.registry = registry
        self.id_field = id_field

    def build(
        self,
        request: PageRequest,
        *,
        size: int,
        cursor: CursorState | None = None,
        where: Predicate | None = None,
        timeout: float | None = None,
    ) -> KeysetQuery:
        """Build the query for the page after ``cursor``.

        Args:
            request: Page request (sort field and direction)
            size: Effective page size; one extra look-ahead row is requested
            cursor: Decoded continuation token, None for the first page
            where: Caller filter predicate, AND-ed with the seek condition
            timeout: Optional execution deadline in seconds

        Raises:
            MalformedTokenError: If the cursor does not match the request or
                its values cannot be parsed
            SchemaError: If a field type cannot be resolved
        """
        order_by = self.order_by(request)
        seek = self._seek_condition(order_by, cursor) if cursor is not None else None
        return KeysetQuery(
            where=and_(where, seek),
            order_by=order_by,
            limit=size + 1,
            timeout=timeout,
        )

    def order_by(self, request: PageRequest) -> tuple[SortKey, ...]:
        """Sort keys for a request: the custom field (if any), then the id."""
        keys = []
        if request.sort is not None:
            keys.append(SortKey(request.sort, request.direction))
        keys.append(SortKey(self.id_field, request.direction))
        return tuple(keys)

    def _seek_condition(
        self,
        order_by: tuple[SortKey, ...],
        cursor: CursorState,
    ) -> Predicate | None:
        """Build the condition selecting rows strictly after the cursor.

        For keys (a, b) with cursor values (v1, v2):
            (a = v1 AND b op v2) OR (a op v1)
        """
        values = self._cursor_values(order_by, cursor)

        or_conditions: list[Predicate | None] = []
        for i, key in enumerate(order_by):
            op = Operator.LT if key.direction is SortDirection.DESC else Operator.GT
            eq_conditions = [
                Comparison(prev.field, Operator.EQ, values[j])
                for j, prev in enumerate(order_by[:i])
            ]
            or_conditions.append(and_(*eq_conditions, Comparison(key.field, op, values[i])))

        # Most specific branch first: tie on every leading key, then id
        return or_(*reversed(or_conditions))

    def _cursor_values(self, order_by: tuple[SortKey, ...], cursor: CursorState) -> list[Any]:
        sort_field = order_by[0].field if len(order_by) > 1 else None
        if cursor.sort_field != sort_field:
            msg = "Continuation token sort field does not match the requested sort"
            raise MalformedTokenError(msg)

        raw_values = {self.id_field: cursor.last_id}
        if sort_field is not None:
            raw_values[sort_field] = cursor.sort_value or ""

        values = []
        for key in order_by:
            raw = raw_values[key.field]
            try:
                values.append(self.registry.parse(key.field, raw))
            except (ValueError, TypeError, OverflowError) as e:
                msg = f"Error getting parameter value: {e}"
                raise MalformedTokenError(msg) from e
        return values


__all__ = ["KeysetFilter"]
