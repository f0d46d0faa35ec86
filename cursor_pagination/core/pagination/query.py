"""Store-neutral query description.

The keyset query builder does not talk to a database. It produces a
``KeysetQuery``: a predicate tree, a multi-key sort order and a row limit.
Executors translate it for a concrete store (see ``executor.py``). Every
node also renders as a MongoDB-style query document, which is what gets
logged when a query runs.

Example:
    age = Field("age")
    predicate = (age == 20) & (Field("id") < 42) | (age < 20)
    predicate.to_document()
    # {'$or': [{'$and': [{'age': 20}, {'id': {'$lt': 42}}]}, {'age': {'$lt': 20}}]}
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Any

from cursor_pagination.core.pagination.schemas import SortDirection

if TYPE_CHECKING:
    from collections.abc import Iterable


class Operator(StrEnum):
    """Comparison operators understood by every executor."""

    EQ = "eq"
    NE = "ne"
    LT = "lt"
    LE = "lte"
    GT = "gt"
    GE = "gte"
    IN = "in"


class _Combinable:
    __slots__ = ()

    def __and__(self, other: Predicate) -> Predicate:
        return and_(self, other)  # type: ignore[arg-type]

    def __or__(self, other: Predicate) -> Predicate:
        return or_(self, other)  # type: ignore[arg-type]


@dataclass(slots=True, frozen=True)
class Comparison(_Combinable):
    """``field <op> value``."""

    field: str
    op: Operator
    value: Any

    def to_document(self) -> dict[str, Any]:
        if self.op is Operator.EQ:
            return {self.field: self.value}
        value = list(self.value) if self.op is Operator.IN else self.value
        return {self.field: {f"${self.op}": value}}


@dataclass(slots=True, frozen=True)
class And(_Combinable):
    """Conjunction of predicates."""

    predicates: tuple[Predicate, ...]

    def to_document(self) -> dict[str, Any]:
        return {"$and": [p.to_document() for p in self.predicates]}


@dataclass(slots=True, frozen=True)
class Or(_Combinable):
    """Disjunction of predicates."""

    predicates: tuple[Predicate, ...]

    def to_document(self) -> dict[str, Any]:
        return {"$or": [p.to_document() for p in self.predicates]}


type Predicate = Comparison | And | Or


def _combine(kind: type[And] | type[Or], predicates: Iterable[Predicate | None]) -> Predicate | None:
    flattened: list[Predicate] = []
    for predicate in predicates:
        if predicate is None:
            continue
        if isinstance(predicate, kind):
            flattened.extend(predicate.predicates)
        else:
            flattened.append(predicate)
    if not flattened:
        return None
    if len(flattened) == 1:
        return flattened[0]
    return kind(tuple(flattened))


def and_(*predicates: Predicate | None) -> Predicate | None:
    """AND predicates together, skipping ``None`` and flattening nested ANDs."""
    return _combine(And, predicates)


def or_(*predicates: Predicate | None) -> Predicate | None:
    """OR predicates together, skipping ``None`` and flattening nested ORs."""
    return _combine(Or, predicates)


class Field:
    """Fluent builder for comparisons on one field.

    Example:
        Field("age") >= 18
        Field("status").in_(["active", "pending"])
    """

    __slots__ = ("name",)
    __hash__ = None  # type: ignore[assignment]

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"Field({self.name!r})"

    def __eq__(self, value: object) -> Comparison:  # type: ignore[override]
        return Comparison(self.name, Operator.EQ, value)

    def __ne__(self, value: object) -> Comparison:  # type: ignore[override]
        return Comparison(self.name, Operator.NE, value)

    def __lt__(self, value: Any) -> Comparison:
        return Comparison(self.name, Operator.LT, value)

    def __le__(self, value: Any) -> Comparison:
        return Comparison(self.name, Operator.LE, value)

    def __gt__(self, value: Any) -> Comparison:
        return Comparison(self.name, Operator.GT, value)

    def __ge__(self, value: Any) -> Comparison:
        return Comparison(self.name, Operator.GE, value)

    def in_(self, values: Iterable[Any]) -> Comparison:
        return Comparison(self.name, Operator.IN, tuple(values))


@dataclass(slots=True, frozen=True)
class SortKey:
    """One key of a sort order."""

    field: str
    direction: SortDirection

    def to_document(self) -> dict[str, int]:
        return {self.field: 1 if self.direction is SortDirection.ASC else -1}


@dataclass(slots=True, frozen=True)
class KeysetQuery:
    """Everything an executor needs to read one page.

    Attributes:
        where: Combined caller filter and positional predicate (None matches everything)
        order_by: Sort keys, the unique id always last
        limit: Maximum rows to read (page size + 1 look-ahead row)
        timeout: Optional execution deadline in seconds
    """

    where: Predicate | None
    order_by: tuple[SortKey, ...]
    limit: int
    timeout: float | None = None

    def to_document(self) -> dict[str, Any]:
        sort: dict[str, int] = {}
        for key in self.order_by:
            sort.update(key.to_document())
        return {
            "filter": self.where.to_document() if self.where is not None else {},
            "sort": sort,
            "limit": self.limit,
        }


__all__ = [
    "And",
    "Comparison",
    "Field",
    "KeysetQuery",
    "Operator",
    "Or",
    "Predicate",
    "SortKey",
    "and_",
    "or_",
]
