"""Field accessor registry.

Keyset pagination needs to read the id and the sort field from the last row
of a page, and to turn the string form stored in a token back into a typed
value for the next query. Both are resolved once, when the service is
built, from an explicit registry of ``name -> (getter, python type)``.

Example:
    registry = FieldRegistry.from_model(Person)
    registry.register("display_name", str, getter=lambda p: p.display_name)

    value = registry.read("birthday", person)
    raw = registry.serialize("birthday", value)
    assert registry.parse("birthday", raw) == value
"""

from __future__ import annotations

import operator
import uuid
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import TYPE_CHECKING, Any

from sqlalchemy import inspect as sa_inspect
from sqlalchemy.exc import NoInspectionAvailable

from cursor_pagination.core.exceptions import InvalidSortValueError, SchemaError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

EPOCH = datetime(1970, 1, 1, tzinfo=UTC)
_ONE_MICROSECOND = timedelta(microseconds=1)

_TRUE_VALUES = frozenset({"true", "1"})
_FALSE_VALUES = frozenset({"false", "0"})


@dataclass(slots=True, frozen=True)
class FieldAccessor:
    """How to read and (de)serialize one entity field.

    Attributes:
        name: Field name as used in sort requests and queries
        getter: Callable returning the field value of an entity
        python_type: Declared Python type; None when it could not be resolved
        timezone_aware: For datetime fields, whether parsed values carry UTC tzinfo
    """

    name: str
    getter: Callable[[Any], Any]
    python_type: type | None
    timezone_aware: bool = True

    def serialize(self, value: Any) -> str:
        """Render a field value in its canonical token form.

        Datetimes become integer epoch microseconds (naive values are taken
        as UTC) so they round-trip through a token without losing precision.
        """
        if isinstance(value, datetime):
            if value.tzinfo is None:
                value = value.replace(tzinfo=UTC)
            return str((value - EPOCH) // _ONE_MICROSECOND)
        if isinstance(value, date):
            return value.isoformat()
        if isinstance(value, Enum):
            return str(value.value)
        return str(value)

    def parse(self, raw: str) -> Any:
        """Turn a canonical token form back into a typed value.

        Raises:
            SchemaError: If the field type is unknown
            ValueError: If ``raw`` is not a valid value of the field type
        """
        python_type = self.python_type
        if python_type is None:
            msg = f"Cannot resolve type for property {self.name}"
            raise SchemaError(msg, field_name=self.name)

        if issubclass(python_type, bool):
            lowered = raw.lower()
            if lowered in _TRUE_VALUES:
                return True
            if lowered in _FALSE_VALUES:
                return False
            msg = f"Invalid boolean value: {raw!r}"
            raise ValueError(msg)
        if issubclass(python_type, datetime):
            parsed = EPOCH + int(raw) * _ONE_MICROSECOND
            return parsed if self.timezone_aware else parsed.replace(tzinfo=None)
        if issubclass(python_type, date):
            return date.fromisoformat(raw)
        if issubclass(python_type, Decimal):
            try:
                return Decimal(raw)
            except InvalidOperation as e:
                msg = f"Invalid decimal value: {raw!r}"
                raise ValueError(msg) from e
        if issubclass(python_type, Enum):
            for member in python_type:
                if str(member.value) == raw:
                    return member
            msg = f"{raw!r} is not a valid {python_type.__name__}"
            raise ValueError(msg)
        if issubclass(python_type, uuid.UUID):
            return uuid.UUID(raw)
        return python_type(raw)


class FieldRegistry:
    """Registry of field accessors for one entity type."""

    def __init__(self, accessors: dict[str, FieldAccessor] | None = None) -> None:
        self._accessors: dict[str, FieldAccessor] = dict(accessors or {})

    @classmethod
    def from_model(cls, model: type[Any]) -> FieldRegistry:
        """Build a registry from a SQLAlchemy mapped class.

        Every column attribute is registered with an attribute getter and the
        Python type of its column. Columns whose type has no Python
        equivalent are registered with an unknown type, which fails when a
        token value has to be parsed for them.

        Raises:
            SchemaError: If ``model`` is not a mapped class
        """
        try:
            mapper = sa_inspect(model)
        except NoInspectionAvailable as e:
            msg = f"{getattr(model, '__name__', model)!s} is not a mapped class"
            raise SchemaError(msg) from e

        registry = cls()
        for attr in mapper.column_attrs:
            column_type = attr.columns[0].type
            try:
                python_type: type | None = column_type.python_type
            except NotImplementedError:
                python_type = None
            registry.register(
                attr.key,
                python_type,
                timezone_aware=bool(getattr(column_type, "timezone", False)),
            )
        return registry

    def register(
        self,
        name: str,
        python_type: type | None,
        getter: Callable[[Any], Any] | None = None,
        *,
        timezone_aware: bool = True,
    ) -> FieldRegistry:
        """Register (or replace) a field accessor.

        Args:
            name: Field name
            python_type: Declared Python type of the field
            getter: Value getter; defaults to attribute access by name
            timezone_aware: For datetime fields, whether parsed values carry tzinfo

        Returns:
            The registry, for chaining
        """
        self._accessors[name] = FieldAccessor(
            name=name,
            getter=getter or operator.attrgetter(name),
            python_type=python_type,
            timezone_aware=timezone_aware,
        )
        return self

    def resolve(self, name: str) -> FieldAccessor:
        """Return the accessor for a field.

        Raises:
            SchemaError: If no accessor is registered for the field
        """
        accessor = self._accessors.get(name)
        if accessor is None:
            msg = f"No accessor found for property {name}"
            raise SchemaError(msg, field_name=name)
        return accessor

    def read(self, name: str, entity: Any) -> Any:
        """Read a non-null field value from an entity.

        Raises:
            SchemaError: If no accessor is registered for the field
            InvalidSortValueError: If the getter fails or the value is None
        """
        accessor = self.resolve(name)
        try:
            value = accessor.getter(entity)
        except Exception as e:
            msg = f"Error invoking getter for property {name}"
            raise InvalidSortValueError(msg, field_name=name) from e
        if value is None:
            msg = f"Null value not allowed for property {name}"
            raise InvalidSortValueError(msg, field_name=name)
        return value

    def serialize(self, name: str, value: Any) -> str:
        """Render a value of a field in its canonical token form."""
        return self.resolve(name).serialize(value)

    def parse(self, name: str, raw: str) -> Any:
        """Parse the token form of a field value.

        Raises:
            SchemaError: If the field or its type cannot be resolved
            ValueError: If ``raw`` is not a valid value for the field
        """
        return self.resolve(name).parse(raw)

    def __contains__(self, name: object) -> bool:
        return name in self._accessors

    def __iter__(self) -> Iterator[str]:
        return iter(self._accessors)

    def __len__(self) -> int:
        return len(self._accessors)


__all__ = ["FieldAccessor", "FieldRegistry"]
