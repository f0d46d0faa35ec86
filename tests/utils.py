"""Shared test models and helpers.

Usage:
    from tests.utils import Person, PersonSearchFilter, person_filter
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel
from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from cursor_pagination import Field, Predicate
from cursor_pagination.core.pagination import and_

SECRET = "test-secret"


class Base(DeclarativeBase):
    """Declarative base for test models."""


class Person(Base):
    """Entity paginated in the tests."""

    __tablename__ = "people"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(100))
    age: Mapped[int | None] = mapped_column(Integer, nullable=True)
    birthday: Mapped[datetime] = mapped_column(DateTime(timezone=False))

    def __repr__(self) -> str:
        return f"Person(id={self.id}, name={self.name!r}, age={self.age})"


class UnmappedBase(DeclarativeBase):
    """Base whose tables are never created."""


class Ghost(UnmappedBase):
    """Mapped class without a table in the test database."""

    __tablename__ = "ghosts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)


class PersonSearchFilter(BaseModel):
    """Caller-side search filter for people."""

    age: int | None = None
    names: list[str] | None = None


def person_filter(search: PersonSearchFilter | None) -> Predicate | None:
    """Translate a ``PersonSearchFilter`` into a predicate."""
    if search is None:
        return None
    return and_(
        Field("age") == search.age if search.age is not None else None,
        Field("name").in_(search.names) if search.names else None,
    )


def people() -> list[Person]:
    """Seed rows.

    Ages tie at 20 for ids 2 and 3 so a page boundary can fall inside a run
    of equal sort values.
    """
    return [
        Person(id=1, name="Alice", age=30, birthday=datetime(1990, 5, 1, 8, 0, 0)),
        Person(id=2, name="Bob", age=20, birthday=datetime(2000, 1, 15, 23, 59, 59)),
        Person(id=3, name="Carol", age=20, birthday=datetime(1995, 7, 20, 12, 30, 45, 123456)),
        Person(id=4, name="Dave", age=25, birthday=datetime(1985, 3, 3, 0, 0, 0)),
    ]


def ids(page) -> list[int]:
    """Ids of the rows of a page, in order."""
    return [person.id for person in page.content]
