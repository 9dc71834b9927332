"""Structured filter-to-predicate building for repository queries.

Every value ends up as a bound parameter of a SQLAlchemy expression; nothing
is ever interpolated into SQL text.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from sqlalchemy import ColumnElement, and_, true
from sqlalchemy.orm import InstrumentedAttribute


class PredicateBuilder:
    """Accumulates AND-combined predicates, skipping empty filter values."""

    def __init__(self) -> None:
        self.predicates: list[ColumnElement[bool]] = []

    def where_in(self, column: InstrumentedAttribute[Any], values: Iterable[Any] | None) -> PredicateBuilder:
        values = list(values or [])
        if values:
            self.predicates.append(column.in_(values))
        return self

    def where_equals(self, column: InstrumentedAttribute[Any], value: Any) -> PredicateBuilder:
        if value not in (None, "", 0):
            self.predicates.append(column == value)
        return self

    def build(self) -> ColumnElement[bool]:
        if not self.predicates:
            return true()
        return and_(*self.predicates)
