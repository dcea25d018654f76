"""
Composed query — the accumulated, not-yet-executed shape of a request.

A ``ComposedQuery`` is created at the start of a single CRUD or search
operation, mutated by each translation step in turn, handed once to the
compiler, then discarded. It holds plain data only; compiling it into a
SQLAlchemy statement is the job of
:mod:`resource_query.specifications.compiler`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .operators import FilterOperator


@dataclass(frozen=True)
class Predicate:
    """A single ``(field, operator, value)`` filter condition."""

    field: str
    operator: FilterOperator
    value: Any = None

    def to_dict(self) -> dict[str, Any]:
        return {"op": self.operator.value, "attr": self.field, "val": self.value}


@dataclass(frozen=True)
class SortClause:
    """One ordering key. ``direction`` is carried as given."""

    field: str
    direction: str


@dataclass
class ComposedQuery:
    """
    Mutable container for predicates, ordering, eager loads and counts.

    Attributes:
        predicates: Filter conditions, combined with AND.
        sorts: Ordering keys; the first one is the primary key.
        includes: Relationship paths to eager-load (dotted for nesting).
        counts: Relationship names to attach an aggregate count for.
        limit: Maximum number of rows.
        offset: Number of rows to skip.
    """

    predicates: list[Predicate] = field(default_factory=list)
    sorts: list[SortClause] = field(default_factory=list)
    includes: list[str] = field(default_factory=list)
    counts: list[str] = field(default_factory=list)
    limit: int | None = None
    offset: int | None = None

    def where(
        self, field_name: str, operator: FilterOperator, value: Any = None
    ) -> ComposedQuery:
        self.predicates.append(Predicate(field_name, operator, value))
        return self

    def order_by(self, field_name: str, direction: str) -> ComposedQuery:
        self.sorts.append(SortClause(field_name, direction))
        return self

    def with_relation(self, path: str) -> ComposedQuery:
        self.includes.append(path)
        return self

    def with_count(self, relation: str) -> ComposedQuery:
        self.counts.append(relation)
        return self

    def paginate(self, limit: int, offset: int = 0) -> ComposedQuery:
        self.limit = limit
        self.offset = offset
        return self

    def to_dict(self) -> dict[str, Any]:
        """Serialise to a JSON-compatible dictionary (for logging and debugging)."""
        result: dict[str, Any] = {}
        if self.predicates:
            result["where"] = [p.to_dict() for p in self.predicates]
        if self.sorts:
            result["order_by"] = [f"{s.field}:{s.direction}" for s in self.sorts]
        if self.includes:
            result["with"] = list(self.includes)
        if self.counts:
            result["with_count"] = list(self.counts)
        if self.limit is not None:
            result["limit"] = self.limit
        if self.offset is not None:
            result["offset"] = self.offset
        return result
