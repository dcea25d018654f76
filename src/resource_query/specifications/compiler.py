"""
Compile a :class:`ComposedQuery` into a SQLAlchemy ``Select``.

Uses the strategy pattern: each operator is an isolated class in
``operators/``, registered in a ``SQLAlchemyOperatorRegistry``.
``build_sqla_filter`` combines the predicates with AND and delegates
each one to the registry.

Relations
---------
``includes`` become ``selectinload`` options; dotted paths
(``"posts.comments"``) are chained segment by segment. ``counts`` become
correlated ``count(*)`` sub-selects labelled ``<relation>_count`` and
added to the selected columns, so rows come back as
``(record, count_1, count_2, ...)``.

Ordering
--------
Directions are case-insensitive ``asc``/``desc``; anything else raises
:class:`InvalidSortDirectionError`. A sort field may name a column or
the label of a requested count. Other fields are skipped.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import ColumnElement, Select, and_, asc, desc, func, inspect, select
from sqlalchemy.orm import RelationshipProperty, selectinload

from ..coercion import coerce_filter_value
from ..exceptions import InvalidSortDirectionError, RelationNotFoundError
from ..operators import FilterOperator
from .operators import DEFAULT_SQLA_REGISTRY

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ..config import ResourceConfig
    from ..query import ComposedQuery, Predicate, SortClause
    from .strategy import SQLAlchemyOperatorRegistry

logger = logging.getLogger("resource_query.compiler")

# Patterns are matched as written; coercing them would break the wildcards.
_UNCOERCED_OPERATORS = frozenset({FilterOperator.LIKE})

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_sqla_filter(
    model: type[Any],
    predicates: Sequence[Predicate],
    *,
    registry: SQLAlchemyOperatorRegistry | None = None,
) -> ColumnElement[bool] | None:
    """
    Build a SQLAlchemy filter expression from a list of predicates.

    Args:
        model: The SQLAlchemy model class.
        predicates: Conditions to AND together.
        registry: Optional custom operator registry.  Falls back to
            ``DEFAULT_SQLA_REGISTRY``.

    Returns:
        SQLAlchemy Boolean expression, or ``None`` when there are no predicates.
    """
    if not predicates:
        return None
    reg = registry or DEFAULT_SQLA_REGISTRY
    clauses = [_compile_predicate(model, p, reg) for p in predicates]
    return clauses[0] if len(clauses) == 1 else and_(*clauses)


def compile_query(
    resource: ResourceConfig,
    query: ComposedQuery,
    *,
    registry: SQLAlchemyOperatorRegistry | None = None,
) -> Select[Any]:
    """Compile every part of ``query`` into a ``Select`` over ``resource.model``."""
    model = resource.model
    stmt: Select[Any] = select(model)

    where_clause = build_sqla_filter(model, query.predicates, registry=registry)
    if where_clause is not None:
        stmt = stmt.where(where_clause)

    stmt = _apply_includes(stmt, model, query.includes)

    count_columns = {
        f"{relation}_count": _count_subquery(model, relation).label(
            f"{relation}_count"
        )
        for relation in query.counts
    }
    if count_columns:
        stmt = stmt.add_columns(*count_columns.values())

    stmt = _apply_order_by(stmt, model, query.sorts, count_columns)
    return _apply_limit_offset(stmt, query)


def compile_count(
    resource: ResourceConfig,
    query: ComposedQuery,
    *,
    registry: SQLAlchemyOperatorRegistry | None = None,
) -> Select[Any]:
    """Compile the predicates of ``query`` into a ``SELECT count(*)``."""
    model = resource.model
    stmt: Select[Any] = select(func.count()).select_from(model)
    where_clause = build_sqla_filter(model, query.predicates, registry=registry)
    if where_clause is not None:
        stmt = stmt.where(where_clause)
    return stmt


# ---------------------------------------------------------------------------
# Internal compilation
# ---------------------------------------------------------------------------


def _compile_predicate(
    model: type[Any],
    predicate: Predicate,
    registry: SQLAlchemyOperatorRegistry,
) -> ColumnElement[bool]:
    column = getattr(model, predicate.field, None)
    if column is None:
        raise AttributeError(f"Model {model} has no attribute {predicate.field}")

    value = predicate.value
    if predicate.operator not in _UNCOERCED_OPERATORS:
        value = coerce_filter_value(getattr(column, "type", None), value)
    return registry.apply(predicate.operator, column, value)


def _relationship(model: type[Any], name: str) -> Any | None:
    attr = getattr(model, name, None)
    if isinstance(getattr(attr, "property", None), RelationshipProperty):
        return attr
    return None


def _apply_includes(
    stmt: Select[Any], model: type[Any], includes: Sequence[str]
) -> Select[Any]:
    for path in includes:
        loader: Any = None
        current = model
        for segment in path.split("."):
            attr = _relationship(current, segment)
            if attr is None:
                raise RelationNotFoundError(model, path)
            loader = selectinload(attr) if loader is None else loader.selectinload(attr)
            current = attr.property.mapper.class_
        stmt = stmt.options(loader)
    return stmt


def _count_subquery(model: type[Any], relation: str) -> Any:
    attr = _relationship(model, relation)
    if attr is None:
        raise RelationNotFoundError(model, relation)
    prop = attr.property
    local_table = inspect(model).local_table

    if prop.secondary is not None:
        # Many-to-many counts rows of the association table
        target = prop.secondary
        condition = prop.primaryjoin
    elif prop.target is local_table:
        # Self-referential: the inner FROM must not collapse onto the outer row
        target = local_table.alias()
        condition = and_(
            *(
                target.corresponding_column(remote) == local
                for local, remote in prop.local_remote_pairs
            )
        )
    else:
        target = prop.target
        condition = prop.primaryjoin

    return (
        select(func.count())
        .select_from(target)
        .where(condition)
        .correlate(local_table)
        .scalar_subquery()
    )


def _apply_order_by(
    stmt: Select[Any],
    model: type[Any],
    sorts: Sequence[SortClause],
    count_columns: dict[str, Any],
) -> Select[Any]:
    if not sorts:
        return stmt

    column_keys = {attr.key for attr in inspect(model).column_attrs}
    order_clauses: list[Any] = []
    for sort in sorts:
        direction = sort.direction.strip().lower()
        if direction not in ("asc", "desc"):
            raise InvalidSortDirectionError(sort.field, sort.direction)

        if sort.field in count_columns:
            col = count_columns[sort.field]
        elif sort.field in column_keys:
            col = getattr(model, sort.field)
        else:
            logger.debug("Skipping sort on unknown column %s", sort.field)
            continue
        order_clauses.append(desc(col) if direction == "desc" else asc(col))

    if order_clauses:
        return stmt.order_by(*order_clauses)
    return stmt


def _apply_limit_offset(stmt: Select[Any], query: ComposedQuery) -> Select[Any]:
    if query.limit is not None:
        stmt = stmt.limit(query.limit)
    if query.offset:
        stmt = stmt.offset(query.offset)
    return stmt
