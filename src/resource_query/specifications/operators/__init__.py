"""
SQLAlchemy operator implementations and default registry.

Usage::

    from resource_query.specifications.operators import DEFAULT_SQLA_REGISTRY

    expr = DEFAULT_SQLA_REGISTRY.apply(FilterOperator.EQ, column, value)
"""

from __future__ import annotations

from ..strategy import SQLAlchemyOperatorRegistry
from .null import (
    IsNotNullOperator,
    IsNullOperator,
)
from .set import (
    InOperator,
    NotInOperator,
)
from .standard import ComparisonOperator, comparison_operators
from .string import LikeOperator


def build_default_sqla_registry() -> SQLAlchemyOperatorRegistry:
    """Create a registry with all built-in SQLAlchemy operators."""
    registry = SQLAlchemyOperatorRegistry()
    registry.register_all(
        *comparison_operators(),
        # Set
        InOperator(),
        NotInOperator(),
        # String
        LikeOperator(),
        # Null
        IsNullOperator(),
        IsNotNullOperator(),
    )
    return registry


DEFAULT_SQLA_REGISTRY: SQLAlchemyOperatorRegistry = build_default_sqla_registry()

__all__ = [
    "DEFAULT_SQLA_REGISTRY",
    "ComparisonOperator",
    "build_default_sqla_registry",
    "SQLAlchemyOperatorRegistry",
]
