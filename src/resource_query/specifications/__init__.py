"""
ComposedQuery-to-SQLAlchemy compilation.

Public API:
    - ``build_sqla_filter(model, predicates)`` — compile predicates to a
      ``ColumnElement[bool]``
    - ``compile_query(resource, query)`` — full ``Select`` with eager loads,
      counts, ordering and pagination
    - ``compile_count(resource, query)`` — ``SELECT count(*)`` over the
      predicates
    - ``DEFAULT_SQLA_REGISTRY`` — the default operator registry
    - ``SQLAlchemyOperator`` / ``SQLAlchemyOperatorRegistry`` — extension
      points for custom operators
"""

from .compiler import build_sqla_filter, compile_count, compile_query
from .operators import DEFAULT_SQLA_REGISTRY
from .strategy import SQLAlchemyOperator, SQLAlchemyOperatorRegistry

__all__ = [
    "build_sqla_filter",
    "compile_count",
    "compile_query",
    "DEFAULT_SQLA_REGISTRY",
    "SQLAlchemyOperator",
    "SQLAlchemyOperatorRegistry",
]
