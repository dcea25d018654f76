"""Request parameters to SQLAlchemy queries — filter, sort, paginate, eager-load; CRUD."""

from __future__ import annotations

from .coercion import PayloadCoercer
from .config import ResourceConfig
from .exceptions import (
    ConfigurationError,
    InvalidSortDirectionError,
    NotFoundError,
    PersistenceError,
    RelationNotFoundError,
    ResourceNotFoundError,
    ResourceQueryError,
    UnitOfWorkError,
    ValidationError,
)
from .mixins import TimestampModelMixin
from .operators import FilterOperator
from .pagination import Page
from .query import ComposedQuery, Predicate, SortClause
from .suffixes import SUFFIX_RULES, SuffixRule
from .translator import QueryFilterTranslator
from .uow import SQLAlchemyUnitOfWork

__all__ = [
    "ComposedQuery",
    "ConfigurationError",
    "FilterOperator",
    "InvalidSortDirectionError",
    "NotFoundError",
    "Page",
    "PayloadCoercer",
    "PersistenceError",
    "Predicate",
    "QueryFilterTranslator",
    "RelationNotFoundError",
    "ResourceConfig",
    "ResourceNotFoundError",
    "ResourceQueryError",
    "SQLAlchemyUnitOfWork",
    "SUFFIX_RULES",
    "SortClause",
    "SuffixRule",
    "TimestampModelMixin",
    "UnitOfWorkError",
    "ValidationError",
]
