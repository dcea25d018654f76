"""
QueryFilterTranslator — request parameters to queries and CRUD operations.

One translator wraps one resource (a :class:`ResourceConfig`) and one
request-scoped SQLAlchemy ``Session``::

    users = ResourceConfig.from_model(User)

    def list_users(request, session):
        translator = QueryFilterTranslator(users, session)
        return translator.get_all(dict(request.query_params)).to_dict()

``?status=active&age_gte=18&sort=name:asc&contain=posts&count=posts``
filters on ``status`` and ``age``, orders by ``name``, eager-loads
``posts`` and sets ``posts_count`` on every record.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING, Any

from sqlalchemy import asc, inspect, select

from .coercion import PayloadCoercer, coerce_filter_value
from .exceptions import ConfigurationError, ResourceNotFoundError
from .operators import FilterOperator
from .pagination import Page, parse_page_request
from .query import ComposedQuery
from .specifications.compiler import compile_count, compile_query
from .suffixes import SUFFIX_RULES, match_suffixes
from .uow import SQLAlchemyUnitOfWork

if TYPE_CHECKING:
    from collections.abc import Mapping

    from sqlalchemy.orm import Session

    from .config import ResourceConfig
    from .specifications.strategy import SQLAlchemyOperatorRegistry

logger = logging.getLogger("resource_query.translator")


@lru_cache(maxsize=128)
def _payload_coercer(resource: ResourceConfig) -> PayloadCoercer:
    return PayloadCoercer(resource)


def _split_list(raw: Any) -> list[str]:
    return str(raw).split(",")


class QueryFilterTranslator:
    """
    Translate request parameters into a :class:`ComposedQuery` and run
    CRUD operations for one resource.

    Unknown filter fields, unknown relations and malformed sort entries are
    ignored. Only ``modify`` raises for a missing record; ``remove`` returns
    ``False`` instead.
    """

    def __init__(
        self,
        resource: ResourceConfig,
        session: Session,
        *,
        registry: SQLAlchemyOperatorRegistry | None = None,
    ) -> None:
        self.resource = resource
        self.session = session
        self._registry = registry
        self._coercer = _payload_coercer(resource)

    # -- translation steps --------------------------------------------------

    def searchable_fields(self) -> tuple[str, ...]:
        return self.resource.searchable_fields

    def build_search_params(
        self, parameters: Mapping[str, Any], query: ComposedQuery
    ) -> ComposedQuery:
        """
        Append a predicate for every parameter that names a searchable field.

        A key that is itself a field adds an equality predicate. Independently,
        every operator suffix the key ends with is stripped, and if what is
        left is a field the suffix's predicate is added too.
        """
        searchable = set(self.searchable_fields())
        before = len(query.predicates)

        for key, value in parameters.items():
            if key in searchable:
                query.where(key, FilterOperator.EQ, value)

            for field, rule in match_suffixes(key, SUFFIX_RULES):
                if field not in searchable:
                    continue
                query.where(field, rule.operator, rule.transform(value))

        logger.debug(
            "%s: %d predicate(s) from %d parameter(s)",
            self.resource.name,
            len(query.predicates) - before,
            len(parameters),
        )
        return query

    def include_contains(
        self, parameters: Mapping[str, Any], query: ComposedQuery
    ) -> ComposedQuery:
        """Eager-load the relations listed in ``contain`` (dotted paths allowed)."""
        raw = parameters.get(self.resource.contain_key)
        if not raw:
            return query

        for name in _split_list(raw):
            name = name.strip()
            if self.resource.has_relation(name) or "." in name:
                query.with_relation(name)
            else:
                logger.debug("%s: skipping unknown relation %r", self.resource.name, name)
        return query

    def include_counts(
        self, parameters: Mapping[str, Any], query: ComposedQuery
    ) -> ComposedQuery:
        """Attach ``<relation>_count`` for the relations listed in ``count``/``with_count``."""
        raw = None
        for key in self.resource.count_keys:
            if parameters.get(key) is not None:
                raw = parameters[key]
                break
        if not raw:
            return query

        for name in _split_list(raw):
            name = name.strip()
            if not self.resource.has_relation(name):
                logger.debug("%s: skipping unknown count %r", self.resource.name, name)
                continue
            if name not in query.counts:
                query.with_count(name)
        return query

    def apply_sorts(
        self, parameters: Mapping[str, Any], query: ComposedQuery
    ) -> ComposedQuery:
        """Order by each ``field:direction`` entry of ``sort``, in the order given."""
        raw = parameters.get(self.resource.sort_key)
        if not raw:
            return query

        for entry in _split_list(raw):
            parts = entry.split(":")
            if len(parts) != 2:
                logger.debug("%s: ignoring sort entry %r", self.resource.name, entry)
                continue
            query.order_by(parts[0].strip(), parts[1].strip())
        return query

    def search_builder(self, parameters: Mapping[str, Any]) -> ComposedQuery:
        query = ComposedQuery()
        query = self.build_search_params(parameters, query)
        query = self.include_contains(parameters, query)
        query = self.include_counts(parameters, query)
        return self.apply_sorts(parameters, query)

    # -- reads --------------------------------------------------------------

    def get_all(self, parameters: Mapping[str, Any]) -> Page[Any]:
        """Return one page of matching records (``limit`` defaults to 30)."""
        limit, page = parse_page_request(
            parameters,
            limit_key=self.resource.limit_key,
            page_key=self.resource.page_key,
            default_limit=self.resource.default_limit,
            max_limit=self.resource.max_limit,
        )
        query = self.search_builder(parameters)
        total = self._count(query)
        query.paginate(limit, (page - 1) * limit)
        return Page(
            items=self._fetch(query),
            total=total,
            per_page=limit,
            current_page=page,
        )

    def search(self, parameters: Mapping[str, Any]) -> Page[Any]:
        return self.get_all(parameters)

    def count(self, parameters: Mapping[str, Any]) -> int:
        query = self.build_search_params(parameters, ComposedQuery())
        return self._count(query)

    def get_by_id(
        self, record_id: Any, parameters: Mapping[str, Any] | None = None
    ) -> Any | None:
        parameters = parameters or {}
        query = ComposedQuery().where(
            self.resource.primary_key, FilterOperator.EQ, record_id
        )
        query = self.include_counts(parameters, query)
        query = self.include_contains(parameters, query)
        query = self.apply_sorts(parameters, query)
        return self._first(query)

    def get_options(self) -> list[dict[str, Any]]:
        """``{"value", "label"}`` pairs ordered by label; blank labels are left out."""
        model = self.resource.model
        column_keys = {attr.key for attr in inspect(model).column_attrs}
        value_field = self.resource.options_value_field
        label_field = self.resource.option_label
        missing = [f for f in (value_field, label_field) if f not in column_keys]
        if missing:
            raise ConfigurationError(
                f"{self.resource.name} has no option columns {', '.join(missing)}"
            )

        label_col = getattr(model, label_field)
        stmt = select(getattr(model, value_field), label_col).order_by(asc(label_col))
        return [
            {"value": value, "label": label}
            for value, label in self.session.execute(stmt).all()
            if label
        ]

    # -- writes -------------------------------------------------------------

    def store(self, parameters: Mapping[str, Any]) -> Any:
        """Create a record from the fillable parameters and return it re-fetched."""
        payload = self._coercer.coerce(parameters)
        with SQLAlchemyUnitOfWork(session=self.session) as uow:
            record = self.resource.model(**payload)
            uow.session.add(record)
            uow.session.flush()
            record_id = getattr(record, self.resource.primary_key)

        logger.info("Created %s id=%r", self.resource.name, record_id)
        return self._refetch(record_id, parameters)

    def modify(self, parameters: Mapping[str, Any], record_id: Any) -> Any:
        """
        Overwrite the supplied fillable fields of an existing record.

        Raises:
            ResourceNotFoundError: If no record has ``record_id``.
            ValidationError: If a value does not fit its column type.
        """
        with SQLAlchemyUnitOfWork(session=self.session) as uow:
            record = uow.session.get(self.resource.model, self._coerce_id(record_id))
            if record is None:
                raise ResourceNotFoundError(self.resource.name, record_id)
            for key, value in self._coercer.coerce(parameters).items():
                setattr(record, key, value)

        logger.info("Updated %s id=%r", self.resource.name, record_id)
        return self._refetch(record_id, parameters)

    def remove(self, record_id: Any) -> bool:
        """Delete a record; ``False`` if it does not exist."""
        record = self.session.get(self.resource.model, self._coerce_id(record_id))
        if record is None:
            return False

        try:
            with SQLAlchemyUnitOfWork(session=self.session) as uow:
                uow.session.delete(record)
        except Exception:
            logger.exception("Failed to delete %s id=%r", self.resource.name, record_id)
            raise

        logger.info("Deleted %s id=%r", self.resource.name, record_id)
        return True

    # -- execution ----------------------------------------------------------

    def _refetch(self, record_id: Any, parameters: Mapping[str, Any]) -> Any | None:
        query = ComposedQuery().where(
            self.resource.primary_key, FilterOperator.EQ, record_id
        )
        query = self.include_contains(parameters, query)
        query = self.include_counts(parameters, query)
        return self._first(query)

    def _coerce_id(self, record_id: Any) -> Any:
        column = getattr(self.resource.model, self.resource.primary_key)
        return coerce_filter_value(column.type, record_id)

    def _first(self, query: ComposedQuery) -> Any | None:
        query.limit = 1
        records = self._fetch(query)
        return records[0] if records else None

    def _count(self, query: ComposedQuery) -> int:
        stmt = compile_count(self.resource, query, registry=self._registry)
        return int(self.session.execute(stmt).scalar_one())

    def _fetch(self, query: ComposedQuery) -> list[Any]:
        stmt = compile_query(self.resource, query, registry=self._registry)
        result = self.session.execute(stmt)
        if not query.counts:
            return list(result.scalars().all())

        relations = list(dict.fromkeys(query.counts))
        records = []
        for row in result.all():
            record = row[0]
            for relation, value in zip(relations, row[1:]):
                setattr(record, f"{relation}_count", value)
            records.append(record)
        return records
