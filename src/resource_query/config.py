"""ResourceConfig — per-resource searchable fields, relations and options."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy import inspect
from sqlalchemy.exc import NoInspectionAvailable

from .exceptions import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Iterable


def _mapper_for(model: type[Any]) -> Any:
    try:
        return inspect(model)
    except NoInspectionAvailable as e:
        raise ConfigurationError(f"{model!r} is not a mapped class") from e


@dataclass(frozen=True)
class ResourceConfig:
    """
    Immutable descriptor of one queryable resource.

    Attributes:
        model: The SQLAlchemy mapped class.
        fillable: Writable columns; also the first part of the searchable set.
        primary_key: Primary key attribute name.
        created_at: Creation timestamp attribute, or ``None``. Dropped when
            the model has no such column.
        updated_at: Update timestamp attribute, or ``None``.
        relations: Relationship names that may be eager-loaded or counted.
        option_key: Value attribute for ``get_options`` (defaults to the
            primary key).
        option_label: Label attribute for ``get_options``.
        default_limit: Page size when the request sends no ``limit``.
        max_limit: Upper bound on a requested ``limit`` (``None`` for none).
        contain_key: Parameter listing relations to eager-load.
        count_keys: Parameters listing relations to count; first present wins.
        sort_key: Parameter listing ``field:direction`` entries.
        limit_key: Page size parameter.
        page_key: Page number parameter.
    """

    model: type[Any]
    fillable: tuple[str, ...] = ()
    primary_key: str = "id"
    created_at: str | None = "created_at"
    updated_at: str | None = "updated_at"
    relations: tuple[str, ...] = ()
    option_key: str | None = None
    option_label: str = "name"
    default_limit: int = 30
    max_limit: int | None = 1000
    contain_key: str = "contain"
    count_keys: tuple[str, ...] = ("count", "with_count")
    sort_key: str = "sort"
    limit_key: str = "limit"
    page_key: str = "page"

    def __post_init__(self) -> None:
        mapper = _mapper_for(self.model)
        column_keys = {attr.key for attr in mapper.column_attrs}

        unknown = [f for f in self.fillable if f not in column_keys]
        if self.primary_key not in column_keys:
            unknown.append(self.primary_key)
        if unknown:
            raise ConfigurationError(
                f"{self.name} has no columns {', '.join(unknown)}"
            )

        missing_relations = [r for r in self.relations if r not in mapper.relationships]
        if missing_relations:
            raise ConfigurationError(
                f"{self.name} has no relationships {', '.join(missing_relations)}"
            )

        # Timestamps the model lacks are dropped rather than searched
        for slot in ("created_at", "updated_at"):
            if getattr(self, slot) not in column_keys:
                object.__setattr__(self, slot, None)

        if self.max_limit is not None and self.max_limit < self.default_limit:
            raise ConfigurationError(
                f"{self.name}: max_limit {self.max_limit} is below "
                f"default_limit {self.default_limit}"
            )

    @property
    def name(self) -> str:
        return self.model.__name__

    @property
    def searchable_fields(self) -> tuple[str, ...]:
        """Writable columns, then the primary key and timestamp columns."""
        extra = (self.primary_key, self.created_at, self.updated_at)
        return self.fillable + tuple(f for f in extra if f)

    @property
    def options_value_field(self) -> str:
        return self.option_key or self.primary_key

    def has_relation(self, name: str) -> bool:
        return name in self.relations

    @classmethod
    def from_model(
        cls,
        model: type[Any],
        *,
        fillable: Iterable[str] | None = None,
        relations: Iterable[str] | None = None,
        **options: Any,
    ) -> ResourceConfig:
        """
        Derive a config by inspecting the model's mapper.

        ``fillable`` defaults to every column attribute except the primary
        key and timestamps; ``relations`` defaults to every mapped
        relationship. Remaining keyword arguments are passed through.
        """
        mapper = _mapper_for(model)

        pk_columns = mapper.primary_key
        if len(pk_columns) != 1:
            raise ConfigurationError(
                f"{model.__name__} must have exactly one primary key column, "
                f"found {len(pk_columns)}"
            )
        primary_key = mapper.get_property_by_column(pk_columns[0]).key
        column_keys = [attr.key for attr in mapper.column_attrs]

        created_at = getattr(model, "__created_at_column__", "created_at")
        updated_at = getattr(model, "__updated_at_column__", "updated_at")
        created_at = created_at if created_at in column_keys else None
        updated_at = updated_at if updated_at in column_keys else None

        if fillable is None:
            reserved = {primary_key, created_at, updated_at}
            fillable = [k for k in column_keys if k not in reserved]

        if relations is None:
            relations = list(mapper.relationships.keys())

        options.setdefault("primary_key", primary_key)
        options.setdefault("created_at", created_at)
        options.setdefault("updated_at", updated_at)
        return cls(
            model=model,
            fillable=tuple(fillable),
            relations=tuple(relations),
            **options,
        )
