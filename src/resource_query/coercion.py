"""
Typed coercion of raw request strings.

Write payloads go through :class:`PayloadCoercer`: only writable columns
are kept, and each value is validated against the column's Python type
with a pydantic model generated from the mapper. Filter values go through
:func:`coerce_filter_value`, which is lenient and hands the raw string to
the database when it cannot be converted.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING, Any, Optional

import pydantic
from pydantic import BaseModel, ConfigDict, TypeAdapter, create_model
from sqlalchemy import inspect

from .exceptions import ValidationError

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .config import ResourceConfig

logger = logging.getLogger("resource_query.coercion")


def column_python_type(column_type: Any) -> type[Any] | None:
    """Return the Python type a SQLAlchemy column type maps to, if it has one."""
    try:
        return column_type.python_type  # type: ignore[no-any-return]
    except (AttributeError, NotImplementedError):
        return None


@lru_cache(maxsize=64)
def _adapter_for(python_type: type[Any]) -> TypeAdapter[Any]:
    return TypeAdapter(python_type)


def coerce_filter_value(column_type: Any, value: Any) -> Any:
    """
    Convert a raw filter value to the column's Python type.

    Lists are converted element by element. On failure the raw value is
    returned unchanged.
    """
    if value is None:
        return None
    python_type = column_python_type(column_type)
    if python_type is None or python_type is str:
        return value
    adapter = _adapter_for(python_type)
    if isinstance(value, list):
        return [_coerce_one(adapter, python_type, v) for v in value]
    return _coerce_one(adapter, python_type, value)


def _coerce_one(adapter: TypeAdapter[Any], python_type: type[Any], value: Any) -> Any:
    try:
        return adapter.validate_python(value)
    except pydantic.ValidationError:
        logger.warning(
            "Could not coerce filter value %r to %s; passing it through",
            value,
            python_type.__name__,
        )
        return value


class PayloadCoercer:
    """Allow-listed, typed create/update payloads for one resource."""

    def __init__(self, resource: ResourceConfig) -> None:
        self.resource = resource
        self.payload_model = self._build_payload_model()

    def _build_payload_model(self) -> type[BaseModel]:
        mapper = inspect(self.resource.model)
        fields: dict[str, Any] = {}
        for name in self.resource.fillable:
            column = mapper.columns[name] if name in mapper.columns else None
            python_type = (
                column_python_type(column.type) if column is not None else None
            )
            annotation: Any = Optional[python_type] if python_type else Any  # noqa: UP007
            fields[name] = (annotation, None)

        return create_model(
            f"{self.resource.name}Payload",
            __config__=ConfigDict(extra="ignore"),
            **fields,
        )

    def coerce(self, parameters: Mapping[str, Any]) -> dict[str, Any]:
        """
        Return the writable subset of ``parameters`` with typed values.

        Keys that are not fillable are dropped; only keys actually supplied
        appear in the result.

        Raises:
            ValidationError: If a supplied value does not fit its column type.
        """
        supplied = {k: v for k, v in parameters.items() if k in self.resource.fillable}
        dropped = set(parameters) - set(supplied)
        if dropped:
            logger.debug(
                "Dropping non-fillable keys for %s: %s",
                self.resource.name,
                ", ".join(sorted(dropped)),
            )
        try:
            payload = self.payload_model.model_validate(supplied)
        except pydantic.ValidationError as e:
            errors: dict[str, list[str]] = {}
            for err in e.errors():
                field = ".".join(str(p) for p in err["loc"]) or "__root__"
                errors.setdefault(field, []).append(err["msg"])
            raise ValidationError(errors) from e
        return payload.model_dump(exclude_unset=True)
