"""Exceptions for resource-query."""

from __future__ import annotations


class ResourceQueryError(Exception):
    """Root exception for the entire resource-query toolkit."""


class NotFoundError(ResourceQueryError):
    """Raised when a resource is not found."""


class ResourceNotFoundError(NotFoundError):
    """Raised when a specific record cannot be found by primary key."""

    def __init__(self, resource: str, resource_id: object) -> None:
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(f"{resource} with id={resource_id!r} not found")


class ValidationError(ResourceQueryError):
    """Raised when input cannot be turned into a valid query or payload.

    Carries structured errors: ``{field: [messages]}``.
    """

    def __init__(self, errors: dict[str, list[str]] | str | None = None) -> None:
        if isinstance(errors, str):
            self.errors: dict[str, list[str]] = {"__root__": [errors]}
        elif errors is None:
            self.errors = {}
        else:
            self.errors = errors
        super().__init__(str(self.errors))


class InvalidSortDirectionError(ValidationError):
    """Raised by the compiler when a sort direction is not ``asc``/``desc``."""

    def __init__(self, field: str, direction: str) -> None:
        self.field = field
        self.direction = direction
        super().__init__(
            {field: [f"Sort direction must be 'asc' or 'desc', got {direction!r}"]}
        )


class ConfigurationError(ResourceQueryError):
    """Raised when a ``ResourceConfig`` does not match its mapped model."""


class PersistenceError(ResourceQueryError):
    """Base class for all persistence-related errors."""


class UnitOfWorkError(PersistenceError):
    """Raised when Unit of Work operations fail."""


class RelationNotFoundError(PersistenceError):
    """Raised when an eager-load path names a relationship the model lacks."""

    def __init__(self, model: type, path: str) -> None:
        self.model = model
        self.path = path
        super().__init__(f"Model {model.__name__} has no relationship path {path!r}")


__all__: list[str] = [
    "ConfigurationError",
    "InvalidSortDirectionError",
    "NotFoundError",
    "PersistenceError",
    "RelationNotFoundError",
    "ResourceNotFoundError",
    "ResourceQueryError",
    "UnitOfWorkError",
    "ValidationError",
]
