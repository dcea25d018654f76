"""Page envelope and limit/page parsing from query params."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator, Mapping

T = TypeVar("T")


def parse_positive_int(value: Any, default: int) -> int:
    """Return ``value`` as an int >= 1, or ``default`` when it is missing or invalid."""
    if value is None or value == "":
        return default
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        return default
    return parsed if parsed >= 1 else default


def parse_page_request(
    parameters: Mapping[str, Any],
    *,
    limit_key: str = "limit",
    page_key: str = "page",
    default_limit: int = 30,
    max_limit: int | None = None,
) -> tuple[int, int]:
    """
    Return ``(limit, page)`` from request parameters.

    Missing or invalid values fall back to the defaults; ``limit`` is capped
    at ``max_limit`` when one is given.
    """
    limit = parse_positive_int(parameters.get(limit_key), default_limit)
    if max_limit is not None:
        limit = min(limit, max_limit)
    page = parse_positive_int(parameters.get(page_key), 1)
    return limit, page


@dataclass
class Page(Generic[T]):
    """One page of records plus length-aware pagination metadata."""

    items: list[T] = field(default_factory=list)
    total: int = 0
    per_page: int = 30
    current_page: int = 1

    @property
    def last_page(self) -> int:
        return max(1, math.ceil(self.total / self.per_page))

    @property
    def first_item(self) -> int | None:
        """1-based position of the first item on this page, ``None`` if empty."""
        if not self.items:
            return None
        return (self.current_page - 1) * self.per_page + 1

    @property
    def last_item(self) -> int | None:
        if not self.items:
            return None
        return (self.current_page - 1) * self.per_page + len(self.items)

    @property
    def has_more_pages(self) -> bool:
        return self.current_page < self.last_page

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[T]:
        return iter(self.items)

    def to_dict(self, serialize: Callable[[T], Any] | None = None) -> dict[str, Any]:
        """Serialise to the JSON envelope returned by list endpoints."""
        data = [serialize(i) for i in self.items] if serialize else list(self.items)
        return {
            "current_page": self.current_page,
            "data": data,
            "from": self.first_item,
            "last_page": self.last_page,
            "per_page": self.per_page,
            "to": self.last_item,
            "total": self.total,
        }
