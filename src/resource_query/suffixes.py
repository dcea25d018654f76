"""
Operator suffix table — maps ``<field><suffix>`` parameter keys to predicates.

``?age_gte=18`` strips ``_gte`` to get the candidate field ``age`` and
becomes ``age >= 18``. The table is static and read-only; each rule pairs
the comparison kind with the transform its raw string value goes through.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from .operators import FilterOperator

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator


def _identity(value: Any) -> Any:
    return value


def _split_csv(value: Any) -> list[str]:
    # Tokens are kept verbatim: "a, b" -> ["a", " b"]
    return str(value).split(",")


def _wrap_wildcards(value: Any) -> str:
    return f"%{value}%"


def _ignore(_value: Any) -> None:
    return None


@dataclass(frozen=True)
class SuffixRule:
    suffix: str
    operator: FilterOperator
    transform: Callable[[Any], Any] = _identity

    def field_for(self, key: str) -> str | None:
        """Return ``key`` without this suffix, or ``None`` if it does not end with it."""
        if not key.endswith(self.suffix):
            return None
        return key[: -len(self.suffix)]


SUFFIX_RULES: tuple[SuffixRule, ...] = (
    SuffixRule("_not", FilterOperator.NE),
    SuffixRule("_gt", FilterOperator.GT),
    SuffixRule("_lt", FilterOperator.LT),
    SuffixRule("_gte", FilterOperator.GE),
    SuffixRule("_lte", FilterOperator.LE),
    SuffixRule("_like", FilterOperator.LIKE, _wrap_wildcards),
    SuffixRule("_in", FilterOperator.IN, _split_csv),
    SuffixRule("_notIn", FilterOperator.NOT_IN, _split_csv),
    SuffixRule("_isNull", FilterOperator.IS_NULL, _ignore),
    SuffixRule("_isNotNull", FilterOperator.IS_NOT_NULL, _ignore),
)


def match_suffixes(
    key: str, rules: tuple[SuffixRule, ...] = SUFFIX_RULES
) -> Iterator[tuple[str, SuffixRule]]:
    """Yield ``(candidate_field, rule)`` for every rule whose suffix ends ``key``."""
    for rule in rules:
        candidate = rule.field_for(key)
        if candidate:
            yield candidate, rule
