"""Plain comparisons: ``=``, ``!=``, ``>``, ``<``, ``>=``, ``<=``."""

from __future__ import annotations

import operator as op_module
from typing import TYPE_CHECKING, Any, cast

from ...operators import FilterOperator
from ..strategy import SQLAlchemyOperator

if TYPE_CHECKING:
    from collections.abc import Callable

    from sqlalchemy.sql.elements import ColumnElement


class ComparisonOperator(SQLAlchemyOperator):
    """A binary comparison delegated to a function of the ``operator`` module."""

    def __init__(
        self, name: FilterOperator, compare: Callable[[Any, Any], Any]
    ) -> None:
        self._name = name
        self._compare = compare

    @property
    def name(self) -> FilterOperator:
        return self._name

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", self._compare(column, value))

    def __repr__(self) -> str:
        return f"ComparisonOperator({self._name.value!r})"


def comparison_operators() -> list[ComparisonOperator]:
    return [
        ComparisonOperator(FilterOperator.EQ, op_module.eq),
        ComparisonOperator(FilterOperator.NE, op_module.ne),
        ComparisonOperator(FilterOperator.GT, op_module.gt),
        ComparisonOperator(FilterOperator.LT, op_module.lt),
        ComparisonOperator(FilterOperator.GE, op_module.ge),
        ComparisonOperator(FilterOperator.LE, op_module.le),
    ]
