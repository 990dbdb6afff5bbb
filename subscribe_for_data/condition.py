"""Incremental bulk-query predicate for one subscription.

Many single-key lookups are folded into one predicate. The predicate shape is
picked from the first condition value and then fixed:

    scalar values  → {"parentId": {"$in": [1, 2, 3]}}
    mapping values → {"$or": [{"a": 1, "b": 2}, {"a": 3, "b": 4}]}

Keys of the base condition are kept alongside, e.g.

    base {"deleted": False} + scalars 1, 2
      → {"deleted": False, "parentId": {"$in": [1, 2]}}
"""
from __future__ import annotations

import copy
from collections.abc import Iterable, Mapping
from typing import Any

from subscribe_for_data.contracts import ConditionShape
from subscribe_for_data.errors import ConditionShapeError

IN_OPERATOR = "$in"
OR_OPERATOR = "$or"

_SEQUENCES = (list, tuple, set, frozenset)


def shape_of(value: Any) -> ConditionShape:
    """Mappings select a disjunction, any other value a membership test.

    Lists, tuples and sets are rejected: they could mean several keys or one
    composite key. Several referenced keys go through `extend()`.
    """
    if isinstance(value, _SEQUENCES):
        raise ConditionShapeError(
            f"condition value must be a scalar or a mapping, got {type(value).__name__}"
        )
    if isinstance(value, Mapping):
        return ConditionShape.DISJUNCTION
    return ConditionShape.MEMBERSHIP


class ConditionBuilder:
    def __init__(
        self,
        base_condition: Mapping[str, Any] | None = None,
        foreign_field: str | None = None,
        in_operator: str = IN_OPERATOR,
        or_operator: str = OR_OPERATOR,
    ) -> None:
        self.base_condition = dict(base_condition or {})
        self.foreign_field = foreign_field
        self.in_operator = in_operator
        self.or_operator = or_operator
        self._shape = ConditionShape.UNDECIDED
        self._values: list[Any] = []

    @property
    def shape(self) -> ConditionShape:
        return self._shape

    @property
    def values(self) -> tuple[Any, ...]:
        return tuple(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def add(self, value: Any) -> None:
        """Append one target's condition value, fixing the shape on first use."""
        self._accept(shape_of(value))
        self._values.append(value)

    def extend(self, values: Iterable[Any]) -> None:
        """Append several scalar values to a membership predicate."""
        values = list(values)
        for value in values:
            if shape_of(value) is not ConditionShape.MEMBERSHIP:
                raise ConditionShapeError(
                    f"extend() only accepts scalar values, got {type(value).__name__}"
                )
        if not values:
            return
        self._accept(ConditionShape.MEMBERSHIP)
        self._values.extend(values)

    def _accept(self, shape: ConditionShape) -> None:
        if shape is ConditionShape.MEMBERSHIP and not self.foreign_field:
            raise ConditionShapeError(
                "scalar condition values need a foreign_field to match against"
            )
        if self._shape is ConditionShape.UNDECIDED:
            self._shape = shape
        elif self._shape is not shape:
            raise ConditionShapeError(
                f"predicate shape is fixed to {self._shape.value}; "
                f"cannot add a {shape.value} condition value"
            )

    @property
    def condition(self) -> dict[str, Any]:
        """Render the predicate as a fresh dict."""
        condition = copy.deepcopy(self.base_condition)
        if self._shape is ConditionShape.MEMBERSHIP:
            condition[self.foreign_field] = {self.in_operator: list(self._values)}
        elif self._shape is ConditionShape.DISJUNCTION:
            condition[self.or_operator] = [dict(value) for value in self._values]
        return condition
