"""Exception hierarchy for subscription configuration and predicate building."""
from __future__ import annotations


class SubscribeForDataError(Exception):
    """Base exception for all subscribe-for-data errors."""


class SubscriptionConfigError(SubscribeForDataError, ValueError):
    """Raised by `make_subscription` when options are missing or invalid.

    Nothing is registered when this is raised.
    """


class ConditionShapeError(SubscribeForDataError, TypeError):
    """Raised by `add` when a condition value does not fit the predicate shape.

    Examples:
        - a scalar condition after the first target produced a mapping
        - a mapping condition after the first target produced a scalar
        - a scalar condition with no `foreign_field` to match it against
    """


class UnsupportedOperatorError(SubscribeForDataError, ValueError):
    """Raised when a predicate operator cannot be compiled for a data store."""

    def __init__(self, operator: str, field: str | None = None):
        self.operator = operator
        self.field = field
        where = f" on field '{field}'" if field else ""
        super().__init__(f"Unsupported predicate operator '{operator}'{where}")
