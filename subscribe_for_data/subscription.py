from __future__ import annotations

from typing import Any, Callable

from subscribe_for_data.condition import ConditionBuilder
from subscribe_for_data.errors import SubscriptionConfigError
from subscribe_for_data.handlers import default_adding_method, default_data_handler
from subscribe_for_data.key_index import KeyIndex
from subscribe_for_data.options import SubscriptionOptions


class Subscription:
    """Pending join of one source into a field of many caller-owned targets.

    `add(target)` is synchronous and does no I/O. The subscription is fetched
    once, by the first fill cycle after its creation.
    """

    def __init__(self, source: Any, options: SubscriptionOptions):
        self.source = source
        self.options = options
        self.index = KeyIndex(multi=options.use_target_id)
        self.builder = ConditionBuilder(
            base_condition=options.base_condition,
            foreign_field=options.foreign_field,
            in_operator=options.in_operator,
            or_operator=options.or_operator,
        )
        self.added = 0

        self._add = _build("get_adding_method", options.get_adding_method or default_adding_method, self)
        self.handle = _build("get_data_handler", options.get_data_handler or default_data_handler, self)

    @property
    def target_field(self) -> str:
        return self.options.target_field

    @property
    def condition(self) -> dict[str, Any]:
        return self.builder.condition

    def add(self, target: Any) -> None:
        self._add(target)
        self.added += 1

    def __repr__(self) -> str:
        return (
            f"Subscription(source={self.source!r}, target_field={self.target_field!r}, "
            f"added={self.added}, shape={self.builder.shape.value})"
        )


def _build(name: str, factory: Callable[["Subscription"], Any], subscription: Subscription) -> Callable:
    built = factory(subscription)
    if not callable(built):
        raise SubscriptionConfigError(f"{name} must return a callable, got {type(built).__name__}")
    return built
