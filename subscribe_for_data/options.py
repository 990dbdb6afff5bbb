"""Subscription options: merged engine defaults plus per-call overrides.

Validated once, when the subscription is created, so a bad strategy fails at
`make_subscription` and never at fetch time.
"""
from __future__ import annotations

from typing import Any, Callable, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, ValidationInfo, field_validator, model_validator

from subscribe_for_data.condition import IN_OPERATOR, OR_OPERATOR
from subscribe_for_data.contracts import AssignData, ExtractKey, GetCondition, GetKey
from subscribe_for_data.errors import SubscriptionConfigError
from subscribe_for_data.extensions.callable_resolver import coerce_callable
from subscribe_for_data.fields import get_field

# Minimum positional arity per strategy slot
_STRATEGY_ARITY = {
    "get_key": 1,
    "get_condition": 1,
    "extract_key": 1,
    "assign_data": 2,
    "get_stream": 2,
    "get_data_handler": 1,
    "get_adding_method": 1,
}


def field_getter(name: str) -> Callable[[Any], Any]:
    def getter(obj: Any) -> Any:
        return get_field(obj, name)

    getter.__name__ = f"get_{name}"
    return getter


default_get_key = field_getter("id")


class SubscriptionOptions(BaseModel):
    target_field: str = Field(min_length=1)
    base_condition: dict[str, Any] = Field(default_factory=dict)
    default_value: Any = None
    foreign_field: str | None = None
    source_field: str | None = None
    is_multiple: bool = False
    use_each_async: bool = False
    parallel: int | None = Field(default=None, ge=1)
    use_target_id: bool = False
    in_operator: str = IN_OPERATOR
    or_operator: str = OR_OPERATOR

    get_key: GetKey | None = None
    get_condition: GetCondition | None = None
    extract_key: ExtractKey | None = None
    assign_data: AssignData | None = None
    get_stream: Callable[..., Any] | None = None
    get_data_handler: Callable[..., Any] | None = None
    get_adding_method: Callable[..., Any] | None = None

    model_config = ConfigDict(extra="forbid", arbitrary_types_allowed=True)

    @field_validator(*_STRATEGY_ARITY, mode="before")
    @classmethod
    def _resolve_strategy(cls, value: Any, info: ValidationInfo) -> Any:
        return coerce_callable(value, min_params=_STRATEGY_ARITY[info.field_name])

    @field_validator("base_condition", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @model_validator(mode="after")
    def _fill_strategies(self) -> "SubscriptionOptions":
        if self.get_stream is None:
            raise ValueError("get_stream is required")
        if self.extract_key is None:
            # An unset foreign_field would read a 'None' key off every record
            if not self.foreign_field:
                raise ValueError("foreign_field is required when extract_key is not given")
            self.extract_key = field_getter(self.foreign_field)
        if self.get_key is None:
            self.get_key = default_get_key
        if self.get_condition is None:
            self.get_condition = self.get_key
        return self

    @property
    def has_default(self) -> bool:
        return "default_value" in self.model_fields_set


def merge_options(*layers: Mapping[str, Any] | None) -> dict[str, Any]:
    """Merge option layers left to right; later layers win key by key."""
    merged: dict[str, Any] = {}
    for layer in layers:
        if layer:
            merged.update(layer)
    return merged


def build_options(*layers: Mapping[str, Any] | None) -> SubscriptionOptions:
    try:
        return SubscriptionOptions.model_validate(merge_options(*layers))
    except ValidationError as exc:
        raise SubscriptionConfigError(_describe(exc)) from exc


def _describe(exc: ValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(p) for p in error.get("loc", ())) or "options"
        parts.append(f"{location}: {error.get('msg')}")
    return "invalid subscription options: " + "; ".join(parts)
