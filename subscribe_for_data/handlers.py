"""Default `add()` and data-handler strategies.

Both are factories taking the `Subscription` they serve. Either can be replaced
through the `get_adding_method` / `get_data_handler` options.
"""
from __future__ import annotations

import asyncio
import copy
import inspect
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable

from subscribe_for_data.errors import ConditionShapeError
from subscribe_for_data.fields import get_field, merge_fields, set_field

if TYPE_CHECKING:
    from subscribe_for_data.subscription import Subscription

logger = logging.getLogger(__name__)

_REFERENCE_COLLECTIONS = (list, tuple, set, frozenset)


def default_adding_method(subscription: "Subscription") -> Callable[[Any], None]:
    options = subscription.options
    builder = subscription.builder
    index = subscription.index
    get_key = options.get_key
    get_condition = options.get_condition
    target_field = options.target_field

    def add(target: Any) -> None:
        condition_value = get_condition(target)

        if options.use_target_id:
            # The target references foreign ids; the foreign side has no key back
            references = _references(condition_value)
            builder.extend(references)
            for reference in references:
                index.register(reference, target)
        else:
            builder.add(condition_value)
            index.register(get_key(target), target)

        if options.has_default:
            seed_default(target, target_field, options.default_value)

    return add


def default_data_handler(subscription: "Subscription") -> Callable[[Any], Any]:
    options = subscription.options
    index = subscription.index
    extract_key = options.extract_key
    assign_data = options.assign_data
    target_field = options.target_field
    source_field = options.source_field
    is_multiple = options.is_multiple

    def handle(record: Any) -> Any:
        key = extract_key(record)
        targets = index.lookup(key)
        if not targets:
            logger.debug("no target for key=%r field=%s, record dropped", key, target_field)
            return None

        if assign_data is not None:
            results = [assign_data(target, record) for target in targets]
            return results[0] if len(results) == 1 else _gather_awaitables(results)

        value = record if source_field is None else get_field(record, source_field)
        for target in targets:
            if is_multiple:
                collection = get_field(target, target_field)
                if isinstance(collection, set):
                    collection.add(value)
                    continue
                # A scalar default is a placeholder; the first record replaces it
                if not isinstance(collection, list):
                    collection = []
                    set_field(target, target_field, collection)
                collection.append(value)
            else:
                set_field(target, target_field, value)
        return None

    return handle


def seed_default(target: Any, target_field: str, default: Any) -> None:
    if isinstance(default, Mapping):
        merge_fields(target, default)
    elif isinstance(default, (list, set)):
        set_field(target, target_field, copy.copy(default))
    else:
        set_field(target, target_field, default)


def _references(condition_value: Any) -> list[Any]:
    if isinstance(condition_value, Mapping):
        raise ConditionShapeError("use_target_id needs scalar foreign ids, got a mapping condition")
    if isinstance(condition_value, _REFERENCE_COLLECTIONS):
        return list(condition_value)
    return [condition_value]


def _gather_awaitables(results: list[Any]) -> Any:
    pending = [result for result in results if inspect.isawaitable(result)]
    if not pending:
        return None
    return asyncio.gather(*pending)
