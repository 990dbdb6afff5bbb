from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, AsyncIterable, Awaitable, Callable, Iterable, Protocol, Union

# Strategy signatures:
#   get_key(target) → key the target is indexed under
#   get_condition(target) → scalar (membership) or mapping (disjunction)
#   extract_key(record) → key of the target a foreign record belongs to
#   assign_data(target, record) → None, or an awaitable for async assignment
GetKey = Callable[[Any], Any]
GetCondition = Callable[[Any], Any]
ExtractKey = Callable[[Any], Any]
AssignData = Callable[[Any, Any], Any]

RecordStream = Union[AsyncIterable[Any], Iterable[Any]]


class GetStream(Protocol):
    """Sole I/O entry point: open a record stream for one bulk fetch.

    May return an async iterable, a plain iterable, or an awaitable resolving
    to either. Errors raised while iterating fail that subscription's fetch.
    """

    def __call__(
        self, source: Any, condition: dict[str, Any]
    ) -> RecordStream | Awaitable[RecordStream]: ...


class ConditionShape(str, Enum):
    UNDECIDED = "undecided"
    MEMBERSHIP = "membership"    # {foreign_field: {"$in": [...]}}
    DISJUNCTION = "disjunction"  # {"$or": [{...}, ...]}


@dataclass
class FetchResult:
    """Outcome of one subscription's bulk fetch."""

    source: Any
    target_field: str
    targets: int = 0
    records_received: int = 0
