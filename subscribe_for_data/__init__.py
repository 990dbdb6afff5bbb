from subscribe_for_data.condition import ConditionBuilder
from subscribe_for_data.config.runtime import EngineSettings
from subscribe_for_data.contracts import ConditionShape, FetchResult, GetStream, RecordStream
from subscribe_for_data.engine import FillEngine, use
from subscribe_for_data.errors import (
    ConditionShapeError,
    SubscribeForDataError,
    SubscriptionConfigError,
    UnsupportedOperatorError,
)
from subscribe_for_data.handlers import default_adding_method, default_data_handler
from subscribe_for_data.key_index import KeyIndex
from subscribe_for_data.options import SubscriptionOptions
from subscribe_for_data.subscription import Subscription

__all__ = [
    "ConditionBuilder",
    "ConditionShape",
    "ConditionShapeError",
    "EngineSettings",
    "FetchResult",
    "FillEngine",
    "GetStream",
    "KeyIndex",
    "RecordStream",
    "SubscribeForDataError",
    "Subscription",
    "SubscriptionConfigError",
    "SubscriptionOptions",
    "UnsupportedOperatorError",
    "default_adding_method",
    "default_data_handler",
    "use",
]
