"""Fill orchestrator: registry of pending subscriptions and the fill cycle.

Usage:
    engine = use({"get_stream": find_stream, "foreign_field": "parent_id"})

    children = engine.make_subscription(Child, target_field="children", is_multiple=True)
    for parent in parents:
        children.add(parent)

    await engine.fill_subscriptions()   # one bulk fetch per subscription

A fill cycle drains the registry under a flag and releases waiting callers
before awaiting the fetches, so subscriptions made while fetches are in flight
go to the next cycle.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Mapping

from subscribe_for_data.config.runtime import EngineSettings
from subscribe_for_data.contracts import FetchResult
from subscribe_for_data.options import build_options
from subscribe_for_data.streams import consume, consume_each_async
from subscribe_for_data.subscription import Subscription

logger = logging.getLogger(__name__)


class FillEngine:
    def __init__(
        self,
        default_options: Mapping[str, Any] | None = None,
        settings: EngineSettings | None = None,
    ) -> None:
        self.settings = settings or EngineSettings.from_env()
        # Own copy: callers keep ownership of the dict they passed in
        self._defaults: dict[str, Any] = dict(default_options or {})
        self._awaiting: list[Subscription] = []
        self._filling = False
        self._released = asyncio.Event()

    @property
    def default_options(self) -> dict[str, Any]:
        return dict(self._defaults)

    @property
    def pending(self) -> int:
        return len(self._awaiting)

    def assign_default_options(self, mixin: Mapping[str, Any]) -> None:
        self._defaults.update(mixin)

    def make_subscription(
        self,
        source: Any,
        options: Mapping[str, Any] | None = None,
        **overrides: Any,
    ) -> Subscription:
        """Create a subscription for related `source` data and queue it.

        Raises SubscriptionConfigError before anything is queued.
        """
        resolved = build_options(self._settings_layer(), self._defaults, options, overrides)
        subscription = Subscription(source, resolved)
        self._awaiting.append(subscription)
        logger.debug("subscription queued source=%r field=%s", source, resolved.target_field)
        return subscription

    async def fill_subscriptions(self) -> list[FetchResult]:
        """Fetch every queued subscription once and fill its targets.

        Fetches run concurrently. The first failure is raised; assignments
        made by other fetches are kept.
        """
        if not self._awaiting:
            return []

        while self._filling:
            logger.debug("fill cycle in progress, waiting for drain")
            await self._released.wait()

        fetches = self._drain()
        if not fetches:
            return []

        logger.info("fill cycle started subscriptions=%d", len(fetches))
        outcomes = await asyncio.gather(*fetches, return_exceptions=True)
        failures = [o for o in outcomes if isinstance(o, BaseException)]
        if failures:
            logger.warning("fill cycle failed fetches=%d of %d", len(failures), len(outcomes))
            raise failures[0]
        results: list[FetchResult] = list(outcomes)
        logger.info(
            "fill cycle finished subscriptions=%d records=%d",
            len(results), sum(r.records_received for r in results),
        )
        return results

    def _drain(self) -> list:
        self._filling = True
        try:
            snapshot = list(self._awaiting)
            self._awaiting.clear()
            # Predicates are frozen here; later adds cannot widen an issued fetch
            return [self._fetch(subscription, subscription.condition) for subscription in snapshot]
        finally:
            self._release()

    def _release(self) -> None:
        self._filling = False
        released, self._released = self._released, asyncio.Event()
        released.set()

    async def _fetch(self, subscription: Subscription, condition: dict[str, Any]) -> FetchResult:
        options = subscription.options
        result = FetchResult(
            source=subscription.source,
            target_field=options.target_field,
            targets=subscription.added,
        )
        if subscription.added == 0:
            logger.debug("subscription field=%s has no targets, skipping fetch", options.target_field)
            return result

        stream = options.get_stream(subscription.source, condition)
        if options.use_each_async:
            parallel = options.parallel if options.parallel is not None else 1
            result.records_received = await consume_each_async(stream, subscription.handle, parallel)
        else:
            result.records_received = await consume(stream, subscription.handle)

        logger.debug(
            "subscription filled field=%s targets=%d records=%d",
            options.target_field, result.targets, result.records_received,
        )
        return result

    def _settings_layer(self) -> dict[str, Any]:
        return {
            "use_each_async": self.settings.use_each_async,
            "parallel": self.settings.parallel,
        }


def use(
    default_options: Mapping[str, Any] | None = None,
    settings: EngineSettings | None = None,
) -> FillEngine:
    """Create an independent engine with its own registry and defaults."""
    return FillEngine(default_options, settings=settings)
