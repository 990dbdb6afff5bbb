"""Record stream consumption for one subscription's fetch."""
from __future__ import annotations

import asyncio
import inspect
from typing import Any, AsyncIterator, Callable

from subscribe_for_data.contracts import RecordStream


async def iter_records(stream: RecordStream) -> AsyncIterator[Any]:
    """Iterate an async or plain iterable as one async stream."""
    if hasattr(stream, "__aiter__"):
        async for record in stream:
            yield record
    else:
        for record in stream:
            yield record


async def consume(stream: Any, handle: Callable[[Any], Any]) -> int:
    """Feed every record to `handle`, one at a time. Returns the record count."""
    if inspect.isawaitable(stream):
        stream = await stream

    count = 0
    async for record in iter_records(stream):
        count += 1
        result = handle(record)
        if inspect.isawaitable(result):
            await result
    return count


async def consume_each_async(stream: Any, handle: Callable[[Any], Any], parallel: int = 1) -> int:
    """Like `consume`, with up to `parallel` handler calls in flight.

    A failing handler or stream cancels the calls still running.
    """
    if parallel < 1:
        raise ValueError(f"parallel must be >= 1, got {parallel}")
    if inspect.isawaitable(stream):
        stream = await stream

    count = 0
    pending: set[asyncio.Future] = set()
    try:
        async for record in iter_records(stream):
            if len(pending) >= parallel:
                done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
                for task in done:
                    task.result()
            count += 1
            pending.add(asyncio.ensure_future(_invoke(handle, record)))

        while pending:
            done, pending = await asyncio.wait(pending, return_when=asyncio.FIRST_COMPLETED)
            for task in done:
                task.result()
    finally:
        for task in pending:
            task.cancel()
    return count


async def _invoke(handle: Callable[[Any], Any], record: Any) -> None:
    result = handle(record)
    if inspect.isawaitable(result):
        await result
