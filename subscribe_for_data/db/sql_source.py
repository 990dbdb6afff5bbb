"""`get_stream` over SQLModel tables.

Predicates built by the condition builder are compiled into SQLAlchemy
expressions:

    {"parent_id": {"$in": [1, 2]}, "deleted": False}
      → parent_id IN (1, 2) AND deleted = false

    {"$or": [{"kind": "a", "owner_id": 1}, {"kind": "b", "owner_id": 2}]}
      → (kind = 'a' AND owner_id = 1) OR (kind = 'b' AND owner_id = 2)

Rows are read `batch_size` at a time. The query and every batch fetch run on
a worker thread, so concurrent fetches interleave on the event loop.
"""
from __future__ import annotations

import asyncio
import logging
import operator
from concurrent.futures import ThreadPoolExecutor
from collections.abc import Mapping
from typing import Any, AsyncIterator, Callable

from sqlalchemy import and_, or_, true
from sqlalchemy.sql.elements import ColumnElement
from sqlmodel import Session, SQLModel, select

from subscribe_for_data.config.runtime import EngineSettings
from subscribe_for_data.errors import UnsupportedOperatorError

logger = logging.getLogger(__name__)

_COMPARISONS: dict[str, Callable[[Any, Any], Any]] = {
    "$eq": operator.eq,
    "$ne": operator.ne,
    "$gt": operator.gt,
    "$gte": operator.ge,
    "$lt": operator.lt,
    "$lte": operator.le,
}


def compile_condition(model: type[SQLModel], condition: Mapping[str, Any]) -> ColumnElement:
    clauses: list[ColumnElement] = []
    for key, value in condition.items():
        if key == "$or":
            clauses.append(or_(*[compile_condition(model, branch) for branch in value]))
        elif key == "$and":
            clauses.append(and_(*[compile_condition(model, branch) for branch in value]))
        elif key.startswith("$"):
            raise UnsupportedOperatorError(key)
        else:
            clauses.extend(_compile_field(model, key, value))

    if not clauses:
        return true()
    return clauses[0] if len(clauses) == 1 else and_(*clauses)


def _compile_field(model: type[SQLModel], field: str, value: Any) -> list[ColumnElement]:
    column = getattr(model, field, None)
    if column is None:
        raise ValueError(f"{model.__name__} has no column '{field}'")

    if not isinstance(value, Mapping):
        return [column == value]

    clauses = []
    for op, operand in value.items():
        if op == "$in":
            clauses.append(column.in_(list(operand)))
        elif op == "$nin":
            clauses.append(column.not_in(list(operand)))
        elif op in _COMPARISONS:
            clauses.append(_COMPARISONS[op](column, operand))
        else:
            raise UnsupportedOperatorError(op, field)
    return clauses


class SQLStreamSource:
    """Callable `get_stream(model, condition)` reading SQLModel rows.

    Usage:
        source = SQLStreamSource(lambda: Session(engine))
        engine = use({"get_stream": source, "foreign_field": "parent_id"})
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] | None = None,
        batch_size: int | None = None,
    ):
        if session_factory is None:
            from subscribe_for_data.db.session import create_session

            session_factory = create_session
        self.session_factory = session_factory
        self.batch_size = batch_size or EngineSettings.from_env().sql_batch_size

    def __call__(self, source: type[SQLModel], condition: Mapping[str, Any]) -> AsyncIterator[Any]:
        return self.get_stream(source, condition)

    async def get_stream(self, source: type[SQLModel], condition: Mapping[str, Any]) -> AsyncIterator[Any]:
        statement = (
            select(source)
            .where(compile_condition(source, condition))
            .execution_options(yield_per=self.batch_size)
        )
        logger.debug("sql stream table=%s batch_size=%d", source.__name__, self.batch_size)

        loop = asyncio.get_running_loop()
        # One worker per stream: the session and its cursor stay on a single thread
        with ThreadPoolExecutor(max_workers=1, thread_name_prefix="sfd-sql") as worker:
            session = await loop.run_in_executor(worker, self.session_factory)
            try:
                result = await loop.run_in_executor(worker, session.exec, statement)
                batches = result.partitions()
                while True:
                    batch = await loop.run_in_executor(worker, next, batches, None)
                    if batch is None:
                        break
                    for row in batch:
                        yield row
            finally:
                await loop.run_in_executor(worker, session.close)
