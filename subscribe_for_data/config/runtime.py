from __future__ import annotations

from dataclasses import dataclass
import os

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class EngineSettings:
    parallel: int
    use_each_async: bool
    sql_batch_size: int
    database_url: str

    @classmethod
    def from_env(cls) -> "EngineSettings":
        return cls(
            parallel=max(1, int(os.getenv("SFD_PARALLEL", "1"))),
            use_each_async=os.getenv("SFD_USE_EACH_ASYNC", "false").strip().lower() in _TRUTHY,
            sql_batch_size=max(1, int(os.getenv("SFD_SQL_BATCH_SIZE", "500"))),
            database_url=os.getenv("SFD_DATABASE_URL", "sqlite://"),
        )
