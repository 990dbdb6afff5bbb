from __future__ import annotations

from sqlalchemy.engine import Engine
from sqlmodel import Session, create_engine

from subscribe_for_data.config.runtime import EngineSettings

_engine: Engine | None = None


def database_url() -> str:
    return EngineSettings.from_env().database_url


def get_engine() -> Engine:
    global _engine
    if _engine is None:
        _engine = create_engine(database_url())
    return _engine


def create_session() -> Session:
    return Session(get_engine())


def reset_engine() -> None:
    """Dispose and forget the cached engine (for testing)."""
    global _engine
    if _engine is not None:
        _engine.dispose()
    _engine = None
