from .session import create_session, database_url, get_engine, reset_engine
from .sql_source import SQLStreamSource, compile_condition

__all__ = [
    "SQLStreamSource",
    "compile_condition",
    "create_session",
    "database_url",
    "get_engine",
    "reset_engine",
]
