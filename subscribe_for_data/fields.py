"""Field access on targets and foreign records.

Targets and records are either mappings (`dict`, pymongo documents) or plain
objects (dataclasses, SQLModel rows); both are read and written by name.
"""
from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any

_MISSING = object()


def get_field(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def has_field(obj: Any, name: str) -> bool:
    if isinstance(obj, Mapping):
        return name in obj
    return getattr(obj, name, _MISSING) is not _MISSING


def set_field(obj: Any, name: str, value: Any) -> None:
    if isinstance(obj, MutableMapping):
        obj[name] = value
    else:
        setattr(obj, name, value)


def merge_fields(obj: Any, values: Mapping[str, Any]) -> None:
    """Shallow-merge `values` onto `obj`, key by key."""
    if isinstance(obj, MutableMapping):
        obj.update(values)
        return
    for name, value in values.items():
        setattr(obj, name, value)
