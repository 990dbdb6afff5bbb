from __future__ import annotations

import importlib
import inspect
from typing import Any, Callable


def resolve_callable(path: str, min_params: int | None = None) -> Callable:
    """Import a strategy given as `'<module>:<callable>'`."""
    if ":" not in path:
        raise ValueError(f"Invalid callable path '{path}'. Expected '<module>:<callable>'.")

    module_name, attr_name = path.split(":", maxsplit=1)
    if not module_name or not attr_name:
        raise ValueError(f"Invalid callable path '{path}'. Expected '<module>:<callable>'.")

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ValueError(f"Cannot import module '{module_name}' for '{path}': {exc}") from exc

    target = getattr(module, attr_name, None)
    if target is None:
        raise ValueError(f"Module '{module_name}' has no attribute '{attr_name}'.")

    if not callable(target):
        raise ValueError(f"Resolved object '{path}' is not callable.")

    if min_params:
        _validate_arity(path=path, target=target, min_params=min_params)

    return target


def coerce_callable(value: Any, min_params: int | None = None) -> Callable | None:
    """Accept a callable, a `'<module>:<callable>'` string, or None."""
    if value is None:
        return None
    if callable(value):
        if min_params:
            name = getattr(value, "__qualname__", type(value).__name__)
            _validate_arity(path=name, target=value, min_params=min_params)
        return value
    if isinstance(value, str):
        return resolve_callable(value, min_params=min_params)
    raise ValueError(f"Expected a callable or '<module>:<callable>' path, got {type(value).__name__}.")


def _validate_arity(path: str, target: Callable, min_params: int) -> None:
    try:
        signature = inspect.signature(target)
    except (TypeError, ValueError):
        return

    params = list(signature.parameters.values())
    if any(p.kind is inspect.Parameter.VAR_POSITIONAL for p in params):
        return

    positional = [
        p for p in params
        if p.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    if len(positional) < min_params:
        raise ValueError(
            f"Callable '{path}' must accept {min_params} positional parameter(s). "
            f"Found parameters {tuple(p.name for p in params)}."
        )
