from __future__ import annotations

from typing import Any, Hashable, Iterator


class KeyIndex:
    """Targets awaiting foreign data, indexed by join key.

    In single mode a key holds one target and a later `register` for the
    same key replaces it. In multi mode every registered target is kept, in
    registration order.
    """

    def __init__(self, multi: bool = False) -> None:
        self.multi = multi
        self._targets: dict[Hashable, Any] = {}

    def register(self, key: Hashable, target: Any) -> None:
        if self.multi:
            self._targets.setdefault(key, []).append(target)
        else:
            self._targets[key] = target

    def lookup(self, key: Hashable) -> list[Any]:
        if key not in self._targets:
            return []
        found = self._targets[key]
        return list(found) if self.multi else [found]

    def keys(self) -> Iterator[Hashable]:
        return iter(self._targets)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._targets

    def __len__(self) -> int:
        return len(self._targets)
