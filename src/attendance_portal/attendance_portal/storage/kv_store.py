from __future__ import annotations

from typing import Dict, Mapping, Optional, Protocol


class KeyValueStore(Protocol):
    """Flat string blob store, the server-side stand-in for browser local storage.

    Values are whole serialized documents; callers read fully and rewrite fully.
    """

    def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    def set_many(self, items: Mapping[str, str]) -> None:
        """Write several keys as one all-or-nothing step."""

        raise NotImplementedError

    def delete(self, key: str) -> None:
        raise NotImplementedError


class InMemoryKeyValueStore:
    def __init__(self, initial: Optional[Mapping[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def set_many(self, items: Mapping[str, str]) -> None:
        self._data.update(items)

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def keys(self) -> list[str]:
        return sorted(self._data)
