"""Key-value store interface for per-user state.

The voice reference store and the cooldown map both sit on this interface.
``InMemoryStore`` is process-local: it does not survive restarts and is not
shared across instances.
"""

from typing import Any, Protocol


class KeyValueStore(Protocol):
    """Minimal mapping interface; expiry is checked by callers on read."""

    def get(self, key: str, default: Any = None) -> Any: ...

    def put(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> bool: ...


class InMemoryStore:
    """Dict-backed store for a single event loop."""

    def __init__(self) -> None:
        self._data: dict[str, Any] = {}

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    def put(self, key: str, value: Any) -> None:
        self._data[key] = value

    def delete(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)
