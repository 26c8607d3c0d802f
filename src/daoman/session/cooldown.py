"""Per-user anti-flood cooldown."""

import time
from typing import Callable

from .store import InMemoryStore, KeyValueStore


class Cooldown:
    """Drops messages that arrive too soon after the previous accepted one.

    Dropped messages are not queued and do not extend the window.
    """

    def __init__(
        self,
        interval: float = 0.5,
        store: KeyValueStore | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.interval = interval
        self._store = store if store is not None else InMemoryStore()
        self._clock = clock

    def allow(self, user_id: str) -> bool:
        """Return True and start a new window if the user may proceed."""
        now = self._clock()
        last = self._store.get(user_id)
        if last is not None and now - last < self.interval:
            return False
        self._store.put(user_id, now)
        return True
