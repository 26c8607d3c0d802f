"""Per-user voice reference samples with time-based expiry."""

import time
from dataclasses import dataclass
from typing import Callable

from ..session.store import InMemoryStore, KeyValueStore

DEFAULT_MAX_AGE = 30 * 60


@dataclass(frozen=True)
class VoiceReference:
    """The most recent voice sample a user sent."""

    owner_id: str
    audio: bytes
    filename: str
    captured_at: float


class VoiceReferenceStore:
    """Keeps one reference sample per user.

    Entries older than ``max_age`` seconds are treated as absent. They are
    not deleted on read; the next ``put`` overwrites them.
    """

    def __init__(
        self,
        store: KeyValueStore | None = None,
        clock: Callable[[], float] = time.time,
        max_age: float = DEFAULT_MAX_AGE,
    ) -> None:
        self._store = store if store is not None else InMemoryStore()
        self._clock = clock
        self.max_age = max_age

    @staticmethod
    def _key(user_id: str) -> str:
        return f"voice:{user_id}"

    def put(self, user_id: str, audio: bytes, filename: str = "voice.ogg") -> VoiceReference:
        """Store a sample for user_id, replacing any previous one."""
        reference = VoiceReference(
            owner_id=str(user_id),
            audio=bytes(audio),
            filename=filename or "voice.ogg",
            captured_at=self._clock(),
        )
        self._store.put(self._key(user_id), reference)
        return reference

    def get(self, user_id: str, max_age: float | None = None) -> VoiceReference | None:
        """Return the user's sample, or None if missing, empty or expired."""
        reference = self._store.get(self._key(user_id))
        if reference is None or not reference.audio:
            return None

        limit = self.max_age if max_age is None else max_age
        if self._clock() - reference.captured_at > limit:
            return None
        return reference
