"""Per-chat conversation turns and the in-flight request guard.

Turns live in a ``KeyValueStore`` under ``history:<chat_id>``. Only completed
exchanges are recorded, so a failed request leaves the history untouched.
A chat that has been idle longer than ``idle_ttl`` reads back as empty.
"""

import asyncio
import time
from dataclasses import dataclass, field
from typing import Callable

from .store import InMemoryStore, KeyValueStore


@dataclass
class SessionConfig:
    """Limits for stored chat history."""

    max_messages: int = 12  # 6 exchanges
    idle_ttl: float = 3600  # 1 hour


@dataclass
class ChatHistory:
    """Stored turns for one chat."""

    turns: list[dict[str, str]] = field(default_factory=list)
    updated_at: float = 0.0


class SessionManager:
    """Keeps recent turns per chat and allows one request per chat at a time."""

    BUSY_MESSAGE = "⏳ Still working on your last message. Hold on."

    def __init__(
        self,
        config: SessionConfig | None = None,
        store: KeyValueStore | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.config = config or SessionConfig()
        self.store = store if store is not None else InMemoryStore()
        self._clock = clock
        self._locks: dict[str, asyncio.Lock] = {}

    @staticmethod
    def _key(chat_id: str) -> str:
        return f"history:{chat_id}"

    def _load(self, chat_id: str) -> ChatHistory | None:
        history = self.store.get(self._key(chat_id))
        if history is None:
            return None
        if self._clock() - history.updated_at > self.config.idle_ttl:
            return None
        return history

    def is_busy(self, chat_id: str) -> bool:
        lock = self._locks.get(chat_id)
        return lock is not None and lock.locked()

    async def acquire(self, chat_id: str) -> tuple[bool, str | None]:
        """Try to claim the chat without waiting.

        Returns (acquired, error_message).
        """
        lock = self._locks.setdefault(chat_id, asyncio.Lock())
        if lock.locked():
            return False, self.BUSY_MESSAGE
        await lock.acquire()
        return True, None

    def release(self, chat_id: str) -> None:
        lock = self._locks.get(chat_id)
        if lock is not None and lock.locked():
            lock.release()

    def add_exchange(self, chat_id: str, question: str, answer: str) -> None:
        """Append a completed user/assistant pair, keeping the newest turns."""
        history = self._load(chat_id) or ChatHistory()
        turns = history.turns + [
            {"role": "user", "content": question},
            {"role": "assistant", "content": answer},
        ]
        limit = max(0, self.config.max_messages)
        self.store.put(
            self._key(chat_id),
            ChatHistory(turns=turns[-limit:] if limit else [], updated_at=self._clock()),
        )

    def get_messages(self, chat_id: str, limit: int | None = None) -> list[dict[str, str]]:
        """Most recent turns, oldest first, as role/content dicts."""
        history = self._load(chat_id)
        if history is None or (limit is not None and limit <= 0):
            return []
        turns = history.turns if limit is None else history.turns[-limit:]
        return [dict(turn) for turn in turns]

    def reset(self, chat_id: str) -> bool:
        """Forget a chat's history. Returns True if anything was stored."""
        return self.store.delete(self._key(chat_id))
