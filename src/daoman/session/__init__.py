"""Per-chat history, per-user cooldowns and the key-value store they share."""

from .cooldown import Cooldown
from .manager import ChatHistory, SessionConfig, SessionManager
from .store import InMemoryStore, KeyValueStore

__all__ = [
    "ChatHistory",
    "Cooldown",
    "InMemoryStore",
    "KeyValueStore",
    "SessionConfig",
    "SessionManager",
]
