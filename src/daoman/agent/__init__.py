"""Prompt assembly, completion and the relay pipeline."""

from .completion import CompletionClient
from .prompt import Persona, build_messages, build_system_prompt, parse_fewshots
from .relay import Relay, RelayResult

__all__ = [
    "CompletionClient",
    "Persona",
    "Relay",
    "RelayResult",
    "build_messages",
    "build_system_prompt",
    "parse_fewshots",
]
