"""Prompt builder: persona, rules, FACTS, few-shots and recent history."""

import json
import logging
from dataclasses import dataclass, field
from typing import Any

from ..errors import InvalidInput

logger = logging.getLogger(__name__)

MAX_HISTORY_TURNS = 6
MAX_QUERY_CHARS = 4000

SYSTEM_PROMPT_BASE = """You are DAOman: relentless, primal, sovereign. Mascot and wallet of the DAOman DAO, its largest token holder.

<Voice>
- Lightning-strike replies, 2 to 5 sentences. Confident, concise, surgical.
- Humor is a blade: sharp and purposeful, never goofy. Zero or one emoji.
- Authoritative, never needy.
</Voice>

<Behavior>
- If the question is vague, add one high-leverage tip or question.
- Complex topics: a one-line analogy, 2 to 4 crisp facts, one immediate action.
- Always aim for a decision or next move.
</Behavior>

<Refusals>
Unsafe or disallowed requests: "Not this path. It burns more than it builds. Try this instead:" followed by a safe, equally strong alternative.
</Refusals>

Never use stage directions. Never break character. Redirect off-topic chatter with waka-waka."""

STATIC_CONTEXT = (
    "DAOs.fun is a Solana launchpad for meme-fund DAOs (2025 state).",
    "Lifecycle: fundraising (7 days, 10% early withdrawal penalty), operational (SOL deployed, tokens trade), redemption (3 to 12 months, redeem NAV or trade).",
    "NAV and market price often detach by large multiples.",
    "DAOman routes 100% of revenue to buybacks; supply returns to the DAO, making it hyper-deflationary.",
    "The DAO wallet is the largest DAOman holder.",
    "Risks: speculative, immutable, volatile (20 to 50x swings), collapse or rug risk.",
)

RULES = (
    "RULES: Keep answers under {max_words} words.",
    "Always finish your sentences.",
    "When FACTS are provided, ground your answer strictly on them; cite no numbers beyond FACTS.",
    "If data is missing, say you don't know and suggest refining the question or another web check.",
    "Use the persona's voice and behavior exactly as defined.",
)


@dataclass
class Persona:
    """Everything persona-specific that goes into a prompt."""

    name: str = "DAOman"
    system_prompt: str = SYSTEM_PROMPT_BASE
    static_context: tuple[str, ...] = STATIC_CONTEXT
    max_words: int = 60
    fewshots: list[dict[str, str]] = field(default_factory=list)

    @property
    def context_label(self) -> str:
        return f"{self.name} CONTEXT:"


def parse_fewshots(raw: str | None) -> list[dict[str, str]]:
    """Parse a JSON list of {"user", "assistant"} pairs into turns.

    Invalid JSON or malformed entries are dropped, never raised.
    """
    if not raw:
        return []
    try:
        items = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning(f"Ignoring invalid few-shot JSON: {e}")
        return []
    if not isinstance(items, list):
        return []

    turns: list[dict[str, str]] = []
    for item in items:
        if (
            isinstance(item, dict)
            and isinstance(item.get("user"), str)
            and isinstance(item.get("assistant"), str)
        ):
            turns.append({"role": "user", "content": item["user"]})
            turns.append({"role": "assistant", "content": item["assistant"]})
    return turns


def build_system_prompt(persona: Persona) -> str:
    """Persona text followed by the rules suffix."""
    rules = " ".join(RULES).format(max_words=persona.max_words)
    return f"{persona.system_prompt}\n\n{rules}"


def build_messages(
    query: str,
    history: list[dict[str, Any]] | None = None,
    facts: str = "",
    persona: Persona | None = None,
) -> list[dict[str, Any]]:
    """Assemble the message list for the completion request.

    Order: persona system turn, optional FACTS system turn, few-shot pairs,
    the last ``MAX_HISTORY_TURNS`` of history, then the user query.

    Raises:
        InvalidInput: If the query is empty after trimming.
    """
    content = (query or "").strip()
    if not content:
        raise InvalidInput("Prompt is empty. Use /ai <your question>.")

    persona = persona or Persona()
    messages: list[dict[str, Any]] = [
        {"role": "system", "content": build_system_prompt(persona)},
    ]

    if facts:
        messages.append({"role": "system", "content": facts})

    messages.extend(persona.fewshots)

    if history:
        messages.extend(
            {"role": turn["role"], "content": turn["content"]}
            for turn in history[-MAX_HISTORY_TURNS:]
        )

    messages.append({"role": "user", "content": content[:MAX_QUERY_CHARS]})
    return messages
