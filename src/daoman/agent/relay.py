"""Relay: ground a query, build the conversation, ask the model."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .prompt import Persona, build_messages

if TYPE_CHECKING:
    from ..grounding import FactAssembler
    from ..logging import JSONLLogger
    from .completion import CompletionClient

logger = logging.getLogger(__name__)


@dataclass
class RelayResult:
    """Answer plus what was sent to produce it."""

    answer: str
    facts: str = ""
    messages: list[dict[str, Any]] = field(default_factory=list)


class Relay:
    """One question in, one grounded answer out."""

    def __init__(
        self,
        assembler: FactAssembler,
        completion: CompletionClient,
        persona: Persona | None = None,
        event_log: JSONLLogger | None = None,
    ) -> None:
        self.assembler = assembler
        self.completion = completion
        self.persona = persona or Persona()
        self.event_log = event_log

    async def ask(
        self,
        query: str,
        history: list[dict[str, Any]] | None = None,
        chat_id: str | None = None,
    ) -> RelayResult:
        """Run the full pipeline for a user query.

        Args:
            query: The user's question.
            history: Prior turns for this chat, oldest first.
            chat_id: Optional identifier used in event logs.

        Raises:
            InvalidInput: Empty query.
            ProviderError: Completion failed (see CompletionClient).
        """
        facts = await self.assembler.build_facts(query)
        messages = build_messages(query, history, facts, persona=self.persona)

        if self.event_log is not None:
            self.event_log.log(
                "facts_built",
                chat_id=chat_id,
                fact_chars=len(facts),
                message_count=len(messages),
            )

        answer = await self.completion.complete(messages)
        return RelayResult(answer=answer, facts=facts, messages=messages)
