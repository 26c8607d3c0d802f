"""Tests for the relay pipeline."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from daoman.agent import Persona, Relay
from daoman.errors import InvalidInput, RateLimited

FACTS = "FACTS @ 2025-01-01T00:00:00.000Z:\n- COIN BTC: $64,000"


@pytest.fixture
def assembler() -> MagicMock:
    mock = MagicMock()
    mock.build_facts = AsyncMock(return_value=FACTS)
    return mock


@pytest.fixture
def completion() -> MagicMock:
    mock = MagicMock()
    mock.complete = AsyncMock(return_value="BTC sits at $64,000. Stack accordingly.")
    return mock


class TestRelay:
    @pytest.mark.asyncio
    async def test_ask(self, assembler, completion):
        relay = Relay(assembler, completion)
        result = await relay.ask("btc price?")

        assert result.answer == "BTC sits at $64,000. Stack accordingly."
        assert result.facts == FACTS
        assembler.build_facts.assert_awaited_once_with("btc price?")

        sent = completion.complete.await_args.args[0]
        assert sent is result.messages
        assert sent[1] == {"role": "system", "content": FACTS}
        assert sent[-1] == {"role": "user", "content": "btc price?"}

    @pytest.mark.asyncio
    async def test_history_passed_through(self, assembler, completion):
        relay = Relay(assembler, completion, persona=Persona(fewshots=[]))
        history = [
            {"role": "user", "content": "gm"},
            {"role": "assistant", "content": "GM."},
        ]
        result = await relay.ask("and eth?", history)
        assert [m["content"] for m in result.messages[2:4]] == ["gm", "GM."]

    @pytest.mark.asyncio
    async def test_without_facts(self, assembler, completion):
        assembler.build_facts.return_value = ""
        result = await Relay(assembler, completion).ask("what is a DAO?")
        assert [m["role"] for m in result.messages] == ["system", "user"]

    @pytest.mark.asyncio
    async def test_empty_query_never_reaches_model(self, assembler, completion):
        assembler.build_facts.return_value = ""
        with pytest.raises(InvalidInput):
            await Relay(assembler, completion).ask("  ")
        completion.complete.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_completion_errors_propagate(self, assembler, completion):
        completion.complete.side_effect = RateLimited("slow down", status=429)
        with pytest.raises(RateLimited):
            await Relay(assembler, completion).ask("btc?")

    @pytest.mark.asyncio
    async def test_facts_event_logged(self, assembler, completion):
        event_log = MagicMock()
        await Relay(assembler, completion, event_log=event_log).ask("btc?", chat_id="42")

        event_log.log.assert_called_once()
        assert event_log.log.call_args.args[0] == "facts_built"
        assert event_log.log.call_args.kwargs["chat_id"] == "42"
