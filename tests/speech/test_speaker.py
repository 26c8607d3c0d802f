"""Tests for voice selection when rendering replies."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from daoman.errors import RateLimited
from daoman.speech import Speaker, VoiceReferenceStore, speakable_text


@pytest.fixture
def synthesizer() -> MagicMock:
    mock = MagicMock()
    mock.text_to_speech = AsyncMock(return_value=b"preset-mp3")
    mock.speech_to_speech = AsyncMock(return_value=b"cloned-mp3")
    return mock


class TestSpeakableText:
    def test_strips_urls(self):
        assert speakable_text("See https://example.com/x?y=1 now") == "See now"

    def test_strips_code_fences(self):
        assert speakable_text("Run\n```\nrm -rf /\n```\nthen rest") == "Run then rest"

    def test_plain_text_unchanged(self):
        assert speakable_text("Waka Waka Ana! Stack sats.") == "Waka Waka Ana! Stack sats."


class TestSpeaker:
    @pytest.mark.asyncio
    async def test_preset_voice_without_reference(self, synthesizer):
        speaker = Speaker(synthesizer, VoiceReferenceStore())

        audio = await speaker.speak("42", "Hello https://x.test")

        assert audio == b"preset-mp3"
        synthesizer.text_to_speech.assert_awaited_once_with("Hello")
        synthesizer.speech_to_speech.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cloned_voice_with_reference(self, synthesizer):
        voices = VoiceReferenceStore()
        voices.put("42", b"OggS", "voice.ogg")
        speaker = Speaker(synthesizer, voices)

        audio = await speaker.speak("42", "Hello")

        assert audio == b"cloned-mp3"
        synthesizer.speech_to_speech.assert_awaited_once_with("Hello", b"OggS", "voice.ogg")
        synthesizer.text_to_speech.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_expired_reference_falls_back(self, synthesizer):
        now = [1000.0]
        voices = VoiceReferenceStore(clock=lambda: now[0])
        voices.put("42", b"OggS", "voice.ogg")
        now[0] += 31 * 60

        audio = await Speaker(synthesizer, voices).speak("42", "Hello")
        assert audio == b"preset-mp3"

    @pytest.mark.asyncio
    async def test_other_users_reference_not_used(self, synthesizer):
        voices = VoiceReferenceStore()
        voices.put("7", b"OggS", "voice.ogg")

        await Speaker(synthesizer, voices).speak("42", "Hello")
        synthesizer.speech_to_speech.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_errors_propagate(self, synthesizer):
        synthesizer.text_to_speech.side_effect = RateLimited("slow", status=429)
        with pytest.raises(RateLimited):
            await Speaker(synthesizer, VoiceReferenceStore()).speak("42", "Hello")

    @pytest.mark.asyncio
    async def test_reply_logged(self, synthesizer):
        event_log = MagicMock()
        await Speaker(synthesizer, VoiceReferenceStore(), event_log=event_log).speak("42", "Hi")
        event_log.log_voice.assert_called_once_with("voice_reply_preset", "42", size=10)
