"""Tests for the voice reference store."""

import pytest

from daoman.session import InMemoryStore
from daoman.speech import VoiceReferenceStore


class FakeClock:
    def __init__(self) -> None:
        self.now = 1_700_000_000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def voices(clock: FakeClock) -> VoiceReferenceStore:
    return VoiceReferenceStore(clock=clock)


class TestVoiceReferenceStore:
    def test_put_then_get(self, voices: VoiceReferenceStore, clock: FakeClock):
        stored = voices.put("42", b"OggS-audio", "voice.ogg")
        reference = voices.get("42")

        assert reference == stored
        assert reference.owner_id == "42"
        assert reference.audio == b"OggS-audio"
        assert reference.filename == "voice.ogg"
        assert reference.captured_at == clock.now

    def test_unknown_user(self, voices: VoiceReferenceStore):
        assert voices.get("nobody") is None

    def test_overwrite(self, voices: VoiceReferenceStore, clock: FakeClock):
        voices.put("42", b"first", "a.ogg")
        clock.now += 60
        voices.put("42", b"second", "b.mp3")

        reference = voices.get("42")
        assert reference.audio == b"second"
        assert reference.filename == "b.mp3"
        assert reference.captured_at == clock.now

    def test_expires_after_thirty_minutes(self, voices: VoiceReferenceStore, clock: FakeClock):
        voices.put("42", b"audio", "voice.ogg")

        clock.now += 30 * 60
        assert voices.get("42") is not None

        clock.now += 1
        assert voices.get("42") is None

    def test_expired_entry_not_deleted(self, clock: FakeClock):
        store = InMemoryStore()
        voices = VoiceReferenceStore(store=store, clock=clock)
        voices.put("42", b"audio", "voice.ogg")

        clock.now += 3600
        assert voices.get("42") is None
        assert len(store) == 1

    def test_custom_max_age(self, voices: VoiceReferenceStore, clock: FakeClock):
        voices.put("42", b"audio", "voice.ogg")
        clock.now += 120

        assert voices.get("42", max_age=60) is None
        assert voices.get("42", max_age=300) is not None

    def test_empty_audio_treated_as_absent(self, voices: VoiceReferenceStore):
        voices.put("42", b"", "voice.ogg")
        assert voices.get("42") is None

    def test_users_isolated(self, voices: VoiceReferenceStore):
        voices.put("1", b"one", "1.ogg")
        voices.put("2", b"two", "2.ogg")
        assert voices.get("1").audio == b"one"
        assert voices.get("2").audio == b"two"

    def test_default_filename(self, voices: VoiceReferenceStore):
        assert voices.put("42", b"audio", "").filename == "voice.ogg"
