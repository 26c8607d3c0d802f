"""Choose between the user's cloned voice and the preset voice."""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..logging import JSONLLogger
    from .tts import ElevenLabsSynthesizer
    from .voice_store import VoiceReferenceStore

logger = logging.getLogger(__name__)

URL_PATTERN = re.compile(r"https?://\S+")
CODE_FENCE_PATTERN = re.compile(r"```.*?```", re.DOTALL)


def speakable_text(text: str) -> str:
    """Drop links and fenced code, which read badly aloud."""
    cleaned = CODE_FENCE_PATTERN.sub(" ", text or "")
    cleaned = URL_PATTERN.sub(" ", cleaned)
    return re.sub(r"\s+", " ", cleaned).strip()


class Speaker:
    """Renders a reply for a given user."""

    def __init__(
        self,
        synthesizer: ElevenLabsSynthesizer,
        voices: VoiceReferenceStore,
        event_log: JSONLLogger | None = None,
    ) -> None:
        self.synthesizer = synthesizer
        self.voices = voices
        self.event_log = event_log

    async def speak(self, user_id: str, text: str) -> bytes:
        """Return mp3 bytes for text, in the user's voice when one is on file."""
        spoken = speakable_text(text) or text
        reference = self.voices.get(user_id)

        if reference is None:
            audio = await self.synthesizer.text_to_speech(spoken)
            event = "voice_reply_preset"
        else:
            audio = await self.synthesizer.speech_to_speech(
                spoken, reference.audio, reference.filename
            )
            event = "voice_reply_cloned"

        logger.debug(f"{event} for user {user_id}: {len(audio)} bytes")
        if self.event_log is not None:
            self.event_log.log_voice(event, user_id, size=len(audio))
        return audio
