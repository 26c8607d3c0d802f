"""Speech-to-text via Groq Whisper."""

import logging

import groq
from groq import AsyncGroq

from ..errors import AuthConfigError, EmptyResult, ProviderError, RateLimited, TransientProviderError

logger = logging.getLogger(__name__)

STT_TIMEOUT = 45.0


class GroqTranscriber:
    """Transcribes voice notes and audio files."""

    def __init__(
        self,
        api_key: str = "",
        model: str = "whisper-large-v3",
        client: AsyncGroq | None = None,
        timeout: float = STT_TIMEOUT,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self._client = client

    def _get_client(self) -> AsyncGroq:
        if self._client is None:
            if not self.api_key:
                raise AuthConfigError("Missing GROQ_API_KEY")
            self._client = AsyncGroq(api_key=self.api_key, timeout=self.timeout)
        return self._client

    async def transcribe(self, audio: bytes, filename: str = "voice.ogg") -> str:
        """Return the transcript of an audio clip.

        Raises:
            EmptyResult: No audio, or the transcript is blank.
            AuthConfigError: Missing or rejected key.
            ProviderError: Any other provider failure.
        """
        if not audio:
            raise EmptyResult("No audio received.")

        client = self._get_client()
        try:
            result = await client.audio.transcriptions.create(
                file=(filename or "voice.ogg", bytes(audio)),
                model=self.model,
            )
        except groq.APIStatusError as e:
            status = e.status_code
            message = f"Transcription failed ({status}): {e.message}"
            if status == 429:
                raise RateLimited(message, status=status) from e
            if status in (401, 403):
                raise AuthConfigError(message, status=status) from e
            raise ProviderError(message, status=status) from e
        except groq.APIConnectionError as e:
            raise TransientProviderError(f"Transcription failed: {e}") from e

        text = (getattr(result, "text", "") or "").strip()
        if not text:
            raise EmptyResult("Could not understand the audio.")
        logger.debug(f"Transcribed {len(audio)} bytes into {len(text)} chars")
        return text
