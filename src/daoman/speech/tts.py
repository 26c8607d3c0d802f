"""Text-to-speech and voice conversion via the ElevenLabs REST API."""

import json
import logging
import uuid
from typing import Any

import httpx

from ..config import SpeechConfig
from ..errors import AuthConfigError, EmptyResult, ProviderError, TransientProviderError
from ..providers.http import USER_AGENT, error_for_status

logger = logging.getLogger(__name__)

ELEVENLABS_URL = "https://api.elevenlabs.io"
TTS_TIMEOUT = 45.0


class ElevenLabsSynthesizer:
    """Renders reply audio.

    ``speech_to_speech`` renders the text with the preset voice, registers the
    reference sample as a temporary cloned voice, converts the rendered speech
    into that voice and removes the temporary voice again.
    """

    def __init__(
        self,
        config: SpeechConfig | None = None,
        client: httpx.AsyncClient | None = None,
        base_url: str = ELEVENLABS_URL,
        timeout: float = TTS_TIMEOUT,
    ) -> None:
        self.config = config or SpeechConfig()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(headers={"User-Agent": USER_AGENT})
        return self._client

    def _headers(self) -> dict[str, str]:
        if not self.config.elevenlabs_api_key:
            raise AuthConfigError("Missing ELEVENLABS_API_KEY")
        return {"xi-api-key": self.config.elevenlabs_api_key}

    def _voice(self, voice_id: str | None) -> str:
        voice = voice_id or self.config.voice_id
        if not voice:
            raise AuthConfigError("Missing ELEVEN_VOICE_ID")
        return voice

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        client = self._get_client()
        try:
            response = await client.request(
                method,
                f"{self.base_url}{path}",
                headers=self._headers(),
                timeout=self.timeout,
                **kwargs,
            )
        except httpx.TimeoutException as e:
            raise TransientProviderError(f"ElevenLabs timed out after {self.timeout}s") from e
        except httpx.RequestError as e:
            raise TransientProviderError(f"ElevenLabs request failed: {e}") from e

        if not response.is_success:
            raise error_for_status(response, "ElevenLabs")
        return response

    @staticmethod
    def _audio(response: httpx.Response) -> bytes:
        if not response.content:
            raise EmptyResult("ElevenLabs returned empty audio.")
        return response.content

    async def text_to_speech(self, text: str, voice_id: str | None = None) -> bytes:
        """Render text with a preset voice and return mp3 bytes."""
        if not text or not text.strip():
            raise EmptyResult("Nothing to say.")

        body: dict[str, Any] = {"text": text}
        if self.config.tts_model_id:
            body["model_id"] = self.config.tts_model_id
        settings = self.config.voice_settings()
        if settings:
            body["voice_settings"] = settings

        response = await self._request(
            "POST",
            f"/v1/text-to-speech/{self._voice(voice_id)}",
            params={"output_format": self.config.output_format},
            json=body,
        )
        return self._audio(response)

    async def _add_voice(self, audio: bytes, filename: str) -> str:
        response = await self._request(
            "POST",
            "/v1/voices/add",
            data={"name": f"daoman-ref-{uuid.uuid4().hex[:8]}"},
            files={"files": (filename, audio, "application/octet-stream")},
        )
        voice_id = response.json().get("voice_id")
        if not voice_id:
            raise ProviderError("ElevenLabs did not return a voice id.")
        return voice_id

    async def _delete_voice(self, voice_id: str) -> None:
        try:
            await self._request("DELETE", f"/v1/voices/{voice_id}")
        except ProviderError as e:
            logger.warning(f"Could not delete temporary voice {voice_id}: {e}")

    async def speech_to_speech(
        self,
        text: str,
        reference_audio: bytes,
        reference_filename: str = "voice.ogg",
        voice_id: str | None = None,
    ) -> bytes:
        """Speak text in the voice of a reference sample.

        Args:
            text: What to say.
            reference_audio: The user's voice sample.
            reference_filename: Original filename of the sample.
            voice_id: Preset voice used for the intermediate rendering.

        Raises:
            EmptyResult: No text, no reference audio, or empty output.
            AuthConfigError / NotFound / RateLimited / ProviderError: per HTTP status.
        """
        if not reference_audio:
            raise EmptyResult("Voice reference is empty.")

        rendered = await self.text_to_speech(text, voice_id=voice_id)
        clone_id = await self._add_voice(reference_audio, reference_filename)
        try:
            data: dict[str, str] = {"model_id": self.config.sts_model_id}
            settings = self.config.voice_settings()
            if settings:
                data["voice_settings"] = json.dumps(settings)

            response = await self._request(
                "POST",
                f"/v1/speech-to-speech/{clone_id}",
                params={"output_format": self.config.output_format},
                data=data,
                files={"audio": ("speech.mp3", rendered, "audio/mpeg")},
            )
            return self._audio(response)
        finally:
            await self._delete_voice(clone_id)

    async def close(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
