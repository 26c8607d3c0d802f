"""Tests for the ElevenLabs synthesizer."""

import json

import httpx
import pytest

from daoman.config import SpeechConfig
from daoman.errors import AuthConfigError, EmptyResult, NotFound, ProviderError, RateLimited
from daoman.speech import ElevenLabsSynthesizer

MP3 = b"ID3-rendered"
CLONED = b"ID3-cloned"


class ElevenLabsServer:
    """Records requests and answers the endpoints the synthesizer uses."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.fail: dict[str, int] = {}
        self.tts_body = MP3

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        for prefix, status in self.fail.items():
            if path.startswith(prefix):
                return httpx.Response(status, json={"detail": {"message": "nope"}})

        if path.startswith("/v1/text-to-speech/"):
            return httpx.Response(200, content=self.tts_body)
        if path == "/v1/voices/add":
            return httpx.Response(200, json={"voice_id": "clone-1"})
        if path.startswith("/v1/speech-to-speech/"):
            return httpx.Response(200, content=CLONED)
        if request.method == "DELETE" and path.startswith("/v1/voices/"):
            return httpx.Response(200, json={"status": "ok"})
        return httpx.Response(404)

    def paths(self) -> list[tuple[str, str]]:
        return [(r.method, r.url.path) for r in self.requests]


@pytest.fixture
def server() -> ElevenLabsServer:
    return ElevenLabsServer()


def make_synth(server: ElevenLabsServer, **config) -> ElevenLabsSynthesizer:
    config.setdefault("elevenlabs_api_key", "xi-key")
    config.setdefault("voice_id", "preset")
    client = httpx.AsyncClient(transport=httpx.MockTransport(server.handler))
    return ElevenLabsSynthesizer(SpeechConfig(**config), client=client, base_url="https://xi.test")


class TestTextToSpeech:
    @pytest.mark.asyncio
    async def test_renders_with_preset_voice(self, server: ElevenLabsServer):
        audio = await make_synth(server).text_to_speech("Waka Waka Ana! BTC is up.")

        assert audio == MP3
        request = server.requests[0]
        assert request.url.path == "/v1/text-to-speech/preset"
        assert request.url.params["output_format"] == "mp3_44100_128"
        assert request.headers["xi-api-key"] == "xi-key"
        body = json.loads(request.content)
        assert body == {"text": "Waka Waka Ana! BTC is up."}

    @pytest.mark.asyncio
    async def test_voice_settings_only_when_configured(self, server: ElevenLabsServer):
        synth = make_synth(server, tts_model_id="eleven_turbo_v2", stability=0.4, speaker_boost=True)
        await synth.text_to_speech("hello")

        body = json.loads(server.requests[0].content)
        assert body["model_id"] == "eleven_turbo_v2"
        assert body["voice_settings"] == {"stability": 0.4, "use_speaker_boost": True}

    @pytest.mark.asyncio
    async def test_explicit_voice(self, server: ElevenLabsServer):
        await make_synth(server).text_to_speech("hello", voice_id="other")
        assert server.requests[0].url.path == "/v1/text-to-speech/other"

    @pytest.mark.asyncio
    async def test_missing_api_key(self, server: ElevenLabsServer):
        with pytest.raises(AuthConfigError, match="ELEVENLABS_API_KEY"):
            await make_synth(server, elevenlabs_api_key="").text_to_speech("hello")
        assert server.requests == []

    @pytest.mark.asyncio
    async def test_missing_voice(self, server: ElevenLabsServer):
        with pytest.raises(AuthConfigError, match="ELEVEN_VOICE_ID"):
            await make_synth(server, voice_id="").text_to_speech("hello")

    @pytest.mark.asyncio
    async def test_empty_text(self, server: ElevenLabsServer):
        with pytest.raises(EmptyResult):
            await make_synth(server).text_to_speech("   ")

    @pytest.mark.asyncio
    async def test_empty_audio(self, server: ElevenLabsServer):
        server.tts_body = b""
        with pytest.raises(EmptyResult):
            await make_synth(server).text_to_speech("hello")

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status, error_type",
        [(401, AuthConfigError), (404, NotFound), (429, RateLimited), (400, ProviderError)],
    )
    async def test_status_mapping(self, server: ElevenLabsServer, status: int, error_type: type):
        server.fail["/v1/text-to-speech/"] = status
        with pytest.raises(error_type):
            await make_synth(server).text_to_speech("hello")


class TestSpeechToSpeech:
    @pytest.mark.asyncio
    async def test_pipeline(self, server: ElevenLabsServer):
        audio = await make_synth(server).speech_to_speech("hello", b"OggS-ref", "voice.ogg")

        assert audio == CLONED
        assert server.paths() == [
            ("POST", "/v1/text-to-speech/preset"),
            ("POST", "/v1/voices/add"),
            ("POST", "/v1/speech-to-speech/clone-1"),
            ("DELETE", "/v1/voices/clone-1"),
        ]
        assert b"OggS-ref" in server.requests[1].content
        assert MP3 in server.requests[2].content
        assert b"eleven_multilingual_sts_v2" in server.requests[2].content

    @pytest.mark.asyncio
    async def test_temporary_voice_deleted_on_failure(self, server: ElevenLabsServer):
        server.fail["/v1/speech-to-speech/"] = 500

        with pytest.raises(ProviderError):
            await make_synth(server).speech_to_speech("hello", b"ref", "voice.ogg")

        assert server.paths()[-1] == ("DELETE", "/v1/voices/clone-1")

    @pytest.mark.asyncio
    async def test_clone_rejected(self, server: ElevenLabsServer):
        server.fail["/v1/voices/add"] = 403

        with pytest.raises(AuthConfigError):
            await make_synth(server).speech_to_speech("hello", b"ref", "voice.ogg")
        assert ("DELETE", "/v1/voices/clone-1") not in server.paths()

    @pytest.mark.asyncio
    async def test_empty_reference(self, server: ElevenLabsServer):
        with pytest.raises(EmptyResult):
            await make_synth(server).speech_to_speech("hello", b"", "voice.ogg")
        assert server.requests == []
