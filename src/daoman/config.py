"""Configuration loaded from environment variables.

Each concern gets a small dataclass with sane defaults and a ``*_from_env``
helper. ``main`` loads ``.env`` before any of these run.
"""

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "llama-3.1-8b-instant"


def _env_str(name: str, default: str = "") -> str:
    return (os.getenv(name) or default).strip()


def _env_float(name: str, default: float | None) -> float | None:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning(f"Ignoring non-numeric {name}={raw!r}")
        return default


def _env_int(name: str, default: int) -> int:
    value = _env_float(name, float(default))
    return int(value) if value is not None else default


@dataclass
class CompletionConfig:
    """Model parameters and retry policy for the completion client."""

    api_key: str = ""
    model: str = DEFAULT_MODEL
    temperature: float = 0.7
    max_tokens: int = 350
    top_p: float = 0.9
    presence_penalty: float = 0.15
    frequency_penalty: float = 0.15
    timeout: float = 20.0
    max_retries: int = 2
    backoff_base: float = 0.5

    def params(self) -> dict:
        """Model parameters sent with every completion request."""
        return {
            "model": self.model,
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "top_p": self.top_p,
            "presence_penalty": self.presence_penalty,
            "frequency_penalty": self.frequency_penalty,
        }


@dataclass
class PromptConfig:
    """Persona-level prompt settings."""

    max_words: int = 60
    fewshots_raw: str = "[]"


@dataclass
class SpeechConfig:
    """Transcription and synthesis settings."""

    groq_api_key: str = ""
    stt_model: str = "whisper-large-v3"
    elevenlabs_api_key: str = ""
    voice_id: str = ""
    tts_model_id: str = ""
    sts_model_id: str = "eleven_multilingual_sts_v2"
    output_format: str = "mp3_44100_128"
    stability: float | None = None
    similarity_boost: float | None = None
    style: float | None = None
    speaker_boost: bool | None = None
    voice_ref_ttl: float = 1800.0

    def voice_settings(self) -> dict:
        """Only the voice settings that were explicitly configured."""
        settings: dict = {}
        if self.stability is not None:
            settings["stability"] = self.stability
        if self.similarity_boost is not None:
            settings["similarity_boost"] = self.similarity_boost
        if self.style is not None:
            settings["style"] = self.style
        if self.speaker_boost is not None:
            settings["use_speaker_boost"] = self.speaker_boost
        return settings


@dataclass
class BotConfig:
    """Telegram transport settings."""

    token: str = ""
    base_url: str = ""
    port: int = 10000
    cooldown_seconds: float = 0.5
    history_limit: int = 6
    reply_title: str = "DaoMan"

    @property
    def use_webhook(self) -> bool:
        return bool(self.base_url)


def completion_config_from_env() -> CompletionConfig:
    """Load completion settings from the environment."""
    return CompletionConfig(
        api_key=_env_str("GROQ_API_KEY"),
        model=_env_str("GROQ_MODEL") or _env_str("AI_MODEL", DEFAULT_MODEL),
        temperature=_env_float("DAO_TEMPERATURE", 0.7) or 0.0,
        max_tokens=_env_int("DAO_MAX_TOKENS", 350),
    )


def prompt_config_from_env() -> PromptConfig:
    """Load prompt settings from the environment."""
    return PromptConfig(
        max_words=max(1, _env_int("AI_MAX_WORDS", 60)),
        fewshots_raw=_env_str("AI_FEWSHOTS", "[]"),
    )


def speech_config_from_env() -> SpeechConfig:
    """Load speech settings from the environment."""
    boost_raw = os.getenv("ELEVEN_SPEAKER_BOOST")
    return SpeechConfig(
        groq_api_key=_env_str("GROQ_API_KEY"),
        stt_model=_env_str("STT_MODEL", "whisper-large-v3"),
        elevenlabs_api_key=_env_str("ELEVENLABS_API_KEY"),
        voice_id=_env_str("ELEVEN_VOICE_ID"),
        tts_model_id=_env_str("ELEVEN_MODEL_ID"),
        sts_model_id=_env_str("ELEVEN_STS_MODEL_ID", "eleven_multilingual_sts_v2"),
        output_format=_env_str("ELEVEN_OUTPUT_FORMAT", "mp3_44100_128"),
        stability=_env_float("ELEVEN_STABILITY", None),
        similarity_boost=_env_float("ELEVEN_SIMILARITY", None),
        style=_env_float("ELEVEN_STYLE", None),
        speaker_boost=None if boost_raw is None else boost_raw.strip() != "0",
        voice_ref_ttl=_env_float("VOICE_REF_TTL", 1800.0) or 1800.0,
    )


def bot_config_from_env() -> BotConfig:
    """Load Telegram settings from the environment."""
    return BotConfig(
        token=_env_str("TELEGRAM_TOKEN") or _env_str("TELEGRAM_BOT_TOKEN"),
        base_url=_env_str("BASE_URL").rstrip("/"),
        port=_env_int("PORT", 10000),
    )
