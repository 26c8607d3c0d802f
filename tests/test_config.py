"""Tests for environment-driven configuration."""

import pytest

from daoman.config import (
    DEFAULT_MODEL,
    bot_config_from_env,
    completion_config_from_env,
    prompt_config_from_env,
    speech_config_from_env,
)

ENV_VARS = (
    "GROQ_API_KEY", "GROQ_MODEL", "AI_MODEL", "DAO_TEMPERATURE", "DAO_MAX_TOKENS",
    "AI_MAX_WORDS", "AI_FEWSHOTS", "TELEGRAM_TOKEN", "TELEGRAM_BOT_TOKEN", "BASE_URL",
    "PORT", "ELEVENLABS_API_KEY", "ELEVEN_VOICE_ID", "ELEVEN_STABILITY",
    "ELEVEN_SPEAKER_BOOST", "VOICE_REF_TTL", "STT_MODEL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestCompletionConfig:
    def test_defaults(self):
        config = completion_config_from_env()
        assert config.model == DEFAULT_MODEL
        assert config.params() == {
            "model": DEFAULT_MODEL,
            "temperature": 0.7,
            "max_tokens": 350,
            "top_p": 0.9,
            "presence_penalty": 0.15,
            "frequency_penalty": 0.15,
        }
        assert config.max_retries == 2

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("GROQ_API_KEY", "gsk")
        monkeypatch.setenv("AI_MODEL", "llama-3.3-70b-versatile")
        monkeypatch.setenv("DAO_TEMPERATURE", "0.3")
        monkeypatch.setenv("DAO_MAX_TOKENS", "200")

        config = completion_config_from_env()

        assert config.api_key == "gsk"
        assert config.model == "llama-3.3-70b-versatile"
        assert config.temperature == 0.3
        assert config.max_tokens == 200

    def test_groq_model_wins(self, monkeypatch):
        monkeypatch.setenv("GROQ_MODEL", "a")
        monkeypatch.setenv("AI_MODEL", "b")
        assert completion_config_from_env().model == "a"

    def test_bad_number_ignored(self, monkeypatch):
        monkeypatch.setenv("DAO_MAX_TOKENS", "lots")
        assert completion_config_from_env().max_tokens == 350


class TestPromptConfig:
    def test_defaults(self):
        config = prompt_config_from_env()
        assert config.max_words == 60
        assert config.fewshots_raw == "[]"

    def test_max_words_floor(self, monkeypatch):
        monkeypatch.setenv("AI_MAX_WORDS", "0")
        assert prompt_config_from_env().max_words == 1


class TestSpeechConfig:
    def test_voice_settings_empty_by_default(self):
        assert speech_config_from_env().voice_settings() == {}

    def test_voice_settings_from_env(self, monkeypatch):
        monkeypatch.setenv("ELEVEN_STABILITY", "0.35")
        monkeypatch.setenv("ELEVEN_SPEAKER_BOOST", "0")

        settings = speech_config_from_env().voice_settings()

        assert settings == {"stability": 0.35, "use_speaker_boost": False}

    def test_voice_ref_ttl(self, monkeypatch):
        assert speech_config_from_env().voice_ref_ttl == 1800.0
        monkeypatch.setenv("VOICE_REF_TTL", "600")
        assert speech_config_from_env().voice_ref_ttl == 600.0


class TestBotConfig:
    def test_polling_by_default(self):
        config = bot_config_from_env()
        assert config.use_webhook is False
        assert config.port == 10000
        assert config.reply_title == "DaoMan"

    def test_webhook_when_base_url(self, monkeypatch):
        monkeypatch.setenv("BASE_URL", "https://bot.example.com/")
        monkeypatch.setenv("PORT", "8443")

        config = bot_config_from_env()

        assert config.use_webhook is True
        assert config.base_url == "https://bot.example.com"
        assert config.port == 8443

    def test_token_fallback(self, monkeypatch):
        monkeypatch.setenv("TELEGRAM_BOT_TOKEN", "123:abc")
        assert bot_config_from_env().token == "123:abc"
