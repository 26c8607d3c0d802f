"""Tests for JSONL logging."""

import json
import tempfile
from pathlib import Path

import pytest

from daoman.logging import JSONLLogger, LogEntry


@pytest.fixture
def temp_log_dir():
    """Create a temporary directory for logs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def logger(temp_log_dir: Path) -> JSONLLogger:
    return JSONLLogger(log_dir=temp_log_dir)


def read_entries(logger: JSONLLogger) -> list[dict]:
    with open(logger.log_path, encoding="utf-8") as f:
        return [json.loads(line) for line in f]


def test_log_entry_to_dict():
    """Test LogEntry excludes None values."""
    entry = LogEntry(timestamp="2024-01-01T00:00:00Z", event="test")
    data = entry.to_dict()

    assert "timestamp" in data
    assert "event" in data
    assert "chat_id" not in data  # None excluded
    assert "extra" not in data  # Empty dict excluded


def test_log_writes_jsonl(logger: JSONLLogger):
    """Test that logs are written in JSONL format."""
    logger.log("event1", chat_id="123")
    logger.log("event2", chat_id="456")

    entries = read_entries(logger)
    assert [e["event"] for e in entries] == ["event1", "event2"]
    assert entries[0]["chat_id"] == "123"


def test_log_lookup(logger: JSONLLogger):
    """Test logging a failed fact lookup."""
    logger.log_lookup("coins", False, lines=0, duration_ms=12.5, error="NotFound: zzz")

    entry = read_entries(logger)[0]
    assert entry["event"] == "fact_lookup"
    assert entry["provider"] == "coins"
    assert entry["error"] == "NotFound: zzz"
    assert entry["duration_ms"] == 12.5
    assert entry["extra"] == {"success": False, "lines": 0}


def test_log_lookup_success_has_no_error(logger: JSONLLogger):
    logger.log_lookup("web", True, lines=3, error="ignored")
    assert "error" not in read_entries(logger)[0]


def test_log_completion_retry(logger: JSONLLogger):
    logger.log_completion_retry(1, status=429, delay_s=0.5, error="rate limited")

    entry = read_entries(logger)[0]
    assert entry["event"] == "completion_retry"
    assert entry["provider"] == "groq"
    assert entry["attempt"] == 1
    assert entry["status"] == 429
    assert entry["extra"]["delay_s"] == 0.5


def test_log_voice(logger: JSONLLogger):
    logger.log_voice("voice_capture", "42", chat_id="9", filename="voice.ogg", size=2048)

    entry = read_entries(logger)[0]
    assert entry["event"] == "voice_capture"
    assert entry["user_id"] == "42"
    assert entry["chat_id"] == "9"
    assert entry["extra"] == {"filename": "voice.ogg", "size": 2048}


def test_unicode_preserved(logger: JSONLLogger):
    logger.log("reply", text="Waka Waka 🟢")
    with open(logger.log_path, encoding="utf-8") as f:
        assert "🟢" in f.read()


def test_set_chat_id(logger: JSONLLogger):
    """Test that set_chat_id applies to subsequent logs."""
    logger.set_chat_id("session-42")
    logger.log("event1")
    logger.log("event2")

    assert all(e["chat_id"] == "session-42" for e in read_entries(logger))


def test_rotation(temp_log_dir: Path):
    """Test log rotation when max size is exceeded."""
    logger = JSONLLogger(log_dir=temp_log_dir, max_size_mb=0.001)  # ~1KB

    for i in range(100):
        logger.log(f"event_{i}", data="x" * 100)

    log_files = list(temp_log_dir.glob("events*.jsonl"))
    assert len(log_files) >= 2
