"""JSONL logging for observability."""

import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any


@dataclass
class LogEntry:
    """A single log entry."""

    timestamp: str
    event: str
    chat_id: str | None = None
    user_id: str | None = None
    provider: str | None = None
    duration_ms: float | None = None
    status: int | None = None
    attempt: int | None = None
    error: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict, excluding None values."""
        data = asdict(self)
        return {k: v for k, v in data.items() if v is not None and v != {} and v != []}


class JSONLLogger:
    """Logger that writes structured events in JSONL format."""

    def __init__(
        self,
        log_dir: str | Path | None = None,
        filename: str = "events.jsonl",
        max_size_mb: float = 10.0,
    ) -> None:
        if log_dir is None:
            log_dir = Path.home() / ".daoman" / "logs"
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.filename = filename
        self.max_size_bytes = int(max_size_mb * 1024 * 1024)
        self._current_chat_id: str | None = None

    @property
    def log_path(self) -> Path:
        """Current log file path."""
        return self.log_dir / self.filename

    def set_chat_id(self, chat_id: str | None) -> None:
        """Set the current chat_id for all subsequent logs."""
        self._current_chat_id = chat_id

    def _rotate_if_needed(self) -> None:
        """Rotate log file if it exceeds max size."""
        if not self.log_path.exists():
            return

        if self.log_path.stat().st_size >= self.max_size_bytes:
            timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")
            rotated_name = f"{self.log_path.stem}_{timestamp}.jsonl"
            self.log_path.rename(self.log_dir / rotated_name)

    def _write(self, entry: LogEntry) -> None:
        """Write a log entry to the file."""
        self._rotate_if_needed()

        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry.to_dict(), ensure_ascii=False) + "\n")

    def log(
        self,
        event: str,
        *,
        chat_id: str | None = None,
        user_id: str | None = None,
        provider: str | None = None,
        duration_ms: float | None = None,
        status: int | None = None,
        attempt: int | None = None,
        error: str | None = None,
        **extra: Any,
    ) -> None:
        """Log an event."""
        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            event=event,
            chat_id=chat_id or self._current_chat_id,
            user_id=user_id,
            provider=provider,
            duration_ms=duration_ms,
            status=status,
            attempt=attempt,
            error=error,
            extra=extra if extra else {},
        )
        self._write(entry)

    def log_lookup(
        self,
        source: str,
        success: bool,
        *,
        lines: int = 0,
        duration_ms: float | None = None,
        error: str | None = None,
    ) -> None:
        """Log the outcome of a single fact lookup."""
        self.log(
            "fact_lookup",
            provider=source,
            duration_ms=duration_ms,
            error=error if not success else None,
            success=success,
            lines=lines,
        )

    def log_completion_retry(
        self,
        attempt: int,
        *,
        status: int | None = None,
        delay_s: float | None = None,
        error: str | None = None,
    ) -> None:
        """Log a retried completion attempt."""
        self.log(
            "completion_retry",
            provider="groq",
            attempt=attempt,
            status=status,
            error=error,
            delay_s=delay_s,
        )

    def log_voice(
        self,
        event: str,
        user_id: str,
        *,
        chat_id: str | None = None,
        filename: str | None = None,
        size: int | None = None,
    ) -> None:
        """Log a voice reference event (capture, cloned reply, preset reply)."""
        self.log(
            event,
            chat_id=chat_id,
            user_id=user_id,
            filename=filename,
            size=size,
        )


# Global logger instance
_logger: JSONLLogger | None = None


def get_logger() -> JSONLLogger:
    """Get the global logger instance."""
    global _logger
    if _logger is None:
        _logger = JSONLLogger()
    return _logger


def configure_logger(log_dir: str | Path | None = None, max_size_mb: float = 10.0) -> JSONLLogger:
    """Configure and return the global logger."""
    global _logger
    _logger = JSONLLogger(log_dir=log_dir, max_size_mb=max_size_mb)
    return _logger
