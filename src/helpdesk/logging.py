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
    session_id: str | None = None
    model: str | None = None
    tool_name: str | None = None
    duration_ms: float | None = None
    turns: int | None = None
    stopped_reason: str | None = None
    error: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict, excluding None values."""
        data = asdict(self)
        return {k: v for k, v in data.items() if v is not None and v != {} and v != []}


class JSONLLogger:
    """Logger that writes structured logs in JSONL format."""

    def __init__(
        self,
        log_dir: str | Path | None = None,
        filename: str = "helpdesk.jsonl",
        max_size_mb: float = 10.0,
    ) -> None:
        if log_dir is None:
            log_dir = Path.home() / ".helpdesk" / "logs"
        self.log_dir = Path(log_dir)
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.filename = filename
        self.max_size_bytes = int(max_size_mb * 1024 * 1024)

    @property
    def log_path(self) -> Path:
        """Current log file path."""
        return self.log_dir / self.filename

    def _rotate_if_needed(self) -> None:
        """Rotate log file if it exceeds max size."""
        if not self.log_path.exists():
            return

        if self.log_path.stat().st_size >= self.max_size_bytes:
            timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S_%f")
            rotated_name = f"{self.log_path.stem}_{timestamp}.jsonl"
            self.log_path.rename(self.log_dir / rotated_name)

    def _write(self, entry: LogEntry) -> None:
        self._rotate_if_needed()

        with open(self.log_path, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry.to_dict(), ensure_ascii=False) + "\n")

    def log(
        self,
        event: str,
        *,
        session_id: str | None = None,
        model: str | None = None,
        tool_name: str | None = None,
        duration_ms: float | None = None,
        turns: int | None = None,
        stopped_reason: str | None = None,
        error: str | None = None,
        **extra: Any,
    ) -> None:
        """Log an event."""
        entry = LogEntry(
            timestamp=datetime.now(timezone.utc).isoformat(),
            event=event,
            session_id=session_id,
            model=model,
            tool_name=tool_name,
            duration_ms=duration_ms,
            turns=turns,
            stopped_reason=stopped_reason,
            error=error,
            extra={k: v for k, v in extra.items() if v is not None},
        )
        self._write(entry)

    def log_tool_call(
        self,
        tool_name: str,
        args: dict[str, Any],
        *,
        session_id: str | None = None,
    ) -> None:
        """Log a tool call requested by the model."""
        self.log("tool_call", session_id=session_id, tool_name=tool_name, tool_args=args)

    def log_tool_result(
        self,
        tool_name: str,
        success: bool,
        *,
        session_id: str | None = None,
        duration_ms: float | None = None,
        error: str | None = None,
    ) -> None:
        """Log a tool result."""
        self.log(
            "tool_result",
            session_id=session_id,
            tool_name=tool_name,
            duration_ms=duration_ms,
            error=error if not success else None,
            success=success,
        )

    def log_exchange_complete(
        self,
        reason: str,
        *,
        session_id: str | None = None,
        turns: int | None = None,
        tools_used: list[str] | None = None,
    ) -> None:
        """Log when an exchange has produced its final reply."""
        self.log(
            "exchange_complete",
            session_id=session_id,
            stopped_reason=reason,
            turns=turns,
            tools_used=tools_used or None,
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
