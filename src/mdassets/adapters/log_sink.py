"""Log sink implementations."""

import logging

from ..core.ports import LogLevel, LogSink

logger = logging.getLogger("mdassets")

_LEVELS: dict[str, int] = {
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "step": logging.INFO,
}

_PREFIXES: dict[str, str] = {
    "success": "OK ",
    "step": "=== ",
}


class LoggingSink(LogSink):
    """Forward sink messages to the standard `mdassets` logger."""

    def __init__(self, log: logging.Logger | None = None):
        self.log = log or logger

    def emit(self, level: LogLevel, message: str) -> None:
        prefix = _PREFIXES.get(level, "")
        self.log.log(_LEVELS.get(level, logging.INFO), "%s%s", prefix, message)


class RecordingSink(LogSink):
    """Keep every message in memory."""

    def __init__(self) -> None:
        self.records: list[tuple[LogLevel, str]] = []

    def emit(self, level: LogLevel, message: str) -> None:
        self.records.append((level, message))

    def messages(self, level: LogLevel | None = None) -> list[str]:
        return [msg for lvl, msg in self.records if level is None or lvl == level]
