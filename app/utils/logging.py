"""
Structured Logging Configuration

One-line log records for the HTTP edge, the workflow and the agent.
Callers attach request context through ``extra``; known context keys are
rendered as ``key=value`` pairs after the message:

    logger.info("Intake structured", extra={"step": "structure-intake"})
    # [2025-01-01T00:00:00+00:00] INFO     [agent.workflow] Intake structured step=structure-intake
"""
import logging
import sys
from typing import Optional
from datetime import datetime, timezone

# Record attributes rendered after the message, in this order
CONTEXT_FIELDS = ("step", "thread_id", "scorer", "origin")

_LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
_RESET = "\033[0m"


class StructuredFormatter(logging.Formatter):
    """UTC timestamp, padded level, logger name, message, context pairs."""

    def __init__(self, use_color: bool = True):
        super().__init__()
        self.use_color = use_color

    @staticmethod
    def context_suffix(record: logging.LogRecord) -> str:
        pairs = [
            f"{key}={getattr(record, key)}"
            for key in CONTEXT_FIELDS
            if getattr(record, key, None) is not None
        ]
        return (" " + " ".join(pairs)) if pairs else ""

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat()
        line = (
            f"[{timestamp}] {record.levelname:8} [{record.name}] "
            f"{record.getMessage()}{self.context_suffix(record)}"
        )
        if self.use_color and record.levelname in _LEVEL_COLORS:
            line = f"{_LEVEL_COLORS[record.levelname]}{line}{_RESET}"

        if record.exc_info:
            line += f"\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(level: str = "INFO", log_file: Optional[str] = None) -> None:
    """
    Configure the root logger for the service.

    Args:
        level: Level name; unknown names fall back to INFO.
        log_file: Optional path; the file gets the same lines without colour.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(StructuredFormatter(use_color=sys.stdout.isatty()))
    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(StructuredFormatter(use_color=False))
        root_logger.addHandler(file_handler)

    # httpx logs every Gemini round-trip at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Module logger (pass ``__name__``)."""
    return logging.getLogger(name)
