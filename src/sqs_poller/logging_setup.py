import json
import logging
import sys
import time
from typing import Any

POLL_LIFECYCLE = "poll_lifecycle"

_LIFECYCLE_PHRASES = ("Finished long polling", "Long polling")


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": time.time(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        category = getattr(record, "category", None)
        if category:
            payload["category"] = category
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


class PollLifecycleFilter(logging.Filter):
    """Drops records tagged with the poll lifecycle category."""

    def filter(self, record: logging.LogRecord) -> bool:
        return getattr(record, "category", None) != POLL_LIFECYCLE


class PollingLogger:
    """
    Wraps a logger so the per-poll "Long polling ..." / "Finished long polling ..."
    lines stay out of the output while everything else passes through.

    With suppress_lifecycle=False those lines are forwarded instead, tagged
    with category=poll_lifecycle so a PollLifecycleFilter can drop them.
    """

    def __init__(self, logger: logging.Logger, suppress_lifecycle: bool = True) -> None:
        self.logger = logger
        self.suppress_lifecycle = suppress_lifecycle

    def printf(self, fmt: str, *args: Any) -> None:
        if any(phrase in fmt for phrase in _LIFECYCLE_PHRASES):
            if self.suppress_lifecycle:
                return
            self.logger.info(fmt, *args, extra={"category": POLL_LIFECYCLE})
            return
        self.logger.info(fmt, *args)

    def error(self, fmt: str, *args: Any, exc_info: Any = None) -> None:
        self.logger.error(fmt, *args, exc_info=exc_info)

    def fatal(self, fmt: str, *args: Any) -> None:
        self.logger.critical(fmt, *args)
        raise SystemExit(1)


def setup_logging(level: str) -> None:
    root = logging.getLogger()
    root.setLevel(level.upper())

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JsonFormatter())

    root.handlers.clear()
    root.addHandler(handler)
