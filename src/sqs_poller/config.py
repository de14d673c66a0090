from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from typing import Any, Optional

from sqs_poller.errors import ConfigurationError

DEFAULT_REGION = "us-east-1"
DEFAULT_WAIT_TIME_SECONDS = 20
DEFAULT_VISIBILITY_TIMEOUT = 30
DEFAULT_MAX_NUMBER_OF_MESSAGES = 10


def _default_provider() -> Any:
    from sqs_poller.provider import Boto3Provider

    return Boto3Provider()


def _getenv(name: str, default: str | None = None) -> str:
    v = os.getenv(name, default)
    if v is None:
        raise ConfigurationError(f"Missing required env var: {name}")
    return v


def _getenv_int(name: str, default: int) -> int:
    v = os.getenv(name)
    if v is None or v.strip() == "":
        return default
    try:
        return int(v)
    except ValueError as e:
        raise ConfigurationError(f"Env var {name} must be an integer, got {v!r}") from e


@dataclass(frozen=True)
class Configuration:
    # queue
    queue_url: str
    region: Optional[str] = None

    # receive parameters; 0 means "use the default"
    wait_time_seconds: int = 0
    visibility_timeout: int = 0
    max_number_of_messages: int = 0

    # static credentials; empty means "use the default provider chain"
    access_key_id: str = ""
    secret_key: str = field(default="", repr=False)

    # session/client factory, swapped out in tests
    provider: Any = field(default_factory=_default_provider, repr=False, compare=False)

    @staticmethod
    def from_env() -> "Configuration":
        return Configuration(
            queue_url=_getenv("SQS_QUEUE_URL"),
            region=os.getenv("AWS_REGION") or None,
            wait_time_seconds=_getenv_int("SQS_WAIT_TIME_SECONDS", 0),
            visibility_timeout=_getenv_int("SQS_VISIBILITY_TIMEOUT_SECONDS", 0),
            max_number_of_messages=_getenv_int("SQS_MAX_NUMBER_OF_MESSAGES", 0),
            access_key_id=os.getenv("AWS_ACCESS_KEY_ID", ""),
            secret_key=os.getenv("AWS_SECRET_ACCESS_KEY", ""),
        )


def merge_with_default_config(config: Configuration) -> Configuration:
    """
    Return a copy of ``config`` with every unset field replaced by its default.

    Only the presence of the queue URL is checked, not its format.
    """
    if not config.queue_url:
        raise ConfigurationError("queue_url is required")

    for name in ("wait_time_seconds", "visibility_timeout", "max_number_of_messages"):
        value = getattr(config, name)
        if value is not None and value < 0:
            raise ConfigurationError(f"{name} must not be negative, got {value}")

    return replace(
        config,
        region=config.region or DEFAULT_REGION,
        wait_time_seconds=config.wait_time_seconds or DEFAULT_WAIT_TIME_SECONDS,
        visibility_timeout=config.visibility_timeout or DEFAULT_VISIBILITY_TIMEOUT,
        max_number_of_messages=config.max_number_of_messages or DEFAULT_MAX_NUMBER_OF_MESSAGES,
    )
