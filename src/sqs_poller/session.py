from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, NoReturn, Optional, Union

from botocore.exceptions import BotoCoreError, ClientError

from sqs_poller.config import Configuration
from sqs_poller.errors import SessionError
from sqs_poller.logging_setup import PollingLogger
from sqs_poller.metrics import errors_total


log = logging.getLogger(__name__)

SESSION_ERRORS = (BotoCoreError, ClientError, ValueError)


@dataclass(frozen=True)
class StaticCredentials:
    access_key_id: str
    secret_key: str = field(repr=False)


@dataclass(frozen=True)
class DefaultCredentialChain:
    """Environment, shared config files, then instance/role metadata, as botocore resolves them."""


CredentialSource = Union[StaticCredentials, DefaultCredentialChain]


def select_credentials(config: Configuration) -> CredentialSource:
    if config.access_key_id and config.secret_key:
        return StaticCredentials(config.access_key_id, config.secret_key)
    return DefaultCredentialChain()


def session_failed(config: Configuration, logger: Any, e: Exception) -> NoReturn:
    errors_total.labels(stage="session").inc()
    logger.error("session_error region=%s type=%s err=%s", config.region, type(e).__name__, e)
    raise SessionError(f"could not establish session for region {config.region!r}: {e}") from e


def get_session(config: Configuration, logger: Optional[Any] = None) -> Any:
    """
    Establish a session for ``config.region`` using the selected credential source.

    Errors from the provider are logged and raised as SessionError.
    """
    logger = logger or PollingLogger(log)
    source = select_credentials(config)
    provider = config.provider
    try:
        if isinstance(source, StaticCredentials):
            return provider.get_session_with_credentials(
                config.region, source.access_key_id, source.secret_key
            )
        return provider.get_session(config.region)
    except SESSION_ERRORS as e:
        session_failed(config, logger, e)


def get_queue(config: Configuration, session: Any, logger: Optional[Any] = None) -> Any:
    """Create the SQS client; a malformed region only surfaces here."""
    logger = logger or PollingLogger(log)
    try:
        return config.provider.get_queue(session)
    except SESSION_ERRORS as e:
        session_failed(config, logger, e)


def get_async_session(config: Configuration, logger: Optional[Any] = None) -> Any:
    logger = logger or PollingLogger(log)
    source = select_credentials(config)
    provider = config.provider
    try:
        if isinstance(source, StaticCredentials):
            return provider.get_async_session_with_credentials(
                config.region, source.access_key_id, source.secret_key
            )
        return provider.get_async_session(config.region)
    except SESSION_ERRORS as e:
        session_failed(config, logger, e)
