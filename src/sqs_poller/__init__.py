from sqs_poller.async_poller import AsyncSqsPoller
from sqs_poller.config import Configuration, merge_with_default_config
from sqs_poller.errors import (
    ConfigurationError,
    DeleteError,
    HandlerNotRegisteredError,
    PollerError,
    ReceiveError,
    SessionError,
)
from sqs_poller.logging_setup import PollingLogger, PollLifecycleFilter
from sqs_poller.poller import FunctionHandler, Handler, SqsMessage, SqsPoller
from sqs_poller.provider import Boto3Provider, Provider
from sqs_poller.session import (
    DefaultCredentialChain,
    StaticCredentials,
    get_async_session,
    get_queue,
    get_session,
    select_credentials,
)

__all__ = [
    "AsyncSqsPoller",
    "Boto3Provider",
    "Configuration",
    "ConfigurationError",
    "DefaultCredentialChain",
    "DeleteError",
    "FunctionHandler",
    "Handler",
    "HandlerNotRegisteredError",
    "PollLifecycleFilter",
    "PollerError",
    "PollingLogger",
    "Provider",
    "ReceiveError",
    "SessionError",
    "SqsMessage",
    "SqsPoller",
    "StaticCredentials",
    "get_async_session",
    "get_queue",
    "get_session",
    "merge_with_default_config",
    "select_credentials",
]
