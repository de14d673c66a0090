"""
Poller exceptions.
"""


class PollerError(Exception):
    """Base exception for sqs_poller errors."""


class ConfigurationError(PollerError):
    """Raised when the poller configuration is invalid or missing."""


class SessionError(PollerError):
    """Raised when an AWS session cannot be established."""


class ReceiveError(PollerError):
    """Raised when receive_message fails."""


class DeleteError(PollerError):
    """Raised when delete_message fails."""


class HandlerNotRegisteredError(PollerError):
    """Raised when poll() is called on a poller without a handler."""
