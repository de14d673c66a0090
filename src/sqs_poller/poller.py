from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, NoReturn, Optional, Protocol, Type, Union

from botocore.exceptions import BotoCoreError, ClientError

from sqs_poller.config import Configuration, merge_with_default_config
from sqs_poller.errors import DeleteError, HandlerNotRegisteredError, PollerError, ReceiveError
from sqs_poller.logging_setup import PollingLogger
from sqs_poller.metrics import (
    errors_total,
    messages_deleted_total,
    messages_received_total,
    receive_latency_seconds,
)
from sqs_poller.session import get_queue, get_session


log = logging.getLogger("sqs_poller")


class Handler(Protocol):
    def handle(self, body: str) -> None: ...


class FunctionHandler:
    """Adapts a plain ``fn(body)`` callable to the Handler interface."""

    def __init__(self, fn: Callable[[str], Any]) -> None:
        self.fn = fn

    def handle(self, body: str) -> None:
        self.fn(body)


def as_handler(handler: Union[Handler, Callable[[str], Any], None]) -> Optional[Handler]:
    if handler is None or hasattr(handler, "handle"):
        return handler
    if callable(handler):
        return FunctionHandler(handler)
    raise TypeError(f"handler must have a handle(body) method or be callable, got {type(handler).__name__}")


@dataclass
class SqsMessage:
    receipt_handle: str
    body: str
    message_id: str = ""
    attributes: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_response(cls, m: Dict[str, Any]) -> "SqsMessage":
        return cls(
            receipt_handle=m["ReceiptHandle"],
            body=m.get("Body", ""),
            message_id=m.get("MessageId", ""),
            attributes=m.get("Attributes", {}),
        )


class SqsPoller:
    """
    Long-polls one SQS queue and hands every message body to a handler.

    Each call to poll() is a single receive -> handle -> delete cycle; run it
    in your own loop for continuous consumption. A message is deleted only
    after the handler returned; if the handler raises, the exception reaches
    the caller and the message becomes visible again after the visibility
    timeout.

    Queue failures raise ReceiveError/DeleteError. Pass exit_on_error=True to
    log them as fatal and terminate instead.
    """

    def __init__(
        self,
        config: Configuration,
        handler: Union[Handler, Callable[[str], Any], None],
        logger: Optional[PollingLogger] = None,
        *,
        exit_on_error: bool = False,
    ) -> None:
        self.config = merge_with_default_config(config)
        self.handler = as_handler(handler)
        self.logger = logger or PollingLogger(log)
        self.exit_on_error = exit_on_error

        try:
            self.session = get_session(self.config, self.logger)
            self.client = get_queue(self.config, self.session, self.logger)
        except PollerError as e:
            if exit_on_error:
                self.logger.fatal("session_error fatal err=%s", e)
            raise

    def poll(self) -> int:
        if self.handler is None:
            if self.exit_on_error:
                self.logger.fatal("A message handler needs to be registered first!")
            raise HandlerNotRegisteredError("A message handler needs to be registered first!")

        self.logger.printf("Long polling on %s", self.config.queue_url)

        messages = self.receive()
        for m in messages:
            self.handler.handle(m.body)
            self.delete(m.receipt_handle)

        self.logger.printf("Finished long polling after %d seconds", self.config.wait_time_seconds)
        return len(messages)

    def receive(self) -> List[SqsMessage]:
        params = {
            "QueueUrl": self.config.queue_url,
            "WaitTimeSeconds": self.config.wait_time_seconds,
            "VisibilityTimeout": self.config.visibility_timeout,
            "MaxNumberOfMessages": self.config.max_number_of_messages,
            "AttributeNames": ["All"],
        }
        t0 = time.perf_counter()
        try:
            resp = self.config.provider.receive_messages(params, self.client)
        except (BotoCoreError, ClientError) as e:
            self._fail(ReceiveError, "receive", e)
        finally:
            receive_latency_seconds.observe(time.perf_counter() - t0)

        msgs = [SqsMessage.from_response(m) for m in resp.get("Messages", [])]
        messages_received_total.inc(len(msgs))
        return msgs

    def delete(self, receipt_handle: str) -> None:
        params = {"QueueUrl": self.config.queue_url, "ReceiptHandle": receipt_handle}
        try:
            self.config.provider.delete_message(params, self.client)
        except (BotoCoreError, ClientError) as e:
            self._fail(DeleteError, "delete", e)
        messages_deleted_total.inc()

    def _fail(self, error_cls: Type[PollerError], stage: str, e: Exception) -> NoReturn:
        errors_total.labels(stage=stage).inc()
        if self.exit_on_error:
            self.logger.fatal("sqs_%s_error queue=%s type=%s err=%s", stage, self.config.queue_url, type(e).__name__, e)
        self.logger.error("sqs_%s_error queue=%s type=%s err=%s", stage, self.config.queue_url, type(e).__name__, e)
        raise error_cls(f"{stage} failed on {self.config.queue_url}: {e}") from e
