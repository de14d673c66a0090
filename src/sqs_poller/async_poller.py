from __future__ import annotations

import inspect
import logging
import time
from contextlib import AsyncExitStack
from typing import Any, Callable, List, Optional, Union

from botocore.exceptions import BotoCoreError, ClientError

from sqs_poller.config import Configuration, merge_with_default_config
from sqs_poller.errors import DeleteError, HandlerNotRegisteredError, ReceiveError
from sqs_poller.logging_setup import PollingLogger
from sqs_poller.metrics import (
    errors_total,
    messages_deleted_total,
    messages_received_total,
    receive_latency_seconds,
)
from sqs_poller.poller import Handler, SqsMessage, as_handler
from sqs_poller.session import SESSION_ERRORS, get_async_session, session_failed


log = logging.getLogger("sqs_poller")


class AsyncSqsPoller:
    """asyncio flavour of SqsPoller; handle() may return an awaitable."""

    def __init__(
        self,
        config: Configuration,
        handler: Union[Handler, Callable[[str], Any], None],
        logger: Optional[PollingLogger] = None,
        session: Any = None,
    ) -> None:
        self.config = merge_with_default_config(config)
        self.handler = as_handler(handler)
        self.logger = logger or PollingLogger(log)

        # Create session once, reuse for all polls
        self.session = session if session is not None else get_async_session(self.config, self.logger)

    async def poll(self) -> int:
        if self.handler is None:
            raise HandlerNotRegisteredError("A message handler needs to be registered first!")

        self.logger.printf("Long polling on %s", self.config.queue_url)

        async with AsyncExitStack() as stack:
            client = await self._open_client(stack)
            messages = await self._receive(client)
            for m in messages:
                result = self.handler.handle(m.body)
                if inspect.isawaitable(result):
                    await result
                await self._delete(client, m.receipt_handle)

        self.logger.printf("Finished long polling after %d seconds", self.config.wait_time_seconds)
        return len(messages)

    async def _open_client(self, stack: AsyncExitStack) -> Any:
        try:
            return await stack.enter_async_context(
                self.session.client("sqs", region_name=self.config.region)
            )
        except SESSION_ERRORS as e:
            session_failed(self.config, self.logger, e)

    async def _receive(self, client: Any) -> List[SqsMessage]:
        t0 = time.perf_counter()
        try:
            resp = await client.receive_message(
                QueueUrl=self.config.queue_url,
                WaitTimeSeconds=self.config.wait_time_seconds,
                VisibilityTimeout=self.config.visibility_timeout,
                MaxNumberOfMessages=self.config.max_number_of_messages,
                AttributeNames=["All"],
            )
        except (BotoCoreError, ClientError) as e:
            errors_total.labels(stage="receive").inc()
            self.logger.error("sqs_receive_error queue=%s type=%s err=%s", self.config.queue_url, type(e).__name__, e)
            raise ReceiveError(f"receive failed on {self.config.queue_url}: {e}") from e
        finally:
            receive_latency_seconds.observe(time.perf_counter() - t0)

        msgs = [SqsMessage.from_response(m) for m in resp.get("Messages", [])]
        messages_received_total.inc(len(msgs))
        return msgs

    async def _delete(self, client: Any, receipt_handle: str) -> None:
        try:
            await client.delete_message(QueueUrl=self.config.queue_url, ReceiptHandle=receipt_handle)
        except (BotoCoreError, ClientError) as e:
            errors_total.labels(stage="delete").inc()
            self.logger.error("sqs_delete_error queue=%s type=%s err=%s", self.config.queue_url, type(e).__name__, e)
            raise DeleteError(f"delete failed on {self.config.queue_url}: {e}") from e
        messages_deleted_total.inc()
