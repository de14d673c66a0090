import asyncio

import aioboto3
import pytest
from botocore.exceptions import ClientError

from sqs_poller.async_poller import AsyncSqsPoller
from sqs_poller.config import Configuration, merge_with_default_config
from sqs_poller.errors import DeleteError, HandlerNotRegisteredError, ReceiveError, SessionError
from sqs_poller.session import get_async_session


class FakeClient:
    def __init__(self, response, delete_error=None, receive_error=None):
        self.response = response
        self.delete_error = delete_error
        self.receive_error = receive_error
        self.calls = []

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False

    async def receive_message(self, **params):
        self.calls.append(("receive_message", params))
        if self.receive_error:
            raise self.receive_error
        return self.response

    async def delete_message(self, **params):
        self.calls.append(("delete_message", params))
        if self.delete_error:
            raise self.delete_error
        return {}


class FakeSession:
    def __init__(self, client):
        self._client = client
        self.regions = []

    def client(self, service_name, region_name=None):
        assert service_name == "sqs"
        self.regions.append(region_name)
        return self._client


def _client_error(op):
    return ClientError({"Error": {"Code": "AWS.SimpleQueueService.NonExistentQueue", "Message": "gone"}}, op)


CONFIG = Configuration(queue_url="q1", wait_time_seconds=10, max_number_of_messages=2)

TWO_MESSAGES = {
    "Messages": [
        {"MessageId": "m1", "ReceiptHandle": "r1", "Body": "A"},
        {"MessageId": "m2", "ReceiptHandle": "r2", "Body": "B"},
    ]
}


def test_receive_dispatch_delete(handler):
    client = FakeClient(TWO_MESSAGES)
    session = FakeSession(client)

    handled = asyncio.run(AsyncSqsPoller(CONFIG, handler, session=session).poll())

    assert handled == 2
    assert handler.bodies == ["A", "B"]
    assert client.calls == [
        (
            "receive_message",
            {
                "QueueUrl": "q1",
                "WaitTimeSeconds": 10,
                "VisibilityTimeout": 30,
                "MaxNumberOfMessages": 2,
                "AttributeNames": ["All"],
            },
        ),
        ("delete_message", {"QueueUrl": "q1", "ReceiptHandle": "r1"}),
        ("delete_message", {"QueueUrl": "q1", "ReceiptHandle": "r2"}),
    ]
    assert session.regions == ["us-east-1"]


def test_awaits_async_handler():
    seen = []

    class Handler:
        async def handle(self, body):
            await asyncio.sleep(0)
            seen.append(body)

    client = FakeClient(TWO_MESSAGES)

    asyncio.run(AsyncSqsPoller(CONFIG, Handler(), session=FakeSession(client)).poll())

    assert seen == ["A", "B"]


def test_empty_receive(handler):
    client = FakeClient({})

    handled = asyncio.run(AsyncSqsPoller(CONFIG, handler, session=FakeSession(client)).poll())

    assert handled == 0
    assert [name for name, _ in client.calls] == ["receive_message"]


def test_no_handler():
    client = FakeClient(TWO_MESSAGES)

    with pytest.raises(HandlerNotRegisteredError):
        asyncio.run(AsyncSqsPoller(CONFIG, None, session=FakeSession(client)).poll())

    assert client.calls == []


def test_receive_error(handler):
    client = FakeClient(TWO_MESSAGES, receive_error=_client_error("ReceiveMessage"))

    with pytest.raises(ReceiveError):
        asyncio.run(AsyncSqsPoller(CONFIG, handler, session=FakeSession(client)).poll())

    assert handler.bodies == []


def test_delete_error(handler):
    client = FakeClient(TWO_MESSAGES, delete_error=_client_error("DeleteMessage"))

    with pytest.raises(DeleteError):
        asyncio.run(AsyncSqsPoller(CONFIG, handler, session=FakeSession(client)).poll())

    assert handler.bodies == ["A"]


def test_async_session_static_credentials():
    cfg = merge_with_default_config(
        Configuration(queue_url="q1", region="eu-west-1", access_key_id="AKID", secret_key="secret")
    )

    session = get_async_session(cfg)

    assert isinstance(session, aioboto3.Session)
    assert session.region_name == "eu-west-1"


def test_async_session_default_chain():
    session = get_async_session(merge_with_default_config(Configuration(queue_url="q1", region="eu-west-1")))

    assert isinstance(session, aioboto3.Session)
    assert session.region_name == "eu-west-1"


def test_session_comes_from_the_provider(handler):
    client = FakeClient({})
    requested = []

    class Provider:
        def get_async_session_with_credentials(self, region, access_key_id, secret_key):
            requested.append((region, access_key_id))
            return FakeSession(client)

    cfg = Configuration(queue_url="q1", access_key_id="AKID", secret_key="secret", provider=Provider())

    asyncio.run(AsyncSqsPoller(cfg, handler).poll())

    assert requested == [("us-east-1", "AKID")]
    assert [name for name, _ in client.calls] == ["receive_message"]


def test_session_failure_at_construction(handler, failing_provider, caplog):
    with pytest.raises(SessionError):
        AsyncSqsPoller(Configuration(queue_url="q1", provider=failing_provider), handler)

    assert "session_error" in caplog.text


def test_malformed_region_is_a_session_error(handler, caplog):
    cfg = Configuration(queue_url="q1", region="not a region!", access_key_id="AKID", secret_key="secret")

    with pytest.raises(SessionError, match="not a region!"):
        asyncio.run(AsyncSqsPoller(cfg, handler).poll())

    assert handler.bodies == []
    assert "session_error" in caplog.text
