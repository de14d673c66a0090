from typing import Any, Dict, List

import boto3
import pytest
from botocore.exceptions import NoRegionError
from botocore.stub import Stubber

from sqs_poller.provider import Boto3Provider


class RecordingHandler:
    def __init__(self) -> None:
        self.bodies: List[str] = []

    def handle(self, body: str) -> None:
        self.bodies.append(body)


class StubbedProvider(Boto3Provider):
    """Real boto3 sessions, but every queue call goes to one pre-built client."""

    def __init__(self, client: Any) -> None:
        self.client = client
        self.sessions: List[Dict[str, Any]] = []

    def get_session(self, region: str) -> Any:
        self.sessions.append({"region": region})
        return super().get_session(region)

    def get_session_with_credentials(self, region: str, access_key_id: str, secret_key: str) -> Any:
        self.sessions.append({"region": region, "access_key_id": access_key_id})
        return super().get_session_with_credentials(region, access_key_id, secret_key)

    def get_queue(self, session: Any) -> Any:
        return self.client


@pytest.fixture
def sqs_client():
    return boto3.client(
        "sqs",
        region_name="us-east-1",
        aws_access_key_id="testing",
        aws_secret_access_key="testing",
    )


@pytest.fixture
def stubber(sqs_client):
    with Stubber(sqs_client) as s:
        yield s
        s.assert_no_pending_responses()


@pytest.fixture
def provider(sqs_client):
    return StubbedProvider(sqs_client)


@pytest.fixture
def handler():
    return RecordingHandler()


class FailingProvider:
    def get_session(self, region: str) -> Any:
        raise NoRegionError()

    def get_session_with_credentials(self, region: str, access_key_id: str, secret_key: str) -> Any:
        raise NoRegionError()

    get_async_session = get_session
    get_async_session_with_credentials = get_session_with_credentials


@pytest.fixture
def failing_provider():
    return FailingProvider()
