from __future__ import annotations

from typing import Any, Dict, Protocol

import aioboto3
import boto3


class Provider(Protocol):
    """Creates sessions and queue clients and talks to the queue on the poller's behalf."""

    def get_session(self, region: str) -> Any: ...

    def get_session_with_credentials(self, region: str, access_key_id: str, secret_key: str) -> Any: ...

    def get_async_session(self, region: str) -> Any: ...

    def get_async_session_with_credentials(self, region: str, access_key_id: str, secret_key: str) -> Any: ...

    def get_queue(self, session: Any) -> Any: ...

    def receive_messages(self, params: Dict[str, Any], client: Any) -> Dict[str, Any]: ...

    def delete_message(self, params: Dict[str, Any], client: Any) -> Dict[str, Any]: ...


class Boto3Provider:
    def get_session(self, region: str) -> boto3.session.Session:
        return boto3.session.Session(region_name=region)

    def get_session_with_credentials(
        self, region: str, access_key_id: str, secret_key: str
    ) -> boto3.session.Session:
        return boto3.session.Session(
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_key,
            region_name=region,
        )

    def get_async_session(self, region: str) -> aioboto3.Session:
        return aioboto3.Session(region_name=region)

    def get_async_session_with_credentials(
        self, region: str, access_key_id: str, secret_key: str
    ) -> aioboto3.Session:
        return aioboto3.Session(
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_key,
            region_name=region,
        )

    def get_queue(self, session: boto3.session.Session) -> Any:
        return session.client("sqs")

    def receive_messages(self, params: Dict[str, Any], client: Any) -> Dict[str, Any]:
        return client.receive_message(**params)

    def delete_message(self, params: Dict[str, Any], client: Any) -> Dict[str, Any]:
        return client.delete_message(**params)
