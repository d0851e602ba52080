"""Thin asyncio wrapper around the boto3 SQS client."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

import boto3
from botocore.config import Config

from blockip.core.config import Settings

logger = logging.getLogger(__name__)


class QueueClient(Protocol):
    async def get_queue_url(self, queue_name: str) -> str: ...

    async def send_message(self, queue_url: str, body: str) -> str: ...

    async def close(self) -> None: ...


class SqsQueueClient:
    """
    boto3 is blocking, so every call is pushed to a worker thread with
    asyncio.to_thread. Timeouts and retries belong to the botocore config.
    """

    def __init__(self, sqs_client: Any) -> None:
        self._sqs = sqs_client

    @classmethod
    def from_settings(cls, settings: Settings) -> SqsQueueClient:
        amazon = settings.amazon
        boto_config = Config(
            connect_timeout=settings.SQS_CONNECT_TIMEOUT,
            read_timeout=settings.SQS_READ_TIMEOUT,
            retries={"max_attempts": settings.SQS_MAX_ATTEMPTS},
        )
        logger.info("Initializing SQS client (boto3) for region=%s", amazon.region)
        sqs = boto3.client(
            "sqs",
            aws_access_key_id=amazon.access_key_id,
            aws_secret_access_key=amazon.access_key_secret,
            region_name=amazon.region,
            config=boto_config,
        )
        return cls(sqs)

    async def get_queue_url(self, queue_name: str) -> str:
        response = await asyncio.to_thread(self._sqs.get_queue_url, QueueName=queue_name)
        return response["QueueUrl"]

    async def send_message(self, queue_url: str, body: str) -> str:
        response = await asyncio.to_thread(
            self._sqs.send_message,
            QueueUrl=queue_url,
            MessageBody=body,
        )
        return response["MessageId"]

    async def close(self) -> None:
        await asyncio.to_thread(self._sqs.close)
