"""Block-IP notifiers that tell the external firewall which addresses to drop."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from blockip.core.config import AmazonSettings, Settings
from blockip.integration.sqs.client import QueueClient, SqsQueueClient
from blockip.ip.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

BLOCK_IP_QUEUE_NAME = "block-ip"
UNBLOCK_IP_QUEUE_NAME = "unblock-ip"
DEBOUNCE_WINDOW = timedelta(minutes=1)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class QueueUrls:
    block_ip: str
    unblock_ip: str


@dataclass(frozen=True, slots=True)
class BlockedIpInfo:
    """Last notification sent; repeats of it inside DEBOUNCE_WINDOW are dropped."""

    ip_address: str
    permanent_block: bool
    block_time: datetime

    def matches(self, ip_address: str, permanent_block: bool, now: datetime) -> bool:
        return (
            self.ip_address == ip_address
            and self.permanent_block == permanent_block
            and now - self.block_time < DEBOUNCE_WINDOW
        )


class BlockIpService(ABC):
    """Notifier interface. Implementations are async context managers."""

    @abstractmethod
    async def block_ip(self, ip_address: str, permanent_block: bool) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        return None

    async def __aenter__(self) -> BlockIpService:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()


class NoopBlockIpService(BlockIpService):
    async def block_ip(self, ip_address: str, permanent_block: bool) -> None:
        logger.debug("Block-IP notifications disabled; dropping ip=%s permanent=%s", ip_address, permanent_block)


def _validate_settings(settings: Optional[AmazonSettings]) -> None:
    for field in ("access_key_id", "access_key_secret", "region"):
        value = getattr(settings, field, None) if settings is not None else None
        if not (value or "").strip():
            raise ConfigurationError(f"Amazon setting '{field}' is required.", field=field)


class AmazonSqsBlockIpService(BlockIpService):
    """
    Publishes the IP to the "block-ip" queue and, unless the block is
    permanent, to the "unblock-ip" queue as well.

    Only the most recent (ip, permanent) pair is remembered. An identical
    call within DEBOUNCE_WINDOW returns without sending anything. The record
    is written before the sends, so a failed send still counts as handled
    for the rest of the window.

    Queue URLs are resolved once, on first use, and shared by every caller
    for the lifetime of the service. A failed resolution is shared as well.
    """

    def __init__(
        self,
        settings: AmazonSettings,
        client: QueueClient,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        _validate_settings(settings)
        if client is None:
            raise ConfigurationError("An SQS queue client is required.", field="client")

        self._client = client
        self._clock = clock
        self._queue_urls_task: Optional[asyncio.Task[QueueUrls]] = None
        self._last_blocked_ip: Optional[BlockedIpInfo] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> AmazonSqsBlockIpService:
        amazon = settings.amazon
        # Fail before boto3 gets a chance to build a client from bad values
        _validate_settings(amazon)
        return cls(amazon, SqsQueueClient.from_settings(settings))

    async def block_ip(self, ip_address: str, permanent_block: bool) -> None:
        now = self._clock()
        last = self._last_blocked_ip
        if last is not None and last.matches(ip_address, permanent_block, now):
            logger.debug("Already notified ip=%s permanent=%s recently, skipping", ip_address, permanent_block)
            return

        self._last_blocked_ip = BlockedIpInfo(ip_address, permanent_block, now)

        queue_urls = await self._get_queue_urls()
        message_id = await self._client.send_message(queue_urls.block_ip, ip_address)
        logger.info("Block message sent ip=%s message_id=%s", ip_address, message_id)

        if not permanent_block:
            message_id = await self._client.send_message(queue_urls.unblock_ip, ip_address)
            logger.info("Unblock message sent ip=%s message_id=%s", ip_address, message_id)

    async def close(self) -> None:
        await self._client.close()

    async def _get_queue_urls(self) -> QueueUrls:
        # No await between the check and the assignment: first caller wins.
        if self._queue_urls_task is None:
            self._queue_urls_task = asyncio.ensure_future(self._resolve_queue_urls())
        # Shielded so a cancelled caller does not cancel the shared lookup.
        return await asyncio.shield(self._queue_urls_task)

    async def _resolve_queue_urls(self) -> QueueUrls:
        block_ip_url = await self._client.get_queue_url(BLOCK_IP_QUEUE_NAME)
        unblock_ip_url = await self._client.get_queue_url(UNBLOCK_IP_QUEUE_NAME)
        logger.debug("Resolved queue urls block=%s unblock=%s", block_ip_url, unblock_ip_url)
        return QueueUrls(block_ip=block_ip_url, unblock_ip=unblock_ip_url)


def build_block_ip_service(settings: Settings) -> BlockIpService:
    """Pick the notifier for the given settings.

    SQS is used whenever an access key id is present; the other Amazon
    values are then mandatory. Without an access key id, or with
    BLOCK_IP_ENABLED off, notifications are dropped.
    """
    if not settings.BLOCK_IP_ENABLED:
        logger.info("Block-IP notifications disabled by BLOCK_IP_ENABLED")
        return NoopBlockIpService()

    if not settings.amazon.is_configured:
        logger.warning("No Amazon credentials configured. Using no-op block-IP notifier.")
        return NoopBlockIpService()

    return AmazonSqsBlockIpService.from_settings(settings)
