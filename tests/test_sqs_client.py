"""SQS queue client wrapper tests."""

from __future__ import annotations

from unittest.mock import MagicMock, patch

import pytest

from blockip.core.config import Settings
from blockip.integration.sqs.client import SqsQueueClient


class TestSqsQueueClient:
    def setup_method(self):
        self.sqs = MagicMock()
        self.client = SqsQueueClient(self.sqs)

    @pytest.mark.asyncio
    async def test_get_queue_url_returns_url(self):
        self.sqs.get_queue_url.return_value = {"QueueUrl": "https://sqs.example/block-ip"}

        url = await self.client.get_queue_url("block-ip")

        assert url == "https://sqs.example/block-ip"
        self.sqs.get_queue_url.assert_called_once_with(QueueName="block-ip")

    @pytest.mark.asyncio
    async def test_send_message_uses_ip_as_body(self):
        self.sqs.send_message.return_value = {"MessageId": "abc-123"}

        message_id = await self.client.send_message("https://sqs.example/block-ip", "1.2.3.4")

        assert message_id == "abc-123"
        self.sqs.send_message.assert_called_once_with(
            QueueUrl="https://sqs.example/block-ip",
            MessageBody="1.2.3.4",
        )

    @pytest.mark.asyncio
    async def test_errors_propagate(self):
        self.sqs.send_message.side_effect = RuntimeError("network down")

        with pytest.raises(RuntimeError, match="network down"):
            await self.client.send_message("https://sqs.example/block-ip", "1.2.3.4")

    @pytest.mark.asyncio
    async def test_close_closes_boto_client(self):
        await self.client.close()

        self.sqs.close.assert_called_once_with()


class TestFromSettings:
    def test_builds_boto_client_with_credentials_and_timeouts(self):
        settings = Settings(
            _env_file=None,
            AWS_ACCESS_KEY_ID="AKIAEXAMPLE",
            AWS_ACCESS_KEY_SECRET="secret",
            AWS_REGION="eu-west-1",
            SQS_CONNECT_TIMEOUT=3,
            SQS_READ_TIMEOUT=4,
            SQS_MAX_ATTEMPTS=2,
        )

        with patch("blockip.integration.sqs.client.boto3.client") as boto_client:
            SqsQueueClient.from_settings(settings)

        args, kwargs = boto_client.call_args
        assert args == ("sqs",)
        assert kwargs["aws_access_key_id"] == "AKIAEXAMPLE"
        assert kwargs["aws_secret_access_key"] == "secret"
        assert kwargs["region_name"] == "eu-west-1"

        config = kwargs["config"]
        assert config.connect_timeout == 3
        assert config.read_timeout == 4
        assert config.retries == {"max_attempts": 2}
