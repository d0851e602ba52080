# ./blockip/ip/exceptions.py
"""
Exceptions raised by the block-IP notifiers.

Transport failures are not wrapped here: errors from the SQS client
(botocore ClientError / BotoCoreError) reach the caller unchanged.
"""

import logging

logger = logging.getLogger(__name__)


class BlockIpError(Exception):
    """Base exception for block-IP notification errors."""


class ConfigurationError(BlockIpError, ValueError):
    """Raised when a notifier is built from incomplete settings or without a client."""

    def __init__(self, message: str, field: str = None):
        self.field = field
        super().__init__(message)
        logger.error(f"Block-IP configuration error: {message}")
