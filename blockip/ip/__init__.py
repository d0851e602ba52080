# ./blockip/ip/__init__.py
"""
Block-IP notification services.

Usage:
    from blockip.ip import build_block_ip_service

    async with build_block_ip_service(settings) as service:
        await service.block_ip("203.0.113.7", permanent_block=False)
"""

from .block_ip_service import (
    BLOCK_IP_QUEUE_NAME,
    UNBLOCK_IP_QUEUE_NAME,
    DEBOUNCE_WINDOW,
    AmazonSqsBlockIpService,
    BlockedIpInfo,
    BlockIpService,
    NoopBlockIpService,
    QueueUrls,
    build_block_ip_service,
)
from .exceptions import BlockIpError, ConfigurationError

__all__ = [
    # Services
    'BlockIpService',
    'AmazonSqsBlockIpService',
    'NoopBlockIpService',
    'build_block_ip_service',

    # Data
    'BlockedIpInfo',
    'QueueUrls',
    'BLOCK_IP_QUEUE_NAME',
    'UNBLOCK_IP_QUEUE_NAME',
    'DEBOUNCE_WINDOW',

    # Exceptions
    'BlockIpError',
    'ConfigurationError',
]
