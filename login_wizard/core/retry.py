"""Retry strategy for the HTTP transport.

Only transport-level network failures are retried. Server answers (including
rate limiting) and flow errors are never retried.
"""

import logging

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
    wait_random,
)

from .exceptions import NetworkError

logger = logging.getLogger(__name__)


def get_network_retry(max_attempts: int = 1, backoff: float = 1.0):
    """
    Get retry strategy for network operations.

    Args:
        max_attempts: Total attempts per request (1 means no retry)
        backoff: Base delay in seconds between attempts

    Returns:
        Retry decorator configured for network errors
    """
    return retry(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=backoff, min=backoff, max=10 * backoff)
        + wait_random(0, backoff),
        retry=retry_if_exception_type(NetworkError),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
