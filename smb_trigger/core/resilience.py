"""
Connection resilience and retry configuration module.

Provides tenacity-based retry strategies for handling transient
failures while connecting to a share (refused connections, timeouts).
"""

from __future__ import annotations

import logging

from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

logger = logging.getLogger(__name__)

# Failures worth another attempt; anything else is reported immediately
TRANSIENT_CONNECT_ERRORS = (ConnectionError, TimeoutError)


def create_connect_retry_decorator(
    max_attempts: int = 3,
    multiplier: float = 1,
    min_wait: float = 1,
    max_wait: float = 10,
):
    """
    Create a retry decorator for share connection attempts.

    Retries on:
    - ConnectionError (refused, reset, unreachable share root)
    - TimeoutError

    Strategy: Exponential backoff with configurable parameters.

    Args:
        max_attempts: Maximum number of attempts (default: 3)
        multiplier: Exponential backoff multiplier (default: 1)
        min_wait: Minimum wait time in seconds (default: 1)
        max_wait: Maximum wait time in seconds (default: 10)

    Returns:
        Configured tenacity retry decorator

    Example:
        @create_connect_retry_decorator(max_attempts=5)
        def connect():
            ...
    """
    return retry(
        retry=retry_if_exception_type(TRANSIENT_CONNECT_ERRORS),
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=multiplier, min=min_wait, max=max_wait),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )

