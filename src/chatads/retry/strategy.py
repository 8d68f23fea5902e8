r"""Retry strategy for calculating delays between attempts."""

from __future__ import annotations

__all__ = ["RetryStrategy"]

import logging

from chatads.backoff.exponential import ExponentialBackoff
from chatads.utils.retry_after import parse_retry_after

logger: logging.Logger = logging.getLogger(__name__)


class RetryStrategy:
    """Strategy for calculating the delay before the next attempt.

    A parsable Retry-After hint is used verbatim. Otherwise the delay
    follows ``ExponentialBackoff(backoff_factor)``.

    Args:
        backoff_factor: Base delay in seconds of the exponential backoff.

    Example:
        ```pycon
        >>> from chatads.retry import RetryStrategy
        >>> strategy = RetryStrategy(backoff_factor=0.1)
        >>> strategy.calculate_delay(0)
        0.1
        >>> strategy.calculate_delay(2)
        0.4
        >>> strategy.calculate_delay(2, retry_after="3")
        3.0

        ```
    """

    def __init__(self, backoff_factor: float) -> None:
        self.backoff_strategy = ExponentialBackoff(base_delay=backoff_factor)

    def calculate_delay(self, attempt: int, retry_after: str | None = None) -> float:
        """Calculate the delay before the next attempt.

        Args:
            attempt: The number of the failed attempt (0-indexed).
            retry_after: Optional raw Retry-After header value.

        Returns:
            Sleep time in seconds.
        """
        retry_after_sleep = parse_retry_after(retry_after)
        if retry_after_sleep is not None:
            logger.debug(f"Using Retry-After header value: {retry_after_sleep:.2f}s")
            return retry_after_sleep
        sleep_time = self.backoff_strategy.calculate(attempt)
        logger.debug(f"Waiting {sleep_time:.2f}s before retry")
        return sleep_time
