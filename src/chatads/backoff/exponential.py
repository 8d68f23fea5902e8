r"""Exponential backoff strategy."""

from __future__ import annotations

__all__ = ["ExponentialBackoff"]

from chatads.backoff.base import BaseBackoffStrategy
from chatads.core.config import DEFAULT_BACKOFF_FACTOR


class ExponentialBackoff(BaseBackoffStrategy):
    """Exponential backoff strategy.

    Calculates delay as: base_delay * (2 ** attempt). A base delay of 0
    disables waiting entirely.

    Args:
        base_delay: The base delay in seconds (default: 0.5).

    Example:
        ```pycon
        >>> from chatads.backoff import ExponentialBackoff
        >>> backoff = ExponentialBackoff(base_delay=0.5)
        >>> backoff.calculate(0)  # Before the first retry
        0.5
        >>> backoff.calculate(1)  # Before the second retry
        1.0
        >>> backoff.calculate(2)
        2.0
        >>> ExponentialBackoff(base_delay=0).calculate(5)
        0.0

        ```
    """

    def __init__(self, base_delay: float = DEFAULT_BACKOFF_FACTOR) -> None:
        if base_delay < 0:
            msg = f"base_delay must be non-negative, got {base_delay}"
            raise ValueError(msg)
        self.base_delay = base_delay

    def calculate(self, attempt: int) -> float:
        if self.base_delay <= 0:
            return 0.0
        return self.base_delay * (2**attempt)
