r"""Interface shared by backoff strategies."""

from __future__ import annotations

__all__ = ["BaseBackoffStrategy"]

from abc import ABC, abstractmethod


class BaseBackoffStrategy(ABC):
    """Maps the index of a failed attempt to the pause before the next
    one."""

    @abstractmethod
    def calculate(self, attempt: int) -> float:
        """Return the pause in seconds after failed attempt ``attempt``.

        Args:
            attempt: Index of the attempt that just failed, starting at 0.
                ``calculate(0)`` is the pause before the first retry.
        """
