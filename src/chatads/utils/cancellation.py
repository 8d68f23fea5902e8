r"""Cooperative cancellation token for a single request attempt."""

from __future__ import annotations

__all__ = ["CancellationToken"]

import asyncio
from typing import TYPE_CHECKING

from chatads.exceptions import TransportCancelledError

if TYPE_CHECKING:
    from collections.abc import Callable


class CancellationToken:
    """Signal telling a transport to abandon its in-flight request.

    A fresh token is created for each attempt. Cancelling is idempotent:
    only the first call to ``cancel`` sets the token and runs the
    registered callbacks.

    Example:
        ```pycon
        >>> from chatads.utils import CancellationToken
        >>> token = CancellationToken()
        >>> token.cancelled
        False
        >>> token.cancel()
        >>> token.cancelled
        True

        ```
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._callbacks: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        if self._event.is_set():
            return
        self._event.set()
        callbacks, self._callbacks = self._callbacks, []
        for callback in callbacks:
            callback()

    def add_callback(self, callback: Callable[[], None]) -> None:
        """Register ``callback`` to run once when the token is cancelled.

        The callback runs immediately if the token is already cancelled.
        """
        if self._event.is_set():
            callback()
        else:
            self._callbacks.append(callback)

    async def wait(self) -> None:
        r"""Wait until the token is cancelled."""
        await self._event.wait()

    def raise_if_cancelled(self) -> None:
        """Raise ``TransportCancelledError`` if the token is cancelled."""
        if self._event.is_set():
            msg = "request was cancelled"
            raise TransportCancelledError(msg)
