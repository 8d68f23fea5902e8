r"""Transport abstraction used to send one HTTP request.

The request executor only depends on the ``Transport`` protocol, so any
object with a compatible async ``send`` method can replace the default
``HttpxTransport``.
"""

from __future__ import annotations

__all__ = ["HttpxTransport", "Transport", "TransportResponse"]

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import httpx

if TYPE_CHECKING:
    from collections.abc import Mapping

    from chatads.utils.cancellation import CancellationToken


@dataclass(frozen=True)
class TransportResponse:
    """Status, headers and body text of one HTTP response."""

    status_code: int
    headers: dict[str, str] = field(default_factory=dict)
    text: str = ""

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300


@runtime_checkable
class Transport(Protocol):
    """Protocol of the primitive that sends one HTTP request.

    Implementations must honor ``cancel_token``: once it is cancelled,
    ``send`` should stop and raise ``TransportCancelledError``. A
    transport that holds resources outside the ``send`` task (a socket,
    a worker thread) can register a cleanup with
    ``cancel_token.add_callback``; the callback runs once, when the
    attempt deadline is reached. The executor also cancels the ``send``
    task itself at that point.
    """

    async def send(
        self,
        url: str,
        *,
        method: str,
        headers: Mapping[str, str],
        body: str,
        cancel_token: CancellationToken,
    ) -> TransportResponse: ...


class HttpxTransport:
    """Transport built on ``httpx.AsyncClient``.

    Args:
        client: Optional client to send requests with. If ``None``, a
            client is created on first use and closed by ``aclose``.
            A client passed in is never closed by the transport.

    Example:
        ```pycon
        >>> import asyncio
        >>> from chatads.transport import HttpxTransport
        >>> from chatads.utils import CancellationToken
        >>> async def main():  # doctest: +SKIP
        ...     transport = HttpxTransport()
        ...     try:
        ...         return await transport.send(
        ...             "https://api.getchatads.com/v1/chatads/messages",
        ...             method="POST",
        ...             headers={"content-type": "application/json"},
        ...             body='{"message": "hello"}',
        ...             cancel_token=CancellationToken(),
        ...         )
        ...     finally:
        ...         await transport.aclose()
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """

    def __init__(self, client: httpx.AsyncClient | None = None) -> None:
        self._client = client
        self._owns_client = client is None

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            # The executor enforces the per-attempt deadline
            self._client = httpx.AsyncClient(timeout=None)
        return self._client

    async def send(
        self,
        url: str,
        *,
        method: str,
        headers: Mapping[str, str],
        body: str,
        cancel_token: CancellationToken,
    ) -> TransportResponse:
        cancel_token.raise_if_cancelled()
        response = await self._ensure_client().request(
            method, url, headers=dict(headers), content=body
        )
        cancel_token.raise_if_cancelled()
        return TransportResponse(
            status_code=response.status_code,
            headers=dict(response.headers),
            text=response.text,
        )

    async def aclose(self) -> None:
        r"""Close the underlying client if the transport created it."""
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
