r"""Shared test helpers for the ChatAds client tests."""

from __future__ import annotations

__all__ = [
    "API_KEY",
    "BASE_URL",
    "ENDPOINT_URL",
    "HangingTransport",
    "RaisingTransport",
    "make_client",
    "make_config",
    "make_mock_async_client",
    "success_envelope",
]

import asyncio
from typing import TYPE_CHECKING, Any
from unittest.mock import AsyncMock, Mock

import httpx

from chatads import ChatAdsClient, ClientConfig, HttpxTransport

if TYPE_CHECKING:
    from collections.abc import Mapping

    from chatads.transport import TransportResponse
    from chatads.utils import CancellationToken

BASE_URL = "https://api.example.com"
API_KEY = "cak_test_key_123"
ENDPOINT_URL = f"{BASE_URL}/v1/chatads/messages"


def success_envelope(**overrides: Any) -> dict[str, Any]:
    """Return the body of a successful message analysis response."""
    envelope: dict[str, Any] = {
        "data": {
            "status": "filled",
            "offers": [
                {
                    "url": "https://example.com/crm",
                    "link_text": "Buy CRM",
                    "confidence_level": "high",
                }
            ],
            "requested": 1,
            "returned": 1,
        },
        "meta": {"request_id": "req_abc123"},
    }
    envelope.update(overrides)
    return envelope


def make_mock_async_client(*responses: httpx.Response | Exception) -> Mock:
    """Create a mock httpx.AsyncClient returning ``responses`` in order."""
    return Mock(
        spec=httpx.AsyncClient,
        request=AsyncMock(side_effect=list(responses)),
        aclose=AsyncMock(),
    )


def make_config(client: httpx.AsyncClient | None = None, **overrides: Any) -> ClientConfig:
    """Create a config for the test origin, optionally sending through
    ``client``."""
    options: dict[str, Any] = {"api_key": API_KEY, "base_url": BASE_URL}
    if client is not None:
        options["transport"] = HttpxTransport(client)
    options.update(overrides)
    return ClientConfig(**options)


def make_client(client: httpx.AsyncClient | None = None, **overrides: Any) -> ChatAdsClient:
    """Create a client for the test origin, optionally sending through
    ``client``."""
    return ChatAdsClient(make_config(client, **overrides))


class HangingTransport:
    """Transport whose requests never complete.

    It records how many requests were sent and how many times it was
    signaled to cancel.
    """

    def __init__(self) -> None:
        self.calls = 0
        self.cancellations = 0

    def _on_cancel(self) -> None:
        self.cancellations += 1

    async def send(
        self,
        url: str,
        *,
        method: str,
        headers: Mapping[str, str],
        body: str,
        cancel_token: CancellationToken,
    ) -> TransportResponse:
        self.calls += 1
        cancel_token.add_callback(self._on_cancel)
        await asyncio.Event().wait()
        msg = "unreachable"
        raise AssertionError(msg)


class RaisingTransport:
    """Transport raising ``error`` for every request."""

    def __init__(self, error: Exception) -> None:
        self.error = error
        self.calls = 0

    async def send(
        self,
        url: str,
        *,
        method: str,
        headers: Mapping[str, str],
        body: str,
        cancel_token: CancellationToken,
    ) -> TransportResponse:
        self.calls += 1
        raise self.error
