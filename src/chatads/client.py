r"""Asynchronous client for the ChatAds message analysis API.

This module provides ``ChatAdsClient``, the entry point of the library.
It normalizes caller payloads, then hands the canonical body to the
retry engine, which sends it through the configured transport.
"""

from __future__ import annotations

__all__ = ["ChatAdsClient"]

from typing import TYPE_CHECKING, Any

from chatads.core.config import ClientConfig
from chatads.core.request_logic import RequestExecutor
from chatads.core.validation import validate_timeout
from chatads.exceptions import ChatAdsValidationError
from chatads.payload import build_payload, payload_from_message
from chatads.retry.executor_async import AsyncRetryExecutor
from chatads.transport import HttpxTransport

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType
    from typing import Self

    from chatads.models import FunctionItemPayload, ResponseEnvelope
    from chatads.transport import Transport


class ChatAdsClient:
    r"""Asynchronous client for the ChatAds message analysis API.

    Args:
        config: Optional ClientConfig instance. If ``None``, a config is
            built from ``**options``.
        **options: Keyword arguments for ``ClientConfig`` when no config
            is given (``api_key``, ``base_url``, ``max_retries``, ...).

    Raises:
        ChatAdsValidationError: If the configuration is invalid, or if
            both ``config`` and ``options`` are given.

    Example:
        ```pycon
        >>> import asyncio
        >>> from chatads import ChatAdsClient
        >>> async def main():  # doctest: +SKIP
        ...     async with ChatAdsClient(
        ...         api_key="cak_...", base_url="https://api.getchatads.com", max_retries=2
        ...     ) as client:
        ...         response = await client.analyze({"message": "I need a CRM"})
        ...         return response.data.offers
        ...
        >>> asyncio.run(main())  # doctest: +SKIP

        ```
    """

    def __init__(self, config: ClientConfig | None = None, **options: Any) -> None:
        if config is not None and options:
            msg = "pass either a ClientConfig or keyword options, not both"
            raise ChatAdsValidationError(msg)
        self._config = config if config is not None else ClientConfig(**options)
        self._owned_transport: HttpxTransport | None = None
        transport: Transport | None = self._config.transport
        if transport is None:
            self._owned_transport = HttpxTransport()
            transport = self._owned_transport
        self._executor = AsyncRetryExecutor(self._config, RequestExecutor(self._config, transport))

    @property
    def config(self) -> ClientConfig:
        return self._config

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the transport if the client created it.

        A transport supplied through the configuration is left open.
        """
        if self._owned_transport is not None:
            await self._owned_transport.aclose()

    async def analyze(
        self,
        payload: FunctionItemPayload | Mapping[str, Any],
        *,
        timeout: float | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> ResponseEnvelope:
        r"""Analyze a message.

        Args:
            payload: The request payload. Must contain a non-empty ``message``.
            timeout: Override the client's per-attempt timeout for this call.
            headers: Extra headers for this call. Names are lower-cased and
                win over the default headers.

        Returns:
            The normalized response envelope.

        Raises:
            ChatAdsValidationError: If the payload or the timeout is invalid.
                Raised before any network activity.
            ChatAdsAPIError: If the server reports an error.
            ChatAdsTimeoutError: If an attempt times out.
            ChatAdsSDKError: For any other failure.
        """
        if timeout is not None:
            validate_timeout(timeout)
        body = build_payload(payload)
        return await self._executor.execute(body, timeout=timeout, headers=headers)

    async def analyze_message(
        self,
        message: str,
        *,
        extra_fields: Mapping[str, Any] | None = None,
        timeout: float | None = None,
        headers: Mapping[str, str] | None = None,
        **options: Any,
    ) -> ResponseEnvelope:
        r"""Analyze a bare message with optional named fields.

        Option names are matched case-insensitively against known aliases
        (``fill_priority`` -> ``quality``, ``country_code`` -> ``country``,
        ...); unknown names are sent as-is.

        Args:
            message: The message to analyze.
            extra_fields: Optional free-form fields merged into the body.
            timeout: Override the client's per-attempt timeout for this call.
            headers: Extra headers for this call.
            **options: Optional request fields.

        Returns:
            The normalized response envelope.

        Example:
            ```pycon
            >>> import asyncio
            >>> from chatads import ChatAdsClient
            >>> async def main():  # doctest: +SKIP
            ...     async with ChatAdsClient.from_env() as client:
            ...         return await client.analyze_message(
            ...             "best laptop for programming", fill_priority="fast", country="US"
            ...         )
            ...
            >>> asyncio.run(main())  # doctest: +SKIP

            ```
        """
        payload = payload_from_message(message, extra_fields, **options)
        return await self.analyze(payload, timeout=timeout, headers=headers)

    @classmethod
    def from_env(cls, **overrides: Any) -> ChatAdsClient:
        r"""Create a client configured from the environment.

        See ``ClientConfig.from_env``.
        """
        return cls(ClientConfig.from_env(**overrides))
