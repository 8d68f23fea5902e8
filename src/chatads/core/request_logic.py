r"""Single-attempt request logic.

This module contains the ``RequestExecutor`` that performs exactly one
network attempt: it builds the headers, arms the attempt deadline,
sends the canonical body through the transport, and turns the reply
into either a ``ResponseEnvelope`` or an error. Retry decisions are made
by the caller (see ``chatads.retry``).
"""

from __future__ import annotations

__all__ = ["EMPTY_BODY", "Attempt", "AttemptResult", "RequestExecutor"]

import asyncio
import copy
import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from chatads.exceptions import (
    ChatAdsAPIError,
    ChatAdsSDKError,
    ChatAdsTimeoutError,
    TransportCancelledError,
)
from chatads.models import UNKNOWN_REQUEST_ID, ResponseEnvelope
from chatads.utils.cancellation import CancellationToken
from chatads.utils.sanitize import (
    API_KEY_HEADER,
    lowercase_headers,
    sanitize_headers,
    sanitize_payload,
)
from chatads.utils.structured_logging import log_structured

if TYPE_CHECKING:
    from collections.abc import Mapping

    from chatads.core.config import ClientConfig
    from chatads.transport import Transport, TransportResponse

logger: logging.Logger = logging.getLogger(__name__)

# Body assumed when the server answers with an empty payload
EMPTY_BODY: dict[str, Any] = {"success": False, "meta": {"request_id": UNKNOWN_REQUEST_ID}}


@dataclass
class Attempt:
    """State of one attempt.

    Attributes:
        index: The attempt number (0-indexed).
        deadline: Loop clock time after which the attempt is cancelled.
        cancel_token: The token handed to the transport.
    """

    index: int
    deadline: float
    cancel_token: CancellationToken = field(default_factory=CancellationToken)

    def remaining(self) -> float:
        r"""Seconds left before the deadline, floored at 0."""
        return max(0.0, self.deadline - asyncio.get_running_loop().time())


@dataclass
class AttemptResult:
    """Result of one attempt.

    Exactly one of ``envelope`` and ``error`` is set. ``error`` is either
    a ``ChatAdsSDKError`` (including ``ChatAdsAPIError`` and
    ``ChatAdsTimeoutError``) or the raw exception raised by the transport.
    """

    envelope: ResponseEnvelope | None = None
    error: Exception | None = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class RequestExecutor:
    """Performs single attempts of the message analysis call.

    Args:
        config: The client configuration.
        transport: The transport used to send requests.

    Example:
        ```pycon
        >>> import asyncio
        >>> from chatads.core import ClientConfig, RequestExecutor
        >>> from chatads.transport import HttpxTransport
        >>> config = ClientConfig(api_key="cak_123", base_url="https://api.getchatads.com")
        >>> executor = RequestExecutor(config, HttpxTransport())
        >>> result = asyncio.run(
        ...     executor.send({"message": "hello"}, attempt_index=0)
        ... )  # doctest: +SKIP

        ```
    """

    def __init__(self, config: ClientConfig, transport: Transport) -> None:
        self.config = config
        self.transport = transport

    def build_headers(self, headers: Mapping[str, str] | None = None) -> dict[str, str]:
        """Build the request headers.

        Caller headers are lower-cased and win over the defaults.

        Example:
            ```pycon
            >>> from chatads.core import ClientConfig, RequestExecutor
            >>> from chatads.transport import HttpxTransport
            >>> config = ClientConfig(api_key="cak_123", base_url="https://api.example.com")
            >>> RequestExecutor(config, HttpxTransport()).build_headers({"X-Trace": "1"})
            {'content-type': 'application/json', 'x-api-key': 'cak_123', 'x-trace': '1'}

            ```
        """
        result = {"content-type": "application/json", API_KEY_HEADER: self.config.api_key}
        if self.config.user_agent:
            result["user-agent"] = self.config.user_agent
        result.update(lowercase_headers(headers))
        return result

    async def send(
        self,
        body: dict[str, Any],
        *,
        attempt_index: int,
        timeout: float | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> AttemptResult:
        """Perform one attempt.

        Local failures that can never succeed on retry (serialization) are
        raised. Every other failure is returned in the ``AttemptResult``
        for the retry engine to classify.

        Args:
            body: The canonical request body.
            attempt_index: The attempt number (0-indexed), for logging.
            timeout: Optional per-call timeout override in seconds.
            headers: Optional per-call extra headers.

        Returns:
            The result of the attempt.

        Raises:
            ChatAdsSDKError: If the body cannot be serialized as JSON.
        """
        url = self.config.url
        effective_timeout = timeout if timeout is not None else self.config.timeout
        request_headers = self.build_headers(headers)
        try:
            payload = json.dumps(body)
        except (TypeError, ValueError) as exc:
            msg = f"Failed to serialize ChatAds request body: {exc}"
            raise ChatAdsSDKError(msg, exc) from exc

        if self.config.logger is not None:
            log_structured(
                self.config.logger,
                logging.DEBUG,
                "ChatAds request",
                method="POST",
                url=url,
                attempt=attempt_index,
                headers=sanitize_headers(request_headers),
                body=sanitize_payload(body),
            )

        loop = asyncio.get_running_loop()
        attempt = Attempt(index=attempt_index, deadline=loop.time() + effective_timeout)
        timer = loop.call_later(effective_timeout, attempt.cancel_token.cancel)
        try:
            response = await self._send_with_deadline(
                url, request_headers, payload, attempt, effective_timeout
            )
        except ChatAdsTimeoutError as exc:
            logger.debug(f"POST request to {url} timed out on attempt {attempt_index + 1}")
            return AttemptResult(error=exc)
        except Exception as exc:  # noqa: BLE001
            logger.debug(
                f"POST request to {url} encountered {type(exc).__name__} on attempt "
                f"{attempt_index + 1} with {attempt.remaining():.3f}s left: {exc}"
            )
            return AttemptResult(error=exc)
        finally:
            timer.cancel()

        return self._classify(response, body, url)

    async def _send_with_deadline(
        self,
        url: str,
        headers: dict[str, str],
        payload: str,
        attempt: Attempt,
        timeout: float,
    ) -> TransportResponse:
        token = attempt.cancel_token
        send_task = asyncio.ensure_future(
            self.transport.send(
                url, method="POST", headers=headers, body=payload, cancel_token=token
            )
        )
        cancel_task = asyncio.ensure_future(token.wait())
        try:
            done, _ = await asyncio.wait(
                {send_task, cancel_task}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            cancel_task.cancel()
            if not send_task.done():
                send_task.cancel()
                # Reap the cancelled task so its outcome is not reported as unretrieved
                await asyncio.gather(send_task, return_exceptions=True)

        if send_task not in done or send_task.cancelled():
            raise ChatAdsTimeoutError(timeout)
        try:
            return send_task.result()
        except TransportCancelledError as exc:
            raise ChatAdsTimeoutError(timeout, exc) from exc

    def _classify(
        self, response: TransportResponse, body: dict[str, Any], url: str
    ) -> AttemptResult:
        try:
            parsed = self._parse_body(response.text)
        except ChatAdsSDKError as exc:
            return AttemptResult(error=exc)

        http_error = not response.is_success
        logical_error = (
            not http_error
            and self.config.raise_on_failure
            and self.config.failure_detector(parsed)
        )
        if http_error or logical_error:
            return AttemptResult(
                error=ChatAdsAPIError(
                    status_code=response.status_code,
                    response=parsed,
                    headers=dict(response.headers),
                    request_body=body,
                    url=url,
                )
            )
        return AttemptResult(envelope=ResponseEnvelope.from_dict(parsed))

    @staticmethod
    def _parse_body(text: str) -> dict[str, Any]:
        if not text:
            return copy.deepcopy(EMPTY_BODY)
        try:
            parsed = json.loads(text)
        except ValueError as exc:
            msg = "Failed to parse ChatAds response as JSON"
            raise ChatAdsSDKError(msg, exc) from exc
        if not isinstance(parsed, dict):
            msg = f"Expected a JSON object in ChatAds response, got {type(parsed).__name__}"
            raise ChatAdsSDKError(msg)
        return parsed
