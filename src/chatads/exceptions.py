r"""Exception classes raised by the ChatAds client.

Two families of failures are distinguished. ``ChatAdsSDKError`` covers
everything that happens locally (bad configuration, invalid payloads,
timeouts, unparsable bodies, transport failures), while
``ChatAdsAPIError`` carries a response produced by the server.
"""

from __future__ import annotations

__all__ = [
    "ChatAdsAPIError",
    "ChatAdsSDKError",
    "ChatAdsTimeoutError",
    "ChatAdsValidationError",
    "TransportCancelledError",
]

from typing import Any


class ChatAdsSDKError(Exception):
    """Base class for all errors raised by the ChatAds client.

    Args:
        message: A human-readable description of the failure.
        cause: The optional underlying exception.

    Example:
        ```pycon
        >>> from chatads.exceptions import ChatAdsSDKError
        >>> error = ChatAdsSDKError("something went wrong")
        >>> error.message
        'something went wrong'
        >>> error.cause is None
        True

        ```
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause


class ChatAdsValidationError(ChatAdsSDKError, ValueError):
    """Raised when the configuration or a request payload is invalid."""


class ChatAdsTimeoutError(ChatAdsSDKError):
    """Raised when an attempt does not complete before its deadline.

    Args:
        timeout: The timeout in seconds that was exceeded.
        cause: The optional underlying exception.
    """

    def __init__(self, timeout: float, cause: BaseException | None = None) -> None:
        super().__init__(f"ChatAds request timed out after {timeout}s", cause)
        self.timeout = timeout


class ChatAdsAPIError(ChatAdsSDKError):
    """Raised when the server answers with an error.

    This covers non-2xx responses and, when the client is configured with
    ``raise_on_failure=True``, 2xx responses whose body reports a logical
    failure.

    Args:
        status_code: The HTTP status code of the response.
        response: The parsed response body, or ``None`` when there is none.
        headers: The response headers.
        request_body: The canonical request body that produced the error.
        url: The URL that was requested.

    Example:
        ```pycon
        >>> from chatads.exceptions import ChatAdsAPIError
        >>> error = ChatAdsAPIError(
        ...     status_code=429,
        ...     response={"error": {"code": "rate_limit", "message": "Slow down"}},
        ...     headers={"Retry-After": "2"},
        ... )
        >>> error.message
        'ChatAds API error 429: rate_limit: Slow down'
        >>> error.retry_after
        '2'

        ```
    """

    def __init__(
        self,
        status_code: int,
        response: dict[str, Any] | None,
        headers: dict[str, str],
        request_body: dict[str, Any] | None = None,
        url: str | None = None,
    ) -> None:
        error = response.get("error") if isinstance(response, dict) else None
        if isinstance(error, dict) and error:
            detail = f"{error.get('code')}: {error.get('message')}"
        else:
            detail = f"HTTP {status_code}"
        super().__init__(f"ChatAds API error {status_code}: {detail}")
        self.status_code = status_code
        self.response = response
        self.headers = headers
        self.request_body = request_body
        self.url = url

    @property
    def retry_after(self) -> str | None:
        r"""The raw value of the ``Retry-After`` response header, or
        ``None`` if absent."""
        for key, value in self.headers.items():
            if key.lower() == "retry-after":
                return value
        return None

    @property
    def error_code(self) -> str | None:
        r"""The application error code reported in the body, if any."""
        if not isinstance(self.response, dict):
            return None
        error = self.response.get("error")
        if isinstance(error, dict):
            return error.get("code")
        return None


class TransportCancelledError(Exception):
    r"""Raised by a transport that observed its cancellation token."""
