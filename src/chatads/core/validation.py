r"""Parameter validation utilities for the ChatAds client configuration.

This module provides validation and normalization functions that are
applied when a ``ClientConfig`` is created and when per-call overrides
are supplied.
"""

from __future__ import annotations

__all__ = [
    "normalize_base_url",
    "normalize_endpoint",
    "validate_retry_params",
    "validate_timeout",
]

import httpx

from chatads.exceptions import ChatAdsValidationError


def validate_timeout(timeout: float) -> None:
    """Validate timeout parameter.

    Args:
        timeout: Maximum seconds to wait for one attempt. Must be > 0.

    Raises:
        ChatAdsValidationError: If timeout is <= 0.

    Example:
        ```pycon
        >>> from chatads.core.validation import validate_timeout
        >>> validate_timeout(10.0)
        >>> validate_timeout(0)  # doctest: +SKIP
        Traceback (most recent call last):
        ...
        chatads.exceptions.ChatAdsValidationError: timeout must be > 0, got 0

        ```
    """
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout <= 0:
        msg = f"timeout must be > 0, got {timeout}"
        raise ChatAdsValidationError(msg)


def validate_retry_params(max_retries: int, backoff_factor: float) -> None:
    """Validate retry parameters.

    Args:
        max_retries: Maximum number of retry attempts for failed requests.
            Must be >= 0. A value of 0 means no retries (only the initial attempt).
        backoff_factor: Base delay in seconds of the exponential backoff.
            Must be >= 0.

    Raises:
        ChatAdsValidationError: If max_retries or backoff_factor are negative.

    Example:
        ```pycon
        >>> from chatads.core.validation import validate_retry_params
        >>> validate_retry_params(max_retries=3, backoff_factor=0.5)
        >>> validate_retry_params(max_retries=-1, backoff_factor=0.5)  # doctest: +SKIP

        ```
    """
    if max_retries < 0:
        msg = f"max_retries must be >= 0, got {max_retries}"
        raise ChatAdsValidationError(msg)
    if backoff_factor < 0:
        msg = f"backoff_factor must be >= 0, got {backoff_factor}"
        raise ChatAdsValidationError(msg)


def normalize_base_url(raw: str | None) -> str:
    """Validate the API base URL and strip its trailing slash.

    Args:
        raw: The base URL. Must be an absolute ``https://`` URL.

    Returns:
        The normalized base URL.

    Raises:
        ChatAdsValidationError: If the URL is missing, malformed, or does
            not use the https scheme.

    Example:
        ```pycon
        >>> from chatads.core.validation import normalize_base_url
        >>> normalize_base_url(" https://api.example.com/ ")
        'https://api.example.com'

        ```
    """
    if not raw or not raw.strip():
        msg = "base_url is required"
        raise ChatAdsValidationError(msg)
    trimmed = raw.strip().rstrip("/")
    try:
        url = httpx.URL(trimmed)
    except httpx.InvalidURL as exc:
        msg = f"Invalid base_url: {raw}"
        raise ChatAdsValidationError(msg, exc) from exc
    if url.scheme != "https":
        msg = "base_url must start with https://"
        raise ChatAdsValidationError(msg)
    if not url.host:
        msg = f"Invalid base_url: {raw}"
        raise ChatAdsValidationError(msg)
    return trimmed


def normalize_endpoint(raw: str) -> str:
    """Ensure the endpoint path starts with a slash.

    Example:
        ```pycon
        >>> from chatads.core.validation import normalize_endpoint
        >>> normalize_endpoint("v1/chatads/messages")
        '/v1/chatads/messages'

        ```
    """
    if not raw.startswith("/"):
        return f"/{raw}"
    return raw
