r"""Configuration dataclass and defaults for the ChatAds client.

This module provides configuration constants and an immutable
dataclass-based configuration object shared by every call issued from
one ``ChatAdsClient``.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_BACKOFF_FACTOR",
    "DEFAULT_BASE_URL",
    "DEFAULT_ENDPOINT",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_TIMEOUT",
    "RETRY_STATUS_CODES",
    "ClientConfig",
]

import os
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from chatads.core.validation import (
    normalize_base_url,
    normalize_endpoint,
    validate_retry_params,
    validate_timeout,
)
from chatads.exceptions import ChatAdsValidationError
from chatads.models import is_logical_failure

if TYPE_CHECKING:
    import logging
    from collections.abc import Callable

    from chatads.transport import Transport

DEFAULT_BASE_URL = "https://api.getchatads.com"

# Versioned route of the message analysis call
DEFAULT_ENDPOINT = "/v1/chatads/messages"

# Default timeout in seconds for one attempt
DEFAULT_TIMEOUT = 10.0

# Default maximum number of retry attempts
# Total attempts = max_retries + 1 (initial attempt)
DEFAULT_MAX_RETRIES = 0

# Default backoff factor for exponential backoff
# Wait time = backoff_factor * (2 ** attempt)
# With 0.5: 1st retry waits 0.5s, 2nd waits 1.0s, 3rd waits 2.0s
DEFAULT_BACKOFF_FACTOR = 0.5

# HTTP status codes that should trigger automatic retry
# 408: Request Timeout
# 409: Conflict
# 425: Too Early
# 429: Too Many Requests - Rate limiting
# 500: Internal Server Error - Temporary server issue
# 502: Bad Gateway - Upstream server error
# 503: Service Unavailable - Server overloaded or down
# 504: Gateway Timeout - Upstream server timeout
RETRY_STATUS_CODES = (408, 409, 425, 429, 500, 502, 503, 504)


@dataclass(frozen=True)
class ClientConfig:
    """Configuration for the ChatAds client.

    The configuration is validated and normalized on creation and is
    immutable afterwards, so one instance can be shared by any number of
    concurrent calls.

    Args:
        api_key: The ChatAds API key. Sent in the ``x-api-key`` header and
            never logged unredacted.
        base_url: The API origin. Must use https. A trailing slash is stripped.
        endpoint: The path of the message analysis route. A leading slash
            is added if missing.
        timeout: Maximum seconds one attempt may take. Must be > 0.
        max_retries: Maximum number of retry attempts. Must be >= 0.
        status_forcelist: Tuple of HTTP status codes that should trigger a retry.
        backoff_factor: Base delay in seconds of the exponential backoff.
            Must be >= 0. A value of 0 disables waiting between attempts.
        raise_on_failure: If ``True``, a 2xx response whose body reports
            a logical failure raises ``ChatAdsAPIError``.
        failure_detector: Predicate deciding whether a 2xx body is a
            logical failure.
        transport: Optional transport override. Defaults to an
            ``HttpxTransport`` created by the client.
        logger: Optional logger receiving one structured debug record per
            attempt.
        user_agent: Optional value of the ``user-agent`` header.

    Raises:
        ChatAdsValidationError: If any parameter fails validation.

    Example:
        ```pycon
        >>> from chatads.core.config import ClientConfig
        >>> config = ClientConfig(api_key="cak_123", base_url="https://api.example.com/")
        >>> config.url
        'https://api.example.com/v1/chatads/messages'
        >>> config.max_retries
        0
        >>> merged = config.merge(max_retries=3)  # Override specific parameters
        >>> merged.max_retries
        3
        >>> config.max_retries  # Original unchanged
        0

        ```
    """

    api_key: str = field(default="", repr=False)
    base_url: str = ""
    endpoint: str = DEFAULT_ENDPOINT
    timeout: float = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    status_forcelist: tuple[int, ...] = RETRY_STATUS_CODES
    backoff_factor: float = DEFAULT_BACKOFF_FACTOR
    raise_on_failure: bool = False
    failure_detector: Callable[[dict[str, Any]], bool] = is_logical_failure
    transport: Transport | None = None
    logger: logging.Logger | None = None
    user_agent: str | None = None

    def __post_init__(self) -> None:
        """Validate and normalize configuration parameters.

        Raises:
            ChatAdsValidationError: If any parameter fails validation.
        """
        if not isinstance(self.api_key, str) or not self.api_key:
            msg = "api_key is required"
            raise ChatAdsValidationError(msg)
        validate_timeout(self.timeout)
        validate_retry_params(max_retries=self.max_retries, backoff_factor=self.backoff_factor)
        if self.transport is not None and not callable(getattr(self.transport, "send", None)):
            msg = "transport must provide an async send() method"
            raise ChatAdsValidationError(msg)
        # frozen dataclass: normalized values are written through object.__setattr__
        object.__setattr__(self, "base_url", normalize_base_url(self.base_url))
        object.__setattr__(self, "endpoint", normalize_endpoint(self.endpoint))
        object.__setattr__(self, "status_forcelist", tuple(self.status_forcelist))

    @property
    def url(self) -> str:
        r"""The full URL of the message analysis route."""
        return f"{self.base_url}{self.endpoint}"

    def merge(self, **overrides: Any) -> ClientConfig:
        """Create a new config with specified parameters overridden.

        Only non-None override values are applied.

        Args:
            **overrides: Keyword arguments for parameters to override.

        Returns:
            A new validated ClientConfig instance.

        Example:
            ```pycon
            >>> from chatads.core.config import ClientConfig
            >>> config = ClientConfig(api_key="cak_123", base_url="https://api.example.com")
            >>> config.merge(timeout=2.5, logger=None).timeout
            2.5

            ```
        """
        filtered_overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **filtered_overrides)

    @classmethod
    def from_env(cls, **overrides: Any) -> ClientConfig:
        """Create a config from the ``CHATADS_API_KEY`` and
        ``CHATADS_BASE_URL`` environment variables.

        Args:
            **overrides: Additional keyword arguments for ``ClientConfig``.
                An explicit ``api_key`` or ``base_url`` wins over the
                environment.

        Returns:
            A new validated ClientConfig instance.

        Raises:
            ChatAdsValidationError: If no API key is available.
        """
        api_key = overrides.pop("api_key", None) or os.environ.get("CHATADS_API_KEY")
        if not api_key:
            msg = "CHATADS_API_KEY environment variable is not set"
            raise ChatAdsValidationError(msg)
        base_url = (
            overrides.pop("base_url", None)
            or os.environ.get("CHATADS_BASE_URL")
            or DEFAULT_BASE_URL
        )
        return cls(api_key=api_key, base_url=base_url, **overrides)
