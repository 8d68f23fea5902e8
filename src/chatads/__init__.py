r"""chatads - Async Python client for the ChatAds message analysis API.

The client sends a message to the ChatAds API and returns the affiliate
offers matched to it. Transient failures are retried transparently.

Key Features:
    - Payload validation before any network activity
    - Automatic retry of retryable statuses (408, 409, 425, 429, 500, 502, 503, 504)
    - Exponential backoff with Retry-After header support
    - Per-attempt timeout with cooperative cancellation
    - Distinct errors for server responses and local failures
    - Optional structured debug trace with the API key redacted

Example:
    ```pycon
    >>> import asyncio
    >>> from chatads import ChatAdsClient
    >>> async def main():  # doctest: +SKIP
    ...     async with ChatAdsClient(
    ...         api_key="cak_...", base_url="https://api.getchatads.com", max_retries=1
    ...     ) as client:
    ...         return await client.analyze({"message": "I need a CRM"})
    ...
    >>> asyncio.run(main())  # doctest: +SKIP

    ```
"""

from __future__ import annotations

__all__ = [
    "AnalyzeData",
    "ChatAdsAPIError",
    "ChatAdsClient",
    "ChatAdsSDKError",
    "ChatAdsTimeoutError",
    "ChatAdsValidationError",
    "ClientConfig",
    "ErrorInfo",
    "FunctionItemPayload",
    "HttpxTransport",
    "Offer",
    "ResponseEnvelope",
    "ResponseMeta",
    "Transport",
    "TransportCancelledError",
    "TransportResponse",
    "UsageInfo",
    "__version__",
]

from importlib.metadata import PackageNotFoundError, version

from chatads.client import ChatAdsClient
from chatads.core.config import ClientConfig
from chatads.exceptions import (
    ChatAdsAPIError,
    ChatAdsSDKError,
    ChatAdsTimeoutError,
    ChatAdsValidationError,
    TransportCancelledError,
)
from chatads.models import (
    AnalyzeData,
    ErrorInfo,
    FunctionItemPayload,
    Offer,
    ResponseEnvelope,
    ResponseMeta,
    UsageInfo,
)
from chatads.transport import HttpxTransport, Transport, TransportResponse

try:
    __version__ = version(__name__)
except PackageNotFoundError:  # pragma: no cover
    # Package is not installed, fallback if needed
    __version__ = "0.0.0"
