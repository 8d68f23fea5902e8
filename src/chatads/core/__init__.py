r"""Core configuration, validation, and single-attempt request logic.

This package contains the immutable client configuration and the
``RequestExecutor`` that performs exactly one network attempt.
"""

from __future__ import annotations

__all__ = [
    "DEFAULT_BACKOFF_FACTOR",
    "DEFAULT_BASE_URL",
    "DEFAULT_ENDPOINT",
    "DEFAULT_MAX_RETRIES",
    "DEFAULT_TIMEOUT",
    "RETRY_STATUS_CODES",
    "Attempt",
    "AttemptResult",
    "ClientConfig",
    "RequestExecutor",
    "normalize_base_url",
    "normalize_endpoint",
    "validate_retry_params",
    "validate_timeout",
]

from chatads.core.config import (
    DEFAULT_BACKOFF_FACTOR,
    DEFAULT_BASE_URL,
    DEFAULT_ENDPOINT,
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
    RETRY_STATUS_CODES,
    ClientConfig,
)
from chatads.core.request_logic import Attempt, AttemptResult, RequestExecutor
from chatads.core.validation import (
    normalize_base_url,
    normalize_endpoint,
    validate_retry_params,
    validate_timeout,
)
