r"""Utility functions for retry timing, cancellation, and log redaction.

This package provides helpers for parsing the Retry-After header,
per-attempt cancellation tokens, redacted views of request headers and
bodies, and structured logging.
"""

from __future__ import annotations

__all__ = [
    "CancellationToken",
    "StructuredFormatter",
    "clear_correlation_id",
    "get_correlation_id",
    "log_structured",
    "lowercase_headers",
    "parse_retry_after",
    "sanitize_headers",
    "sanitize_payload",
    "set_correlation_id",
]

from chatads.utils.cancellation import CancellationToken
from chatads.utils.retry_after import parse_retry_after
from chatads.utils.sanitize import lowercase_headers, sanitize_headers, sanitize_payload
from chatads.utils.structured_logging import (
    StructuredFormatter,
    clear_correlation_id,
    get_correlation_id,
    log_structured,
    set_correlation_id,
)
