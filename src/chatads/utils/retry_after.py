r"""Conversion of ``Retry-After`` hints into a delay in seconds."""

from __future__ import annotations

__all__ = ["parse_retry_after"]

import logging
import math
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime

logger: logging.Logger = logging.getLogger(__name__)


def _seconds_until(http_date: str) -> float | None:
    try:
        when = parsedate_to_datetime(http_date)
    except (ValueError, TypeError, OverflowError):
        return None
    if when.tzinfo is None:
        # RFC 9110 dates are always GMT
        when = when.replace(tzinfo=timezone.utc)
    return max(0.0, (when - datetime.now(timezone.utc)).total_seconds())


def parse_retry_after(value: str | None) -> float | None:
    """Turn the raw value of a ``Retry-After`` header into a delay.

    Both forms the header allows are understood: a number of seconds
    (``"2"``, ``"1.5"``) and an HTTP date. A date in the past yields 0.

    Args:
        value: The raw header value, or ``None`` when the response had
            no such header.

    Returns:
        The delay in seconds, or ``None`` when the value is missing,
        negative, not finite, or unparsable. ``None`` tells the caller to
        fall back to its own backoff.

    Example:
        ```pycon
        >>> from chatads.utils import parse_retry_after
        >>> parse_retry_after("2")
        2.0
        >>> parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT")
        0.0
        >>> parse_retry_after("-5") is None
        True
        >>> parse_retry_after("later") is None
        True

        ```
    """
    if value is None or not value.strip():
        return None
    text = value.strip()

    try:
        seconds = float(text)
    except ValueError:
        delay = _seconds_until(text)
        if delay is None:
            logger.debug(f"Ignoring unparsable Retry-After value {value!r}")
        return delay

    if math.isfinite(seconds) and seconds >= 0:
        return seconds
    logger.debug(f"Ignoring out-of-range Retry-After value {value!r}")
    return None
