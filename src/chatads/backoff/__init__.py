r"""Backoff strategies for delays between retry attempts."""

from __future__ import annotations

__all__ = ["BaseBackoffStrategy", "ExponentialBackoff"]

from chatads.backoff.base import BaseBackoffStrategy
from chatads.backoff.exponential import ExponentialBackoff
