r"""Retry decision logic for classifying attempt results.

This module provides the ``RetryDecider`` class that turns the result of
one attempt into an explicit ``AttemptOutcome``: success, retryable
failure, or fatal failure.
"""

from __future__ import annotations

__all__ = ["AttemptOutcome", "OutcomeKind", "RetryDecider"]

import enum
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from chatads.exceptions import ChatAdsAPIError, ChatAdsSDKError, ChatAdsTimeoutError

if TYPE_CHECKING:
    from chatads.core.request_logic import AttemptResult
    from chatads.models import ResponseEnvelope

logger: logging.Logger = logging.getLogger(__name__)


class OutcomeKind(enum.Enum):
    SUCCESS = "success"
    RETRYABLE_FAILURE = "retryable_failure"
    FATAL_FAILURE = "fatal_failure"


@dataclass(frozen=True)
class AttemptOutcome:
    """Classified result of one attempt.

    Attributes:
        kind: The outcome category.
        envelope: The response envelope, for ``SUCCESS``.
        error: The error to raise for ``FATAL_FAILURE``, or the failure
            being retried for ``RETRYABLE_FAILURE``.
        reason: A short description used in debug logs.
        retry_after: The raw Retry-After header of the failed response, if any.
    """

    kind: OutcomeKind
    envelope: ResponseEnvelope | None = None
    error: Exception | None = None
    reason: str = ""
    retry_after: str | None = None


class RetryDecider:
    """Decides whether a failed attempt should be retried.

    Args:
        status_forcelist: Tuple of retryable HTTP status codes.
        max_retries: Maximum number of retries.

    Example:
        ```pycon
        >>> from chatads.core.request_logic import AttemptResult
        >>> from chatads.exceptions import ChatAdsAPIError
        >>> from chatads.retry import OutcomeKind, RetryDecider
        >>> decider = RetryDecider(status_forcelist=(429, 503), max_retries=2)
        >>> error = ChatAdsAPIError(status_code=429, response=None, headers={})
        >>> decider.classify(AttemptResult(error=error), attempt=0).kind
        <OutcomeKind.RETRYABLE_FAILURE: 'retryable_failure'>
        >>> decider.classify(AttemptResult(error=error), attempt=2).kind
        <OutcomeKind.FATAL_FAILURE: 'fatal_failure'>

        ```
    """

    def __init__(self, status_forcelist: tuple[int, ...], max_retries: int) -> None:
        self.status_forcelist = status_forcelist
        self.max_retries = max_retries

    def classify(self, result: AttemptResult, attempt: int) -> AttemptOutcome:
        """Classify the result of an attempt.

        Args:
            result: The result of the attempt.
            attempt: The attempt number (0-indexed).

        Returns:
            The classified outcome.
        """
        error = result.error
        if error is None:
            return AttemptOutcome(OutcomeKind.SUCCESS, envelope=result.envelope, reason="success")

        has_budget = attempt < self.max_retries
        if isinstance(error, ChatAdsTimeoutError):
            return AttemptOutcome(OutcomeKind.FATAL_FAILURE, error=error, reason="timeout")

        if isinstance(error, ChatAdsAPIError):
            if error.status_code not in self.status_forcelist:
                logger.debug(f"Status {error.status_code} is not retryable")
                return AttemptOutcome(
                    OutcomeKind.FATAL_FAILURE,
                    error=error,
                    reason=f"non-retryable status {error.status_code}",
                )
            if not has_budget:
                return AttemptOutcome(
                    OutcomeKind.FATAL_FAILURE, error=error, reason="max retries exhausted"
                )
            return AttemptOutcome(
                OutcomeKind.RETRYABLE_FAILURE,
                error=error,
                reason=f"status {error.status_code}",
                retry_after=error.retry_after,
            )

        if isinstance(error, ChatAdsSDKError):
            return AttemptOutcome(OutcomeKind.FATAL_FAILURE, error=error, reason="local error")

        # Raw transport failure
        if has_budget:
            return AttemptOutcome(
                OutcomeKind.RETRYABLE_FAILURE, error=error, reason=type(error).__name__
            )
        wrapped = ChatAdsSDKError("Unexpected error while calling ChatAds", error)
        wrapped.__cause__ = error
        return AttemptOutcome(
            OutcomeKind.FATAL_FAILURE, error=wrapped, reason="max retries exhausted"
        )
