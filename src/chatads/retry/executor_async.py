r"""Asynchronous retry executor for message analysis calls.

This module provides the ``AsyncRetryExecutor`` class that drives
repeated attempts until success, a non-retryable failure, or exhaustion
of the retry budget.
"""

from __future__ import annotations

__all__ = ["AsyncRetryExecutor", "RetryState"]

import asyncio
import enum
import logging
from typing import TYPE_CHECKING, Any

from chatads.retry.decider import OutcomeKind, RetryDecider
from chatads.retry.strategy import RetryStrategy

if TYPE_CHECKING:
    from collections.abc import Mapping

    from chatads.core.config import ClientConfig
    from chatads.core.request_logic import AttemptResult, RequestExecutor
    from chatads.models import ResponseEnvelope
    from chatads.retry.decider import AttemptOutcome

logger: logging.Logger = logging.getLogger(__name__)


class RetryState(enum.Enum):
    ATTEMPTING = "attempting"
    EVALUATING = "evaluating"
    WAITING = "waiting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class AsyncRetryExecutor:
    """Executes message analysis calls with automatic retry logic.

    The retry loop is an explicit state machine::

        ATTEMPTING -> EVALUATING -> SUCCEEDED
                                 -> FAILED
                                 -> WAITING -> ATTEMPTING

    Only one attempt is in flight at a time. The executor holds no
    per-call state, so one instance can serve concurrent calls.

    Args:
        config: The client configuration.
        request_executor: The executor performing single attempts.

    Attributes:
        config: The client configuration.
        request_executor: The executor performing single attempts.
        strategy: Strategy for calculating retry delays.
        decider: Logic for deciding whether to retry.
    """

    def __init__(self, config: ClientConfig, request_executor: RequestExecutor) -> None:
        self.config = config
        self.request_executor = request_executor
        self.strategy: RetryStrategy = RetryStrategy(config.backoff_factor)
        self.decider: RetryDecider = RetryDecider(config.status_forcelist, config.max_retries)

    async def execute(
        self,
        body: dict[str, Any],
        *,
        timeout: float | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> ResponseEnvelope:
        """Send the canonical body, retrying transient failures.

        Args:
            body: The canonical request body.
            timeout: Optional per-call timeout override in seconds.
            headers: Optional per-call extra headers.

        Returns:
            The response envelope of the successful attempt.

        Raises:
            ChatAdsAPIError: If the server reports a non-retryable error,
                or a retryable one after the retry budget is exhausted.
            ChatAdsTimeoutError: If an attempt times out.
            ChatAdsSDKError: For any other failure. Transport failures
                that outlast the retry budget are wrapped with the
                original exception as cause.
        """
        state = RetryState.ATTEMPTING
        attempt = 0
        result: AttemptResult | None = None
        outcome: AttemptOutcome | None = None

        while True:
            if state is RetryState.ATTEMPTING:
                result = await self.request_executor.send(
                    body, attempt_index=attempt, timeout=timeout, headers=headers
                )
                state = RetryState.EVALUATING

            elif state is RetryState.EVALUATING:
                outcome = self.decider.classify(result, attempt)
                if outcome.kind is OutcomeKind.SUCCESS:
                    state = RetryState.SUCCEEDED
                elif outcome.kind is OutcomeKind.FATAL_FAILURE:
                    state = RetryState.FAILED
                else:
                    state = RetryState.WAITING

            elif state is RetryState.WAITING:
                sleep_time = self.strategy.calculate_delay(attempt, outcome.retry_after)
                logger.debug(
                    f"POST to {self.config.url}: will retry ({outcome.reason}) "
                    f"after {sleep_time:.2f}s, attempt {attempt + 1}/{self.config.max_retries + 1}"
                )
                await asyncio.sleep(sleep_time)
                attempt += 1
                state = RetryState.ATTEMPTING

            elif state is RetryState.SUCCEEDED:
                return outcome.envelope

            else:
                logger.debug(
                    f"POST to {self.config.url} failed after {attempt + 1} attempts "
                    f"({outcome.reason})"
                )
                raise outcome.error
