r"""Retry engine for message analysis calls.

Public API:
    - RetryDecider: Classifies attempt results into explicit outcomes
    - RetryStrategy: Calculates delays between attempts
    - AsyncRetryExecutor: Drives the attempt loop
"""

from __future__ import annotations

__all__ = [
    "AsyncRetryExecutor",
    "AttemptOutcome",
    "OutcomeKind",
    "RetryDecider",
    "RetryState",
    "RetryStrategy",
]

from chatads.retry.decider import AttemptOutcome, OutcomeKind, RetryDecider
from chatads.retry.executor_async import AsyncRetryExecutor, RetryState
from chatads.retry.strategy import RetryStrategy
