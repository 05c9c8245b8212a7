"""Bounded retry driver built on tenacity.

Each attempt reports its outcome as an ``Attempt`` value instead of raising,
so the driver decides between returning, retrying and giving up.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional

from tenacity import RetryError, Retrying, retry_if_result, stop_after_attempt, wait_fixed


class AttemptStatus(str, Enum):
    OK = "ok"
    RETRYABLE = "retryable"
    FATAL = "fatal"


@dataclass(frozen=True)
class Attempt:
    """Outcome of a single attempt."""

    status: AttemptStatus
    value: Any = None
    reason: str = ""

    @classmethod
    def ok(cls, value: Any) -> "Attempt":
        return cls(AttemptStatus.OK, value=value)

    @classmethod
    def retryable(cls, reason: str) -> "Attempt":
        return cls(AttemptStatus.RETRYABLE, reason=reason)

    @classmethod
    def fatal(cls, reason: str) -> "Attempt":
        return cls(AttemptStatus.FATAL, reason=reason)


class RetriesExhaustedError(RuntimeError):
    """Every attempt ended in a retryable failure."""

    def __init__(self, label: str, attempts: int, reason: str):
        super().__init__(f"{label} failed after {attempts} attempts: {reason}")
        self.label = label
        self.attempts = attempts
        self.reason = reason


class FatalAttemptError(RuntimeError):
    """An attempt failed in a way that retrying cannot fix."""


def is_retryable(outcome: Attempt) -> bool:
    return outcome.status == AttemptStatus.RETRYABLE


def run_with_retries(attempt_fn: Callable[[], Attempt], max_attempts: int = 3,
                     delay: float = 0.0, label: str = "request",
                     logger: Optional[logging.Logger] = None) -> Any:
    """Call attempt_fn until it succeeds or the attempt budget is spent.

    Args:
        attempt_fn: Zero-argument callable returning an Attempt
        max_attempts: Total number of attempts, including the first
        delay: Seconds to sleep between attempts
        label: Name used in log lines and errors
        logger: Logger instance

    Returns:
        Value of the first successful attempt

    Raises:
        RetriesExhaustedError: all attempts were retryable failures
        FatalAttemptError: an attempt reported a fatal failure
    """
    logger = logger or logging.getLogger(__name__)

    def log_failure(retry_state):
        outcome = retry_state.outcome.result()
        logger.warning(f"{label} attempt {retry_state.attempt_number}/{max_attempts} failed: {outcome.reason}")

    retrying = Retrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_fixed(delay),
        retry=retry_if_result(is_retryable),
        after=log_failure,
    )

    try:
        outcome = retrying(attempt_fn)
    except RetryError as e:
        last = e.last_attempt
        raise RetriesExhaustedError(label, last.attempt_number, last.result().reason) from e

    if outcome.status == AttemptStatus.FATAL:
        raise FatalAttemptError(f"{label}: {outcome.reason}")
    return outcome.value
