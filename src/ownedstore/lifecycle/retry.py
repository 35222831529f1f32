"""Retrying store operations that hit a ConflictError.

Under the multi-threaded policy a conflict (usually a BorrowTimeoutError) is
transient: another caller holds the entry and will release it. These helpers
retry such calls with backoff. NotFoundError, PoisonedError and every other
error propagate immediately.

Usage (requires tenacity: pip install ownedstore[retry]):
    policy = ConflictRetryPolicy(max_attempts=5, backoff="exponential")
    retry_on_conflict(policy, store.update_in_place, task_id, mark_done)
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal

from ownedstore.config.logging_config import get_logger
from ownedstore.core.errors import ConflictError

# Optional tenacity import for retry functionality
try:
    import tenacity

    TENACITY_AVAILABLE = True
except ImportError:
    TENACITY_AVAILABLE = False

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ConflictRetryPolicy:
    """Configuration for retrying operations that lost an access race."""

    max_attempts: int = 3
    """Maximum attempts (1 = no retry)."""

    backoff: Literal["none", "linear", "exponential"] = "exponential"
    """Backoff strategy between retries."""

    base_delay: float = 0.01
    """Base delay in seconds for backoff calculation."""

    max_delay: float = 1.0
    """Upper bound for a single wait in seconds."""


def _log_retry(retry_state: tenacity.RetryCallState) -> None:
    log.debug(
        "Retrying %s after conflict (attempt %d): %s",
        getattr(retry_state.fn, "__name__", retry_state.fn),
        retry_state.attempt_number,
        retry_state.outcome.exception() if retry_state.outcome else None,
    )


def build_retryer(policy: ConflictRetryPolicy) -> tenacity.Retrying:
    """Build a tenacity retryer that only retries ConflictError."""
    if not TENACITY_AVAILABLE:
        msg = "Conflict retry requires tenacity. Install with: pip install ownedstore[retry]"
        raise ImportError(msg)

    wait: tenacity.wait.wait_base
    if policy.backoff == "exponential":
        wait = tenacity.wait_exponential(
            multiplier=policy.base_delay, min=policy.base_delay, max=policy.max_delay
        )
    elif policy.backoff == "linear":
        wait = tenacity.wait_incrementing(
            start=policy.base_delay, increment=policy.base_delay, max=policy.max_delay
        )
    else:
        wait = tenacity.wait_none()

    return tenacity.Retrying(
        stop=tenacity.stop_after_attempt(policy.max_attempts),
        wait=wait,
        retry=tenacity.retry_if_exception_type(ConflictError),
        before_sleep=_log_retry,
        reraise=True,
    )


def retry_on_conflict[**P, R](
    policy: ConflictRetryPolicy,
    fn: Callable[P, R],
    *args: P.args,
    **kwargs: P.kwargs,
) -> R:
    """Call fn, retrying while it raises ConflictError.

    Args:
        policy: Attempts and backoff.
        fn: Store operation (or any callable) to run.
        *args: Positional arguments for fn.
        **kwargs: Keyword arguments for fn.

    Returns:
        fn's result from the first successful attempt.

    Raises:
        ConflictError: The last conflict once attempts are exhausted.
    """
    if policy.max_attempts <= 1:
        return fn(*args, **kwargs)

    return build_retryer(policy)(fn, *args, **kwargs)
