"""Tests for retrying conflicted operations."""

import logging

import pytest

from ownedstore import (
    BorrowTimeoutError,
    ConflictError,
    ConflictRetryPolicy,
    NotFoundError,
    retry_on_conflict,
)
from ownedstore.lifecycle.retry import build_retryer


def _flaky(failures, error=ConflictError):
    calls = []

    def _call(value):
        calls.append(value)
        if len(calls) <= failures:
            raise error("busy")
        return value * 2

    return _call, calls


def test_retries_conflicts_until_success():
    fn, calls = _flaky(failures=2)
    policy = ConflictRetryPolicy(max_attempts=3, backoff="none")

    assert retry_on_conflict(policy, fn, 21) == 42
    assert len(calls) == 3


def test_reraises_last_conflict_when_exhausted():
    fn, calls = _flaky(failures=5, error=BorrowTimeoutError)
    policy = ConflictRetryPolicy(max_attempts=2, backoff="none")

    with pytest.raises(BorrowTimeoutError):
        retry_on_conflict(policy, fn, 1)
    assert len(calls) == 2


def test_not_found_is_not_retried():
    fn, calls = _flaky(failures=5, error=NotFoundError)
    policy = ConflictRetryPolicy(max_attempts=5, backoff="none")

    with pytest.raises(NotFoundError):
        retry_on_conflict(policy, fn, 1)
    assert len(calls) == 1


def test_single_attempt_calls_directly():
    fn, calls = _flaky(failures=1)

    with pytest.raises(ConflictError):
        retry_on_conflict(ConflictRetryPolicy(max_attempts=1), fn, 1)
    assert len(calls) == 1


def test_kwargs_are_forwarded():
    policy = ConflictRetryPolicy(max_attempts=2, backoff="none")
    assert retry_on_conflict(policy, lambda a, b=0: a + b, 1, b=2) == 3


@pytest.mark.parametrize("backoff", ["none", "linear", "exponential"])
def test_build_retryer_for_each_backoff(backoff):
    retryer = build_retryer(ConflictRetryPolicy(max_attempts=4, backoff=backoff, base_delay=0))
    assert retryer.stop is not None


def test_each_retry_is_logged(caplog):
    caplog.set_level(logging.DEBUG, logger="ownedstore")
    fn, calls = _flaky(failures=2)

    assert retry_on_conflict(ConflictRetryPolicy(max_attempts=3, backoff="none"), fn, 1) == 2
    retries = [r for r in caplog.records if "after conflict" in r.getMessage()]
    assert len(retries) == 2
