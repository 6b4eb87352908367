"""
Tests for the bounded readiness wait.
"""
import pytest

from moodlog.core.errors import ReviewNotReadyError
from moodlog.services.retry import retry_until


def _sequence(*values):
    it = iter(values)
    return lambda: next(it)


class TestRetryUntil:
    def test_first_value_accepted(self):
        waits = []
        assert retry_until(lambda: "ok", bool, sleep=waits.append) == "ok"
        assert waits == []

    def test_retries_until_ready(self):
        waits = []
        fetch = _sequence(None, "draft", "ready")
        result = retry_until(fetch, lambda v: v == "ready", attempts=3, backoff=2.0, sleep=waits.append)
        assert result == "ready"
        assert waits == [2.0, 2.0]

    def test_exhausted(self):
        with pytest.raises(ReviewNotReadyError) as exc:
            retry_until(lambda: None, bool, attempts=2, backoff=1.0, sleep=lambda s: None)
        assert exc.value.http_status == 503
        assert exc.value.details == {"attempts": 2, "reason": "exhausted"}

    def test_timeout_stops_before_overrunning(self):
        waits = []
        clock = _sequence(0.0, 0.0, 2.0)
        with pytest.raises(ReviewNotReadyError) as exc:
            retry_until(lambda: None, bool, attempts=5, backoff=2.0, timeout=3.0,
                        sleep=waits.append, clock=clock)
        assert waits == [2.0]
        assert exc.value.details == {"attempts": 2, "reason": "timeout"}

    def test_at_least_one_attempt(self):
        calls = []

        def fetch():
            calls.append(1)
            return None

        with pytest.raises(ReviewNotReadyError):
            retry_until(fetch, bool, attempts=0, sleep=lambda s: None)
        assert len(calls) == 1
