"""Tests for the rate limiter."""

import threading
from datetime import timedelta

import pytest

from modules.rate_limiting import IRateLimiter, RateLimiter, RateLimitPolicy

WINDOW = timedelta(minutes=15)


class TestRateLimiter:
    @pytest.fixture
    def limiter(self, clock):
        return RateLimiter(clock=clock)

    def test_implements_interface(self, limiter):
        assert isinstance(limiter, IRateLimiter)

    def test_allows_up_to_max_attempts(self, limiter):
        results = [limiter.allow("login_a@uwaterloo.ca", 5, WINDOW) for _ in range(6)]
        assert results == [True] * 5 + [False]

    def test_denied_attempts_are_not_counted(self, limiter):
        for _ in range(8):
            limiter.allow("k", 2, WINDOW)
        assert limiter.peek("k").count == 2

    def test_keys_are_independent(self, limiter):
        for _ in range(5):
            limiter.allow("login_a", 5, WINDOW)
        assert limiter.allow("login_a", 5, WINDOW) is False
        assert limiter.allow("login_b", 5, WINDOW) is True

    def test_window_expiry_starts_fresh_window(self, limiter, clock):
        for _ in range(5):
            limiter.allow("k", 5, WINDOW)
        assert limiter.allow("k", 5, WINDOW) is False

        clock.advance(minutes=15, seconds=1)

        assert limiter.allow("k", 5, WINDOW) is True
        record = limiter.peek("k")
        assert record.count == 1
        assert record.window_start == clock()

    def test_window_boundary_is_inclusive(self, limiter, clock):
        """Exactly one window length later is still the same window."""
        for _ in range(5):
            limiter.allow("k", 5, WINDOW)
        clock.advance(minutes=15)
        assert limiter.allow("k", 5, WINDOW) is False

    def test_reset_clears_key(self, limiter):
        for _ in range(5):
            limiter.allow("k", 5, WINDOW)
        limiter.reset("k")
        assert limiter.peek("k") is None
        assert limiter.allow("k", 5, WINDOW) is True

    def test_reset_unknown_key_is_noop(self, limiter):
        limiter.reset("never-seen")

    def test_peek_returns_copy(self, limiter):
        limiter.allow("k", 5, WINDOW)
        limiter.peek("k").count = 100
        assert limiter.peek("k").count == 1

    def test_concurrent_allows_never_exceed_budget(self, limiter):
        allowed = []
        lock = threading.Lock()

        def attempt():
            ok = limiter.allow("k", 5, WINDOW)
            with lock:
                allowed.append(ok)

        threads = [threading.Thread(target=attempt) for _ in range(50)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert allowed.count(True) == 5

    def test_expired_records_are_swept(self, clock):
        limiter = RateLimiter(clock=clock, sweep_every=10)
        for i in range(9):
            limiter.allow(f"signup_user{i}@uwaterloo.ca", 5, WINDOW)
        limiter.allow("resend_a@uwaterloo.ca", 3, timedelta(hours=1))
        assert limiter.size() == 10

        clock.advance(minutes=16)
        for _ in range(10):
            limiter.allow("login_b@uwaterloo.ca", 5, WINDOW)

        # Records past their own window are gone; the hour-long one remains.
        assert limiter.size() == 2
        assert limiter.peek("signup_user0@uwaterloo.ca") is None
        assert limiter.peek("resend_a@uwaterloo.ca").count == 1


class TestRateLimitPolicy:
    def test_key_for(self):
        policy = RateLimitPolicy(key_prefix="login", max_attempts=5, window=WINDOW)
        assert policy.key_for("a@uwaterloo.ca") == "login_a@uwaterloo.ca"

    def test_rejects_zero_attempts(self):
        with pytest.raises(ValueError):
            RateLimitPolicy(key_prefix="login", max_attempts=0, window=WINDOW)
