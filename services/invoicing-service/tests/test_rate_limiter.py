"""Tests for the in-memory sliding window rate limiter."""

from __future__ import annotations

import time

from invoicing.security.rate_limiter import SlidingWindowRateLimiter


def test_rate_limiter_allows_within_threshold():
    limiter = SlidingWindowRateLimiter(max_requests=3, window_seconds=1)
    key = "login:127.0.0.1"
    assert limiter.allow(key)
    assert limiter.allow(key)
    assert limiter.allow(key)


def test_rate_limiter_blocks_excess_per_key():
    limiter = SlidingWindowRateLimiter(max_requests=2, window_seconds=60)
    assert limiter.allow("register:a")
    assert limiter.allow("register:a")
    assert not limiter.allow("register:a")
    assert limiter.allow("register:b")


def test_rate_limiter_expires_entries():
    limiter = SlidingWindowRateLimiter(max_requests=1, window_seconds=1)
    key = "login:127.0.0.1"
    assert limiter.allow(key)
    assert not limiter.allow(key)
    time.sleep(1.1)
    assert limiter.allow(key)


def test_reset_clears_recorded_requests():
    limiter = SlidingWindowRateLimiter(max_requests=1, window_seconds=60)
    assert limiter.allow("a")
    assert limiter.allow("b")
    limiter.reset("a")
    assert limiter.allow("a")
    assert not limiter.allow("b")
    limiter.reset()
    assert limiter.allow("b")
