"""Tests for stocklens.utils.cache and stocklens.utils.rate_limiter."""

import pytest

from stocklens.utils.cache import SeriesCache
from stocklens.utils.rate_limiter import RateLimiter

HOUR = 3600


class _Clock:
    """Manually stepped clock."""

    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


class TestSeriesCache:

    def test_miss_on_empty(self):
        assert SeriesCache().get("AAPL", now=0) is None

    def test_read_your_writes_within_bucket(self, make_series):
        cache = SeriesCache(bucket_seconds=HOUR)
        series = make_series([1.0, 2.0], symbol="AAPL")
        cache.put("AAPL", series, now=10 * HOUR + 5)
        assert cache.get("AAPL", now=10 * HOUR + 3599) is series

    def test_expires_on_bucket_rollover(self, make_series):
        cache = SeriesCache(bucket_seconds=HOUR)
        cache.put("AAPL", make_series([1.0], symbol="AAPL"), now=10 * HOUR)
        assert cache.get("AAPL", now=11 * HOUR) is None

    def test_no_cross_symbol_interference(self, make_series):
        cache = SeriesCache()
        aapl = make_series([1.0], symbol="AAPL")
        tsla = make_series([2.0], symbol="TSLA")
        cache.put("AAPL", aapl, now=0)
        cache.put("TSLA", tsla, now=0)
        assert cache.get("AAPL", now=0) is aapl
        assert cache.get("TSLA", now=0) is tsla

    def test_last_write_wins(self, make_series):
        cache = SeriesCache()
        first = make_series([1.0], symbol="AAPL")
        second = make_series([2.0], symbol="AAPL")
        cache.put("AAPL", first, now=0)
        cache.put("AAPL", second, now=1)
        assert cache.get("AAPL", now=2) is second

    def test_uses_injected_clock(self, make_series):
        clock = _Clock(now=5 * HOUR)
        cache = SeriesCache(clock=clock)
        series = make_series([1.0], symbol="AAPL")
        cache.put("AAPL", series)
        assert cache.get("AAPL") is series
        clock.now += HOUR
        assert cache.get("AAPL") is None

    def test_new_bucket_write_sweeps_stale_entries(self, make_series):
        cache = SeriesCache()
        cache.put("AAPL", make_series([1.0], symbol="AAPL"), now=0)
        cache.put("TSLA", make_series([1.0], symbol="TSLA"), now=10)
        assert len(cache) == 2
        cache.put("MSFT", make_series([1.0], symbol="MSFT"), now=HOUR)
        assert len(cache) == 1

    def test_purge_stale_returns_count(self, make_series):
        cache = SeriesCache()
        cache.put("AAPL", make_series([1.0], symbol="AAPL"), now=0)
        assert cache.purge_stale(now=2 * HOUR) == 1
        assert len(cache) == 0

    def test_clear(self, make_series):
        cache = SeriesCache()
        cache.put("AAPL", make_series([1.0], symbol="AAPL"), now=0)
        cache.clear()
        assert len(cache) == 0

    def test_invalid_bucket_size(self):
        with pytest.raises(ValueError):
            SeriesCache(bucket_seconds=0)


class TestRateLimiter:

    def test_allows_up_to_budget(self):
        limiter = RateLimiter(calls_per_minute=2, clock=_Clock(0))
        assert limiter.try_acquire()
        assert limiter.try_acquire()
        assert not limiter.try_acquire()

    def test_window_slides(self):
        clock = _Clock(0)
        limiter = RateLimiter(calls_per_minute=1, clock=clock)
        assert limiter.try_acquire()
        clock.now = 30
        assert not limiter.try_acquire()
        clock.now = 60
        assert limiter.try_acquire()

    def test_remaining(self):
        limiter = RateLimiter(calls_per_minute=3, clock=_Clock(0))
        limiter.try_acquire()
        assert limiter.remaining == 2
