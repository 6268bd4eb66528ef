"""Shared pytest fixtures for the StockLens test suite.

Provides deterministic price series and provider-shaped payloads.
All fixtures are independent of external APIs.
"""

from datetime import date, datetime, timedelta, timezone

import numpy as np
import pytest

from stocklens.models import PriceSeries

FIXED_NOW = 1_718_000_000.0  # an arbitrary instant, mid-bucket
FIXED_TODAY = date(2024, 6, 28)


def _build_series(prices, symbol="TEST", highs=None, lows=None, volumes=None,
                  start=date(2024, 1, 1), is_demo=False):
    n = len(prices)
    return PriceSeries(
        symbol=symbol,
        dates=[start + timedelta(days=i) for i in range(n)],
        prices=list(prices),
        highs=list(highs) if highs is not None else [p * 1.01 for p in prices],
        lows=list(lows) if lows is not None else [p * 0.99 for p in prices],
        volumes=list(volumes) if volumes is not None else [1_000_000] * n,
        last_update=datetime(2024, 6, 28, tzinfo=timezone.utc),
        is_demo=is_demo,
    )


# ---------------------------------------------------------------------------
# 1. Series builders
# ---------------------------------------------------------------------------

@pytest.fixture
def make_series():
    """Factory fixture: ``make_series(prices, **overrides) -> PriceSeries``."""
    return _build_series


@pytest.fixture
def sample_series():
    """30-day random-walk series seeded at 42, starting near 150."""
    rng = np.random.default_rng(42)
    close = 150.0 * np.cumprod(1 + rng.uniform(-0.02, 0.02, 30))
    prices = [round(float(p), 2) for p in close]
    return _build_series(
        prices,
        symbol="AAPL",
        highs=[round(p * 1.01, 2) for p in prices],
        lows=[round(p * 0.99, 2) for p in prices],
    )


@pytest.fixture
def rising_series():
    """30 prices climbing by exactly 1.0 from 100."""
    return _build_series([100.0 + i for i in range(30)], symbol="UP")


# ---------------------------------------------------------------------------
# 2. Provider payloads (newest first, as the providers send them)
# ---------------------------------------------------------------------------

def _trading_days(n, end=FIXED_TODAY):
    return [end - timedelta(days=i) for i in range(n)]


@pytest.fixture
def alpha_vantage_payload():
    """40 sessions keyed by date, newest first. Close on day i = 100 + i."""
    days = _trading_days(40)
    series = {}
    for i, d in enumerate(days):
        close = 100.0 + (len(days) - 1 - i)
        series[d.isoformat()] = {
            "1. open": f"{close:.4f}",
            "2. high": f"{close + 1:.4f}",
            "3. low": f"{close - 1:.4f}",
            "4. close": f"{close:.4f}",
            "5. volume": str(2_000_000 + i),
        }
    return {"Meta Data": {"2. Symbol": "AAPL"}, "Time Series (Daily)": series}


@pytest.fixture
def fmp_payload():
    """35 sessions, newest first, with no high/low/volume on the newest bar."""
    days = _trading_days(35)
    historical = []
    for i, d in enumerate(days):
        close = 50.0 + (len(days) - 1 - i) * 0.5
        bar = {"date": d.isoformat(), "close": close}
        if i > 0:
            bar.update({"high": close + 0.5, "low": close - 0.5, "volume": 3_000_000})
        historical.append(bar)
    return {"symbol": "MSFT", "historical": historical}


@pytest.fixture
def yahoo_payload():
    """35 sessions ascending; the bar 3 sessions back has a null close."""
    days = sorted(_trading_days(35))
    timestamps = [
        int(datetime(d.year, d.month, d.day, 14, 30, tzinfo=timezone.utc).timestamp())
        for d in days
    ]
    close = [200.0 + i for i in range(35)]
    close[-3] = None
    return {
        "chart": {
            "result": [{
                "meta": {"symbol": "TSLA"},
                "timestamp": timestamps,
                "indicators": {"quote": [{
                    "close": close,
                    "high": [None if c is None else c + 2 for c in close],
                    "low": [None if c is None else c - 2 for c in close],
                    "volume": [5_000_000] * 35,
                }]},
            }],
            "error": None,
        }
    }


@pytest.fixture
def polygon_payload():
    days = sorted(_trading_days(32))
    results = [
        {
            "t": int(datetime(d.year, d.month, d.day, tzinfo=timezone.utc).timestamp() * 1000),
            "c": 10.0 + i,
            "h": 10.5 + i,
            "l": 9.5 + i,
            "v": 700_000,
        }
        for i, d in enumerate(days)
    ]
    return {"status": "OK", "ticker": "ASML", "resultsCount": len(results), "results": results}
