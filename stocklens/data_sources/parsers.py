"""Payload parsers: provider JSON -> canonical PriceSeries.

Each parser is pure. It raises ``ProviderFailure`` when the payload is not
usable, and otherwise returns the most recent ``HISTORY_DAYS`` sessions,
oldest first, with every aligned column fully populated.
"""

from __future__ import annotations

from typing import Any

import numpy as np
import pandas as pd

from stocklens.config import setting
from stocklens.errors import ProviderFailure
from stocklens.models import PriceSeries

HISTORY_DAYS: int = setting("data.history_days", 30)
DEFAULT_VOLUME: int = setting("data.default_volume", 1_000_000)

_COLUMNS = ["date", "close", "high", "low", "volume"]

# Keys Alpha Vantage uses instead of data when a request is refused
_AV_LIMIT_KEYS = ("Note", "Information")


def _epoch_dates(values: list, unit: str) -> pd.Series:
    """Epoch numbers to naive UTC calendar dates; anything unparseable becomes NaT."""
    numeric = pd.to_numeric(pd.Series(values, dtype="object"), errors="coerce")
    numeric = numeric.where(np.isfinite(numeric))
    dates = pd.to_datetime(numeric, unit=unit, utc=True, errors="coerce")
    return dates.dt.tz_convert(None).dt.normalize()


def normalize_frame(
    df: pd.DataFrame,
    symbol: str,
    provider: str,
    history_days: int = HISTORY_DAYS,
    default_volume: int = DEFAULT_VOLUME,
) -> PriceSeries:
    """Clean a ``date/close/high/low/volume`` frame into a PriceSeries.

    Rows without a usable close are dropped. Missing highs and lows fall back
    to the close; missing volumes fall back to *default_volume*.
    """
    if df.empty:
        raise ProviderFailure(provider, "malformed", f"no rows for {symbol}")

    r = df.reindex(columns=_COLUMNS).copy()
    r["date"] = pd.to_datetime(r["date"], errors="coerce")
    for col in ["close", "high", "low", "volume"]:
        r[col] = pd.to_numeric(r[col], errors="coerce")

    r = r.dropna(subset=["date", "close"])
    r = r[np.isfinite(r["close"]) & (r["close"] > 0)].copy()
    if r.empty:
        raise ProviderFailure(provider, "malformed", f"no valid closes for {symbol}")

    r["high"] = r["high"].where(np.isfinite(r["high"]) & (r["high"] > 0), r["close"])
    r["low"] = r["low"].where(np.isfinite(r["low"]) & (r["low"] > 0), r["close"])
    r["volume"] = r["volume"].where(np.isfinite(r["volume"]) & (r["volume"] >= 0)).fillna(default_volume)

    r = r.sort_values("date", kind="stable")
    r = r.drop_duplicates(subset="date", keep="last").tail(history_days)

    return PriceSeries(
        symbol=symbol,
        dates=[ts.date() for ts in r["date"]],
        prices=[float(v) for v in r["close"]],
        highs=[float(v) for v in r["high"]],
        lows=[float(v) for v in r["low"]],
        volumes=[int(v) for v in r["volume"]],
    )


def parse_alpha_vantage(payload: dict[str, Any], symbol: str) -> PriceSeries:
    """Alpha Vantage ``TIME_SERIES_DAILY``: an object keyed by date string."""
    provider = "alpha_vantage"
    series = payload.get("Time Series (Daily)")
    if not series:
        for key in _AV_LIMIT_KEYS:
            if key in payload:
                raise ProviderFailure(provider, "rate_limited", str(payload[key]))
        if "Error Message" in payload:
            raise ProviderFailure(provider, "malformed", str(payload["Error Message"]))
        raise ProviderFailure(provider, "malformed", "missing 'Time Series (Daily)'")
    if not isinstance(series, dict):
        raise ProviderFailure(provider, "malformed", "'Time Series (Daily)' is not an object")

    rows = []
    for day, bar in series.items():
        if not isinstance(bar, dict):
            continue
        rows.append({
            "date": day,
            "close": bar.get("4. close"),
            "high": bar.get("2. high"),
            "low": bar.get("3. low"),
            "volume": bar.get("5. volume"),
        })
    return normalize_frame(pd.DataFrame(rows, columns=_COLUMNS), symbol, provider)


def parse_fmp(payload: dict[str, Any], symbol: str) -> PriceSeries:
    """Financial Modeling Prep ``historical-price-full``: newest-first array."""
    provider = "fmp"
    if "Error Message" in payload:
        raise ProviderFailure(provider, "rate_limited", str(payload["Error Message"]))
    historical = payload.get("historical")
    if not isinstance(historical, list) or not historical:
        raise ProviderFailure(provider, "malformed", "missing 'historical' array")

    rows = [
        {
            "date": h.get("date"),
            "close": h.get("close"),
            "high": h.get("high"),
            "low": h.get("low"),
            "volume": h.get("volume"),
        }
        for h in historical
        if isinstance(h, dict)
    ]
    return normalize_frame(pd.DataFrame(rows, columns=_COLUMNS), symbol, provider)


def parse_yahoo_chart(payload: dict[str, Any], symbol: str) -> PriceSeries:
    """Yahoo ``v8/finance/chart``: parallel arrays under ``chart.result[0]``."""
    provider = "yahoo"
    chart = payload.get("chart")
    if not isinstance(chart, dict):
        raise ProviderFailure(provider, "malformed", "missing 'chart' object")
    if chart.get("error"):
        raise ProviderFailure(provider, "malformed", str(chart["error"]))
    result = chart.get("result")
    if not isinstance(result, list) or not result:
        raise ProviderFailure(provider, "malformed", "empty chart result")

    try:
        first = result[0]
        timestamps = list(first["timestamp"])
        quote = first["indicators"]["quote"][0]
    except (KeyError, IndexError, TypeError) as e:
        raise ProviderFailure(provider, "malformed", f"unexpected chart layout: {e}") from e
    if not isinstance(quote, dict):
        raise ProviderFailure(provider, "malformed", "quote block is not an object")

    n = len(timestamps)
    if n == 0:
        raise ProviderFailure(provider, "malformed", "no timestamps")

    def _column(name: str) -> list:
        values = list(quote.get(name) or [])
        return (values + [None] * n)[:n]

    dates = _epoch_dates(timestamps, unit="s")
    df = pd.DataFrame({
        "date": dates,
        "close": _column("close"),
        "high": _column("high"),
        "low": _column("low"),
        "volume": _column("volume"),
    })
    return normalize_frame(df, symbol, provider)


def parse_polygon(payload: dict[str, Any], symbol: str) -> PriceSeries:
    """Polygon aggregates: ``results`` with ``t`` (epoch ms), ``c``, ``h``, ``l``, ``v``."""
    provider = "polygon"
    status = str(payload.get("status", "")).upper()
    if status == "NOT_AUTHORIZED":
        raise ProviderFailure(provider, "config", str(payload.get("message", "")))
    if status == "ERROR" or "error" in payload:
        message = payload.get("error") or payload.get("message", "")
        kind = "rate_limited" if "exceeded" in str(message).lower() else "malformed"
        raise ProviderFailure(provider, kind, str(message))
    results = payload.get("results")
    if not isinstance(results, list) or not results:
        raise ProviderFailure(provider, "malformed", "missing 'results' array")

    bars = [bar for bar in results if isinstance(bar, dict)]
    if not bars:
        raise ProviderFailure(provider, "malformed", "no aggregate bars")
    dates = _epoch_dates([bar.get("t") for bar in bars], unit="ms")
    df = pd.DataFrame({
        "date": dates,
        "close": [bar.get("c") for bar in bars],
        "high": [bar.get("h") for bar in bars],
        "low": [bar.get("l") for bar in bars],
        "volume": [bar.get("v") for bar in bars],
    })
    return normalize_frame(df, symbol, provider)
