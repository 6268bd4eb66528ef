"""Technical indicator engine.

Pure functions of a price series: no I/O, no randomness. Every formula
degrades on short history (clamped window or neutral value) instead of
raising, and every presented number is rounded to 2 decimals.
"""

from __future__ import annotations

import math
from typing import Sequence

import numpy as np

from stocklens.analysis.scoring import score_analysis
from stocklens.models import (
    DOWNTREND,
    SIDEWAYS,
    UPTREND,
    AnalysisResult,
    BollingerBands,
    HighLow,
    PriceAnalysis,
    PriceSeries,
    SupportResistance,
    TechnicalIndicators,
    Trend,
)
from stocklens.utils.logger import setup_logger

logger = setup_logger("technical")

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
TRADING_DAYS = 252
RSI_PERIOD = 14
RSI_NEUTRAL = 50.0
MACD_FAST = 12
MACD_SLOW = 26
BOLLINGER_PERIOD = 20
BOLLINGER_STD = 2.0
TREND_WINDOW = 10          # recent window, compared against the 10 before it
TREND_THRESHOLD_PCT = 2.0
MOMENTUM_WINDOW = 5
SR_LOOKBACK = 10
WEEK_SESSIONS = 7


def _round(value: float, digits: int = 2) -> float:
    """Round, mapping NaN/inf to 0."""
    if value is None or not math.isfinite(value):
        return 0.0
    return round(float(value), digits)


def _as_array(values: Sequence[float]) -> np.ndarray:
    return np.asarray(values, dtype=float)


def _pct_change(current: float, reference: float) -> float:
    if reference == 0:
        return 0.0
    return _round((current - reference) / reference * 100)


# ---------------------------------------------------------------------------
# Moving averages and oscillators
# ---------------------------------------------------------------------------
def sma(prices: Sequence[float], period: int) -> float:
    """Mean of the last ``min(period, len(prices))`` prices."""
    arr = _as_array(prices)
    if arr.size == 0:
        return 0.0
    period = max(1, min(period, arr.size))
    return _round(arr[-period:].mean())


def ema(prices: Sequence[float], period: int) -> float:
    """EMA seeded with the first price. Unrounded, it feeds MACD."""
    arr = _as_array(prices)
    if arr.size == 0:
        return 0.0
    multiplier = 2 / (period + 1)
    value = arr[0]
    for price in arr[1:]:
        value = price * multiplier + value * (1 - multiplier)
    return float(value)


def rsi(prices: Sequence[float], period: int = RSI_PERIOD) -> float:
    """Simple-average RSI over the most recent *period* deltas."""
    arr = _as_array(prices)
    if arr.size < period + 1:
        return RSI_NEUTRAL

    deltas = np.diff(arr)[-period:]
    avg_gain = deltas[deltas > 0].sum() / period
    avg_loss = -deltas[deltas < 0].sum() / period
    if avg_loss == 0:
        return 100.0
    rs = avg_gain / avg_loss
    return _round(100 - 100 / (1 + rs))


def macd(prices: Sequence[float]) -> float:
    """MACD line only (EMA12 - EMA26); no signal line or histogram."""
    return _round(ema(prices, MACD_FAST) - ema(prices, MACD_SLOW))


def bollinger_bands(
    prices: Sequence[float], period: int = BOLLINGER_PERIOD, num_std: float = BOLLINGER_STD,
) -> BollingerBands:
    middle = sma(prices, period)
    window = _as_array(prices)[-period:]
    sigma = float(np.std(window)) if window.size else 0.0
    return BollingerBands(
        upper=_round(middle + num_std * sigma),
        middle=middle,
        lower=_round(middle - num_std * sigma),
    )


# ---------------------------------------------------------------------------
# Volatility, trend, momentum
# ---------------------------------------------------------------------------
def volatility(prices: Sequence[float]) -> float:
    """Annualised volatility in percent from daily simple returns."""
    arr = _as_array(prices)
    if arr.size < 2:
        return 0.0
    returns = np.diff(arr) / arr[:-1]
    return _round(np.std(returns) * math.sqrt(TRADING_DAYS) * 100)


def trend(prices: Sequence[float]) -> Trend:
    """Compare the last 10 prices' mean with the 10 before.

    Fewer than 20 points is always Sideways.
    """
    arr = _as_array(prices)
    if arr.size < 2 * TREND_WINDOW:
        return SIDEWAYS
    recent = arr[-TREND_WINDOW:].mean()
    prior = arr[-2 * TREND_WINDOW:-TREND_WINDOW].mean()
    if prior == 0:
        return SIDEWAYS
    change = (recent - prior) / prior * 100
    if change > TREND_THRESHOLD_PCT:
        return UPTREND
    if change < -TREND_THRESHOLD_PCT:
        return DOWNTREND
    return SIDEWAYS


def momentum(prices: Sequence[float]) -> float:
    """Percent change of the last-5 mean against the prior-5 mean."""
    arr = _as_array(prices)
    if arr.size < 2 * MOMENTUM_WINDOW:
        return 0.0
    recent = arr[-MOMENTUM_WINDOW:].mean()
    older = arr[-2 * MOMENTUM_WINDOW:-MOMENTUM_WINDOW].mean()
    return _pct_change(recent, older)


# ---------------------------------------------------------------------------
# Price levels
# ---------------------------------------------------------------------------
def support_resistance(
    highs: Sequence[float], lows: Sequence[float], lookback: int = SR_LOOKBACK,
) -> SupportResistance:
    return SupportResistance(
        support=_round(min(lows[-lookback:])),
        resistance=_round(max(highs[-lookback:])),
    )


def high_low_52(highs: Sequence[float], lows: Sequence[float], current: float) -> HighLow:
    """High/low over the whole held window and the current price's distance to each."""
    high = max(highs)
    low = min(lows)
    return HighLow(
        high=_round(high),
        low=_round(low),
        percent_from_high=_pct_change(current, high),
        percent_from_low=_pct_change(current, low),
    )


def price_changes(prices: Sequence[float]) -> tuple[float, float]:
    """(daily %, weekly %). The weekly reference is 7 sessions back or the first point."""
    n = len(prices)
    current = prices[-1]
    daily = _pct_change(current, prices[-2]) if n >= 2 else 0.0
    weekly = _pct_change(current, prices[max(0, n - WEEK_SESSIONS)])
    return daily, weekly


# =====================================================================
# Analyzer
# =====================================================================
class TechnicalAnalyzer:
    """Turn a PriceSeries into an AnalysisResult."""

    def compute_indicators(self, series: PriceSeries) -> TechnicalIndicators:
        prices = series.prices
        return TechnicalIndicators(
            sma20=sma(prices, 20),
            sma50=sma(prices, 50),
            rsi=rsi(prices),
            macd=macd(prices),
            bollinger=bollinger_bands(prices),
        )

    def analyze_price_action(self, series: PriceSeries) -> PriceAnalysis:
        daily, weekly = price_changes(series.prices)
        return PriceAnalysis(
            daily_change=daily,
            weekly_change=weekly,
            high_low_52=high_low_52(series.highs, series.lows, series.current_price),
            momentum=momentum(series.prices),
        )

    def analyze(self, series: PriceSeries, with_score: bool = True) -> AnalysisResult:
        """Compute every indicator and, by default, the composite score."""
        if len(series) < 2 * TREND_WINDOW:
            logger.debug(
                "%s: only %d points, using short-history fallbacks", series.symbol, len(series),
            )
        result = AnalysisResult(
            technical_indicators=self.compute_indicators(series),
            price_analysis=self.analyze_price_action(series),
            volatility=volatility(series.prices),
            trend=trend(series.prices),
            support=support_resistance(series.highs, series.lows),
            is_demo=series.is_demo,
        )
        if with_score:
            result = result.with_score(score_analysis(result))
        return result
