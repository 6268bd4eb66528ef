"""Core data types shared by the acquisition and analysis layers.

All types are frozen dataclasses holding tuples, so a resolved series or an
analysis result can be handed to several consumers without defensive copies.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import Literal, Optional, Sequence

Trend = Literal["Uptrend", "Downtrend", "Sideways"]

UPTREND: Trend = "Uptrend"
DOWNTREND: Trend = "Downtrend"
SIDEWAYS: Trend = "Sideways"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class PriceSeries:
    """Daily price history for one symbol, oldest first."""

    symbol: str
    dates: Sequence[date]
    prices: Sequence[float]
    highs: Sequence[float]
    lows: Sequence[float]
    volumes: Sequence[int]
    last_update: datetime = field(default_factory=_utcnow)
    is_demo: bool = False

    def __post_init__(self) -> None:
        for name in ("dates", "prices", "highs", "lows", "volumes"):
            object.__setattr__(self, name, tuple(getattr(self, name)))

        if not self.symbol or self.symbol != self.symbol.upper():
            raise ValueError(f"Symbol must be non-empty and uppercase, got {self.symbol!r}")
        n = len(self.prices)
        if n == 0:
            raise ValueError(f"{self.symbol}: price series is empty")
        lengths = {len(self.dates), len(self.highs), len(self.lows), len(self.volumes)}
        if lengths != {n}:
            raise ValueError(f"{self.symbol}: misaligned series lengths")
        if any(b <= a for a, b in zip(self.dates, self.dates[1:])):
            raise ValueError(f"{self.symbol}: dates must be strictly ascending")

    @property
    def current_price(self) -> float:
        return self.prices[-1]

    def __len__(self) -> int:
        return len(self.prices)

    def to_dict(self) -> dict:
        return {
            "symbol": self.symbol,
            "dates": [d.isoformat() for d in self.dates],
            "prices": list(self.prices),
            "highs": list(self.highs),
            "lows": list(self.lows),
            "volumes": list(self.volumes),
            "currentPrice": self.current_price,
            "lastUpdate": self.last_update.isoformat(),
            "isDemo": self.is_demo,
        }


@dataclass(frozen=True)
class BollingerBands:
    upper: float
    middle: float
    lower: float

    def to_dict(self) -> dict:
        return {"upper": self.upper, "middle": self.middle, "lower": self.lower}


@dataclass(frozen=True)
class TechnicalIndicators:
    sma20: float
    sma50: float
    rsi: float
    macd: float
    bollinger: BollingerBands

    def to_dict(self) -> dict:
        return {
            "sma20": self.sma20,
            "sma50": self.sma50,
            "rsi": self.rsi,
            "macd": self.macd,
            "bollinger": self.bollinger.to_dict(),
        }


@dataclass(frozen=True)
class HighLow:
    """High/low of the held window (named 52-week by convention)."""

    high: float
    low: float
    percent_from_high: float
    percent_from_low: float

    def to_dict(self) -> dict:
        return {
            "high": self.high,
            "low": self.low,
            "percentFromHigh": self.percent_from_high,
            "percentFromLow": self.percent_from_low,
        }


@dataclass(frozen=True)
class PriceAnalysis:
    daily_change: float
    weekly_change: float
    high_low_52: HighLow
    momentum: float

    def to_dict(self) -> dict:
        return {
            "dailyChange": self.daily_change,
            "weeklyChange": self.weekly_change,
            "highLow52": self.high_low_52.to_dict(),
            "momentum": self.momentum,
        }


@dataclass(frozen=True)
class SupportResistance:
    support: float
    resistance: float

    def to_dict(self) -> dict:
        return {"support": self.support, "resistance": self.resistance}


@dataclass(frozen=True)
class AnalysisResult:
    """Indicator snapshot for one series. Carries no reference to the series."""

    technical_indicators: TechnicalIndicators
    price_analysis: PriceAnalysis
    volatility: float
    trend: Trend
    support: SupportResistance
    score: Optional[int] = None
    is_demo: bool = False

    def with_score(self, score: int) -> AnalysisResult:
        return replace(self, score=score)

    def to_dict(self) -> dict:
        return {
            "technicalIndicators": self.technical_indicators.to_dict(),
            "priceAnalysis": self.price_analysis.to_dict(),
            "volatility": self.volatility,
            "trend": self.trend,
            "support": self.support.to_dict(),
            "score": self.score,
            "isDemo": self.is_demo,
        }
