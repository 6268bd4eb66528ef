"""Composite 0-100 score from an AnalysisResult's indicator fields.

Starts from a neutral 50 and applies fixed additive adjustments:

    RSI > 70          -10   (overbought)
    RSI < 30          +10   (oversold)
    Uptrend           +15
    Downtrend         -15
    Momentum > 5      +10
    Momentum < -5     -10
    Volatility > 50    -5

The result is clamped to [0, 100] and rounded to an integer. Also maps
scores and volatility to the recommendation and risk labels used by reports.
"""

from __future__ import annotations

from typing import Literal

from stocklens.models import DOWNTREND, UPTREND, AnalysisResult

RecommendationType = Literal["Strong Buy", "Buy", "Hold/Neutral", "Sell", "Strong Sell"]
BeginnerRecommendationType = Literal[
    "Good Investment Choice", "Proceed with Caution", "Avoid for Now",
]
RiskLevel = Literal["High Risk", "Medium Risk", "Low Risk"]

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------
_NEUTRAL_SCORE = 50
_RSI_OVERBOUGHT = 70
_RSI_OVERSOLD = 30
_RSI_ADJUSTMENT = 10
_TREND_ADJUSTMENT = 15
_MOMENTUM_THRESHOLD = 5
_MOMENTUM_ADJUSTMENT = 10
_HIGH_VOLATILITY = 50
_VOLATILITY_PENALTY = 5


def compute_score(rsi: float, trend: str, momentum: float, volatility: float) -> int:
    score = _NEUTRAL_SCORE

    if rsi > _RSI_OVERBOUGHT:
        score -= _RSI_ADJUSTMENT
    elif rsi < _RSI_OVERSOLD:
        score += _RSI_ADJUSTMENT

    if trend == UPTREND:
        score += _TREND_ADJUSTMENT
    elif trend == DOWNTREND:
        score -= _TREND_ADJUSTMENT

    if momentum > _MOMENTUM_THRESHOLD:
        score += _MOMENTUM_ADJUSTMENT
    elif momentum < -_MOMENTUM_THRESHOLD:
        score -= _MOMENTUM_ADJUSTMENT

    if volatility > _HIGH_VOLATILITY:
        score -= _VOLATILITY_PENALTY

    return int(max(0, min(100, round(score))))


def score_analysis(result: AnalysisResult) -> int:
    """Score an AnalysisResult (its own ``score`` field is ignored)."""
    return compute_score(
        rsi=result.technical_indicators.rsi,
        trend=result.trend,
        momentum=result.price_analysis.momentum,
        volatility=result.volatility,
    )


def recommendation(score: int) -> RecommendationType:
    """Five-tier label for experienced readers.

      Strong Buy   >= 75
      Buy          >= 60
      Hold/Neutral >= 40
      Sell         >= 25
      Strong Sell  <  25
    """
    if score >= 75:
        return "Strong Buy"
    if score >= 60:
        return "Buy"
    if score >= 40:
        return "Hold/Neutral"
    if score >= 25:
        return "Sell"
    return "Strong Sell"


def beginner_recommendation(score: int) -> BeginnerRecommendationType:
    if score >= 70:
        return "Good Investment Choice"
    if score >= 50:
        return "Proceed with Caution"
    return "Avoid for Now"


def risk_level(volatility: float) -> RiskLevel:
    """Bucket annualised volatility (percent): >40 high, >20 medium."""
    if volatility > 40:
        return "High Risk"
    if volatility > 20:
        return "Medium Risk"
    return "Low Risk"
