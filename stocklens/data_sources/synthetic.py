"""Synthetic price series, the terminal fallback when no provider answers.

The output has a realistic shape (random walk with +/-3% daily moves) but
random content, and is always flagged ``is_demo`` so consumers can warn.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone
from typing import Optional

import numpy as np

from stocklens.data_sources.parsers import HISTORY_DAYS
from stocklens.models import PriceSeries
from stocklens.utils.logger import setup_logger

logger = setup_logger("synthetic")

BASE_PRICES: dict[str, float] = {
    "AAPL": 150,
    "TSLA": 250,
    "GOOGL": 2800,
    "MSFT": 300,
    "AMZN": 3200,
    "ASML": 600,
    "SHELL": 28,
    "ADYEN": 1200,
}
DEFAULT_BASE_PRICE = 100.0

_MAX_DAILY_MOVE = 0.03
_MAX_INTRADAY_RANGE = 0.02
_VOLUME_MIN = 1_000_000
_VOLUME_MAX = 11_000_000  # exclusive


def base_price_for(symbol: str) -> float:
    return float(BASE_PRICES.get(symbol.upper(), DEFAULT_BASE_PRICE))


class SyntheticGenerator:
    """Generate demo series from an injectable random stream.

    Pass ``rng=np.random.default_rng(seed)`` for reproducible output; the
    default generator is unseeded.
    """

    def __init__(
        self,
        rng: Optional[np.random.Generator] = None,
        today: Optional[date] = None,
        days: int = HISTORY_DAYS,
    ):
        self.rng = rng if rng is not None else np.random.default_rng()
        self.today = today
        self.days = days

    def generate(self, symbol: str) -> PriceSeries:
        symbol = symbol.upper()
        today = self.today or date.today()
        price = base_price_for(symbol)
        dates, prices, highs, lows, volumes = [], [], [], [], []

        for offset in range(self.days - 1, -1, -1):
            dates.append(today - timedelta(days=offset))
            price *= 1 + self.rng.uniform(-_MAX_DAILY_MOVE, _MAX_DAILY_MOVE)
            high = price * (1 + self.rng.uniform(0, _MAX_INTRADAY_RANGE))
            low = price * (1 - self.rng.uniform(0, _MAX_INTRADAY_RANGE))
            prices.append(round(price, 2))
            highs.append(round(high, 2))
            lows.append(round(low, 2))
            volumes.append(int(self.rng.integers(_VOLUME_MIN, _VOLUME_MAX)))

        logger.info("Generated %d-day demo series for %s", self.days, symbol)
        return PriceSeries(
            symbol=symbol,
            dates=dates,
            prices=prices,
            highs=highs,
            lows=lows,
            volumes=volumes,
            last_update=datetime.now(timezone.utc),
            is_demo=True,
        )
