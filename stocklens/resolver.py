"""Symbol normalisation and price-series resolution.

Resolution order: hour-bucket cache -> source chain -> synthetic generator.
``SeriesResolver.resolve`` always returns a series; the ``is_demo`` flag is
the only sign that no market data could be fetched.
"""

from __future__ import annotations

from typing import Optional

import yaml

from stocklens.config import CONFIGS_DIR
from stocklens.data_sources.market_data import SourceChain, build_source_chain
from stocklens.data_sources.synthetic import SyntheticGenerator
from stocklens.errors import AcquisitionExhausted
from stocklens.models import PriceSeries
from stocklens.utils.cache import SeriesCache
from stocklens.utils.logger import setup_logger

logger = setup_logger("resolver")


def _load_aliases() -> dict:
    path = CONFIGS_DIR / "aliases.yaml"
    if not path.exists():
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def normalize_symbol(user_input: str, aliases: Optional[dict] = None) -> str:
    """Resolve user input like 'apple' or ' aapl ' to a canonical ticker."""
    text = (user_input or "").strip()
    if not text:
        raise ValueError("Symbol must be a non-empty string")
    for alias, ticker in (aliases or {}).items():
        if text.lower() == str(alias).lower():
            logger.info("Resolved alias '%s' -> '%s'", text, ticker)
            return str(ticker).upper()
    return text.upper()


class SeriesResolver:
    """Resolve a symbol to a PriceSeries, falling back until one exists."""

    def __init__(
        self,
        source_chain: Optional[SourceChain] = None,
        generator: Optional[SyntheticGenerator] = None,
        cache: Optional[SeriesCache] = None,
        aliases: Optional[dict] = None,
    ):
        self.source_chain = source_chain if source_chain is not None else build_source_chain()
        self.generator = generator if generator is not None else SyntheticGenerator()
        self.cache = cache if cache is not None else SeriesCache()
        self.aliases = _load_aliases() if aliases is None else aliases

    async def resolve(self, symbol: str, now: Optional[float] = None) -> PriceSeries:
        """Return a series for *symbol*, from cache, a provider, or synthetic data.

        Cancelling the awaiting task abandons the remaining providers and
        leaves the cache untouched.

        Without an explicit *now* the clock is read separately for the lookup
        and for the write, so a fetch that crosses a bucket boundary is stored
        under the bucket it completed in.
        """
        symbol = normalize_symbol(symbol, self.aliases)

        cached = self.cache.get(symbol, now)
        if cached is not None:
            return cached

        try:
            series = await self.source_chain.fetch(symbol)
            if series is None:
                raise AcquisitionExhausted(symbol)
        except AcquisitionExhausted as e:
            logger.warning("%s, using demo data", e)
            series = self.generator.generate(symbol)
        except Exception:
            logger.exception("Unexpected error fetching %s, using demo data", symbol)
            series = self.generator.generate(symbol)

        self.cache.put(symbol, series, now)
        return series

    async def resolve_many(self, symbols: list[str], now: Optional[float] = None) -> dict[str, PriceSeries]:
        """Resolve symbols one after another, keyed by canonical symbol."""
        results = {}
        for s in symbols:
            series = await self.resolve(s, now)
            results[series.symbol] = series
        return results
