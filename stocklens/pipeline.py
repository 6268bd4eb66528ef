"""Resolve-then-analyze entry points used by report and UI collaborators."""

from __future__ import annotations

from typing import Optional

from stocklens.analysis.technical import TechnicalAnalyzer
from stocklens.models import AnalysisResult, PriceSeries
from stocklens.resolver import SeriesResolver
from stocklens.utils.logger import setup_logger

logger = setup_logger("pipeline")


async def analyze_symbol(
    symbol: str,
    resolver: SeriesResolver,
    analyzer: Optional[TechnicalAnalyzer] = None,
) -> tuple[PriceSeries, AnalysisResult]:
    """Resolve *symbol* and return the series together with its scored analysis."""
    analyzer = analyzer or TechnicalAnalyzer()
    series = await resolver.resolve(symbol)
    result = analyzer.analyze(series)
    if series.is_demo:
        logger.warning("%s analysed on demo data", series.symbol)
    logger.info("%s: trend=%s score=%s", series.symbol, result.trend, result.score)
    return series, result


async def analyze_many(
    symbols: list[str],
    resolver: SeriesResolver,
    analyzer: Optional[TechnicalAnalyzer] = None,
) -> dict[str, tuple[PriceSeries, AnalysisResult]]:
    """Analyze symbols sequentially, keyed by canonical symbol."""
    analyzer = analyzer or TechnicalAnalyzer()
    resolved = await resolver.resolve_many(symbols)
    return {sym: (series, analyzer.analyze(series)) for sym, series in resolved.items()}
