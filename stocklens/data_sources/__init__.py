"""Data source modules: provider parsers, the source chain and the synthetic fallback."""

from .market_data import (
    AlphaVantageProvider,
    FetchResult,
    FMPProvider,
    PolygonProvider,
    PriceProvider,
    SourceChain,
    YahooChartProvider,
    build_source_chain,
)
from .synthetic import SyntheticGenerator
