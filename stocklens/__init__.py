"""StockLens: price-series acquisition and technical scoring."""

__version__ = "0.1.0"
