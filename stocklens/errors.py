"""Exception types raised inside the acquisition layer."""

from __future__ import annotations

from typing import Literal

FailureKind = Literal["network", "http_status", "malformed", "rate_limited", "config"]


class StockLensError(Exception):
    """Base class for StockLens errors."""


class ProviderFailure(StockLensError):
    """A single provider could not deliver a usable series.

    Never fatal: the source chain records it and moves on to the next provider.
    """

    def __init__(self, provider: str, kind: FailureKind, message: str = ""):
        self.provider = provider
        self.kind = kind
        self.message = message
        super().__init__(f"{provider} [{kind}] {message}".rstrip())


class AcquisitionExhausted(StockLensError):
    """Every provider in the chain failed for a symbol."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"No provider returned data for {symbol}")
