"""Market data providers and the ordered source chain.

Primary: Alpha Vantage | Fallbacks: Financial Modeling Prep, Yahoo chart, Polygon

Providers are tried one at a time. A provider reports failure through its
``FetchResult`` instead of raising, and the chain moves on to the next one.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Optional, Sequence

import httpx

from stocklens.config import Keys, setting
from stocklens.data_sources.parsers import (
    HISTORY_DAYS,
    parse_alpha_vantage,
    parse_fmp,
    parse_polygon,
    parse_yahoo_chart,
)
from stocklens.errors import ProviderFailure
from stocklens.models import PriceSeries
from stocklens.utils.logger import setup_logger
from stocklens.utils.rate_limiter import RateLimiter

logger = setup_logger("market_data")

DEFAULT_TIMEOUT: float = setting("data.http_timeout_seconds", 10)
DEFAULT_PROVIDERS: list[str] = setting(
    "data.providers", ["alpha_vantage", "fmp", "yahoo", "polygon"],
)
_RATE_LIMITS: dict[str, int] = setting("data.rate_limits", {})

_USER_AGENT = "Mozilla/5.0 (compatible; stocklens/0.1)"


@dataclass
class FetchResult:
    provider: str
    series: Optional[PriceSeries] = None
    failure: Optional[ProviderFailure] = None

    @property
    def ok(self) -> bool:
        return self.series is not None


class PriceProvider(ABC):
    """Interface every price provider implements.

    Subclasses define ``name``, ``build_request()`` and ``parse()``; ``fetch()``
    handles HTTP, local rate limiting and failure reporting.
    """

    default_calls_per_minute = 60

    def __init__(self, api_key: str | None = None, calls_per_minute: int | None = None):
        self.api_key = api_key
        if calls_per_minute is None:
            calls_per_minute = _RATE_LIMITS.get(self.name, self.default_calls_per_minute)
        self.limiter = RateLimiter(calls_per_minute)

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @abstractmethod
    def build_request(self, symbol: str) -> tuple[str, dict[str, Any]]:
        """Return ``(url, query_params)`` for *symbol*."""
        ...

    @abstractmethod
    def parse(self, payload: dict[str, Any], symbol: str) -> PriceSeries:
        ...

    async def fetch(self, symbol: str, client: httpx.AsyncClient) -> FetchResult:
        try:
            if not self.limiter.try_acquire():
                raise ProviderFailure(self.name, "rate_limited", "local call budget exhausted")
            url, params = self.build_request(symbol)
            payload = await self._get_json(client, url, params)
            series = self._parse_payload(payload, symbol)
        except ProviderFailure as e:
            logger.warning("%s failed for %s: %s", self.name, symbol, e)
            return FetchResult(self.name, failure=e)
        logger.info("%s: got %d rows for %s", self.name, len(series), symbol)
        return FetchResult(self.name, series=series)

    def _parse_payload(self, payload: dict[str, Any], symbol: str) -> PriceSeries:
        try:
            return self.parse(payload, symbol)
        except (ValueError, TypeError, KeyError, AttributeError, OverflowError) as e:
            raise ProviderFailure(self.name, "malformed", f"{type(e).__name__}: {e}") from e

    async def _get_json(
        self, client: httpx.AsyncClient, url: str, params: dict[str, Any],
    ) -> dict[str, Any]:
        try:
            resp = await client.get(url, params=params)
        except httpx.HTTPError as e:
            raise ProviderFailure(self.name, "network", str(e) or type(e).__name__) from e

        if resp.status_code == 429:
            raise ProviderFailure(self.name, "rate_limited", "HTTP 429")
        if not resp.is_success:
            raise ProviderFailure(self.name, "http_status", f"HTTP {resp.status_code}")
        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderFailure(self.name, "malformed", "response is not JSON") from e
        if not isinstance(data, dict):
            raise ProviderFailure(self.name, "malformed", "response is not a JSON object")
        return data


class AlphaVantageProvider(PriceProvider):
    """Alpha Vantage daily series. Free tier: 25 calls/day, 5 calls/min."""

    name = "alpha_vantage"
    default_calls_per_minute = 5
    url = "https://www.alphavantage.co/query"

    def __init__(self, api_key: str | None = None, calls_per_minute: int | None = None):
        super().__init__(api_key or Keys.ALPHA_VANTAGE, calls_per_minute)

    def build_request(self, symbol):
        return self.url, {
            "function": "TIME_SERIES_DAILY",
            "symbol": symbol,
            "outputsize": "compact",
            "apikey": self.api_key,
        }

    def parse(self, payload, symbol):
        return parse_alpha_vantage(payload, symbol)


class FMPProvider(PriceProvider):
    """Financial Modeling Prep historical prices."""

    name = "fmp"
    default_calls_per_minute = 10
    base_url = "https://financialmodelingprep.com/api/v3/historical-price-full"

    def __init__(self, api_key: str | None = None, calls_per_minute: int | None = None):
        super().__init__(api_key or Keys.FMP, calls_per_minute)

    def build_request(self, symbol):
        return f"{self.base_url}/{symbol}", {"timeseries": HISTORY_DAYS, "apikey": self.api_key}

    def parse(self, payload, symbol):
        return parse_fmp(payload, symbol)


class YahooChartProvider(PriceProvider):
    """Yahoo Finance chart endpoint. Keyless, but throttled aggressively."""

    name = "yahoo"
    default_calls_per_minute = 30
    base_url = "https://query1.finance.yahoo.com/v8/finance/chart"

    def build_request(self, symbol):
        return f"{self.base_url}/{symbol}", {"range": "3mo", "interval": "1d"}

    def parse(self, payload, symbol):
        return parse_yahoo_chart(payload, symbol)


class PolygonProvider(PriceProvider):
    """Polygon daily aggregates. Requires POLYGON_API_KEY."""

    name = "polygon"
    default_calls_per_minute = 5
    base_url = "https://api.polygon.io/v2/aggs/ticker"

    def __init__(
        self,
        api_key: str | None = None,
        calls_per_minute: int | None = None,
        today: date | None = None,
    ):
        super().__init__(api_key if api_key is not None else Keys.POLYGON, calls_per_minute)
        self.today = today

    def build_request(self, symbol):
        if not self.api_key:
            raise ProviderFailure(self.name, "config", "no POLYGON_API_KEY set")
        end = self.today or date.today()
        # Calendar window wide enough to hold HISTORY_DAYS sessions
        start = end - timedelta(days=HISTORY_DAYS * 2)
        url = f"{self.base_url}/{symbol}/range/1/day/{start.isoformat()}/{end.isoformat()}"
        return url, {"adjusted": "true", "sort": "asc", "limit": 5000, "apiKey": self.api_key}

    def parse(self, payload, symbol):
        return parse_polygon(payload, symbol)


PROVIDER_CLASSES: dict[str, type[PriceProvider]] = {
    "alpha_vantage": AlphaVantageProvider,
    "fmp": FMPProvider,
    "yahoo": YahooChartProvider,
    "polygon": PolygonProvider,
}


class SourceChain:
    """Ordered provider fallback. First success wins."""

    def __init__(
        self,
        providers: Sequence[PriceProvider],
        client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.providers = list(providers)
        self.timeout = timeout
        self._client = client

    async def fetch(self, symbol: str) -> PriceSeries | None:
        """Try each provider in order; ``None`` when all of them fail."""
        if self._client is not None:
            return await self._try_providers(symbol, self._client)
        async with httpx.AsyncClient(
            timeout=self.timeout, headers={"User-Agent": _USER_AGENT},
        ) as client:
            return await self._try_providers(symbol, client)

    async def _try_providers(self, symbol: str, client: httpx.AsyncClient) -> PriceSeries | None:
        for provider in self.providers:
            logger.info("Fetching price history: %s via %s", symbol, provider.name)
            result = await provider.fetch(symbol, client)
            if result.ok:
                return result.series
        logger.warning("All %d providers failed for %s", len(self.providers), symbol)
        return None


def build_source_chain(
    provider_names: Sequence[str] | None = None,
    client: httpx.AsyncClient | None = None,
) -> SourceChain:
    """Build a chain from provider names (defaults to ``data.providers``)."""
    providers = []
    for name in provider_names or DEFAULT_PROVIDERS:
        cls = PROVIDER_CLASSES.get(name)
        if cls is None:
            logger.warning("Unknown provider in settings: %s", name)
            continue
        providers.append(cls())
    return SourceChain(providers, client=client)
