"""In-memory, hour-bucketed cache for resolved price series."""

from __future__ import annotations

import time
from typing import Callable, Optional

from stocklens.config import setting
from stocklens.models import PriceSeries
from stocklens.utils.logger import setup_logger

logger = setup_logger("cache")

Clock = Callable[[], float]


class SeriesCache:
    """Cache keyed by ``(symbol, hour_bucket)``.

    A key naturally expires when the clock rolls into the next bucket; there is
    no TTL timer. Entries from older buckets are swept the first time a newer
    bucket is written so memory stays bounded.

    Concurrent resolutions of the same symbol may both write; the last write
    wins. Each write publishes one immutable value under one key, so a reader
    never sees a partial entry.
    """

    def __init__(self, bucket_seconds: int | None = None, clock: Clock = time.time):
        if bucket_seconds is None:
            bucket_seconds = setting("cache.bucket_seconds", 3600)
        if bucket_seconds <= 0:
            raise ValueError("bucket_seconds must be positive")
        self.bucket_seconds = bucket_seconds
        self.clock = clock
        self._entries: dict[tuple[str, int], PriceSeries] = {}
        self._last_swept_bucket: int | None = None

    def bucket(self, now: Optional[float] = None) -> int:
        if now is None:
            now = self.clock()
        return int(now // self.bucket_seconds)

    def get(self, symbol: str, now: Optional[float] = None) -> PriceSeries | None:
        """Return the series cached for *symbol* in the current bucket, if any."""
        key = (symbol, self.bucket(now))
        series = self._entries.get(key)
        if series is None:
            logger.debug("Cache miss: %s (bucket %d)", symbol, key[1])
        else:
            logger.info("Cache hit: %s (bucket %d)", symbol, key[1])
        return series

    def put(self, symbol: str, series: PriceSeries, now: Optional[float] = None) -> None:
        if now is None:
            now = self.clock()
        bucket = self.bucket(now)
        if self._last_swept_bucket != bucket:
            self.purge_stale(now)
        self._entries[(symbol, bucket)] = series

    def purge_stale(self, now: Optional[float] = None) -> int:
        """Drop entries from buckets older than the current one."""
        current = self.bucket(now)
        stale = [key for key in list(self._entries) if key[1] < current]
        for key in stale:
            self._entries.pop(key, None)
        self._last_swept_bucket = current
        if stale:
            logger.debug("Purged %d stale cache entries", len(stale))
        return len(stale)

    def clear(self) -> None:
        self._entries.clear()
        self._last_swept_bucket = None

    def __len__(self) -> int:
        return len(self._entries)
