"""
Time-expiring cache around a travel-time / distance matrix provider.

Near-identical queries share an entry: cache keys use coordinates rounded to
``precision`` decimals (4 decimals is roughly 11 m) plus the query options.
Entries expire lazily: an entry whose TTL has elapsed is treated as a miss
and evicted when it is read, and ``sweep()`` drops every expired entry.
Failed lookups are never cached.
"""

import json
import logging
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional, Sequence, Tuple

from fieldcluster.matrix.providers import (
    MatrixOptions,
    MatrixProviderError,
    MatrixResult,
)
from fieldcluster.utils.logging import Symbols

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 5 * 60
MAX_COORDINATES = 25


@dataclass(frozen=True)
class MatrixCacheEntry:
    key: str
    result: MatrixResult
    inserted_at: float
    ttl: float

    def is_expired(self, now: float) -> bool:
        return now >= self.inserted_at + self.ttl


class MatrixCache:
    """Caches matrix lookups from ``provider`` for ``ttl`` seconds.

    ``provider`` is any object with an ``async fetch_matrix(coordinates,
    options)`` method returning a MatrixResult or raising
    MatrixProviderError. Any provider failure is logged and reported as None. ``clock`` returns the current time in seconds.
    """

    def __init__(
        self,
        provider,
        clock: Callable[[], float] = time.monotonic,
        ttl: float = DEFAULT_TTL_SECONDS,
        max_coordinates: int = MAX_COORDINATES,
        precision: int = 4
    ):
        self.provider = provider
        self.clock = clock
        self.ttl = ttl
        self.max_coordinates = max_coordinates
        self.precision = precision
        self._entries: Dict[str, MatrixCacheEntry] = {}
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)

    def cache_key(self, coordinates: Sequence[Tuple[float, float]], options: MatrixOptions) -> str:
        rounded = [
            [round(float(lng), self.precision), round(float(lat), self.precision)]
            for lng, lat in coordinates
        ]
        return json.dumps({'c': rounded, **options.to_payload()}, sort_keys=True)

    async def get_matrix(
        self,
        coordinates: Sequence[Tuple[float, float]],
        options: Optional[MatrixOptions] = None
    ) -> Optional[MatrixResult]:
        """
        Travel-time and distance matrices for ``coordinates``.

        Args:
            coordinates: Ordered (lng, lat) pairs
            options: Query options (profile, sources, destinations, departure)

        Returns:
            MatrixResult, or None for fewer than two coordinates or when the
            provider fails
        """
        if coordinates is None or len(coordinates) < 2:
            return None
        options = options or MatrixOptions()

        coordinates = list(coordinates)
        if len(coordinates) > self.max_coordinates:
            logger.warning(
                f"Matrix lookups take at most {self.max_coordinates} coordinates, "
                f"truncating {len(coordinates)} to {self.max_coordinates}"
            )
            coordinates = coordinates[:self.max_coordinates]

        key = self.cache_key(coordinates, options)
        entry = self._entries.get(key)
        if entry is not None:
            if not entry.is_expired(self.clock()):
                self.hits += 1
                logger.debug(f"Matrix cache hit ({len(coordinates)} coordinates)")
                return entry.result
            del self._entries[key]

        self.misses += 1
        logger.debug(f"{Symbols.CLOCK} Matrix cache miss, querying provider for {len(coordinates)} coordinates")
        try:
            result = await self.provider.fetch_matrix(coordinates, options)
            if not isinstance(result, MatrixResult):
                result = MatrixResult.from_payload(result)
        except MatrixProviderError as e:
            logger.warning(f"{Symbols.CROSS} Matrix lookup failed: {e}")
            return None
        except Exception as e:
            logger.warning(f"{Symbols.CROSS} Matrix lookup failed: {type(e).__name__}: {e}")
            return None

        # TODO: coalesce concurrent misses for the same key into a single
        # provider call; today both callers reach the provider.
        self._entries[key] = MatrixCacheEntry(
            key=key, result=result, inserted_at=self.clock(), ttl=self.ttl
        )
        self.sweep()
        return result

    def sweep(self) -> int:
        """Remove expired entries. Returns how many were removed."""
        now = self.clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear_cache(self) -> None:
        self._entries.clear()
