"""
matrix module

Cached travel-time / distance matrix lookups and per-leg route timings.
"""

from .providers import (
    MatrixOptions,
    MatrixResult,
    MatrixProviderError,
    HttpMatrixProvider,
    HaversineMatrixProvider,
)

from .cache import (
    MatrixCache,
    MatrixCacheEntry,
)

from .sequence import (
    LegTime,
    get_sequential_times,
)

__all__ = [
    'MatrixCache',
    'MatrixCacheEntry',
    'MatrixOptions',
    'MatrixResult',
    'MatrixProviderError',
    'HttpMatrixProvider',
    'HaversineMatrixProvider',
    'LegTime',
    'get_sequential_times',
]
