"""Travel-time / distance matrix providers.

A provider is any object with ``async fetch_matrix(coordinates, options)``
that returns a MatrixResult or raises MatrixProviderError.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union
import numpy as np
import requests

from fieldcluster.utils.distance import pairwise_haversine_km

logger = logging.getLogger(__name__)

PROFILES = ('driving', 'driving-traffic', 'walking', 'cycling')

IndexSelection = Union[Sequence[int], str, None]


class MatrixProviderError(RuntimeError):
    """A matrix lookup failed (network, non-success status or malformed payload)."""


def _normalize_selection(name: str, value: IndexSelection):
    if value is None or value == 'all':
        return value
    if isinstance(value, str):
        try:
            return tuple(int(part) for part in value.split(';'))
        except ValueError:
            raise ValueError(f"{name} must be 'all' or ';'-separated indices. Got: {value!r}")
    return tuple(int(v) for v in value)


@dataclass(frozen=True)
class MatrixOptions:
    """Options of a matrix query."""
    profile: str = 'driving'
    sources: IndexSelection = None
    destinations: IndexSelection = None
    depart_at: Optional[str] = None

    def __post_init__(self):
        if self.profile not in PROFILES:
            raise ValueError(f"Unknown routing profile: {self.profile}. Expected one of {PROFILES}")
        object.__setattr__(self, 'sources', _normalize_selection('sources', self.sources))
        object.__setattr__(self, 'destinations', _normalize_selection('destinations', self.destinations))

    def to_payload(self) -> Dict[str, Any]:
        """Request fields for the provider; unset options are omitted."""
        payload = {'profile': self.profile}
        for name in ('sources', 'destinations'):
            value = getattr(self, name)
            if value is None:
                continue
            payload[name] = value if value == 'all' else ';'.join(str(i) for i in value)
        if self.depart_at:
            payload['depart_at'] = self.depart_at
        return payload


def _is_matrix(value) -> bool:
    return isinstance(value, list) and all(isinstance(row, list) for row in value)


@dataclass(frozen=True)
class MatrixResult:
    """Durations in seconds and distances in meters, indexed [source][destination]."""
    durations: List[List[Optional[float]]]
    distances: Optional[List[List[Optional[float]]]] = None

    @classmethod
    def from_payload(cls, payload) -> 'MatrixResult':
        """Parse ``{"durations": ..., "distances": ...}``, optionally wrapped in ``data``."""
        if not isinstance(payload, dict):
            raise MatrixProviderError(f"Malformed matrix payload: {type(payload).__name__}")
        data = payload.get('data', payload)
        if not isinstance(data, dict):
            raise MatrixProviderError("Malformed matrix payload: 'data' is not an object")
        durations = data.get('durations')
        distances = data.get('distances')
        if not _is_matrix(durations):
            raise MatrixProviderError("Malformed matrix payload: missing durations matrix")
        if distances is not None and not _is_matrix(distances):
            raise MatrixProviderError("Malformed matrix payload: distances is not a matrix")
        return cls(durations=durations, distances=distances)


class HttpMatrixProvider:
    """Fetches matrices from a routing backend over HTTP.

    Posts ``{"coordinates": [[lng, lat], ...], "profile": ..., ...}`` as JSON
    to ``base_url + endpoint``.
    """

    def __init__(
        self,
        base_url: str,
        endpoint: str = '/api/routes/matrix',
        token: Optional[str] = None,
        timeout: float = 30,
        session: Optional[requests.Session] = None
    ):
        self.url = base_url.rstrip('/') + endpoint
        self.token = token
        self.timeout = timeout
        self.session = session or requests.Session()

    @classmethod
    def from_parameters(cls, params, session: Optional[requests.Session] = None) -> 'HttpMatrixProvider':
        matrix = params.matrix
        return cls(
            base_url=matrix.get('base_url', 'http://localhost:3000'),
            endpoint=matrix.get('endpoint', '/api/routes/matrix'),
            token=matrix.get('token'),
            timeout=matrix.get('timeout', 30),
            session=session,
        )

    def _headers(self) -> Dict[str, str]:
        headers = {'Content-Type': 'application/json', 'Accept': 'application/json'}
        if self.token:
            headers['Authorization'] = f'Bearer {self.token}'
        return headers

    def request_matrix(
        self,
        coordinates: Sequence[Tuple[float, float]],
        options: MatrixOptions
    ) -> MatrixResult:
        """Blocking request; see ``fetch_matrix``."""
        body = {'coordinates': [[float(lng), float(lat)] for lng, lat in coordinates]}
        body.update(options.to_payload())
        logger.debug(f"POST {self.url} with {len(coordinates)} coordinates ({options.profile})")
        try:
            resp = self.session.post(self.url, json=body, headers=self._headers(), timeout=self.timeout)
        except requests.RequestException as e:
            raise MatrixProviderError(f"Request to {self.url} failed: {e}") from e

        if not resp.ok:
            raise MatrixProviderError(f"Matrix endpoint returned HTTP {resp.status_code}")
        try:
            payload = resp.json()
        except ValueError as e:
            raise MatrixProviderError(f"Matrix endpoint returned invalid JSON: {e}") from e
        return MatrixResult.from_payload(payload)

    async def fetch_matrix(
        self,
        coordinates: Sequence[Tuple[float, float]],
        options: MatrixOptions
    ) -> MatrixResult:
        return await asyncio.to_thread(self.request_matrix, coordinates, options)


class HaversineMatrixProvider:
    """Offline estimate: straight-line distances and durations at a fixed speed."""

    def __init__(self, avg_speed: float = 50.0):
        if avg_speed <= 0:
            raise ValueError(f"avg_speed must be positive. Got: {avg_speed}")
        self.avg_speed = avg_speed

    @classmethod
    def from_parameters(cls, params) -> 'HaversineMatrixProvider':
        return cls(avg_speed=params.matrix.get('avg_speed', 50.0))

    def build_matrices(
        self,
        coordinates: Sequence[Tuple[float, float]],
        options: MatrixOptions
    ) -> MatrixResult:
        n = len(coordinates)
        # Inputs are (lng, lat); distances want (lat, lng)
        dist_km = pairwise_haversine_km([(lat, lng) for lng, lat in coordinates])

        distance_matrix = np.rint(dist_km * 1000)
        # Speed in km/s for duration calculation
        duration_matrix = np.rint(dist_km / (self.avg_speed / 3600))

        def selection(value):
            return list(range(n)) if value in (None, 'all') else list(value)

        rows, cols = selection(options.sources), selection(options.destinations)
        if any(i < 0 or i >= n for i in rows + cols):
            raise MatrixProviderError(f"Source/destination index out of range for {n} coordinates")

        return MatrixResult(
            durations=duration_matrix[np.ix_(rows, cols)].tolist(),
            distances=distance_matrix[np.ix_(rows, cols)].tolist(),
        )

    async def fetch_matrix(
        self,
        coordinates: Sequence[Tuple[float, float]],
        options: MatrixOptions
    ) -> MatrixResult:
        try:
            return self.build_matrices(coordinates, options)
        except ValueError as e:
            raise MatrixProviderError(f"Cannot estimate matrix: {e}") from e
