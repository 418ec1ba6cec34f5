"""Great-circle distances on a spherical Earth."""
from typing import Sequence, Tuple
import numpy as np
from haversine import haversine, haversine_vector, Unit

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Haversine distance in km between two (lat, lng) points given in degrees.

    Non-finite inputs give NaN. Latitudes or longitudes outside the valid
    range raise ``ValueError``.
    """
    # Central angle in radians, scaled by our own radius instead of the
    # library's mean Earth radius.
    return haversine((lat1, lng1), (lat2, lng2), unit=Unit.RADIANS) * EARTH_RADIUS_KM


def haversine_km_many(point: Tuple[float, float], coords: np.ndarray) -> np.ndarray:
    """Distances in km from one (lat, lng) point to every row of ``coords``."""
    coords = np.asarray(coords, dtype=float)
    if len(coords) == 0:
        return np.zeros(0)
    origin = np.tile(np.asarray(point, dtype=float), (len(coords), 1))
    return haversine_vector(origin, coords, Unit.RADIANS) * EARTH_RADIUS_KM


def pairwise_haversine_km(coords: Sequence[Tuple[float, float]]) -> np.ndarray:
    """Symmetric matrix of haversine distances (km) between all coordinate pairs."""
    coords = np.asarray(coords, dtype=float)
    n = len(coords)
    matrix = np.zeros((n, n))
    for i in range(n):
        matrix[i] = haversine_km_many(coords[i], coords)
    np.fill_diagonal(matrix, 0.0)
    return matrix
