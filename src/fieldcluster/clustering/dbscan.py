"""
Density-based clustering (DBSCAN) over haversine distances.

A point whose epsilon-neighbourhood (the point itself included) holds at
least ``min_points`` entries is a core point. Clusters grow through the
neighbourhoods of their core members; non-core points reachable from a core
point are border points and join the first cluster that reaches them.
Points are visited in input order, so cluster ids follow discovery order.

scikit-learn's haversine metric works on [lat, lng] in radians on the unit
sphere, so epsilon is given to it in radians (km / 6371).
All neighbourhoods are materialised before expansion, so a dense input costs
O(n^2) distance evaluations and memory; low thousands of points stay
interactive.
"""

import logging
import math
from typing import Any, List, Sequence
import numpy as np
from sklearn.cluster import DBSCAN

from fieldcluster.utils.distance import EARTH_RADIUS_KM
from fieldcluster.utils.entities import get_field

logger = logging.getLogger(__name__)

NOISE = -1


def _coordinate_array(points: Sequence[Any]) -> np.ndarray:
    """(n, 2) array of [lat, lng]. Raises on entities without usable coordinates."""
    coords = np.array(
        [[get_field(p, 'lat'), get_field(p, 'lng')] for p in points],
        dtype=float
    ).reshape(-1, 2)
    if not np.isfinite(coords).all():
        raise ValueError("All points must have finite lat/lng coordinates")
    if (np.abs(coords[:, 0]) > 90).any() or (np.abs(coords[:, 1]) > 180).any():
        raise ValueError("Coordinates out of range (lat within ±90, lng within ±180)")
    return coords


def density_clusters(
    points: Sequence[Any],
    epsilon_km: float,
    min_points: int = 2
) -> List[List[Any]]:
    """
    Group points into density-connected clusters.

    Args:
        points: Entities with finite ``lat``/``lng`` (attributes or mapping keys)
        epsilon_km: Neighbourhood radius in kilometers
        min_points: Neighbourhood size (including the point itself) for a core point

    Returns:
        One member list per cluster, in discovery order. Members keep their
        input order. Points in no cluster are simply absent.
    """
    if not isinstance(epsilon_km, (int, float)) or not math.isfinite(epsilon_km) or epsilon_km <= 0:
        raise ValueError(f"epsilon_km must be a positive finite number. Got: {epsilon_km}")
    if min_points < 1:
        raise ValueError(f"min_points must be at least 1. Got: {min_points}")

    if len(points) == 0:
        return []

    coords = _coordinate_array(points)
    model = DBSCAN(
        eps=epsilon_km / EARTH_RADIUS_KM,
        min_samples=min_points,
        metric='haversine',
    )
    labels = model.fit(np.radians(coords)).labels_

    n_clusters = int(labels.max()) + 1 if labels.max() >= 0 else 0
    clusters = [
        [points[idx] for idx in np.flatnonzero(labels == cluster_id)]
        for cluster_id in range(n_clusters)
    ]
    logger.debug(
        f"DBSCAN found {n_clusters} clusters in {len(points)} points "
        f"(epsilon={epsilon_km} km, min_points={min_points}, "
        f"noise={int((labels == NOISE).sum())})"
    )
    return clusters
