"""
Rough effort estimates for serving a cluster in one trip.

The estimate combines the round trip from the start location to the cluster
centroid, travel between visits inside the cluster and a fixed service time
per visit. A score from 0 to 100 rewards dense, large clusters close to the
start. With a matrix cache, the start-to-member leg uses real travel times.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, List, Optional, Sequence

from fieldcluster.clustering.common import Coordinate
from fieldcluster.clustering.summary import centroid, most_common_area
from fieldcluster.config.parameters import Parameters, default_parameters
from fieldcluster.matrix.cache import MatrixCache
from fieldcluster.matrix.providers import MatrixOptions
from fieldcluster.utils.distance import haversine_km
from fieldcluster.utils.entities import coordinates_of, get_field

logger = logging.getLogger(__name__)

KM_PER_DEGREE = 111
MIN_AREA_KM2 = 0.1


def round_half_up(value: float, digits: int = 0) -> float:
    """Round halves up (2.5 -> 3) where round() rounds them to even (2.5 -> 2)."""
    scale = 10 ** digits
    rounded = math.floor(value * scale + 0.5)
    return rounded if digits == 0 else rounded / scale


@dataclass
class ClusterEfficiency:
    member_count: int
    centroid: Coordinate
    primary_area: str
    efficiency_score: int
    estimated_minutes: int
    estimated_km: int
    density: float
    avg_distance_from_centroid: float
    distance_to_start: int
    categories: List[str] = field(default_factory=list)
    matrix_based: bool = False


def _bounding_box_area_km2(coords: List[tuple], center: Coordinate) -> float:
    lats = [lat for lat, _ in coords]
    lngs = [lng for _, lng in coords]
    lat_km = (max(lats) - min(lats)) * KM_PER_DEGREE
    lng_km = (max(lngs) - min(lngs)) * KM_PER_DEGREE * math.cos(math.radians(center.lat))
    return max(lat_km * lng_km, MIN_AREA_KM2)


def _categories(members: Sequence[Any], category_field: str) -> List[str]:
    seen = []
    for member in members:
        value = get_field(member, category_field)
        if value and value not in seen:
            seen.append(value)
    return seen


def estimate_cluster_efficiency(
    members: Sequence[Any],
    params: Parameters = None
) -> Optional[ClusterEfficiency]:
    """
    Estimate time, distance and an efficiency score for visiting ``members``.

    Args:
        members: Entities with coordinates
        params: Parameters object; the ``efficiency`` section sets the start
            location, service time, speeds and detour factor

    Returns:
        ClusterEfficiency, or None for fewer than two located members
    """
    if params is None:
        params = default_parameters()
    settings = params.efficiency

    coords = [c for c in (coordinates_of(m) for m in members) if c is not None]
    n = len(coords)
    if n < 2:
        return None

    center = centroid(members)
    start_lat = settings.get('start_latitude', 59.9139)
    start_lng = settings.get('start_longitude', 10.7522)
    distance_to_start = haversine_km(start_lat, start_lng, center.lat, center.lng)
    avg_distance = sum(haversine_km(lat, lng, center.lat, center.lng) for lat, lng in coords) / n

    density = n / _bounding_box_area_km2(coords, center)

    detour = settings.get('detour_factor', 1.5)
    travel_to_cluster = distance_to_start * 2 / settings.get('travel_speed', 50.0) * 60
    intra_cluster = avg_distance * n * detour / settings.get('local_speed', 30.0) * 60
    service = n * settings.get('service_time', 30)

    raw_score = (density * n * 10) / (1 + distance_to_start * 0.05 + avg_distance * 0.3)

    return ClusterEfficiency(
        member_count=n,
        centroid=center,
        primary_area=most_common_area(members, params.area_field, params.unknown_area),
        efficiency_score=min(100, round_half_up(raw_score * 10)),
        estimated_minutes=round_half_up(travel_to_cluster + intra_cluster + service),
        estimated_km=round_half_up(distance_to_start * 2 + avg_distance * n * detour),
        density=round_half_up(density, 1),
        avg_distance_from_centroid=round_half_up(avg_distance, 1),
        distance_to_start=round_half_up(distance_to_start),
        categories=_categories(members, params.category_field),
    )


async def estimate_cluster_efficiency_with_matrix(
    members: Sequence[Any],
    cache: MatrixCache,
    params: Parameters = None
) -> Optional[ClusterEfficiency]:
    """Like estimate_cluster_efficiency, with start-to-member travel from a matrix lookup.

    Falls back to the straight-line estimate when the cluster does not fit in
    one matrix query or the lookup fails.
    """
    if params is None:
        params = default_parameters()
    basic = estimate_cluster_efficiency(members, params)
    if basic is None:
        return None

    settings = params.efficiency
    start = (settings.get('start_longitude', 10.7522), settings.get('start_latitude', 59.9139))
    coords = [start] + [
        (lng, lat) for lat, lng in (c for c in (coordinates_of(m) for m in members) if c is not None)
    ]
    if len(coords) < 3 or len(coords) > cache.max_coordinates:
        return basic

    options = MatrixOptions(
        profile=params.matrix.get('profile', 'driving'), sources=[0], destinations='all'
    )
    matrix = await cache.get_matrix(coords, options)
    if matrix is None or not matrix.durations or not matrix.durations[0]:
        return basic

    start_times = [t for t in matrix.durations[0][1:] if t is not None and t > 0]
    if not start_times:
        return basic

    avg_travel = sum(start_times) / len(start_times)
    service = basic.member_count * settings.get('service_time', 30)
    basic.estimated_minutes = round_half_up(avg_travel / 60) * 2 + service

    if matrix.distances and matrix.distances[0]:
        start_distances = [d for d in matrix.distances[0][1:] if d is not None and d > 0]
        if start_distances:
            basic.estimated_km = round_half_up(sum(start_distances) / len(start_distances) / 1000 * 2)

    basic.matrix_based = True
    logger.debug(f"Matrix-based estimate for {basic.member_count} members: {basic.estimated_minutes} min")
    return basic
