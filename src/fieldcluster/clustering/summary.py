"""Centroid, radius and area label for a group of entities."""
from collections import Counter
from typing import Any, List, Sequence, Tuple

from fieldcluster.clustering.common import Cluster, Coordinate
from fieldcluster.utils.distance import haversine_km
from fieldcluster.utils.entities import area_of, coordinates_of


def centroid(members: Sequence[Any]) -> Coordinate:
    """Arithmetic mean of member coordinates (planar approximation)."""
    coords = [coordinates_of(m) for m in members]
    coords = [c for c in coords if c is not None]
    if not coords:
        raise ValueError("Cannot compute a centroid without coordinates")
    return Coordinate(
        lat=sum(lat for lat, _ in coords) / len(coords),
        lng=sum(lng for _, lng in coords) / len(coords),
    )


def radius_km(members: Sequence[Any], center: Coordinate) -> float:
    """Largest haversine distance from ``center`` to any member."""
    radius = 0.0
    for member in members:
        coords = coordinates_of(member)
        if coords is None:
            continue
        radius = max(radius, haversine_km(center.lat, center.lng, *coords))
    return radius


def area_counts(
    members: Sequence[Any],
    area_field: str = 'area',
    unknown_area: str = 'Unknown'
) -> List[Tuple[str, int]]:
    """(area, count) pairs, most frequent first. Ties keep first-seen order."""
    counts = Counter(area_of(m, area_field, unknown_area) for m in members)
    return sorted(counts.items(), key=lambda item: -item[1])


def most_common_area(
    members: Sequence[Any],
    area_field: str = 'area',
    unknown_area: str = 'Unknown'
) -> str:
    counts = area_counts(members, area_field, unknown_area)
    return counts[0][0] if counts else unknown_area


def area_label(
    members: Sequence[Any],
    area_field: str = 'area',
    unknown_area: str = 'Unknown'
) -> str:
    """Human readable name for the area a cluster covers.

    One distinct tag gives the tag itself, two give ``"A / B"`` and three or
    more give ``"A-area (N places)"``, with A the most frequent tag.
    """
    counts = area_counts(members, area_field, unknown_area)
    if not counts:
        return unknown_area
    if len(counts) == 1:
        return counts[0][0]
    if len(counts) == 2:
        return f"{counts[0][0]} / {counts[1][0]}"
    return f"{counts[0][0]}-area ({len(counts)} places)"


def summarize(
    members: List[Any],
    area_field: str = 'area',
    unknown_area: str = 'Unknown'
) -> Cluster:
    """Build a Cluster with centroid, radius and label from its members."""
    center = centroid(members)
    return Cluster(
        members=members,
        centroid=center,
        radius_km=radius_km(members, center),
        area_label=area_label(members, area_field, unknown_area),
    )
