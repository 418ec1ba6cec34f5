"""
Ranked visit recommendations.

Customers due a visit are clustered with DBSCAN at the configured radius,
retried once at twice the radius when nothing clusters, and grouped by area
when that still fails. Each cluster gets an efficiency estimate and the
list is ranked by efficiency score, best first.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Sequence

from fieldcluster.clustering.common import FallbackClusters
from fieldcluster.clustering.efficiency import ClusterEfficiency, estimate_cluster_efficiency
from fieldcluster.clustering.proximity import (
    group_by_area,
    partition_by_coordinates,
    run_density_clustering,
)
from fieldcluster.config.parameters import Parameters, default_parameters
from fieldcluster.utils.distance import haversine_km
from fieldcluster.utils.entities import coordinates_of
from fieldcluster.utils.logging import Symbols

logger = logging.getLogger(__name__)

# An area must have this many customers to be recommended on its own
MIN_AREA_GROUP = 2


@dataclass
class Recommendation:
    rank: int
    members: List[Any]
    efficiency: ClusterEfficiency
    area_based: bool = False

    @property
    def score(self) -> int:
        return self.efficiency.efficiency_score


def nearest_to_centroid(members: Sequence[Any], centre, limit: int) -> List[Any]:
    """The ``limit`` members closest to ``centre`` (ties keep input order)."""
    def distance(member):
        lat, lng = coordinates_of(member)
        return haversine_km(lat, lng, centre.lat, centre.lng)

    return sorted(members, key=distance)[:limit]


def _ranked(candidates: List[tuple], area_based: bool) -> List[Recommendation]:
    candidates.sort(key=lambda item: -item[1].efficiency_score)
    return [
        Recommendation(rank=rank, members=members, efficiency=efficiency, area_based=area_based)
        for rank, (members, efficiency) in enumerate(candidates)
    ]


def recommend_by_area(entities: Sequence[Any], params: Parameters = None) -> List[Recommendation]:
    """
    One recommendation per area tag with at least two customers, two of them
    located. Customers without coordinates count towards the area size but
    are left out of the recommendation.
    """
    if params is None:
        params = default_parameters()

    groups, _ = group_by_area(entities, params.area_field, params.unknown_area)
    candidates = []
    for group in groups:
        if len(group) < MIN_AREA_GROUP:
            continue
        located, _ = partition_by_coordinates(group)
        efficiency = estimate_cluster_efficiency(located, params)
        if efficiency is not None:
            candidates.append((located, efficiency))

    recommendations = _ranked(candidates, area_based=True)
    logger.info(f"{Symbols.PIN} Area-based grouping gave {len(recommendations)} recommendations")
    return recommendations


def _density_groups(located: Sequence[Any], params: Parameters) -> Optional[List[List[Any]]]:
    """DBSCAN groups at the configured radius, then at twice the radius.

    Returns None when clustering fails or finds nothing at either radius.
    """
    min_size = params.recommendations.get('min_cluster_size', 3)
    radius = params.recommendation_radius_km
    for epsilon_km in (radius, radius * 2):
        outcome = run_density_clustering(
            located, epsilon_km, min_size, params.area_field, params.unknown_area
        )
        if isinstance(outcome, FallbackClusters):
            return None
        if outcome.groups:
            logger.debug(f"DBSCAN found {len(outcome.groups)} clusters at {epsilon_km} km")
            return outcome.groups
        logger.debug(f"No DBSCAN clusters at {epsilon_km} km")
    return None


def recommend_clusters(entities: Sequence[Any], params: Parameters = None) -> List[Recommendation]:
    """
    Rank groups of customers worth visiting in one trip.

    Args:
        entities: Customers due a visit, with ``lat``/``lng`` and an area tag
        params: Parameters object; the ``recommendations`` section sets the
            radius, minimum cluster size and per-route limits

    Returns:
        Recommendations sorted by descending efficiency score, ranked from 0.
        Falls back to area grouping when density clustering gives nothing.
    """
    if params is None:
        params = default_parameters()
    settings = params.recommendations
    min_size = settings.get('min_cluster_size', 3)
    max_customers = settings.get('max_customers_per_route', 15)
    max_minutes = settings.get('max_driving_minutes', 480)

    located, _ = partition_by_coordinates(entities)
    if len(located) < min_size:
        logger.info(f"Only {len(located)} located customers, grouping by area")
        return recommend_by_area(entities, params)

    groups = _density_groups(located, params)
    if groups is None:
        return recommend_by_area(entities, params)

    candidates = []
    for group in groups:
        efficiency = estimate_cluster_efficiency(group, params)
        if efficiency is None:
            continue
        if len(group) > max_customers:
            if efficiency.estimated_minutes > max_minutes:
                logger.debug(
                    f"Dropping cluster of {len(group)} around {efficiency.primary_area}: "
                    f"{efficiency.estimated_minutes} min"
                )
                continue
            group = nearest_to_centroid(group, efficiency.centroid, max_customers)
            efficiency = estimate_cluster_efficiency(group, params)
        candidates.append((group, efficiency))

    recommendations = _ranked(candidates, area_based=False)
    logger.info(
        f"{Symbols.CHECK} {len(recommendations)} recommendations from {len(located)} located customers"
    )
    return recommendations
