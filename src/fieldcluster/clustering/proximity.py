"""
Group entities into proximity clusters for planning field visits.

Entities without usable coordinates always end up as noise. When the density
algorithm fails, entities are grouped by their area tag instead, and when it
finds no cluster at all every coordinate-bearing entity is offered as a
single cluster.
"""

import logging
from typing import Any, Dict, List, Sequence, Tuple

from fieldcluster.clustering.common import (
    Cluster,
    ClusterResult,
    DensityClusters,
    FallbackClusters,
)
from fieldcluster.clustering.dbscan import density_clusters
from fieldcluster.clustering.summary import centroid, most_common_area, summarize
from fieldcluster.config.parameters import Parameters, default_parameters, resolve_epsilon
from fieldcluster.utils.entities import area_of, coordinates_of
from fieldcluster.utils.logging import Symbols

logger = logging.getLogger(__name__)

def partition_by_coordinates(entities: Sequence[Any]) -> Tuple[List[Any], List[Any]]:
    """Split entities into (with finite lat/lng, without)."""
    with_coords, without_coords = [], []
    for entity in entities:
        if coordinates_of(entity) is None:
            without_coords.append(entity)
        else:
            with_coords.append(entity)
    return with_coords, without_coords


def group_by_area(
    entities: Sequence[Any],
    area_field: str = 'area',
    unknown_area: str = 'Unknown'
) -> Tuple[List[List[Any]], List[str]]:
    """Group entities by area tag, largest group first (ties in first-seen order)."""
    groups: Dict[str, List[Any]] = {}
    for entity in entities:
        groups.setdefault(area_of(entity, area_field, unknown_area), []).append(entity)
    ordered = sorted(groups.items(), key=lambda item: -len(item[1]))
    return [members for _, members in ordered], [area for area, _ in ordered]


def run_density_clustering(
    points: Sequence[Any],
    epsilon_km: float,
    min_points: int = 2,
    area_field: str = 'area',
    unknown_area: str = 'Unknown'
) -> DensityClusters | FallbackClusters:
    """Run DBSCAN, falling back to area grouping if it raises."""
    try:
        return DensityClusters(density_clusters(points, epsilon_km, min_points))
    except Exception as e:
        reason = f"{type(e).__name__}: {e}"
        logger.error(f"{Symbols.CROSS} DBSCAN clustering failed, falling back to area grouping: {reason}")
        groups, labels = group_by_area(points, area_field, unknown_area)
        return FallbackClusters(groups=groups, labels=labels, reason=reason)


def _fallback_clusters(outcome: FallbackClusters) -> List[Cluster]:
    return [
        Cluster(
            members=members,
            centroid=centroid(members),
            radius_km=0.0,
            area_label=label,
        )
        for members, label in zip(outcome.groups, outcome.labels)
    ]


def cluster_entities(
    entities: Sequence[Any],
    epsilon_km: float = None,
    params: Parameters = None
) -> ClusterResult:
    """
    Cluster entities by geographic proximity.

    Args:
        entities: Records with ``lat``/``lng`` (attributes or mapping keys) and
            an optional area tag. They are referenced, never copied.
        epsilon_km: Neighbourhood radius in km. None (or an unusable value)
            uses the configured default.
        params: Parameters object; defaults are loaded when omitted

    Returns:
        ClusterResult with clusters sorted by descending size
    """
    if params is None:
        params = default_parameters()
    epsilon_km = resolve_epsilon(epsilon_km, default=params.epsilon_km)
    area_field, unknown_area = params.area_field, params.unknown_area
    total = len(entities)

    with_coords, without_coords = partition_by_coordinates(entities)
    if not with_coords:
        logger.info(f"No entities with coordinates ({total} without), nothing to cluster")
        return ClusterResult.build([], list(without_coords), total, method='empty')

    outcome = run_density_clustering(
        with_coords, epsilon_km, params.min_points, area_field, unknown_area
    )

    if isinstance(outcome, FallbackClusters):
        clusters = _fallback_clusters(outcome)
        return ClusterResult.build(
            clusters, list(without_coords), total,
            method='fallback', fallback_reason=outcome.reason
        )

    if not outcome.groups and params.synthesize_single_cluster:
        logger.info(
            f"{Symbols.PIN} No clusters within {epsilon_km} km, "
            f"grouping all {len(with_coords)} located entities together"
        )
        single = Cluster(
            members=list(with_coords),
            centroid=centroid(with_coords),
            radius_km=0.0,
            area_label=most_common_area(with_coords, area_field, unknown_area),
        )
        return ClusterResult.build([single], list(without_coords), total, method='single')

    clustered_ids = {id(member) for group in outcome.groups for member in group}
    noise = list(without_coords) + [e for e in with_coords if id(e) not in clustered_ids]

    clusters = [summarize(group, area_field, unknown_area) for group in outcome.groups]
    clusters.sort(key=lambda c: -c.size)

    logger.info(
        f"{Symbols.CHECK} {len(clusters)} clusters from {total} entities "
        f"({len(noise)} noise, epsilon={epsilon_km} km)"
    )
    return ClusterResult.build(clusters, noise, total, method='dbscan')
