"""
clustering module

This module provides functions and classes for grouping customers into
proximity clusters.
"""

# Re-export public functions and classes
from .common import (
    Cluster,
    ClusterResult,
    ClusterSummary,
    Coordinate,
    DensityClusters,
    FallbackClusters,
)

from .dbscan import density_clusters

from .summary import (
    area_label,
    centroid,
    most_common_area,
    radius_km,
    summarize,
)

from .proximity import (
    cluster_entities,
    group_by_area,
    partition_by_coordinates,
    run_density_clustering,
)

from .efficiency import (
    ClusterEfficiency,
    estimate_cluster_efficiency,
    estimate_cluster_efficiency_with_matrix,
)

from .recommendations import (
    Recommendation,
    recommend_by_area,
    recommend_clusters,
)

__all__ = [
    'cluster_entities',
    'density_clusters',
    'run_density_clustering',
    'group_by_area',
    'partition_by_coordinates',
    'summarize',
    'centroid',
    'radius_km',
    'area_label',
    'most_common_area',
    'estimate_cluster_efficiency',
    'estimate_cluster_efficiency_with_matrix',
    'recommend_clusters',
    'recommend_by_area',
    'Recommendation',
    'Cluster',
    'ClusterResult',
    'ClusterSummary',
    'ClusterEfficiency',
    'Coordinate',
    'DensityClusters',
    'FallbackClusters',
]
