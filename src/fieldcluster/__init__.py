"""
fieldcluster

Proximity clustering of field-service customers and cached travel-time
matrix lookups.
"""

from .clustering import (
    cluster_entities,
    Cluster,
    ClusterResult,
    estimate_cluster_efficiency,
    estimate_cluster_efficiency_with_matrix,
    recommend_clusters,
    Recommendation,
)
from .config import Parameters, resolve_epsilon
from .matrix import (
    MatrixCache,
    MatrixOptions,
    MatrixResult,
    HttpMatrixProvider,
    HaversineMatrixProvider,
    get_sequential_times,
)
from .utils.entities import Customer
from .utils.data_processing import customers_from_frame, clusters_to_frame

__all__ = [
    'cluster_entities',
    'Cluster',
    'ClusterResult',
    'estimate_cluster_efficiency',
    'estimate_cluster_efficiency_with_matrix',
    'recommend_clusters',
    'Recommendation',
    'Parameters',
    'resolve_epsilon',
    'MatrixCache',
    'MatrixOptions',
    'MatrixResult',
    'HttpMatrixProvider',
    'HaversineMatrixProvider',
    'get_sequential_times',
    'Customer',
    'customers_from_frame',
    'clusters_to_frame',
]
