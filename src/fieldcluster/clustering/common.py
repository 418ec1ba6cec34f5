"""Shared types for the proximity clustering modules."""
from dataclasses import dataclass, field
from typing import Any, List, NamedTuple, Optional


class Coordinate(NamedTuple):
    lat: float
    lng: float


@dataclass
class Cluster:
    """A group of entities that are close to each other."""
    members: List[Any]
    centroid: Coordinate
    radius_km: float
    area_label: str

    @property
    def size(self) -> int:
        return len(self.members)

    def to_dict(self) -> dict:
        """Convert cluster to dictionary format (members are kept as references)."""
        return {
            'members': self.members,
            'centroid': {'lat': self.centroid.lat, 'lng': self.centroid.lng},
            'radius_km': self.radius_km,
            'area_label': self.area_label,
        }


@dataclass
class ClusterSummary:
    total_count: int
    cluster_count: int
    noise_count: int


@dataclass
class ClusterResult:
    """Clusters sorted by descending size, plus the entities left as noise."""
    clusters: List[Cluster]
    noise: List[Any]
    summary: ClusterSummary
    method: str = 'dbscan'
    fallback_reason: Optional[str] = None

    @classmethod
    def build(
        cls,
        clusters: List[Cluster],
        noise: List[Any],
        total_count: int,
        method: str,
        fallback_reason: Optional[str] = None
    ) -> 'ClusterResult':
        return cls(
            clusters=clusters,
            noise=noise,
            summary=ClusterSummary(
                total_count=total_count,
                cluster_count=len(clusters),
                noise_count=len(noise),
            ),
            method=method,
            fallback_reason=fallback_reason,
        )


@dataclass
class DensityClusters:
    """Member groups found by the density algorithm, in discovery order."""
    groups: List[List[Any]] = field(default_factory=list)


@dataclass
class FallbackClusters:
    """Member groups formed by area tag after the density algorithm failed."""
    groups: List[List[Any]]
    labels: List[str]
    reason: str
