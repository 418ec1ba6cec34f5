from dataclasses import dataclass, field
from functools import lru_cache
from pathlib import Path
from typing import Dict
import math
import yaml

DEFAULT_EPSILON_KM = 15.0


def resolve_epsilon(value, default: float = DEFAULT_EPSILON_KM) -> float:
    """Return a usable neighbourhood radius in km from a stored user setting.

    Missing, non-numeric, non-finite or non-positive values fall back to
    ``default``.
    """
    try:
        epsilon = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(epsilon) or epsilon <= 0:
        return default
    return epsilon


@dataclass
class Parameters:
    """Configuration parameters for clustering and travel-time lookups"""
    clustering: Dict
    matrix: Dict
    efficiency: Dict = field(default_factory=dict)
    recommendations: Dict = field(default_factory=dict)

    @classmethod
    def from_yaml(cls, path: Path | str = None) -> 'Parameters':
        """Load parameters from YAML file"""
        if path is None:
            path = Path(__file__).parent / 'default_config.yaml'

        with open(path) as f:
            data = yaml.safe_load(f)
            return cls(**data)

    def __post_init__(self):
        """Validate parameters after initialization"""
        epsilon = self.clustering.get('epsilon_km', DEFAULT_EPSILON_KM)
        if not isinstance(epsilon, (int, float)) or not math.isfinite(epsilon) or epsilon <= 0:
            raise ValueError(
                f"epsilon_km must be a positive number. Got: {epsilon}"
            )

        min_points = self.clustering.get('min_points', 2)
        if not isinstance(min_points, int) or min_points < 1:
            raise ValueError(
                f"min_points must be a positive integer. Got: {min_points}"
            )

        ttl = self.matrix.get('ttl_seconds', 300)
        if not isinstance(ttl, (int, float)) or ttl <= 0:
            raise ValueError(
                f"ttl_seconds must be a positive number. Got: {ttl}"
            )

        max_coordinates = self.matrix.get('max_coordinates', 25)
        if not isinstance(max_coordinates, int) or max_coordinates < 2:
            raise ValueError(
                f"max_coordinates must be an integer >= 2. Got: {max_coordinates}"
            )

        precision = self.matrix.get('precision', 4)
        if not isinstance(precision, int) or precision < 0:
            raise ValueError(
                f"precision must be a non-negative integer. Got: {precision}"
            )

        for key, default in (('min_cluster_size', 3), ('max_customers_per_route', 15)):
            value = self.recommendations.get(key, default)
            if not isinstance(value, int) or value < 1:
                raise ValueError(
                    f"{key} must be a positive integer. Got: {value}"
                )

        max_minutes = self.recommendations.get('max_driving_minutes', 480)
        if not isinstance(max_minutes, (int, float)) or max_minutes <= 0:
            raise ValueError(
                f"max_driving_minutes must be a positive number. Got: {max_minutes}"
            )

    @property
    def epsilon_km(self) -> float:
        return resolve_epsilon(self.clustering.get('epsilon_km'))

    @property
    def min_points(self) -> int:
        return self.clustering.get('min_points', 2)

    @property
    def area_field(self) -> str:
        return self.clustering.get('area_field', 'area')

    @property
    def category_field(self) -> str:
        return self.clustering.get('category_field', 'category')

    @property
    def unknown_area(self) -> str:
        return self.clustering.get('unknown_area', 'Unknown')

    @property
    def synthesize_single_cluster(self) -> bool:
        return bool(self.clustering.get('synthesize_single_cluster', True))

    @property
    def recommendation_radius_km(self) -> float:
        return resolve_epsilon(self.recommendations.get('cluster_radius_km'), default=5.0)

    def matrix_cache(self, provider, clock=None):
        """Build a MatrixCache configured from the ``matrix`` section."""
        from fieldcluster.matrix.cache import MatrixCache

        kwargs = {}
        if clock is not None:
            kwargs['clock'] = clock
        return MatrixCache(
            provider,
            ttl=float(self.matrix.get('ttl_seconds', 300)),
            max_coordinates=self.matrix.get('max_coordinates', 25),
            precision=self.matrix.get('precision', 4),
            **kwargs
        )


@lru_cache(maxsize=1)
def default_parameters() -> Parameters:
    """Packaged defaults, parsed once and shared. Treat as read-only."""
    return Parameters.from_yaml()
