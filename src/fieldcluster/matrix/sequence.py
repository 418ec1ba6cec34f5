"""Per-leg travel times along an ordered list of stops."""
from typing import List, NamedTuple, Optional, Sequence, Tuple

from fieldcluster.matrix.cache import MatrixCache


class LegTime(NamedTuple):
    duration_sec: float
    distance_m: float


def _cell(matrix: Optional[list], i: int, j: int) -> float:
    try:
        value = matrix[i][j]
    except (IndexError, TypeError):
        return 0
    return value or 0


async def get_sequential_times(
    cache: MatrixCache,
    ordered_coords: Sequence[Tuple[float, float]]
) -> List[LegTime]:
    """Travel time and distance of each leg (i -> i+1) of an ordered route.

    ``ordered_coords`` are (lng, lat) pairs. Returns an empty list for fewer
    than two stops or when no matrix is available; missing cells count as 0.
    """
    if len(ordered_coords) < 2:
        return []

    matrix = await cache.get_matrix(ordered_coords)
    if matrix is None or not matrix.durations:
        return []

    return [
        LegTime(
            duration_sec=_cell(matrix.durations, i, i + 1),
            distance_m=_cell(matrix.distances, i, i + 1),
        )
        for i in range(len(ordered_coords) - 1)
    ]
