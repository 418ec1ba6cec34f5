import asyncio
import pytest

from fieldcluster.matrix.cache import MatrixCache
from fieldcluster.matrix.providers import MatrixResult
from fieldcluster.matrix.sequence import LegTime, get_sequential_times
from tests.utils.stubs import CountingProvider, FailingProvider, FakeClock

ROUTE = [(10.70, 59.90), (10.75, 59.91), (10.80, 59.92)]


def sequential(cache, coords):
    return asyncio.run(get_sequential_times(cache, coords))


@pytest.mark.parametrize("coords", [[], [(10.7, 59.9)]])
def test_short_routes_skip_provider(coords):
    provider = CountingProvider()
    cache = MatrixCache(provider, clock=FakeClock())
    assert sequential(cache, coords) == []
    assert provider.calls == []


def test_three_stops_give_two_legs_from_off_diagonal_cells():
    provider = CountingProvider()
    cache = MatrixCache(provider, clock=FakeClock())
    legs = sequential(cache, ROUTE)
    # CountingProvider cell [i][j] = 10*i + j seconds and 100x that in meters
    assert legs == [LegTime(1, 100), LegTime(12, 1200)]
    assert len(provider.calls) == 1


def test_failed_matrix_gives_no_legs():
    cache = MatrixCache(FailingProvider(failures=5), clock=FakeClock())
    assert sequential(cache, ROUTE) == []


def test_missing_cells_default_to_zero():
    result = MatrixResult(durations=[[0, None, 3], [None, 0, 7]], distances=None)
    cache = MatrixCache(CountingProvider(result=result), clock=FakeClock())
    legs = sequential(cache, ROUTE)
    assert legs == [LegTime(0, 0), LegTime(7, 0)]


def test_legs_beyond_truncated_matrix_are_zero():
    coords = [(10.0 + i * 0.01, 59.9) for i in range(27)]
    cache = MatrixCache(CountingProvider(), clock=FakeClock())
    legs = sequential(cache, coords)
    assert len(legs) == 26
    assert legs[23] == LegTime(10 * 23 + 24, (10 * 23 + 24) * 100)
    assert legs[24] == LegTime(0, 0)
    assert legs[25] == LegTime(0, 0)


def test_repeated_route_uses_cache():
    provider = CountingProvider()
    cache = MatrixCache(provider, clock=FakeClock())
    sequential(cache, ROUTE)
    sequential(cache, ROUTE)
    assert len(provider.calls) == 1


def test_connection_error_gives_no_legs():
    cache = MatrixCache(FailingProvider(failures=1, error=ConnectionError("reset by peer")), clock=FakeClock())
    assert sequential(cache, ROUTE) == []
