import asyncio
import pytest
import requests

from fieldcluster.matrix.providers import (
    HaversineMatrixProvider,
    HttpMatrixProvider,
    MatrixOptions,
    MatrixProviderError,
    MatrixResult,
)
from fieldcluster.utils.distance import haversine_km
from tests.utils.stubs import FakeResponse, FakeSession

COORDS = [(10.70, 59.90), (10.75, 59.91), (10.80, 59.92)]


def test_options_reject_unknown_profile():
    with pytest.raises(ValueError):
        MatrixOptions(profile='flying')


def test_options_payload():
    assert MatrixOptions().to_payload() == {'profile': 'driving'}
    payload = MatrixOptions(
        profile='cycling', sources=[0], destinations='all', depart_at='2026-10-19T08:00'
    ).to_payload()
    assert payload == {
        'profile': 'cycling', 'sources': '0', 'destinations': 'all', 'depart_at': '2026-10-19T08:00'
    }


def test_options_accept_index_strings():
    assert MatrixOptions(sources='0;2').sources == (0, 2)
    assert MatrixOptions(sources=[0, 2]) == MatrixOptions(sources='0;2')
    with pytest.raises(ValueError):
        MatrixOptions(destinations='first')


@pytest.mark.parametrize("payload", [
    None,
    [],
    {'durations': None},
    {'data': 'oops'},
    {'durations': [[0]], 'distances': 'x'},
])
def test_malformed_payloads(payload):
    with pytest.raises(MatrixProviderError):
        MatrixResult.from_payload(payload)


def test_payload_with_and_without_data_wrapper():
    bare = MatrixResult.from_payload({'durations': [[0, 1]], 'distances': [[0, 2]]})
    wrapped = MatrixResult.from_payload({'data': {'durations': [[0, 1]], 'distances': [[0, 2]]}})
    assert bare == wrapped
    assert MatrixResult.from_payload({'durations': [[0]]}).distances is None


def test_http_provider_posts_coordinates_and_options():
    session = FakeSession(FakeResponse(payload={'data': {'durations': [[0, 60], [60, 0]],
                                                         'distances': [[0, 900], [900, 0]]}}))
    provider = HttpMatrixProvider('https://planner.example/', token='secret', timeout=5, session=session)

    result = asyncio.run(provider.fetch_matrix(COORDS[:2], MatrixOptions(profile='walking')))

    assert result.durations[0][1] == 60
    request = session.requests[0]
    assert request['url'] == 'https://planner.example/api/routes/matrix'
    assert request['json'] == {'coordinates': [[10.70, 59.90], [10.75, 59.91]], 'profile': 'walking'}
    assert request['headers']['Authorization'] == 'Bearer secret'
    assert request['timeout'] == 5


def test_http_provider_without_token_sends_no_authorization():
    session = FakeSession()
    HttpMatrixProvider('http://localhost:3000', session=session).request_matrix(COORDS, MatrixOptions())
    assert 'Authorization' not in session.requests[0]['headers']


@pytest.mark.parametrize("session", [
    FakeSession(FakeResponse(status_code=502)),
    FakeSession(FakeResponse(invalid_json=True)),
    FakeSession(FakeResponse(payload={'error': 'quota'})),
    FakeSession(error=requests.ConnectionError("connection refused")),
    FakeSession(error=requests.Timeout("timed out")),
])
def test_http_provider_failures(session):
    provider = HttpMatrixProvider('http://localhost:3000', session=session)
    with pytest.raises(MatrixProviderError):
        provider.request_matrix(COORDS, MatrixOptions())


def test_http_provider_from_parameters(params):
    provider = HttpMatrixProvider.from_parameters(params, session=FakeSession())
    assert provider.url == 'http://localhost:3000/api/routes/matrix'
    assert provider.timeout == 30


def test_haversine_provider_matrices():
    provider = HaversineMatrixProvider(avg_speed=36.0)
    result = asyncio.run(provider.fetch_matrix(COORDS, MatrixOptions()))

    km = haversine_km(59.90, 10.70, 59.91, 10.75)
    assert result.distances[0][1] == pytest.approx(round(km * 1000))
    # 36 km/h is 10 m/s
    assert result.durations[0][1] == pytest.approx(round(km * 100))
    assert all(result.durations[i][i] == 0 for i in range(3))
    assert result.distances[0][2] == result.distances[2][0]


def test_haversine_provider_sources_and_destinations():
    provider = HaversineMatrixProvider()
    result = asyncio.run(provider.fetch_matrix(COORDS, MatrixOptions(sources=[0], destinations='all')))
    assert len(result.durations) == 1
    assert len(result.durations[0]) == 3


def test_haversine_provider_bad_index():
    provider = HaversineMatrixProvider()
    with pytest.raises(MatrixProviderError):
        asyncio.run(provider.fetch_matrix(COORDS, MatrixOptions(sources=[5])))


def test_haversine_provider_requires_positive_speed():
    with pytest.raises(ValueError):
        HaversineMatrixProvider(avg_speed=0)
