import pytest
from pathlib import Path

from fieldcluster.config.parameters import Parameters
from fieldcluster.utils.entities import Customer

# Define project root for path fixtures
repo_root = Path(__file__).resolve().parent.parent

@pytest.fixture(scope="session")
def default_yaml():
    """Path to the packaged default config"""
    return repo_root / "src" / "fieldcluster" / "config" / "default_config.yaml"


@pytest.fixture(scope="session")
def params():
    return Parameters.from_yaml()


@pytest.fixture
def two_groups():
    """Five customers in two tight groups about 2 km apart (sizes 3 and 2)."""
    return [
        Customer('A1', 59.9000, 10.7000, area='Majorstuen'),
        Customer('A2', 59.9010, 10.7000, area='Majorstuen'),
        Customer('A3', 59.9000, 10.7015, area='Frogner'),
        Customer('B1', 59.9000, 10.7360, area='Sentrum'),
        Customer('B2', 59.9010, 10.7360, area='Sentrum'),
    ]


@pytest.fixture
def scattered():
    """Three customers far apart from each other (tens of km)."""
    return [
        Customer('S1', 59.90, 10.75, area='Oslo'),
        Customer('S2', 60.40, 10.75, area='Hamar'),
        Customer('S3', 59.90, 11.75, area='Oslo'),
    ]


@pytest.fixture
def unlocated():
    """Customers missing at least one usable coordinate."""
    return [
        Customer('U1', None, 10.7, area='Oslo'),
        Customer('U2', 59.9, None, area='Oslo'),
        Customer('U3', float('nan'), 10.7, area='Oslo'),
        {'id': 'U4', 'lat': float('inf'), 'lng': 10.7},
        {'id': 'U5', 'lat': '59.9', 'lng': '10.7'},
    ]
