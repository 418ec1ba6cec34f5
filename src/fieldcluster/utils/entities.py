"""Access to caller-owned entity records.

Entities may be plain objects with attributes or mappings such as dicts. They
are never copied or mutated here, and are compared by identity.
"""
from collections.abc import Mapping
from dataclasses import dataclass, field
from numbers import Real
from typing import Any, Dict, Optional, Tuple
import math


@dataclass(eq=False)
class Customer:
    """A customer site to be visited. Equality and hashing are by identity."""
    id: Any
    lat: Optional[float] = None
    lng: Optional[float] = None
    area: Optional[str] = None
    category: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)


def get_field(entity, name: str, default=None):
    """Read ``name`` from a mapping key or an attribute."""
    if isinstance(entity, Mapping):
        return entity.get(name, default)
    return getattr(entity, name, default)


def is_finite_number(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def coordinates_of(entity) -> Optional[Tuple[float, float]]:
    """(lat, lng) of an entity, or None unless both are finite numbers."""
    lat = get_field(entity, 'lat')
    lng = get_field(entity, 'lng')
    if is_finite_number(lat) and is_finite_number(lng):
        return float(lat), float(lng)
    return None


def area_of(entity, area_field: str = 'area', unknown_area: str = 'Unknown') -> str:
    area = get_field(entity, area_field)
    if area is None or area == '':
        return unknown_area
    return str(area)
