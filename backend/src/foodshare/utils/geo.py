from __future__ import annotations

import math
from typing import Callable, Iterable, List, Tuple, TypeVar

T = TypeVar("T")

EARTH_RADIUS_KM = 6371.0


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometres. NaN inputs yield NaN."""
    phi1, phi2 = math.radians(lat1), math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def format_distance(km: float) -> str:
    if km < 1:
        return f"{round(km * 1000)}m"
    return f"{km:.1f}km"


def with_distances(
    items: Iterable[T],
    lat: float,
    lon: float,
    position: Callable[[T], Tuple[float, float]],
) -> List[Tuple[T, float]]:
    out: List[Tuple[T, float]] = []
    for item in items:
        item_lat, item_lon = position(item)
        out.append((item, haversine_km(lat, lon, item_lat, item_lon)))
    return out


def filter_within_radius(
    items: Iterable[T],
    lat: float,
    lon: float,
    radius_km: float,
    position: Callable[[T], Tuple[float, float]],
) -> List[Tuple[T, float]]:
    return [(item, d) for item, d in with_distances(items, lat, lon, position) if d <= radius_km]


def sort_by_distance(
    items: Iterable[T],
    lat: float,
    lon: float,
    position: Callable[[T], Tuple[float, float]],
) -> List[Tuple[T, float]]:
    return sorted(with_distances(items, lat, lon, position), key=lambda pair: pair[1])
