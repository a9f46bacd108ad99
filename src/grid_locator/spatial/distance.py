"""Great-circle distance helpers (statute miles).

Haversine on a spherical Earth with the IUGG mean radius. Good to a few
thousandths of a mile over the tens-of-miles extents a service territory
covers, which is all the assignment rules need.
"""
from __future__ import annotations

import math
from typing import Tuple

import numpy as np

EARTH_RADIUS_KM = 6371.0088
KM_PER_MILE = 1.609344
EARTH_RADIUS_MI = EARTH_RADIUS_KM / KM_PER_MILE


def haversine_miles(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
    """Great-circle distance between two lon/lat points in miles."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = phi2 - phi1
    dlmb = math.radians(lon2 - lon1)
    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_MI * math.asin(min(1.0, math.sqrt(a)))


def haversine_miles_many(lon: float, lat: float, lons: np.ndarray, lats: np.ndarray) -> np.ndarray:
    """Vectorised :func:`haversine_miles` from one point to many."""
    lons = np.asarray(lons, dtype=float)
    lats = np.asarray(lats, dtype=float)
    phi1 = np.radians(lat)
    phi2 = np.radians(lats)
    dphi = phi2 - phi1
    dlmb = np.radians(lons - lon)
    a = np.sin(dphi / 2) ** 2 + np.cos(phi1) * np.cos(phi2) * np.sin(dlmb / 2) ** 2
    return 2 * EARTH_RADIUS_MI * np.arcsin(np.minimum(1.0, np.sqrt(a)))


def closest_on_segments(lon: float, lat: float, starts: np.ndarray, ends: np.ndarray) -> np.ndarray:
    """Closest point of each segment to (lon, lat).

    Projection happens in a local equirectangular frame centred on the query
    point (longitude scaled by cos(lat)); the segment parameter found there is
    applied back in lon/lat. ``starts`` and ``ends`` are (n, 2) arrays.
    """
    starts = np.asarray(starts, dtype=float).reshape(-1, 2)
    ends = np.asarray(ends, dtype=float).reshape(-1, 2)
    kx = math.cos(math.radians(lat))
    ax = (starts[:, 0] - lon) * kx
    ay = starts[:, 1] - lat
    dx = (ends[:, 0] - starts[:, 0]) * kx
    dy = ends[:, 1] - starts[:, 1]
    length_sq = dx * dx + dy * dy
    with np.errstate(divide="ignore", invalid="ignore"):
        t = np.where(length_sq > 0, -(ax * dx + ay * dy) / length_sq, 0.0)
    t = np.clip(t, 0.0, 1.0)
    return starts + (ends - starts) * t[:, None]


def segment_distances_miles(lon: float, lat: float, starts: np.ndarray, ends: np.ndarray) -> np.ndarray:
    """Distance in miles from (lon, lat) to each segment."""
    nearest = closest_on_segments(lon, lat, starts, ends)
    if not len(nearest):
        return np.empty(0)
    return haversine_miles_many(lon, lat, nearest[:, 0], nearest[:, 1])


def initial_bearing(lon1: float, lat1: float, lon2: float, lat2: float) -> float:
    """Initial great-circle bearing from point 1 to point 2, in (-180, 180]."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dlmb = math.radians(lon2 - lon1)
    y = math.sin(dlmb) * math.cos(phi2)
    x = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(dlmb)
    return math.degrees(math.atan2(y, x))


CARDINALS = ("N", "NE", "E", "SE", "S", "SW", "W", "NW", "N")


def bearing_to_cardinal(bearing: float) -> str:
    """Map a bearing in degrees to an 8-point compass label."""
    return CARDINALS[int(math.floor((bearing % 360.0) / 45.0 + 0.5))]


def as_lon_lat(point) -> Tuple[float, float]:
    """Accept a shapely Point or a (lon, lat) pair."""
    if hasattr(point, "x") and hasattr(point, "y"):
        return float(point.x), float(point.y)
    lon, lat = point
    return float(lon), float(lat)


__all__ = [
    "EARTH_RADIUS_MI", "haversine_miles", "haversine_miles_many", "closest_on_segments",
    "segment_distances_miles", "initial_bearing", "bearing_to_cardinal", "as_lon_lat",
]
