"""Nearest-feature searches over point, line and polygon layers.

Every search returns a :class:`NearestMatch`; both fields are ``None`` when
the layer is absent or has no candidate. Distances are great-circle miles.
Ties go to the feature that comes first in layer order.
"""
from __future__ import annotations

from typing import Iterator, List, NamedTuple, Optional, Tuple

import numpy as np
from shapely.geometry import LineString

from .distance import (
    as_lon_lat,
    bearing_to_cardinal,
    haversine_miles,
    haversine_miles_many,
    initial_bearing,
    segment_distances_miles,
)
from .geometry_set import Feature, Geometry, Layer, LINE, POINT, POLYGON, iter_polygons

DEFAULT_FEEDER_TOLERANCE_MI = 0.25


class NearestMatch(NamedTuple):
    feature: Optional[Feature]
    distance_miles: Optional[float]


NO_MATCH = NearestMatch(None, None)


class CentroidMatch(NamedTuple):
    feature: Feature
    distance_miles: float
    bearing: float
    cardinal: str


# ---------------------------- Geometry Utilities ---------------------------- #


def _segments(coords) -> Tuple[np.ndarray, np.ndarray]:
    arr = np.asarray(coords, dtype=float)[:, :2]
    return arr[:-1], arr[1:]


def boundary_segments(geom: Geometry) -> Tuple[np.ndarray, np.ndarray]:
    """Start/end arrays of every edge of a line or of every polygon ring."""
    if isinstance(geom, LineString):
        return _segments(geom.coords)
    starts: List[np.ndarray] = []
    ends: List[np.ndarray] = []
    for poly in iter_polygons(geom):
        for ring in (poly.exterior, *poly.interiors):
            s, e = _segments(ring.coords)
            starts.append(s)
            ends.append(e)
    if not starts:
        return np.empty((0, 2)), np.empty((0, 2))
    return np.vstack(starts), np.vstack(ends)


def distance_to_boundary(point, geom: Geometry) -> float:
    """Miles from ``point`` to the nearest edge of a line or polygon."""
    lon, lat = as_lon_lat(point)
    starts, ends = boundary_segments(geom)
    if not len(starts):
        return float("inf")
    return float(segment_distances_miles(lon, lat, starts, ends).min())


def vertex_centroid(geom: Geometry) -> Tuple[float, float]:
    """Mean of all ring vertices, closing vertices excluded."""
    coords = []
    for poly in iter_polygons(geom):
        for ring in (poly.exterior, *poly.interiors):
            coords.extend(ring.coords[:-1])
    arr = np.asarray(coords, dtype=float)[:, :2]
    lon, lat = arr.mean(axis=0)
    return float(lon), float(lat)


def _of_family(layer: Optional[Layer], family: str) -> Iterator[Feature]:
    if layer is None:
        return iter(())
    return (f for f in layer.features if f.family == family)


def _pick_min(point, features, measure) -> NearestMatch:
    best: Optional[Feature] = None
    best_miles = float("inf")
    for feature in features:
        miles = measure(point, feature.geometry)
        if np.isfinite(miles) and miles < best_miles:
            best, best_miles = feature, miles
    if best is None:
        return NO_MATCH
    return NearestMatch(best, float(best_miles))


# ------------------------------ Nearest Search ------------------------------ #


def nearest_point(point, layer: Optional[Layer]) -> NearestMatch:
    candidates = list(_of_family(layer, POINT))
    if not candidates:
        return NO_MATCH
    lon, lat = as_lon_lat(point)
    lons = np.fromiter((f.geometry.x for f in candidates), dtype=float, count=len(candidates))
    lats = np.fromiter((f.geometry.y for f in candidates), dtype=float, count=len(candidates))
    miles = haversine_miles_many(lon, lat, lons, lats)
    idx = int(np.argmin(miles))  # argmin keeps the first of equal minima
    return NearestMatch(candidates[idx], float(miles[idx]))


def nearest_line(point, layer: Optional[Layer]) -> NearestMatch:
    """Nearest line feature by point-to-segment distance over all segments."""
    return _pick_min(point, _of_family(layer, LINE), distance_to_boundary)


def nearest_polygon_edge(point, layer: Optional[Layer]) -> NearestMatch:
    """Nearest polygon feature by distance to any of its rings (holes included)."""
    return _pick_min(point, _of_family(layer, POLYGON), distance_to_boundary)


def is_assigned(distance_miles: Optional[float], tolerance_miles: float = DEFAULT_FEEDER_TOLERANCE_MI) -> bool:
    return distance_miles is not None and distance_miles <= tolerance_miles


def nearest_by_centroid(point, layer: Optional[Layer], k: int = 3) -> List[CentroidMatch]:
    """Up to ``k`` polygon features ordered by distance to their vertex centroid.

    Each entry carries the initial bearing from the point to the centroid and
    its 8-point compass label, handy as a directional hint.
    """
    lon, lat = as_lon_lat(point)
    scored = []
    for feature in _of_family(layer, POLYGON):
        c_lon, c_lat = vertex_centroid(feature.geometry)
        bearing = initial_bearing(lon, lat, c_lon, c_lat)
        scored.append(CentroidMatch(
            feature=feature,
            distance_miles=haversine_miles(lon, lat, c_lon, c_lat),
            bearing=bearing,
            cardinal=bearing_to_cardinal(bearing),
        ))
    scored.sort(key=lambda m: m.distance_miles)
    return scored[:max(k, 0)]


__all__ = [
    "NearestMatch", "CentroidMatch", "NO_MATCH", "DEFAULT_FEEDER_TOLERANCE_MI",
    "boundary_segments", "distance_to_boundary", "vertex_centroid",
    "nearest_point", "nearest_line", "nearest_polygon_edge", "nearest_by_centroid", "is_assigned",
]
