"""Cardinal-direction neighbour discovery for polygon layers.

For each of N, S, E and W a ray is cast from the query point (nudged by
``EPS`` degrees so it does not start on the current polygon's edge) for
``RAY_LENGTH`` degrees. The polygon whose boundary the ray meets closest to
the query point is that direction's neighbour.

Irregular or gappy layers can leave a ray without a hit. Those directions
fall back to the polygons whose vertex centroid lies strictly in the
direction's half-plane, choosing the one with the nearest boundary.

Polygons containing the query point are never reported as neighbours.
Equal distances resolve to the first polygon in layer order.
"""
from __future__ import annotations

from typing import Callable, Dict, List, NamedTuple, Optional

import numpy as np
import shapely
from shapely.geometry import LineString

from .containment import point_in_polygon
from .distance import as_lon_lat, haversine_miles_many
from .geometry_set import Feature, Layer, POLYGON
from .nearest import distance_to_boundary, vertex_centroid

EPS = 1e-6
RAY_LENGTH = 3.0  # degrees, roughly 200 miles
DIRECTIONS = ("N", "S", "E", "W")


class NeighborMatch(NamedTuple):
    feature: Feature
    distance_miles: float
    via_fallback: bool = False


Neighbors = Dict[str, Optional[NeighborMatch]]


def cardinal_rays(lon: float, lat: float, eps: float = EPS, length: float = RAY_LENGTH) -> Dict[str, LineString]:
    return {
        "N": LineString([(lon, lat + eps), (lon, lat + length)]),
        "S": LineString([(lon, lat - eps), (lon, lat - length)]),
        "E": LineString([(lon + eps, lat), (lon + length, lat)]),
        "W": LineString([(lon - eps, lat), (lon - length, lat)]),
    }


def half_plane_tests(lon: float, lat: float, eps: float = EPS) -> Dict[str, Callable[[float, float], bool]]:
    return {
        "N": lambda c_lon, c_lat: c_lat > lat + eps,
        "S": lambda c_lon, c_lat: c_lat < lat - eps,
        "E": lambda c_lon, c_lat: c_lon > lon + eps,
        "W": lambda c_lon, c_lat: c_lon < lon - eps,
    }


def _first_hit(lon: float, lat: float, ray: LineString, candidates: List[Feature]) -> Optional[NeighborMatch]:
    best: Optional[Feature] = None
    best_miles = float("inf")
    for feature in candidates:
        crossing = ray.intersection(feature.geometry.boundary)
        if crossing.is_empty:
            continue
        coords = shapely.get_coordinates(crossing)
        miles = float(haversine_miles_many(lon, lat, coords[:, 0], coords[:, 1]).min())
        if np.isfinite(miles) and miles < best_miles:
            best, best_miles = feature, miles
    if best is None:
        return None
    return NeighborMatch(best, best_miles)


def _half_plane_fallback(point, test: Callable[[float, float], bool], candidates: List[Feature]) -> Optional[NeighborMatch]:
    best: Optional[Feature] = None
    best_miles = float("inf")
    for feature in candidates:
        if not test(*vertex_centroid(feature.geometry)):
            continue
        miles = distance_to_boundary(point, feature.geometry)
        if np.isfinite(miles) and miles < best_miles:
            best, best_miles = feature, miles
    if best is None:
        return None
    return NeighborMatch(best, best_miles, via_fallback=True)


def directional_neighbors(point, layer: Optional[Layer]) -> Neighbors:
    """Return ``{"N", "S", "E", "W"}`` -> :class:`NeighborMatch` or ``None``.

    Parameters
    ----------
    point : shapely Point or (lon, lat)
        Query location in WGS84.
    layer : Layer, optional
        Polygon layer (normally the grid layer). Absent or non-polygon layers
        yield all ``None``.
    """
    result: Neighbors = {d: None for d in DIRECTIONS}
    if layer is None or layer.family != POLYGON:
        return result

    lon, lat = as_lon_lat(point)
    candidates = [f for f in layer.features if not point_in_polygon((lon, lat), f.geometry)]
    if not candidates:
        return result

    for direction, ray in cardinal_rays(lon, lat).items():
        result[direction] = _first_hit(lon, lat, ray, candidates)

    # Ray casting first, then the centroid half-plane fallback for the gaps
    for direction, test in half_plane_tests(lon, lat).items():
        if result[direction] is None:
            result[direction] = _half_plane_fallback((lon, lat), test, candidates)
    return result


__all__ = [
    "EPS", "RAY_LENGTH", "DIRECTIONS", "NeighborMatch", "Neighbors",
    "cardinal_rays", "half_plane_tests", "directional_neighbors",
]
