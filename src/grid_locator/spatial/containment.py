"""Point-in-polygon lookups leveraging shapely and the GeoPandas spatial index.

Functions
---------
point_in_polygon(point, polygon) -> bool
    True when the point lies inside (or on the boundary of) a Polygon or
    MultiPolygon. Points inside a hole are outside.

first_containing(point, layer) -> Feature | None
    The first feature, in layer order, whose polygon contains the point.
    Overlapping polygons are allowed; first match wins.

Longitudes are taken as given: polygons that cross the antimeridian must use
consistent longitude signs, no wrapping is applied.
"""
from __future__ import annotations

from typing import Optional

import numpy as np
from shapely.geometry import MultiPolygon, Point, Polygon

from .distance import as_lon_lat
from .geometry_set import Feature, Layer, POLYGON


def point_in_polygon(point, polygon) -> bool:
    if not isinstance(polygon, (Polygon, MultiPolygon)):
        return False
    return bool(polygon.covers(Point(as_lon_lat(point))))


def first_containing(point, layer: Optional[Layer]) -> Optional[Feature]:
    """Return the first polygon feature of ``layer`` containing ``point``.

    Parameters
    ----------
    point : shapely Point or (lon, lat)
        Query location in WGS84.
    layer : Layer, optional
        Polygon layer; absent, empty or non-polygon layers yield ``None``.
    """
    if layer is None or layer.is_empty or layer.family != POLYGON:
        return None
    pt = Point(as_lon_lat(point))
    # STRtree query returns positions in arbitrary order; layer order decides
    hits = layer.frame.sindex.query(pt, predicate="covered_by")
    if len(hits) == 0:
        return None
    return layer.features[int(np.min(hits))]


__all__ = ["point_in_polygon", "first_containing"]
