"""Geometry layers and the spatial predicates the resolver is built on."""

from .geometry_set import (
    Feature,
    Layer,
    LayerLoadError,
    MalformedGeometry,
    DuplicateFeatureId,
    load_layer,
)
from .containment import point_in_polygon, first_containing
from .nearest import NearestMatch, nearest_point, nearest_line, nearest_polygon_edge, nearest_by_centroid, is_assigned
from .neighbors import NeighborMatch, directional_neighbors

__all__ = [
    "Feature", "Layer", "LayerLoadError", "MalformedGeometry", "DuplicateFeatureId", "load_layer",
    "point_in_polygon", "first_containing",
    "NearestMatch", "nearest_point", "nearest_line", "nearest_polygon_edge", "nearest_by_centroid", "is_assigned",
    "NeighborMatch", "directional_neighbors",
]
