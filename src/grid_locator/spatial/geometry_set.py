"""Validated, indexed feature layers built from GeoJSON FeatureCollections.

A :class:`Layer` is the unit every spatial operation works on. It is created
once by :func:`load_layer`, never mutated afterwards, and replaced wholesale
when its source is reloaded.

Validation rules
----------------
* Top level must be a ``FeatureCollection`` with a ``features`` list.
* Supported geometries: ``Point``, ``LineString``, ``Polygon``, ``MultiPolygon``.
* Coordinates are finite numbers inside [-180, 180] x [-90, 90].
* LineStrings need >= 2 positions; polygon rings must be closed with >= 4
  positions and >= 3 distinct positions.
* All features of a layer share one geometry family (point, line, polygon).

Feature ids
-----------
A GeoJSON ``id`` member is kept when present (integers only) and must be
unique within the layer. Features without one get the lowest free
non-negative integer, in input order.

Dependencies: shapely, geopandas
"""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import geopandas as gpd
from shapely.geometry import LineString, MultiPolygon, Point, Polygon

Geometry = Union[Point, LineString, Polygon, MultiPolygon]

POINT = "point"
LINE = "line"
POLYGON = "polygon"

GEOMETRY_FAMILIES = {
    "Point": POINT,
    "LineString": LINE,
    "Polygon": POLYGON,
    "MultiPolygon": POLYGON,
}


class LayerLoadError(ValueError):
    """Base class for failures while building a Layer."""


class MalformedGeometry(LayerLoadError):
    """Raised for invalid documents, geometry types, rings or coordinates."""


class DuplicateFeatureId(LayerLoadError):
    """Raised when two features of one layer carry the same supplied id."""


@dataclass(frozen=True)
class Feature:
    """A single geometry plus its (normalised) properties.

    Attributes:
        feature_id: Stable integer id, unique within the owning layer.
        geometry: Shapely Point, LineString, Polygon or MultiPolygon.
        properties: Property mapping with canonical alias keys applied.
    """

    feature_id: int
    geometry: Geometry
    properties: Dict[str, Any] = field(default_factory=dict)

    @property
    def family(self) -> str:
        return GEOMETRY_FAMILIES[self.geometry.geom_type]

    def get(self, key: Optional[str], default: Any = None) -> Any:
        if key is None:
            return default
        return self.properties.get(key, default)


@dataclass(frozen=True)
class Layer:
    """A named, read-only collection of features sharing a geometry family.

    Attributes:
        name: Display name (usually the source file name).
        role: Semantic role: grid, grid_oot, substation, feeder or hut.
        family: "point", "line", "polygon", or None for an empty layer.
        features: Features in input order.
    """

    name: str
    role: str
    family: Optional[str]
    features: Tuple[Feature, ...]

    def __len__(self) -> int:
        return len(self.features)

    def __iter__(self):
        return iter(self.features)

    @property
    def is_empty(self) -> bool:
        return not self.features

    def by_id(self, feature_id: int) -> Optional[Feature]:
        return self._id_index.get(feature_id)

    @cached_property
    def _id_index(self) -> Dict[int, Feature]:
        return {f.feature_id: f for f in self.features}

    @cached_property
    def frame(self) -> gpd.GeoDataFrame:
        """GeoDataFrame view (one row per feature, positional index)."""
        if not self.features:
            return gpd.GeoDataFrame(columns=["feature_id", "geometry"], geometry="geometry", crs="EPSG:4326")
        records = [{**f.properties, "feature_id": f.feature_id, "geometry": f.geometry} for f in self.features]
        return gpd.GeoDataFrame(records, geometry="geometry", crs="EPSG:4326")

    def summary(self) -> Dict[str, Any]:
        return {"name": self.name, "role": self.role, "family": self.family, "feature_count": len(self.features)}


# ----------------------------- Coordinate Checks ---------------------------- #


def _position(raw: Any, where: str) -> Tuple[float, float]:
    if not isinstance(raw, (list, tuple)) or len(raw) < 2:
        raise MalformedGeometry(f"{where}: position must be [lon, lat], got {raw!r}")
    lon, lat = raw[0], raw[1]
    for value in (lon, lat):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise MalformedGeometry(f"{where}: coordinate {value!r} is not a number")
        if not math.isfinite(value):
            raise MalformedGeometry(f"{where}: coordinate {value!r} is not finite")
    if not (-180.0 <= lon <= 180.0 and -90.0 <= lat <= 90.0):
        raise MalformedGeometry(f"{where}: position ({lon}, {lat}) is outside WGS84 bounds")
    return float(lon), float(lat)


def _positions(raw: Any, where: str) -> List[Tuple[float, float]]:
    if not isinstance(raw, (list, tuple)):
        raise MalformedGeometry(f"{where}: expected a list of positions")
    return [_position(p, where) for p in raw]


def _ring(raw: Any, where: str) -> List[Tuple[float, float]]:
    ring = _positions(raw, where)
    if len(ring) < 4:
        raise MalformedGeometry(f"{where}: ring needs at least 4 positions, got {len(ring)}")
    if ring[0] != ring[-1]:
        raise MalformedGeometry(f"{where}: ring is not closed")
    if len(set(ring)) < 3:
        raise MalformedGeometry(f"{where}: ring needs at least 3 distinct positions")
    return ring


def _polygon(raw: Any, where: str) -> Polygon:
    if not isinstance(raw, (list, tuple)) or not raw:
        raise MalformedGeometry(f"{where}: polygon needs at least one ring")
    rings = [_ring(r, f"{where} ring {i}") for i, r in enumerate(raw)]
    return Polygon(rings[0], rings[1:])


def build_geometry(raw: Any, where: str = "geometry") -> Geometry:
    """Validate a GeoJSON geometry dict and return the shapely equivalent."""
    if not isinstance(raw, dict):
        raise MalformedGeometry(f"{where}: geometry must be an object")
    geom_type = raw.get("type")
    coords = raw.get("coordinates")
    if geom_type not in GEOMETRY_FAMILIES:
        raise MalformedGeometry(f"{where}: unsupported geometry type {geom_type!r}")
    if coords is None:
        raise MalformedGeometry(f"{where}: missing coordinates")

    if geom_type == "Point":
        return Point(_position(coords, where))
    if geom_type == "LineString":
        line = _positions(coords, where)
        if len(line) < 2:
            raise MalformedGeometry(f"{where}: LineString needs at least 2 positions")
        return LineString(line)
    if geom_type == "Polygon":
        return _polygon(coords, where)
    if not isinstance(coords, (list, tuple)) or not coords:
        raise MalformedGeometry(f"{where}: MultiPolygon needs at least one polygon")
    return MultiPolygon([_polygon(p, f"{where} part {i}") for i, p in enumerate(coords)])


# ---------------------------- Property Aliasing ----------------------------- #


def resolve_alias(properties: Mapping[str, Any], candidates: Sequence[str]) -> Optional[str]:
    """Return the first candidate key present in ``properties``.

    Exact matches win; otherwise the candidates are retried case-insensitively.
    """
    for key in candidates:
        if key and key in properties:
            return key
    lowered = {k.lower(): k for k in properties}
    for key in candidates:
        if key and key.lower() in lowered:
            return lowered[key.lower()]
    return None


def normalise_properties(properties: Mapping[str, Any], aliases: Optional[Mapping[str, Sequence[str]]]) -> Dict[str, Any]:
    props = dict(properties)
    for canonical, candidates in (aliases or {}).items():
        source_key = resolve_alias(properties, candidates)
        if source_key is not None:
            props[canonical] = properties[source_key]
    return props


# ------------------------------- Layer Loading ------------------------------ #


def _supplied_id(raw: Dict, where: str) -> Optional[int]:
    if "id" not in raw or raw["id"] is None:
        return None
    fid = raw["id"]
    if isinstance(fid, bool) or not isinstance(fid, int):
        raise MalformedGeometry(f"{where}: feature id must be an integer, got {fid!r}")
    return fid


def _assign_ids(supplied: List[Optional[int]]) -> List[int]:
    seen = set()
    for idx, fid in enumerate(supplied):
        if fid is None:
            continue
        if fid in seen:
            raise DuplicateFeatureId(f"feature {idx}: duplicate feature id {fid}")
        seen.add(fid)

    ids: List[int] = []
    next_free = 0
    for fid in supplied:
        if fid is None:
            while next_free in seen:
                next_free += 1
            fid = next_free
            seen.add(fid)
        ids.append(fid)
    return ids


def load_layer(
    raw: Any,
    name: str = "",
    role: str = "",
    family: Optional[str] = None,
    aliases: Optional[Mapping[str, Sequence[str]]] = None,
) -> Layer:
    """Validate a GeoJSON FeatureCollection and build a :class:`Layer`.

    Parameters
    ----------
    raw : dict
        Parsed GeoJSON document.
    name, role : str
        Layer name and semantic role recorded on the result.
    family : str, optional
        Expected geometry family; a mismatch raises ``MalformedGeometry``.
    aliases : mapping, optional
        Canonical property key -> ordered candidate source keys.

    Raises
    ------
    MalformedGeometry
        Invalid document structure, geometry type, ring or coordinate.
    DuplicateFeatureId
        Two features share a supplied id.
    """
    if not isinstance(raw, dict) or raw.get("type") != "FeatureCollection":
        raise MalformedGeometry(f"{name or 'layer'}: not a GeoJSON FeatureCollection")
    raw_features = raw.get("features")
    if not isinstance(raw_features, list):
        raise MalformedGeometry(f"{name or 'layer'}: 'features' must be a list")

    geometries: List[Geometry] = []
    properties: List[Dict[str, Any]] = []
    supplied: List[Optional[int]] = []
    families = set()
    for idx, item in enumerate(raw_features):
        where = f"feature {idx}"
        if not isinstance(item, dict) or item.get("type") != "Feature":
            raise MalformedGeometry(f"{where}: not a GeoJSON Feature")
        geom = build_geometry(item.get("geometry"), where)
        families.add(GEOMETRY_FAMILIES[geom.geom_type])
        props = item.get("properties") or {}
        if not isinstance(props, dict):
            raise MalformedGeometry(f"{where}: properties must be an object")
        geometries.append(geom)
        properties.append(normalise_properties(props, aliases))
        supplied.append(_supplied_id(item, where))

    if len(families) > 1:
        raise MalformedGeometry(f"{name or 'layer'}: mixed geometry families {sorted(families)}")
    layer_family = families.pop() if families else None
    if family is not None and layer_family is not None and layer_family != family:
        raise MalformedGeometry(f"{name or 'layer'}: expected {family} features, found {layer_family}")

    ids = _assign_ids(supplied)
    features = tuple(Feature(fid, geom, props) for fid, geom, props in zip(ids, geometries, properties))
    return Layer(name=name, role=role, family=layer_family, features=features)


def iter_polygons(geom: Geometry) -> Iterable[Polygon]:
    """Yield the Polygon parts of a polygonal geometry (nothing otherwise)."""
    if isinstance(geom, Polygon):
        yield geom
    elif isinstance(geom, MultiPolygon):
        yield from geom.geoms


__all__ = [
    "Geometry", "Feature", "Layer", "LayerLoadError", "MalformedGeometry", "DuplicateFeatureId",
    "POINT", "LINE", "POLYGON", "build_geometry", "load_layer", "resolve_alias",
    "normalise_properties", "iter_polygons",
]
