"""Assignment resolution: one query point in, one :class:`AssignmentResult` out.

Workflow (per point):
1. Substation zone by containment (polygon zones) or nearest point (point zones).
2. Nearest service hut.
3. Feeder by nearest line (classified against the assignment tolerance) or
   by containment (polygon feeders).
4. Out-of-territory override when neither a zone polygon nor a feeder polygon
   contains the point.
5. Grid by containment, with a best-effort code from the out-of-territory
   grid layer when the point is outside every grid.
6. Directional neighbour grids, always.

``resolve`` is a pure function of the point, the layer snapshot and the
options; absent layers produce absent fields rather than errors.
"""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

from grid_locator.domain.results import (
    ASSIGNED_TEXT,
    GRID_OOT,
    OUT_OF_TERRITORY,
    AssignmentResult,
    FeederAssignment,
    GridAssignment,
    HutAssignment,
    NearbyGrid,
    NeighborGrid,
    NeighborGrids,
    distance_text,
)
from grid_locator.spatial.distance import as_lon_lat
from grid_locator.spatial.geometry_set import Feature, Layer, LINE, POINT, POLYGON
from grid_locator.spatial.containment import first_containing
from grid_locator.spatial.nearest import (
    DEFAULT_FEEDER_TOLERANCE_MI,
    is_assigned,
    nearest_by_centroid,
    nearest_line,
    nearest_point,
    nearest_polygon_edge,
)
from grid_locator.spatial.neighbors import directional_neighbors

# Canonical property keys written onto feeder features at load time
FEEDER_CODE_KEY = "feeder_code"
FEEDER_SUBSTATION_KEY = "feeder_substation"

ROLES = ("grid", "grid_oot", "substation", "feeder", "hut")


@dataclass(frozen=True)
class LayerSet:
    """Immutable snapshot of every loaded layer; ``None`` marks an absent one."""

    grid: Optional[Layer] = None
    grid_oot: Optional[Layer] = None
    substation: Optional[Layer] = None
    feeder: Optional[Layer] = None
    hut: Optional[Layer] = None

    def get(self, role: str) -> Optional[Layer]:
        if role not in ROLES:
            raise KeyError(f"Unknown layer role: {role}")
        return getattr(self, role)

    def with_layer(self, role: str, layer: Optional[Layer]) -> "LayerSet":
        if role not in ROLES:
            raise KeyError(f"Unknown layer role: {role}")
        return replace(self, **{role: layer})

    def summary(self) -> Dict[str, Optional[Dict[str, Any]]]:
        return {role: (layer.summary() if layer is not None else None) for role, layer in self.items()}

    def items(self):
        return [(role, getattr(self, role)) for role in ROLES]


@dataclass(frozen=True)
class ResolverOptions:
    substation_geometry: str = POLYGON
    feeder_geometry: str = POLYGON
    feeder_tolerance_mi: float = DEFAULT_FEEDER_TOLERANCE_MI
    grid_code_field: str = "Number_"
    substation_name_field: str = "Substation"
    hut_id_field: str = "stationID"
    hut_substation_field: str = "Substation"

    @classmethod
    def from_settings(cls, settings) -> "ResolverOptions":
        return cls(
            substation_geometry=settings.SUBSTATION_GEOMETRY,
            feeder_geometry=settings.FEEDER_GEOMETRY,
            feeder_tolerance_mi=settings.FEEDER_ASSIGN_TOLERANCE_MI,
            grid_code_field=settings.GRID_CODE_FIELD,
            substation_name_field=settings.SUBSTATION_NAME_FIELD,
            hut_id_field=settings.HUT_ID_FIELD,
            hut_substation_field=settings.HUT_SUBSTATION_FIELD,
        )


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value)


# ------------------------------ Per-Layer Steps ----------------------------- #


def _hut(point, layer: Optional[Layer], options: ResolverOptions) -> Optional[HutAssignment]:
    match = nearest_point(point, layer)
    if match.feature is None:
        return None
    return HutAssignment(
        feature_id=match.feature.feature_id,
        name=_text(match.feature.get(options.hut_id_field)),
        substation=_text(match.feature.get(options.hut_substation_field)),
        distance_miles=match.distance_miles,
    )


def _feeder(point, layer: Optional[Layer], options: ResolverOptions):
    """Return ``(FeederAssignment, containing feature or None)``."""
    if options.feeder_geometry == LINE:
        match = nearest_line(point, layer)
        if match.feature is None:
            return FeederAssignment(), None
        assigned = is_assigned(match.distance_miles, options.feeder_tolerance_mi)
        return FeederAssignment(
            feature_id=match.feature.feature_id,
            code=_text(match.feature.get(FEEDER_CODE_KEY)),
            substation_name=_text(match.feature.get(FEEDER_SUBSTATION_KEY)),
            distance_miles=match.distance_miles,
            distance_text=ASSIGNED_TEXT if assigned else distance_text(match.distance_miles),
            assigned=assigned,
        ), None

    hit = first_containing(point, layer)
    if hit is None:
        return FeederAssignment(), None
    return FeederAssignment(
        feature_id=hit.feature_id,
        code=_text(hit.get(FEEDER_CODE_KEY)),
        substation_name=_text(hit.get(FEEDER_SUBSTATION_KEY)),
        distance_text=ASSIGNED_TEXT,
        assigned=True,
    ), hit


def _grid(point, layers: LayerSet, options: ResolverOptions) -> GridAssignment:
    hit = first_containing(point, layers.grid)
    if hit is not None:
        return GridAssignment(feature_id=hit.feature_id, code=_text(hit.get(options.grid_code_field)))
    fallback = nearest_polygon_edge(point, layers.grid_oot)
    fallback_code = None
    if fallback.feature is not None:
        fallback_code = _text(fallback.feature.get(options.grid_code_field))
    return GridAssignment(code=GRID_OOT, neighbor_fallback_code=fallback_code)


def neighbor_grids(point, layers: LayerSet, options: Optional[ResolverOptions] = None) -> NeighborGrids:
    """N/S/E/W neighbour grids of ``point`` on the grid layer."""
    options = options or ResolverOptions()
    found = directional_neighbors(point, layers.grid)
    entries = {}
    for direction, match in found.items():
        if match is None:
            continue
        entries[direction] = NeighborGrid(
            feature_id=match.feature.feature_id,
            code=_text(match.feature.get(options.grid_code_field)),
            distance_miles=match.distance_miles,
            via_fallback=match.via_fallback,
        )
    return NeighborGrids(**entries)


def nearby_grids(point, layers: LayerSet, k: int = 3, options: Optional[ResolverOptions] = None) -> List[NearbyGrid]:
    """Grids ordered by centroid distance, with a compass hint for each."""
    options = options or ResolverOptions()
    return [
        NearbyGrid(
            feature_id=m.feature.feature_id,
            code=_text(m.feature.get(options.grid_code_field)),
            distance_miles=m.distance_miles,
            bearing=m.bearing,
            cardinal=m.cardinal,
        )
        for m in nearest_by_centroid(point, layers.grid, k=k)
    ]


# --------------------------------- Resolver --------------------------------- #


def resolve(point, layers: LayerSet, options: Optional[ResolverOptions] = None) -> AssignmentResult:
    """Resolve a query point against a layer snapshot.

    Parameters
    ----------
    point : shapely Point or (lon, lat)
        Query location in WGS84.
    layers : LayerSet
        Loaded layers; any of them may be absent.
    options : ResolverOptions, optional
        Geometry roles, field names and feeder tolerance.

    Returns
    -------
    AssignmentResult
    """
    options = options or ResolverOptions()
    lon, lat = as_lon_lat(point)
    pt = (lon, lat)

    zone_hit: Optional[Feature] = None
    if options.substation_geometry == POINT:
        zone = nearest_point(pt, layers.substation).feature
    else:
        zone = zone_hit = first_containing(pt, layers.substation)
    substation_name = _text(zone.get(options.substation_name_field)) if zone is not None else None
    substation_id = zone.feature_id if zone is not None else None

    hut = _hut(pt, layers.hut, options)
    feeder, feeder_hit = _feeder(pt, layers.feeder, options)

    # Only polygon zones and polygon feeders can place a point in territory
    if zone_hit is None and feeder_hit is None:
        substation_name = OUT_OF_TERRITORY
        feeder = feeder.model_copy(update={
            "code": OUT_OF_TERRITORY,
            "substation_name": OUT_OF_TERRITORY,
            "distance_text": None,
            "assigned": False,
        })

    return AssignmentResult(
        lon=lon,
        lat=lat,
        substation_name=substation_name,
        substation_feature_id=substation_id,
        hut=hut,
        feeder=feeder,
        grid=_grid(pt, layers, options),
        neighbors=neighbor_grids(pt, layers, options),
    )


__all__ = [
    "FEEDER_CODE_KEY", "FEEDER_SUBSTATION_KEY", "ROLES", "LayerSet", "ResolverOptions",
    "resolve", "neighbor_grids", "nearby_grids",
]
