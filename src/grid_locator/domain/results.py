"""Assignment result schema.

These models are what the resolver returns and what the HTTP API serialises.
Field names and the marker strings below are displayed verbatim by callers,
so treat them as a public contract.
"""
from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

OUT_OF_TERRITORY = "out of territory"
GRID_OOT = "OOT"
ASSIGNED_TEXT = "inside / assigned"


def distance_text(miles: Optional[float]) -> Optional[str]:
    """Approximate distance label, e.g. ``"~1.27 mi"``."""
    if miles is None:
        return None
    return f"~{miles:.2f} mi"


class _Record(BaseModel):
    # Python attributes stay snake_case; JSON uses camelCase (substationName, distanceMiles, ...)
    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class HutAssignment(_Record):
    feature_id: int
    # Station id of the nearest hut
    name: Optional[str]
    substation: Optional[str] = None
    distance_miles: float


class FeederAssignment(_Record):
    feature_id: Optional[int] = None
    code: Optional[str] = None
    substation_name: Optional[str] = None
    # Only set for line-typed feeders
    distance_miles: Optional[float] = None
    # "inside / assigned", "~0.42 mi", or None
    distance_text: Optional[str] = None
    assigned: bool = False


class GridAssignment(_Record):
    feature_id: Optional[int] = None
    # Grid code, or "OOT" when no grid polygon contains the point
    code: Optional[str]
    # Best-effort code from the out-of-territory grid layer
    neighbor_fallback_code: Optional[str] = None


class NeighborGrid(_Record):
    feature_id: int
    code: Optional[str]
    distance_miles: float
    via_fallback: bool = False


class NeighborGrids(_Record):
    # Keys are the compass letters themselves
    model_config = ConfigDict(alias_generator=None)

    N: Optional[NeighborGrid] = None
    S: Optional[NeighborGrid] = None
    E: Optional[NeighborGrid] = None
    W: Optional[NeighborGrid] = None


class NearbyGrid(_Record):
    feature_id: int
    code: Optional[str]
    distance_miles: float
    bearing: float
    cardinal: str


class AssignmentResult(_Record):
    """Everything the resolver knows about one query point."""

    lon: float = Field(..., ge=-180, le=180)
    lat: float = Field(..., ge=-90, le=90)
    # Zone name, None when unknown, or "out of territory"
    substation_name: Optional[str] = None
    substation_feature_id: Optional[int] = None
    hut: Optional[HutAssignment] = None
    feeder: FeederAssignment = FeederAssignment()
    grid: GridAssignment
    neighbors: NeighborGrids = NeighborGrids()

    @property
    def out_of_territory(self) -> bool:
        return self.substation_name == OUT_OF_TERRITORY


__all__ = [
    "OUT_OF_TERRITORY", "GRID_OOT", "ASSIGNED_TEXT", "distance_text",
    "HutAssignment", "FeederAssignment", "GridAssignment", "NeighborGrid", "NeighborGrids",
    "NearbyGrid", "AssignmentResult",
]
