"""Point assignment endpoints.

Provides endpoints that resolve a geographic point against the loaded layers.

Workflow:
1. Accept longitude/latitude (WGS84, validated ranges).
2. Refuse with 503 while a configured layer failed to load and has no
   earlier version to fall back on.
3. Take one snapshot of the layer catalog so the whole request sees a single
   consistent set of layers.
4. Resolve substation zone, service hut, feeder, grid and neighbour grids.
5. Return the structured result with camelCase field names (substationName,
   distanceMiles, neighborFallbackCode, ...); unconfigured layers show up as
   null fields.
"""
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from grid_locator.auth.auth import verify_token
from grid_locator.domain.results import AssignmentResult, NearbyGrid, NeighborGrids
from grid_locator.services.assignment import nearby_grids, neighbor_grids, resolve
from grid_locator.services.layer_catalog import LayerCatalog
from api.v1.deps import get_ready_catalog

logger = logging.getLogger(__name__)

router = APIRouter()


class PointRequest(BaseModel):
    lon: float = Field(
        ..., ge=-180, le=180, description="Longitude in WGS84"
    )
    lat: float = Field(
        ..., ge=-90, le=90, description="Latitude in WGS84"
    )


class NearbyGridsRequest(PointRequest):
    # Number of grids to return, nearest centroid first
    k: int = Field(3, ge=1, le=50)


@router.post("/assign/point", response_model=AssignmentResult)
def assign_point(
    request: PointRequest,
    token: str = Depends(verify_token),
    catalog: LayerCatalog = Depends(get_ready_catalog),
):
    """Resolve substation, hut, feeder, grid and neighbour grids for a point.

    Parameters
    ----------
    request : PointRequest
        Geographic coordinates.
    token : str
        Bearer authentication token (dependency injected).

    Returns
    -------
    AssignmentResult
        Assignment record; "out of territory" / "OOT" markers where applicable.
    """
    result = resolve((request.lon, request.lat), catalog.snapshot(), catalog.options)
    logger.info(
        f"Assigned ({request.lon}, {request.lat}): grid={result.grid.code} substation={result.substation_name}")
    return result


@router.post("/neighbors/point", response_model=NeighborGrids)
def neighbors_for_point(
    request: PointRequest,
    token: str = Depends(verify_token),
    catalog: LayerCatalog = Depends(get_ready_catalog),
):
    """North/South/East/West neighbour grids only."""
    return neighbor_grids((request.lon, request.lat), catalog.snapshot(), catalog.options)


@router.post("/grids/nearest", response_model=List[NearbyGrid])
def nearest_grids(
    request: NearbyGridsRequest,
    token: str = Depends(verify_token),
    catalog: LayerCatalog = Depends(get_ready_catalog),
):
    """Grids ordered by centroid distance with a compass bearing hint."""
    return nearby_grids((request.lon, request.lat), catalog.snapshot(), k=request.k, options=catalog.options)
