"""Layer inspection and reload endpoints."""
from __future__ import annotations

import logging
from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from grid_locator.auth.auth import verify_token
from grid_locator.services.layer_catalog import LayerCatalog
from api.v1.deps import get_catalog

logger = logging.getLogger(__name__)

router = APIRouter()


class LayerSummary(BaseModel):
    name: str
    role: str
    family: Optional[str]
    feature_count: int


class LayersResponse(BaseModel):
    # Role -> summary, null for absent layers
    layers: Dict[str, Optional[LayerSummary]]
    # Role -> error message from the most recent load
    errors: Dict[str, str] = {}


@router.get("/layers", response_model=LayersResponse)
def list_layers(token: str = Depends(verify_token), catalog: LayerCatalog = Depends(get_catalog)):
    return LayersResponse(layers=catalog.snapshot().summary(), errors=catalog.last_errors)


@router.post("/layers/reload", response_model=LayersResponse)
def reload_layers(token: str = Depends(verify_token), catalog: LayerCatalog = Depends(get_catalog)):
    """Reload every layer from its configured source and swap them in at once.

    Raises
    ------
    HTTPException
        409 if the catalog was built without settings (nothing to reload from).
    """
    if catalog.settings is None:
        raise HTTPException(status_code=409, detail="Layer catalog has no configured sources")
    logger.info("Reloading layers from configured sources")
    errors = catalog.reload()
    if errors:
        logger.warning(f"Layer reload finished with errors: {sorted(errors)}")
    return LayersResponse(layers=catalog.snapshot().summary(), errors=errors)
