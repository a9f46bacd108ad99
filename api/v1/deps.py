"""Shared FastAPI dependencies."""
from fastapi import Depends, HTTPException, Request

from grid_locator.services.layer_catalog import LayerCatalog


def get_catalog(request: Request) -> LayerCatalog:
    catalog = getattr(request.app.state, "catalog", None)
    if catalog is None:
        raise HTTPException(status_code=503, detail="Layers are not loaded")
    return catalog


def get_ready_catalog(catalog: LayerCatalog = Depends(get_catalog)) -> LayerCatalog:
    """Catalog for resolution endpoints; 503 while a configured layer failed to load."""
    failed = catalog.unavailable_roles()
    if failed:
        raise HTTPException(
            status_code=503,
            detail=f"Layers failed to load: {', '.join(failed)}",
        )
    return catalog
