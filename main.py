"""FastAPI application entry point for the Grid Locator service.

This module provides the FastAPI application with layer loading tied to the
application lifespan: configured GeoJSON layers are loaded once at startup
into a shared catalog and can be reloaded later through the API.
"""

from fastapi import FastAPI
from contextlib import asynccontextmanager
from typing import Optional
from api.v1.routes import api_router
from grid_locator.auth.config import settings
from grid_locator.services.layer_catalog import LayerCatalog
import argparse
import logging
import uvicorn


def create_app(catalog: Optional[LayerCatalog] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Parameters
    ----------
    catalog : LayerCatalog, optional
        Pre-built layer catalog (used by tests). When omitted the configured
        layer sources are loaded during application startup.

    Returns
    -------
    FastAPI
        Configured FastAPI application with the API mounted at /api/v1.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if catalog is None:
            app.state.catalog = LayerCatalog.from_settings(settings)
        yield

    app = FastAPI(title="grid-locator-service", lifespan=lifespan)
    if catalog is not None:
        app.state.catalog = catalog
    app.include_router(api_router, prefix="/api/v1")
    return app


app = create_app()

if __name__ == "__main__":
    parser = argparse.ArgumentParser(
        description="Grid Locator Service")
    parser.add_argument("--host", default="0.0.0.0", help="Bind address")
    parser.add_argument("--port", type=int, default=8008, help="Bind port")
    parser.add_argument("--log-level", default="INFO", help="Logging level")

    args = parser.parse_args()
    logging.basicConfig(level=getattr(logging, str(args.log_level).upper(), logging.INFO))

    uvicorn.run(app, host=args.host, port=args.port)
