from fastapi import APIRouter
from api.v1.endpoints import assign, layers

api_router = APIRouter()
api_router.include_router(assign.router, prefix="", tags=["assign"])
api_router.include_router(layers.router, prefix="", tags=["layers"])
