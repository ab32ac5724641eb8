from fastapi import APIRouter

from rpgmaker_decoder.api.v1.assets import router as assets_router
from rpgmaker_decoder.api.v1.projects import router as projects_router


api_router = APIRouter(prefix="/api/v1")
api_router.include_router(assets_router)
api_router.include_router(projects_router)
