from fastapi import APIRouter

from kinote.presentation.routers.v1.auth import router as auth_router
from kinote.presentation.routers.v1.debug import router as debug_router
from kinote.presentation.routes.health import router as health_router

api = APIRouter()

# Add all v1 routers here
routers = (auth_router, debug_router)
for router in routers:
    api.include_router(router, prefix="/v1")

api.include_router(health_router)
