from fastapi import APIRouter

from hydrodash.api.routes import health, telemetry

api_router = APIRouter(prefix="/api/v1")
api_router.include_router(health.router)
api_router.include_router(telemetry.router, tags=["telemetry"])
