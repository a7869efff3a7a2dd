from fastapi import APIRouter

from app.api.v1.endpoints import health, maps, weather

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(weather.router, tags=["weather"])
api_router.include_router(maps.router, prefix="/map", tags=["map"])
