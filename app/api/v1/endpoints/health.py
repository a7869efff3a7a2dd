from datetime import datetime, timezone

from fastapi import APIRouter, HTTPException, status

from app.core.config import settings
from app.schemas.health import HealthCheckResponse
from app.services import weather_service

router = APIRouter()


@router.get("/health")
async def health_check() -> HealthCheckResponse:
    """
    Health check endpoint that verifies OpenWeatherMap API availability.

    Returns 200 if the provider is healthy, 503 otherwise.
    """
    weather_service_health = await weather_service.weather_service.health_check()

    response = HealthCheckResponse(
        service="weathermap-backend",
        version=settings.VERSION,
        timestamp=datetime.now(timezone.utc).isoformat(),
        healthy=weather_service_health.healthy,
        weather_service=weather_service_health,
    )

    if response.healthy:
        return response
    raise HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=response.model_dump()
    )
