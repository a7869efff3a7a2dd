"""
Weather API Endpoint

State snapshot, initial geolocation and the search form. Failures are
reported in the returned state's ``error`` field, not as HTTP errors.
"""

import logging

from fastapi import APIRouter, Depends, Query

from app.schemas.panel import (
    ClassificationResponse,
    GeolocationReport,
    SearchRequest,
    StateResponse,
)
from app.services.coordinate_controller import CoordinateStateController, get_controller
from app.services.geolocation_service import ReportedGeolocation
from app.services.icon_classifier import classify

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/state", response_model=StateResponse)
async def get_state(controller: CoordinateStateController = Depends(get_controller)):
    """Return the current coordinate, request state, results panel and viewport."""
    return controller.snapshot()


@router.post("/location/mount", response_model=StateResponse)
async def mount_location(
    report: GeolocationReport,
    controller: CoordinateStateController = Depends(get_controller),
):
    """
    Initialize the app from the client's geolocation result.

    A report carrying an error falls back to the default coordinate and
    sets an advisory notice; weather is fetched either way.
    """
    logger.info("Geolocation report received: error=%s", report.error)
    await controller.mount(ReportedGeolocation(report))
    return controller.snapshot()


@router.post("/search", response_model=StateResponse)
async def search_location(
    request: SearchRequest,
    controller: CoordinateStateController = Depends(get_controller),
):
    """
    Search for a place by name and show its weather.

    On success the map is centered on the place at the search zoom level.
    """
    logger.info("Location search request: query=%r", request.query)
    await controller.submit_search(request.query)
    return controller.snapshot()


@router.get("/classify", response_model=ClassificationResponse)
async def classify_description(description: str = Query(..., description="Weather description")):
    return ClassificationResponse(description=description, icon=classify(description))
