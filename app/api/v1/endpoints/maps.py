"""
Map API Endpoint

Map clicks, zoom changes and tile layer information.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.schemas.geo import CoordinateInput, Coordinates, TileRef
from app.schemas.panel import MapStateResponse, StateResponse, ZoomRequest
from app.services.coordinate_controller import CoordinateStateController, get_controller

router = APIRouter()


@router.get("", response_model=MapStateResponse)
async def get_map(controller: CoordinateStateController = Depends(get_controller)):
    """Return the viewport, marker position and tile URL template."""
    map_view = controller.map_view
    return MapStateResponse(
        viewport=map_view.viewport,
        marker=map_view.marker,
        tile_url=map_view.tile_url_template,
    )


@router.post("/click", response_model=StateResponse)
async def click_map(
    click: CoordinateInput,
    controller: CoordinateStateController = Depends(get_controller),
):
    """
    Select the clicked point, keep the current zoom and fetch its weather.

    Incomplete coordinates produce an error state without any fetch.
    """
    await controller.handle_map_click(click.latitude, click.longitude)
    return controller.snapshot()


@router.post("/zoom", response_model=MapStateResponse)
async def zoom_map(
    request: ZoomRequest,
    controller: CoordinateStateController = Depends(get_controller),
):
    controller.set_zoom(request.zoom)
    return await get_map(controller)


@router.get("/tile", response_model=TileRef)
async def get_tile(
    latitude: float = Query(..., ge=-90.0, le=90.0),
    longitude: float = Query(..., ge=-180.0, le=180.0),
    zoom: Optional[int] = Query(None, ge=0, le=19),
    controller: CoordinateStateController = Depends(get_controller),
):
    """Return the tile indices and URL covering a coordinate."""
    coordinates = Coordinates(latitude=latitude, longitude=longitude)
    return controller.map_view.tile_for(coordinates, zoom)
