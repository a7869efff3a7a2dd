"""
Results Panel Schemas

Display-ready view models for the results panel and the forecast strip.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from app.schemas.geo import Coordinates, MapViewport
from app.schemas.state import RequestStatus
from app.schemas.weather import IconCategory


class ForecastCard(BaseModel):
    """One day in the forecast strip."""

    weekday: str = Field(..., description="Short weekday name, e.g. 'Mon'")
    timestamp_seconds: int
    temperature: int = Field(..., description="Rounded temperature in Celsius")
    description: str
    icon: IconCategory


class ResultsPanel(BaseModel):
    """Current conditions formatted for display."""

    location_name: str
    temperature: int
    temperature_label: str
    description: str
    icon: IconCategory
    wind_speed_label: str
    humidity_label: str
    forecast: List[ForecastCard]


class StateResponse(BaseModel):
    """Full snapshot returned by every state-changing endpoint."""

    coordinates: Coordinates
    status: RequestStatus
    loading: bool
    error: Optional[str] = None
    notice: Optional[str] = None
    stale: bool = False
    panel: Optional[ResultsPanel] = None
    viewport: MapViewport
    marker: Coordinates


class SearchRequest(BaseModel):
    """Search form submission."""

    query: str = Field("", description="Free-text place name")


class ZoomRequest(BaseModel):
    zoom: int = Field(..., ge=0, le=19)


class GeolocationReport(BaseModel):
    """Result of the client's single-shot geolocation call."""

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    error: Optional[str] = Field(None, description="Set when the client denied or failed")


class ClassificationResponse(BaseModel):
    description: str
    icon: IconCategory


class MapStateResponse(BaseModel):
    viewport: MapViewport
    marker: Coordinates
    tile_url: str
