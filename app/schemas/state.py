"""
Application State Schema

The request lifecycle and the single state container owned by the
coordinate controller.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from app.schemas.geo import Coordinates
from app.schemas.weather import WeatherBundle


class RequestStatus(str, Enum):
    """Lifecycle of the most recent weather or search request."""

    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class RequestState(BaseModel):
    status: RequestStatus = RequestStatus.IDLE
    error: Optional[str] = None


class WeatherState(BaseModel):
    """
    Mutable state cell for the selected coordinate and its weather.

    Only CoordinateStateController writes to it.
    """

    coordinates: Coordinates
    request: RequestState = Field(default_factory=RequestState)
    weather: Optional[WeatherBundle] = None
    weather_coordinates: Optional[Coordinates] = Field(
        None, description="Coordinate the displayed weather was fetched for"
    )
    stale: bool = Field(False, description="True when the last fetch failed and weather is old")
    notice: Optional[str] = Field(None, description="Advisory message, e.g. geolocation denied")
    sequence: int = Field(0, description="Number of the most recently issued fetch")
