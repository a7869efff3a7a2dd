"""
Location and Coordinate Type Definitions

Pydantic models for representing geographic coordinates, raw client
coordinate payloads and the map viewport.
"""

import math
from typing import Optional

from pydantic import BaseModel, Field


class Coordinates(BaseModel):
    """
    Geographic coordinates (latitude and longitude).
    """

    latitude: float = Field(
        ..., ge=-90.0, le=90.0, allow_inf_nan=False, description="Latitude in decimal degrees"
    )
    longitude: float = Field(
        ..., ge=-180.0, le=180.0, allow_inf_nan=False, description="Longitude in decimal degrees"
    )

    @classmethod
    def is_valid(cls, latitude, longitude) -> bool:
        """Check raw values against the coordinate invariant without raising."""
        for value in (latitude, longitude):
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                return False
            if not math.isfinite(value):
                return False
        return -90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0

    def __str__(self) -> str:
        return f"({self.latitude}, {self.longitude})"


class CoordinateInput(BaseModel):
    """
    Raw coordinate payload sent by the client (map click, geolocation report).

    Values are optional so that incomplete payloads reach the controller,
    which reports them as invalid coordinates instead of failing the request.
    """

    latitude: Optional[float] = None
    longitude: Optional[float] = None


class MapViewport(BaseModel):
    """Visible map area: center point and zoom level."""

    center: Coordinates
    zoom: int = Field(..., ge=0, le=19)


class TileRef(BaseModel):
    """Slippy-map tile address."""

    zoom: int
    x: int
    y: int
    url: str
