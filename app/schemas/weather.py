"""
Weather Schema

Pydantic models for current conditions and forecasts returned by the
OpenWeatherMap API.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field


class IconCategory(str, Enum):
    """Simplified weather icon categories."""

    CLEAR = "clear"
    CLOUDY = "cloudy"
    RAIN = "rain"


class CurrentConditions(BaseModel):
    """Snapshot of present weather for one coordinate."""

    location_name: str = Field(..., description="Place name reported by the provider")
    temperature_c: float = Field(..., description="Temperature in degrees Celsius")
    description: str = Field(..., description="Free-text weather description")
    wind_speed: float = Field(..., description="Wind speed in m/s")
    humidity_percent: int = Field(..., description="Relative humidity in percent")
    feels_like_c: Optional[float] = Field(None, description="Perceived temperature in Celsius")
    observed_at: Optional[int] = Field(None, description="Observation time, unix seconds")


class ForecastEntry(BaseModel):
    """A single forecast sample."""

    timestamp_seconds: int
    temperature_c: float
    description: str


class Forecast(BaseModel):
    """Time-ordered forecast samples at a fixed interval (3 hours)."""

    entries: List[ForecastEntry]
    timezone_offset_seconds: int = Field(
        0, description="Shift of the forecast location from UTC, in seconds"
    )


class WeatherBundle(BaseModel):
    """Current conditions together with the forecast for the same coordinate."""

    current: CurrentConditions
    forecast: Forecast
