"""
Results panel formatting.

Turns a WeatherBundle into display-ready values: rounded temperatures,
icon categories and the one-entry-per-day forecast strip.
"""

import math
from datetime import datetime, timedelta, timezone
from typing import List, Sequence

from app.core.config import settings
from app.schemas.panel import ForecastCard, ResultsPanel
from app.schemas.weather import ForecastEntry, WeatherBundle
from app.services.icon_classifier import classify


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards positive infinity."""
    return int(math.floor(value + 0.5))


def daily_forecast(
    entries: Sequence[ForecastEntry],
    step: int = settings.FORECAST_SAMPLE_STEP,
    days: int = settings.FORECAST_DAYS,
) -> List[ForecastEntry]:
    """
    Subsample 3-hourly forecast entries to one per day.

    With the default step of 8 (8 x 3h = 24h) a 40-entry forecast yields
    the entries at indices 0, 8, 16, 24 and 32.
    """
    return [entry for index, entry in enumerate(entries) if index % step == 0][:days]


def short_weekday(timestamp_seconds: int, offset_seconds: int = 0) -> str:
    """Short English weekday name ('Mon') for a unix timestamp in the given UTC offset."""
    tz = timezone(timedelta(seconds=offset_seconds))
    return datetime.fromtimestamp(timestamp_seconds, tz=tz).strftime("%a")


def _format_number(value: float) -> str:
    # 3.0 -> "3", 3.5 -> "3.5"
    return f"{value:g}"


def build_forecast_cards(bundle: WeatherBundle) -> List[ForecastCard]:
    offset = bundle.forecast.timezone_offset_seconds
    return [
        ForecastCard(
            weekday=short_weekday(entry.timestamp_seconds, offset),
            timestamp_seconds=entry.timestamp_seconds,
            temperature=round_half_up(entry.temperature_c),
            description=entry.description,
            icon=classify(entry.description),
        )
        for entry in daily_forecast(bundle.forecast.entries)
    ]


def build_panel(bundle: WeatherBundle) -> ResultsPanel:
    current = bundle.current
    temperature = round_half_up(current.temperature_c)
    return ResultsPanel(
        location_name=current.location_name,
        temperature=temperature,
        temperature_label=f"{temperature}°C",
        description=current.description.title(),
        icon=classify(current.description),
        wind_speed_label=f"{_format_number(current.wind_speed)} m/s",
        humidity_label=f"{current.humidity_percent}%",
        forecast=build_forecast_cards(bundle),
    )
