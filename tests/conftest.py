import os
import sys
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.schemas.geo import Coordinates
from app.schemas.weather import WeatherBundle
from app.services.coordinate_controller import CoordinateStateController, get_controller
from app.services.weather_service import WeatherService

sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# 2024-10-19 12:00:00 UTC, a Saturday
FORECAST_START = 1729339200
FORECAST_STEP_SECONDS = 3 * 60 * 60
FORECAST_DESCRIPTIONS = ["clear sky", "few clouds", "light rain", "snow", "mist"]


@pytest.fixture
def default_coordinates():
    return Coordinates(latitude=28.3974, longitude=84.1258)


@pytest.fixture
def current_body():
    """Factory for OpenWeatherMap current-conditions response bodies."""

    def _make(name="Paris", temp=18.6, description="clear sky", cod=200):
        return {
            "cod": cod,
            "name": name,
            "dt": FORECAST_START,
            "main": {"temp": temp, "feels_like": 17.9, "humidity": 64},
            "weather": [{"id": 800, "main": "Clear", "description": description}],
            "wind": {"speed": 3.6, "deg": 250},
        }

    return _make


@pytest.fixture
def forecast_body():
    """Factory for OpenWeatherMap 5 day / 3 hour forecast response bodies."""

    def _make(count=40, cod="200", timezone=0):
        return {
            "cod": cod,
            "cnt": count,
            "list": [
                {
                    "dt": FORECAST_START + i * FORECAST_STEP_SECONDS,
                    "main": {"temp": 10 + i * 0.5},
                    "weather": [{"description": FORECAST_DESCRIPTIONS[(i // 8) % 5]}],
                }
                for i in range(count)
            ],
            "city": {"name": "Paris", "timezone": timezone},
        }

    return _make


@pytest.fixture
def weather_bundle(current_body, forecast_body):
    """Factory for parsed weather bundles."""
    parser = WeatherService()

    def _make(name="Paris", temp=18.6, description="clear sky"):
        body = current_body(name=name, temp=temp, description=description)
        return WeatherBundle(
            current=parser._parse_current(body),
            forecast=parser._parse_forecast(forecast_body()),
        )

    return _make


@pytest.fixture
def mock_weather_service():
    """Weather service double with async fetch_all and search."""
    service = MagicMock(spec=WeatherService)
    service.fetch_all = AsyncMock()
    service.search = AsyncMock()
    return service


@pytest.fixture
def controller(mock_weather_service, default_coordinates):
    return CoordinateStateController(mock_weather_service, initial=default_coordinates)


@pytest.fixture(scope="function")
def client(controller):
    """Provides a FastAPI test client bound to a fresh controller."""
    app.dependency_overrides[get_controller] = lambda: controller

    with TestClient(app) as c:
        yield c

    # Clean up overrides after test
    app.dependency_overrides.clear()
