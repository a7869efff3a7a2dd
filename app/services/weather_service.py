"""
Weather Service

This service interfaces with the OpenWeatherMap API to fetch current
conditions, the 5-day / 3-hour forecast and to geocode place names.

API Endpoint: https://api.openweathermap.org/data/2.5
Documentation: https://openweathermap.org/api
"""

import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from app.core.config import settings
from app.schemas.geo import Coordinates
from app.schemas.health import ServiceHealth
from app.schemas.weather import CurrentConditions, Forecast, ForecastEntry, WeatherBundle

logger = logging.getLogger(__name__)

# The two data endpoints report success differently: numeric vs. string code
CURRENT_SUCCESS_CODE = 200
FORECAST_SUCCESS_CODE = "200"


class WeatherServiceError(Exception):
    """Base exception for weather service errors."""


class InvalidCoordinatesError(WeatherServiceError):
    """Raised when latitude or longitude is missing or not a valid number."""


class WeatherFetchError(WeatherServiceError):
    """Raised when current conditions or forecast cannot be retrieved."""


class SearchNotFoundError(WeatherServiceError):
    """Raised when geocoding returns no results."""


class SearchError(WeatherServiceError):
    """Raised when geocoding fails on the network or while parsing."""


class WeatherService:
    """
    Service for interacting with the OpenWeatherMap API.

    Current conditions and forecast are always fetched together; either both
    succeed or the whole call fails.
    """

    def __init__(self):
        """
        Initialize the weather service with configuration.
        """
        self._base_url = settings.OPENWEATHER_BASE_URL.rstrip("/")
        self._geo_url = settings.OPENWEATHER_GEO_URL.rstrip("/")
        self._api_key = settings.OPENWEATHER_API_KEY
        self._units = settings.OPENWEATHER_UNITS
        self._timeout = settings.HTTP_TIMEOUT_SECONDS
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        """
        Get or create the HTTP client for the OpenWeatherMap API.
        """
        if self._client is None:
            if self._timeout is None:
                self._client = httpx.AsyncClient()
            else:
                self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    def _coordinate_params(self, coordinates: Coordinates) -> Dict[str, Any]:
        return {
            "lat": coordinates.latitude,
            "lon": coordinates.longitude,
            "appid": self._api_key,
            "units": self._units,
        }

    async def fetch_all(self, latitude, longitude) -> WeatherBundle:
        """
        Fetch current conditions and forecast for a coordinate concurrently.

        Args:
            latitude: Latitude in decimal degrees
            longitude: Longitude in decimal degrees

        Returns:
            WeatherBundle with current conditions and the forecast

        Raises:
            InvalidCoordinatesError: If a value is missing or out of range. No
                request is made in that case.
            WeatherFetchError: If either request fails, returns malformed JSON
                or reports a non-success code
        """
        if not Coordinates.is_valid(latitude, longitude):
            logger.warning("Rejected invalid coordinates: lat=%r lon=%r", latitude, longitude)
            raise InvalidCoordinatesError(f"Invalid coordinates: ({latitude}, {longitude})")

        coordinates = Coordinates(latitude=latitude, longitude=longitude)
        params = self._coordinate_params(coordinates)

        try:
            client = self._get_client()
            current_response, forecast_response = await asyncio.gather(
                client.get(f"{self._base_url}/weather", params=params),
                client.get(f"{self._base_url}/forecast", params=params),
            )

            current_data = current_response.json()
            forecast_data = forecast_response.json()

            if (
                current_data.get("cod") != CURRENT_SUCCESS_CODE
                or forecast_data.get("cod") != FORECAST_SUCCESS_CODE
            ):
                logger.error(
                    "OpenWeatherMap returned failure codes: current=%r forecast=%r",
                    current_data.get("cod"),
                    forecast_data.get("cod"),
                )
                raise WeatherFetchError("Failed to fetch weather data")

            return WeatherBundle(
                current=self._parse_current(current_data),
                forecast=self._parse_forecast(forecast_data),
            )

        except WeatherFetchError:
            raise

        except httpx.TimeoutException as e:
            logger.error("Request to OpenWeatherMap timed out for %s", coordinates)
            raise WeatherFetchError("Request timed out") from e

        except httpx.HTTPError as e:
            logger.error("Network error while contacting OpenWeatherMap: %s", str(e))
            raise WeatherFetchError(f"Network error: {str(e)}") from e

        except (KeyError, IndexError, ValueError, TypeError, AttributeError) as e:
            logger.error("Failed to parse OpenWeatherMap response: %s", str(e))
            raise WeatherFetchError(f"Invalid response data: {str(e)}") from e

    async def search(self, query: str) -> Coordinates:
        """
        Resolve a free-text place name to coordinates.

        Args:
            query: Place name, e.g. "Paris"

        Returns:
            Coordinates of the first geocoding match

        Raises:
            SearchNotFoundError: If no place matches the query
            SearchError: If the request fails or the response cannot be parsed
        """
        params = {"q": query, "limit": 1, "appid": self._api_key}

        try:
            client = self._get_client()
            response = await client.get(f"{self._geo_url}/direct", params=params)
            results = response.json()

            if not isinstance(results, list):
                raise TypeError(f"Expected a list of places, got {type(results).__name__}")

            if not results:
                logger.info("No location found for query %r", query)
                raise SearchNotFoundError(f"Location not found: {query!r}")

            place = results[0]
            return Coordinates(latitude=place["lat"], longitude=place["lon"])

        except SearchNotFoundError:
            raise

        except httpx.HTTPError as e:
            logger.error("Network error while geocoding %r: %s", query, str(e))
            raise SearchError(f"Network error: {str(e)}") from e

        except (KeyError, ValueError, TypeError) as e:
            logger.error("Failed to parse geocoding response for %r: %s", query, str(e))
            raise SearchError(f"Invalid response data: {str(e)}") from e

    def _parse_current(self, data: Dict) -> CurrentConditions:
        """
        Parse a current-conditions response body.
        """
        main = data["main"]
        return CurrentConditions(
            location_name=data.get("name") or "",
            temperature_c=main["temp"],
            description=data["weather"][0]["description"],
            wind_speed=data["wind"]["speed"],
            humidity_percent=main["humidity"],
            feels_like_c=main.get("feels_like"),
            observed_at=data.get("dt"),
        )

    def _parse_forecast(self, data: Dict) -> Forecast:
        """
        Parse a forecast response body.
        """
        city = data.get("city") or {}
        return Forecast(
            entries=[self._parse_forecast_entry(item) for item in data["list"]],
            timezone_offset_seconds=city.get("timezone") or 0,
        )

    def _parse_forecast_entry(self, data: Dict) -> ForecastEntry:
        return ForecastEntry(
            timestamp_seconds=data["dt"],
            temperature_c=data["main"]["temp"],
            description=data["weather"][0]["description"],
        )

    async def health_check(self) -> ServiceHealth:
        """
        Perform a health check of the OpenWeatherMap API.

        Returns:
            ServiceHealth indicating whether the provider accepts our requests.
        """
        params = self._coordinate_params(
            Coordinates(latitude=settings.DEFAULT_LATITUDE, longitude=settings.DEFAULT_LONGITUDE)
        )
        try:
            client = self._get_client()
            response = await client.get(f"{self._base_url}/weather", params=params)

            if response.status_code == 200:
                return ServiceHealth(
                    healthy=True,
                    message="OpenWeatherMap API is responding",
                )
            return ServiceHealth(
                healthy=False,
                message=f"OpenWeatherMap API returned status code: {response.status_code}",
            )

        except httpx.TimeoutException:
            return ServiceHealth(
                healthy=False,
                message="OpenWeatherMap API request timed out",
            )
        except Exception as e:  # pylint: disable=broad-except
            return ServiceHealth(
                healthy=False,
                message=f"OpenWeatherMap API check failed: {str(e)}",
            )

    async def close(self):
        """
        Close the HTTP client.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None


# Singleton instance for dependency injection
weather_service = WeatherService()
