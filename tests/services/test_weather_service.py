"""
Unit tests for weather service.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from app.schemas.geo import Coordinates
from app.schemas.weather import CurrentConditions, ForecastEntry, WeatherBundle
from app.services.weather_service import (
    InvalidCoordinatesError,
    SearchError,
    SearchNotFoundError,
    WeatherFetchError,
    WeatherService,
)


@pytest.fixture
def weather_service():
    """Create a weather service instance for testing."""
    return WeatherService()


def make_response(body=None, status_code=200, json_error=None):
    response = MagicMock()
    response.status_code = status_code
    if json_error is not None:
        response.json.side_effect = json_error
    else:
        response.json.return_value = body
    return response


def make_client(current=None, forecast=None, geocode=None):
    """Mock HTTP client dispatching on the requested endpoint."""

    def route(url, params=None):
        for suffix, outcome in (("/weather", current), ("/forecast", forecast), ("/direct", geocode)):
            if url.endswith(suffix):
                if isinstance(outcome, Exception):
                    raise outcome
                return outcome
        raise AssertionError(f"Unexpected URL {url}")

    mock_client = AsyncMock()
    mock_client.get = AsyncMock(side_effect=route)
    return mock_client


@pytest.mark.asyncio
async def test_fetch_all_success(weather_service, current_body, forecast_body):
    """Test both endpoints succeeding yields one combined bundle."""
    mock_client = make_client(
        current=make_response(current_body()), forecast=make_response(forecast_body())
    )

    with patch.object(weather_service, "_get_client", return_value=mock_client):
        bundle = await weather_service.fetch_all(48.86, 2.35)

    assert isinstance(bundle, WeatherBundle)
    assert bundle.current == CurrentConditions(
        location_name="Paris",
        temperature_c=18.6,
        description="clear sky",
        wind_speed=3.6,
        humidity_percent=64,
        feels_like_c=17.9,
        observed_at=1729339200,
    )
    assert len(bundle.forecast.entries) == 40
    assert bundle.forecast.entries[0] == ForecastEntry(
        timestamp_seconds=1729339200, temperature_c=10.0, description="clear sky"
    )


@pytest.mark.asyncio
async def test_fetch_all_request_params(weather_service, current_body, forecast_body):
    """Test both requests carry coordinates, API key and metric units."""
    mock_client = make_client(
        current=make_response(current_body()), forecast=make_response(forecast_body())
    )
    weather_service._api_key = "test-key"

    with patch.object(weather_service, "_get_client", return_value=mock_client):
        await weather_service.fetch_all(48.86, 2.35)

    assert mock_client.get.call_count == 2
    urls = sorted(call.args[0] for call in mock_client.get.call_args_list)
    assert urls[0].endswith("/forecast")
    assert urls[1].endswith("/weather")
    for call in mock_client.get.call_args_list:
        assert call.kwargs["params"] == {
            "lat": 48.86,
            "lon": 2.35,
            "appid": "test-key",
            "units": "metric",
        }


@pytest.mark.asyncio
async def test_fetch_all_current_failure_code(weather_service, current_body, forecast_body):
    """Test a non-200 current code fails the whole fetch."""
    mock_client = make_client(
        current=make_response(current_body(cod=401), status_code=401),
        forecast=make_response(forecast_body()),
    )

    with patch.object(weather_service, "_get_client", return_value=mock_client):
        with pytest.raises(WeatherFetchError):
            await weather_service.fetch_all(48.86, 2.35)


@pytest.mark.asyncio
async def test_fetch_all_forecast_failure_code(weather_service, current_body, forecast_body):
    """Test a non-"200" forecast code fails the whole fetch."""
    mock_client = make_client(
        current=make_response(current_body()),
        forecast=make_response(forecast_body(cod="404")),
    )

    with patch.object(weather_service, "_get_client", return_value=mock_client):
        with pytest.raises(WeatherFetchError):
            await weather_service.fetch_all(48.86, 2.35)


@pytest.mark.asyncio
async def test_fetch_all_code_types_are_checked(weather_service, current_body, forecast_body):
    """Test the current code must be numeric and the forecast code a string."""
    mock_client = make_client(
        current=make_response(current_body(cod="200")),
        forecast=make_response(forecast_body(cod=200)),
    )

    with patch.object(weather_service, "_get_client", return_value=mock_client):
        with pytest.raises(WeatherFetchError):
            await weather_service.fetch_all(48.86, 2.35)


@pytest.mark.asyncio
async def test_fetch_all_network_error(weather_service, forecast_body):
    """Test a network failure on one endpoint fails the whole fetch."""
    mock_client = make_client(
        current=httpx.ConnectError("Connection refused"),
        forecast=make_response(forecast_body()),
    )

    with patch.object(weather_service, "_get_client", return_value=mock_client):
        with pytest.raises(WeatherFetchError, match="Network error"):
            await weather_service.fetch_all(48.86, 2.35)


@pytest.mark.asyncio
async def test_fetch_all_timeout(weather_service, current_body):
    """Test a timeout is reported as a fetch error."""
    mock_client = make_client(
        current=make_response(current_body()),
        forecast=httpx.ReadTimeout("Timeout"),
    )

    with patch.object(weather_service, "_get_client", return_value=mock_client):
        with pytest.raises(WeatherFetchError, match="timed out"):
            await weather_service.fetch_all(48.86, 2.35)


@pytest.mark.asyncio
async def test_fetch_all_invalid_json(weather_service, current_body):
    """Test an unparseable body is reported as a fetch error."""
    mock_client = make_client(
        current=make_response(current_body()),
        forecast=make_response(json_error=ValueError("Expecting value")),
    )

    with patch.object(weather_service, "_get_client", return_value=mock_client):
        with pytest.raises(WeatherFetchError):
            await weather_service.fetch_all(48.86, 2.35)


@pytest.mark.asyncio
async def test_fetch_all_missing_fields(weather_service, current_body, forecast_body):
    """Test a success code with an incomplete body is a fetch error."""
    body = current_body()
    del body["wind"]
    mock_client = make_client(current=make_response(body), forecast=make_response(forecast_body()))

    with patch.object(weather_service, "_get_client", return_value=mock_client):
        with pytest.raises(WeatherFetchError, match="Invalid response data"):
            await weather_service.fetch_all(48.86, 2.35)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "latitude,longitude",
    [(None, 2.35), (48.86, None), (None, None), ("abc", 2.35), (91.0, 0.0), (0.0, float("nan"))],
)
async def test_fetch_all_invalid_coordinates(weather_service, latitude, longitude):
    """Test invalid coordinates never reach the network."""
    with patch.object(weather_service, "_get_client") as mock_get_client:
        with pytest.raises(InvalidCoordinatesError):
            await weather_service.fetch_all(latitude, longitude)

        mock_get_client.assert_not_called()


@pytest.mark.asyncio
async def test_fetch_all_accepts_zero_coordinates(weather_service, current_body, forecast_body):
    """Test the equator / prime meridian is a valid location."""
    mock_client = make_client(
        current=make_response(current_body(name="")), forecast=make_response(forecast_body())
    )

    with patch.object(weather_service, "_get_client", return_value=mock_client):
        bundle = await weather_service.fetch_all(0.0, 0.0)

    assert bundle.current.location_name == ""


@pytest.mark.asyncio
async def test_search_success(weather_service):
    """Test geocoding returns the first match."""
    mock_client = make_client(
        geocode=make_response([{"name": "Paris", "lat": 48.86, "lon": 2.35, "country": "FR"}])
    )

    with patch.object(weather_service, "_get_client", return_value=mock_client):
        coordinates = await weather_service.search("Paris")

    assert coordinates == Coordinates(latitude=48.86, longitude=2.35)
    params = mock_client.get.call_args.kwargs["params"]
    assert params["q"] == "Paris"
    assert params["limit"] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("query", ["", "zzz-nonexistent"])
async def test_search_not_found(weather_service, query):
    """Test an empty result list is reported as not found."""
    mock_client = make_client(geocode=make_response([]))

    with patch.object(weather_service, "_get_client", return_value=mock_client):
        with pytest.raises(SearchNotFoundError):
            await weather_service.search(query)


@pytest.mark.asyncio
async def test_search_network_error(weather_service):
    """Test network failures during search."""
    mock_client = make_client(geocode=httpx.ConnectError("Connection refused"))

    with patch.object(weather_service, "_get_client", return_value=mock_client):
        with pytest.raises(SearchError):
            await weather_service.search("Paris")


@pytest.mark.asyncio
async def test_search_error_body(weather_service):
    """Test a provider error object instead of a result list."""
    mock_client = make_client(
        geocode=make_response({"cod": 401, "message": "Invalid API key"}, status_code=401)
    )

    with patch.object(weather_service, "_get_client", return_value=mock_client):
        with pytest.raises(SearchError):
            await weather_service.search("Paris")


@pytest.mark.asyncio
async def test_search_invalid_json(weather_service):
    mock_client = make_client(geocode=make_response(json_error=ValueError("Expecting value")))

    with patch.object(weather_service, "_get_client", return_value=mock_client):
        with pytest.raises(SearchError):
            await weather_service.search("Paris")


@pytest.mark.asyncio
async def test_health_check_success(weather_service):
    """Test successful health check."""
    mock_client = AsyncMock()
    mock_client.get = AsyncMock(return_value=make_response({"cod": 200}))

    with patch.object(weather_service, "_get_client", return_value=mock_client):
        health = await weather_service.health_check()

    assert health.healthy is True
    assert "responding" in health.message.lower()


@pytest.mark.asyncio
async def test_health_check_failure(weather_service):
    """Test health check with non-200 status."""
    mock_client = AsyncMock()
    mock_client.get = AsyncMock(return_value=make_response({"cod": 401}, status_code=401))

    with patch.object(weather_service, "_get_client", return_value=mock_client):
        health = await weather_service.health_check()

    assert health.healthy is False
    assert "401" in health.message


@pytest.mark.asyncio
async def test_health_check_timeout(weather_service):
    """Test health check with timeout."""
    mock_client = AsyncMock()
    mock_client.get = AsyncMock(side_effect=httpx.TimeoutException("Timeout"))

    with patch.object(weather_service, "_get_client", return_value=mock_client):
        health = await weather_service.health_check()

    assert health.healthy is False
    assert "timed out" in health.message.lower()


@pytest.mark.asyncio
async def test_close_releases_client(weather_service):
    client = weather_service._get_client()
    assert isinstance(client, httpx.AsyncClient)

    await weather_service.close()

    assert weather_service._client is None


@pytest.mark.asyncio
async def test_fetch_all_requests_run_concurrently(weather_service, current_body, forecast_body):
    """Test the current request is still pending when the forecast request is sent."""
    forecast_requested = asyncio.Event()

    async def route(url, params=None):
        if url.endswith("/weather"):
            await asyncio.wait_for(forecast_requested.wait(), timeout=1)
            return make_response(current_body())
        forecast_requested.set()
        return make_response(forecast_body())

    mock_client = AsyncMock()
    mock_client.get = AsyncMock(side_effect=route)

    with patch.object(weather_service, "_get_client", return_value=mock_client):
        bundle = await weather_service.fetch_all(48.86, 2.35)

    assert bundle.current.location_name == "Paris"
    assert mock_client.get.await_count == 2
