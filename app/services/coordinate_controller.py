"""
Coordinate State Controller

Single owner of the selected coordinate and the weather state derived from
it. Geolocation, map clicks and searches all go through this controller;
every accepted coordinate change re-centers the map and triggers a fetch.

Fetches are never cancelled. Each one is tagged with a sequence number and
only the most recently issued request may write its outcome to the state.
"""

import logging
import uuid
from collections import OrderedDict
from typing import Optional

from fastapi import Request, Response

from app.core.config import settings
from app.schemas.geo import Coordinates
from app.schemas.panel import StateResponse
from app.schemas.state import RequestState, RequestStatus, WeatherState
from app.services.geolocation_service import GeolocationDeniedError, GeolocationProvider
from app.services.map_view import MapView
from app.services.results_panel import build_panel
from app.services.weather_service import (
    SearchError,
    SearchNotFoundError,
    WeatherService,
    WeatherServiceError,
    weather_service,
)

logger = logging.getLogger(__name__)

GEOLOCATION_DENIED_MESSAGE = "Unable to retrieve your location. Please enable location services."
INVALID_COORDINATES_MESSAGE = "Invalid coordinates. Please try again."
FETCH_ERROR_MESSAGE = "An error occurred while fetching weather data. Please try again later."
SEARCH_NOT_FOUND_MESSAGE = "Location not found. Please try a different search term."
SEARCH_ERROR_MESSAGE = (
    "An error occurred while searching for the location. Please try again later."
)

CLIENT_ID_HEADER = "X-Client-Id"
SESSION_COOKIE = "weathermap_session"


def default_coordinates() -> Coordinates:
    return Coordinates(latitude=settings.DEFAULT_LATITUDE, longitude=settings.DEFAULT_LONGITUDE)


class CoordinateStateController:
    """
    Controller holding the selected coordinate, request state and weather.

    Request lifecycle: idle -> loading -> success | error, and back to
    loading on the next coordinate change or search.
    """

    def __init__(
        self,
        service: WeatherService,
        map_view: Optional[MapView] = None,
        initial: Optional[Coordinates] = None,
    ):
        initial = initial or default_coordinates()
        self._service = service
        self.map_view = map_view or MapView(center=initial)
        self._state = WeatherState(coordinates=initial)

    @property
    def state(self) -> WeatherState:
        """A copy of the current state; mutate only through controller methods."""
        return self._state.model_copy(deep=True)

    @property
    def coordinates(self) -> Coordinates:
        return self._state.coordinates

    async def mount(self, geolocation: GeolocationProvider) -> None:
        """
        Initialize from the device position.

        On denial the advisory notice is set and weather is still fetched
        for the current (default) coordinate.
        """
        try:
            position = await geolocation.get_current_position()
        except GeolocationDeniedError as e:
            logger.warning("Geolocation unavailable, using %s: %s", self._state.coordinates, e)
            self._state.notice = GEOLOCATION_DENIED_MESSAGE
            self.map_view.recenter(self._state.coordinates)
            await self._fetch(self._state.coordinates)
            return

        self._state.notice = None
        await self.set_coordinate(position.latitude, position.longitude)

    async def set_coordinate(self, latitude, longitude) -> bool:
        """
        Select a coordinate and fetch its weather.

        Returns:
            False if the values are not a valid coordinate; nothing is
            fetched in that case.
        """
        coordinates = self._validate(latitude, longitude)
        if coordinates is None:
            return False

        self._select(coordinates)
        await self._fetch(coordinates)
        return True

    async def handle_map_click(self, latitude, longitude) -> bool:
        """Select the clicked point and fly there at the current zoom."""
        coordinates = self._validate(latitude, longitude)
        if coordinates is None:
            return False

        logger.info("Map clicked at %s", coordinates)
        self._select(coordinates)
        self.map_view.fly_to(coordinates)
        await self._fetch(coordinates)
        return True

    async def submit_search(self, query: str) -> bool:
        """
        Geocode a place name, select it and zoom the map to it.

        Returns:
            True if the place was found and selected
        """
        sequence = self._begin()
        logger.info("Searching for location %r", query)

        try:
            coordinates = await self._service.search(query)
        except SearchNotFoundError:
            self._fail(sequence, SEARCH_NOT_FOUND_MESSAGE)
            return False
        except SearchError as e:
            logger.error("Location search failed: %s", e)
            self._fail(sequence, SEARCH_ERROR_MESSAGE)
            return False

        if not self._is_latest(sequence):
            logger.info("Discarding superseded search result for %r", query)
            return False

        self._select(coordinates)
        self.map_view.set_view(coordinates, settings.SEARCH_ZOOM)
        await self._fetch(coordinates)
        return True

    def set_zoom(self, zoom: int) -> None:
        self.map_view.set_zoom(zoom)

    def snapshot(self) -> StateResponse:
        """Build the read-only view of the state for clients."""
        state = self._state
        return StateResponse(
            coordinates=state.coordinates,
            status=state.request.status,
            loading=state.request.status == RequestStatus.LOADING,
            error=state.request.error,
            notice=state.notice,
            stale=state.stale,
            panel=build_panel(state.weather) if state.weather is not None else None,
            viewport=self.map_view.viewport,
            marker=self.map_view.marker,
        )

    def _validate(self, latitude, longitude) -> Optional[Coordinates]:
        if not Coordinates.is_valid(latitude, longitude):
            logger.warning("Invalid coordinates: lat=%r lon=%r", latitude, longitude)
            # Supersedes any fetch in flight so its result cannot clear the error
            sequence = self._begin()
            self._fail(
                sequence,
                INVALID_COORDINATES_MESSAGE,
                stale=self._state.weather_coordinates != self._state.coordinates,
            )
            return None
        return Coordinates(latitude=latitude, longitude=longitude)

    def _select(self, coordinates: Coordinates) -> None:
        self._state.coordinates = coordinates
        self._state.notice = None
        self.map_view.recenter(coordinates)

    def _begin(self) -> int:
        self._state.sequence += 1
        self._state.request = RequestState(status=RequestStatus.LOADING)
        return self._state.sequence

    def _is_latest(self, sequence: int) -> bool:
        return sequence == self._state.sequence

    def _fail(self, sequence: int, message: str, stale: bool = True) -> None:
        if not self._is_latest(sequence):
            logger.info("Discarding error from superseded request #%d", sequence)
            return
        self._state.request = RequestState(status=RequestStatus.ERROR, error=message)
        # Previous weather stays visible but is flagged as out of date
        self._state.stale = stale and self._state.weather is not None

    async def _fetch(self, coordinates: Coordinates) -> None:
        sequence = self._begin()
        logger.info("Fetching weather #%d for %s", sequence, coordinates)

        try:
            bundle = await self._service.fetch_all(coordinates.latitude, coordinates.longitude)
        except WeatherServiceError as e:
            logger.error("Weather fetch #%d failed: %s", sequence, e)
            self._fail(sequence, FETCH_ERROR_MESSAGE)
            return

        if not self._is_latest(sequence):
            logger.info(
                "Discarding weather #%d for %s, #%d is newer",
                sequence,
                coordinates,
                self._state.sequence,
            )
            return

        self._state.weather = bundle
        self._state.weather_coordinates = coordinates
        self._state.stale = False
        self._state.request = RequestState(status=RequestStatus.SUCCESS)


class ControllerRegistry:
    """
    One controller per client session.

    Sessions are identified by the ``X-Client-Id`` header or, failing that,
    a session cookie. The least recently used session is dropped once
    ``max_sessions`` is exceeded.
    """

    def __init__(self, service: WeatherService, max_sessions: int = settings.MAX_SESSIONS):
        self._service = service
        self._max_sessions = max_sessions
        self._controllers: "OrderedDict[str, CoordinateStateController]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._controllers)

    def get(self, session_id: str) -> CoordinateStateController:
        controller = self._controllers.get(session_id)
        if controller is not None:
            self._controllers.move_to_end(session_id)
            return controller

        controller = CoordinateStateController(self._service)
        self._controllers[session_id] = controller
        logger.info("Created controller for session %s", session_id)

        while len(self._controllers) > self._max_sessions:
            evicted, _ = self._controllers.popitem(last=False)
            logger.info("Evicted controller for session %s", evicted)
        return controller


def get_controller(request: Request, response: Response) -> CoordinateStateController:
    """Dependency returning the controller owned by the calling client."""
    session_id = request.headers.get(CLIENT_ID_HEADER) or request.cookies.get(SESSION_COOKIE)
    if not session_id:
        session_id = uuid.uuid4().hex
        response.set_cookie(SESSION_COOKIE, session_id, httponly=True, samesite="lax")
    return controller_registry.get(session_id)


# Singleton instance for dependency injection
controller_registry = ControllerRegistry(weather_service)
