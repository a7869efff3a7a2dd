"""
Geolocation providers.

The browser performs the single-shot position lookup and reports the
outcome; providers turn that report into coordinates or a denial.
"""

import logging
from abc import ABC, abstractmethod

from app.schemas.geo import Coordinates
from app.schemas.panel import GeolocationReport

logger = logging.getLogger(__name__)


class GeolocationDeniedError(Exception):
    """Raised when the device position is unavailable or access was denied."""


class GeolocationProvider(ABC):
    """Source of the initial device position."""

    @abstractmethod
    async def get_current_position(self) -> Coordinates:
        """Return the device position or raise GeolocationDeniedError."""


class ReportedGeolocation(GeolocationProvider):
    """
    Provider backed by the position the client reported.

    A report carrying an error, or lacking a usable coordinate, is treated
    as a denial.
    """

    def __init__(self, report: GeolocationReport):
        self._report = report

    async def get_current_position(self) -> Coordinates:
        report = self._report
        if report.error:
            logger.info("Client geolocation failed: %s", report.error)
            raise GeolocationDeniedError(report.error)

        if not Coordinates.is_valid(report.latitude, report.longitude):
            logger.info(
                "Client reported unusable position: lat=%r lon=%r",
                report.latitude,
                report.longitude,
            )
            raise GeolocationDeniedError("Position unavailable")

        return Coordinates(latitude=report.latitude, longitude=report.longitude)
