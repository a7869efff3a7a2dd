"""
Map View

Server-side model of the map: tile layer template, viewport and the single
marker at the selected coordinate.
"""

import logging
import math
from typing import Optional

from app.core.config import settings
from app.schemas.geo import Coordinates, MapViewport, TileRef

logger = logging.getLogger(__name__)

MIN_ZOOM = 0
MAX_ZOOM = 19

# Web Mercator cannot represent the poles
MAX_MERCATOR_LATITUDE = 85.0511287798


def clamp_zoom(zoom: int) -> int:
    return max(MIN_ZOOM, min(MAX_ZOOM, int(zoom)))


class MapView:
    """
    Viewport and marker state for a slippy map.

    Re-centering keeps the current zoom; only set_view and set_zoom change it.
    """

    def __init__(
        self,
        center: Coordinates,
        zoom: int = settings.DEFAULT_ZOOM,
        tile_url_template: str = settings.MAP_TILE_URL,
    ):
        self._center = center
        self._zoom = clamp_zoom(zoom)
        self._marker = center
        self.tile_url_template = tile_url_template

    @property
    def viewport(self) -> MapViewport:
        return MapViewport(center=self._center, zoom=self._zoom)

    @property
    def marker(self) -> Coordinates:
        return self._marker

    def recenter(self, coordinates: Coordinates) -> None:
        """Move the marker and view center to a coordinate, keeping the zoom."""
        self._marker = coordinates
        self._center = coordinates

    def fly_to(self, coordinates: Coordinates) -> None:
        """Animate the view to a point at the current zoom level."""
        logger.debug("Flying to %s at zoom %d", coordinates, self._zoom)
        self.recenter(coordinates)

    def set_view(self, coordinates: Coordinates, zoom: int) -> None:
        """Set both center and zoom."""
        self.recenter(coordinates)
        self._zoom = clamp_zoom(zoom)

    def set_zoom(self, zoom: int) -> None:
        self._zoom = clamp_zoom(zoom)

    def tile_for(self, coordinates: Coordinates, zoom: Optional[int] = None) -> TileRef:
        """
        Compute the tile containing a coordinate.

        Args:
            coordinates: Point to locate
            zoom: Zoom level (defaults to the current zoom)

        Returns:
            TileRef with tile indices and the rendered tile URL
        """
        z = self._zoom if zoom is None else clamp_zoom(zoom)
        n = 2**z
        lat = max(-MAX_MERCATOR_LATITUDE, min(MAX_MERCATOR_LATITUDE, coordinates.latitude))
        lat_rad = math.radians(lat)

        x = int((coordinates.longitude + 180.0) / 360.0 * n)
        y = int((1.0 - math.asinh(math.tan(lat_rad)) / math.pi) / 2.0 * n)

        # longitude 180 and the clamped south edge land one past the last tile
        x = min(x, n - 1)
        y = min(max(y, 0), n - 1)

        return TileRef(zoom=z, x=x, y=y, url=self.tile_url(z, x, y))

    def tile_url(self, zoom: int, x: int, y: int, subdomain: str = "a") -> str:
        return (
            self.tile_url_template.replace("{s}", subdomain)
            .replace("{z}", str(zoom))
            .replace("{x}", str(x))
            .replace("{y}", str(y))
        )
