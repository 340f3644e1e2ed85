"""Pure geometric predicates for neighborhood queries."""
import logging
import math
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0


@dataclass(frozen=True)
class Point:
    lat: float
    lon: float


@dataclass(frozen=True)
class Viewport:
    """Map rectangle given by its center and full height/width in degrees."""
    center_lat: Optional[float]
    center_lon: Optional[float]
    delta_lat: Optional[float]
    delta_lon: Optional[float]

    def bounds(self) -> tuple[float, float, float, float]:
        """Return (min_lat, max_lat, min_lon, max_lon).

        min_lon > max_lon means the rectangle crosses the antimeridian.
        """
        half_lat = self.delta_lat / 2
        half_lon = self.delta_lon / 2
        min_lon = self.center_lon - half_lon
        max_lon = self.center_lon + half_lon
        # Wrap into [-180, 180] so a window past the antimeridian flips its bounds
        if max_lon > 180:
            max_lon -= 360
        if min_lon < -180:
            min_lon += 360
        return (
            self.center_lat - half_lat,
            self.center_lat + half_lat,
            min_lon,
            max_lon,
        )


def is_in_viewport(point: Point, viewport: Viewport) -> bool:
    """Check whether a point lies inside a viewport, boundaries inclusive."""
    if None in (
        viewport.center_lat,
        viewport.center_lon,
        viewport.delta_lat,
        viewport.delta_lon,
    ):
        logger.error("Viewport must contain center_lat, center_lon, delta_lat and delta_lon")
        return False

    min_lat, max_lat, min_lon, max_lon = viewport.bounds()

    lat_in_range = min_lat <= point.lat <= max_lat

    if viewport.delta_lon >= 360:
        lon_in_range = True
    elif min_lon <= max_lon:
        lon_in_range = min_lon <= point.lon <= max_lon
    else:
        # Crosses the antimeridian, e.g. min_lon=177, max_lon=-179
        lon_in_range = point.lon >= min_lon or point.lon <= max_lon

    return lat_in_range and lon_in_range


def haversine_km(a: Point, b: Point) -> float:
    """Great-circle distance between two points in kilometers."""
    lat1, lon1 = math.radians(a.lat), math.radians(a.lon)
    lat2, lon2 = math.radians(b.lat), math.radians(b.lon)
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(min(1.0, math.sqrt(h)))


def is_within_radius(center: Point, point: Point, threshold_km: float) -> bool:
    return haversine_km(center, point) <= threshold_km
