"""Geodesic calculations on Earth's surface.

Provides geographic helper functions for sun and route calculations:
- Distance calculation (Haversine formula)
- Bearing calculation (initial heading between points)
- Signed angular difference between two bearings
- Polyline length

All calculations use WGS84 spherical Earth approximation (R = 6,371 km).
"""

from math import atan2, cos, degrees, radians, sin, sqrt
from typing import Iterable

# Earth's radius in meters (WGS84 spherical approximation)
EARTH_RADIUS_M = 6_371_000


class GeoCalculator:
    """Static methods for geodesic calculations on Earth's surface.

    All methods use WGS84 spherical Earth model (R = 6,371 km).
    Coordinates are in decimal degrees (WGS84).
    Bearings are in degrees clockwise from North (0-360).
    Distances are in meters.
    """

    EARTH_RADIUS_M = EARTH_RADIUS_M

    @staticmethod
    def haversine_distance_m(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
        """Calculate great-circle distance between two points using Haversine formula.

        Args:
            lat1: Latitude of first point (decimal degrees)
            lng1: Longitude of first point (decimal degrees)
            lat2: Latitude of second point (decimal degrees)
            lng2: Longitude of second point (decimal degrees)

        Returns:
            Distance in meters.
        """
        dlat = radians(lat2 - lat1)
        dlng = radians(lng2 - lng1)
        a = sin(dlat / 2) ** 2 + cos(radians(lat1)) * cos(radians(lat2)) * sin(dlng / 2) ** 2
        return EARTH_RADIUS_M * 2 * atan2(sqrt(a), sqrt(1 - a))

    @staticmethod
    def initial_bearing_deg(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
        """Calculate initial bearing from point 1 to point 2.

        The bearing is the compass direction to travel from start to end,
        measured clockwise from true North.

        Args:
            lat1: Latitude of start point (decimal degrees)
            lng1: Longitude of start point (decimal degrees)
            lat2: Latitude of end point (decimal degrees)
            lng2: Longitude of end point (decimal degrees)

        Returns:
            Bearing in degrees (0-360, clockwise from North).
        """
        lat1_rad, lat2_rad = radians(lat1), radians(lat2)
        dlng = radians(lng2 - lng1)
        y = sin(dlng) * cos(lat2_rad)
        x = cos(lat1_rad) * sin(lat2_rad) - sin(lat1_rad) * cos(lat2_rad) * cos(dlng)
        return GeoCalculator.normalize_bearing(degrees(atan2(y, x)))

    @staticmethod
    def normalize_bearing(bearing_deg: float) -> float:
        """Normalize any angle to the half-open range [0, 360).

        Float modulo of a tiny negative number yields exactly 360.0,
        which is folded back to 0.0.
        """
        result = bearing_deg % 360.0
        if result >= 360.0:
            return 0.0
        return result

    @staticmethod
    def angular_difference_deg(bearing_a: float, bearing_b: float) -> float:
        """Shortest signed difference a - b between two bearings.

        Args:
            bearing_a: First bearing in degrees
            bearing_b: Second bearing in degrees

        Returns:
            Difference in degrees within [-180, 180). Positive when a is
            clockwise of b.
        """
        return (bearing_a - bearing_b + 180.0) % 360.0 - 180.0

    @staticmethod
    def polyline_length_m(coords: Iterable[tuple[float, float]]) -> float:
        """Sum of great-circle distances along a (lat, lng) polyline.

        Args:
            coords: Sequence of (lat, lng) tuples

        Returns:
            Total length in meters, 0 for fewer than two points.
        """
        total = 0.0
        previous = None
        for lat, lng in coords:
            if previous is not None:
                total += GeoCalculator.haversine_distance_m(lat1=previous[0], lng1=previous[1], lat2=lat, lng2=lng)
            previous = (lat, lng)
        return total
