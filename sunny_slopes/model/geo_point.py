"""GeoPoint - The fundamental geometry atom.

A GeoPoint represents a single WGS84 coordinate, optionally with elevation.
It is the single source of truth for location throughout the system.

Used by:
- RunDescriptor / LiftDescriptor (ordered geometry)
- GraphNode (clustered endpoint location)
- PlanRequest (home location)
- SlopeFacet (where a facet was sampled)
"""

from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from sunny_slopes.core.geo_calculator import GeoCalculator
from sunny_slopes.errors import InvalidInputError


@dataclass(frozen=True)
class GeoPoint:
    """An immutable WGS84 coordinate.

    Attributes:
        lat: Latitude in decimal degrees, within [-90, 90]
        lng: Longitude in decimal degrees
        elevation: Elevation in meters above sea level, None for 2D geometry

    Example:
        point = GeoPoint(lat=45.9237, lng=6.8694)
    """

    lat: float
    lng: float
    elevation: Optional[float] = None

    def __post_init__(self) -> None:
        """Validate coordinates after initialization."""
        if not (np.isfinite(self.lat) and np.isfinite(self.lng)):
            raise InvalidInputError(f"GeoPoint coordinates must be finite, got ({self.lat}, {self.lng})", field="lat/lng")
        if abs(self.lat) > 90:
            raise InvalidInputError(f"Latitude must be within [-90, 90], got {self.lat}", field="lat")
        if self.elevation is not None and not np.isfinite(self.elevation):
            raise InvalidInputError(f"GeoPoint elevation must be finite at ({self.lat}, {self.lng})", field="elevation")

    @property
    def lat_lng(self) -> tuple[float, float]:
        """Return (lat, lng) tuple - standard geographic order."""
        return (self.lat, self.lng)

    @property
    def lng_lat(self) -> tuple[float, float]:
        """Return (lng, lat) tuple - GeoJSON/Shapely order."""
        return (self.lng, self.lat)

    def distance_to(self, other: "GeoPoint") -> float:
        """Calculate haversine distance to another point in meters.

        Elevation does not affect the horizontal distance.
        """
        return GeoCalculator.haversine_distance_m(
            lat1=self.lat,
            lng1=self.lng,
            lat2=other.lat,
            lng2=other.lng,
        )

    def bearing_to(self, other: "GeoPoint") -> float:
        """Initial compass bearing towards another point (0-360°)."""
        return GeoCalculator.initial_bearing_deg(
            lat1=self.lat,
            lng1=self.lng,
            lat2=other.lat,
            lng2=other.lng,
        )

    def to_coordinates(self) -> list[float]:
        """GeoJSON-style [lng, lat] or [lng, lat, elevation] list."""
        if self.elevation is None:
            return [self.lng, self.lat]
        return [self.lng, self.lat, self.elevation]

    @classmethod
    def from_coordinates(cls, coords: list[float] | tuple[float, ...]) -> "GeoPoint":
        """Create GeoPoint from a GeoJSON-style [lng, lat(, elevation)] sequence."""
        if len(coords) < 2:
            raise InvalidInputError(f"Coordinate needs at least [lng, lat], got {coords!r}", field="geometry")
        elevation = float(coords[2]) if len(coords) > 2 and coords[2] is not None else None
        return cls(lat=float(coords[1]), lng=float(coords[0]), elevation=elevation)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GeoPoint":
        """Create GeoPoint from a {"lat", "lng"(, "elevation")} dictionary."""
        try:
            lat = float(data["lat"])
            lng = float(data["lng"])
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidInputError(f"Location needs numeric 'lat' and 'lng', got {data!r}", field="lat/lng") from e
        elevation = data.get("elevation")
        return cls(lat=lat, lng=lng, elevation=float(elevation) if elevation is not None else None)

    def __repr__(self) -> str:
        if self.elevation is None:
            return f"GeoPoint(lat={self.lat:.5f}, lng={self.lng:.5f})"
        return f"GeoPoint(lat={self.lat:.5f}, lng={self.lng:.5f}, elev={self.elevation:.1f}m)"
