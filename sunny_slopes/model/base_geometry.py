"""BaseGeometry - Base class for digitized run and lift centerlines.

Provides shared functionality for runs and lifts:
- Ordered GeoPoint storage
- Computed metrics (length, drop, average inclination)
- Sampling points at fractions of the length in a metric projection
"""

from dataclasses import dataclass
from math import atan, degrees, floor
from typing import Optional, Sequence

import numpy as np
import pyproj
from shapely.geometry import LineString
from shapely.ops import transform as shapely_transform

from sunny_slopes.core.geo_calculator import GeoCalculator
from sunny_slopes.errors import InvalidInputError
from sunny_slopes.model.geo_point import GeoPoint


def _get_utm_zone(lng: float, lat: float) -> str:
    """Get UTM zone EPSG code for given coordinates."""
    zone_number = min(60, floor((lng + 180) / 6) + 1)
    if lat >= 0:
        return f"EPSG:326{zone_number:02d}"
    return f"EPSG:327{zone_number:02d}"


@dataclass(frozen=True)
class BaseGeometry:
    """Base class for centerline geometry with computed metrics.

    Stores geometry points and computes metrics on-the-fly from the point data.
    Both RunDescriptor and LiftDescriptor inherit from this.

    Attributes:
        geometry: Ordered points (source of truth for geometry)

    Computed Properties:
        start: First point
        end: Last point
        endpoints: (start, end), only for routable geometry
        length_m: Sum of distances between consecutive points
        has_elevation: Whether every point carries an elevation
        total_drop_m: Elevation difference between endpoints (None without elevations)
        avg_slope_angle_deg: Average inclination in degrees (None without elevations)
    """

    geometry: tuple[GeoPoint, ...]

    @property
    def start(self) -> Optional[GeoPoint]:
        """First point of the geometry."""
        return self.geometry[0] if self.geometry else None

    @property
    def end(self) -> Optional[GeoPoint]:
        """Last point of the geometry."""
        return self.geometry[-1] if self.geometry else None

    @property
    def is_routable(self) -> bool:
        """At least two points are needed to form an edge."""
        return len(self.geometry) >= 2

    @property
    def endpoints(self) -> tuple[GeoPoint, GeoPoint]:
        """First and last point of a routable geometry.

        Raises:
            InvalidInputError: If the geometry has fewer than two points.
        """
        if not self.is_routable:
            raise InvalidInputError(f"Geometry needs at least 2 points, has {len(self.geometry)}", field="geometry")
        return self.geometry[0], self.geometry[-1]

    @property
    def length_m(self) -> float:
        """Total length in meters (computed from point distances)."""
        return GeoCalculator.polyline_length_m(p.lat_lng for p in self.geometry)

    @property
    def has_elevation(self) -> bool:
        """True if every point carries an elevation."""
        return bool(self.geometry) and all(p.elevation is not None for p in self.geometry)

    @property
    def total_drop_m(self) -> Optional[float]:
        """Elevation of the first point minus elevation of the last."""
        if not self.has_elevation or not self.is_routable:
            return None
        start, end = self.endpoints
        return start.elevation - end.elevation

    @property
    def avg_slope_angle_deg(self) -> Optional[float]:
        """Average inclination from endpoint elevations, in degrees."""
        drop = self.total_drop_m
        length = self.length_m
        if drop is None or length <= 0:
            return None
        return degrees(atan(abs(drop) / length))

    def get_linestring(self) -> LineString:
        """Get Shapely LineString in (lng, lat) order."""
        return LineString([p.lng_lat for p in self.geometry])

    def sample_points(self, fractions: Sequence[float]) -> list[GeoPoint]:
        """Sample points at fractions of the total length.

        Interpolation runs in the local UTM zone so fractions are true
        fractions of distance. Elevation is linearly interpolated along the
        cumulative distance when the geometry carries elevations.

        Args:
            fractions: Positions along the line, each within [0, 1]

        Returns:
            One GeoPoint per fraction, in the same order.
        """
        if not self.geometry:
            raise ValueError("Cannot sample points on empty geometry")

        clamped = [max(0.0, min(1.0, f)) for f in fractions]
        total_length = self.length_m
        if len(self.geometry) < 2 or total_length <= 0:
            return [self.geometry[0] for _ in clamped]

        line = self.get_linestring()
        center_lng = (line.bounds[0] + line.bounds[2]) / 2
        center_lat = (line.bounds[1] + line.bounds[3]) / 2
        utm_crs = _get_utm_zone(lng=center_lng, lat=center_lat)

        wgs84 = pyproj.CRS("EPSG:4326")
        utm = pyproj.CRS(utm_crs)
        to_utm = pyproj.Transformer.from_crs(wgs84, utm, always_xy=True).transform
        to_wgs84 = pyproj.Transformer.from_crs(utm, wgs84, always_xy=True).transform

        line_utm = shapely_transform(to_utm, line)

        elevations = None
        cum_dist = None
        if self.has_elevation:
            elevations = np.array([p.elevation for p in self.geometry], dtype=float)
            seg = [self.geometry[i].distance_to(self.geometry[i + 1]) for i in range(len(self.geometry) - 1)]
            cum_dist = np.concatenate([[0.0], np.cumsum(seg)]) / total_length

        points = []
        for fraction in clamped:
            projected = line_utm.interpolate(fraction, normalized=True)
            lng, lat = to_wgs84(projected.x, projected.y)
            elevation = None
            if elevations is not None:
                elevation = float(np.interp(fraction, cum_dist, elevations))
            points.append(GeoPoint(lat=float(lat), lng=float(lng), elevation=elevation))
        return points

    def coordinates(self) -> list[list[float]]:
        """GeoJSON-style coordinate list."""
        return [p.to_coordinates() for p in self.geometry]
