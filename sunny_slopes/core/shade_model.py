"""Terrain shade model - is a sloped surface facing the sun?

Uses the illumination cosine between the sun vector and the surface normal
of a tilted plane:

    illumination = sin(alt)·cos(slope) + cos(alt)·sin(slope)·cos(Δaz)

where Δaz is the shortest signed difference between sun azimuth and slope
aspect. A facet is shaded when illumination <= 0 (self-shading). Cast
shadows from surrounding terrain are not modelled; there is no elevation
raster, only 2D trail geometry.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from math import cos, inf, radians, sin, tan
from typing import TYPE_CHECKING, Optional

from sunny_slopes.constants import ShadeConfig, StyleConfig
from sunny_slopes.core.geo_calculator import GeoCalculator
from sunny_slopes.core.solar_ephemeris import SolarEphemeris, SunPosition
from sunny_slopes.errors import InvalidInputError

if TYPE_CHECKING:
    from sunny_slopes.model.geo_point import GeoPoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SlopeFacet:
    """A locally planar piece of terrain.

    Attributes:
        aspect_deg: Compass direction the slope faces (downhill), [0, 360)
        slope_angle_deg: Inclination from horizontal, [0, 90]
        location: Point the facet was derived from, if any
    """

    aspect_deg: float
    slope_angle_deg: float
    location: Optional[GeoPoint] = None

    def __post_init__(self) -> None:
        if not 0.0 <= self.slope_angle_deg <= 90.0:
            raise InvalidInputError(
                f"Slope angle must be within [0, 90], got {self.slope_angle_deg}", field="slope_angle_deg"
            )
        # Frozen dataclass: bypass __setattr__ to store the normalized aspect
        object.__setattr__(self, "aspect_deg", GeoCalculator.normalize_bearing(self.aspect_deg))


@dataclass(frozen=True)
class ShadeResult:
    """Outcome of a shade evaluation.

    Attributes:
        is_shaded: True when the facet receives no direct sun
        confidence: |illumination| clamped to [0, 1]; 1.0 at night
        sun_position: Sun position used for the evaluation
        illumination: Signed illumination cosine, 0.0 at night
    """

    is_shaded: bool
    confidence: float
    sun_position: SunPosition
    illumination: float

    @property
    def lit_fraction(self) -> float:
        """Direct-sun intensity in [0, 1], 0 when shaded."""
        return 0.0 if self.is_shaded else min(1.0, self.illumination)


class ShadeModel:
    """Static methods for shadow geometry and slope shading."""

    @staticmethod
    def shadow_direction(sun_azimuth_deg: float) -> float:
        """Compass direction shadows are cast towards (opposite the sun)."""
        return GeoCalculator.normalize_bearing(sun_azimuth_deg + 180.0)

    @staticmethod
    def shadow_length_factor(sun_altitude_deg: float) -> float:
        """Shadow length per unit of object height.

        Returns infinity when the sun is on or below the horizon.
        """
        if sun_altitude_deg <= 0:
            return inf
        return 1.0 / tan(radians(sun_altitude_deg))

    @staticmethod
    def illumination(sun_position: SunPosition, aspect_deg: float, slope_angle_deg: float) -> float:
        """Signed cosine between the sun vector and a facet's surface normal."""
        alt = sun_position.altitude_rad
        slope = radians(slope_angle_deg)
        delta_az = radians(GeoCalculator.angular_difference_deg(sun_position.azimuth_deg, aspect_deg))
        return sin(alt) * cos(slope) + cos(alt) * sin(slope) * cos(delta_az)

    @staticmethod
    def shade_for_position(sun_position: SunPosition, aspect_deg: float, slope_angle_deg: float) -> ShadeResult:
        """Evaluate shading for an already computed sun position."""
        if sun_position.altitude_deg <= 0:
            return ShadeResult(is_shaded=True, confidence=1.0, sun_position=sun_position, illumination=0.0)

        value = ShadeModel.illumination(
            sun_position=sun_position, aspect_deg=aspect_deg, slope_angle_deg=slope_angle_deg
        )
        return ShadeResult(
            is_shaded=value <= 0,
            confidence=max(0.0, min(1.0, abs(value))),
            sun_position=sun_position,
            illumination=value,
        )

    @staticmethod
    def calculate_point_shade(
        instant: datetime,
        lat: float,
        lng: float,
        aspect_deg: float,
        slope_angle_deg: float = ShadeConfig.DEFAULT_SLOPE_ANGLE_DEG,
    ) -> ShadeResult:
        """Decide whether a slope at a location is lit at an instant.

        Args:
            instant: Timezone-aware datetime
            lat: Latitude in degrees
            lng: Longitude in degrees
            aspect_deg: Direction the slope faces (0 = N, 90 = E, 180 = S, 270 = W)
            slope_angle_deg: Inclination in degrees, [0, 90]

        Returns:
            ShadeResult. At night the result is shaded with confidence 1.0.
        """
        if not 0.0 <= slope_angle_deg <= 90.0:
            raise InvalidInputError(f"Slope angle must be within [0, 90], got {slope_angle_deg}", field="slope_angle_deg")
        sun = SolarEphemeris.sun_position(instant=instant, lat=lat, lng=lng)
        return ShadeModel.shade_for_position(sun_position=sun, aspect_deg=aspect_deg, slope_angle_deg=slope_angle_deg)

    @staticmethod
    def calculate_facet_shade(instant: datetime, facet: SlopeFacet) -> ShadeResult:
        """Shade evaluation for a facet that carries its own location."""
        if facet.location is None:
            raise InvalidInputError("Facet has no location to evaluate shade at", field="location")
        return ShadeModel.calculate_point_shade(
            instant=instant,
            lat=facet.location.lat,
            lng=facet.location.lng,
            aspect_deg=facet.aspect_deg,
            slope_angle_deg=facet.slope_angle_deg,
        )

    @staticmethod
    def shade_color(is_shaded: bool, sun_altitude_deg: float) -> str:
        """Overlay tint: blue-ish when shaded, warmer yellow the higher the sun."""
        if is_shaded:
            return StyleConfig.SHADE_OVERLAY_COLOR
        warmth = max(0.0, min(1.0, sun_altitude_deg / 45))
        g = int(200 + warmth * 55)
        b = int(100 * (1 - warmth))
        return f"rgba(255, {g}, {b}, 0.4)"
