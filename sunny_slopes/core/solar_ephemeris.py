"""Solar ephemeris - where the sun is for a place and instant.

Low-precision analytic model (about ±1° in position and a few minutes in
sunrise/sunset), sufficient for judging whether a ski run is lit:

    δ  = -23.45° · cos(360/365 · (N + 10))           declination
    EoT = 9.87·sin 2B - 7.53·cos B - 1.5·sin B        equation of time (minutes)
    H  = 15° · (UTC hours + lng/15 + EoT/60 - 12)     hour angle
    altitude = asin(sin φ · sin δ + cos φ · cos δ · cos H)

Azimuth is measured clockwise from true north, so 90° is east and 180° is
south. All instants must be timezone-aware; computations run in UTC.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta, timezone
from math import acos, asin, atan2, cos, degrees, radians, sin, tan
from typing import Optional

from sunny_slopes.constants import SolarConfig
from sunny_slopes.core.geo_calculator import GeoCalculator
from sunny_slopes.errors import InvalidInputError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SunPosition:
    """Sun direction as seen from a point on the ground.

    Attributes:
        azimuth_deg: Compass direction of the sun, [0, 360), 0 = north
        altitude_deg: Angle above the horizon, [-90, 90]
    """

    azimuth_deg: float
    altitude_deg: float

    @property
    def azimuth_rad(self) -> float:
        return radians(self.azimuth_deg)

    @property
    def altitude_rad(self) -> float:
        return radians(self.altitude_deg)

    @property
    def is_above_horizon(self) -> bool:
        return self.altitude_deg > 0


@dataclass(frozen=True)
class SunTimes:
    """Sunrise, sunset and related events for one date and location.

    sunrise/sunset are None under polar day or polar night; dawn/dusk are
    None when the sun never crosses the civil twilight altitude.
    """

    date: date
    solar_noon: datetime
    sunrise: Optional[datetime] = None
    sunset: Optional[datetime] = None
    dawn: Optional[datetime] = None
    dusk: Optional[datetime] = None
    polar_day: bool = False
    polar_night: bool = False

    @property
    def day_length_hours(self) -> float:
        """Hours between sunrise and sunset (24 for polar day, 0 for polar night)."""
        if self.polar_day:
            return 24.0
        if self.sunrise is None or self.sunset is None:
            return 0.0
        return (self.sunset - self.sunrise).total_seconds() / 3600


class SolarEphemeris:
    """Static methods for sun position and sun event times."""

    @staticmethod
    def _validate_latitude(lat: float) -> None:
        if not -90.0 <= lat <= 90.0:
            raise InvalidInputError(f"Latitude must be within [-90, 90], got {lat}", field="lat")

    @staticmethod
    def _to_utc(instant: datetime) -> datetime:
        if instant.tzinfo is None or instant.tzinfo.utcoffset(instant) is None:
            raise InvalidInputError(
                f"Instant {instant.isoformat()} has no timezone; pass a timezone-aware datetime",
                field="instant",
            )
        return instant.astimezone(timezone.utc)

    @staticmethod
    def day_of_year(day: date) -> int:
        """Ordinal day within the year, 1 for January 1st."""
        return day.timetuple().tm_yday

    @staticmethod
    def declination_deg(day_of_year: int) -> float:
        """Solar declination in degrees for a day of the year."""
        return -SolarConfig.AXIAL_TILT_DEG * cos(
            radians(360.0 / SolarConfig.DAYS_PER_YEAR * (day_of_year + SolarConfig.DECLINATION_DAY_OFFSET))
        )

    @staticmethod
    def equation_of_time_minutes(day_of_year: int) -> float:
        """Difference between apparent and mean solar time, in minutes."""
        b = radians(360.0 / SolarConfig.DAYS_PER_YEAR * (day_of_year - 81))
        return 9.87 * sin(2 * b) - 7.53 * cos(b) - 1.5 * sin(b)

    @staticmethod
    def sun_position(instant: datetime, lat: float, lng: float) -> SunPosition:
        """Compute the sun's azimuth and altitude.

        Args:
            instant: Timezone-aware datetime
            lat: Observer latitude in degrees, within [-90, 90]
            lng: Observer longitude in degrees (east positive)

        Returns:
            SunPosition with azimuth in [0, 360) and altitude in [-90, 90].

        Raises:
            InvalidInputError: If the instant is naive or the latitude is out of range.
        """
        SolarEphemeris._validate_latitude(lat)
        utc = SolarEphemeris._to_utc(instant)

        n = SolarEphemeris.day_of_year(utc.date())
        decl = radians(SolarEphemeris.declination_deg(n))
        eot = SolarEphemeris.equation_of_time_minutes(n)

        utc_hours = utc.hour + utc.minute / 60 + (utc.second + utc.microsecond / 1e6) / 3600
        solar_hours = utc_hours + lng / SolarConfig.DEGREES_PER_HOUR + eot / 60
        hour_angle = radians(SolarConfig.DEGREES_PER_HOUR * (solar_hours - 12))

        phi = radians(lat)
        sin_alt = sin(phi) * sin(decl) + cos(phi) * cos(decl) * cos(hour_angle)
        altitude = asin(max(-1.0, min(1.0, sin_alt)))

        # Clockwise from north; at the poles the formula degenerates gracefully to a bearing
        y = -sin(hour_angle) * cos(decl)
        x = cos(phi) * sin(decl) - sin(phi) * cos(decl) * cos(hour_angle)
        azimuth = GeoCalculator.normalize_bearing(degrees(atan2(y, x)))

        return SunPosition(azimuth_deg=azimuth, altitude_deg=degrees(altitude))

    @staticmethod
    def is_sun_up(instant: datetime, lat: float, lng: float) -> bool:
        """True when the sun's altitude is strictly above the horizon."""
        return SolarEphemeris.sun_position(instant=instant, lat=lat, lng=lng).altitude_deg > 0

    @staticmethod
    def _event_hour_angle_deg(lat: float, decl_deg: float, altitude_deg: float) -> Optional[float]:
        """Hour angle at which the sun crosses an altitude.

        Returns None when the sun stays entirely above (cos < -1) or below
        (cos > 1) that altitude all day.
        """
        phi = radians(lat)
        decl = radians(decl_deg)
        denominator = cos(phi) * cos(decl)
        if abs(denominator) < 1e-12:
            return None
        cos_h = (sin(radians(altitude_deg)) - sin(phi) * sin(decl)) / denominator
        if cos_h < -1 or cos_h > 1:
            return None
        return degrees(acos(cos_h))

    @staticmethod
    def sun_times(day: date, lat: float, lng: float) -> SunTimes:
        """Compute sunrise, sunset, solar noon and civil twilight for a date.

        Times are returned as UTC-aware datetimes; callers convert to the
        resort timezone for display.

        Args:
            day: Calendar date
            lat: Observer latitude in degrees, within [-90, 90]
            lng: Observer longitude in degrees (east positive)

        Returns:
            SunTimes. Under polar day or night sunrise/sunset are None and
            the matching flag is set.
        """
        SolarEphemeris._validate_latitude(lat)
        if isinstance(day, datetime):
            day = SolarEphemeris._to_utc(day).date()

        n = SolarEphemeris.day_of_year(day)
        decl_deg = SolarEphemeris.declination_deg(n)
        eot = SolarEphemeris.equation_of_time_minutes(n)

        midnight = datetime.combine(day, time(0, 0), tzinfo=timezone.utc)
        noon_hours = 12 - lng / SolarConfig.DEGREES_PER_HOUR - eot / 60
        solar_noon = midnight + timedelta(hours=noon_hours)

        cos_h0 = -tan(radians(lat)) * tan(radians(decl_deg))
        polar_day = cos_h0 < -1
        polar_night = cos_h0 > 1

        sunrise = sunset = None
        if not (polar_day or polar_night):
            half_day_hours = degrees(acos(cos_h0)) / SolarConfig.DEGREES_PER_HOUR
            sunrise = solar_noon - timedelta(hours=half_day_hours)
            sunset = solar_noon + timedelta(hours=half_day_hours)

        dawn = dusk = None
        twilight_h = SolarEphemeris._event_hour_angle_deg(
            lat=lat, decl_deg=decl_deg, altitude_deg=SolarConfig.CIVIL_TWILIGHT_ALTITUDE_DEG
        )
        if twilight_h is not None:
            dawn = solar_noon - timedelta(hours=twilight_h / SolarConfig.DEGREES_PER_HOUR)
            dusk = solar_noon + timedelta(hours=twilight_h / SolarConfig.DEGREES_PER_HOUR)

        if polar_day or polar_night:
            logger.debug(f"Polar {'day' if polar_day else 'night'} at lat={lat:.2f} on {day.isoformat()}")

        return SunTimes(
            date=day,
            solar_noon=solar_noon,
            sunrise=sunrise,
            sunset=sunset,
            dawn=dawn,
            dusk=dusk,
            polar_day=polar_day,
            polar_night=polar_night,
        )

    @staticmethod
    def daylight_hours(day: date, lat: float) -> float:
        """Length of the day in hours, rounded to one decimal.

        Independent of longitude. Returns 24 under polar day and 0 under
        polar night.
        """
        SolarEphemeris._validate_latitude(lat)
        decl = radians(SolarEphemeris.declination_deg(SolarEphemeris.day_of_year(day)))
        cos_h0 = -tan(radians(lat)) * tan(decl)
        if cos_h0 < -1:
            return 24.0
        if cos_h0 > 1:
            return 0.0
        hours = 2 * degrees(acos(cos_h0)) / SolarConfig.DEGREES_PER_HOUR
        return round(hours, 1)

    @staticmethod
    def daylight_description(hours: float) -> str:
        """Human-friendly label for a day length."""
        for min_hours, label in SolarConfig.DAYLIGHT_DESCRIPTIONS:
            if hours >= min_hours:
                return label
        if hours > 0:
            return "Minimal daylight"
        return "Polar night"

    @staticmethod
    def format_daylight_hours(hours: float) -> str:
        """Format a day length as e.g. "8h 30m" (or "9h" on whole hours)."""
        h = int(hours)
        m = round((hours - h) * 60)
        if m == 60:
            h, m = h + 1, 0
        if m == 0:
            return f"{h}h"
        return f"{h}h {m}m"
