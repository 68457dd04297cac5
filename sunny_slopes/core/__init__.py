"""Core sun and shade computations.

This module provides the mathematical backbone of the planner:
- GeoCalculator: Geodesic calculations (distances, bearings)
- SolarEphemeris: Sun position and sunrise/sunset times
- ShadeModel: Whether a sloped facet faces the sun
- ExposureScorer: Sun exposure of runs over a time window

Model types are referenced for typing only, so sunny_slopes.model can import
from here without a cycle.
"""

from sunny_slopes.core.exposure_scorer import (
    ExposureSample,
    ExposureScorer,
    ExposureTimeline,
    RunExposure,
    SunWindow,
    TimeWindow,
    sun_level,
)
from sunny_slopes.core.geo_calculator import GeoCalculator
from sunny_slopes.core.shade_model import ShadeModel, ShadeResult, SlopeFacet
from sunny_slopes.core.solar_ephemeris import SolarEphemeris, SunPosition, SunTimes

__all__ = [
    # Geo calculator
    "GeoCalculator",
    # Ephemeris
    "SolarEphemeris",
    "SunPosition",
    "SunTimes",
    # Shade model
    "ShadeModel",
    "ShadeResult",
    "SlopeFacet",
    # Exposure
    "ExposureScorer",
    "ExposureTimeline",
    "ExposureSample",
    "RunExposure",
    "SunWindow",
    "TimeWindow",
    "sun_level",
]
