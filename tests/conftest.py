"""Shared pytest fixtures for sunny_slopes tests.

Provides a small synthetic resort near Chamonix and reusable request data.
All fixtures use explicit values with documented rationale.

RESORT LAYOUT (home = BASE):

         W1 <--r-shade-- TOP --r-sun--> E1
          \\     (north)  ^  (south)    /
           L3 (closed)    |           L2
                          L1
                          |
                         BASE

    L1    gondola BASE -> TOP, 1200 m north, 08:30-16:30
    r-sun    easy, TOP -> E1, 1000 m due east, 577 m drop (30°), faces south
    r-shade  easy, TOP -> W1, 1000 m due west, 577 m drop (30°), faces north
    L2    gondola E1 -> TOP, no reported hours
    L3    gondola W1 -> TOP, closed
    r-far    easy, 20 km away, not connected to anything
    r-closed easy, TOP -> E1 parallel to r-sun, closed
    r-black  expert, TOP -> E1, open

Aspect is estimated as travel bearing + 90°, so travelling east faces south
and travelling west faces north. On 2024-12-21 at 09:00 CET the sun stands
about 6° high in the south-east: r-sun is lit, r-shade is not.
"""

from datetime import date, datetime, time, timedelta, timezone

import pytest
from pyproj import Geod

from sunny_slopes.model import (
    GeoPoint,
    LiftDescriptor,
    OperatingHours,
    PlanRequest,
    RunDescriptor,
    SkiAreaTopology,
)

CHAMONIX_LAT = 45.9237
CHAMONIX_LNG = 6.8694

# Central European Time without DST, so winter instants are unambiguous
CET = timezone(timedelta(hours=1))

TOP_ELEVATION_M = 2400.0
RUN_LENGTH_M = 1000.0
RUN_DROP_M = 577.35  # tan(30°) * 1000 m

WGS84 = Geod(ellps="WGS84")


def offset(point: GeoPoint, bearing_deg: float, distance_m: float, elevation: float | None = None) -> GeoPoint:
    """Point at a bearing and distance from another point."""
    lng, lat, _ = WGS84.fwd(point.lng, point.lat, bearing_deg, distance_m)
    return GeoPoint(lat=lat, lng=lng, elevation=elevation)


def straight_run(
    run_id: str,
    start: GeoPoint,
    bearing_deg: float,
    length_m: float = RUN_LENGTH_M,
    drop_m: float | None = RUN_DROP_M,
    difficulty: str = "easy",
    is_open: bool = True,
    steps: int = 4,
) -> RunDescriptor:
    """Straight run with evenly spaced points and a constant gradient."""
    points = []
    for i in range(steps + 1):
        frac = i / steps
        elevation = None
        if drop_m is not None and start.elevation is not None:
            elevation = start.elevation - drop_m * frac
        if i == 0:
            points.append(GeoPoint(lat=start.lat, lng=start.lng, elevation=elevation))
        else:
            points.append(offset(start, bearing_deg, length_m * frac, elevation))
    return RunDescriptor(id=run_id, name=run_id, difficulty=difficulty, is_open=is_open, geometry=tuple(points))


def straight_lift(
    lift_id: str,
    bottom: GeoPoint,
    top: GeoPoint,
    lift_type: str = "gondola",
    is_open: bool = True,
    operating_hours: OperatingHours | None = None,
) -> LiftDescriptor:
    return LiftDescriptor(
        id=lift_id,
        name=lift_id,
        lift_type=lift_type,
        is_open=is_open,
        geometry=(bottom, top),
        operating_hours=operating_hours,
    )


# =============================================================================
# LOCATIONS
# =============================================================================


@pytest.fixture
def base() -> GeoPoint:
    """Valley station: 500 m south of Chamonix center."""
    return offset(GeoPoint(lat=CHAMONIX_LAT, lng=CHAMONIX_LNG), 180.0, 500.0, elevation=1800.0)


@pytest.fixture
def top(base: GeoPoint) -> GeoPoint:
    """Top station: 1200 m north of the base."""
    return offset(base, 0.0, 1200.0, elevation=TOP_ELEVATION_M)


# =============================================================================
# RESORT
# =============================================================================


@pytest.fixture
def resort(base: GeoPoint, top: GeoPoint) -> SkiAreaTopology:
    """Synthetic resort described in the module docstring."""
    r_sun = straight_run("r-sun", top, 90.0)
    r_shade = straight_run("r-shade", top, 270.0)
    r_closed = straight_run("r-closed", top, 90.0, is_open=False)
    r_black = straight_run("r-black", top, 90.0, difficulty="expert")
    far_start = offset(top, 45.0, 20_000.0, elevation=TOP_ELEVATION_M)
    r_far = straight_run("r-far", far_start, 90.0)

    east_bottom = r_sun.end
    west_bottom = r_shade.end
    assert east_bottom is not None and west_bottom is not None

    lifts = (
        straight_lift("L1", base, top, operating_hours=OperatingHours(open=time(8, 30), close=time(16, 30))),
        straight_lift("L2", east_bottom, top),
        straight_lift("L3", west_bottom, top, is_open=False),
    )
    return SkiAreaTopology(
        ski_area_id="chamonix-test",
        runs=(r_sun, r_shade, r_closed, r_black, r_far),
        lifts=lifts,
    )


@pytest.fixture
def winter_request(base: GeoPoint) -> PlanRequest:
    """Easy runs on the winter solstice, starting at the base, 09:00-16:30 CET."""
    return PlanRequest(
        ski_area_id="chamonix-test",
        difficulties=frozenset({"easy"}),
        home_location=base,
        target_date=date(2024, 12, 21),
        lift_open_time=time(9, 0),
        lift_close_time=time(16, 30),
        timezone="Europe/Paris",
    )


@pytest.fixture
def winter_morning() -> datetime:
    """2024-12-21 09:00 CET, shortly after sunrise."""
    return datetime(2024, 12, 21, 9, 0, tzinfo=CET)


@pytest.fixture
def dead_end_run(top: GeoPoint) -> RunDescriptor:
    """Sunny easy run off TOP ending about 170 m from E1, where no lift waits.

    Its id sorts before every other run, so it wins exact ties.
    """
    return straight_run("a-dead", top, 100.0)
