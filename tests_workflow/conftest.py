"""Shared pytest fixtures for sunny_slopes workflow tests.

Provides a hub-and-spoke resort ("Val Sole") where every run ends at a lift
back to the summit, so with enough time the greedy planner covers every
eligible run. Minimal fixtures: keep conftest.py minimal.

RESORT LAYOUT:

    Six spoke runs leave the SUMMIT at bearings 30, 90, 150, 210, 270, 330,
    each 1200 m long with a 500 m drop, ending at a chairlift back up.
    A valley run goes from the SUMMIT straight down to the BASE.
    The gondola G1 links BASE -> SUMMIT (2000 m, 08:30-16:30).

    Aspect = travel bearing + 90°, so the spokes face 120, 180, 240, 300, 0
    and 60 degrees; the valley run faces west (270).
"""

import dataclasses
from datetime import date, time

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

BASE = GeoPoint(lat=46.50, lng=11.00, elevation=1500.0)
SPOKE_BEARINGS = (30, 90, 150, 210, 270, 330)
SPOKE_LENGTH_M = 1200.0
SPOKE_DROP_M = 500.0

WGS84 = Geod(ellps="WGS84")


def _offset(point: GeoPoint, bearing_deg: float, distance_m: float, elevation: float) -> GeoPoint:
    lng, lat, _ = WGS84.fwd(point.lng, point.lat, bearing_deg, distance_m)
    return GeoPoint(lat=lat, lng=lng, elevation=elevation)


def _run(run_id: str, start: GeoPoint, bearing_deg: float, length_m: float, drop_m: float, difficulty: str) -> RunDescriptor:
    assert start.elevation is not None
    points = [start]
    for i in range(1, 4):
        frac = i / 3
        points.append(_offset(start, bearing_deg, length_m * frac, start.elevation - drop_m * frac))
    return RunDescriptor(id=run_id, name=run_id.title(), difficulty=difficulty, geometry=tuple(points))


def build_val_sole() -> SkiAreaTopology:
    """Build the Val Sole topology (plain function so tests can vary it)."""
    summit = _offset(BASE, 0.0, 2000.0, 2300.0)
    runs = []
    lifts = [
        LiftDescriptor(
            id="G1",
            name="Sole Gondola",
            lift_type="gondola",
            capacity=2400,
            operating_hours=OperatingHours(open=time(8, 30), close=time(16, 30)),
            geometry=(BASE, summit),
        )
    ]
    for i, bearing in enumerate(SPOKE_BEARINGS):
        difficulty = "easy" if i % 2 == 0 else "intermediate"
        run = _run(f"sole-{bearing:03d}", summit, bearing, SPOKE_LENGTH_M, SPOKE_DROP_M, difficulty)
        runs.append(run)
        lifts.append(
            LiftDescriptor(
                id=f"chair-{bearing:03d}",
                lift_type="chair_lift",
                geometry=(run.geometry[-1], summit),
            )
        )
    runs.append(_run("valley", summit, 180.0, 2000.0, 800.0, "easy"))
    return SkiAreaTopology(ski_area_id="val-sole", runs=tuple(runs), lifts=tuple(lifts))


@pytest.fixture
def val_sole() -> SkiAreaTopology:
    return build_val_sole()


@pytest.fixture
def winter_day() -> PlanRequest:
    """Easy and intermediate runs from the base on the winter solstice."""
    return PlanRequest(
        ski_area_id="val-sole",
        difficulties=frozenset({"easy", "intermediate"}),
        home_location=BASE,
        target_date=date(2024, 12, 21),
        lift_open_time=time(9, 0),
        lift_close_time=time(16, 30),
        timezone="Europe/Rome",
    )


@pytest.fixture
def base_station() -> GeoPoint:
    """Gondola valley station, the default home location."""
    return BASE


@pytest.fixture
def val_sole_dead_end() -> SkiAreaTopology:
    """Val Sole plus "a-dead": a sunny easy run off the summit with no lift at its bottom.

    Its id sorts before every other run, so it wins exact ties.
    """
    topology = build_val_sole()
    summit = topology.get_lift("G1").geometry[-1]
    dead_end = _run("a-dead", summit, 90.0, 600.0, 250.0, "easy")
    return dataclasses.replace(topology, runs=topology.runs + (dead_end,))
