"""Tests for the request-handling boundary.

Tests: plan_day (status overlay, lift hours, NoEligibleTerrainError), plan_route,
sun_position / sun_times delegation
"""

import dataclasses
from datetime import date, datetime, time, timedelta, timezone

import pytest

from sunny_slopes import service
from sunny_slopes.core.solar_ephemeris import SolarEphemeris
from sunny_slopes.errors import InvalidInputError, NoEligibleTerrainError, SunnySlopesError
from sunny_slopes.model import OperatingHours, PlanRequest, SkiAreaTopology, StatusSnapshot
from sunny_slopes.model.status import LiftStatus, OperationStatus, RunStatus

CET = timezone(timedelta(hours=1))


class TestPlanDay:
    def test_without_status_matches_plan_route(self, winter_request: PlanRequest, resort: SkiAreaTopology) -> None:
        day = service.plan_day(request=winter_request, topology=resort)
        route = service.plan_route(request=winter_request, topology=resort)
        assert day.to_dict() == route.to_dict()
        assert day.covered_run_ids == ["r-sun", "r-shade"]

    def test_status_closes_lift_and_sets_hours(self, winter_request: PlanRequest, resort: SkiAreaTopology) -> None:
        request = dataclasses.replace(winter_request, lift_open_time=None, lift_close_time=None)
        status = StatusSnapshot(
            lifts={
                "L1": LiftStatus("L1", OperationStatus.OPEN, OperatingHours(time(9, 30), time(16, 0))),
                "L2": LiftStatus("L2", OperationStatus.CLOSED),
            }
        )
        plan = service.plan_day(request=request, topology=resort, status=status)
        assert plan.start_time == datetime(2024, 12, 21, 9, 30, tzinfo=CET)
        assert plan.covered_run_ids == ["r-sun"], "without L2 the skier is stuck at E1"
        assert plan.used_lift_ids == ["L1"]

    def test_explicit_request_hours_win_over_status(self, winter_request: PlanRequest, resort: SkiAreaTopology) -> None:
        status = StatusSnapshot(lifts={"L1": LiftStatus("L1", OperationStatus.OPEN, OperatingHours(time(8, 30), time(16, 0)))})
        plan = service.plan_day(request=winter_request, topology=resort, status=status)
        assert plan.start_time == datetime(2024, 12, 21, 9, 0, tzinfo=CET)

    def test_no_eligible_terrain(self, winter_request: PlanRequest, resort: SkiAreaTopology) -> None:
        status = StatusSnapshot(
            runs={run_id: RunStatus(run_id, OperationStatus.CLOSED) for run_id in ("r-sun", "r-shade", "r-far")}
        )
        with pytest.raises(NoEligibleTerrainError) as exc_info:
            service.plan_day(request=winter_request, topology=resort, status=status)
        assert exc_info.value.ski_area_id == "chamonix-test"
        assert exc_info.value.difficulties == frozenset({"easy"})
        assert isinstance(exc_info.value, SunnySlopesError)

    def test_plan_route_returns_empty_plan_instead_of_raising(
        self, winter_request: PlanRequest, resort: SkiAreaTopology
    ) -> None:
        request = dataclasses.replace(winter_request, difficulties=frozenset({"novice"}))
        with pytest.raises(NoEligibleTerrainError):
            service.plan_day(request=request, topology=resort)
        assert service.plan_route(request=request, topology=resort).is_empty

    def test_invalid_request_is_a_value_error(self) -> None:
        """InvalidInputError doubles as ValueError for callers that only know the builtin."""
        with pytest.raises(ValueError):
            PlanRequest.from_dict(
                {"ski_area_id": "x", "difficulties": [], "home_location": {"lat": 0, "lng": 0}, "target_date": "2024-12-21", "timezone": "UTC"}
            )
        assert issubclass(InvalidInputError, SunnySlopesError)


class TestEphemerisBoundary:
    def test_sun_position(self) -> None:
        instant = datetime(2024, 12, 21, 12, 0, tzinfo=CET)
        assert service.sun_position(instant, 45.92, 6.87) == SolarEphemeris.sun_position(instant, 45.92, 6.87)

    def test_sun_times(self) -> None:
        assert service.sun_times(date(2024, 12, 21), 45.92, 6.87) == SolarEphemeris.sun_times(date(2024, 12, 21), 45.92, 6.87)
