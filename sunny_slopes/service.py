"""Request-handling boundary.

Thin functions that callers (HTTP handlers, CLI, jobs) use instead of wiring
the planner themselves:

- sun_position / sun_times: pure ephemeris lookups
- plan_route: plan against a topology as-is
- plan_day: apply live status, check that something is skiable, fill lift
  hours from the status window, then plan
"""

import logging
from datetime import date, datetime
from typing import Optional

from sunny_slopes.core.solar_ephemeris import SolarEphemeris, SunPosition, SunTimes
from sunny_slopes.errors import NoEligibleTerrainError
from sunny_slopes.model.plan import PlanRequest, RoutePlan
from sunny_slopes.model.status import StatusSnapshot
from sunny_slopes.model.topology import SkiAreaTopology
from sunny_slopes.planner.route_planner import PlannerSettings, ProgressCallback, RoutePlanner

logger = logging.getLogger(__name__)


def sun_position(instant: datetime, lat: float, lng: float) -> SunPosition:
    """Sun azimuth/altitude for a timezone-aware instant."""
    return SolarEphemeris.sun_position(instant=instant, lat=lat, lng=lng)


def sun_times(day: date, lat: float, lng: float) -> SunTimes:
    """Sunrise, sunset, solar noon and twilight for a date (UTC instants)."""
    return SolarEphemeris.sun_times(day=day, lat=lat, lng=lng)


def plan_route(
    request: PlanRequest,
    topology: SkiAreaTopology,
    settings: Optional[PlannerSettings] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> RoutePlan:
    """Plan a ski day on a topology exactly as given.

    Deterministic: identical inputs give identical plans.

    Raises:
        InvalidInputError: If the request is malformed.
    """
    planner = RoutePlanner(settings=settings, progress_callback=progress_callback)
    return planner.plan(request=request, runs=topology.runs, lifts=topology.lifts)


def plan_day(
    request: PlanRequest,
    topology: SkiAreaTopology,
    status: Optional[StatusSnapshot] = None,
    settings: Optional[PlannerSettings] = None,
    progress_callback: Optional[ProgressCallback] = None,
) -> RoutePlan:
    """Plan a ski day against live status.

    Args:
        request: Planning request
        topology: Ski area runs and lifts
        status: Live status snapshot, None to use the topology flags as-is
        settings: Planner policy, None for defaults
        progress_callback: Receives PlanningProgress updates

    Returns:
        RoutePlan, empty when the home location is far from every lift.

    Raises:
        InvalidInputError: If the request is malformed.
        NoEligibleTerrainError: If no open run matches the requested difficulties.
    """
    request.validate()
    if status is not None:
        topology = topology.apply_status(status)
        open_time, close_time = status.operating_window()
        request = request.with_hours(open_time=open_time, close_time=close_time)

    if not topology.open_runs(request.difficulties):
        raise NoEligibleTerrainError(ski_area_id=request.ski_area_id, difficulties=request.difficulties)

    logger.info(
        f"Planning {request.ski_area_id} on {request.target_date.isoformat()} "
        f"for {sorted(request.difficulties)} from {request.home_location}"
    )
    return plan_route(request=request, topology=topology, settings=settings, progress_callback=progress_callback)
