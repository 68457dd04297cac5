"""Planning request and result types.

A PlanRequest is validated on construction; everything malformed is rejected
with InvalidInputError before any planning work starts. A RoutePlan is the
immutable result of one planning call and serializes deterministically via
to_dict().
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any, ClassVar, Optional, Union
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from sunny_slopes.constants import DifficultyConfig, PlannerConfig
from sunny_slopes.errors import InvalidInputError
from sunny_slopes.model.geo_point import GeoPoint
from sunny_slopes.model.lift import parse_clock_time


@dataclass(frozen=True)
class PlanRequest:
    """What the skier asked for.

    Attributes:
        ski_area_id: Ski area to plan in
        difficulties: Non-empty set of acceptable run difficulties
        home_location: Where the day starts (snapped to the nearest lift/run endpoint)
        target_date: Day to plan
        timezone: IANA timezone of the resort, used to turn clock times into instants
        lift_open_time: Local clock time of the first lift, None for the resort default
        lift_close_time: Local clock time of the last lift, None for the resort default
    """

    ski_area_id: str
    difficulties: frozenset[str]
    home_location: GeoPoint
    target_date: date
    timezone: str
    lift_open_time: Optional[time] = None
    lift_close_time: Optional[time] = None

    def __post_init__(self) -> None:
        # Accept any iterable of labels; store a frozenset
        if self.difficulties is not None and not isinstance(self.difficulties, frozenset):
            object.__setattr__(self, "difficulties", frozenset(self.difficulties))
        self.validate()

    def validate(self) -> None:
        """Reject malformed requests.

        Raises:
            InvalidInputError: Naming the offending field.
        """
        if not self.ski_area_id:
            raise InvalidInputError("Ski area id is required", field="ski_area_id")
        if not self.difficulties:
            raise InvalidInputError("Select at least one difficulty", field="difficulties")
        unknown = sorted(d for d in self.difficulties if d not in DifficultyConfig.DIFFICULTIES)
        if unknown:
            raise InvalidInputError(
                f"Unknown difficulties {unknown}, expected any of {DifficultyConfig.DIFFICULTIES}",
                field="difficulties",
            )
        if not isinstance(self.home_location, GeoPoint):
            raise InvalidInputError("Home location is required", field="home_location")
        if not isinstance(self.target_date, date) or isinstance(self.target_date, datetime):
            raise InvalidInputError(f"Target date must be a date, got {self.target_date!r}", field="target_date")
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError, TypeError) as e:
            raise InvalidInputError(f"Unknown timezone {self.timezone!r}", field="timezone") from e
        if self.lift_open_time is not None and self.lift_close_time is not None:
            if self.lift_open_time >= self.lift_close_time:
                raise InvalidInputError(
                    f"Lift open time {self.lift_open_time:%H:%M} must be before close time {self.lift_close_time:%H:%M}",
                    field="lift_open_time",
                )

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)

    def localize(self, clock: time) -> datetime:
        """Instant of a local clock time on the target date."""
        return datetime.combine(self.target_date, clock, tzinfo=self.tzinfo)

    def operating_window(
        self,
        default_open: time = PlannerConfig.DEFAULT_LIFT_OPEN_TIME,
        default_close: time = PlannerConfig.DEFAULT_LIFT_CLOSE_TIME,
    ) -> tuple[datetime, datetime]:
        """Planning window as aware instants, filling unset times from defaults."""
        open_time = self.lift_open_time or default_open
        close_time = self.lift_close_time or default_close
        if open_time >= close_time:
            raise InvalidInputError(
                f"Lift open time {open_time:%H:%M} must be before close time {close_time:%H:%M}",
                field="lift_open_time",
            )
        return self.localize(open_time), self.localize(close_time)

    def with_hours(self, open_time: time, close_time: time) -> "PlanRequest":
        """Copy with unset lift times filled in."""
        return PlanRequest(
            ski_area_id=self.ski_area_id,
            difficulties=self.difficulties,
            home_location=self.home_location,
            target_date=self.target_date,
            lift_open_time=self.lift_open_time or open_time,
            lift_close_time=self.lift_close_time or close_time,
            timezone=self.timezone,
        )

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PlanRequest":
        """Create PlanRequest from a JSON-style dictionary.

        Difficulties are normalized like run difficulties, but labels that do
        not map onto the vocabulary are rejected rather than turned into "unknown".
        """
        raw = data.get("difficulties") or []
        difficulties = set()
        for label in raw:
            normalized = DifficultyConfig.normalize(label)
            if normalized == DifficultyConfig.UNKNOWN and str(label).strip().lower() != DifficultyConfig.UNKNOWN:
                raise InvalidInputError(f"Unknown difficulty {label!r}", field="difficulties")
            difficulties.add(normalized)

        if "home_location" not in data:
            raise InvalidInputError("Home location is required", field="home_location")
        try:
            target_date = date.fromisoformat(data["target_date"])
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidInputError(f"Target date must be YYYY-MM-DD, got {data.get('target_date')!r}", field="target_date") from e
        if not data.get("timezone"):
            raise InvalidInputError("Resort timezone is required to read lift clock times", field="timezone")

        open_time = data.get("lift_open_time")
        close_time = data.get("lift_close_time")
        return cls(
            ski_area_id=str(data.get("ski_area_id") or ""),
            difficulties=frozenset(difficulties),
            home_location=GeoPoint.from_dict(data["home_location"]),
            target_date=target_date,
            lift_open_time=parse_clock_time(open_time, field="lift_open_time") if open_time else None,
            lift_close_time=parse_clock_time(close_time, field="lift_close_time") if close_time else None,
            timezone=data["timezone"],
        )


@dataclass(frozen=True)
class LiftRide:
    """Riding one lift from its bottom to its top station."""

    leg_type: ClassVar[str] = "lift"

    lift_id: str
    name: str
    from_node: str
    to_node: str
    start_time: datetime
    duration_minutes: float
    distance_m: float

    @property
    def end_time(self) -> datetime:
        return self.start_time + timedelta(minutes=self.duration_minutes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "leg_type": self.leg_type,
            "lift_id": self.lift_id,
            "name": self.name,
            "from": self.from_node,
            "to": self.to_node,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "duration_minutes": round(self.duration_minutes, 2),
            "distance_m": round(self.distance_m, 1),
        }


@dataclass(frozen=True)
class RunDescent:
    """Skiing one run from its top to its bottom.

    sun_score is the run's lit fraction while it is being skied, [0, 1].
    """

    leg_type: ClassVar[str] = "run"

    run_id: str
    name: str
    difficulty: str
    from_node: str
    to_node: str
    start_time: datetime
    duration_minutes: float
    distance_m: float
    sun_score: float

    @property
    def end_time(self) -> datetime:
        return self.start_time + timedelta(minutes=self.duration_minutes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "leg_type": self.leg_type,
            "run_id": self.run_id,
            "name": self.name,
            "difficulty": self.difficulty,
            "from": self.from_node,
            "to": self.to_node,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "duration_minutes": round(self.duration_minutes, 2),
            "distance_m": round(self.distance_m, 1),
            "sun_score": round(self.sun_score, 4),
        }


RouteLeg = Union[LiftRide, RunDescent]


@dataclass(frozen=True)
class RoutePlan:
    """Ordered sequence of lift rides and descents for one day.

    An empty plan (no legs) is a valid result, e.g. when the home location is
    far from every lift or nothing is reachable before closing.

    Attributes:
        legs: Chronologically ordered, non-overlapping legs
        total_runs_available: Open runs matching the requested difficulties
        start_time: First lift opening (planning window start)
        end_time: End of the last leg, start_time for an empty plan
        termination_reason: Why planning stopped
    """

    legs: tuple[RouteLeg, ...]
    total_runs_available: int
    start_time: datetime
    end_time: datetime
    termination_reason: str = ""
    descents: tuple[RunDescent, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "descents", tuple(leg for leg in self.legs if isinstance(leg, RunDescent)))

    @property
    def is_empty(self) -> bool:
        return not self.legs

    @property
    def covered_run_ids(self) -> list[str]:
        """Run ids in the order they are skied."""
        return [d.run_id for d in self.descents]

    @property
    def used_lift_ids(self) -> list[str]:
        """Distinct lift ids in order of first use."""
        seen: dict[str, None] = {}
        for leg in self.legs:
            if isinstance(leg, LiftRide):
                seen.setdefault(leg.lift_id, None)
        return list(seen)

    @property
    def total_runs_covered(self) -> int:
        return len(self.descents)

    @property
    def total_sun_score(self) -> float:
        return sum(d.sun_score for d in self.descents)

    @property
    def coverage_percentage(self) -> float:
        if self.total_runs_available == 0:
            return 0.0
        return 100.0 * self.total_runs_covered / self.total_runs_available

    @property
    def average_sun_exposure(self) -> float:
        if not self.descents:
            return 0.0
        return self.total_sun_score / len(self.descents)

    @property
    def total_duration_minutes(self) -> float:
        return (self.end_time - self.start_time).total_seconds() / 60

    @property
    def total_distance_m(self) -> float:
        return sum(leg.distance_m for leg in self.legs)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict with rounded floats and ISO times."""
        return {
            "legs": [leg.to_dict() for leg in self.legs],
            "total_runs_covered": self.total_runs_covered,
            "total_runs_available": self.total_runs_available,
            "total_sun_score": round(self.total_sun_score, 4),
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "covered_run_ids": self.covered_run_ids,
            "used_lift_ids": self.used_lift_ids,
            "coverage_percentage": round(self.coverage_percentage, 2),
            "average_sun_exposure": round(self.average_sun_exposure, 4),
            "total_duration_minutes": round(self.total_duration_minutes, 2),
            "total_distance_m": round(self.total_distance_m, 1),
            "termination_reason": self.termination_reason,
        }

    def __repr__(self) -> str:
        return (
            f"RoutePlan(runs={self.total_runs_covered}/{self.total_runs_available}, "
            f"legs={len(self.legs)}, sun={self.total_sun_score:.2f}, reason={self.termination_reason!r})"
        )


@dataclass(frozen=True)
class PlanningProgress:
    """Progress update emitted while planning.

    Attributes:
        phase: One of "building_graph", "scoring_exposure", "planning", "complete"
        progress: Percent complete, [0, 100]
        message: Human-readable status line
        details: Optional counters (covered runs, iterations, ...)
    """

    PHASES: ClassVar[tuple[str, ...]] = ("building_graph", "scoring_exposure", "planning", "complete")

    phase: str
    progress: float
    message: str
    details: dict[str, Any] = field(default_factory=dict)
