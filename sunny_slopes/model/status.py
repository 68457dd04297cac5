"""Live status snapshot - open/closed flags and lift opening times.

Produced by an external polling subsystem; this module only models the
snapshot and derives the resort-wide operating window from it.
"""

import logging
from dataclasses import dataclass, field
from datetime import time
from typing import Any, Optional

from sunny_slopes.constants import PlannerConfig
from sunny_slopes.errors import InvalidInputError
from sunny_slopes.model.lift import OperatingHours

logger = logging.getLogger(__name__)


class OperationStatus:
    """Status vocabulary of the live feed."""

    OPEN = "open"
    CLOSED = "closed"
    UNKNOWN = "unknown"

    ALL = [OPEN, CLOSED, UNKNOWN]

    @staticmethod
    def normalize(status: Optional[str]) -> str:
        if status is None:
            return OperationStatus.UNKNOWN
        label = status.strip().lower()
        if label not in OperationStatus.ALL:
            raise InvalidInputError(f"Unknown operation status {status!r}, expected one of {OperationStatus.ALL}", field="status")
        return label

    @staticmethod
    def to_flag(status: str, current: bool) -> bool:
        """Open flag after applying a status; "unknown" keeps the current flag."""
        if status == OperationStatus.OPEN:
            return True
        if status == OperationStatus.CLOSED:
            return False
        return current


@dataclass(frozen=True)
class RunStatus:
    run_id: str
    status: str = OperationStatus.UNKNOWN
    message: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RunStatus":
        return cls(
            run_id=str(data["run_id"]),
            status=OperationStatus.normalize(data.get("status")),
            message=data.get("message"),
        )


@dataclass(frozen=True)
class LiftStatus:
    """Live state of one lift.

    operating_hours is None when the feed does not report opening times.
    """

    lift_id: str
    status: str = OperationStatus.UNKNOWN
    operating_hours: Optional[OperatingHours] = None
    message: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LiftStatus":
        hours = data.get("operating_hours")
        return cls(
            lift_id=str(data["lift_id"]),
            status=OperationStatus.normalize(data.get("status")),
            operating_hours=OperatingHours.from_dict(hours) if hours else None,
            message=data.get("message"),
        )


@dataclass(frozen=True)
class StatusSnapshot:
    """Open/closed state of runs and lifts at one point in time.

    Attributes:
        runs: RunStatus by run id
        lifts: LiftStatus by lift id
    """

    runs: dict[str, RunStatus] = field(default_factory=dict)
    lifts: dict[str, LiftStatus] = field(default_factory=dict)

    def operating_window(self) -> tuple[time, time]:
        """Resort-wide opening window: earliest lift opening to latest closing.

        Only lifts that are not reported closed count. Falls back to
        09:00-16:30 when no lift reports opening times.
        """
        hours = [
            s.operating_hours
            for s in self.lifts.values()
            if s.operating_hours is not None and s.status != OperationStatus.CLOSED
        ]
        if not hours:
            return PlannerConfig.DEFAULT_LIFT_OPEN_TIME, PlannerConfig.DEFAULT_LIFT_CLOSE_TIME
        return min(h.open for h in hours), max(h.close for h in hours)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "StatusSnapshot":
        runs = [RunStatus.from_dict(r) for r in data.get("runs", [])]
        lifts = [LiftStatus.from_dict(lf) for lf in data.get("lifts", [])]
        logger.debug(f"Loaded status snapshot: {len(runs)} runs, {len(lifts)} lifts")
        return cls(runs={r.run_id: r for r in runs}, lifts={lf.lift_id: lf for lf in lifts})
