"""SkiAreaTopology - Runs and lifts of one ski area.

Plain JSON in and out; coordinates are GeoJSON-style [lng, lat(, elevation)]
lists. The topology itself is read-only: applying a status snapshot returns
a new topology.
"""

import dataclasses
import logging
from dataclasses import dataclass
from typing import Any

from sunny_slopes.errors import InvalidInputError
from sunny_slopes.model.lift import LiftDescriptor
from sunny_slopes.model.run import RunDescriptor
from sunny_slopes.model.status import OperationStatus, StatusSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SkiAreaTopology:
    """Runs and lifts of one ski area.

    Attributes:
        ski_area_id: Identifier of the ski area
        runs: Run descriptors in input order
        lifts: Lift descriptors in input order
    """

    ski_area_id: str
    runs: tuple[RunDescriptor, ...] = ()
    lifts: tuple[LiftDescriptor, ...] = ()

    def __post_init__(self) -> None:
        for kind, items in (("run", self.runs), ("lift", self.lifts)):
            ids = [item.id for item in items]
            duplicates = sorted({i for i in ids if ids.count(i) > 1})
            if duplicates:
                raise InvalidInputError(f"Duplicate {kind} ids: {duplicates}", field=f"{kind}s")

    def get_run(self, run_id: str) -> RunDescriptor:
        for run in self.runs:
            if run.id == run_id:
                return run
        raise KeyError(f"Run {run_id} not found in {self.ski_area_id}")

    def get_lift(self, lift_id: str) -> LiftDescriptor:
        for lift in self.lifts:
            if lift.id == lift_id:
                return lift
        raise KeyError(f"Lift {lift_id} not found in {self.ski_area_id}")

    def open_runs(self, difficulties: frozenset[str]) -> list[RunDescriptor]:
        """Open runs with a requested difficulty and routable geometry."""
        return [r for r in self.runs if r.is_open and r.difficulty in difficulties and r.is_routable]

    def without_run(self, run_id: str) -> "SkiAreaTopology":
        """Copy with one run removed."""
        return dataclasses.replace(self, runs=tuple(r for r in self.runs if r.id != run_id))

    def apply_status(self, status: StatusSnapshot) -> "SkiAreaTopology":
        """Overlay live open/closed flags and lift opening times.

        Items the snapshot does not mention keep their flags; lift hours from
        the snapshot replace any stored hours.
        """
        runs = []
        for run in self.runs:
            run_status = status.runs.get(run.id)
            if run_status is not None:
                run = dataclasses.replace(run, is_open=OperationStatus.to_flag(run_status.status, run.is_open))
            runs.append(run)

        lifts = []
        for lift in self.lifts:
            lift_status = status.lifts.get(lift.id)
            if lift_status is not None:
                lift = dataclasses.replace(
                    lift,
                    is_open=OperationStatus.to_flag(lift_status.status, lift.is_open),
                    operating_hours=lift_status.operating_hours or lift.operating_hours,
                )
            lifts.append(lift)

        unknown = (set(status.runs) - {r.id for r in self.runs}) | (set(status.lifts) - {lf.id for lf in self.lifts})
        if unknown:
            logger.warning(f"Status snapshot mentions {len(unknown)} ids not in {self.ski_area_id}: {sorted(unknown)}")

        return dataclasses.replace(self, runs=tuple(runs), lifts=tuple(lifts))

    def to_dict(self) -> dict[str, Any]:
        return {
            "ski_area_id": self.ski_area_id,
            "runs": [r.to_dict() for r in self.runs],
            "lifts": [lf.to_dict() for lf in self.lifts],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SkiAreaTopology":
        """Create topology from a JSON-style dictionary."""
        if "ski_area_id" not in data:
            raise InvalidInputError("Topology needs a ski_area_id", field="ski_area_id")
        runs = tuple(RunDescriptor.from_dict(r) for r in data.get("runs", []))
        lifts = tuple(LiftDescriptor.from_dict(lf) for lf in data.get("lifts", []))
        logger.info(f"Loaded topology {data['ski_area_id']}: {len(runs)} runs, {len(lifts)} lifts")
        return cls(ski_area_id=str(data["ski_area_id"]), runs=runs, lifts=lifts)
