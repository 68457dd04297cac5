"""RunDescriptor - A ski run as supplied by the topology store.

Runs are read-only input. The planner only ever looks at open runs whose
difficulty was requested; everything else is excluded before the graph is
built.
"""

from dataclasses import dataclass
from typing import Any, Optional

from sunny_slopes.constants import DifficultyConfig, SpeedConfig, StyleConfig
from sunny_slopes.errors import InvalidInputError
from sunny_slopes.model.base_geometry import BaseGeometry
from sunny_slopes.model.geo_point import GeoPoint


@dataclass(frozen=True)
class RunDescriptor(BaseGeometry):
    """A ski run (piste) with its centerline geometry.

    Inherits geometry and geometric metrics from BaseGeometry.

    Attributes:
        id: Unique identifier within the ski area
        name: Display name, None for unnamed runs
        difficulty: One of DifficultyConfig.DIFFICULTIES
        is_open: Live open/closed flag
        locality: Sector or sub-area name, if known

    Example:
        run = RunDescriptor(
            id="r1",
            name="Pylones",
            difficulty="easy",
            is_open=True,
            geometry=(GeoPoint(lat=45.93, lng=6.87), GeoPoint(lat=45.92, lng=6.87)),
        )
    """

    id: str = ""
    name: Optional[str] = None
    difficulty: str = DifficultyConfig.UNKNOWN
    is_open: bool = True
    locality: Optional[str] = None

    def __post_init__(self) -> None:
        if self.difficulty not in DifficultyConfig.DIFFICULTIES:
            raise InvalidInputError(
                f"Run {self.id}: unknown difficulty '{self.difficulty}', "
                f"expected one of {DifficultyConfig.DIFFICULTIES}",
                field="difficulty",
            )

    @property
    def descent_speed_mps(self) -> float:
        """Assumed average descent speed for this difficulty."""
        return SpeedConfig.DESCENT_SPEEDS_MPS[self.difficulty]

    @property
    def descent_minutes(self) -> float:
        """Estimated time to ski the run, in minutes."""
        return max(SpeedConfig.MIN_LEG_MINUTES, self.length_m / self.descent_speed_mps / 60)

    @property
    def color(self) -> str:
        """Map color for this run's difficulty."""
        return StyleConfig.get_difficulty_color(self.difficulty)

    @property
    def display_name(self) -> str:
        return self.name or f"Run {self.id}"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "id": self.id,
            "name": self.name,
            "difficulty": self.difficulty,
            "is_open": self.is_open,
            "locality": self.locality,
            "geometry": self.coordinates(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RunDescriptor":
        """Create RunDescriptor from dictionary.

        Difficulty labels are normalized (e.g. "blue" -> "easy", missing -> "unknown").
        """
        return cls(
            id=str(data["id"]),
            name=data.get("name"),
            difficulty=DifficultyConfig.normalize(data.get("difficulty")),
            is_open=bool(data.get("is_open", True)),
            locality=data.get("locality"),
            geometry=tuple(GeoPoint.from_coordinates(c) for c in data.get("geometry", [])),
        )

    def __repr__(self) -> str:
        return f"RunDescriptor({self.id}, {self.difficulty}, {'open' if self.is_open else 'closed'}, {self.length_m:.0f}m)"
