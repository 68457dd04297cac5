"""LiftDescriptor - A ski lift as supplied by the topology store.

A lift provides uphill transport from its first to its last geometry point.
Ride duration is estimated from the line length and a typical line speed
per lift type (OpenStreetMap aerialway values).
"""

from dataclasses import dataclass
from datetime import time
from typing import Any, Optional

from sunny_slopes.constants import SpeedConfig
from sunny_slopes.errors import InvalidInputError
from sunny_slopes.model.base_geometry import BaseGeometry
from sunny_slopes.model.geo_point import GeoPoint


def parse_clock_time(value: str | time, field: str) -> time:
    """Parse "HH:MM" (or pass through a time) with a field-tagged error."""
    if isinstance(value, time):
        return value
    try:
        return time.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"Expected a clock time like '09:00', got {value!r}", field=field) from e


@dataclass(frozen=True)
class OperatingHours:
    """Daily opening window of a lift in resort-local clock time.

    Attributes:
        open: Time of the first ride
        close: Time after which no ride may start
    """

    open: time
    close: time

    def __post_init__(self) -> None:
        if self.open >= self.close:
            raise InvalidInputError(
                f"Opening time {self.open:%H:%M} must be before closing time {self.close:%H:%M}",
                field="operating_hours",
            )

    def contains(self, clock: time) -> bool:
        """Check whether a ride may start at the given clock time (inclusive)."""
        return self.open <= clock <= self.close

    def to_dict(self) -> dict[str, str]:
        return {"open": self.open.strftime("%H:%M"), "close": self.close.strftime("%H:%M")}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OperatingHours":
        return cls(
            open=parse_clock_time(data["open"], field="operating_hours.open"),
            close=parse_clock_time(data["close"], field="operating_hours.close"),
        )


@dataclass(frozen=True)
class LiftDescriptor(BaseGeometry):
    """A ski lift with its line geometry (bottom station first).

    Attributes:
        id: Unique identifier within the ski area
        name: Display name, None for unnamed lifts
        lift_type: OpenStreetMap aerialway type (gondola, chair_lift, ...)
        is_open: Live open/closed flag
        capacity: Persons per hour, if known
        operating_hours: Daily opening window, None when unknown

    Example:
        lift = LiftDescriptor(
            id="l1",
            name="Flégère",
            lift_type="gondola",
            geometry=(GeoPoint(lat=45.93, lng=6.88), GeoPoint(lat=45.95, lng=6.88)),
        )
    """

    id: str = ""
    name: Optional[str] = None
    lift_type: str = "chair_lift"
    is_open: bool = True
    capacity: Optional[int] = None
    operating_hours: Optional[OperatingHours] = None

    @property
    def speed_mps(self) -> float:
        """Typical line speed for this lift type."""
        return SpeedConfig.LIFT_SPEEDS_MPS.get(self.lift_type.lower(), SpeedConfig.DEFAULT_LIFT_SPEED_MPS)

    @property
    def ride_minutes(self) -> float:
        """Estimated ride time in minutes."""
        return max(SpeedConfig.MIN_LEG_MINUTES, self.length_m / self.speed_mps / 60)

    @property
    def display_name(self) -> str:
        return self.name or f"Lift {self.id}"

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict."""
        return {
            "id": self.id,
            "name": self.name,
            "lift_type": self.lift_type,
            "is_open": self.is_open,
            "capacity": self.capacity,
            "operating_hours": self.operating_hours.to_dict() if self.operating_hours else None,
            "geometry": self.coordinates(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "LiftDescriptor":
        """Create LiftDescriptor from dictionary."""
        hours = data.get("operating_hours")
        capacity = data.get("capacity")
        return cls(
            id=str(data["id"]),
            name=data.get("name"),
            lift_type=data.get("lift_type") or "chair_lift",
            is_open=bool(data.get("is_open", True)),
            capacity=int(capacity) if capacity is not None else None,
            operating_hours=OperatingHours.from_dict(hours) if hours else None,
            geometry=tuple(GeoPoint.from_coordinates(c) for c in data.get("geometry", [])),
        )

    def __repr__(self) -> str:
        return f"LiftDescriptor({self.id}, {self.lift_type}, {'open' if self.is_open else 'closed'}, {self.length_m:.0f}m)"
