"""Data model classes for topology input and planning results.

Follows the separation of Geometry (where things are) vs Topology (how things connect):
- GeoPoint: Geometry atom (lat, lng, optional elevation)
- BaseGeometry: Base class for run/lift centerlines with computed metrics
- RunDescriptor: Ski run with difficulty and open flag
- LiftDescriptor: Lift with type, capacity and operating hours
- SkiAreaTopology: All runs and lifts of one ski area
- StatusSnapshot: Live open/closed flags and lift opening times
- PlanRequest: What the skier asked for
- RoutePlan: Ordered LiftRide / RunDescent legs with summary figures
"""

from sunny_slopes.model.base_geometry import BaseGeometry
from sunny_slopes.model.geo_point import GeoPoint
from sunny_slopes.model.lift import LiftDescriptor, OperatingHours
from sunny_slopes.model.plan import (
    LiftRide,
    PlanningProgress,
    PlanRequest,
    RouteLeg,
    RoutePlan,
    RunDescent,
)
from sunny_slopes.model.run import RunDescriptor
from sunny_slopes.model.status import LiftStatus, OperationStatus, RunStatus, StatusSnapshot
from sunny_slopes.model.topology import SkiAreaTopology

__all__ = [
    "GeoPoint",
    "BaseGeometry",
    "RunDescriptor",
    "LiftDescriptor",
    "OperatingHours",
    "SkiAreaTopology",
    "OperationStatus",
    "RunStatus",
    "LiftStatus",
    "StatusSnapshot",
    "PlanRequest",
    "LiftRide",
    "RunDescent",
    "RouteLeg",
    "RoutePlan",
    "PlanningProgress",
]
