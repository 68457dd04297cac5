"""Sun-aware route planning.

- RouteGraph: Clustered run/lift endpoints with downhill and uphill edges
- RoutePlanningMachine: Planning phases (python-statemachine)
- RoutePlanner: Greedy coverage-and-sun planner
"""

from sunny_slopes.planner.route_graph import GraphNode, LiftEdge, LiftPaths, RouteGraph, RunEdge
from sunny_slopes.planner.route_planner import Candidate, PlannerSettings, RoutePlanner
from sunny_slopes.planner.state_machine import (
    PlanningContext,
    PlanningLogListener,
    RoutePlanningMachine,
    TerminationReason,
)

__all__ = [
    # Graph
    "RouteGraph",
    "GraphNode",
    "RunEdge",
    "LiftEdge",
    "LiftPaths",
    # State machine
    "RoutePlanningMachine",
    "PlanningContext",
    "PlanningLogListener",
    "TerminationReason",
    # Planner
    "RoutePlanner",
    "PlannerSettings",
    "Candidate",
]
