"""Greedy sun-aware route planner.

Plans one ski day as a sequence of lift rides and descents. Starting at the
node nearest the home location when the lifts open, it repeatedly picks the
best uncovered run reachable by lift and simulates riding there and skiing
it, until the lifts close, nothing worthwhile is left, or the iteration cap
is reached.

Candidate score:

    score = coverage_bonus + sun_weight · exposure - detour_weight · lift_minutes

where exposure is the run's lit fraction while it is being skied and
lift_minutes the ride time needed to reach its top. Runs that end where no
other uncovered run can be reached before close rank after every run that
leaves the day open. Within each group, higher score wins; ties go to higher
exposure, then shorter detour, then the smallest run id.

This is a greedy heuristic for an orienteering-style problem; it does not
guarantee maximal coverage.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Iterable, Optional

from sunny_slopes.constants import PlannerConfig
from sunny_slopes.core.exposure_scorer import ExposureScorer, ExposureTimeline, TimeWindow
from sunny_slopes.errors import InvalidInputError
from sunny_slopes.model.lift import LiftDescriptor
from sunny_slopes.model.plan import LiftRide, PlanningProgress, PlanRequest, RouteLeg, RoutePlan, RunDescent
from sunny_slopes.model.run import RunDescriptor
from sunny_slopes.planner.route_graph import LiftEdge, LiftPaths, RouteGraph, RunEdge
from sunny_slopes.planner.state_machine import PlanningContext, RoutePlanningMachine, TerminationReason

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[PlanningProgress], None]


@dataclass(frozen=True)
class PlannerSettings:
    """Tunable planner policy. Defaults come from PlannerConfig."""

    sun_weight: float = PlannerConfig.SUN_WEIGHT
    detour_weight: float = PlannerConfig.DETOUR_WEIGHT
    coverage_bonus: float = PlannerConfig.COVERAGE_BONUS
    max_iterations: int = PlannerConfig.MAX_ITERATIONS
    node_cluster_distance_m: float = PlannerConfig.NODE_CLUSTER_DISTANCE_M
    home_snap_distance_m: float = PlannerConfig.HOME_SNAP_DISTANCE_M
    score_precision: int = PlannerConfig.SCORE_PRECISION

    def __post_init__(self) -> None:
        for name in ("sun_weight", "detour_weight", "coverage_bonus", "node_cluster_distance_m", "home_snap_distance_m"):
            if getattr(self, name) < 0:
                raise InvalidInputError(f"{name} must be non-negative, got {getattr(self, name)}", field=name)
        if self.max_iterations < 1:
            raise InvalidInputError(f"max_iterations must be at least 1, got {self.max_iterations}", field="max_iterations")


@dataclass(frozen=True)
class Candidate:
    """A run the skier could do next, with the legs needed to do it."""

    run_edge: RunEdge
    legs: tuple[RouteLeg, ...]
    exposure: float
    detour_minutes: float
    score: float
    has_continuation: bool

    @property
    def run_id(self) -> str:
        return self.run_edge.run.id


class RoutePlanner:
    """Greedy planner over a RouteGraph and an ExposureTimeline.

    Stateless between calls: every plan() builds its own graph, timeline and
    state machine.

    Example:
        planner = RoutePlanner(settings=PlannerSettings(sun_weight=2.0))
        plan = planner.plan(request=request, runs=topology.runs, lifts=topology.lifts)
    """

    def __init__(
        self,
        settings: Optional[PlannerSettings] = None,
        scorer: Optional[ExposureScorer] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> None:
        self.settings = settings or PlannerSettings()
        self.scorer = scorer or ExposureScorer()
        self.progress_callback = progress_callback

    def _report(self, phase: str, progress: float, message: str, **details: object) -> None:
        if self.progress_callback is not None:
            self.progress_callback(
                PlanningProgress(phase=phase, progress=max(0.0, min(100.0, progress)), message=message, details=details)
            )

    @staticmethod
    def eligible_runs(request: PlanRequest, runs: Iterable[RunDescriptor]) -> list[RunDescriptor]:
        """Open runs with a requested difficulty and at least two points, sorted by id."""
        eligible = []
        for run in runs:
            if not run.is_open or run.difficulty not in request.difficulties:
                continue
            if not run.is_routable:
                logger.warning(f"Excluding run {run.id}: needs at least 2 geometry points, has {len(run.geometry)}")
                continue
            eligible.append(run)
        return sorted(eligible, key=lambda r: r.id)

    def plan(
        self,
        request: PlanRequest,
        runs: Iterable[RunDescriptor],
        lifts: Iterable[LiftDescriptor],
    ) -> RoutePlan:
        """Plan a ski day.

        Args:
            request: Validated planning request
            runs: All runs of the ski area (closed/ineligible ones are ignored)
            lifts: All lifts of the ski area (closed ones are ignored)

        Returns:
            RoutePlan, possibly empty.

        Raises:
            InvalidInputError: If the request is malformed.
        """
        request.validate()
        open_at, close_at = request.operating_window()

        eligible = self.eligible_runs(request, runs)
        available = len(eligible)

        def empty_plan(reason: str) -> RoutePlan:
            logger.info(f"Empty plan for {request.ski_area_id}: {reason}")
            self._report("complete", 100, "No route possible", reason=reason)
            return RoutePlan(
                legs=(),
                total_runs_available=available,
                start_time=open_at,
                end_time=open_at,
                termination_reason=reason,
            )

        if not eligible:
            return empty_plan(TerminationReason.NO_ELIGIBLE_RUNS)

        self._report("building_graph", 0, "Building route graph", runs=available)
        graph = RouteGraph.build(runs=eligible, lifts=lifts, cluster_distance_m=self.settings.node_cluster_distance_m)

        home = graph.nearest_node(point=request.home_location, max_distance_m=self.settings.home_snap_distance_m)
        if home is None:
            return empty_plan(TerminationReason.HOME_UNREACHABLE)
        logger.info(f"Home location snapped to {home.id} ({home.location.distance_to(request.home_location):.0f}m away)")

        self._report("scoring_exposure", 10, "Scoring sun exposure", runs=available)
        timeline = self.scorer.build_timeline(runs=eligible, window=TimeWindow(start=open_at, end=close_at))

        self._report("planning", 20, "Planning route", covered=0, available=available)
        sm, ctx = RoutePlanningMachine.create(clock=open_at, current_node=home.index)

        while not sm.is_terminal:
            clock, _ = ctx.position()
            if ctx.iterations >= self.settings.max_iterations:
                sm.send("finish", reason=TerminationReason.MAX_ITERATIONS)
                break
            if clock >= close_at:
                sm.send("finish", reason=TerminationReason.LIFTS_CLOSED)
                break

            sm.send("evaluate")
            candidate = self.best_candidate(graph=graph, timeline=timeline, ctx=ctx, open_at=open_at, close_at=close_at)
            if candidate is None:
                sm.send("finish", reason=TerminationReason.NO_CANDIDATE)
                break

            logger.debug(
                f"Iteration {ctx.iterations}: {candidate.run_id} score={candidate.score:.3f} "
                f"exposure={candidate.exposure:.2f} detour={candidate.detour_minutes:.1f}min "
                f"continues={candidate.has_continuation}"
            )
            sm.send("commit", legs=list(candidate.legs), run_id=candidate.run_id, end_node=candidate.run_edge.to_index)
            sm.send("advance")
            self._report(
                "planning",
                20 + 80 * len(ctx.covered_run_ids) / available,
                f"Covered {len(ctx.covered_run_ids)} of {available} runs",
                covered=len(ctx.covered_run_ids),
                available=available,
            )

        plan = RoutePlan(
            legs=tuple(ctx.legs),
            total_runs_available=available,
            start_time=open_at,
            end_time=ctx.legs[-1].end_time if ctx.legs else open_at,
            termination_reason=ctx.termination_reason or "",
        )
        logger.info(
            f"Planned {plan.total_runs_covered}/{available} runs in {request.ski_area_id} "
            f"({plan.coverage_percentage:.0f}%), sun score {plan.total_sun_score:.2f}, stopped: {plan.termination_reason}"
        )
        self._report("complete", 100, "Route complete", covered=plan.total_runs_covered, available=available)
        return plan

    # =========================================================================
    # Candidate Evaluation
    # =========================================================================

    def best_candidate(
        self,
        graph: RouteGraph,
        timeline: ExposureTimeline,
        ctx: PlanningContext,
        open_at: datetime,
        close_at: datetime,
    ) -> Optional[Candidate]:
        """Best uncovered run reachable from the current node, None if there is none.

        Runs after which another uncovered run can still be reached always
        rank ahead of runs that end the day.
        """
        clock, node = ctx.position()
        operating = [edge for edge in graph.lift_edges if edge.is_operating(clock.time())]
        paths = graph.shortest_lift_paths(source=node, lifts=operating)

        best: Optional[Candidate] = None
        best_key = None
        for run_edge in graph.run_edges:
            if run_edge.run.id in ctx.covered_run_ids:
                continue
            candidate = self._evaluate(
                graph=graph, timeline=timeline, paths=paths, run_edge=run_edge,
                clock=clock, open_at=open_at, close_at=close_at, covered_run_ids=ctx.covered_run_ids,
            )
            if candidate is None:
                continue
            key = self._rank_key(candidate)
            if best_key is None or key < best_key:
                best, best_key = candidate, key
        return best

    def _rank_key(self, candidate: Candidate) -> tuple[bool, float, float, float, str]:
        p = self.settings.score_precision
        return (
            not candidate.has_continuation,
            -round(candidate.score, p),
            -round(candidate.exposure, p),
            round(candidate.detour_minutes, p),
            candidate.run_id,
        )

    @staticmethod
    def has_continuation(
        graph: RouteGraph,
        run_edge: RunEdge,
        arrival: datetime,
        close_at: datetime,
        covered_run_ids: set[str],
    ) -> bool:
        """Whether another uncovered run can be finished after skiing run_edge.

        Lifts are taken as operating at the arrival time at the run's bottom.
        """
        operating = [edge for edge in graph.lift_edges if edge.is_operating(arrival.time())]
        paths = graph.shortest_lift_paths(source=run_edge.to_index, lifts=operating)
        for other in graph.run_edges:
            if other.run.id == run_edge.run.id or other.run.id in covered_run_ids:
                continue
            if not paths.is_reachable(other.from_index):
                continue
            travel = float(paths.minutes[other.from_index]) + other.duration_minutes
            if arrival + timedelta(minutes=travel) <= close_at:
                return True
        return False

    def _evaluate(
        self,
        graph: RouteGraph,
        timeline: ExposureTimeline,
        paths: LiftPaths,
        run_edge: RunEdge,
        clock: datetime,
        open_at: datetime,
        close_at: datetime,
        covered_run_ids: set[str],
    ) -> Optional[Candidate]:
        """Simulate reaching and skiing one run; None if it cannot be done in time."""
        lift_path = paths.path_to(run_edge.from_index)
        if lift_path is None:
            return None

        legs: list[RouteLeg] = []
        t = clock
        for edge in lift_path:
            if not self._can_ride(edge, t, open_at, close_at):
                return None
            ride = LiftRide(
                lift_id=edge.lift.id,
                name=edge.lift.display_name,
                from_node=graph.node_id(edge.from_index),
                to_node=graph.node_id(edge.to_index),
                start_time=t,
                duration_minutes=edge.duration_minutes,
                distance_m=edge.distance_m,
            )
            legs.append(ride)
            t = ride.end_time

        detour = (t - clock).total_seconds() / 60
        descent_end = t + timedelta(minutes=run_edge.duration_minutes)
        if descent_end > close_at:
            return None

        exposure = timeline.score_between(run_edge.run.id, t, descent_end)
        legs.append(
            RunDescent(
                run_id=run_edge.run.id,
                name=run_edge.run.display_name,
                difficulty=run_edge.run.difficulty,
                from_node=graph.node_id(run_edge.from_index),
                to_node=graph.node_id(run_edge.to_index),
                start_time=t,
                duration_minutes=run_edge.duration_minutes,
                distance_m=run_edge.distance_m,
                sun_score=exposure,
            )
        )

        s = self.settings
        score = s.coverage_bonus + s.sun_weight * exposure - s.detour_weight * detour
        if score < 0:
            return None
        return Candidate(
            run_edge=run_edge,
            legs=tuple(legs),
            exposure=exposure,
            detour_minutes=detour,
            score=score,
            has_continuation=self.has_continuation(graph, run_edge, descent_end, close_at, covered_run_ids),
        )

    @staticmethod
    def _can_ride(edge: LiftEdge, start: datetime, open_at: datetime, close_at: datetime) -> bool:
        """A ride must start inside the planning window and the lift's own hours."""
        if start < open_at or start > close_at:
            return False
        return edge.is_operating(start.time())
