"""RouteGraph - Index-addressed graph of run and lift endpoints.

Run and lift endpoints closer than NODE_CLUSTER_DISTANCE_M share a node.
Runs become downhill edges (top -> bottom), lifts uphill edges (bottom ->
top). Node k has id "N{k+1}" and row/column k in the sparse matrix used for
shortest lift paths.
"""

import logging
from dataclasses import dataclass
from datetime import time
from typing import Iterable, Optional, Sequence

import numpy as np
from scipy.sparse import csr_matrix
from scipy.sparse.csgraph import dijkstra

from sunny_slopes.constants import PlannerConfig
from sunny_slopes.model.geo_point import GeoPoint
from sunny_slopes.model.lift import LiftDescriptor
from sunny_slopes.model.run import RunDescriptor

logger = logging.getLogger(__name__)

NODE_PREFIX = "N"


@dataclass(frozen=True)
class GraphNode:
    """Junction shared by one or more run/lift endpoints."""

    index: int
    id: str
    location: GeoPoint


@dataclass(frozen=True)
class RunEdge:
    """Downhill edge: skiing a run from its top to its bottom node."""

    run: RunDescriptor
    from_index: int
    to_index: int
    duration_minutes: float
    distance_m: float


@dataclass(frozen=True)
class LiftEdge:
    """Uphill edge: riding a lift from its bottom to its top node."""

    lift: LiftDescriptor
    from_index: int
    to_index: int
    duration_minutes: float
    distance_m: float

    def is_operating(self, clock: time) -> bool:
        """Whether a ride may start at a local clock time.

        Lifts without reported hours run whenever they are open.
        """
        if not self.lift.is_open:
            return False
        hours = self.lift.operating_hours
        return hours is None or hours.contains(clock)


@dataclass(frozen=True)
class LiftPaths:
    """Shortest lift-only travel from one source node to every node.

    Attributes:
        source: Source node index
        minutes: Travel minutes per node index (inf when unreachable)
        predecessors: Predecessor node per index (-9999 for none)
        edges: Fastest lift edge per (from, to) node pair
    """

    source: int
    minutes: np.ndarray
    predecessors: np.ndarray
    edges: dict[tuple[int, int], LiftEdge]

    def is_reachable(self, target: int) -> bool:
        return bool(np.isfinite(self.minutes[target]))

    def path_to(self, target: int) -> Optional[list[LiftEdge]]:
        """Lift edges from source to target, [] when target is the source."""
        if not self.is_reachable(target):
            return None
        path: list[LiftEdge] = []
        current = target
        while current != self.source:
            previous = int(self.predecessors[current])
            if previous < 0:
                return None
            path.append(self.edges[(previous, current)])
            current = previous
        path.reverse()
        return path


class RouteGraph:
    """Graph of shared endpoints with run and lift edges.

    Example:
        graph = RouteGraph.build(runs=runs, lifts=lifts)
        home = graph.nearest_node(point=home_location, max_distance_m=300)
        paths = graph.shortest_lift_paths(source=home.index, lifts=graph.lift_edges)
    """

    def __init__(self, cluster_distance_m: float = PlannerConfig.NODE_CLUSTER_DISTANCE_M) -> None:
        self.cluster_distance_m = cluster_distance_m
        self.nodes: list[GraphNode] = []
        self.run_edges: list[RunEdge] = []
        self.lift_edges: list[LiftEdge] = []

    # =========================================================================
    # Node Operations
    # =========================================================================

    def find_nearest_node(self, point: GeoPoint, threshold_m: float) -> Optional[GraphNode]:
        """Nearest node strictly closer than threshold_m (lowest index on ties)."""
        best_dist = threshold_m
        best_node = None
        for node in self.nodes:
            dist = node.location.distance_to(point)
            if dist < best_dist:
                best_dist = dist
                best_node = node
        return best_node

    def get_or_create_node(self, point: GeoPoint) -> tuple[GraphNode, bool]:
        """Get existing node within the cluster distance or create a new one.

        Returns:
            Tuple of (node, was_created)
        """
        existing = self.find_nearest_node(point=point, threshold_m=self.cluster_distance_m)
        if existing:
            return existing, False
        index = len(self.nodes)
        node = GraphNode(index=index, id=f"{NODE_PREFIX}{index + 1}", location=point)
        self.nodes.append(node)
        return node, True

    def nearest_node(self, point: GeoPoint, max_distance_m: float) -> Optional[GraphNode]:
        """Nearest node within max_distance_m (inclusive), None if there is none."""
        best = None
        best_dist = float("inf")
        for node in self.nodes:
            dist = node.location.distance_to(point)
            if dist <= max_distance_m and dist < best_dist:
                best_dist = dist
                best = node
        return best

    def node_id(self, index: int) -> str:
        return self.nodes[index].id

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def build(
        cls,
        runs: Iterable[RunDescriptor],
        lifts: Iterable[LiftDescriptor],
        cluster_distance_m: float = PlannerConfig.NODE_CLUSTER_DISTANCE_M,
    ) -> "RouteGraph":
        """Build the graph from runs and lifts.

        Items are processed in id order so node numbering does not depend on
        input order. Runs or lifts with fewer than two points are skipped.
        Closed lifts are kept as edges; LiftEdge.is_operating excludes them.
        """
        graph = cls(cluster_distance_m=cluster_distance_m)

        for run in sorted(runs, key=lambda r: r.id):
            if not run.is_routable:
                logger.warning(f"Skipping run {run.id}: needs at least 2 geometry points, has {len(run.geometry)}")
                continue
            run_start, run_end = run.endpoints
            top, _ = graph.get_or_create_node(run_start)
            bottom, _ = graph.get_or_create_node(run_end)
            graph.run_edges.append(
                RunEdge(
                    run=run,
                    from_index=top.index,
                    to_index=bottom.index,
                    duration_minutes=run.descent_minutes,
                    distance_m=run.length_m,
                )
            )

        for lift in sorted(lifts, key=lambda lf: lf.id):
            if not lift.is_routable:
                logger.warning(f"Skipping lift {lift.id}: needs at least 2 geometry points, has {len(lift.geometry)}")
                continue
            lift_bottom, lift_top = lift.endpoints
            bottom, _ = graph.get_or_create_node(lift_bottom)
            top, _ = graph.get_or_create_node(lift_top)
            if bottom.index == top.index:
                logger.warning(f"Skipping lift {lift.id}: both stations collapse onto node {bottom.id}")
                continue
            graph.lift_edges.append(
                LiftEdge(
                    lift=lift,
                    from_index=bottom.index,
                    to_index=top.index,
                    duration_minutes=lift.ride_minutes,
                    distance_m=lift.length_m,
                )
            )

        logger.info(
            f"Built route graph: {len(graph.nodes)} nodes, {len(graph.run_edges)} runs, {len(graph.lift_edges)} lifts"
        )
        return graph

    # =========================================================================
    # Shortest Paths
    # =========================================================================

    def shortest_lift_paths(self, source: int, lifts: Sequence[LiftEdge]) -> LiftPaths:
        """Fastest lift-only travel from source to every node.

        Parallel lifts between the same pair of nodes collapse to the
        fastest one (smallest lift id on equal duration).

        Args:
            source: Source node index
            lifts: Lift edges allowed for travel

        Returns:
            LiftPaths with per-node minutes and predecessors.
        """
        n = len(self.nodes)
        best: dict[tuple[int, int], LiftEdge] = {}
        for edge in lifts:
            key = (edge.from_index, edge.to_index)
            current = best.get(key)
            if current is None or (edge.duration_minutes, edge.lift.id) < (current.duration_minutes, current.lift.id):
                best[key] = edge

        if not best:
            minutes = np.full(n, np.inf)
            minutes[source] = 0.0
            return LiftPaths(source=source, minutes=minutes, predecessors=np.full(n, -9999), edges={})

        keys = sorted(best)
        csgraph = csr_matrix(
            ([best[k].duration_minutes for k in keys], ([k[0] for k in keys], [k[1] for k in keys])),
            shape=(n, n),
            dtype=np.float64,
        )
        minutes, predecessors = dijkstra(
            csgraph=csgraph,
            directed=True,
            indices=source,
            return_predecessors=True,
        )
        return LiftPaths(source=source, minutes=minutes, predecessors=predecessors, edges=best)

    def __repr__(self) -> str:
        return f"RouteGraph(nodes={len(self.nodes)}, runs={len(self.run_edges)}, lifts={len(self.lift_edges)})"
