"""State machine for one greedy planning run.

Uses python-statemachine for explicit planning phases:
- Clear state definitions
- Event-driven transitions
- before_* hooks that update the shared context

States:
    AT_NODE: Standing at a graph node at the current clock time
    PLANNING: Evaluating candidate runs from the current node
    COMMITTED: A candidate's lift rides and descent were appended
    TERMINAL: Planning finished (final)

Transitions:
    AT_NODE -> PLANNING: evaluate
    PLANNING -> COMMITTED: commit (legs, run id, end node)
    COMMITTED -> AT_NODE: advance (clock and position move to the descent's end)
    AT_NODE | PLANNING -> TERMINAL: finish (termination reason)

Every planning call gets a fresh machine and context; nothing is shared
between calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from statemachine import State, StateMachine
from statemachine.exceptions import TransitionNotAllowed

from sunny_slopes.model.plan import LiftRide, RouteLeg

logger = logging.getLogger(__name__)


class TerminationReason:
    """Why a planning run stopped."""

    NO_ELIGIBLE_RUNS = "no_eligible_runs"
    HOME_UNREACHABLE = "home_unreachable"
    LIFTS_CLOSED = "lifts_closed"
    NO_CANDIDATE = "no_candidate"
    MAX_ITERATIONS = "max_iterations"

    ALL = [NO_ELIGIBLE_RUNS, HOME_UNREACHABLE, LIFTS_CLOSED, NO_CANDIDATE, MAX_ITERATIONS]


@dataclass
class PlanningContext:
    """Shared context/model for the planning state machine.

    Note: The 'state' field is managed by python-statemachine when this
    object is passed as the model.
    """

    # State managed by python-statemachine (model pattern)
    state: str | None = None

    clock: Optional[datetime] = None
    current_node: Optional[int] = None
    pending_node: Optional[int] = None
    covered_run_ids: set[str] = field(default_factory=set)
    used_lift_ids: list[str] = field(default_factory=list)
    legs: list[RouteLeg] = field(default_factory=list)
    iterations: int = 0
    termination_reason: Optional[str] = None

    def position(self) -> tuple[datetime, int]:
        """Current clock and node, both set once the machine is created."""
        if self.clock is None or self.current_node is None:
            raise RuntimeError(f"Planning context has no position: {self!r}")
        return self.clock, self.current_node

    def __repr__(self) -> str:
        return (
            f"PlanningContext(state={self.state}, clock={self.clock.isoformat() if self.clock else None}, "
            f"node={self.current_node}, covered={len(self.covered_run_ids)}, iterations={self.iterations})"
        )


class PlanningLogListener:
    """Listener that logs every transition at debug level.

    Usage:
        sm = RoutePlanningMachine(context=context)
        sm.add_listener(PlanningLogListener())
    """

    def after_transition(self, event: str, source: State, target: State) -> None:
        logger.debug(f"[PLAN] {source.name} --({event})--> {target.name}")


class RoutePlanningMachine(StateMachine):
    """State machine for the greedy route planner.

    See module docstring for the transition table.
    """

    # ==========================================================================
    # State Definitions
    # ==========================================================================

    at_node = State("AtNode", initial=True)
    planning = State("Planning")
    committed = State("Committed")
    terminal = State("Terminal", final=True)

    # ==========================================================================
    # Transitions
    # ==========================================================================

    evaluate = at_node.to(planning)
    commit = planning.to(committed)
    advance = committed.to(at_node)
    finish = at_node.to(terminal) | planning.to(terminal)

    # ==========================================================================
    # State Check Properties
    # ==========================================================================

    @property
    def is_at_node(self) -> bool:
        return self.at_node.is_active

    @property
    def is_terminal(self) -> bool:
        return self.terminal.is_active

    # ==========================================================================
    # Transition Actions (before_* hooks)
    # ==========================================================================

    def before_evaluate(self) -> None:
        """Action before evaluating candidates: count the iteration."""
        self.context.iterations += 1

    def before_commit(self, legs: list[RouteLeg], run_id: str, end_node: int) -> None:
        """Action before committing a candidate: append its legs and mark the run covered."""
        self.context.legs.extend(legs)
        self.context.covered_run_ids.add(run_id)
        for leg in legs:
            if isinstance(leg, LiftRide) and leg.lift_id not in self.context.used_lift_ids:
                self.context.used_lift_ids.append(leg.lift_id)
        self.context.pending_node = end_node

    def before_advance(self) -> None:
        """Action before advancing: move clock and position to the end of the last leg."""
        self.context.clock = self.context.legs[-1].end_time
        self.context.current_node = self.context.pending_node
        self.context.pending_node = None

    def before_finish(self, reason: str) -> None:
        """Action before finishing: record why planning stopped."""
        self.context.termination_reason = reason
        logger.debug(f"Planning finished after {self.context.iterations} iterations: {reason}")

    # ==========================================================================
    # Initialization
    # ==========================================================================

    def __init__(self, context: PlanningContext | None = None, start_value: str | None = None) -> None:
        """Initialize state machine with model pattern.

        Args:
            context: Shared context/model (creates new if None)
            start_value: Optional initial state value (for restoring state)
        """
        model = context or PlanningContext()
        super().__init__(model=model, start_value=start_value)

    # ==========================================================================
    # Utility Methods
    # ==========================================================================

    @property
    def context(self) -> PlanningContext:
        """Alias for model."""
        return self.model

    def get_state_name(self) -> str:
        return self.current_state.name

    def try_transition(self, event: str, **kwargs: Any) -> bool:
        """Attempt a transition, returning success/failure."""
        try:
            self.send(event=event, **kwargs)
            return True
        except TransitionNotAllowed:
            logger.warning(f"Transition '{event}' not allowed from {self.get_state_name()}")
            return False

    def __repr__(self) -> str:
        return f"RoutePlanningMachine(state={self.get_state_name()}, model={self.context!r})"

    @staticmethod
    def create(clock: datetime, current_node: int, add_log_listener: bool = True) -> tuple["RoutePlanningMachine", PlanningContext]:
        """Factory method to create a machine positioned at a node and time.

        Returns:
            Tuple of (RoutePlanningMachine, PlanningContext)
        """
        context = PlanningContext(clock=clock, current_node=current_node)
        sm = RoutePlanningMachine(context=context)
        if add_log_listener:
            sm.add_listener(PlanningLogListener())
        return sm, context
