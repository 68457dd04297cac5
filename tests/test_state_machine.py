"""Tests for the planning state machine.

Tests: RoutePlanningMachine transitions, before_* hooks, PlanningContext updates
Uses a parameterized truth table like a transition matrix.
"""

from datetime import datetime, timedelta, timezone

import pytest
from statemachine.exceptions import TransitionNotAllowed

from sunny_slopes.model.plan import LiftRide, RunDescent
from sunny_slopes.planner.state_machine import (
    PlanningContext,
    RoutePlanningMachine,
    TerminationReason,
)

CET = timezone(timedelta(hours=1))
START = datetime(2024, 12, 21, 9, 0, tzinfo=CET)

# Minimal keyword arguments per event so hooks never see missing parameters
EVENT_KWARGS: dict[str, dict] = {
    "evaluate": {},
    "commit": {"legs": [], "run_id": "r", "end_node": 1},
    "advance": {},
    "finish": {"reason": TerminationReason.NO_CANDIDATE},
}

# (event, source states it is valid from)
VALID_TRANSITIONS: list[tuple[str, list[str]]] = [
    ("evaluate", ["at_node"]),
    ("commit", ["planning"]),
    ("advance", ["committed"]),
    ("finish", ["at_node", "planning"]),
]

ALL_STATES = ["at_node", "planning", "committed", "terminal"]


def _force_state(sm: RoutePlanningMachine, state_name: str) -> None:
    """Force the machine into a state, bypassing transitions (test only)."""
    sm.current_state = getattr(sm, state_name)


def _legs() -> list:
    ride = LiftRide(
        lift_id="L1", name="Gondola", from_node="N4", to_node="N1", start_time=START, duration_minutes=4.0, distance_m=1200.0
    )
    descent = RunDescent(
        run_id="r-sun",
        name="Sunny",
        difficulty="easy",
        from_node="N1",
        to_node="N3",
        start_time=ride.end_time,
        duration_minutes=3.0,
        distance_m=1000.0,
        sun_score=1.0,
    )
    return [ride, descent]


@pytest.fixture
def sm_and_ctx() -> tuple[RoutePlanningMachine, PlanningContext]:
    return RoutePlanningMachine.create(clock=START, current_node=3, add_log_listener=False)


class TestTransitionMatrix:
    """Every event from every state: allowed exactly where the table says."""

    @pytest.mark.parametrize("event,valid_states", VALID_TRANSITIONS)
    def test_invalid_sources_raise(self, sm_and_ctx: tuple, event: str, valid_states: list[str]) -> None:
        sm, _ = sm_and_ctx
        for state_name in ALL_STATES:
            if state_name in valid_states:
                continue
            _force_state(sm=sm, state_name=state_name)
            with pytest.raises(TransitionNotAllowed):
                sm.send(event, **EVENT_KWARGS[event])

    def test_try_transition_reports_failure(self, sm_and_ctx: tuple) -> None:
        sm, _ = sm_and_ctx
        assert not sm.try_transition("advance")
        assert sm.is_at_node
        assert sm.try_transition("evaluate")
        assert sm.current_state == sm.planning


class TestPlanningCycle:
    """evaluate -> commit -> advance moves the skier along."""

    def test_initial_state(self, sm_and_ctx: tuple) -> None:
        sm, ctx = sm_and_ctx
        assert sm.is_at_node and not sm.is_terminal
        assert ctx.clock == START and ctx.current_node == 3
        assert ctx.iterations == 0
        assert sm.context is ctx

    def test_position_needs_clock_and_node(self, sm_and_ctx: tuple) -> None:
        _, ctx = sm_and_ctx
        assert ctx.position() == (START, 3)
        with pytest.raises(RuntimeError):
            PlanningContext().position()

    def test_full_cycle(self, sm_and_ctx: tuple) -> None:
        sm, ctx = sm_and_ctx
        legs = _legs()

        sm.send("evaluate")
        assert ctx.iterations == 1
        assert sm.current_state == sm.planning

        sm.send("commit", legs=legs, run_id="r-sun", end_node=2)
        assert ctx.legs == legs
        assert ctx.covered_run_ids == {"r-sun"}
        assert ctx.used_lift_ids == ["L1"]
        assert ctx.pending_node == 2
        assert ctx.current_node == 3, "position only moves on advance"

        sm.send("advance")
        assert sm.is_at_node
        assert ctx.current_node == 2
        assert ctx.pending_node is None
        assert ctx.clock == START + timedelta(minutes=7)

    def test_used_lifts_are_distinct(self, sm_and_ctx: tuple) -> None:
        sm, ctx = sm_and_ctx
        for run_id in ("a", "b"):
            sm.send("evaluate")
            sm.send("commit", legs=_legs(), run_id=run_id, end_node=3)
            sm.send("advance")
        assert ctx.used_lift_ids == ["L1"]
        assert ctx.iterations == 2
        assert len(ctx.legs) == 4

    @pytest.mark.parametrize("from_state", ["at_node", "planning"])
    def test_finish_records_reason(self, sm_and_ctx: tuple, from_state: str) -> None:
        sm, ctx = sm_and_ctx
        if from_state == "planning":
            sm.send("evaluate")
        sm.send("finish", reason=TerminationReason.LIFTS_CLOSED)
        assert sm.is_terminal
        assert ctx.termination_reason == "lifts_closed"

    def test_terminal_is_final(self, sm_and_ctx: tuple) -> None:
        sm, _ = sm_and_ctx
        sm.send("finish", reason=TerminationReason.MAX_ITERATIONS)
        for event, kwargs in EVENT_KWARGS.items():
            with pytest.raises(TransitionNotAllowed):
                sm.send(event, **kwargs)


def test_log_listener_attached_by_default(caplog: pytest.LogCaptureFixture) -> None:
    sm, _ = RoutePlanningMachine.create(clock=START, current_node=0)
    with caplog.at_level("DEBUG", logger="sunny_slopes.planner.state_machine"):
        sm.send("evaluate")
    assert "AtNode --(evaluate)--> Planning" in caplog.text
