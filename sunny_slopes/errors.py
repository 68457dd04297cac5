"""Sunny Slopes error types.

Only malformed input is an error. Situations that merely limit what can be
planned (home far from any lift, polar night, no reachable terrain) are
represented as legitimate empty or partial results instead.

Example:
    try:
        plan = plan_day(request=request, topology=topology)
    except InvalidInputError as e:
        print(f"Bad request field '{e.field}': {e}")
    except NoEligibleTerrainError:
        print("Nothing open matches the selected difficulties")
"""

from __future__ import annotations


class SunnySlopesError(Exception):
    """Base class for all Sunny Slopes errors."""

    pass


class InvalidInputError(SunnySlopesError, ValueError):
    """Raised when a request or computation input is malformed.

    Rejected synchronously before any computation starts.

    Attributes:
        message: Human-readable error description.
        field: Name of the offending input field (e.g., "difficulties", "latitude").
    """

    def __init__(self, message: str, field: str | None = None):
        self.field = field
        super().__init__(message)


class NoEligibleTerrainError(SunnySlopesError):
    """Raised at the request boundary when no open run matches the filters.

    The planner itself never raises this; an empty candidate set there simply
    yields an empty plan.

    Attributes:
        ski_area_id: Ski area that was queried.
        difficulties: Requested difficulty filter.
    """

    def __init__(self, ski_area_id: str, difficulties: frozenset[str]):
        self.ski_area_id = ski_area_id
        self.difficulties = difficulties
        super().__init__(
            f"No open runs in ski area '{ski_area_id}' match difficulties {sorted(difficulties)}"
        )
