"""Exposure scorer - how much sun a run gets over a time window.

Each run is sampled at its start, midpoint and end. Every sample yields a
SlopeFacet whose aspect is estimated from the local direction of travel
(downhill assumed on the skier's right, so aspect = bearing + 90°). Shade is
then evaluated for every facet every SAMPLE_INTERVAL_MINUTES across the
window.

    sample lit fraction = share of facets in direct sun at that time
    run exposure        = mean lit fraction over all samples, in [0, 1]

The aspect estimate ignores real terrain; RunExposure.aspect_is_estimated
flags it so callers can present results as approximate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from math import atan, degrees
from typing import TYPE_CHECKING, Iterable, Iterator, Optional

import numpy as np

from sunny_slopes.constants import ExposureConfig
from sunny_slopes.core.geo_calculator import GeoCalculator
from sunny_slopes.core.shade_model import ShadeModel, ShadeResult, SlopeFacet
from sunny_slopes.errors import InvalidInputError

if TYPE_CHECKING:
    from sunny_slopes.model.run import RunDescriptor

logger = logging.getLogger(__name__)


def sun_level(fraction: float) -> str:
    """Classify a lit fraction as full / partial / low / none."""
    for threshold, label in ExposureConfig.SUN_LEVELS:
        if fraction >= threshold:
            return label
    return ExposureConfig.SUN_LEVEL_NONE


@dataclass(frozen=True)
class TimeWindow:
    """Closed interval of timezone-aware instants."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        for name, value in (("start", self.start), ("end", self.end)):
            if value.tzinfo is None or value.utcoffset() is None:
                raise InvalidInputError(f"Window {name} {value.isoformat()} has no timezone", field=name)
        if self.end < self.start:
            raise InvalidInputError(
                f"Window end {self.end.isoformat()} is before start {self.start.isoformat()}", field="end"
            )

    @property
    def duration_minutes(self) -> float:
        return (self.end - self.start).total_seconds() / 60

    def sample_times(self, interval_minutes: int) -> list[datetime]:
        """Instants from start to end (inclusive) spaced by interval_minutes."""
        step = timedelta(minutes=interval_minutes)
        times = []
        current = self.start
        while current <= self.end:
            times.append(current)
            current += step
        return times


@dataclass(frozen=True)
class ExposureSample:
    """Shade of every facet of a run at one instant."""

    time: datetime
    shades: tuple[ShadeResult, ...]

    @property
    def lit_fraction(self) -> float:
        """Share of facets in direct sun."""
        if not self.shades:
            return 0.0
        return sum(1 for s in self.shades if not s.is_shaded) / len(self.shades)


@dataclass(frozen=True)
class SunWindow:
    """The sunniest sub-interval of a scoring window."""

    start: datetime
    end: datetime
    sun_fraction: float


@dataclass(frozen=True)
class RunExposure:
    """Exposure of one run across a time window.

    Attributes:
        run_id: Run this exposure belongs to
        facets: Facets derived from the run geometry
        samples: Shade samples in chronological order
        sun_fraction: Mean lit fraction over all samples, [0, 1]
        best_window: Sunniest sub-interval, None when the run never sees sun
        aspect_is_estimated: Aspect derived from trail direction, not terrain
    """

    run_id: str
    facets: tuple[SlopeFacet, ...]
    samples: tuple[ExposureSample, ...]
    sun_fraction: float
    best_window: Optional[SunWindow] = None
    aspect_is_estimated: bool = True

    @property
    def sun_level(self) -> str:
        return sun_level(self.sun_fraction)

    def score_between(self, start: datetime, end: datetime) -> float:
        """Mean lit fraction of the samples inside [start, end].

        Falls back to the sample nearest the interval midpoint when no sample
        lies inside (short descents between two sample instants), and to 0.0
        when there are no samples at all.
        """
        if not self.samples:
            return 0.0
        inside = [s.lit_fraction for s in self.samples if start <= s.time <= end]
        if inside:
            return float(np.mean(inside))
        midpoint = start + (end - start) / 2
        nearest = min(self.samples, key=lambda s: abs((s.time - midpoint).total_seconds()))
        return nearest.lit_fraction


class ExposureTimeline:
    """Per-request map of run id to RunExposure.

    Built once per planning request and discarded afterwards.
    """

    def __init__(self, window: TimeWindow, exposures: Iterable[RunExposure] = ()):
        self.window = window
        self._exposures: dict[str, RunExposure] = {e.run_id: e for e in exposures}

    def __getitem__(self, run_id: str) -> RunExposure:
        return self._exposures[run_id]

    def __contains__(self, run_id: object) -> bool:
        return run_id in self._exposures

    def __iter__(self) -> Iterator[str]:
        return iter(self._exposures)

    def __len__(self) -> int:
        return len(self._exposures)

    def get(self, run_id: str) -> Optional[RunExposure]:
        return self._exposures.get(run_id)

    def score_between(self, run_id: str, start: datetime, end: datetime) -> float:
        """Exposure of a run while it is skied between start and end (0.0 for unknown runs)."""
        exposure = self._exposures.get(run_id)
        if exposure is None:
            return 0.0
        return exposure.score_between(start=start, end=end)

    def __repr__(self) -> str:
        return f"ExposureTimeline(runs={len(self)}, window={self.window.start.isoformat()}..{self.window.end.isoformat()})"


@dataclass
class ExposureScorer:
    """Scores sun exposure of runs over time windows.

    Attributes:
        sample_interval_minutes: Spacing of shade evaluations
        sample_fractions: Positions along each run where facets are derived
    """

    sample_interval_minutes: int = ExposureConfig.SAMPLE_INTERVAL_MINUTES
    sample_fractions: tuple[float, ...] = field(default=ExposureConfig.SAMPLE_FRACTIONS)

    def __post_init__(self) -> None:
        if self.sample_interval_minutes <= 0:
            raise InvalidInputError(
                f"Sample interval must be positive, got {self.sample_interval_minutes}",
                field="sample_interval_minutes",
            )

    @staticmethod
    def estimate_slope_aspect(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
        """Approximate slope aspect from a direction of travel.

        Assumes the fall line runs to the skier's right, i.e. the slope faces
        90° clockwise of the forward bearing.

        Returns:
            Aspect in degrees, [0, 360).
        """
        bearing = GeoCalculator.initial_bearing_deg(lat1=lat1, lng1=lng1, lat2=lat2, lng2=lng2)
        return GeoCalculator.normalize_bearing(bearing + 90.0)

    def run_facets(self, run: RunDescriptor) -> tuple[SlopeFacet, ...]:
        """Derive one facet per sample fraction along the run.

        The local direction at a sample is taken between two points
        TANGENT_HALF_WIDTH of the run length before and after it. Slope
        angle comes from elevations when the geometry has them, otherwise
        from a per-difficulty estimate.
        """
        if not run.is_routable:
            return ()

        half = ExposureConfig.TANGENT_HALF_WIDTH
        fractions: list[float] = []
        for f in self.sample_fractions:
            fractions.extend([f, max(0.0, f - half), min(1.0, f + half)])
        points = run.sample_points(fractions)

        start, end = run.endpoints
        fallback_aspect = ExposureScorer.estimate_slope_aspect(lat1=start.lat, lng1=start.lng, lat2=end.lat, lng2=end.lng)
        fallback_angle = run.avg_slope_angle_deg
        if fallback_angle is None:
            fallback_angle = ExposureConfig.SLOPE_ANGLE_BY_DIFFICULTY_DEG[run.difficulty]

        facets = []
        for i in range(0, len(points), 3):
            center, before, after = points[i : i + 3]
            span_m = before.distance_to(after)
            if span_m > 0:
                aspect = ExposureScorer.estimate_slope_aspect(
                    lat1=before.lat, lng1=before.lng, lat2=after.lat, lng2=after.lng
                )
            else:
                aspect = fallback_aspect

            angle = fallback_angle
            if span_m > 0 and before.elevation is not None and after.elevation is not None:
                angle = degrees(atan(abs(before.elevation - after.elevation) / span_m))

            facets.append(SlopeFacet(aspect_deg=aspect, slope_angle_deg=angle, location=center))
        return tuple(facets)

    def _best_window(self, samples: list[ExposureSample], window: TimeWindow) -> Optional[SunWindow]:
        """Sunniest BEST_WINDOW_MINUTES stretch, earliest on ties."""
        if not samples:
            return None
        k = max(1, min(len(samples), ExposureConfig.BEST_WINDOW_MINUTES // self.sample_interval_minutes))
        fractions = np.array([s.lit_fraction for s in samples], dtype=float)
        means = np.convolve(fractions, np.ones(k) / k, mode="valid")
        best = int(np.argmax(means))  # argmax returns the first maximum
        if means[best] <= 0:
            return None
        end = min(window.end, samples[best + k - 1].time + timedelta(minutes=self.sample_interval_minutes))
        return SunWindow(start=samples[best].time, end=end, sun_fraction=float(means[best]))

    def score_run_exposure(self, run: RunDescriptor, window: TimeWindow) -> RunExposure:
        """Evaluate shade on a run across a window.

        Args:
            run: Run to score (needs at least two geometry points to be lit)
            window: Closed, timezone-aware interval

        Returns:
            RunExposure with one sample per SAMPLE_INTERVAL_MINUTES.
        """
        facets = self.run_facets(run)
        samples = []
        for t in window.sample_times(self.sample_interval_minutes):
            shades = tuple(ShadeModel.calculate_facet_shade(instant=t, facet=facet) for facet in facets)
            samples.append(ExposureSample(time=t, shades=shades))

        sun_fraction = float(np.mean([s.lit_fraction for s in samples])) if samples else 0.0
        exposure = RunExposure(
            run_id=run.id,
            facets=facets,
            samples=tuple(samples),
            sun_fraction=sun_fraction,
            best_window=self._best_window(samples, window),
        )
        logger.debug(f"Run {run.id}: sun_fraction={sun_fraction:.2f} ({exposure.sun_level}) over {len(samples)} samples")
        return exposure

    def build_timeline(self, runs: Iterable[RunDescriptor], window: TimeWindow) -> ExposureTimeline:
        """Score every run over the same window."""
        timeline = ExposureTimeline(window=window, exposures=(self.score_run_exposure(run, window) for run in runs))
        logger.info(f"Built exposure timeline for {len(timeline)} runs")
        return timeline
