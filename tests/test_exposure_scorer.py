"""Tests for the exposure scorer.

Tests: ExposureScorer, RunExposure, ExposureTimeline, TimeWindow, sun_level
Uses the synthetic Chamonix resort from conftest.py on the winter solstice.
"""

from datetime import datetime, timedelta, timezone

import pytest

from sunny_slopes.core.exposure_scorer import (
    ExposureSample,
    ExposureScorer,
    ExposureTimeline,
    RunExposure,
    TimeWindow,
    sun_level,
)
from sunny_slopes.errors import InvalidInputError
from sunny_slopes.model import GeoPoint, RunDescriptor, SkiAreaTopology

CET = timezone(timedelta(hours=1))


@pytest.fixture
def morning_window() -> TimeWindow:
    """09:00-10:00 CET on the solstice: 5 samples at 15 minute spacing."""
    return TimeWindow(
        start=datetime(2024, 12, 21, 9, 0, tzinfo=CET),
        end=datetime(2024, 12, 21, 10, 0, tzinfo=CET),
    )


class TestEstimateSlopeAspect:
    """Aspect = forward bearing + 90° (fall line on the skier's right)."""

    def test_travelling_east_faces_south(self) -> None:
        aspect = ExposureScorer.estimate_slope_aspect(46.0, 7.0, 46.0, 7.01)
        assert aspect == pytest.approx(180.0, abs=0.5)

    def test_travelling_north_faces_east(self) -> None:
        aspect = ExposureScorer.estimate_slope_aspect(46.0, 7.0, 46.01, 7.0)
        assert aspect == pytest.approx(90.0, abs=0.5)

    def test_travelling_west_faces_north(self) -> None:
        aspect = ExposureScorer.estimate_slope_aspect(46.0, 7.0, 46.0, 6.99)
        assert aspect < 0.5 or aspect > 359.5


class TestRunFacets:
    """run_facets - one facet per sample fraction."""

    def test_facets_from_elevation(self, resort: SkiAreaTopology) -> None:
        facets = ExposureScorer().run_facets(resort.get_run("r-sun"))
        assert len(facets) == 3
        for facet in facets:
            assert facet.aspect_deg == pytest.approx(180.0, abs=1.0)
            assert facet.slope_angle_deg == pytest.approx(30.0, abs=0.5)
            assert facet.location is not None

    def test_facet_locations_at_start_middle_end(self, resort: SkiAreaTopology) -> None:
        run = resort.get_run("r-sun")
        start, middle, end = (f.location for f in ExposureScorer().run_facets(run))
        assert start.distance_to(run.start) < 1.0
        assert end.distance_to(run.end) < 1.0
        assert abs(start.distance_to(middle) - run.length_m / 2) < 5.0

    def test_slope_angle_by_difficulty_without_elevation(self) -> None:
        run = RunDescriptor(
            id="flat",
            difficulty="intermediate",
            geometry=(GeoPoint(lat=46.0, lng=7.0), GeoPoint(lat=46.0, lng=7.01)),
        )
        facets = ExposureScorer().run_facets(run)
        assert all(f.slope_angle_deg == 18.0 for f in facets)

    def test_single_point_run_has_no_facets(self) -> None:
        run = RunDescriptor(id="dot", difficulty="easy", geometry=(GeoPoint(lat=46.0, lng=7.0),))
        assert ExposureScorer().run_facets(run) == ()


class TestScoreRunExposure:
    """score_run_exposure - sampling and aggregation."""

    def test_south_facing_run_fully_sunny(self, resort: SkiAreaTopology, morning_window: TimeWindow) -> None:
        exposure = ExposureScorer().score_run_exposure(resort.get_run("r-sun"), morning_window)
        assert len(exposure.samples) == 5
        assert exposure.sun_fraction == pytest.approx(1.0)
        assert exposure.sun_level == "full"
        assert exposure.aspect_is_estimated
        assert exposure.best_window is not None
        assert exposure.best_window.start == morning_window.start
        assert exposure.best_window.end == morning_window.start + timedelta(minutes=60)

    def test_north_facing_run_never_sunny(self, resort: SkiAreaTopology, morning_window: TimeWindow) -> None:
        exposure = ExposureScorer().score_run_exposure(resort.get_run("r-shade"), morning_window)
        assert exposure.sun_fraction == 0.0
        assert exposure.sun_level == "none"
        assert exposure.best_window is None

    def test_night_window_has_no_sun(self, resort: SkiAreaTopology) -> None:
        night = TimeWindow(
            start=datetime(2024, 12, 21, 20, 0, tzinfo=CET),
            end=datetime(2024, 12, 21, 22, 0, tzinfo=CET),
        )
        exposure = ExposureScorer().score_run_exposure(resort.get_run("r-sun"), night)
        assert exposure.sun_fraction == 0.0
        assert all(s.is_shaded and s.confidence == 1.0 for sample in exposure.samples for s in sample.shades)

    def test_custom_sample_interval(self, resort: SkiAreaTopology, morning_window: TimeWindow) -> None:
        exposure = ExposureScorer(sample_interval_minutes=30).score_run_exposure(resort.get_run("r-sun"), morning_window)
        assert [s.time.minute for s in exposure.samples] == [0, 30, 0]

    def test_non_positive_interval_rejected(self) -> None:
        with pytest.raises(InvalidInputError):
            ExposureScorer(sample_interval_minutes=0)


class TestScoreBetween:
    """RunExposure.score_between / ExposureTimeline.score_between."""

    def _exposure(self, fractions: list[float]) -> RunExposure:
        from sunny_slopes.core.shade_model import ShadeResult
        from sunny_slopes.core.solar_ephemeris import SunPosition

        sun = SunPosition(azimuth_deg=180.0, altitude_deg=20.0)
        lit = ShadeResult(is_shaded=False, confidence=0.5, sun_position=sun, illumination=0.5)
        dark = ShadeResult(is_shaded=True, confidence=0.5, sun_position=sun, illumination=-0.5)
        start = datetime(2024, 12, 21, 9, 0, tzinfo=CET)
        samples = tuple(
            ExposureSample(time=start + timedelta(minutes=15 * i), shades=(lit,) if f else (dark,))
            for i, f in enumerate(fractions)
        )
        return RunExposure(run_id="r", facets=(), samples=samples, sun_fraction=sum(fractions) / len(fractions))

    def test_mean_of_samples_inside(self) -> None:
        exposure = self._exposure([1, 0, 1, 1])
        start = datetime(2024, 12, 21, 9, 0, tzinfo=CET)
        assert exposure.score_between(start, start + timedelta(minutes=30)) == pytest.approx(2 / 3)

    def test_nearest_sample_when_none_inside(self) -> None:
        exposure = self._exposure([1, 0])
        start = datetime(2024, 12, 21, 9, 10, tzinfo=CET)
        # Midpoint 09:12 is closest to the 09:15 sample
        assert exposure.score_between(start, start + timedelta(minutes=4)) == 0.0

    def test_no_samples_scores_zero(self) -> None:
        exposure = RunExposure(run_id="r", facets=(), samples=(), sun_fraction=0.0)
        now = datetime(2024, 12, 21, 9, 0, tzinfo=CET)
        assert exposure.score_between(now, now) == 0.0

    def test_timeline_unknown_run_scores_zero(self, morning_window: TimeWindow) -> None:
        timeline = ExposureTimeline(window=morning_window, exposures=[self._exposure([1])])
        assert "r" in timeline and len(timeline) == 1
        assert timeline.score_between("missing", morning_window.start, morning_window.end) == 0.0
        assert timeline.score_between("r", morning_window.start, morning_window.end) == 1.0

    def test_build_timeline(self, resort: SkiAreaTopology, morning_window: TimeWindow) -> None:
        runs = [resort.get_run("r-sun"), resort.get_run("r-shade")]
        timeline = ExposureScorer().build_timeline(runs, morning_window)
        assert list(timeline) == ["r-sun", "r-shade"]
        assert timeline["r-sun"].sun_fraction > timeline["r-shade"].sun_fraction


class TestTimeWindow:
    def test_sample_times_inclusive(self, morning_window: TimeWindow) -> None:
        times = morning_window.sample_times(15)
        assert times[0] == morning_window.start
        assert times[-1] == morning_window.end
        assert len(times) == 5

    def test_naive_bounds_rejected(self) -> None:
        with pytest.raises(InvalidInputError):
            TimeWindow(start=datetime(2024, 12, 21, 9, 0), end=datetime(2024, 12, 21, 10, 0))

    def test_end_before_start_rejected(self) -> None:
        with pytest.raises(InvalidInputError):
            TimeWindow(
                start=datetime(2024, 12, 21, 10, 0, tzinfo=CET),
                end=datetime(2024, 12, 21, 9, 0, tzinfo=CET),
            )


@pytest.mark.parametrize(
    "fraction,level",
    [(1.0, "full"), (0.75, "full"), (0.74, "partial"), (0.5, "partial"), (0.25, "low"), (0.1, "none"), (0.0, "none")],
)
def test_sun_level_thresholds(fraction: float, level: str) -> None:
    assert sun_level(fraction) == level
