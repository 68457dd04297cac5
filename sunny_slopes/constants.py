"""Configuration constants for Sunny Slopes.

All configurable parameters are centralized here for easy tuning.

Classes:
    DifficultyConfig: Run difficulty vocabulary
    SolarConfig: Ephemeris approximation constants
    ShadeConfig: Shade model defaults
    ExposureConfig: Exposure sampling and sun level thresholds
    SpeedConfig: Descent and lift speeds used for leg durations
    PlannerConfig: Route planner graph, scoring and termination parameters
    StyleConfig: Difficulty and shade colors
"""

from datetime import time


class DifficultyConfig:
    """Run difficulty vocabulary.

    Difficulties follow the OpenSkiMap piste:difficulty scale.
    "unknown" is accepted on input but never eligible for planning
    unless explicitly requested.
    """

    NOVICE = "novice"
    EASY = "easy"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"
    EXPERT = "expert"
    UNKNOWN = "unknown"

    DIFFICULTIES = [NOVICE, EASY, INTERMEDIATE, ADVANCED, EXPERT, UNKNOWN]

    # Common trail-map color names mapped onto the difficulty scale
    ALIASES = {
        "green": NOVICE,
        "blue": EASY,
        "red": INTERMEDIATE,
        "black": ADVANCED,
        "double black": EXPERT,
        "freeride": EXPERT,
    }

    @staticmethod
    def normalize(difficulty: str | None) -> str:
        """Map a raw difficulty label onto the known vocabulary.

        Args:
            difficulty: Raw label (case-insensitive), may be None

        Returns:
            One of DIFFICULTIES, "unknown" for None or unrecognized labels.
        """
        if difficulty is None:
            return DifficultyConfig.UNKNOWN
        label = difficulty.strip().lower()
        if label in DifficultyConfig.DIFFICULTIES:
            return label
        return DifficultyConfig.ALIASES.get(label, DifficultyConfig.UNKNOWN)


class SolarConfig:
    """Ephemeris approximation constants."""

    # Declination: δ = -AXIAL_TILT * cos(360/365 * (day_of_year + DECLINATION_DAY_OFFSET))
    AXIAL_TILT_DEG = 23.45
    DECLINATION_DAY_OFFSET = 10
    DAYS_PER_YEAR = 365

    # Earth turns 15° per hour
    DEGREES_PER_HOUR = 15.0

    # Civil twilight: sun 6° below the horizon
    CIVIL_TWILIGHT_ALTITUDE_DEG = -6.0

    # Daylight description buckets (minimum hours, label), checked top-down
    DAYLIGHT_DESCRIPTIONS = [
        (16.0, "Very long days"),
        (12.0, "Long days"),
        (10.0, "Moderate daylight"),
        (8.0, "Short days"),
        (6.0, "Very short days"),
    ]


class ShadeConfig:
    """Shade model defaults."""

    # Typical groomed piste inclination when nothing better is known (degrees)
    DEFAULT_SLOPE_ANGLE_DEG = 30.0


class ExposureConfig:
    """Exposure sampling and classification parameters."""

    # Shade is evaluated every SAMPLE_INTERVAL_MINUTES across a time window
    SAMPLE_INTERVAL_MINUTES = 15

    # Run geometry sampled at start, midpoint and end
    SAMPLE_FRACTIONS = (0.0, 0.5, 1.0)

    # Half-width (as fraction of run length) used to estimate the local direction at a sample
    TANGENT_HALF_WIDTH = 0.05

    # Length of the best (least-shaded) sub-interval reported per run
    BEST_WINDOW_MINUTES = 60

    # Slope angle estimates by difficulty when geometry has no elevations (degrees)
    SLOPE_ANGLE_BY_DIFFICULTY_DEG = {
        DifficultyConfig.NOVICE: 8.0,
        DifficultyConfig.EASY: 12.0,
        DifficultyConfig.INTERMEDIATE: 18.0,
        DifficultyConfig.ADVANCED: 24.0,
        DifficultyConfig.EXPERT: 30.0,
        DifficultyConfig.UNKNOWN: 15.0,
    }
    assert set(SLOPE_ANGLE_BY_DIFFICULTY_DEG.keys()) == set(DifficultyConfig.DIFFICULTIES)

    # Sun level thresholds on mean illumination fraction (checked top-down)
    SUN_LEVELS = [
        (0.75, "full"),
        (0.50, "partial"),
        (0.25, "low"),
    ]
    SUN_LEVEL_NONE = "none"


class SpeedConfig:
    """Average speeds used to turn geometry length into leg durations (m/s)."""

    # Recreational skier descent speed by difficulty
    DESCENT_SPEEDS_MPS = {
        DifficultyConfig.NOVICE: 4.0,  # ~14 km/h
        DifficultyConfig.EASY: 6.0,  # ~22 km/h
        DifficultyConfig.INTERMEDIATE: 8.0,  # ~29 km/h
        DifficultyConfig.ADVANCED: 10.0,  # ~36 km/h
        DifficultyConfig.EXPERT: 12.0,  # ~43 km/h
        DifficultyConfig.UNKNOWN: 6.0,  # Assume easy pace
    }
    assert set(DESCENT_SPEEDS_MPS.keys()) == set(DifficultyConfig.DIFFICULTIES)

    # Line speed by lift type (OpenStreetMap aerialway values)
    LIFT_SPEEDS_MPS = {
        "gondola": 6.0,
        "cable_car": 10.0,
        "chair_lift": 3.0,
        "chairlift": 3.0,
        "mixed_lift": 5.0,
        "funicular": 5.0,
        "t-bar": 3.0,
        "j-bar": 3.0,
        "platter": 2.5,
        "drag_lift": 2.5,
        "rope_tow": 2.0,
        "magic_carpet": 0.8,
    }
    DEFAULT_LIFT_SPEED_MPS = 3.0

    # Lower bound so zero-length geometry still yields a positive leg duration
    MIN_LEG_MINUTES = 0.5


class PlannerConfig:
    """Route planner configuration parameters.

    Scoring of a candidate run:
        score = COVERAGE_BONUS + SUN_WEIGHT * exposure - DETOUR_WEIGHT * extra_travel_minutes

    With COVERAGE_BONUS = 0 this is the plain sun-versus-detour trade-off.
    The default bonus keeps shaded runs worth skiing once the lift
    ride to them is short.
    """

    # Endpoints closer than this share a graph node (meters)
    NODE_CLUSTER_DISTANCE_M = 30.0

    # Maximum distance from the home location to the starting node (meters)
    HOME_SNAP_DISTANCE_M = 300.0

    # Scoring weights
    SUN_WEIGHT = 1.0
    DETOUR_WEIGHT = 0.05  # per minute of lift travel
    COVERAGE_BONUS = 0.5

    # Guard against degenerate graphs
    MAX_ITERATIONS = 1000

    # Default lift operating window when no lift reports opening times
    DEFAULT_LIFT_OPEN_TIME = time(9, 0)
    DEFAULT_LIFT_CLOSE_TIME = time(16, 30)

    # Decimal places used when comparing scores for tie-breaking
    SCORE_PRECISION = 9


class StyleConfig:
    """Difficulty and shade colors (Material palette)."""

    DIFFICULTY_COLORS = {
        DifficultyConfig.NOVICE: "#4CAF50",  # Green
        DifficultyConfig.EASY: "#2196F3",  # Blue
        DifficultyConfig.INTERMEDIATE: "#F44336",  # Red
        DifficultyConfig.ADVANCED: "#212121",  # Black
        DifficultyConfig.EXPERT: "#212121",  # Black
    }
    DIFFICULTY_COLOR_FALLBACK = "#9E9E9E"  # Gray

    # Brighter variants for sunlit sections
    DIFFICULTY_COLORS_SUNNY = {
        DifficultyConfig.NOVICE: "#81C784",
        DifficultyConfig.EASY: "#64B5F6",
        DifficultyConfig.INTERMEDIATE: "#FF8A80",
        DifficultyConfig.ADVANCED: "#757575",
        DifficultyConfig.EXPERT: "#757575",
    }
    DIFFICULTY_COLOR_SUNNY_FALLBACK = "#BDBDBD"

    # Darker variants for shaded sections (and all runs at night)
    DIFFICULTY_COLORS_SHADED = {
        DifficultyConfig.NOVICE: "#1B5E20",
        DifficultyConfig.EASY: "#0D47A1",
        DifficultyConfig.INTERMEDIATE: "#7F0000",
        DifficultyConfig.ADVANCED: "#212121",
        DifficultyConfig.EXPERT: "#212121",
    }
    DIFFICULTY_COLOR_SHADED_FALLBACK = "#424242"

    assert set(DIFFICULTY_COLORS) == set(DIFFICULTY_COLORS_SUNNY) == set(DIFFICULTY_COLORS_SHADED)

    SHADE_OVERLAY_COLOR = "rgba(50, 50, 100, 0.6)"

    @staticmethod
    def _lookup(table: dict[str, str], fallback: str, difficulty: str | None) -> str:
        if difficulty is None:
            return fallback
        return table.get(difficulty.lower(), fallback)

    @staticmethod
    def get_difficulty_color(difficulty: str | None) -> str:
        """Get map color for a run difficulty.

        Args:
            difficulty: Difficulty label (case-insensitive), may be None

        Returns:
            Hex color string, gray for None/unknown/unrecognized labels.
        """
        return StyleConfig._lookup(StyleConfig.DIFFICULTY_COLORS, StyleConfig.DIFFICULTY_COLOR_FALLBACK, difficulty)

    @staticmethod
    def get_difficulty_color_sunny(difficulty: str | None) -> str:
        """Bright variant of get_difficulty_color for sunlit sections."""
        return StyleConfig._lookup(
            StyleConfig.DIFFICULTY_COLORS_SUNNY, StyleConfig.DIFFICULTY_COLOR_SUNNY_FALLBACK, difficulty
        )

    @staticmethod
    def get_difficulty_color_shaded(difficulty: str | None) -> str:
        """Dark variant of get_difficulty_color for shaded sections."""
        return StyleConfig._lookup(
            StyleConfig.DIFFICULTY_COLORS_SHADED, StyleConfig.DIFFICULTY_COLOR_SHADED_FALLBACK, difficulty
        )
