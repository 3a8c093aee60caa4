"""
Configuration constants for the GZCLP program model.

All fixed program parameters are centralized here: rep schemes, stage
detection patterns, weight increments, deload policy, warmup protocol,
day rotation and the sync diff tolerance.
"""

from dataclasses import dataclass
from typing import Final

# =============================================================================
# DAYS AND ROLES
# =============================================================================

GZCLP_DAYS: Final[tuple[str, ...]] = ("A1", "B1", "A2", "B2")

DAY_CYCLE: Final[dict[str, str]] = {
    "A1": "B1",
    "B1": "A2",
    "A2": "B2",
    "B2": "A1",
}

MAIN_LIFT_ROLES: Final[tuple[str, ...]] = ("squat", "bench", "ohp", "deadlift")

# Which main lift is T1 / T2 on each day
T1_MAPPING: Final[dict[str, str]] = {
    "A1": "squat",
    "B1": "ohp",
    "A2": "bench",
    "B2": "deadlift",
}

T2_MAPPING: Final[dict[str, str]] = {
    "A1": "bench",
    "B1": "deadlift",
    "A2": "squat",
    "B2": "ohp",
}

LOWER_BODY_ROLES: Final[frozenset[str]] = frozenset({"squat", "deadlift"})

# =============================================================================
# REP SCHEMES
# =============================================================================


@dataclass(frozen=True)
class RepScheme:
    """Prescribed sets x reps for one tier/stage."""

    sets: int
    reps: int
    amrap: bool
    display: str


T1_SCHEMES: Final[dict[int, RepScheme]] = {
    0: RepScheme(sets=5, reps=3, amrap=True, display="5x3+"),
    1: RepScheme(sets=6, reps=2, amrap=True, display="6x2+"),
    2: RepScheme(sets=10, reps=1, amrap=True, display="10x1+"),
}

T2_SCHEMES: Final[dict[int, RepScheme]] = {
    0: RepScheme(sets=3, reps=10, amrap=False, display="3x10"),
    1: RepScheme(sets=3, reps=8, amrap=False, display="3x8"),
    2: RepScheme(sets=3, reps=6, amrap=False, display="3x6"),
}

T3_SCHEME: Final[RepScheme] = RepScheme(sets=3, reps=15, amrap=True, display="3x15+")

MAX_STAGE: Final[int] = 2

STAGE_DISPLAY: Final[dict[int, str]] = {
    0: "Stage 1",
    1: "Stage 2",
    2: "Stage 3",
}


def get_rep_scheme(tier: str, stage: int) -> RepScheme:
    """Return the prescribed scheme for a tier at a stage (T3 ignores stage)."""
    if tier == "T1":
        return T1_SCHEMES[stage]
    if tier == "T2":
        return T2_SCHEMES[stage]
    if tier == "T3":
        return T3_SCHEME
    raise ValueError(f"Unknown tier: {tier!r}")


# =============================================================================
# STAGE DETECTION PATTERNS: (set_count, modal_reps, stage)
# =============================================================================

T1_STAGE_PATTERNS: Final[tuple[tuple[int, int, int], ...]] = (
    (5, 3, 0),
    (6, 2, 1),
    (10, 1, 2),
)

T2_STAGE_PATTERNS: Final[tuple[tuple[int, int, int], ...]] = (
    (3, 10, 0),
    (3, 8, 1),
    (3, 6, 2),
)

# =============================================================================
# WEIGHT INCREMENTS AND ROUNDING
# =============================================================================

WEIGHT_INCREMENTS: Final[dict[str, dict[str, float]]] = {
    "kg": {"upper": 2.5, "lower": 5.0},
    "lbs": {"upper": 5.0, "lower": 10.0},
}

WEIGHT_ROUNDING: Final[dict[str, float]] = {
    "kg": 2.5,
    "lbs": 5.0,
}

KG_TO_LBS: Final[float] = 2.20462
LBS_TO_KG: Final[float] = 1 / KG_TO_LBS

# =============================================================================
# DELOAD
# =============================================================================

DELOAD_PERCENTAGE: Final[float] = 0.85
DELOAD_ROUNDING_KG: Final[float] = 2.5
BAR_WEIGHT_KG: Final[float] = 20.0  # Deload never goes below an empty bar

# =============================================================================
# T3
# =============================================================================

T3_SUCCESS_THRESHOLD: Final[int] = 25  # Total reps across all sets

# =============================================================================
# REST TIMERS (seconds)
# =============================================================================

DEFAULT_REST_TIMERS: Final[dict[str, int]] = {
    "T1": 240,
    "T2": 150,
    "T3": 75,
}

# =============================================================================
# WARMUP PROTOCOL (T1 only)
# =============================================================================

WARMUP_HEAVY_THRESHOLD_KG: Final[float] = 40.0
WARMUP_LIGHT_PERCENTAGES: Final[tuple[float, ...]] = (0.0, 0.5, 0.75)  # 0 = bar only
WARMUP_LIGHT_REPS: Final[tuple[int, ...]] = (10, 5, 3)
WARMUP_HEAVY_PERCENTAGES: Final[tuple[float, ...]] = (0.5, 0.7, 0.85)
WARMUP_HEAVY_REPS: Final[tuple[int, ...]] = (5, 3, 2)

# Title fragments marking an exercise as warmup-only when it has no normal sets
WARMUP_TITLE_KEYWORDS: Final[tuple[str, ...]] = (
    "warm up",
    "warm-up",
    "warmup",
    "stretch",
    "mobility",
    "activation",
)

# =============================================================================
# SYNC DIFF
# =============================================================================

WEIGHT_EPSILON: Final[float] = 1e-6

DAY_ROUTINE_TITLES: Final[dict[str, str]] = {
    "A1": "GZCLP A1",
    "B1": "GZCLP B1",
    "A2": "GZCLP A2",
    "B2": "GZCLP B2",
}
