"""
Stage detection from routine and workout set data.

Recognizes the nine canonical GZCLP set x rep patterns (three per tier)
after discarding warmup, dropset and failure sets.  A pattern that does not
match exactly is reported as undetectable; the detector never guesses the
nearest stage.
"""

import logging
from collections import Counter

from .config import T1_SCHEMES, T1_STAGE_PATTERNS, T2_SCHEMES, T2_STAGE_PATTERNS, T3_SCHEME
from .models import ExerciseSet, StageDetectionResult, Tier, Workout

logger = logging.getLogger(__name__)


def working_sets(sets: list[ExerciseSet]) -> list[ExerciseSet]:
    """Normal sets with a positive integer rep count."""
    return [
        s
        for s in sets
        if s.type == "normal"
        and isinstance(s.reps, int)
        and not isinstance(s.reps, bool)
        and s.reps > 0
    ]


def modal_reps(reps: list[int]) -> int:
    """
    Most frequent rep count; 0 for an empty list.

    Ties go to the value seen first, so an AMRAP last set never outvotes the
    prescribed reps.
    """
    if not reps:
        return 0
    # Counter preserves first-insertion order for equal counts
    return Counter(reps).most_common(1)[0][0]


def _match_pattern(
    tier: Tier, set_count: int, reps: int
) -> StageDetectionResult | None:
    patterns = T1_STAGE_PATTERNS if tier == "T1" else T2_STAGE_PATTERNS
    schemes = T1_SCHEMES if tier == "T1" else T2_SCHEMES
    for pattern_sets, pattern_reps, stage in patterns:
        if set_count == pattern_sets and reps == pattern_reps:
            return StageDetectionResult(
                stage=stage,
                confidence="high",
                set_count=set_count,
                rep_scheme=schemes[stage].display,
            )
    return None


def detect_stage(sets: list[ExerciseSet], tier: Tier) -> StageDetectionResult | None:
    """
    Detect the progression stage of an exercise from its sets.

    Args:
        sets: All sets of the exercise (filtered to working sets internally)
        tier: "T1", "T2" or "T3"

    Returns:
        Detection result with confidence "high", or None when no working sets
        exist or the pattern matches no canonical scheme
    """
    normal = working_sets(sets)
    if not normal:
        return None

    set_count = len(normal)

    if tier == "T3":
        return StageDetectionResult(
            stage=0,
            confidence="high",
            set_count=set_count,
            rep_scheme=T3_SCHEME.display,
        )

    reps = modal_reps([s.reps for s in normal])  # type: ignore[misc]
    result = _match_pattern(tier, set_count, reps)
    if result is None:
        logger.debug("No %s pattern for %d sets x %d reps", tier, set_count, reps)
    return result


def extract_weight(sets: list[ExerciseSet]) -> float:
    """
    Working weight in kg: the heaviest normal set.

    Warmup, dropset and failure sets are ignored even when heavier.  Returns
    0 when there are no normal sets or none carries a weight.
    """
    weights = [
        s.weight_kg for s in sets if s.type == "normal" and s.weight_kg is not None
    ]
    if not weights:
        return 0.0
    return max(weights)


def detect_stage_from_workout_history(
    workouts: list[Workout],
    template_id: str,
    tier: Tier,
) -> int | None:
    """
    Detect a stage from the most recent logged workout containing an exercise.

    Args:
        workouts: Workouts, most recent first
        template_id: Hevy exercise template id to look for
        tier: Tier used for pattern matching

    Returns:
        Stage 0-2, or None when the exercise was never logged or its most
        recent log matches no canonical pattern
    """
    if tier == "T3":
        return 0

    for workout in workouts:
        exercise = next(
            (ex for ex in workout.exercises if ex.exercise_template_id == template_id),
            None,
        )
        if exercise is None:
            continue

        normal = working_sets(exercise.sets)
        if not normal:
            continue

        result = _match_pattern(
            tier, len(normal), modal_reps([s.reps for s in normal])  # type: ignore[misc]
        )
        return result.stage if result is not None else None

    return None
