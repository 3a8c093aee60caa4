"""
Workout analysis: turn logged Hevy workouts into progression inputs.

Matches workout exercises to configured exercises by template id, pulls the
per-set reps and working weight, and flags logged weights that differ from
the stored progression.  Also backs the import wizard's "what would the last
workout suggest" analysis.
"""

import logging
from datetime import datetime

from .config import GZCLP_DAYS
from .models import (
    BodyRegion,
    Day,
    ExerciseConfig,
    ExerciseSet,
    ImportAnalysis,
    ProgressionState,
    ProgressionSuggestion,
    Tier,
    WeightDiscrepancy,
    WeightUnit,
    Workout,
    WorkoutAnalysisResult,
    WorkoutExercise,
    WorkoutPerformance,
)
from .progression import calculate_progression
from .roles import get_progression_key, get_tier_for_day, is_main_lift_role

logger = logging.getLogger(__name__)


# =============================================================================
# Set processing
# =============================================================================


def extract_reps_from_sets(sets: list[ExerciseSet]) -> list[int]:
    """Reps of normal and dropset sets; a null rep count is a failed set (0)."""
    return [s.reps or 0 for s in sets if s.type in ("normal", "dropset")]


def extract_working_weight(sets: list[ExerciseSet]) -> float:
    """Weight of the first normal set, 0 when absent."""
    for s in sets:
        if s.type == "normal":
            return s.weight_kg or 0.0
    return 0.0


# =============================================================================
# Matching
# =============================================================================


def match_workout_to_exercises(
    workout: Workout,
    exercises: dict[str, ExerciseConfig],
) -> list[tuple[ExerciseConfig, WorkoutExercise]]:
    """Pairs of (configured exercise, logged exercise) sharing a template id."""
    by_template = {ex.template_id: ex for ex in exercises.values()}
    return [
        (by_template[logged.exercise_template_id], logged)
        for logged in workout.exercises
        if logged.exercise_template_id in by_template
    ]


def _derive_tier(role: str | None, day: Day | None) -> Tier | None:
    if not is_main_lift_role(role):
        return "T3"
    # A main lift's tier depends on the day; without one, don't guess.
    if day is None:
        return None
    return get_tier_for_day(role, day) or "T3"


def analyze_workout(
    workout: Workout,
    exercises: dict[str, ExerciseConfig],
    progression: dict[str, ProgressionState],
    day: Day | None = None,
) -> list[WorkoutAnalysisResult]:
    """
    Extract progression-relevant data for every configured exercise logged.

    Exercises without a role are ignored, as are main lifts when the day is
    unknown.
    """
    results: list[WorkoutAnalysisResult] = []

    for config, logged in match_workout_to_exercises(workout, exercises):
        if not config.role:
            continue
        tier = _derive_tier(config.role, day)
        if tier is None:
            logger.debug("Skipping main lift %r: workout day unknown", config.name)
            continue

        reps = extract_reps_from_sets(logged.sets)
        weight = extract_working_weight(logged.sets)

        stored = progression.get(get_progression_key(config.id, config.role, tier))
        discrepancy = None
        if stored is not None and stored.current_weight != weight:
            discrepancy = WeightDiscrepancy(
                stored_weight=stored.current_weight, actual_weight=weight
            )

        results.append(
            WorkoutAnalysisResult(
                exercise_id=config.id,
                exercise_name=config.name,
                tier=tier,
                reps=reps,
                weight=weight,
                workout_id=workout.id,
                workout_date=workout.start_time,
                discrepancy=discrepancy,
                day=day,
            )
        )

    return results


def infer_workout_day(
    workout: Workout,
    routine_ids: dict[str, str | None],
) -> Day | None:
    """Day whose assigned routine produced the workout, if any."""
    if workout.routine_id is None:
        return None
    for day in GZCLP_DAYS:
        if routine_ids.get(day) == workout.routine_id:
            return day  # type: ignore[return-value]
    return None


# =============================================================================
# Sync bookkeeping
# =============================================================================


def _parse_start(value: str) -> datetime:
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def sort_workouts_chronologically(workouts: list[Workout]) -> list[Workout]:
    """Oldest first."""
    return sorted(workouts, key=lambda w: _parse_start(w.start_time))


def filter_new_workouts(
    workouts: list[Workout],
    last_processed_workout_id: str | None,
) -> list[Workout]:
    """
    Workouts after the last processed one (input oldest first).

    If the marker is unknown or missing, everything is new.
    """
    if not last_processed_workout_id:
        return list(workouts)
    for i, workout in enumerate(workouts):
        if workout.id == last_processed_workout_id:
            return list(workouts[i + 1:])
    return list(workouts)


# =============================================================================
# Import analysis
# =============================================================================


def find_most_recent_workout_for_exercise(
    workouts: list[Workout],
    routine_id: str,
    template_id: str,
) -> tuple[Workout, WorkoutExercise] | None:
    """Most recent workout of a routine that logged the exercise."""
    candidates = sorted(
        (w for w in workouts if w.routine_id == routine_id),
        key=lambda w: _parse_start(w.start_time),
        reverse=True,
    )
    for workout in candidates:
        for exercise in workout.exercises:
            if exercise.exercise_template_id == template_id:
                return workout, exercise
    return None


def analyze_exercise_performance(
    exercise: WorkoutExercise,
    workout: Workout,
) -> WorkoutPerformance:
    reps = extract_reps_from_sets(exercise.sets)
    return WorkoutPerformance(
        workout_id=workout.id,
        workout_date=workout.start_time,
        weight=extract_working_weight(exercise.sets),
        reps=reps,
        total_sets=len(reps),
    )


def calculate_import_progression(
    performance: WorkoutPerformance,
    current_stage: int,
    tier: Tier,
    body_region: BodyRegion,
    unit: WeightUnit,
) -> ProgressionSuggestion:
    """Run the progression rules against a past workout."""
    state = ProgressionState(
        exercise_id="",
        current_weight=performance.weight,
        stage=current_stage,
        last_workout_id=performance.workout_id,
        last_workout_date=performance.workout_date,
    )
    result = calculate_progression(tier, state, performance.reps, body_region, unit)
    date = performance.workout_date[:10]
    return ProgressionSuggestion(
        type=result.type,
        suggested_weight=result.new_weight,
        suggested_stage=result.new_stage,
        new_scheme=result.new_scheme,
        reason=f"{result.reason} (from {date})" if date else result.reason,
        success=result.success,
        amrap_reps=result.amrap_reps,
    )


def analyze_exercise_for_import(
    workouts: list[Workout],
    routine_id: str,
    template_id: str,
    detected_stage: int,
    tier: Tier,
    body_region: BodyRegion,
    unit: WeightUnit,
) -> ImportAnalysis:
    """Find the last logged session of an imported exercise and suggest its next step."""
    found = find_most_recent_workout_for_exercise(workouts, routine_id, template_id)
    if found is None:
        return ImportAnalysis(has_workout_data=False, tier=tier)

    workout, exercise = found
    performance = analyze_exercise_performance(exercise, workout)
    return ImportAnalysis(
        has_workout_data=True,
        tier=tier,
        performance=performance,
        suggestion=calculate_import_progression(
            performance, detected_stage, tier, body_region, unit
        ),
    )
