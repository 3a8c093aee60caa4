"""
GZCLP progression rules for T1, T2 and T3.

Each calculator takes the current ProgressionState (weights in kg) plus the
reps logged per set and returns a ProgressionResult:

- success: add the body-region increment, keep the stage ("progress")
- failure at stage 0/1: keep the weight, move to the next stage ("stage_change")
- failure at stage 2: deload to 85 % and restart at stage 0 ("deload")

T3 has a single stage and judges total reps instead, so a miss is a
"repeat" at the same weight.
"""

import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone

from .config import (
    BAR_WEIGHT_KG,
    DELOAD_PERCENTAGE,
    DELOAD_ROUNDING_KG,
    MAX_STAGE,
    T1_SCHEMES,
    T2_SCHEMES,
    T3_SCHEME,
    T3_SUCCESS_THRESHOLD,
    WEIGHT_INCREMENTS,
    RepScheme,
    get_rep_scheme,
)
from .models import (
    BodyRegion,
    Day,
    ExerciseConfig,
    PendingChange,
    ProgressionResult,
    ProgressionState,
    Tier,
    WeightDiscrepancy,
    WeightUnit,
    WorkoutAnalysisResult,
)
from .roles import body_region_for_role, get_progression_key, is_main_lift_role
from .units import display_weight, format_weight, snap_to_increment, to_kg

logger = logging.getLogger(__name__)


# =============================================================================
# Weight helpers
# =============================================================================


def get_increment_kg(body_region: BodyRegion, unit: WeightUnit) -> float:
    """
    Per-success increment in kg.

    kg users add 2.5 (upper) / 5 (lower); lbs users add 5 / 10 lbs, carried
    in kg at full precision so display rounding shows exactly +5 / +10 lbs.
    """
    return to_kg(WEIGHT_INCREMENTS[unit][body_region], unit)


def calculate_deload(weight_kg: float, unit: WeightUnit = "kg") -> float:
    """
    Deload weight: 85 % snapped to the nearest 2.5 kg, never below the bar.

    Input and output are kg regardless of the user's display unit.
    """
    deloaded = snap_to_increment(weight_kg * DELOAD_PERCENTAGE, DELOAD_ROUNDING_KG)
    return max(deloaded, BAR_WEIGHT_KG)


def _increment_label(body_region: BodyRegion, unit: WeightUnit) -> str:
    return format_weight(WEIGHT_INCREMENTS[unit][body_region], unit)


# =============================================================================
# Success predicates
# =============================================================================


def _meets_scheme(reps: list[int], scheme: RepScheme) -> bool:
    """Prescribed sets are all present and each hits the target; extras ignored."""
    if len(reps) < scheme.sets:
        return False
    return all((r or 0) >= scheme.reps for r in reps[: scheme.sets])


def is_t1_success(reps: list[int], stage: int) -> bool:
    return _meets_scheme(reps, T1_SCHEMES[stage])


def is_t2_success(reps: list[int], stage: int) -> bool:
    return _meets_scheme(reps, T2_SCHEMES[stage])


def is_t3_success(reps: list[int]) -> bool:
    """T3 succeeds on total reps across all sets reaching the threshold."""
    return sum(r or 0 for r in reps) >= T3_SUCCESS_THRESHOLD


# =============================================================================
# Main lifts
# =============================================================================


def _main_lift_progression(
    tier: Tier,
    schemes: dict[int, RepScheme],
    current: ProgressionState,
    reps: list[int],
    body_region: BodyRegion,
    unit: WeightUnit,
    amrap_reps: int | None,
) -> ProgressionResult:
    scheme = schemes[current.stage]
    success = _meets_scheme(reps, scheme)
    at_weight = display_weight(current.current_weight, unit)
    new_amrap_record = (
        max(current.amrap_record, amrap_reps) if amrap_reps is not None else None
    )

    if success:
        new_weight = current.current_weight + get_increment_kg(body_region, unit)
        result = ProgressionResult(
            type="progress",
            new_weight=new_weight,
            new_stage=current.stage,
            new_scheme=scheme.display,
            reason=(
                f"Completed {scheme.display} at {at_weight}. "
                f"Adding {_increment_label(body_region, unit)}."
            ),
            success=True,
            new_amrap_record=new_amrap_record,
            amrap_reps=amrap_reps,
        )
    elif current.stage < MAX_STAGE:
        next_scheme = schemes[current.stage + 1]
        result = ProgressionResult(
            type="stage_change",
            new_weight=current.current_weight,
            new_stage=current.stage + 1,
            new_scheme=next_scheme.display,
            reason=(
                f"Failed to complete {scheme.display} at {at_weight}. "
                f"Moving to {next_scheme.display}."
            ),
            success=False,
            new_amrap_record=new_amrap_record,
            amrap_reps=amrap_reps,
        )
    else:
        deload_weight = calculate_deload(current.current_weight, unit)
        result = ProgressionResult(
            type="deload",
            new_weight=deload_weight,
            new_stage=0,
            new_scheme=schemes[0].display,
            reason=(
                f"Failed {scheme.display} at {at_weight}. Deloading to "
                f"{display_weight(deload_weight, unit)} and restarting at "
                f"{schemes[0].display}."
            ),
            success=False,
            new_base_weight=deload_weight,
            new_amrap_record=new_amrap_record,
            amrap_reps=amrap_reps,
        )

    logger.debug(
        "%s stage %d reps=%s -> %s (%.2f kg, stage %d)",
        tier, current.stage, reps, result.type, result.new_weight, result.new_stage,
    )
    return result


def calculate_t1_progression(
    current: ProgressionState,
    reps: list[int],
    body_region: BodyRegion,
    unit: WeightUnit,
) -> ProgressionResult:
    """
    T1 progression: 5x3+ -> 6x2+ -> 10x1+ -> deload.

    The last prescribed set is the AMRAP set; its reps are reported and feed
    the running AMRAP record.
    """
    required = T1_SCHEMES[current.stage].sets
    amrap_reps = (reps[required - 1] or 0) if len(reps) >= required else 0
    return _main_lift_progression(
        "T1", T1_SCHEMES, current, reps, body_region, unit, amrap_reps
    )


def calculate_t2_progression(
    current: ProgressionState,
    reps: list[int],
    body_region: BodyRegion,
    unit: WeightUnit,
) -> ProgressionResult:
    """T2 progression: 3x10 -> 3x8 -> 3x6 -> deload."""
    return _main_lift_progression(
        "T2", T2_SCHEMES, current, reps, body_region, unit, None
    )


# =============================================================================
# Accessories
# =============================================================================


def calculate_t3_progression(
    current: ProgressionState,
    reps: list[int],
    body_region: BodyRegion,
    unit: WeightUnit,
) -> ProgressionResult:
    """
    T3 progression on total reps.

    25+ reps across the sets adds weight; anything less repeats the same
    weight.  T3 never deloads.
    """
    total = sum(r or 0 for r in reps)
    amrap_reps = (reps[-1] or 0) if reps else 0
    at_weight = display_weight(current.current_weight, unit)

    if is_t3_success(reps):
        result = ProgressionResult(
            type="progress",
            new_weight=current.current_weight + get_increment_kg(body_region, unit),
            new_stage=0,
            new_scheme=T3_SCHEME.display,
            reason=(
                f"Hit {total} total reps ({T3_SUCCESS_THRESHOLD}+ required) at "
                f"{at_weight}. Adding {_increment_label(body_region, unit)}."
            ),
            success=True,
            amrap_reps=amrap_reps,
        )
    else:
        result = ProgressionResult(
            type="repeat",
            new_weight=current.current_weight,
            new_stage=0,
            new_scheme=T3_SCHEME.display,
            reason=(
                f"Hit {total} total reps (need {T3_SUCCESS_THRESHOLD}+) at "
                f"{at_weight}. Repeat same weight."
            ),
            success=False,
            amrap_reps=amrap_reps,
        )

    logger.debug("T3 reps=%s total=%d -> %s", reps, total, result.type)
    return result


def calculate_progression(
    tier: Tier,
    current: ProgressionState,
    reps: list[int],
    body_region: BodyRegion,
    unit: WeightUnit,
) -> ProgressionResult:
    """Dispatch to the tier's calculator."""
    if tier == "T1":
        return calculate_t1_progression(current, reps, body_region, unit)
    if tier == "T2":
        return calculate_t2_progression(current, reps, body_region, unit)
    if tier == "T3":
        return calculate_t3_progression(current, reps, body_region, unit)
    raise ValueError(f"Unknown tier: {tier!r}")


# =============================================================================
# Pending changes
# =============================================================================


def create_pending_change(
    exercise: ExerciseConfig,
    progression: ProgressionState,
    result: ProgressionResult,
    workout_id: str,
    workout_date: str,
    tier: Tier,
    day: Day | None = None,
    discrepancy: WeightDiscrepancy | None = None,
    sets_completed: int | None = None,
    sets_target: int | None = None,
) -> PendingChange:
    """
    Wrap a progression result as a change awaiting review.

    Main lifts are labelled with their tier ("T1 Squat") since the same
    movement appears at two tiers.
    """
    name = exercise.name
    if is_main_lift_role(exercise.role) and tier in ("T1", "T2"):
        name = f"{tier} {exercise.name}"

    new_pr = result.amrap_reps is not None and result.amrap_reps > progression.amrap_record

    return PendingChange(
        id=uuid.uuid4().hex,
        exercise_id=exercise.id,
        exercise_name=name,
        tier=tier,
        type=result.type,
        progression_key=get_progression_key(exercise.id, exercise.role, tier),
        current_weight=progression.current_weight,
        current_stage=progression.stage,
        new_weight=result.new_weight,
        new_stage=result.new_stage,
        new_scheme=result.new_scheme,
        reason=result.reason,
        workout_id=workout_id,
        workout_date=workout_date,
        created_at=datetime.now(timezone.utc).isoformat(),
        success=result.success,
        day=day,
        new_base_weight=result.new_base_weight,
        sets_completed=sets_completed,
        sets_target=sets_target,
        new_pr=new_pr,
        new_amrap_record=result.amrap_reps if new_pr else None,
        amrap_reps=result.amrap_reps,
        discrepancy=discrepancy,
    )


def create_pending_changes_from_analysis(
    analysis_results: list[WorkoutAnalysisResult],
    exercises: dict[str, ExerciseConfig],
    progression: dict[str, ProgressionState],
    unit: WeightUnit,
) -> list[PendingChange]:
    """
    Turn analyzed workout results into pending changes.

    When the logged weight differs from the stored one, the logged weight is
    what progresses.  "repeat" outcomes change nothing and are dropped.
    """
    changes: list[PendingChange] = []

    for analysis in analysis_results:
        exercise = exercises.get(analysis.exercise_id)
        if exercise is None or not exercise.role:
            continue

        tier = analysis.tier
        key = get_progression_key(analysis.exercise_id, exercise.role, tier)
        stored = progression.get(key)
        if stored is None:
            logger.warning(
                "Skipping %r (%s): progression key %r not found",
                exercise.name, tier, key,
            )
            continue

        workout_weight = (
            analysis.discrepancy.actual_weight
            if analysis.discrepancy is not None
            else analysis.weight
        )
        result = calculate_progression(
            tier,
            replace(stored, current_weight=workout_weight),
            analysis.reps,
            body_region_for_role(exercise.role),
            unit,
        )
        if result.type == "repeat":
            continue

        changes.append(
            create_pending_change(
                exercise,
                stored,
                result,
                analysis.workout_id,
                analysis.workout_date,
                tier,
                day=analysis.day,
                discrepancy=analysis.discrepancy,
                sets_completed=len(analysis.reps),
                sets_target=get_rep_scheme(tier, stored.stage).sets,
            )
        )

    return changes


def apply_pending_change(
    progression: dict[str, ProgressionState],
    change: PendingChange,
) -> dict[str, ProgressionState]:
    """
    Return a new progression map with one change applied.

    Unknown keys leave the map unchanged.  A deload also resets the base
    weight; a new AMRAP record replaces the stored one.
    """
    stored = progression.get(change.progression_key)
    if stored is None:
        return progression

    updated = replace(
        stored,
        current_weight=change.new_weight,
        stage=change.new_stage,
        last_workout_id=change.workout_id,
        last_workout_date=change.workout_date,
    )
    if change.type == "deload":
        updated = replace(updated, base_weight=change.new_weight)
    if change.new_amrap_record is not None:
        updated = replace(updated, amrap_record=max(stored.amrap_record, change.new_amrap_record))

    return {**progression, change.progression_key: updated}


def apply_all_pending_changes(
    progression: dict[str, ProgressionState],
    changes: list[PendingChange],
) -> dict[str, ProgressionState]:
    """Apply changes in order; later changes build on earlier ones."""
    for change in changes:
        progression = apply_pending_change(progression, change)
    return progression


def modify_pending_change_weight(change: PendingChange, new_weight: float) -> PendingChange:
    """Copy of a change with a user-chosen weight and an updated reason."""
    return replace(
        change,
        new_weight=new_weight,
        reason=(
            f"Modified by user: {change.current_weight:g} -> {new_weight:g} "
            f"(original suggestion: {change.new_weight:g})"
        ),
    )
