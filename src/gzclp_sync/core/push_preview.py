"""
Push preview: diff local progression against the remote routines.

Every exercise of every day is compared in the user's unit.  The preview
defaults each changed exercise to "push" and everything else to "skip"; the
caller can reassign any exercise to "pull" to adopt the remote weight
instead.  Aggregate counts are always recomputed from the full action list.
"""

import logging
from dataclasses import replace

from .config import GZCLP_DAYS, WEIGHT_EPSILON
from .models import (
    VALID_ACTIONS,
    DayDiff,
    ExerciseConfig,
    ExerciseDiff,
    ProgressionState,
    PushPreview,
    RemoteRoutineState,
    Routine,
    SelectableExerciseDiff,
    SelectablePushPreview,
    SyncAction,
    Tier,
    WeightUnit,
)
from .roles import get_exercises_for_day, get_progression_key
from .units import convert_weight, get_display_value

logger = logging.getLogger(__name__)

DAY_NAMES = {day: f"Day {day}" for day in GZCLP_DAYS}


# =============================================================================
# Remote snapshot
# =============================================================================


def remote_state_from_routine(routine: Routine | None) -> RemoteRoutineState:
    """
    Snapshot a fetched routine as template id -> working weight (kg).

    The working weight is the heaviest non-null set, which skips warmups.
    Exercises with no weighted set are left out.
    """
    if routine is None:
        return RemoteRoutineState()

    weights: dict[str, float] = {}
    for exercise in routine.exercises:
        loaded = [s.weight_kg for s in exercise.sets if s.weight_kg is not None]
        if loaded:
            weights[exercise.exercise_template_id] = max(loaded)
    return RemoteRoutineState(routine_id=routine.id, weights=weights)


# =============================================================================
# Diff
# =============================================================================


def _exercise_diff(
    exercise: ExerciseConfig,
    tier: Tier,
    remote: RemoteRoutineState,
    progression: dict[str, ProgressionState],
    unit: WeightUnit,
) -> ExerciseDiff | None:
    key = get_progression_key(exercise.id, exercise.role, tier)
    state = progression.get(key)
    if state is None:
        return None

    new_weight = get_display_value(state.current_weight, unit)
    remote_kg = remote.weights.get(exercise.template_id)
    old_weight = convert_weight(remote_kg, "kg", unit) if remote_kg is not None else None
    is_changed = old_weight is None or abs(new_weight - old_weight) > WEIGHT_EPSILON

    return ExerciseDiff(
        exercise_id=exercise.id,
        name=exercise.name,
        tier=tier,
        old_weight=old_weight,
        new_weight=new_weight,
        stage=state.stage if tier != "T3" else None,
        is_changed=is_changed,
        progression_key=key,
    )


def _build_day_diff(
    day: str,
    remote: RemoteRoutineState,
    exercises: dict[str, ExerciseConfig],
    progression: dict[str, ProgressionState],
    t3_schedule: dict[str, list[str]],
    unit: WeightUnit,
) -> DayDiff:
    slots = get_exercises_for_day(exercises, day, t3_schedule)
    ordered: list[tuple[ExerciseConfig, Tier]] = []
    if slots.t1 is not None:
        ordered.append((slots.t1, "T1"))
    if slots.t2 is not None:
        ordered.append((slots.t2, "T2"))
    ordered.extend((ex, "T3") for ex in slots.t3)

    diffs = []
    for exercise, tier in ordered:
        diff = _exercise_diff(exercise, tier, remote, progression, unit)
        if diff is not None:
            diffs.append(diff)

    return DayDiff(
        day=day,
        routine_name=DAY_NAMES[day],
        routine_exists=remote.routine_id is not None,
        exercises=tuple(diffs),
        change_count=sum(1 for d in diffs if d.is_changed),
    )


def build_push_preview(
    remote_state_by_day: dict[str, RemoteRoutineState],
    exercises: dict[str, ExerciseConfig],
    progression: dict[str, ProgressionState],
    t3_schedule: dict[str, list[str]],
    unit: WeightUnit,
) -> PushPreview:
    """
    Compare local progression with the remote snapshot for all four days.

    Days missing from ``remote_state_by_day`` are treated as having no
    remote routine.
    """
    days = tuple(
        _build_day_diff(
            day,
            remote_state_by_day.get(day) or RemoteRoutineState(),
            exercises,
            progression,
            t3_schedule,
            unit,
        )
        for day in GZCLP_DAYS
    )
    preview = PushPreview(
        days=days,
        total_changes=sum(d.change_count for d in days),
        has_any_routines=any(d.routine_exists for d in days),
    )
    logger.debug(
        "Push preview: %d changes across %d days", preview.total_changes, len(days)
    )
    return preview


# =============================================================================
# Selection
# =============================================================================


def _with_counts(
    days: tuple[DayDiff, ...],
    has_any_routines: bool,
) -> SelectablePushPreview:
    """Assemble a selectable preview, counting everything from scratch."""
    actions = [ex.action for day in days for ex in day.exercises]
    return SelectablePushPreview(
        days=days,
        total_changes=sum(d.change_count for d in days),
        has_any_routines=has_any_routines,
        push_count=actions.count("push"),
        pull_count=actions.count("pull"),
        skip_count=actions.count("skip"),
    )


def build_selectable_push_preview(
    remote_state_by_day: dict[str, RemoteRoutineState],
    exercises: dict[str, ExerciseConfig],
    progression: dict[str, ProgressionState],
    t3_schedule: dict[str, list[str]],
    unit: WeightUnit,
) -> SelectablePushPreview:
    """Push preview with default actions: push if changed, otherwise skip."""
    base = build_push_preview(
        remote_state_by_day, exercises, progression, t3_schedule, unit
    )
    days = tuple(
        replace(
            day,
            exercises=tuple(
                SelectableExerciseDiff(
                    **vars(ex), action="push" if ex.is_changed else "skip"
                )
                for ex in day.exercises
            ),
        )
        for day in base.days
    )
    return _with_counts(days, base.has_any_routines)


def update_preview_action(
    preview: SelectablePushPreview,
    progression_key: str,
    action: SyncAction,
) -> SelectablePushPreview:
    """
    New preview with ``action`` set on every exercise with the given key.

    The input preview is left untouched.  A key shared by several days
    (a recurring accessory) changes on all of them.
    """
    if action not in VALID_ACTIONS:
        raise ValueError(
            f"Invalid action: {action!r}. Must be one of {', '.join(VALID_ACTIONS)}."
        )

    days = tuple(
        replace(
            day,
            exercises=tuple(
                replace(ex, action=action) if ex.progression_key == progression_key else ex
                for ex in day.exercises
            ),
        )
        for day in preview.days
    )
    return _with_counts(days, preview.has_any_routines)


def keys_with_action(preview: SelectablePushPreview, action: SyncAction) -> list[str]:
    """Distinct progression keys carrying ``action``, in preview order."""
    keys: list[str] = []
    for day in preview.days:
        for ex in day.exercises:
            if ex.action == action and ex.progression_key not in keys:
                keys.append(ex.progression_key)
    return keys


def apply_pull_actions(
    preview: SelectablePushPreview,
    remote_state_by_day: dict[str, RemoteRoutineState],
    exercises: dict[str, ExerciseConfig],
    progression: dict[str, ProgressionState],
) -> dict[str, ProgressionState]:
    """
    Adopt remote weights for every exercise marked "pull".

    The remote kg value becomes both the current and the base weight.
    Exercises with no remote weight keep their local state.
    """
    updated = dict(progression)
    for day in preview.days:
        remote = remote_state_by_day.get(day.day) or RemoteRoutineState()
        for ex in day.exercises:
            if ex.action != "pull":
                continue
            config = exercises.get(ex.exercise_id)
            state = updated.get(ex.progression_key)
            if config is None or state is None:
                continue
            remote_kg = remote.weights.get(config.template_id)
            if remote_kg is None:
                continue
            updated[ex.progression_key] = replace(
                state, current_weight=remote_kg, base_weight=remote_kg
            )
            logger.debug("Pulled %s: %.2f kg", ex.progression_key, remote_kg)
    return updated
