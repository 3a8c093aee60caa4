"""
Build Hevy routine payloads from program state.

Payloads are plain dicts in Hevy's write shape, ready to be JSON-encoded:

    {"routine": {"title": "GZCLP A1", "folder_id": None, "exercises": [...]}}

T1 lifts get a warmup ramp ahead of their working sets.  Weights are always
written in kg with one decimal.
"""

from .config import (
    BAR_WEIGHT_KG,
    DAY_ROUTINE_TITLES,
    DELOAD_ROUNDING_KG,
    WARMUP_HEAVY_PERCENTAGES,
    WARMUP_HEAVY_REPS,
    WARMUP_HEAVY_THRESHOLD_KG,
    WARMUP_LIGHT_PERCENTAGES,
    WARMUP_LIGHT_REPS,
    get_rep_scheme,
)
from .models import (
    Day,
    ExerciseConfig,
    ProgramState,
    ProgressionState,
    RemoteRoutineState,
    SelectablePushPreview,
    SyncAction,
    Tier,
    UserSettings,
)
from .roles import get_exercises_for_day, get_progression_key
from .units import snap_to_increment


def calculate_warmup_sets(working_weight_kg: float) -> list[tuple[float, int]]:
    """
    Warmup ramp for a T1 working weight as (weight_kg, reps) pairs.

    Light lifts (<= 40 kg): bar x10, 50% x5, 75% x3.
    Heavy lifts: 50% x5, 70% x3, 85% x2.
    Each step is rounded to 2.5 kg and floored at the bar; a step that rounds
    to the previous step's weight is dropped.
    """
    if working_weight_kg > WARMUP_HEAVY_THRESHOLD_KG:
        percentages, reps = WARMUP_HEAVY_PERCENTAGES, WARMUP_HEAVY_REPS
    else:
        percentages, reps = WARMUP_LIGHT_PERCENTAGES, WARMUP_LIGHT_REPS

    sets: list[tuple[float, int]] = []
    for pct, rep_count in zip(percentages, reps):
        if pct == 0:
            weight = BAR_WEIGHT_KG
        else:
            weight = max(
                BAR_WEIGHT_KG,
                snap_to_increment(working_weight_kg * pct, DELOAD_ROUNDING_KG),
            )
        if sets and sets[-1][0] == weight:
            continue
        sets.append((weight, rep_count))
    return sets


def build_routine_set(weight_kg: float, reps: int, set_type: str = "normal") -> dict:
    return {"type": set_type, "weight_kg": weight_kg, "reps": reps}


def build_routine_exercise(
    exercise: ExerciseConfig,
    tier: Tier,
    progression: ProgressionState,
    settings: UserSettings,
    weight_kg: float | None = None,
) -> dict:
    """
    One exercise entry: warmups (T1 only), then the stage's working sets.

    weight_kg overrides the progression weight (used to keep a Hevy weight).
    """
    if weight_kg is None:
        weight_kg = progression.current_weight
    weight_kg = round(weight_kg, 1)
    scheme = get_rep_scheme(tier, progression.stage)

    sets = []
    if tier == "T1":
        sets.extend(
            build_routine_set(w, r, "warmup") for w, r in calculate_warmup_sets(weight_kg)
        )
    sets.extend(build_routine_set(weight_kg, scheme.reps) for _ in range(scheme.sets))

    return {
        "exercise_template_id": exercise.template_id,
        "rest_seconds": settings.rest_timers[tier],
        "notes": scheme.display,
        "sets": sets,
    }


def _action_for(preview: SelectablePushPreview | None, day: Day, key: str) -> SyncAction:
    if preview is None:
        return "push"
    for day_diff in preview.days:
        if day_diff.day != day:
            continue
        for ex in day_diff.exercises:
            if ex.progression_key == key:
                return ex.action
    return "push"


def build_day_routine(
    day: Day,
    program: ProgramState,
    preview: SelectablePushPreview | None = None,
    remote: RemoteRoutineState | None = None,
) -> dict:
    """
    Title and exercises of a day's routine.

    Slots with no progression entry are left out.  With a preview, exercises
    marked skip or pull keep the weight Hevy already has (from ``remote``);
    only push writes the local weight.
    """
    slots = get_exercises_for_day(program.exercises, day, program.t3_schedule)
    ordered: list[tuple[ExerciseConfig, Tier]] = []
    if slots.t1 is not None:
        ordered.append((slots.t1, "T1"))
    if slots.t2 is not None:
        ordered.append((slots.t2, "T2"))
    ordered.extend((ex, "T3") for ex in slots.t3)

    exercises = []
    for exercise, tier in ordered:
        key = get_progression_key(exercise.id, exercise.role, tier)
        state = program.progression.get(key)
        if state is None:
            continue
        weight_kg = None
        if remote is not None and _action_for(preview, day, key) != "push":
            weight_kg = remote.weights.get(exercise.template_id)
        exercises.append(
            build_routine_exercise(exercise, tier, state, program.settings, weight_kg)
        )

    return {"title": DAY_ROUTINE_TITLES[day], "exercises": exercises}


def build_routine_payload(
    day: Day,
    program: ProgramState,
    folder_id: int | None = None,
    preview: SelectablePushPreview | None = None,
    remote: RemoteRoutineState | None = None,
) -> dict:
    """Full create/update request body for a day's routine."""
    routine = build_day_routine(day, program, preview, remote)
    return {
        "routine": {
            "title": routine["title"],
            "folder_id": folder_id,
            "exercises": routine["exercises"],
        }
    }
