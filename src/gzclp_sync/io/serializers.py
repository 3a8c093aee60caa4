"""
JSON serialization for Hevy records and program state.

Handles conversion between dataclasses and JSON-compatible dicts.  Hevy
records (routines, workouts) come from API exports; program state is what
StateStore persists.
"""

import json
from dataclasses import asdict
from typing import Any

from ..core.config import GZCLP_DAYS
from ..core.models import (
    VALID_TIERS,
    Day,
    ExerciseConfig,
    ExerciseHistory,
    ExerciseSet,
    HistoryEntry,
    PendingChange,
    ProgramState,
    ProgressionState,
    Routine,
    RoutineExercise,
    Tier,
    UserSettings,
    WeightDiscrepancy,
    Workout,
)

VALID_CHANGE_TYPES = ("progress", "stage_change", "deload", "repeat")


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


# =============================================================================
# Field validation
# =============================================================================


def _require(data: dict[str, Any], key: str, record: str) -> Any:
    if not isinstance(data, dict):
        raise ValidationError(f"{record} must be an object, got {type(data).__name__}")
    if key not in data or data[key] is None:
        raise ValidationError(f"{record} is missing required field {key!r}")
    return data[key]


def validate_non_negative(value: int | float, name: str) -> int | float:
    """
    Validate that a value is a non-negative number.

    Raises:
        ValidationError: If value is negative or not a number
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    if value < 0:
        raise ValidationError(f"{name} must be non-negative, got {value}")
    return value


def validate_tier(tier: str) -> Tier:
    if tier not in VALID_TIERS:
        raise ValidationError(f"Invalid tier: {tier!r}. Must be one of {VALID_TIERS}")
    return tier  # type: ignore


def validate_day(day: str | None) -> Day | None:
    if day is None:
        return None
    if day not in GZCLP_DAYS:
        raise ValidationError(f"Invalid day: {day!r}. Must be one of {GZCLP_DAYS}")
    return day  # type: ignore


# =============================================================================
# Hevy records
# =============================================================================


def dict_to_exercise_set(data: dict[str, Any]) -> ExerciseSet:
    """
    Convert a Hevy set dict to ExerciseSet.

    Null reps or weight are kept as None; the core treats them as unknown.
    """
    if not isinstance(data, dict):
        raise ValidationError(f"set must be an object, got {type(data).__name__}")
    reps = data.get("reps")
    weight = data.get("weight_kg")
    if reps is not None:
        validate_non_negative(reps, "reps")
    if weight is not None:
        validate_non_negative(weight, "weight_kg")
    return ExerciseSet(
        type=str(data.get("type") or "normal"),
        reps=int(reps) if reps is not None else None,
        weight_kg=float(weight) if weight is not None else None,
    )


def dict_to_routine_exercise(data: dict[str, Any]) -> RoutineExercise:
    template_id = _require(data, "exercise_template_id", "exercise")
    return RoutineExercise(
        exercise_template_id=str(template_id),
        title=str(data.get("title") or template_id),
        sets=[dict_to_exercise_set(s) for s in data.get("sets") or []],
        notes=str(data.get("notes") or ""),
    )


def dict_to_routine(data: dict[str, Any]) -> Routine:
    """
    Convert a Hevy routine dict to Routine.

    Raises:
        ValidationError: If the id is missing or an exercise is malformed
    """
    routine_id = _require(data, "id", "routine")
    return Routine(
        id=str(routine_id),
        title=str(data.get("title") or ""),
        exercises=[dict_to_routine_exercise(e) for e in data.get("exercises") or []],
        updated_at=str(data.get("updated_at") or ""),
    )


def dict_to_workout(data: dict[str, Any]) -> Workout:
    """
    Convert a Hevy workout dict to Workout.

    Raises:
        ValidationError: If id or start_time is missing
    """
    workout_id = _require(data, "id", "workout")
    start_time = _require(data, "start_time", "workout")
    routine_id = data.get("routine_id")
    return Workout(
        id=str(workout_id),
        title=str(data.get("title") or ""),
        start_time=str(start_time),
        exercises=[dict_to_routine_exercise(e) for e in data.get("exercises") or []],
        routine_id=str(routine_id) if routine_id else None,
    )


def _records(data: Any, key: str) -> list[dict[str, Any]]:
    """Accept either a bare list or a Hevy page object ``{key: [...]}``."""
    if isinstance(data, dict):
        data = data.get(key)
    if not isinstance(data, list):
        raise ValidationError(f"Expected a list of {key} or an object with {key!r}")
    return data


def parse_routines(data: Any) -> dict[str, Routine]:
    """Routines keyed by id, in file order."""
    routines = [dict_to_routine(r) for r in _records(data, "routines")]
    return {r.id: r for r in routines}


def parse_workouts(data: Any) -> list[Workout]:
    return [dict_to_workout(w) for w in _records(data, "workouts")]


def load_json_file(path) -> Any:
    """Read a JSON file, reporting decode errors as ValidationError."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            return json.load(f)
    except json.JSONDecodeError as e:
        raise ValidationError(f"{path}: invalid JSON ({e})") from e


# =============================================================================
# Program state
# =============================================================================


def exercise_config_to_dict(exercise: ExerciseConfig) -> dict[str, Any]:
    return {
        "id": exercise.id,
        "template_id": exercise.template_id,
        "name": exercise.name,
        "role": exercise.role,
    }


def dict_to_exercise_config(data: dict[str, Any]) -> ExerciseConfig:
    return ExerciseConfig(
        id=str(_require(data, "id", "exercise")),
        template_id=str(_require(data, "template_id", "exercise")),
        name=str(data.get("name") or ""),
        role=data.get("role"),
    )


def progression_state_to_dict(state: ProgressionState) -> dict[str, Any]:
    return {
        "exercise_id": state.exercise_id,
        "current_weight": state.current_weight,
        "stage": state.stage,
        "base_weight": state.base_weight,
        "amrap_record": state.amrap_record,
        "last_workout_id": state.last_workout_id,
        "last_workout_date": state.last_workout_date,
    }


def dict_to_progression_state(data: dict[str, Any]) -> ProgressionState:
    """
    Convert dict to ProgressionState.

    Raises:
        ValidationError: If data is invalid
    """
    weight = validate_non_negative(_require(data, "current_weight", "progression"), "current_weight")
    try:
        return ProgressionState(
            exercise_id=str(_require(data, "exercise_id", "progression")),
            current_weight=float(weight),
            stage=int(data.get("stage", 0)),
            base_weight=data.get("base_weight"),
            amrap_record=int(data.get("amrap_record", 0)),
            last_workout_id=data.get("last_workout_id"),
            last_workout_date=data.get("last_workout_date"),
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e


def pending_change_to_dict(change: PendingChange) -> dict[str, Any]:
    return asdict(change)


def dict_to_pending_change(data: dict[str, Any]) -> PendingChange:
    if data.get("type") not in VALID_CHANGE_TYPES:
        raise ValidationError(f"Invalid change type: {data.get('type')!r}")
    fields = dict(data)
    fields["tier"] = validate_tier(_require(data, "tier", "pending change"))
    fields["day"] = validate_day(data.get("day"))
    discrepancy = data.get("discrepancy")
    try:
        fields["discrepancy"] = WeightDiscrepancy(**discrepancy) if discrepancy else None
        return PendingChange(**fields)
    except TypeError as e:
        raise ValidationError(f"Malformed pending change: {e}") from e


def history_entry_to_dict(entry: HistoryEntry) -> dict[str, Any]:
    return asdict(entry)


def dict_to_history_entry(data: dict[str, Any]) -> HistoryEntry:
    if data.get("change_type") not in VALID_CHANGE_TYPES:
        raise ValidationError(f"Invalid history change type: {data.get('change_type')!r}")
    fields = dict(data)
    fields["tier"] = validate_tier(_require(data, "tier", "history entry"))
    try:
        return HistoryEntry(**fields)
    except TypeError as e:
        raise ValidationError(f"Malformed history entry: {e}") from e


def exercise_history_to_dict(history: ExerciseHistory) -> dict[str, Any]:
    return {
        "progression_key": history.progression_key,
        "exercise_name": history.exercise_name,
        "tier": history.tier,
        "role": history.role,
        "entries": [history_entry_to_dict(e) for e in history.entries],
    }


def dict_to_exercise_history(data: dict[str, Any]) -> ExerciseHistory:
    """
    Convert dict to ExerciseHistory.

    Raises:
        ValidationError: If the record or any entry is invalid
    """
    return ExerciseHistory(
        progression_key=_require(data, "progression_key", "exercise history"),
        exercise_name=_require(data, "exercise_name", "exercise history"),
        tier=validate_tier(_require(data, "tier", "exercise history")),
        entries=[dict_to_history_entry(e) for e in data.get("entries") or []],
        role=data.get("role"),
    )


def program_state_to_dict(state: ProgramState) -> dict[str, Any]:
    """Convert ProgramState to a JSON-compatible dict."""
    return {
        "exercises": {k: exercise_config_to_dict(v) for k, v in state.exercises.items()},
        "progression": {k: progression_state_to_dict(v) for k, v in state.progression.items()},
        "t3_schedule": {day: list(ids) for day, ids in state.t3_schedule.items()},
        "routine_ids": dict(state.routine_ids),
        "settings": {
            "weight_unit": state.settings.weight_unit,
            "rest_timers": dict(state.settings.rest_timers),
        },
        "current_day": state.current_day,
        "pending_changes": [pending_change_to_dict(c) for c in state.pending_changes],
        "last_processed_workout_id": state.last_processed_workout_id,
        "created_at": state.created_at,
        "history": {k: exercise_history_to_dict(v) for k, v in state.history.items()},
    }


def dict_to_program_state(data: dict[str, Any]) -> ProgramState:
    """
    Convert dict to ProgramState.

    Missing days in the schedule and routine map are filled in empty.

    Raises:
        ValidationError: If any nested record is invalid
    """
    if not isinstance(data, dict):
        raise ValidationError("Program state must be an object")

    settings_data = data.get("settings") or {}
    try:
        settings = UserSettings(
            weight_unit=settings_data.get("weight_unit", "kg"),
            rest_timers=settings_data.get("rest_timers") or UserSettings().rest_timers,
        )
    except ValueError as e:
        raise ValidationError(str(e)) from e

    schedule = data.get("t3_schedule") or {}
    routine_ids = data.get("routine_ids") or {}

    return ProgramState(
        exercises={
            k: dict_to_exercise_config(v) for k, v in (data.get("exercises") or {}).items()
        },
        progression={
            k: dict_to_progression_state(v) for k, v in (data.get("progression") or {}).items()
        },
        t3_schedule={day: list(schedule.get(day) or []) for day in GZCLP_DAYS},
        routine_ids={day: routine_ids.get(day) for day in GZCLP_DAYS},
        settings=settings,
        current_day=validate_day(data.get("current_day") or "A1"),
        pending_changes=[dict_to_pending_change(c) for c in data.get("pending_changes") or []],
        last_processed_workout_id=data.get("last_processed_workout_id"),
        created_at=str(data.get("created_at") or ""),
        history={
            k: dict_to_exercise_history(v) for k, v in (data.get("history") or {}).items()
        },
    )
