"""
Progression history.

Every accepted PendingChange is recorded against its progression key as a
HistoryEntry holding the state the lift was in when the workout was judged
(weight, stage, success, AMRAP reps).  History is keyed the same way as
progression, so T1 squat and T2 squat keep separate charts.

All functions are pure: they return a new history dict and never mutate the
one passed in.
"""

import logging
from datetime import datetime, timezone

from .models import ExerciseConfig, ExerciseHistory, HistoryEntry, PendingChange

logger = logging.getLogger(__name__)


def create_history_entry_from_change(change: PendingChange) -> HistoryEntry:
    return HistoryEntry(
        date=change.workout_date,
        workout_id=change.workout_id,
        weight=change.current_weight,
        stage=change.current_stage,
        tier=change.tier,
        success=change.success,
        change_type=change.type,
        amrap_reps=change.amrap_reps,
    )


def _entry_time(entry: HistoryEntry) -> datetime:
    try:
        parsed = datetime.fromisoformat(entry.date.replace("Z", "+00:00"))
    except ValueError:
        return datetime.min.replace(tzinfo=timezone.utc)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def record_progression_history(
    history: dict[str, ExerciseHistory],
    change: PendingChange,
    exercises: dict[str, ExerciseConfig],
) -> dict[str, ExerciseHistory]:
    """
    Add one change to the history of its progression key.

    A workout already recorded for the key is not added again.  Entries stay
    sorted oldest first, so late imports of older workouts land in place.
    """
    key = change.progression_key
    entry = create_history_entry_from_change(change)
    existing = history.get(key)

    if existing is None:
        config = exercises.get(change.exercise_id)
        existing = ExerciseHistory(
            progression_key=key,
            exercise_name=config.name if config is not None else change.exercise_name,
            tier=change.tier,
            role=config.role if config is not None else None,
        )
    elif any(e.workout_id == entry.workout_id for e in existing.entries):
        logger.debug("History for %s already has workout %s", key, entry.workout_id)
        return history

    entries = sorted([*existing.entries, entry], key=_entry_time)
    updated = dict(history)
    updated[key] = ExerciseHistory(
        progression_key=existing.progression_key,
        exercise_name=existing.exercise_name,
        tier=existing.tier,
        entries=entries,
        role=existing.role,
    )
    return updated


def record_multiple_changes(
    history: dict[str, ExerciseHistory],
    changes: list[PendingChange],
    exercises: dict[str, ExerciseConfig],
) -> dict[str, ExerciseHistory]:
    """Record changes in order."""
    for change in changes:
        history = record_progression_history(history, change, exercises)
    return history
