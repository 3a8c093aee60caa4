"""
Program builder: turn a reviewed import into program state.

Exercises are deduplicated by Hevy template id, and the template id doubles
as the exercise id so rebuilding from the same routines is stable.  The
first day that sets a progression key wins.
"""

import logging
from datetime import datetime, timezone

from .config import GZCLP_DAYS
from .models import (
    ExerciseConfig,
    ImportedExercise,
    ImportResult,
    ProgramState,
    ProgressionState,
    Tier,
    UserSettings,
    WeightUnit,
)
from .roles import get_progression_key, get_t1_role_for_day, get_t2_role_for_day

logger = logging.getLogger(__name__)


def _progression_entry(
    exercise_id: str,
    imported: ImportedExercise,
    tier: Tier,
) -> ProgressionState:
    analysis = imported.analysis
    performance = analysis.performance if analysis is not None else None
    suggestion = analysis.suggestion if analysis is not None else None
    amrap_record = 0
    if tier == "T1" and suggestion is not None and suggestion.amrap_reps:
        amrap_record = suggestion.amrap_reps

    return ProgressionState(
        exercise_id=exercise_id,
        current_weight=imported.effective_weight,
        stage=imported.effective_stage if tier != "T3" else 0,
        amrap_record=amrap_record,
        last_workout_id=performance.workout_id if performance is not None else None,
        last_workout_date=performance.workout_date if performance is not None else None,
    )


def build_program_from_import(
    import_result: ImportResult,
    unit: WeightUnit = "kg",
    settings: UserSettings | None = None,
) -> ProgramState:
    """
    Build a fresh ProgramState from an import result.

    Main lifts are keyed "{role}-{tier}", accessories by exercise id.
    Effective weight and stage follow the user override, then the history
    suggestion, then the detected value.
    """
    state = ProgramState(
        settings=settings if settings is not None else UserSettings(weight_unit=unit),
        routine_ids={day: import_result.routine_ids.get(day) for day in GZCLP_DAYS},
        created_at=datetime.now(timezone.utc).isoformat(),
    )

    def ensure_exercise(imported: ImportedExercise, role: str) -> str:
        exercise_id = imported.template_id
        if exercise_id not in state.exercises:
            state.exercises[exercise_id] = ExerciseConfig(
                id=exercise_id,
                template_id=imported.template_id,
                name=imported.name,
                role=role,
            )
        return exercise_id

    def set_progression(exercise_id: str, imported: ImportedExercise, tier: Tier) -> None:
        role = state.exercises[exercise_id].role
        key = get_progression_key(exercise_id, role, tier)
        if key in state.progression:
            logger.debug("Progression %r already set, keeping first", key)
            return
        state.progression[key] = _progression_entry(exercise_id, imported, tier)

    for day in GZCLP_DAYS:
        day_result = import_result.by_day.get(day)
        if day_result is None:
            continue

        if day_result.t1 is not None:
            exercise_id = ensure_exercise(day_result.t1, get_t1_role_for_day(day))
            set_progression(exercise_id, day_result.t1, "T1")

        if day_result.t2 is not None:
            exercise_id = ensure_exercise(day_result.t2, get_t2_role_for_day(day))
            set_progression(exercise_id, day_result.t2, "T2")

        for imported in day_result.t3s:
            exercise_id = ensure_exercise(imported, imported.role or "t3")
            set_progression(exercise_id, imported, "T3")
            if exercise_id not in state.t3_schedule[day]:
                state.t3_schedule[day].append(exercise_id)

    logger.debug(
        "Built program: %d exercises, %d progression keys",
        len(state.exercises), len(state.progression),
    )
    return state
