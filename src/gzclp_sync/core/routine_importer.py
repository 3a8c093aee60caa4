"""
Routine importer: extract GZCLP program state from assigned Hevy routines.

Each of the four days may have a routine assigned.  Within a day the first
two working exercises become T1 and T2 and everything after them is a T3
accessory.  Warmup-only exercises are skipped before positions are counted.
Accessories recurring on several days are deduplicated by template id and
shared by reference, so an edit made on one day is seen on all of them.
"""

import logging

from .config import GZCLP_DAYS, T1_MAPPING, T2_MAPPING, WARMUP_TITLE_KEYWORDS
from .models import (
    AvailableRoutine,
    Day,
    DayImportResult,
    ImportedExercise,
    ImportResult,
    ImportWarning,
    Routine,
    RoutineExercise,
    Tier,
)
from .stage_detector import detect_stage, extract_weight, modal_reps, working_sets

logger = logging.getLogger(__name__)


def to_available_routine(routine: Routine) -> AvailableRoutine:
    """Summarize a routine for display in a selection list."""
    return AvailableRoutine(
        id=routine.id,
        title=routine.title,
        exercise_count=len(routine.exercises),
        exercise_preview=tuple(ex.title for ex in routine.exercises[:3]),
        updated_at=routine.updated_at,
    )


def is_warmup_only_exercise(exercise: RoutineExercise) -> bool:
    """
    True if the exercise carries no working sets and looks like a warmup.

    An exercise with at least one normal set is never warmup-only, whatever
    its title.  Otherwise it is warmup-only when every set is a warmup set or
    its title contains a warmup keyword (case-insensitive).
    """
    if any(s.type == "normal" for s in exercise.sets):
        return False
    if exercise.sets and all(s.type == "warmup" for s in exercise.sets):
        return True
    title = exercise.title.lower()
    return any(keyword in title for keyword in WARMUP_TITLE_KEYWORDS)


def _find_duplicate_routines(assignment: dict[str, str | None]) -> list[ImportWarning]:
    days_by_id: dict[str, list[str]] = {}
    for day in GZCLP_DAYS:
        routine_id = assignment.get(day)
        if routine_id:
            days_by_id.setdefault(routine_id, []).append(day)

    return [
        ImportWarning(
            type="duplicate_routine",
            message=f"Same routine selected for {' and '.join(days)}.",
        )
        for days in days_by_id.values()
        if len(days) > 1
    ]


def _extract_exercise(
    exercise: RoutineExercise,
    day: Day,
    tier: Tier,
    role: str,
    warnings: list[ImportWarning],
) -> ImportedExercise:
    """Build an ImportedExercise, appending any warnings it raises."""
    weight = extract_weight(exercise.sets)
    normal = working_sets(exercise.sets)

    if tier == "T3":
        detected = detect_stage(exercise.sets, "T3")
        stage = 0
        confidence = "high"
        scheme = detected.rep_scheme if detected else f"{len(normal)}x0"
    else:
        detected = detect_stage(exercise.sets, tier)
        if detected is None:
            warnings.append(
                ImportWarning(
                    type="stage_unknown",
                    day=day,
                    message=(
                        f"{day} {tier} {exercise.title}: could not detect stage. "
                        "Please select manually."
                    ),
                )
            )
            stage = 0
            confidence = "manual"
            scheme = f"{len(normal)}x{modal_reps([s.reps for s in normal])}"  # type: ignore[misc]
        else:
            stage = detected.stage
            confidence = detected.confidence
            scheme = detected.rep_scheme

    if weight == 0:
        warnings.append(
            ImportWarning(
                type="weight_null",
                day=day,
                message=f"{day} {tier} {exercise.title}: no weight found. Set to 0.",
            )
        )

    return ImportedExercise(
        template_id=exercise.exercise_template_id,
        name=exercise.title,
        tier=tier,
        day=day,
        detected_weight=weight,
        detected_stage=stage,
        stage_confidence=confidence,  # type: ignore[arg-type]
        original_set_count=len(normal),
        original_rep_scheme=scheme,
        role=role,
    )


def extract_from_routines(
    routines: dict[str, Routine],
    assignment: dict[str, str | None],
) -> ImportResult:
    """
    Extract per-day T1/T2/T3 exercises from the routines assigned to each day.

    Args:
        routines: Routine id -> Routine
        assignment: Day ("A1", "B1", "A2", "B2") -> routine id or None

    Returns:
        ImportResult with an entry for every day, warnings for review, and the
        assignment that produced it
    """
    warnings = _find_duplicate_routines(assignment)
    by_day: dict[str, DayImportResult] = {day: DayImportResult() for day in GZCLP_DAYS}

    # template id -> main-lift role, fixed at first encounter
    main_roles: dict[str, str] = {}
    # template id -> the one shared accessory instance
    shared_t3s: dict[str, ImportedExercise] = {}

    for day in GZCLP_DAYS:
        routine_id = assignment.get(day)
        if not routine_id:
            continue
        routine = routines.get(routine_id)
        if routine is None:
            logger.debug("Routine %s for %s not supplied; skipping day", routine_id, day)
            continue

        usable: list[RoutineExercise] = []
        for exercise in routine.exercises:
            if is_warmup_only_exercise(exercise):
                logger.debug("%s: skipping warmup-only exercise %r", day, exercise.title)
                continue
            usable.append(exercise)

        day_result = by_day[day]

        if not usable:
            warnings.append(
                ImportWarning(
                    type="no_t1",
                    day=day,
                    message=(
                        f"{day}: no T1 found. All {len(routine.exercises)} exercise(s) "
                        "in the routine are warmup-only."
                    ),
                )
            )
            continue

        for tier, exercise in zip(("T1", "T2"), usable[:2]):
            day_role = T1_MAPPING[day] if tier == "T1" else T2_MAPPING[day]
            role = main_roles.setdefault(exercise.exercise_template_id, day_role)
            imported = _extract_exercise(exercise, day, tier, role, warnings)  # type: ignore[arg-type]
            if tier == "T1":
                day_result.t1 = imported
            else:
                day_result.t2 = imported

        if len(usable) < 2:
            warnings.append(
                ImportWarning(
                    type="no_t2",
                    day=day,
                    message=(
                        f"{day}: no T2 exercise found. Only {len(usable)} usable "
                        "exercise(s) in routine."
                    ),
                )
            )

        for exercise in usable[2:]:
            template_id = exercise.exercise_template_id
            shared = shared_t3s.get(template_id)
            if shared is None:
                shared = _extract_exercise(exercise, day, "T3", "t3", warnings)
                shared_t3s[template_id] = shared
            else:
                logger.debug("%s: reusing accessory %r first seen on %s", day, shared.name, shared.day)
            if not any(t3 is shared for t3 in day_result.t3s):
                day_result.t3s.append(shared)

    return ImportResult(
        by_day=by_day,
        warnings=warnings,
        routine_ids={day: assignment.get(day) for day in GZCLP_DAYS},
    )
