"""Import commands: import-routines."""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Annotated, Optional

import typer

from ...core.config import GZCLP_DAYS
from ...core.models import ImportedExercise, ImportResult, WeightUnit, Workout
from ...core.program_builder import build_program_from_import
from ...core.roles import body_region_for_role
from ...core.routine_importer import extract_from_routines
from ...core.stage_detector import detect_stage_from_workout_history
from ...core.workout_analysis import analyze_exercise_for_import, sort_workouts_chronologically
from ...io.serializers import ValidationError, load_json_file, parse_routines, parse_workouts
from .. import views
from ..app import StateOption, app, get_settings, get_store

logger = logging.getLogger(__name__)


def _unique_exercises(result: ImportResult) -> list[ImportedExercise]:
    """Every imported exercise once, in day order (shared accessories once)."""
    seen: list[ImportedExercise] = []
    for day in GZCLP_DAYS:
        day_result = result.by_day.get(day)
        if day_result is None:
            continue
        for exercise in [day_result.t1, day_result.t2, *day_result.t3s]:
            if exercise is not None and not any(exercise is s for s in seen):
                seen.append(exercise)
    return seen


def _analyze_history(result: ImportResult, workouts: list[Workout], unit: WeightUnit) -> None:
    """
    Attach history analysis to imported exercises in place.

    Stages the routine itself could not pin down are filled from the most
    recent logged session when it matches a canonical pattern.
    """
    newest_first = list(reversed(sort_workouts_chronologically(workouts)))

    for exercise in _unique_exercises(result):
        routine_id = result.routine_ids.get(exercise.day)
        if routine_id is None:
            continue

        if exercise.stage_confidence == "manual":
            stage = detect_stage_from_workout_history(
                newest_first, exercise.template_id, exercise.tier
            )
            if stage is not None:
                exercise.user_stage = stage
                logger.debug("%s: stage %d from workout history", exercise.name, stage)

        exercise.analysis = analyze_exercise_for_import(
            workouts,
            routine_id,
            exercise.template_id,
            exercise.effective_stage,
            exercise.tier,
            body_region_for_role(exercise.role),
            unit,
        )


@app.command("import-routines")
def import_routines(
    routines_json: Annotated[
        Path,
        typer.Argument(help="Hevy routines export (JSON list or {'routines': [...]})"),
    ],
    a1: Annotated[Optional[str], typer.Option("--a1", help="Routine ID for day A1")] = None,
    b1: Annotated[Optional[str], typer.Option("--b1", help="Routine ID for day B1")] = None,
    a2: Annotated[Optional[str], typer.Option("--a2", help="Routine ID for day A2")] = None,
    b2: Annotated[Optional[str], typer.Option("--b2", help="Routine ID for day B2")] = None,
    workouts_json: Annotated[
        Optional[Path],
        typer.Option("--workouts", "-w", help="Hevy workouts export used to suggest next weights"),
    ] = None,
    unit: Annotated[
        Optional[str],
        typer.Option("--unit", "-u", help="Weight unit: kg | lbs (default from settings)"),
    ] = None,
    save: Annotated[
        bool,
        typer.Option("--save", help="Build the program and save it as the current state"),
    ] = False,
    state_path: StateOption = None,
) -> None:
    """
    Import existing Hevy routines as a GZCLP program.

    The first exercise of each assigned routine becomes T1, the second T2,
    and the rest T3.
    """
    settings = get_settings()
    if unit is not None:
        if unit not in ("kg", "lbs"):
            views.print_error(f"Invalid unit: {unit!r}. Must be 'kg' or 'lbs'.")
            raise typer.Exit(1)
        settings = replace(settings, weight_unit=unit)

    assignment = {"A1": a1, "B1": b1, "A2": a2, "B2": b2}
    if not any(assignment.values()):
        views.print_error("Assign at least one routine with --a1/--b1/--a2/--b2.")
        raise typer.Exit(1)

    try:
        routines = parse_routines(load_json_file(routines_json))
        workouts = parse_workouts(load_json_file(workouts_json)) if workouts_json else []
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    missing = [f"{day}={rid}" for day, rid in assignment.items() if rid and rid not in routines]
    if missing:
        views.print_warning(f"Routine(s) not found in export: {', '.join(missing)}")

    result = extract_from_routines(routines, assignment)
    if workouts:
        _analyze_history(result, workouts, settings.weight_unit)

    views.print_import_result(result, settings.weight_unit)

    if not save:
        return

    program = build_program_from_import(result, settings.weight_unit, settings)
    if not program.exercises:
        views.print_error("Nothing to save: no exercises were imported.")
        raise typer.Exit(1)

    store = get_store(state_path)
    store.save(program)
    views.print_success(
        f"Saved {len(program.exercises)} exercises and "
        f"{len(program.progression)} progression entries to {store.state_path}"
    )
