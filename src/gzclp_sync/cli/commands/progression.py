"""Progression commands: status, analyze, apply-pending, history."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer

from ...core.config import DAY_CYCLE, GZCLP_DAYS
from ...core.history import record_multiple_changes
from ...core.models import PendingChange
from ...core.progression import (
    apply_all_pending_changes,
    create_pending_changes_from_analysis,
)
from ...core.workout_analysis import (
    analyze_workout,
    filter_new_workouts,
    infer_workout_day,
    sort_workouts_chronologically,
)
from ...io.serializers import ValidationError, load_json_file, parse_workouts
from .. import views
from ..app import StateOption, app, get_store, load_program

logger = logging.getLogger(__name__)


@app.command("status")
def status(state_path: StateOption = None) -> None:
    """
    Show current weights and schemes for every day.
    """
    store = get_store(state_path)
    program = load_program(store)
    views.print_program_status(program)


@app.command("analyze")
def analyze(
    workouts_json: Annotated[
        Path,
        typer.Argument(help="Hevy workouts export (JSON list or {'workouts': [...]})"),
    ],
    day: Annotated[
        Optional[str],
        typer.Option("--day", "-d", help="GZCLP day of the workouts when it cannot be inferred"),
    ] = None,
    apply: Annotated[
        bool,
        typer.Option("--apply", help="Apply the resulting changes instead of queuing them"),
    ] = False,
    state_path: StateOption = None,
) -> None:
    """
    Analyze workouts logged since the last sync and suggest progression.

    The day of each workout is taken from its routine; --day overrides it.
    Without --apply, changes are queued as pending for later review.  With
    --apply, changes already in the queue are applied first, then the new ones.
    """
    if day is not None and day not in GZCLP_DAYS:
        views.print_error(f"Invalid day: {day!r}. Must be one of {', '.join(GZCLP_DAYS)}")
        raise typer.Exit(1)

    store = get_store(state_path)
    program = load_program(store)
    unit = program.settings.weight_unit

    try:
        workouts = parse_workouts(load_json_file(workouts_json))
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    new_workouts = filter_new_workouts(
        sort_workouts_chronologically(workouts), program.last_processed_workout_id
    )
    if not new_workouts:
        views.print_info("No new workouts since the last sync.")
        return

    # Queued changes are already accepted as the starting point, and later
    # workouts build on earlier ones.
    queued = list(program.pending_changes)
    working = apply_all_pending_changes(dict(program.progression), queued)
    changes: list[PendingChange] = []
    for workout in new_workouts:
        workout_day = day or infer_workout_day(workout, program.routine_ids)
        if workout_day is None:
            logger.info("Workout %s: day unknown, main lifts skipped", workout.id)
        results = analyze_workout(workout, program.exercises, working, workout_day)
        workout_changes = create_pending_changes_from_analysis(
            results, program.exercises, working, unit
        )
        working = apply_all_pending_changes(working, workout_changes)
        changes.extend(workout_changes)
        if workout_day is not None:
            program.current_day = DAY_CYCLE[workout_day]

    program.last_processed_workout_id = new_workouts[-1].id
    views.print_pending_changes(changes, unit)

    if apply:
        applied = queued + changes
        program.progression = working
        program.history = record_multiple_changes(program.history, applied, program.exercises)
        program.pending_changes = []
        if queued:
            views.print_info(f"Included {len(queued)} change(s) that were already queued.")
        views.print_success(f"Applied {len(applied)} change(s).")
    else:
        program.pending_changes.extend(changes)
        if changes:
            views.print_info("Changes queued. Run 'apply-pending' to accept them.")

    store.save(program)


@app.command("apply-pending")
def apply_pending(state_path: StateOption = None) -> None:
    """
    Accept all queued progression changes.
    """
    store = get_store(state_path)
    program = load_program(store)

    if not program.pending_changes:
        views.print_info("No pending changes.")
        return

    views.print_pending_changes(program.pending_changes, program.settings.weight_unit)
    program.progression = apply_all_pending_changes(program.progression, program.pending_changes)
    program.history = record_multiple_changes(
        program.history, program.pending_changes, program.exercises
    )
    count = len(program.pending_changes)
    program.pending_changes = []
    store.save(program)
    views.print_success(f"Applied {count} change(s).")


@app.command("history")
def history(
    key: Annotated[
        Optional[str],
        typer.Argument(help="Progression key (e.g. squat-T1); omit to list recorded keys"),
    ] = None,
    state_path: StateOption = None,
) -> None:
    """
    Show recorded progression history.
    """
    store = get_store(state_path)
    program = load_program(store)

    if not program.history:
        views.print_info("No progression history yet.")
        return

    if key is None:
        for recorded in sorted(program.history):
            views.console.print(f"{recorded}: {len(program.history[recorded].entries)} workout(s)")
        return

    if key not in program.history:
        views.print_error(f"No history for {key!r}")
        raise typer.Exit(1)

    views.print_exercise_history(program.history[key], program.settings.weight_unit)
