"""Sync commands: preview."""

import json
from pathlib import Path
from typing import Annotated, Optional

import typer

from ...core.config import GZCLP_DAYS
from ...core.models import RemoteRoutineState
from ...core.push_preview import (
    apply_pull_actions,
    build_selectable_push_preview,
    keys_with_action,
    remote_state_from_routine,
    update_preview_action,
)
from ...core.routine_builder import build_routine_payload
from ...io.serializers import ValidationError, load_json_file, parse_routines
from .. import views
from ..app import StateOption, app, get_store, load_program


@app.command("preview")
def preview(
    remote_json: Annotated[
        Path,
        typer.Argument(help="Current Hevy routines (JSON list or {'routines': [...]})"),
    ],
    pull: Annotated[
        Optional[list[str]],
        typer.Option("--pull", help="Adopt the Hevy weight for this key; repeatable"),
    ] = None,
    skip: Annotated[
        Optional[list[str]],
        typer.Option("--skip", help="Leave this key alone; repeatable"),
    ] = None,
    push: Annotated[
        Optional[list[str]],
        typer.Option("--push", help="Write the local weight for this key; repeatable"),
    ] = None,
    apply_pulls: Annotated[
        bool,
        typer.Option("--apply-pulls", help="Save pulled Hevy weights into local progression"),
    ] = False,
    payload_out: Annotated[
        Optional[Path],
        typer.Option("--payload-out", "-o", help="Write routine payloads for days with pushes"),
    ] = None,
    state_path: StateOption = None,
) -> None:
    """
    Compare local progression with the routines currently in Hevy.

    Changed exercises default to push and unchanged ones to skip.
    """
    store = get_store(state_path)
    program = load_program(store)
    unit = program.settings.weight_unit

    try:
        routines = parse_routines(load_json_file(remote_json))
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    remote_by_day = {}
    for day in GZCLP_DAYS:
        routine_id = program.routine_ids.get(day)
        routine = routines.get(routine_id) if routine_id else None
        remote_by_day[day] = (
            remote_state_from_routine(routine) if routine is not None else RemoteRoutineState()
        )

    result = build_selectable_push_preview(
        remote_by_day, program.exercises, program.progression, program.t3_schedule, unit
    )

    known_keys = {ex.progression_key for d in result.days for ex in d.exercises}
    for action, keys in (("pull", pull), ("skip", skip), ("push", push)):
        for key in keys or []:
            if key not in known_keys:
                views.print_warning(f"Unknown progression key: {key}")
                continue
            result = update_preview_action(result, key, action)

    views.print_push_preview(result, unit)

    if apply_pulls and result.pull_count:
        program.progression = apply_pull_actions(
            result, remote_by_day, program.exercises, program.progression
        )
        store.save(program)
        views.print_success(f"Pulled {', '.join(keys_with_action(result, 'pull'))} from Hevy.")

    if payload_out is not None:
        push_days = [
            d.day for d in result.days if any(ex.action == "push" for ex in d.exercises)
        ]
        payloads = {
            day: {
                "routine_id": program.routine_ids.get(day),
                "payload": build_routine_payload(
                    day, program, preview=result, remote=remote_by_day[day]
                ),
            }
            for day in push_days
        }
        payload_out.parent.mkdir(parents=True, exist_ok=True)
        with open(payload_out, "w", encoding="utf-8") as f:
            json.dump(payloads, f, indent=2)
        views.print_success(f"Wrote {len(payloads)} routine payload(s) to {payload_out}")
