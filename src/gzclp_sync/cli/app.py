"""Shared Typer app object, shared option types, and store utility."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.logging import RichHandler

from ..core.engine.config_loader import load_settings
from ..core.models import ProgramState, UserSettings
from ..io.serializers import ValidationError
from ..io.state_store import StateStore, get_default_state_path
from . import views

# Shared --state option type used across all commands
StateOption = Annotated[
    Optional[Path],
    typer.Option("--state", "-s", help="Path to program state JSON (default: ~/.gzclp-sync/state.json)"),
]

app = typer.Typer(
    name="gzclp-sync",
    help="GZCLP progression tracker that syncs with Hevy routine exports.",
    no_args_is_help=True,
)


@app.callback()
def main_callback(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging from the progression engine"),
    ] = False,
) -> None:
    """
    GZCLP tracker: import routines, analyze workouts, preview routine updates.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=views.console, show_path=False)],
        force=True,
    )


def get_store(state_path: Path | None) -> StateStore:
    """Get state store from path or default location."""
    if state_path is None:
        state_path = get_default_state_path()
    return StateStore(state_path)


def load_program(store: StateStore) -> ProgramState:
    """Load program state or exit with a readable error."""
    if not store.exists():
        views.print_error(f"No program state found at {store.state_path}")
        views.print_info("Run 'import-routines ... --save' first.")
        raise typer.Exit(1)
    try:
        return store.load()
    except (FileNotFoundError, ValidationError) as e:
        views.print_error(str(e))
        raise typer.Exit(1)


def get_settings() -> UserSettings:
    return load_settings()
