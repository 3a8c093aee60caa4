"""
CLI view formatters using Rich for pretty console output.

Handles table formatting for import review, program status, pending changes
and push previews.
"""

from rich.console import Console
from rich.table import Table

from ..core.config import GZCLP_DAYS, STAGE_DISPLAY, get_rep_scheme
from ..core.models import (
    ExerciseHistory,
    ImportResult,
    PendingChange,
    ProgramState,
    SelectablePushPreview,
    WeightUnit,
)
from ..core.roles import get_exercises_for_day, get_progression_key
from ..core.units import display_weight, format_weight

console = Console()

ACTION_STYLES = {"push": "green", "pull": "cyan", "skip": "dim"}
CHANGE_STYLES = {
    "progress": "green",
    "stage_change": "yellow",
    "deload": "red",
    "repeat": "dim",
}


def _weight_or_dash(weight: float | None, unit: WeightUnit) -> str:
    if weight is None:
        return "-"
    return format_weight(weight, unit)


def print_import_result(result: ImportResult, unit: WeightUnit) -> None:
    """
    Print the per-day import review followed by any warnings.

    Args:
        result: Output of extract_from_routines
        unit: Display unit for detected weights
    """
    table = Table(title="Imported Routines", show_header=True, header_style="bold")
    table.add_column("Day", style="cyan")
    table.add_column("Tier", style="magenta")
    table.add_column("Exercise")
    table.add_column("Weight", justify="right")
    table.add_column("Scheme")
    table.add_column("Stage")

    for day in GZCLP_DAYS:
        day_result = result.by_day.get(day)
        if day_result is None:
            continue
        slots = [("T1", day_result.t1), ("T2", day_result.t2)]
        slots.extend(("T3", t3) for t3 in day_result.t3s)
        for tier, exercise in slots:
            if exercise is None:
                continue
            if exercise.stage_confidence == "manual":
                stage = "[yellow]?[/yellow]"
            else:
                stage = STAGE_DISPLAY[exercise.effective_stage] if tier != "T3" else "-"
            table.add_row(
                day,
                tier,
                exercise.name,
                display_weight(exercise.effective_weight, unit),
                exercise.original_rep_scheme,
                stage,
            )

    console.print(table)

    for warning in result.warnings:
        prefix = f"{warning.day}: " if warning.day else ""
        print_warning(f"{prefix}{warning.message}")


def print_program_status(state: ProgramState) -> None:
    """Print stored progression grouped by day."""
    unit = state.settings.weight_unit
    table = Table(title="GZCLP Program", show_header=True, header_style="bold")
    table.add_column("Day", style="cyan")
    table.add_column("Tier", style="magenta")
    table.add_column("Exercise")
    table.add_column("Weight", justify="right", style="bold")
    table.add_column("Scheme")
    table.add_column("AMRAP PR", justify="right")

    for day in GZCLP_DAYS:
        slots = get_exercises_for_day(state.exercises, day, state.t3_schedule)
        ordered = [("T1", slots.t1), ("T2", slots.t2)] + [("T3", ex) for ex in slots.t3]
        marker = " *" if day == state.current_day else ""
        for tier, exercise in ordered:
            if exercise is None:
                continue
            progression = state.progression.get(
                get_progression_key(exercise.id, exercise.role, tier)
            )
            if progression is None:
                continue
            table.add_row(
                f"{day}{marker}",
                tier,
                exercise.name,
                display_weight(progression.current_weight, unit),
                get_rep_scheme(tier, progression.stage).display,
                str(progression.amrap_record) if tier == "T1" and progression.amrap_record else "-",
            )

    console.print(table)
    if state.pending_changes:
        print_info(f"{len(state.pending_changes)} pending change(s) awaiting review.")


def print_pending_changes(changes: list[PendingChange], unit: WeightUnit) -> None:
    """
    Print pending progression changes.

    Args:
        changes: Changes to display
        unit: Display unit
    """
    if not changes:
        console.print("[yellow]No progression changes.[/yellow]")
        return

    table = Table(title="Pending Changes", show_header=True, header_style="bold")
    table.add_column("Exercise")
    table.add_column("Change")
    table.add_column("Weight", justify="right")
    table.add_column("Scheme")
    table.add_column("Reason")

    for change in changes:
        style = CHANGE_STYLES.get(change.type, "")
        weight = (
            f"{display_weight(change.current_weight, unit)} -> "
            f"{display_weight(change.new_weight, unit)}"
        )
        label = change.type.replace("_", " ")
        if change.new_pr:
            label += " (PR)"
        table.add_row(
            change.exercise_name,
            f"[{style}]{label}[/{style}]" if style else label,
            weight,
            change.new_scheme,
            change.reason,
        )

    console.print(table)

    for change in changes:
        if change.discrepancy is not None:
            print_warning(
                f"{change.exercise_name}: logged "
                f"{display_weight(change.discrepancy.actual_weight, unit)} but stored "
                f"{display_weight(change.discrepancy.stored_weight, unit)}"
            )


def print_exercise_history(history: ExerciseHistory, unit: WeightUnit) -> None:
    """
    Print the recorded progression history of one progression key.

    Args:
        history: History to display, oldest entry first
        unit: Display unit
    """
    table = Table(
        title=f"History: {history.exercise_name} ({history.tier})",
        show_header=True,
        header_style="bold",
    )
    table.add_column("Date")
    table.add_column("Weight", justify="right")
    table.add_column("Stage")
    table.add_column("Result")
    table.add_column("AMRAP", justify="right")

    for entry in history.entries:
        style = CHANGE_STYLES.get(entry.change_type, "")
        label = entry.change_type.replace("_", " ")
        table.add_row(
            entry.date[:10],
            display_weight(entry.weight, unit),
            STAGE_DISPLAY[entry.stage] if entry.tier != "T3" else "-",
            f"[{style}]{label}[/{style}]" if style else label,
            str(entry.amrap_reps) if entry.amrap_reps is not None else "-",
        )

    console.print(table)


def print_push_preview(preview: SelectablePushPreview, unit: WeightUnit) -> None:
    """Print the push preview table and action counts."""
    table = Table(title="Routine Sync Preview", show_header=True, header_style="bold")
    table.add_column("Day", style="cyan")
    table.add_column("Key", style="dim")
    table.add_column("Exercise")
    table.add_column("Hevy", justify="right")
    table.add_column("Local", justify="right", style="bold")
    table.add_column("Action")

    for day in preview.days:
        day_label = day.day if day.routine_exists else f"{day.day} (new)"
        for ex in day.exercises:
            style = ACTION_STYLES[ex.action]
            table.add_row(
                day_label,
                ex.progression_key,
                f"{ex.tier} {ex.name}",
                _weight_or_dash(ex.old_weight, unit),
                format_weight(ex.new_weight, unit),
                f"[{style}]{ex.action}[/{style}]",
            )

    console.print(table)
    console.print(
        f"{preview.total_changes} changed | "
        f"[green]{preview.push_count} push[/green] | "
        f"[cyan]{preview.pull_count} pull[/cyan] | "
        f"[dim]{preview.skip_count} skip[/dim]"
    )
    if not preview.has_any_routines:
        print_info("No GZCLP routines exist in Hevy yet; every day will be created.")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")
