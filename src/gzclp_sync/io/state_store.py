"""
JSON storage for program state.

A single state.json holds the configured exercises, progression, schedule
and pending changes.
"""

import json
import os
from pathlib import Path

from ..core.models import ProgramState
from .serializers import ValidationError, dict_to_program_state, program_state_to_dict


class StateStore:
    """
    Manages the program state file.

    Writes go through a temporary sibling file and a rename so a crash never
    leaves a half-written state behind.
    """

    def __init__(self, state_path: str | Path):
        """
        Initialize the state store.

        Args:
            state_path: Path to the JSON state file
        """
        self.state_path = Path(state_path)

    def exists(self) -> bool:
        """Check if the state file exists."""
        return self.state_path.exists()

    def load(self) -> ProgramState:
        """
        Load program state.

        Raises:
            FileNotFoundError: If no state has been saved yet
            ValidationError: If the file is not valid program state
        """
        if not self.state_path.exists():
            raise FileNotFoundError(f"No program state at {self.state_path}")

        try:
            with open(self.state_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValidationError(f"{self.state_path}: invalid JSON ({e})") from e
        return dict_to_program_state(data)

    def save(self, state: ProgramState) -> None:
        """Write program state, creating parent directories if needed."""
        self.state_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.state_path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(program_state_to_dict(state), f, indent=2)
        os.replace(tmp_path, self.state_path)

    def clear(self) -> None:
        """Delete the state file if present."""
        if self.state_path.exists():
            self.state_path.unlink()


def get_default_state_path() -> Path:
    """
    Get the default state file path.

    Returns:
        ~/.gzclp-sync/state.json
    """
    return Path.home() / ".gzclp-sync" / "state.json"
