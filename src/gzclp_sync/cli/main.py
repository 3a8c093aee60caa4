"""
CLI entry point using Typer.

Provides commands for the GZCLP program:
- import-routines: Import Hevy routines as a GZCLP program
- status: Show current weights and schemes
- analyze: Turn logged workouts into progression changes
- apply-pending: Accept queued changes
- preview: Diff local progression against Hevy routines
"""

from .app import app
from .commands import importing, progression, sync  # noqa: F401  (registers commands)

if __name__ == "__main__":
    app()
