"""
Serializer, state store and settings loader tests.
"""

import tempfile
import warnings
from pathlib import Path

import pytest

from gzclp_sync.core.engine.config_loader import load_settings
from gzclp_sync.core.models import (
    ExerciseConfig,
    ExerciseHistory,
    HistoryEntry,
    PendingChange,
    ProgramState,
    ProgressionState,
    UserSettings,
    WeightDiscrepancy,
)
from gzclp_sync.io.serializers import (
    ValidationError,
    dict_to_program_state,
    dict_to_routine,
    dict_to_workout,
    parse_routines,
    parse_workouts,
)
from gzclp_sync.io.state_store import StateStore


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


def _routine_dict(routine_id: str = "r-a1") -> dict:
    return {
        "id": routine_id,
        "title": "GZCLP A1",
        "updated_at": "2024-03-01T10:00:00Z",
        "exercises": [
            {
                "exercise_template_id": "tmpl-sq",
                "title": "Squat (Barbell)",
                "sets": [
                    {"type": "warmup", "reps": 5, "weight_kg": 50},
                    {"type": "normal", "reps": 3, "weight_kg": 100},
                    {"type": "normal", "reps": None, "weight_kg": None},
                ],
            }
        ],
    }


def _program() -> ProgramState:
    change = PendingChange(
        id="c1",
        exercise_id="sq",
        exercise_name="T1 Squat",
        tier="T1",
        type="progress",
        progression_key="squat-T1",
        current_weight=100.0,
        current_stage=0,
        new_weight=105.0,
        new_stage=0,
        new_scheme="5x3+",
        reason="Completed 5x3+ at 100 kg. Adding 5 kg.",
        workout_id="w1",
        workout_date="2024-03-01T10:00:00Z",
        created_at="2024-03-01T12:00:00+00:00",
        success=True,
        day="A1",
        discrepancy=WeightDiscrepancy(stored_weight=97.5, actual_weight=100.0),
    )
    return ProgramState(
        exercises={"sq": ExerciseConfig(id="sq", template_id="tmpl-sq", name="Squat", role="squat")},
        progression={"squat-T1": ProgressionState(exercise_id="sq", current_weight=100.0, amrap_record=7)},
        t3_schedule={"A1": [], "B1": [], "A2": [], "B2": []},
        routine_ids={"A1": "r-a1", "B1": None, "A2": None, "B2": None},
        settings=UserSettings(weight_unit="lbs"),
        current_day="B1",
        pending_changes=[change],
        last_processed_workout_id="w1",
        created_at="2024-03-01T09:00:00+00:00",
        history={
            "squat-T1": ExerciseHistory(
                progression_key="squat-T1",
                exercise_name="Squat",
                tier="T1",
                role="squat",
                entries=[
                    HistoryEntry(
                        date="2024-02-26T10:00:00Z",
                        workout_id="w0",
                        weight=97.5,
                        stage=0,
                        tier="T1",
                        success=True,
                        change_type="progress",
                        amrap_reps=5,
                    )
                ],
            )
        },
    )


class TestHevyRecords:

    def test_routine(self):
        routine = dict_to_routine(_routine_dict())
        assert routine.id == "r-a1"
        sets = routine.exercises[0].sets
        assert [s.type for s in sets] == ["warmup", "normal", "normal"]
        assert sets[1].weight_kg == 100.0
        assert sets[2].reps is None

    def test_routines_accept_list_or_page(self):
        assert list(parse_routines([_routine_dict("a"), _routine_dict("b")])) == ["a", "b"]
        assert list(parse_routines({"routines": [_routine_dict("a")]})) == ["a"]

    def test_workout(self):
        workout = dict_to_workout(
            {"id": "w1", "title": "A1", "start_time": "2024-03-01T10:00:00Z", "routine_id": "r-a1", "exercises": []}
        )
        assert workout.routine_id == "r-a1"
        assert parse_workouts({"workouts": []}) == []

    def test_missing_id(self):
        with pytest.raises(ValidationError):
            dict_to_routine({"title": "No id"})

    def test_workout_without_start_time(self):
        with pytest.raises(ValidationError):
            dict_to_workout({"id": "w1"})

    def test_negative_weight(self):
        data = _routine_dict()
        data["exercises"][0]["sets"][1]["weight_kg"] = -5
        with pytest.raises(ValidationError):
            dict_to_routine(data)

    def test_not_a_list(self):
        with pytest.raises(ValidationError):
            parse_routines({"items": []})


class TestProgramState:

    def test_invalid_stage_reported_as_validation_error(self):
        data = {
            "progression": {"squat-T1": {"exercise_id": "sq", "current_weight": 100, "stage": 5}},
        }
        with pytest.raises(ValidationError):
            dict_to_program_state(data)

    def test_missing_days_filled(self):
        state = dict_to_program_state({"t3_schedule": {"A1": ["curl"]}})
        assert state.t3_schedule == {"A1": ["curl"], "B1": [], "A2": [], "B2": []}
        assert state.routine_ids == {"A1": None, "B1": None, "A2": None, "B2": None}
        assert state.current_day == "A1"

    def test_malformed_discrepancy_reported_as_validation_error(self):
        change = {
            "id": "c1", "exercise_id": "sq", "exercise_name": "Squat", "tier": "T1",
            "type": "progress", "progression_key": "squat-T1", "current_weight": 100,
            "current_stage": 0, "new_weight": 105, "new_stage": 0, "new_scheme": "5x3+",
            "reason": "", "workout_id": "w1", "workout_date": "2024-03-01T10:00:00Z",
            "created_at": "", "success": True,
            "discrepancy": {"stored_weight": 97.5, "logged": 100},
        }
        with pytest.raises(ValidationError):
            dict_to_program_state({"pending_changes": [change]})

    def test_history_without_entries(self):
        state = dict_to_program_state(
            {"history": {"curl": {"progression_key": "curl", "exercise_name": "Curl", "tier": "T3"}}}
        )
        assert state.history["curl"].entries == []
        assert state.history["curl"].role is None

    def test_invalid_history_entry(self):
        entry = {
            "date": "2024-03-01", "workout_id": "w1", "weight": 100, "stage": 0,
            "tier": "T1", "success": True, "change_type": "levelled_up",
        }
        data = {
            "history": {
                "squat-T1": {
                    "progression_key": "squat-T1", "exercise_name": "Squat",
                    "tier": "T1", "entries": [entry],
                }
            }
        }
        with pytest.raises(ValidationError):
            dict_to_program_state(data)


class TestStateStore:

    def test_save_and_load(self, temp_dir):
        store = StateStore(temp_dir / "nested" / "state.json")
        assert not store.exists()
        store.save(_program())
        assert store.exists()
        assert store.load() == _program()

    def test_load_missing(self, temp_dir):
        with pytest.raises(FileNotFoundError):
            StateStore(temp_dir / "state.json").load()

    def test_load_corrupt(self, temp_dir):
        path = temp_dir / "state.json"
        path.write_text("{not json")
        with pytest.raises(ValidationError):
            StateStore(path).load()

    def test_clear(self, temp_dir):
        store = StateStore(temp_dir / "state.json")
        store.save(_program())
        store.clear()
        assert not store.exists()


class TestSettingsLoader:

    def test_defaults(self, temp_dir):
        settings = load_settings(temp_dir / "missing.yaml")
        assert settings == UserSettings()

    def test_partial_override(self, temp_dir):
        path = temp_dir / "settings.yaml"
        path.write_text("weight_unit: lbs\nrest_timers:\n  T1: 300\n")
        settings = load_settings(path)
        assert settings.weight_unit == "lbs"
        assert settings.rest_timers == {"T1": 300, "T2": 150, "T3": 75}

    def test_invalid_override_warns_and_uses_defaults(self, temp_dir):
        path = temp_dir / "settings.yaml"
        path.write_text("weight_unit: stone\n")
        with pytest.warns(UserWarning, match="Ignoring settings override"):
            settings = load_settings(path)
        assert settings.weight_unit == "kg"

    def test_unparseable_override(self, temp_dir):
        path = temp_dir / "settings.yaml"
        path.write_text("rest_timers: [unclosed\n")
        with warnings.catch_warnings(record=True) as caught:
            warnings.simplefilter("always")
            settings = load_settings(path)
        assert settings == UserSettings()
        assert len(caught) == 1
