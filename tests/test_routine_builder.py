"""
Routine payload and program builder tests.
"""

import pytest

from gzclp_sync.core.models import (
    ExerciseConfig,
    ExerciseSet,
    ProgramState,
    ProgressionState,
    RemoteRoutineState,
    Routine,
    RoutineExercise,
    UserSettings,
)
from gzclp_sync.core.program_builder import build_program_from_import
from gzclp_sync.core.push_preview import build_selectable_push_preview, update_preview_action
from gzclp_sync.core.routine_builder import (
    build_day_routine,
    build_routine_payload,
    calculate_warmup_sets,
)
from gzclp_sync.core.routine_importer import extract_from_routines
from gzclp_sync.core.units import to_kg

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _program(squat_kg: float = 100.0) -> ProgramState:
    return ProgramState(
        exercises={
            "sq": ExerciseConfig(id="sq", template_id="tmpl-sq", name="Squat", role="squat"),
            "bp": ExerciseConfig(id="bp", template_id="tmpl-bp", name="Bench Press", role="bench"),
            "curl": ExerciseConfig(id="curl", template_id="tmpl-curl", name="Curl", role="t3"),
        },
        progression={
            "squat-T1": ProgressionState(exercise_id="sq", current_weight=squat_kg),
            "bench-T2": ProgressionState(exercise_id="bp", current_weight=60.0, stage=1),
            "curl": ProgressionState(exercise_id="curl", current_weight=20.0),
        },
        t3_schedule={"A1": ["curl"], "B1": [], "A2": [], "B2": []},
    )


def _exercise(template_id: str, title: str, count: int, reps: int, weight: float) -> RoutineExercise:
    return RoutineExercise(
        exercise_template_id=template_id,
        title=title,
        sets=[ExerciseSet(type="normal", reps=reps, weight_kg=weight) for _ in range(count)],
    )


# ---------------------------------------------------------------------------
# Warmups
# ---------------------------------------------------------------------------


class TestWarmupSets:

    def test_heavy_protocol(self):
        assert calculate_warmup_sets(100.0) == [(50.0, 5), (70.0, 3), (85.0, 2)]

    def test_light_protocol_drops_duplicate_bar(self):
        # 50% of 40 is 20 kg, the same as the bar set
        assert calculate_warmup_sets(40.0) == [(20.0, 10), (30.0, 3)]

    def test_light_weights_floored_at_bar(self):
        assert calculate_warmup_sets(30.0) == [(20.0, 10), (22.5, 3)]


# ---------------------------------------------------------------------------
# Routines
# ---------------------------------------------------------------------------


class TestDayRoutine:

    def test_a1_layout(self):
        routine = build_day_routine("A1", _program())
        assert routine["title"] == "GZCLP A1"
        templates = [e["exercise_template_id"] for e in routine["exercises"]]
        assert templates == ["tmpl-sq", "tmpl-bp", "tmpl-curl"]

    def test_t1_has_warmups_then_working_sets(self):
        squat = build_day_routine("A1", _program())["exercises"][0]
        types = [s["type"] for s in squat["sets"]]
        assert types == ["warmup"] * 3 + ["normal"] * 5
        working = [s for s in squat["sets"] if s["type"] == "normal"]
        assert all(s["weight_kg"] == 100.0 and s["reps"] == 3 for s in working)
        assert squat["rest_seconds"] == 240

    def test_t2_uses_stage_scheme(self):
        bench = build_day_routine("A1", _program())["exercises"][1]
        assert len(bench["sets"]) == 3
        assert all(s["reps"] == 8 and s["type"] == "normal" for s in bench["sets"])
        assert bench["rest_seconds"] == 150

    def test_t3(self):
        curl = build_day_routine("A1", _program())["exercises"][2]
        assert [s["reps"] for s in curl["sets"]] == [15, 15, 15]
        assert curl["rest_seconds"] == 75

    def test_weights_written_with_one_decimal(self):
        squat = build_day_routine("A1", _program(to_kg(135.0, "lbs")))["exercises"][0]
        assert squat["sets"][-1]["weight_kg"] == 61.2

    def test_custom_rest_timers(self):
        program = _program()
        program.settings = UserSettings(rest_timers={"T1": 300, "T2": 120, "T3": 60})
        squat = build_day_routine("A1", program)["exercises"][0]
        assert squat["rest_seconds"] == 300

    def test_payload(self):
        payload = build_routine_payload("A1", _program(), folder_id=7)
        assert payload["routine"]["title"] == "GZCLP A1"
        assert payload["routine"]["folder_id"] == 7
        assert len(payload["routine"]["exercises"]) == 3

    def test_empty_day(self):
        assert build_day_routine("B2", _program())["exercises"] == []


class TestPayloadRespectsActions:

    def _remote(self) -> dict[str, RemoteRoutineState]:
        empty = RemoteRoutineState()
        a1 = RemoteRoutineState(
            routine_id="r-a1",
            weights={"tmpl-sq": 100.0, "tmpl-bp": 55.0, "tmpl-curl": 17.5},
        )
        return {"A1": a1, "B1": empty, "A2": empty, "B2": empty}

    def _preview(self, program: ProgramState, remote: dict[str, RemoteRoutineState]):
        preview = build_selectable_push_preview(
            remote, program.exercises, program.progression, program.t3_schedule, "kg"
        )
        preview = update_preview_action(preview, "squat-T1", "skip")
        return update_preview_action(preview, "bench-T2", "pull")

    def _working(self, exercise: dict) -> list[float]:
        return [s["weight_kg"] for s in exercise["sets"] if s["type"] == "normal"]

    def test_only_push_writes_local_weight(self):
        program = _program(squat_kg=105.0)
        remote = self._remote()
        preview = self._preview(program, remote)

        payload = build_routine_payload("A1", program, preview=preview, remote=remote["A1"])
        squat, bench, curl = payload["routine"]["exercises"]

        assert set(self._working(squat)) == {100.0}
        assert set(self._working(bench)) == {55.0}
        assert set(self._working(curl)) == {20.0}

    def test_skipped_t1_warmups_follow_remote_weight(self):
        program = _program(squat_kg=105.0)
        remote = self._remote()
        preview = self._preview(program, remote)

        squat = build_day_routine("A1", program, preview, remote["A1"])["exercises"][0]
        warmups = [s["weight_kg"] for s in squat["sets"] if s["type"] == "warmup"]
        assert warmups == [50.0, 70.0, 85.0]

    def test_skip_without_remote_weight_keeps_local(self):
        program = _program(squat_kg=105.0)
        remote = self._remote()
        preview = self._preview(program, remote)
        partial = RemoteRoutineState(routine_id="r-a1", weights={"tmpl-bp": 55.0})

        squat = build_day_routine("A1", program, preview, partial)["exercises"][0]
        assert set(self._working(squat)) == {105.0}

    def test_no_preview_pushes_everything(self):
        program = _program(squat_kg=105.0)
        squat = build_day_routine("A1", program, remote=self._remote()["A1"])["exercises"][0]
        assert set(self._working(squat)) == {105.0}


# ---------------------------------------------------------------------------
# Program builder
# ---------------------------------------------------------------------------


class TestProgramBuilder:

    def _import(self):
        curl = _exercise("tmpl-curl", "Curl", 3, 15, 12.5)
        routines = {
            "r-a1": Routine(
                id="r-a1",
                title="A1",
                exercises=[
                    _exercise("tmpl-sq", "Squat", 5, 3, 100.0),
                    _exercise("tmpl-bp", "Bench Press", 3, 10, 60.0),
                    curl,
                ],
            ),
            "r-b1": Routine(
                id="r-b1",
                title="B1",
                exercises=[
                    _exercise("tmpl-ohp", "Overhead Press", 6, 2, 40.0),
                    _exercise("tmpl-dl", "Deadlift", 3, 10, 100.0),
                    curl,
                ],
            ),
        }
        return extract_from_routines(routines, {"A1": "r-a1", "B1": "r-b1"})

    def test_exercises_deduplicated(self):
        program = build_program_from_import(self._import())
        assert sorted(program.exercises) == ["tmpl-bp", "tmpl-curl", "tmpl-dl", "tmpl-ohp", "tmpl-sq"]
        assert program.exercises["tmpl-sq"].role == "squat"
        assert program.exercises["tmpl-curl"].role == "t3"

    def test_progression_keys(self):
        program = build_program_from_import(self._import())
        assert sorted(program.progression) == [
            "bench-T2",
            "deadlift-T2",
            "ohp-T1",
            "squat-T1",
            "tmpl-curl",
        ]
        assert program.progression["ohp-T1"].stage == 1
        assert program.progression["squat-T1"].current_weight == 100.0

    def test_t3_schedule_and_routine_ids(self):
        program = build_program_from_import(self._import())
        assert program.t3_schedule == {"A1": ["tmpl-curl"], "B1": ["tmpl-curl"], "A2": [], "B2": []}
        assert program.routine_ids["A1"] == "r-a1"
        assert program.routine_ids["A2"] is None

    def test_user_overrides_win(self):
        result = self._import()
        result.by_day["A1"].t1.user_weight = 110.0
        result.by_day["A1"].t1.user_stage = 2
        program = build_program_from_import(result)
        assert program.progression["squat-T1"].current_weight == 110.0
        assert program.progression["squat-T1"].stage == 2
        assert program.progression["squat-T1"].base_weight == 110.0

    def test_unit_recorded(self):
        program = build_program_from_import(self._import(), "lbs")
        assert program.settings.weight_unit == "lbs"

    def test_built_program_round_trips_to_routines(self):
        program = build_program_from_import(self._import())
        routine = build_day_routine("B1", program)
        assert [e["exercise_template_id"] for e in routine["exercises"]] == [
            "tmpl-ohp",
            "tmpl-dl",
            "tmpl-curl",
        ]


def test_rest_timers_default():
    assert UserSettings().rest_timers == {"T1": 240, "T2": 150, "T3": 75}


def test_invalid_unit():
    with pytest.raises(ValueError):
        UserSettings(weight_unit="stone")
