"""
Routine importer tests: tier assignment, roles, warmup skipping, accessory
sharing and import warnings.
"""

from gzclp_sync.core.models import ExerciseSet, Routine, RoutineExercise
from gzclp_sync.core.routine_importer import (
    extract_from_routines,
    is_warmup_only_exercise,
    to_available_routine,
)

# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def _exercise(
    template_id: str,
    title: str,
    count: int = 3,
    reps: int | None = 10,
    weight: float | None = 60.0,
    set_type: str = "normal",
) -> RoutineExercise:
    return RoutineExercise(
        exercise_template_id=template_id,
        title=title,
        sets=[ExerciseSet(type=set_type, reps=reps, weight_kg=weight) for _ in range(count)],
    )


def _squat() -> RoutineExercise:
    return _exercise("tmpl-sq", "Squat (Barbell)", 5, 3, 100.0)


def _bench() -> RoutineExercise:
    return _exercise("tmpl-bp", "Bench Press (Barbell)", 3, 10, 60.0)


def _curl() -> RoutineExercise:
    return _exercise("tmpl-curl", "Bicep Curl (Dumbbell)", 3, 15, 12.5)


def _routines() -> dict[str, Routine]:
    return {
        "r-a1": Routine(id="r-a1", title="Day A1", exercises=[_squat(), _bench(), _curl()]),
        "r-b1": Routine(
            id="r-b1",
            title="Day B1",
            exercises=[
                _exercise("tmpl-ohp", "Overhead Press", 5, 3, 40.0),
                _exercise("tmpl-dl", "Deadlift", 3, 10, 100.0),
                _curl(),
                _exercise("tmpl-row", "Row", 3, 15, 30.0),
            ],
        ),
    }


def _warning_types(result) -> list[str]:
    return [w.type for w in result.warnings]


# ---------------------------------------------------------------------------
# Tier assignment
# ---------------------------------------------------------------------------


class TestTierAssignment:

    def test_positions_map_to_tiers(self):
        result = extract_from_routines(_routines(), {"A1": "r-a1"})
        a1 = result.by_day["A1"]
        assert a1.t1.name == "Squat (Barbell)"
        assert a1.t1.tier == "T1"
        assert a1.t2.name == "Bench Press (Barbell)"
        assert a1.t2.tier == "T2"
        assert [t3.name for t3 in a1.t3s] == ["Bicep Curl (Dumbbell)"]

    def test_main_lift_detection(self):
        result = extract_from_routines(_routines(), {"A1": "r-a1"})
        t1 = result.by_day["A1"].t1
        assert t1.detected_stage == 0
        assert t1.stage_confidence == "high"
        assert t1.detected_weight == 100.0
        assert t1.original_rep_scheme == "5x3+"
        assert t1.original_set_count == 5

    def test_roles_follow_day_table(self):
        result = extract_from_routines(_routines(), {"A1": "r-a1", "B1": "r-b1"})
        assert result.by_day["A1"].t1.role == "squat"
        assert result.by_day["A1"].t2.role == "bench"
        assert result.by_day["B1"].t1.role == "ohp"
        assert result.by_day["B1"].t2.role == "deadlift"

    def test_role_fixed_at_first_encounter(self):
        routines = {
            "r-a1": Routine(id="r-a1", title="A1", exercises=[_squat(), _bench()]),
            "r-a2": Routine(id="r-a2", title="A2", exercises=[_squat(), _bench()]),
        }
        result = extract_from_routines(routines, {"A1": "r-a1", "A2": "r-a2"})
        # A2's table says bench/squat but these templates were already seen on A1
        assert result.by_day["A2"].t1.role == "squat"
        assert result.by_day["A2"].t2.role == "bench"

    def test_t3_stage_always_zero(self):
        routines = {
            "r": Routine(
                id="r",
                title="A1",
                exercises=[_squat(), _bench(), _exercise("tmpl-x", "Lunge", 4, 8, 20.0)],
            )
        }
        t3 = extract_from_routines(routines, {"A1": "r"}).by_day["A1"].t3s[0]
        assert t3.detected_stage == 0
        assert t3.stage_confidence == "high"

    def test_no_cap_on_t3_count(self):
        extras = [_exercise(f"tmpl-{i}", f"Accessory {i}") for i in range(6)]
        routines = {"r": Routine(id="r", title="A1", exercises=[_squat(), _bench(), *extras])}
        assert len(extract_from_routines(routines, {"A1": "r"}).by_day["A1"].t3s) == 6

    def test_every_day_present_and_routine_ids_recorded(self):
        result = extract_from_routines(_routines(), {"A1": "r-a1"})
        assert set(result.by_day) == {"A1", "B1", "A2", "B2"}
        assert result.by_day["B2"].t1 is None
        assert result.routine_ids == {"A1": "r-a1", "B1": None, "A2": None, "B2": None}


# ---------------------------------------------------------------------------
# Accessory sharing
# ---------------------------------------------------------------------------


class TestAccessorySharing:

    def test_recurring_accessory_is_same_object(self):
        result = extract_from_routines(_routines(), {"A1": "r-a1", "B1": "r-b1"})
        a1_curl = result.by_day["A1"].t3s[0]
        b1_curl = result.by_day["B1"].t3s[0]
        assert a1_curl is b1_curl
        assert a1_curl.day == "A1"

    def test_user_edit_visible_on_every_day(self):
        result = extract_from_routines(_routines(), {"A1": "r-a1", "B1": "r-b1"})
        result.by_day["A1"].t3s[0].user_weight = 15.0
        assert result.by_day["B1"].t3s[0].effective_weight == 15.0

    def test_duplicate_within_one_day_listed_once(self):
        routines = {
            "r": Routine(id="r", title="A1", exercises=[_squat(), _bench(), _curl(), _curl()])
        }
        assert len(extract_from_routines(routines, {"A1": "r"}).by_day["A1"].t3s) == 1


# ---------------------------------------------------------------------------
# Warmup handling
# ---------------------------------------------------------------------------


class TestWarmupSkipping:

    def test_all_warmup_sets_skipped(self):
        assert is_warmup_only_exercise(_exercise("tmpl-w", "Squat", set_type="warmup"))

    def test_keyword_title_without_normal_sets_skipped(self):
        assert is_warmup_only_exercise(
            _exercise("tmpl-s", "Hamstring Stretch", set_type="duration")
        )

    def test_keyword_title_with_normal_sets_kept(self):
        assert not is_warmup_only_exercise(_exercise("tmpl-hip", "Hip Mobility"))

    def test_warmups_do_not_shift_positions(self):
        warmup = _exercise("tmpl-w", "Warm Up", 1, 10, None, "warmup")
        routines = {"r": Routine(id="r", title="A1", exercises=[warmup, _squat(), _bench()])}
        a1 = extract_from_routines(routines, {"A1": "r"}).by_day["A1"]
        assert a1.t1.template_id == "tmpl-sq"
        assert a1.t2.template_id == "tmpl-bp"

    def test_all_warmup_day_warns_no_t1(self):
        warmup = _exercise("tmpl-w", "Warm Up", 1, 10, None, "warmup")
        routines = {"r": Routine(id="r", title="A1", exercises=[warmup])}
        result = extract_from_routines(routines, {"A1": "r"})
        assert result.by_day["A1"].t1 is None
        assert result.by_day["A1"].t2 is None
        assert _warning_types(result) == ["no_t1"]
        assert "warmup-only" in result.warnings[0].message


# ---------------------------------------------------------------------------
# Warnings
# ---------------------------------------------------------------------------


class TestWarnings:

    def test_single_exercise_warns_no_t2(self):
        routines = {"r": Routine(id="r", title="A1", exercises=[_squat()])}
        result = extract_from_routines(routines, {"A1": "r"})
        assert result.by_day["A1"].t1 is not None
        assert result.by_day["A1"].t2 is None
        assert _warning_types(result) == ["no_t2"]
        assert result.warnings[0].day == "A1"

    def test_same_routine_twice(self):
        result = extract_from_routines(_routines(), {"A1": "r-a1", "A2": "r-a1"})
        duplicates = [w for w in result.warnings if w.type == "duplicate_routine"]
        assert len(duplicates) == 1
        assert "A1 and A2" in duplicates[0].message

    def test_missing_weight(self):
        routines = {
            "r": Routine(
                id="r",
                title="A1",
                exercises=[_exercise("tmpl-sq", "Squat", 5, 3, None), _bench()],
            )
        }
        result = extract_from_routines(routines, {"A1": "r"})
        assert result.by_day["A1"].t1.detected_weight == 0.0
        assert _warning_types(result) == ["weight_null"]

    def test_unknown_stage_is_manual(self):
        routines = {
            "r": Routine(
                id="r",
                title="A1",
                exercises=[_exercise("tmpl-sq", "Squat", 4, 5, 100.0), _bench()],
            )
        }
        result = extract_from_routines(routines, {"A1": "r"})
        t1 = result.by_day["A1"].t1
        assert t1.stage_confidence == "manual"
        assert t1.detected_stage == 0
        assert t1.original_rep_scheme == "4x5"
        assert _warning_types(result) == ["stage_unknown"]

    def test_unassigned_and_unknown_routines_skipped(self):
        result = extract_from_routines(_routines(), {"A1": None, "B1": "r-missing"})
        assert all(d.t1 is None for d in result.by_day.values())
        assert result.warnings == []


class TestAvailableRoutine:

    def test_summary(self):
        routine = _routines()["r-b1"]
        summary = to_available_routine(routine)
        assert summary.exercise_count == 4
        assert summary.exercise_preview == ("Overhead Press", "Deadlift", "Bicep Curl (Dumbbell)")
