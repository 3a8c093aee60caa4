"""
Role and tier utilities.

Tier is never stored: main lifts derive it from (role, day); accessories are
always T3.  Progression keys follow the same split: ``"{role}-{tier}"`` for
main lifts, the exercise id for everything else.
"""

from dataclasses import dataclass, field

from .config import LOWER_BODY_ROLES, MAIN_LIFT_ROLES, T1_MAPPING, T2_MAPPING
from .models import BodyRegion, Day, ExerciseConfig, Tier


def is_main_lift_role(role: str | None) -> bool:
    return role in MAIN_LIFT_ROLES


def get_progression_key(exercise_id: str, role: str | None, tier: Tier) -> str:
    """
    Key under which an exercise's progression is stored.

    >>> get_progression_key("uuid-1", "squat", "T1")
    'squat-T1'
    >>> get_progression_key("uuid-2", "t3", "T3")
    'uuid-2'
    """
    if is_main_lift_role(role) and tier in ("T1", "T2"):
        return f"{role}-{tier}"
    return exercise_id


def get_tier_for_day(role: str | None, day: Day) -> Tier | None:
    """
    Tier of a role on a day.

    Returns None for unknown roles and for main lifts not scheduled that day.
    """
    if role == "t3":
        return "T3"
    if T1_MAPPING[day] == role:
        return "T1"
    if T2_MAPPING[day] == role:
        return "T2"
    return None


def get_t1_role_for_day(day: Day) -> str:
    return T1_MAPPING[day]


def get_t2_role_for_day(day: Day) -> str:
    return T2_MAPPING[day]


def body_region_for_role(role: str | None) -> BodyRegion:
    """Squat and deadlift progress with lower-body increments; all else upper."""
    return "lower" if role in LOWER_BODY_ROLES else "upper"


@dataclass
class DayExercises:
    t1: ExerciseConfig | None = None
    t2: ExerciseConfig | None = None
    t3: list[ExerciseConfig] = field(default_factory=list)


def get_exercises_for_day(
    exercises: dict[str, ExerciseConfig],
    day: Day,
    t3_schedule: dict[str, list[str]],
) -> DayExercises:
    """
    Group configured exercises into the T1/T2/T3 slots of a day.

    T3s come out in the day's schedule order.
    """
    result = DayExercises()

    for exercise in exercises.values():
        if not is_main_lift_role(exercise.role):
            continue
        tier = get_tier_for_day(exercise.role, day)
        if tier == "T1":
            result.t1 = exercise
        elif tier == "T2":
            result.t2 = exercise

    for exercise_id in t3_schedule.get(day, []):
        exercise = exercises.get(exercise_id)
        if exercise is not None:
            result.t3.append(exercise)

    return result
