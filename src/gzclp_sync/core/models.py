"""
Data models for gzclp-sync.

All core dataclasses: Hevy-shaped routine/workout records, import results,
progression state, pending changes, and sync diffs.  Hevy records are kept
permissive (the core classifies rather than rejects them); program state is
validated on construction.
"""

from dataclasses import dataclass, field
from typing import Literal

SetType = str  # "normal" | "warmup" | "dropset" | "failure" | anything Hevy adds
Tier = Literal["T1", "T2", "T3"]
Day = Literal["A1", "B1", "A2", "B2"]
WeightUnit = Literal["kg", "lbs"]
BodyRegion = Literal["upper", "lower"]
StageConfidence = Literal["high", "manual"]
ChangeType = Literal["progress", "stage_change", "deload", "repeat"]
SyncAction = Literal["push", "pull", "skip"]
ImportWarningType = Literal[
    "no_t1",
    "no_t2",
    "duplicate_routine",
    "weight_null",
    "stage_unknown",
]

VALID_TIERS = ("T1", "T2", "T3")
VALID_UNITS = ("kg", "lbs")
VALID_ACTIONS = ("push", "pull", "skip")


# =============================================================================
# Hevy records
# =============================================================================


@dataclass
class ExerciseSet:
    """One set of a routine or logged workout exercise."""

    type: SetType = "normal"
    reps: int | None = None
    weight_kg: float | None = None


@dataclass
class RoutineExercise:
    """An exercise inside a routine or a logged workout."""

    exercise_template_id: str
    title: str
    sets: list[ExerciseSet] = field(default_factory=list)
    notes: str = ""


# Logged workouts use the same exercise shape as routines.
WorkoutExercise = RoutineExercise


@dataclass
class Routine:
    """A stored Hevy routine."""

    id: str
    title: str
    exercises: list[RoutineExercise] = field(default_factory=list)
    updated_at: str = ""


@dataclass
class Workout:
    """A completed Hevy workout."""

    id: str
    title: str
    start_time: str  # ISO 8601
    exercises: list[WorkoutExercise] = field(default_factory=list)
    routine_id: str | None = None


@dataclass(frozen=True)
class AvailableRoutine:
    """Summary of a routine for selection lists."""

    id: str
    title: str
    exercise_count: int
    exercise_preview: tuple[str, ...]
    updated_at: str


# =============================================================================
# Stage detection and import
# =============================================================================


@dataclass(frozen=True)
class StageDetectionResult:
    stage: int
    confidence: StageConfidence
    set_count: int
    rep_scheme: str


@dataclass
class WorkoutPerformance:
    """What was actually performed for one exercise in one workout."""

    workout_id: str
    workout_date: str
    weight: float
    reps: list[int]
    total_sets: int


@dataclass
class ProgressionSuggestion:
    type: ChangeType
    suggested_weight: float
    suggested_stage: int
    new_scheme: str
    reason: str
    success: bool
    amrap_reps: int | None = None


@dataclass
class ImportAnalysis:
    """Progression analysis of an imported exercise against workout history."""

    has_workout_data: bool
    tier: Tier
    performance: WorkoutPerformance | None = None
    suggestion: ProgressionSuggestion | None = None


@dataclass
class ImportedExercise:
    """
    One exercise extracted from an assigned routine.

    Accessories recurring on several days are a single shared instance, so
    ``user_weight`` edits are seen by every day that lists them.
    """

    template_id: str
    name: str
    tier: Tier
    day: Day  # first day the exercise was seen on
    detected_weight: float
    detected_stage: int
    stage_confidence: StageConfidence
    original_set_count: int
    original_rep_scheme: str
    role: str | None = None
    user_weight: float | None = None
    user_stage: int | None = None
    analysis: ImportAnalysis | None = None

    @property
    def effective_weight(self) -> float:
        """User override, then history suggestion, then detected weight."""
        if self.user_weight is not None:
            return self.user_weight
        if self.analysis is not None and self.analysis.suggestion is not None:
            return self.analysis.suggestion.suggested_weight
        return self.detected_weight

    @property
    def effective_stage(self) -> int:
        """User override, then history suggestion, then detected stage."""
        if self.user_stage is not None:
            return self.user_stage
        if self.analysis is not None and self.analysis.suggestion is not None:
            return self.analysis.suggestion.suggested_stage
        return self.detected_stage


@dataclass(frozen=True)
class ImportWarning:
    type: ImportWarningType
    message: str
    day: Day | None = None


@dataclass
class DayImportResult:
    t1: ImportedExercise | None = None
    t2: ImportedExercise | None = None
    t3s: list[ImportedExercise] = field(default_factory=list)


@dataclass
class ImportResult:
    by_day: dict[str, DayImportResult]
    warnings: list[ImportWarning]
    routine_ids: dict[str, str | None]


# =============================================================================
# Program state
# =============================================================================


@dataclass
class ExerciseConfig:
    """A configured exercise linked to a Hevy template."""

    id: str
    template_id: str
    name: str
    role: str | None = None  # squat | bench | ohp | deadlift | t3


@dataclass
class ProgressionState:
    """
    Progression of one exercise-or-role key.

    ``base_weight`` is the pre-deload reference; it defaults to the current
    weight when not supplied.
    """

    exercise_id: str
    current_weight: float
    stage: int = 0
    base_weight: float | None = None
    amrap_record: int = 0
    last_workout_id: str | None = None
    last_workout_date: str | None = None

    def __post_init__(self) -> None:
        """Validate progression data."""
        if self.stage not in (0, 1, 2):
            raise ValueError(f"stage must be 0, 1 or 2, got {self.stage}")
        if self.current_weight < 0:
            raise ValueError("current_weight must be non-negative")
        if self.base_weight is None:
            self.base_weight = self.current_weight
        if self.amrap_record < 0:
            raise ValueError("amrap_record must be non-negative")


@dataclass
class UserSettings:
    weight_unit: WeightUnit = "kg"
    rest_timers: dict[str, int] = field(
        default_factory=lambda: {"T1": 240, "T2": 150, "T3": 75}
    )

    def __post_init__(self) -> None:
        if self.weight_unit not in VALID_UNITS:
            raise ValueError(
                f"Invalid weight_unit: {self.weight_unit!r}. Must be 'kg' or 'lbs'."
            )


@dataclass(frozen=True)
class WeightDiscrepancy:
    stored_weight: float
    actual_weight: float


@dataclass
class PendingChange:
    """A progression suggestion awaiting user confirmation."""

    id: str
    exercise_id: str
    exercise_name: str
    tier: Tier
    type: ChangeType
    progression_key: str
    current_weight: float
    current_stage: int
    new_weight: float
    new_stage: int
    new_scheme: str
    reason: str
    workout_id: str
    workout_date: str
    created_at: str
    success: bool
    day: Day | None = None
    new_base_weight: float | None = None
    sets_completed: int | None = None
    sets_target: int | None = None
    new_pr: bool = False
    new_amrap_record: int | None = None
    amrap_reps: int | None = None
    discrepancy: WeightDiscrepancy | None = None


@dataclass# =============================================================================
# Progression history
# =============================================================================


@dataclass(frozen=True)
class HistoryEntry:
    """State of one progression key when a workout was evaluated."""

    date: str
    workout_id: str
    weight: float
    stage: int
    tier: Tier
    success: bool
    change_type: ChangeType
    amrap_reps: int | None = None


@dataclass
class ExerciseHistory:
    """Chronological history of one progression key."""

    progression_key: str
    exercise_name: str
    tier: Tier
    entries: list[HistoryEntry] = field(default_factory=list)
    role: str | None = None



@dataclass
class ProgramState:
    """Everything a collaborator persists between runs."""

    exercises: dict[str, ExerciseConfig] = field(default_factory=dict)
    progression: dict[str, ProgressionState] = field(default_factory=dict)
    t3_schedule: dict[str, list[str]] = field(
        default_factory=lambda: {"A1": [], "B1": [], "A2": [], "B2": []}
    )
    routine_ids: dict[str, str | None] = field(
        default_factory=lambda: {"A1": None, "B1": None, "A2": None, "B2": None}
    )
    settings: UserSettings = field(default_factory=UserSettings)
    current_day: Day = "A1"
    pending_changes: list[PendingChange] = field(default_factory=list)
    last_processed_workout_id: str | None = None
    created_at: str = ""
    history: dict[str, ExerciseHistory] = field(default_factory=dict)


# =============================================================================
# Progression results
# =============================================================================


@dataclass(frozen=True)
class ProgressionResult:
    type: ChangeType
    new_weight: float
    new_stage: int
    new_scheme: str
    reason: str
    success: bool
    new_base_weight: float | None = None
    new_amrap_record: int | None = None
    amrap_reps: int | None = None


@dataclass
class WorkoutAnalysisResult:
    exercise_id: str
    exercise_name: str
    tier: Tier
    reps: list[int]
    weight: float
    workout_id: str
    workout_date: str
    discrepancy: WeightDiscrepancy | None = None
    day: Day | None = None


# =============================================================================
# Sync diff
# =============================================================================


@dataclass(frozen=True)
class RemoteRoutineState:
    """Remote routine snapshot for one day: template id -> weight in kg."""

    routine_id: str | None = None
    weights: dict[str, float] = field(default_factory=dict)


@dataclass(frozen=True)
class ExerciseDiff:
    exercise_id: str
    name: str
    tier: Tier
    old_weight: float | None  # None if the routine is new or omits the exercise
    new_weight: float
    stage: int | None  # None for T3
    is_changed: bool
    progression_key: str


@dataclass(frozen=True)
class SelectableExerciseDiff(ExerciseDiff):
    action: SyncAction = "skip"


@dataclass(frozen=True)
class DayDiff:
    day: Day
    routine_name: str
    routine_exists: bool
    exercises: tuple[ExerciseDiff, ...]
    change_count: int


@dataclass(frozen=True)
class PushPreview:
    days: tuple[DayDiff, ...]
    total_changes: int
    has_any_routines: bool


@dataclass(frozen=True)
class SelectablePushPreview(PushPreview):
    push_count: int = 0
    pull_count: int = 0
    skip_count: int = 0
