from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple


class ExerciseCategory(str, Enum):
    COMPOUND = "compound"
    ISOLATION = "isolation"
    METCON = "metcon"
    MOBILITY = "mobility"


class EffortLabel(str, Enum):
    EASY = "easy"
    PRODUCTIVE = "productive"
    HARD = "hard"
    FAILURE = "failure"


class MuscleRole(str, Enum):
    DIRECT = "direct"
    INDIRECT = "indirect"


class VolumeZone(str, Enum):
    RED = "RED"
    YELLOW = "YELLOW"
    GREEN = "GREEN"
    AMBER = "AMBER"
    ORANGE = "ORANGE"


class TrainingPhase(str, Enum):
    NEURAL = "neural"
    TRANSITION = "transition"
    HYPERTROPHIC = "hypertrophic"


@dataclass(frozen=True)
class Exercise:
    id: str
    name: str
    category: ExerciseCategory
    equipment: Optional[str] = None
    is_active: bool = True


@dataclass(frozen=True)
class MuscleMapping:
    muscle_group: str
    role: MuscleRole


@dataclass(frozen=True)
class ExerciseMuscleMapping:
    exercise_id: str
    muscle_group: str
    role: MuscleRole


@dataclass(frozen=True)
class VolumeThresholds:
    mev_low: float
    mev_high: float
    optimal_low: float
    optimal_high: float
    mrv_low: float
    mrv_high: float


@dataclass(frozen=True)
class MuscleGroup:
    """Weekly effective-set thresholds for one muscle group.

    Seed data keeps the six thresholds non-decreasing; nothing downstream
    checks it.
    """

    id: str
    display_name: str
    size_category: str
    mev_low: float
    mev_high: float
    optimal_low: float
    optimal_high: float
    mrv_low: float
    mrv_high: float
    evidence_grade: str = "MEDIUM"

    @property
    def thresholds(self) -> VolumeThresholds:
        return VolumeThresholds(
            self.mev_low,
            self.mev_high,
            self.optimal_low,
            self.optimal_high,
            self.mrv_low,
            self.mrv_high,
        )


@dataclass(frozen=True)
class SetForVolume:
    """A logged set joined with its exercise and muscle mappings."""

    set_id: int
    exercise_id: str
    exercise_name: str
    category: ExerciseCategory
    reps: int
    load_kg: float
    effort_label: EffortLabel
    is_warmup: bool
    logged_at: str
    mappings: Tuple[MuscleMapping, ...] = ()


@dataclass(frozen=True)
class MuscleVolumeResult:
    muscle_group_id: str
    display_name: str
    effective_sets: float
    zone: VolumeZone
    thresholds: VolumeThresholds


@dataclass(frozen=True)
class ProgressionExposure:
    workout_id: str
    completed_at: str
    target_rep_high: int
    working_set_reps: Tuple[int, ...]
    top_load_kg: float


@dataclass(frozen=True)
class ProgressionSuggestion:
    exercise_id: str
    suggested_load_kg: float
    increase_percent: float
    reason: str


@dataclass(frozen=True)
class StrengthTrendPoint:
    workout_id: str
    exercise_id: str
    exercise_name: str
    completed_at: str
    best_set_reps: int
    best_set_load_kg: float


@dataclass(frozen=True)
class RollingWeekWindow:
    week_number: int
    start_iso: str
    end_iso: str


@dataclass(frozen=True)
class ReferenceSegment:
    from_week: float
    to_week: float
    rate_kg_per_week: float


@dataclass(frozen=True)
class ProgressionReference:
    exercise_id: str
    label: str
    citation: str
    caveat: str
    segments: Tuple[ReferenceSegment, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ProgressionRateResult:
    exercise_id: str
    actual_rate_kg_per_week: float
    weeks_of_data: float
    session_count: int
    reference_rate_kg_per_week: Optional[float]
    reference_caveat: Optional[str]
    reference_label: Optional[str]
    has_enough_data: bool


@dataclass(frozen=True)
class TrainingPhaseInfo:
    phase: TrainingPhase
    title: str
    description: str
    citation: str
