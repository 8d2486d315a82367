from typing import List, Literal, Optional

from pydantic import BaseModel, Field, ValidationError

EffortLiteral = Literal["easy", "productive", "hard", "failure"]
CategoryLiteral = Literal["compound", "isolation", "metcon", "mobility"]


class WorkoutRecord(BaseModel):
    id: str
    phase_id: Optional[str] = None
    day_template_id: Optional[int] = None
    started_at: str
    completed_at: Optional[str] = None
    prs_score: Optional[int] = None
    bodyweight_kg: Optional[float] = None
    notes: Optional[str] = None


class SetRecord(BaseModel):
    id: int
    workout_id: str
    exercise_id: str
    set_order: int = Field(ge=1)
    reps: int = Field(gt=0)
    load_kg: float = Field(ge=0)
    effort_label: EffortLiteral
    is_warmup: bool = False
    logged_at: str
    notes: Optional[str] = None


class ExerciseRecord(BaseModel):
    id: str
    name: str
    category: CategoryLiteral
    equipment: Optional[str] = None
    is_active: bool = True


class MappingRecord(BaseModel):
    exercise_id: str
    muscle_group: str
    role: Literal["direct", "indirect"]


class BodyweightRecord(BaseModel):
    id: int
    workout_id: Optional[str] = None
    weight_kg: float
    logged_at: str
    source: Literal["workout", "manual"]


class ExportPayload(BaseModel):
    """Full backup of the user's training data."""

    exported_at: str
    workouts: List[WorkoutRecord]
    sets: List[SetRecord]
    exercises: List[ExerciseRecord]
    exercise_muscle_mappings: List[MappingRecord]
    bodyweight_log: List[BodyweightRecord]


def parse_payload(data: dict) -> ExportPayload:
    """Validate ``data`` as an export payload, raising ``ValueError``."""
    if not isinstance(data, dict):
        raise ValueError("Import payload must be a JSON object.")
    try:
        return ExportPayload(**data)
    except ValidationError as e:
        raise ValueError(str(e))
