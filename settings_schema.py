from typing import Literal

from pydantic import BaseModel, Field, ValidationError


class SettingsSchema(BaseModel):
    theme: Literal["dark", "light"] = "dark"
    units: Literal["kg", "lb"] = "kg"
    default_rest_seconds: int = Field(90, ge=0)
    planned_workouts_per_week: int = Field(6, ge=1, le=14)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"


def validate_settings(data: dict) -> None:
    try:
        SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))
