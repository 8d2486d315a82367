from __future__ import annotations

import logging
from typing import Optional

import reference_data
from db import ProgramRepository, SetRepository, SettingsRepository, WorkoutRepository

logger = logging.getLogger(__name__)


class PlannerService:
    """Handles the program rotation and starting workouts from day templates."""

    def __init__(
        self,
        workout_repo: WorkoutRepository,
        program_repo: ProgramRepository,
        set_repo: SetRepository | None = None,
        settings_repo: SettingsRepository | None = None,
    ) -> None:
        self.workouts = workout_repo
        self.program = program_repo
        self.sets = set_repo
        self.settings = settings_repo

    def next_day_template(self) -> Optional[dict]:
        """Return the day after the latest completed one, wrapping to day 1."""
        total = self.program.day_count()
        if total == 0:
            return None
        latest = self.program.latest_completed_day_number()
        next_number = (latest % total) + 1 if latest is not None else 1
        return self.program.fetch_day_by_number(next_number)

    def start_workout(
        self,
        day_template_id: Optional[int] = None,
        prs_score: Optional[int] = None,
        bodyweight_kg: Optional[float] = None,
        started_at: Optional[str] = None,
    ) -> dict:
        """Create a workout for ``day_template_id`` or the next day in rotation.

        Each slot is returned with the last working load used for its default
        exercise and the rest time, falling back to the user's default rest.
        """
        if day_template_id is None:
            template = self.next_day_template()
            if template is None:
                raise ValueError("no day templates configured")
        else:
            template = self.program.fetch_day(day_template_id)
            if template is None:
                raise ValueError("day template not found")
        workout_id = self.workouts.create(
            template["id"], prs_score, bodyweight_kg, started_at
        )
        default_rest = reference_data.DEFAULT_REST_SECONDS
        if self.settings is not None:
            default_rest = self.settings.get_int("default_rest_seconds", default_rest)
        slots = []
        for slot in template["slots"]:
            last_load = (
                self.sets.most_recent_load(slot["default_exercise_id"])
                if self.sets is not None
                else None
            )
            slots.append(
                {
                    **slot,
                    "rest_seconds": (
                        slot["rest_seconds"]
                        if slot["rest_seconds"] is not None
                        else default_rest
                    ),
                    "last_load_kg": last_load,
                }
            )
        logger.info("workout %s uses day %s", workout_id, template["day_number"])
        return {
            "workout_id": workout_id,
            "day_template_id": template["id"],
            "day_number": template["day_number"],
            "day_name": template["day_name"],
            "slots": slots,
        }
