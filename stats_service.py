from __future__ import annotations

import logging
from dataclasses import asdict
from typing import List, Optional

import reference_data
from algorithms.progression_engine import evaluate_double_progression
from algorithms.progression_rate import calculate_progression_rate
from algorithms.rolling_week import rolling_week_window, weeks_between
from algorithms.timestamps import ONE_WEEK, format_timestamp, parse_timestamp
from algorithms.training_phase import classify_training_phase
from algorithms.volume_calculator import VolumeCalculator
from db import (
    ExerciseRepository,
    MuscleGroupRepository,
    ProgramRepository,
    SetRepository,
    SettingsRepository,
    WorkoutRepository,
)
from models import (
    MuscleVolumeResult,
    ProgressionRateResult,
    ProgressionSuggestion,
    StrengthTrendPoint,
)

logger = logging.getLogger(__name__)

ADHERENCE_LOOKBACK_WEEKS = 3
DEFAULT_PLANNED_PER_WEEK = 6


class StatisticsService:
    """Compose stored training data with the analytics."""

    def __init__(
        self,
        set_repo: SetRepository,
        workout_repo: WorkoutRepository,
        muscle_group_repo: MuscleGroupRepository,
        exercise_repo: ExerciseRepository,
        settings_repo: SettingsRepository | None = None,
        program_repo: ProgramRepository | None = None,
    ) -> None:
        self.sets = set_repo
        self.workouts = workout_repo
        self.muscle_groups = muscle_group_repo
        self.exercises = exercise_repo
        self.settings = settings_repo
        self.program = program_repo

    def _calculator(self) -> VolumeCalculator:
        return VolumeCalculator(
            self.muscle_groups.fetch_all_groups(),
            reference_data.EXCLUDED_FROM_HYPERTROPHY_VOLUME,
            reference_data.METCON_DISCOUNTS,
        )

    def volume_for_date_range(
        self, start_iso: str, end_iso: str
    ) -> List[MuscleVolumeResult]:
        """Per-muscle effective sets for completed workouts in ``[start, end)``."""
        sets = self.sets.fetch_sets_by_date_range(start_iso, end_iso)
        logger.debug("volume window %s..%s: %d sets", start_iso, end_iso, len(sets))
        return self._calculator().calculate(sets)

    def current_window(self, now_iso: str):
        anchor = self.workouts.first_workout_anchor()
        return rolling_week_window(now_iso, anchor or now_iso)

    def weekly_volume(self, now_iso: str) -> dict:
        window = self.current_window(now_iso)
        results = self.volume_for_date_range(window.start_iso, window.end_iso)
        return {
            "window": asdict(window),
            "muscles": [asdict(r) for r in results],
        }

    def progression_suggestion(self, exercise_id: str) -> Optional[ProgressionSuggestion]:
        exposures = self.sets.fetch_recent_exposures(exercise_id, limit=2)
        mappings = self.exercises.fetch_mappings(exercise_id)
        return evaluate_double_progression(exercise_id, exposures, mappings)

    def strength_trend(self, exercise_id: str) -> List[StrengthTrendPoint]:
        return self.sets.fetch_strength_trend_series(exercise_id)

    def progression_rate(self, exercise_id: str) -> ProgressionRateResult:
        return calculate_progression_rate(exercise_id, self.strength_trend(exercise_id))

    def planned_per_week(self) -> int:
        fallback = DEFAULT_PLANNED_PER_WEEK
        if self.program is not None:
            fallback = self.program.day_count() or DEFAULT_PLANNED_PER_WEEK
        if self.settings is not None:
            return max(1, self.settings.get_int("planned_workouts_per_week", fallback))
        return max(1, fallback)

    def adherence(
        self, start_iso: str, end_iso: str, planned_per_week: float | None = None
    ) -> dict:
        planned = self.planned_per_week() if planned_per_week is None else planned_per_week
        return self.workouts.adherence_stats(start_iso, end_iso, planned)

    def training_phase(self, now_iso: str) -> Optional[dict]:
        """Training age and phase, or ``None`` before the first completed workout."""
        anchor = self.workouts.first_workout_anchor()
        if anchor is None:
            return None
        weeks = weeks_between(anchor, now_iso)
        return {
            "weeks_training": weeks,
            **asdict(classify_training_phase(weeks)),
        }

    def dashboard(self, now_iso: str) -> dict:
        """Summary for the current rolling week.

        Without a completed workout the window is anchored at ``now_iso``.
        Adherence covers the current week and the three before it.
        """
        anchor = self.workouts.first_workout_anchor()
        window = rolling_week_window(now_iso, anchor or now_iso)
        window_start = parse_timestamp(window.start_iso)
        adherence_start = format_timestamp(
            window_start - ONE_WEEK * ADHERENCE_LOOKBACK_WEEKS
        )
        adherence = self.adherence(adherence_start, window.end_iso)
        week = self.workouts.week_stats(window.start_iso, window.end_iso)
        weeks_training = weeks_between(anchor, now_iso) if anchor else 0.0
        phase = asdict(classify_training_phase(weeks_training)) if anchor else None
        return {
            "anchor": anchor,
            "window": asdict(window),
            "week": week,
            "adherence": adherence,
            "weeks_training": weeks_training,
            "phase": phase,
        }
