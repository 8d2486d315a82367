import logging
from dataclasses import asdict
from typing import Optional

from fastapi import APIRouter, Body, FastAPI, HTTPException

from algorithms.progression_rate import calculate_progression_rate
from algorithms.rolling_week import rolling_week_window
from algorithms.timestamps import utc_now_iso
from algorithms.volume_calculator import VolumeCalculator
from algorithms.weight_converter import WeightConverter
from config import APP_VERSION, db_path_from_env, settings_path_from_env
from db import (
    AsyncAnalyticsRepository,
    BodyweightRepository,
    DataTransferRepository,
    ExerciseRepository,
    MuscleGroupRepository,
    ProgramRepository,
    SetRepository,
    SettingsRepository,
    WorkoutRepository,
)
from models import ExerciseMuscleMapping
from planner_service import PlannerService
import reference_data
from stats_service import StatisticsService

logger = logging.getLogger(__name__)


def _http_error(e: ValueError) -> HTTPException:
    status = 404 if "not found" in str(e) else 400
    return HTTPException(status_code=status, detail=str(e))


class TrackerAPI:
    """Provides REST endpoints for workout logging and training analytics."""

    def __init__(
        self, db_path: str = "tracker.db", yaml_path: str = "settings.yaml"
    ) -> None:
        self.db_path = db_path
        self.settings = SettingsRepository(db_path, yaml_path)
        self.workouts = WorkoutRepository(db_path)
        self.exercises = ExerciseRepository(db_path)
        self.sets = SetRepository(db_path)
        self.muscle_groups = MuscleGroupRepository(db_path)
        self.program = ProgramRepository(db_path)
        self.body_weights = BodyweightRepository(db_path)
        self.transfer = DataTransferRepository(db_path)
        self.analytics = AsyncAnalyticsRepository(db_path)
        self.planner = PlannerService(
            self.workouts, self.program, self.sets, self.settings
        )
        self.statistics = StatisticsService(
            self.sets,
            self.workouts,
            self.muscle_groups,
            self.exercises,
            self.settings,
            self.program,
        )
        self._apply_log_level()
        self.app = FastAPI(
            title="Strength Tracker API",
            description="REST API for set logging and training analytics",
            version=APP_VERSION,
        )
        self._setup_routes()

    def _apply_log_level(self) -> None:
        level = self.settings.get_text("log_level", "INFO").upper()
        logging.getLogger().setLevel(level)

    def _to_kg(self, value: float, unit: Optional[str]) -> float:
        return WeightConverter.to_kg(value, unit or self.settings.get_text("units", "kg"))

    def _setup_routes(self) -> None:
        exercises_router = APIRouter(prefix="/exercises", tags=["Exercises"])
        program_router = APIRouter(prefix="/program", tags=["Program"])
        workouts_router = APIRouter(prefix="/workouts", tags=["Workouts"])
        analytics_router = APIRouter(prefix="/analytics", tags=["Analytics"])

        @self.app.get(
            "/health",
            summary="Health check",
            description="Verify API and database connectivity.",
        )
        def health():
            self.workouts.fetch_all("SELECT 1;")
            return {"status": "ok", "version": APP_VERSION}

        @exercises_router.get("")
        def list_exercises(include_inactive: bool = False):
            rows = (
                self.exercises.fetch_library()
                if include_inactive
                else self.exercises.fetch_active()
            )
            return [asdict(e) for e in rows]

        @exercises_router.post("")
        def add_exercise(
            exercise_id: str, name: str, category: str, equipment: str = None
        ):
            try:
                self.exercises.add_custom(exercise_id, name, category, equipment)
                return {"id": exercise_id}
            except ValueError as e:
                raise _http_error(e)

        @exercises_router.put("/{exercise_id}")
        def update_exercise(exercise_id: str, name: str, category: str):
            try:
                self.exercises.update_custom(exercise_id, name, category)
                return {"status": "updated"}
            except ValueError as e:
                raise _http_error(e)

        @exercises_router.delete("/{exercise_id}")
        def delete_exercise(exercise_id: str):
            try:
                self.exercises.delete_custom(exercise_id)
                return {"status": "deleted"}
            except ValueError as e:
                raise _http_error(e)

        @exercises_router.put("/{exercise_id}/active")
        def set_exercise_active(exercise_id: str, active: bool):
            try:
                self.exercises.set_active(exercise_id, active)
                return {"status": "updated"}
            except ValueError as e:
                raise _http_error(e)

        @exercises_router.get("/{exercise_id}/mappings")
        def list_mappings(exercise_id: str):
            return [asdict(m) for m in self.exercises.fetch_mappings(exercise_id)]

        @exercises_router.post("/{exercise_id}/mappings")
        def add_mapping(exercise_id: str, muscle_group: str, role: str):
            if self.exercises.fetch(exercise_id) is None:
                raise HTTPException(status_code=404, detail="exercise not found")
            try:
                self.exercises.upsert_mappings(
                    [ExerciseMuscleMapping(exercise_id, muscle_group, role)]
                )
                return {"status": "saved"}
            except ValueError as e:
                raise _http_error(e)

        @program_router.get("/days")
        def list_days():
            return self.program.fetch_days()

        @program_router.get("/days/{day_template_id}")
        def get_day(day_template_id: int):
            day = self.program.fetch_day(day_template_id)
            if day is None:
                raise HTTPException(status_code=404, detail="day template not found")
            return day

        @program_router.put("/days/{day_template_id}")
        def rename_day(day_template_id: int, day_name: str):
            try:
                self.program.rename_day(day_template_id, day_name)
                return {"status": "updated"}
            except ValueError as e:
                raise _http_error(e)

        @program_router.put("/slots/{slot_id}")
        def update_slot(
            slot_id: int,
            target_sets: int,
            target_rep_low: int,
            target_rep_high: int,
            rest_seconds: int,
            notes: str = None,
        ):
            try:
                self.program.update_slot(
                    slot_id,
                    target_sets,
                    target_rep_low,
                    target_rep_high,
                    rest_seconds,
                    notes,
                )
                return {"status": "updated"}
            except ValueError as e:
                raise _http_error(e)

        @program_router.post("/slots/{slot_id}/alternates")
        def add_alternate(slot_id: int, exercise_id: str):
            try:
                self.program.add_slot_alternate(slot_id, exercise_id)
                return {"status": "added"}
            except ValueError as e:
                raise _http_error(e)

        @program_router.get("/next")
        def next_day():
            day = self.planner.next_day_template()
            if day is None:
                raise HTTPException(status_code=404, detail="no day templates")
            return day

        @workouts_router.post("")
        def start_workout(
            day_template_id: int = None,
            prs_score: int = None,
            bodyweight_kg: float = None,
            started_at: str = None,
        ):
            try:
                return self.planner.start_workout(
                    day_template_id, prs_score, bodyweight_kg, started_at
                )
            except ValueError as e:
                raise _http_error(e)

        @workouts_router.get("")
        def workout_history(limit: int = 50):
            return self.workouts.history(limit)

        @workouts_router.get("/active")
        def active_workout():
            return self.workouts.active()

        @workouts_router.get("/{workout_id}")
        def workout_detail(workout_id: str):
            detail = self.workouts.detail(workout_id)
            if detail is None:
                raise HTTPException(status_code=404, detail="workout not found")
            return detail

        @workouts_router.post("/{workout_id}/complete")
        def complete_workout(
            workout_id: str, notes: str = None, completed_at: str = None
        ):
            try:
                anchor = self.workouts.complete(workout_id, notes, completed_at)
                return {"status": "completed", "anchor": anchor}
            except ValueError as e:
                raise _http_error(e)

        @workouts_router.delete("/{workout_id}")
        def delete_workout(workout_id: str):
            try:
                self.workouts.delete(workout_id)
                return {"status": "deleted"}
            except ValueError as e:
                raise _http_error(e)

        @workouts_router.post("/{workout_id}/sets")
        def add_set(
            workout_id: str,
            exercise_id: str,
            reps: int,
            load: float,
            effort_label: str,
            is_warmup: bool = False,
            notes: str = None,
            logged_at: str = None,
            unit: str = None,
        ):
            try:
                sid = self.sets.add(
                    workout_id,
                    exercise_id,
                    reps,
                    self._to_kg(load, unit),
                    effort_label,
                    is_warmup,
                    notes,
                    logged_at,
                )
                return {"id": sid}
            except ValueError as e:
                raise _http_error(e)

        @workouts_router.get("/{workout_id}/sets")
        def list_sets(workout_id: str):
            return self.sets.fetch_for_workout(workout_id)

        @self.app.put("/sets/{set_id}")
        def update_set(
            set_id: int,
            reps: int,
            load: float,
            effort_label: str,
            is_warmup: bool = False,
            notes: str = None,
            unit: str = None,
        ):
            try:
                self.sets.update(
                    set_id,
                    reps,
                    self._to_kg(load, unit),
                    effort_label,
                    is_warmup,
                    notes,
                )
                return {"status": "updated"}
            except ValueError as e:
                raise _http_error(e)

        @self.app.delete("/sets/{set_id}")
        def delete_set(set_id: int):
            try:
                self.sets.remove(set_id)
                return {"status": "deleted"}
            except ValueError as e:
                raise _http_error(e)

        @self.app.get("/bodyweight")
        def list_bodyweight(limit: int = 100):
            return self.body_weights.fetch_log(limit)

        @self.app.post("/bodyweight")
        def log_bodyweight(weight: float, logged_at: str = None, unit: str = None):
            try:
                eid = self.body_weights.log(self._to_kg(weight, unit), logged_at)
                return {"id": eid}
            except ValueError as e:
                raise _http_error(e)

        @analytics_router.get("/volume")
        async def volume(start: str = None, end: str = None, now: str = None):
            try:
                if start is None or end is None:
                    current = now or utc_now_iso()
                    anchor = await self.analytics.first_workout_anchor()
                    window = rolling_week_window(current, anchor or current)
                    start, end = window.start_iso, window.end_iso
                sets = await self.analytics.fetch_sets_by_date_range(start, end)
                groups = await self.analytics.fetch_muscle_groups()
            except ValueError as e:
                raise _http_error(e)
            calculator = VolumeCalculator(
                groups,
                reference_data.EXCLUDED_FROM_HYPERTROPHY_VOLUME,
                reference_data.METCON_DISCOUNTS,
            )
            return {
                "start": start,
                "end": end,
                "muscles": [asdict(r) for r in calculator.calculate(sets)],
            }

        @analytics_router.get("/week")
        def week(now: str = None):
            try:
                return self.statistics.weekly_volume(now or utc_now_iso())
            except ValueError as e:
                raise _http_error(e)

        @analytics_router.get("/phase")
        def phase(now: str = None):
            try:
                return self.statistics.training_phase(now or utc_now_iso())
            except ValueError as e:
                raise _http_error(e)

        @analytics_router.get("/dashboard")
        def dashboard(now: str = None):
            try:
                return self.statistics.dashboard(now or utc_now_iso())
            except ValueError as e:
                raise _http_error(e)

        @analytics_router.get("/adherence")
        def adherence(start: str, end: str, planned_per_week: float = None):
            try:
                return self.statistics.adherence(start, end, planned_per_week)
            except ValueError as e:
                raise _http_error(e)

        @analytics_router.get("/progression/{exercise_id}")
        def progression(exercise_id: str):
            suggestion = self.statistics.progression_suggestion(exercise_id)
            return asdict(suggestion) if suggestion else None

        @analytics_router.get("/progression_rate/{exercise_id}")
        async def progression_rate(exercise_id: str):
            series = await self.analytics.fetch_strength_trend_series(exercise_id)
            try:
                return asdict(calculate_progression_rate(exercise_id, series))
            except ValueError as e:
                raise _http_error(e)

        @analytics_router.get("/strength/{exercise_id}")
        async def strength(exercise_id: str):
            series = await self.analytics.fetch_strength_trend_series(exercise_id)
            return [asdict(p) for p in series]

        @self.app.get("/export")
        def export_data():
            return self.transfer.export_all()

        @self.app.post("/import")
        def import_data(payload: dict = Body(...)):
            try:
                return self.transfer.restore(payload)
            except ValueError as e:
                logger.warning("import rejected: %s", e)
                raise HTTPException(status_code=400, detail=str(e))

        @self.app.get("/settings")
        def get_settings():
            return self.settings.all_settings()

        @self.app.put("/settings")
        def update_settings(values: dict = Body(...)):
            try:
                updated = self.settings.update(values)
            except ValueError as e:
                raise HTTPException(status_code=400, detail=str(e))
            self._apply_log_level()
            return updated

        self.app.include_router(exercises_router)
        self.app.include_router(program_router)
        self.app.include_router(workouts_router)
        self.app.include_router(analytics_router)


api = TrackerAPI(db_path_from_env(), settings_path_from_env())
app = api.app

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app)
