import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import (
    ExerciseRepository,
    MuscleGroupRepository,
    ProgramRepository,
    SetRepository,
    SettingsRepository,
    WorkoutRepository,
)
from models import TrainingPhase, VolumeZone
from stats_service import StatisticsService


class StatisticsServiceTest(unittest.TestCase):
    db_path = "test_stats.db"
    yaml_path = "test_stats.yaml"

    def setUp(self) -> None:
        for path in (self.db_path, self.yaml_path):
            if os.path.exists(path):
                os.remove(path)
        self.workouts = WorkoutRepository(self.db_path)
        self.sets = SetRepository(self.db_path)
        self.program = ProgramRepository(self.db_path)
        self.settings = SettingsRepository(self.db_path, self.yaml_path)
        self.stats = StatisticsService(
            self.sets,
            self.workouts,
            MuscleGroupRepository(self.db_path),
            ExerciseRepository(self.db_path),
            self.settings,
            self.program,
        )

    def tearDown(self) -> None:
        for path in (self.db_path, self.yaml_path):
            if os.path.exists(path):
                os.remove(path)

    def log(self, day, date, entries, complete=True):
        day_id = self.program.fetch_day_by_number(day)["id"]
        wid = self.workouts.create(day_id, started_at=f"{date}T09:00:00Z")
        for minute, (exercise_id, reps, load, effort) in enumerate(entries, start=1):
            self.sets.add(
                wid, exercise_id, reps, load, effort,
                logged_at=f"{date}T09:{minute:02d}:00Z",
            )
        if complete:
            self.workouts.complete(wid, completed_at=f"{date}T10:00:00Z")
        return wid

    def test_weekly_volume(self) -> None:
        self.log(1, "2024-01-01", [("barbell-back-squat", 8, 100.0, "hard")] * 6)
        self.log(
            2,
            "2024-01-02",
            [("barbell-bench-press", 8, 60.0, "hard")] * 2
            + [("barbell-bench-press", 12, 40.0, "easy")],
        )
        self.log(1, "2024-01-09", [("barbell-back-squat", 8, 100.0, "hard")] * 3)

        week = self.stats.weekly_volume("2024-01-05T12:00:00Z")
        self.assertEqual(week["window"]["week_number"], 0)
        self.assertEqual(week["window"]["start_iso"], "2024-01-01T09:00:00.000Z")
        muscles = {m["muscle_group_id"]: m for m in week["muscles"]}
        self.assertEqual(muscles["quads"]["effective_sets"], 6.0)
        self.assertEqual(muscles["quads"]["zone"], VolumeZone.GREEN)
        self.assertEqual(muscles["chest"]["effective_sets"], 2.5)
        self.assertEqual(muscles["chest"]["zone"], VolumeZone.RED)
        # 0.5 + 0.5 + 0.25 shown to the nearest half set
        self.assertEqual(muscles["triceps"]["effective_sets"], 1.5)

        next_week = self.stats.weekly_volume("2024-01-09T12:00:00Z")
        muscles = {m["muscle_group_id"]: m for m in next_week["muscles"]}
        self.assertEqual(muscles["quads"]["effective_sets"], 3.0)
        self.assertEqual(muscles["chest"]["effective_sets"], 0.0)

    def test_window_before_any_workout(self) -> None:
        window = self.stats.current_window("2024-03-01T08:00:00Z")
        self.assertEqual(window.start_iso, "2024-03-01T08:00:00.000Z")
        self.assertIsNone(self.stats.training_phase("2024-03-01T08:00:00Z"))

    def test_progression_suggestion(self) -> None:
        self.log(2, "2024-01-02", [("barbell-bench-press", 11, 77.5, "hard"), ("barbell-bench-press", 10, 77.5, "hard")])
        self.log(2, "2024-01-09", [("barbell-bench-press", 10, 80.0, "hard"), ("barbell-bench-press", 10, 80.0, "hard")])
        suggestion = self.stats.progression_suggestion("barbell-bench-press")
        self.assertEqual(suggestion.suggested_load_kg, 82.5)
        self.assertEqual(suggestion.increase_percent, 2.5)

    def test_progression_suggestion_lower_body(self) -> None:
        for date in ("2024-01-01", "2024-01-08"):
            self.log(1, date, [("barbell-back-squat", 10, 100.0, "hard")] * 2)
        suggestion = self.stats.progression_suggestion("barbell-back-squat")
        self.assertEqual(suggestion.suggested_load_kg, 105.0)

    def test_no_suggestion_when_reps_missed(self) -> None:
        self.log(2, "2024-01-02", [("barbell-bench-press", 10, 80.0, "hard"), ("barbell-bench-press", 8, 80.0, "hard")])
        self.log(2, "2024-01-09", [("barbell-bench-press", 10, 80.0, "hard"), ("barbell-bench-press", 10, 80.0, "hard")])
        self.assertIsNone(self.stats.progression_suggestion("barbell-bench-press"))

    def test_progression_rate(self) -> None:
        for i, date in enumerate(("2024-01-01", "2024-01-15", "2024-01-29", "2024-02-12", "2024-02-26")):
            self.log(2, date, [("barbell-bench-press", 1, 70.0 + 2 * i, "hard")])
        result = self.stats.progression_rate("barbell-bench-press")
        self.assertTrue(result.has_enough_data)
        self.assertEqual(result.session_count, 5)
        self.assertGreater(result.actual_rate_kg_per_week, 1.0)
        self.assertEqual(result.reference_rate_kg_per_week, 1.25)

    def test_training_phase(self) -> None:
        self.log(1, "2024-01-01", [])
        phase = self.stats.training_phase("2024-01-29T09:00:00Z")
        self.assertAlmostEqual(phase["weeks_training"], 4.0)
        self.assertEqual(phase["phase"], TrainingPhase.TRANSITION)

    def test_planned_per_week_from_settings(self) -> None:
        self.assertEqual(self.stats.planned_per_week(), 6)
        self.settings.update({"planned_workouts_per_week": 4})
        self.assertEqual(self.stats.planned_per_week(), 4)

    def test_dashboard(self) -> None:
        self.log(1, "2024-01-01", [("barbell-back-squat", 8, 100.0, "hard")] * 2)
        self.log(2, "2024-01-09", [("barbell-bench-press", 8, 60.0, "hard")] * 2)
        self.log(3, "2024-01-10", [], complete=False)
        dashboard = self.stats.dashboard("2024-01-10T12:00:00Z")
        self.assertEqual(dashboard["anchor"], "2024-01-01T09:00:00.000Z")
        self.assertEqual(dashboard["window"]["week_number"], 1)
        self.assertEqual(dashboard["week"], {"workouts": 1, "sets": 2})
        self.assertEqual(dashboard["adherence"]["completed"], 2)
        self.assertEqual(len(dashboard["adherence"]["weekly_breakdown"]), 4)
        self.assertEqual(dashboard["phase"]["phase"], TrainingPhase.NEURAL)

    def test_dashboard_without_workouts(self) -> None:
        dashboard = self.stats.dashboard("2024-01-10T12:00:00Z")
        self.assertIsNone(dashboard["anchor"])
        self.assertIsNone(dashboard["phase"])
        self.assertEqual(dashboard["weeks_training"], 0.0)
        self.assertEqual(dashboard["adherence"]["completed"], 0)


if __name__ == "__main__":
    unittest.main()
