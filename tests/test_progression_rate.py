import os
import sys
import datetime
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms.progression_rate import (
    best_set_points,
    calculate_progression_rate,
    segment_for_week,
)
from algorithms.timestamps import format_timestamp
from models import ReferenceSegment, StrengthTrendPoint

START = datetime.datetime(2024, 1, 1, 10, tzinfo=datetime.timezone.utc)


def point(week, load, reps=1, exercise_id="barbell-bench-press"):
    completed = format_timestamp(START + datetime.timedelta(weeks=week))
    return StrengthTrendPoint(
        workout_id=f"w{week}",
        exercise_id=exercise_id,
        exercise_name=exercise_id,
        completed_at=completed,
        best_set_reps=reps,
        best_set_load_kg=load,
    )


class ProgressionRateTest(unittest.TestCase):
    def test_bench_rate_and_reference(self) -> None:
        series = [point(w, 70 + 2 * i) for i, w in enumerate([0, 2, 4, 6, 8])]
        result = calculate_progression_rate("barbell-bench-press", series)
        self.assertTrue(result.has_enough_data)
        self.assertEqual(result.session_count, 5)
        self.assertAlmostEqual(result.weeks_of_data, 8.0)
        self.assertGreater(result.actual_rate_kg_per_week, 1.0)
        self.assertEqual(result.reference_rate_kg_per_week, 1.25)
        self.assertIn("Ogasawara", result.reference_label)
        self.assertIn("Single small study", result.reference_caveat)

    def test_squat_reference(self) -> None:
        series = [
            point(w, 100 + w, exercise_id="barbell-back-squat") for w in (0, 3, 6, 9)
        ]
        result = calculate_progression_rate("barbell-back-squat", series)
        self.assertTrue(result.has_enough_data)
        self.assertEqual(result.reference_rate_kg_per_week, 1.74)
        self.assertIn("Spence", result.reference_label)

    def test_not_enough_sessions(self) -> None:
        series = [point(w, 70 + w) for w in (0, 2, 4)]
        result = calculate_progression_rate("barbell-bench-press", series)
        self.assertFalse(result.has_enough_data)
        self.assertEqual(result.actual_rate_kg_per_week, 0.0)
        self.assertEqual(result.session_count, 3)

    def test_not_enough_weeks(self) -> None:
        series = [point(w, 70) for w in (0, 0.25, 0.5, 1.0)]
        result = calculate_progression_rate("barbell-bench-press", series)
        self.assertFalse(result.has_enough_data)
        self.assertEqual(result.actual_rate_kg_per_week, 0.0)

    def test_empty_series(self) -> None:
        result = calculate_progression_rate("barbell-bench-press", [])
        self.assertEqual(result.session_count, 0)
        self.assertIsNone(result.reference_rate_kg_per_week)
        self.assertFalse(result.has_enough_data)

    def test_no_reference_for_other_lifts(self) -> None:
        series = [point(w, 20 + w, exercise_id="lat-pulldown") for w in (0, 1, 2, 3)]
        result = calculate_progression_rate("lat-pulldown", series)
        self.assertTrue(result.has_enough_data)
        self.assertIsNone(result.reference_label)
        self.assertIsNone(result.reference_caveat)

    def test_unsorted_input(self) -> None:
        ordered = [point(w, 60 + w) for w in (0, 1, 2, 3)]
        forward = calculate_progression_rate("barbell-bench-press", ordered)
        backward = calculate_progression_rate("barbell-bench-press", ordered[::-1])
        self.assertAlmostEqual(
            forward.actual_rate_kg_per_week, backward.actual_rate_kg_per_week
        )

    def test_invalid_timestamp(self) -> None:
        bad = StrengthTrendPoint("w", "e", "E", "later", 5, 50.0)
        with self.assertRaises(ValueError):
            calculate_progression_rate("e", [bad])

    def test_repeated_calls_agree(self) -> None:
        series = [point(w, 70 + 2 * i) for i, w in enumerate([0, 2, 4, 6, 8])]
        first = calculate_progression_rate("barbell-bench-press", series)
        for _ in range(3):
            self.assertEqual(
                calculate_progression_rate("barbell-bench-press", series), first
            )

    def test_segment_past_curve_uses_last(self) -> None:
        segments = (ReferenceSegment(0, 6, 1.7), ReferenceSegment(6, 12, 1.25))
        self.assertEqual(segment_for_week(segments, 3).rate_kg_per_week, 1.7)
        self.assertEqual(segment_for_week(segments, 6).rate_kg_per_week, 1.25)
        self.assertEqual(segment_for_week(segments, 40).rate_kg_per_week, 1.25)
        self.assertIsNone(segment_for_week((), 1))


class BestSetPointsTest(unittest.TestCase):
    def row(self, workout_id, completed_at, reps, load):
        return {
            "workout_id": workout_id,
            "exercise_id": "barbell-bench-press",
            "exercise_name": "Barbell Bench Press",
            "completed_at": completed_at,
            "reps": reps,
            "load_kg": load,
        }

    def test_best_set_per_workout(self) -> None:
        rows = [
            self.row("a", "2024-01-01T10:00:00.000Z", 10, 60),
            self.row("a", "2024-01-01T10:00:00.000Z", 5, 80),
            self.row("b", "2024-01-03T10:00:00.000Z", 8, 70),
        ]
        points = best_set_points(rows)
        self.assertEqual([p.workout_id for p in points], ["a", "b"])
        self.assertEqual(points[0].best_set_load_kg, 80.0)
        self.assertEqual(points[0].best_set_reps, 5)

    def test_tie_keeps_earlier_set(self) -> None:
        rows = [
            self.row("a", "2024-01-01T10:00:00.000Z", 10, 60),
            self.row("a", "2024-01-01T10:00:00.000Z", 10, 60),
        ]
        rows[0]["exercise_name"] = "first"
        rows[1]["exercise_name"] = "second"
        points = best_set_points(rows)
        self.assertEqual(len(points), 1)
        self.assertEqual(points[0].exercise_name, "first")

    def test_sorted_by_completion(self) -> None:
        rows = [
            self.row("late", "2024-02-01T10:00:00.000Z", 5, 50),
            self.row("early", "2024-01-01T10:00:00.000Z", 5, 50),
        ]
        self.assertEqual(
            [p.workout_id for p in best_set_points(rows)], ["early", "late"]
        )

    def test_repeated_calls_agree(self) -> None:
        rows = [
            self.row("a", "2024-01-01T10:00:00.000Z", 10, 60),
            self.row("a", "2024-01-01T10:00:00.000Z", 6, 75),
            self.row("b", "2024-01-08T10:00:00.000Z", 8, 70),
        ]
        first = best_set_points(rows)
        for _ in range(3):
            self.assertEqual(best_set_points(rows), first)


if __name__ == "__main__":
    unittest.main()
