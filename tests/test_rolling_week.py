import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms.rolling_week import rolling_week_window, weeks_between
from algorithms.timestamps import format_timestamp, normalize_timestamp, parse_timestamp


class TimestampTest(unittest.TestCase):
    def test_normalize(self) -> None:
        self.assertEqual(
            normalize_timestamp("2024-03-01T10:00:00Z"), "2024-03-01T10:00:00.000Z"
        )
        self.assertEqual(
            normalize_timestamp("2024-03-01T12:00:00+02:00"),
            "2024-03-01T10:00:00.000Z",
        )
        self.assertEqual(
            normalize_timestamp("2024-03-01T10:00:00.123456"),
            "2024-03-01T10:00:00.123Z",
        )

    def test_round_trip(self) -> None:
        ts = "2024-01-05T08:30:15.250Z"
        self.assertEqual(format_timestamp(parse_timestamp(ts)), ts)

    def test_invalid(self) -> None:
        for bad in ("", "yesterday", None, "2024-13-45"):
            with self.assertRaises(ValueError):
                parse_timestamp(bad)


class RollingWeekTest(unittest.TestCase):
    anchor = "2024-01-01T09:00:00.000Z"

    def test_first_week(self) -> None:
        window = rolling_week_window("2024-01-03T12:00:00.000Z", self.anchor)
        self.assertEqual(window.week_number, 0)
        self.assertEqual(window.start_iso, "2024-01-01T09:00:00.000Z")
        self.assertEqual(window.end_iso, "2024-01-08T09:00:00.000Z")

    def test_boundary_belongs_to_next_week(self) -> None:
        window = rolling_week_window("2024-01-08T09:00:00.000Z", self.anchor)
        self.assertEqual(window.week_number, 1)
        self.assertEqual(window.start_iso, "2024-01-08T09:00:00.000Z")

    def test_later_week(self) -> None:
        window = rolling_week_window("2024-01-23T00:00:00Z", self.anchor)
        self.assertEqual(window.week_number, 3)
        self.assertEqual(window.start_iso, "2024-01-22T09:00:00.000Z")
        self.assertEqual(window.end_iso, "2024-01-29T09:00:00.000Z")

    def test_before_anchor_is_week_zero(self) -> None:
        window = rolling_week_window("2023-12-25T00:00:00Z", self.anchor)
        self.assertEqual(window.week_number, 0)
        self.assertEqual(window.start_iso, self.anchor)

    def test_at_anchor(self) -> None:
        window = rolling_week_window(self.anchor, self.anchor)
        self.assertEqual(window.week_number, 0)
        self.assertEqual(window.start_iso, self.anchor)
        self.assertEqual(window.end_iso, "2024-01-08T09:00:00.000Z")

    def test_second_after_week_two_starts(self) -> None:
        window = rolling_week_window("2024-01-15T09:00:01.000Z", self.anchor)
        self.assertEqual(window.week_number, 2)
        self.assertEqual(window.start_iso, "2024-01-15T09:00:00.000Z")
        self.assertEqual(window.end_iso, "2024-01-22T09:00:00.000Z")

    def test_repeated_calls_agree(self) -> None:
        first = rolling_week_window("2024-01-23T00:00:00Z", self.anchor)
        for _ in range(3):
            self.assertEqual(
                rolling_week_window("2024-01-23T00:00:00Z", self.anchor), first
            )

    def test_invalid_timestamp(self) -> None:
        with self.assertRaises(ValueError):
            rolling_week_window("not a date", self.anchor)

    def test_weeks_between(self) -> None:
        self.assertAlmostEqual(
            weeks_between(self.anchor, "2024-01-11T21:00:00.000Z"), 1.5
        )
        self.assertEqual(weeks_between("2024-02-01T00:00:00Z", self.anchor), 0.0)


if __name__ == "__main__":
    unittest.main()
