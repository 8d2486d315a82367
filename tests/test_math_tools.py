import os
import sys
import math
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms import MathTools, WeightConverter


class MathToolsTest(unittest.TestCase):
    def test_epley(self) -> None:
        self.assertAlmostEqual(MathTools.epley_1rm(100, 5), 116.6666666, places=4)
        self.assertAlmostEqual(MathTools.epley_1rm(80, 10), 106.6666666, places=4)
        self.assertEqual(MathTools.epley_1rm(0, 8), 0.0)

    def test_epley_invalid_input(self) -> None:
        self.assertEqual(MathTools.epley_1rm(-5, 5), 0.0)
        self.assertEqual(MathTools.epley_1rm(100, 0), 0.0)
        self.assertEqual(MathTools.epley_1rm(math.nan, 5), 0.0)
        self.assertEqual(MathTools.epley_1rm(100, math.inf), 0.0)
        self.assertEqual(MathTools.epley_1rm("heavy", 5), 0.0)

    def test_epley_repeated_calls_agree(self) -> None:
        first = MathTools.epley_1rm(102.5, 7)
        for _ in range(3):
            self.assertEqual(MathTools.epley_1rm(102.5, 7), first)

    def test_slope(self) -> None:
        points = [(0, 1), (1, 3), (2, 5), (3, 7)]
        self.assertAlmostEqual(MathTools.linear_regression_slope(points), 2.0)
        self.assertEqual(MathTools.linear_regression_slope([(0, 1)]), 0.0)
        self.assertEqual(MathTools.linear_regression_slope([]), 0.0)
        self.assertEqual(
            MathTools.linear_regression_slope([(2, 1), (2, 5), (2, 9)]), 0.0
        )

    def test_rounding(self) -> None:
        self.assertEqual(MathTools.round_to_increment(82.0, 1.25), 82.5)
        self.assertEqual(MathTools.round_to_increment(105.0, 2.5), 105.0)
        self.assertEqual(MathTools.round_to_increment(103.7, 2.5), 102.5)
        self.assertEqual(MathTools.round_to_nearest_half(6.2), 6.0)
        self.assertEqual(MathTools.round_to_nearest_half(1.9), 2.0)
        self.assertEqual(MathTools.round_to_nearest_half(0.25), 0.5)
        with self.assertRaises(ValueError):
            MathTools.round_to_increment(10, 0)


class WeightConverterTest(unittest.TestCase):
    def test_conversions(self) -> None:
        self.assertEqual(WeightConverter.kg_to_lb(100), 220.46)
        self.assertEqual(WeightConverter.lb_to_kg(220.46), 100.0)
        self.assertEqual(WeightConverter.to_kg(50, "kg"), 50.0)
        self.assertEqual(WeightConverter.from_kg(100, "lb"), 220.46)

    def test_unknown_unit(self) -> None:
        with self.assertRaises(ValueError):
            WeightConverter.to_kg(10, "stone")
        with self.assertRaises(ValueError):
            WeightConverter.from_kg(10, "st")


if __name__ == "__main__":
    unittest.main()
