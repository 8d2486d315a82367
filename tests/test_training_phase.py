import os
import sys
import unittest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from algorithms.training_phase import classify_training_phase
from models import TrainingPhase


class TrainingPhaseTest(unittest.TestCase):
    def test_boundaries(self) -> None:
        cases = [
            (0.0, TrainingPhase.NEURAL),
            (2.99, TrainingPhase.NEURAL),
            (3.0, TrainingPhase.TRANSITION),
            (7.99, TrainingPhase.TRANSITION),
            (8.0, TrainingPhase.HYPERTROPHIC),
            (52.0, TrainingPhase.HYPERTROPHIC),
        ]
        for weeks, expected in cases:
            with self.subTest(weeks=weeks):
                self.assertIs(classify_training_phase(weeks).phase, expected)

    def test_copy(self) -> None:
        info = classify_training_phase(1)
        self.assertEqual(info.title, "Neural Adaptation Phase")
        self.assertIn("Sale 1988", info.citation)
        self.assertEqual(
            classify_training_phase(10).title, "Hypertrophy-Driven Phase"
        )

    def test_repeated_calls_agree(self) -> None:
        for weeks in (0, 3, 7.5, 12):
            with self.subTest(weeks=weeks):
                self.assertEqual(
                    classify_training_phase(weeks), classify_training_phase(weeks)
                )


if __name__ == "__main__":
    unittest.main()
