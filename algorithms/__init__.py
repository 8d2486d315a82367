from .math_tools import MathTools
from .weight_converter import WeightConverter
from .rolling_week import rolling_week_window, weeks_between
from .training_phase import classify_training_phase
from .volume_calculator import VolumeCalculator
from .progression_engine import evaluate_double_progression
from .progression_rate import best_set_points, calculate_progression_rate

__all__ = [
    "MathTools",
    "WeightConverter",
    "rolling_week_window",
    "weeks_between",
    "classify_training_phase",
    "VolumeCalculator",
    "evaluate_double_progression",
    "best_set_points",
    "calculate_progression_rate",
]
