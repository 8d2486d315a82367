import math
from typing import Iterable, Tuple

import numpy as np


class MathTools:
    """Provides essential mathematical utilities for strength analytics."""

    EPLEY_DIVISOR: float = 30.0

    @classmethod
    def epley_1rm(cls, load_kg: float, reps: float) -> float:
        """Return the estimated one-rep max using the Epley formula.

        Invalid input (negative load, non-positive reps, NaN or infinity)
        yields ``0.0`` instead of raising. A result of ``0.0`` therefore means
        either "no estimate" or a genuine zero-load set; callers that need to
        tell them apart must check the inputs themselves.
        """
        try:
            load = float(load_kg)
            rep_count = float(reps)
        except (TypeError, ValueError):
            return 0.0
        if not math.isfinite(load) or not math.isfinite(rep_count):
            return 0.0
        if load < 0 or rep_count <= 0:
            return 0.0
        return load * (1 + rep_count / cls.EPLEY_DIVISOR)

    @staticmethod
    def linear_regression_slope(points: Iterable[Tuple[float, float]]) -> float:
        """Return the ordinary least-squares slope of ``(x, y)`` points.

        Fewer than two points, or points that all share the same ``x``,
        give a slope of ``0.0``.
        """
        data = np.asarray(list(points), dtype=float)
        n = len(data)
        if n < 2:
            return 0.0
        xs = data[:, 0]
        ys = data[:, 1]
        sum_x = float(xs.sum())
        sum_y = float(ys.sum())
        sum_xy = float((xs * ys).sum())
        sum_x2 = float((xs * xs).sum())
        denom = n * sum_x2 - sum_x * sum_x
        if denom == 0:
            return 0.0
        return (n * sum_xy - sum_x * sum_y) / denom

    @staticmethod
    def round_half_up(value: float) -> float:
        """Round to the nearest integer with halves rounded up."""
        return float(math.floor(value + 0.5))

    @staticmethod
    def round_to_increment(value: float, increment: float) -> float:
        """Round ``value`` to the nearest multiple of ``increment``."""
        if increment <= 0:
            raise ValueError("increment must be positive")
        return MathTools.round_half_up(value / increment) * increment

    @staticmethod
    def round_to_nearest_half(value: float) -> float:
        return MathTools.round_half_up(value * 2) / 2
