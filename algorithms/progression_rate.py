from typing import Iterable, List, Mapping, Optional, Sequence

from models import (
    ProgressionRateResult,
    ProgressionReference,
    ReferenceSegment,
    StrengthTrendPoint,
)
from reference_data import PROGRESSION_REFERENCES

from .math_tools import MathTools
from .timestamps import ONE_WEEK, parse_timestamp

MIN_SESSIONS_FOR_RATE = 4
MIN_WEEKS_FOR_RATE = 2.0


def best_set_points(rows: Iterable[Mapping]) -> List[StrengthTrendPoint]:
    """Collapse set rows into one strength point per workout.

    Each row needs ``workout_id``, ``exercise_id``, ``exercise_name``,
    ``completed_at``, ``reps`` and ``load_kg``. Rows must arrive in logged
    order: the best set is the one with the highest Epley estimate and a tie
    keeps the earlier set. Sets whose estimate is ``0.0`` (invalid input)
    only win when no set of the workout scores higher.
    """
    best = {}
    scores = {}
    for row in rows:
        workout_id = row["workout_id"]
        score = MathTools.epley_1rm(row["load_kg"], row["reps"])
        if workout_id in best and score <= scores[workout_id]:
            continue
        scores[workout_id] = score
        best[workout_id] = StrengthTrendPoint(
            workout_id=workout_id,
            exercise_id=row["exercise_id"],
            exercise_name=row["exercise_name"],
            completed_at=row["completed_at"],
            best_set_reps=int(row["reps"]),
            best_set_load_kg=float(row["load_kg"]),
        )
    return sorted(best.values(), key=lambda p: parse_timestamp(p.completed_at))


def reference_for(
    exercise_id: str, references: Optional[Iterable[ProgressionReference]] = None
) -> Optional[ProgressionReference]:
    for reference in PROGRESSION_REFERENCES if references is None else references:
        if reference.exercise_id == exercise_id:
            return reference
    return None


def segment_for_week(
    segments: Sequence[ReferenceSegment], week: float
) -> Optional[ReferenceSegment]:
    """Return the segment whose ``[from, to)`` range holds ``week``.

    Past the end of the curve the last segment applies.
    """
    for segment in segments:
        if segment.from_week <= week < segment.to_week:
            return segment
    return segments[-1] if segments else None


def calculate_progression_rate(
    exercise_id: str,
    series: Sequence[StrengthTrendPoint],
    references: Optional[Iterable[ProgressionReference]] = None,
) -> ProgressionRateResult:
    """Fit estimated 1RM against weeks and compare with a published rate.

    The slope is only reported once there are at least four sessions
    spanning two weeks; otherwise ``actual_rate_kg_per_week`` is ``0.0`` and
    ``has_enough_data`` is ``False``. Unparseable ``completed_at`` values
    raise ``ValueError``.
    """
    if not series:
        return ProgressionRateResult(
            exercise_id=exercise_id,
            actual_rate_kg_per_week=0.0,
            weeks_of_data=0.0,
            session_count=0,
            reference_rate_kg_per_week=None,
            reference_caveat=None,
            reference_label=None,
            has_enough_data=False,
        )

    timed = sorted(
        ((parse_timestamp(p.completed_at), p) for p in series), key=lambda t: t[0]
    )
    first_at = timed[0][0]
    last_at = timed[-1][0]
    weeks_of_data = max(0.0, (last_at - first_at) / ONE_WEEK)

    # An invalid set scores 0.0 and still enters the fit.
    points = [
        (
            max(0.0, (at - first_at) / ONE_WEEK),
            MathTools.epley_1rm(p.best_set_load_kg, p.best_set_reps),
        )
        for at, p in timed
    ]

    session_count = len(timed)
    has_enough_data = (
        session_count >= MIN_SESSIONS_FOR_RATE and weeks_of_data >= MIN_WEEKS_FOR_RATE
    )
    rate = MathTools.linear_regression_slope(points) if has_enough_data else 0.0

    reference = reference_for(exercise_id, references)
    segment = segment_for_week(reference.segments, weeks_of_data) if reference else None
    if segment is None:
        reference = None

    return ProgressionRateResult(
        exercise_id=exercise_id,
        actual_rate_kg_per_week=rate,
        weeks_of_data=weeks_of_data,
        session_count=session_count,
        reference_rate_kg_per_week=segment.rate_kg_per_week if segment else None,
        reference_caveat=reference.caveat if reference else None,
        reference_label=reference.label if reference else None,
        has_enough_data=has_enough_data,
    )
