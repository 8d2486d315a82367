import math
from typing import Iterable, List, Optional, Sequence

from models import (
    MuscleMapping,
    MuscleRole,
    ProgressionExposure,
    ProgressionSuggestion,
)
from reference_data import EXERCISE_MUSCLE_MAPPINGS, LOWER_BODY_MUSCLES

from .math_tools import MathTools

LOWER_BODY_INCREASE_PERCENT = 5.0
LOWER_BODY_INCREMENT_KG = 2.5
UPPER_BODY_INCREASE_PERCENT = 2.5
UPPER_BODY_INCREMENT_KG = 1.25
QUALIFYING_SETS = 2
DOUBLE_PROGRESSION_REASON = (
    "Top rep range was hit for both working sets across two consecutive exposures."
)


def exposure_qualifies(exposure: ProgressionExposure) -> bool:
    """Return ``True`` when at least two working sets reached the rep ceiling."""
    reps = list(exposure.working_set_reps)
    if len(reps) < QUALIFYING_SETS:
        return False
    hits = sum(1 for r in reps if r >= exposure.target_rep_high)
    return hits >= QUALIFYING_SETS


def catalog_mappings(exercise_id: str) -> List[MuscleMapping]:
    """Muscle mappings of ``exercise_id`` from the seeded catalog."""
    return [
        MuscleMapping(m.muscle_group, m.role)
        for m in EXERCISE_MUSCLE_MAPPINGS
        if m.exercise_id == exercise_id
    ]


def is_lower_body(mappings: Optional[Iterable[MuscleMapping]]) -> bool:
    for mapping in mappings or ():
        try:
            direct = MuscleRole(mapping.role) is MuscleRole.DIRECT
        except ValueError:
            continue
        if direct and mapping.muscle_group in LOWER_BODY_MUSCLES:
            return True
    return False


def evaluate_double_progression(
    exercise_id: str,
    exposures: Sequence[ProgressionExposure],
    mappings: Optional[Iterable[MuscleMapping]] = None,
) -> Optional[ProgressionSuggestion]:
    """Suggest a heavier load after two consecutive top-of-range exposures.

    ``exposures`` are ordered most recent first; only the first two are
    inspected. Lower-body lifts (a direct quads, hamstrings or glutes
    mapping) move by 5% rounded to 2.5 kg, everything else by 2.5% rounded
    to 1.25 kg. Without ``mappings`` the seeded catalog mappings of
    ``exercise_id`` are used. Returns ``None`` when the rule does not fire.
    """
    if len(exposures) < 2:
        return None
    latest, previous = exposures[0], exposures[1]
    if not (exposure_qualifies(latest) and exposure_qualifies(previous)):
        return None

    base = max(latest.top_load_kg, previous.top_load_kg)
    if not math.isfinite(base):
        return None

    if mappings is None:
        mappings = catalog_mappings(exercise_id)
    if is_lower_body(mappings):
        percent, increment = LOWER_BODY_INCREASE_PERCENT, LOWER_BODY_INCREMENT_KG
    else:
        percent, increment = UPPER_BODY_INCREASE_PERCENT, UPPER_BODY_INCREMENT_KG

    suggested = MathTools.round_to_increment(base * (1 + percent / 100), increment)
    return ProgressionSuggestion(
        exercise_id=exercise_id,
        suggested_load_kg=suggested,
        increase_percent=percent,
        reason=DOUBLE_PROGRESSION_REASON,
    )
