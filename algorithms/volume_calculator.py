from typing import Dict, Iterable, List, Mapping, Optional

from models import (
    EffortLabel,
    MuscleGroup,
    MuscleRole,
    MuscleVolumeResult,
    SetForVolume,
    VolumeZone,
)

from .math_tools import MathTools


class VolumeCalculator:
    """Credit-weighted weekly set counts per muscle group.

    ``accumulate`` turns logged sets into raw effective-set totals and
    ``classify`` maps those totals onto the muscle-group thresholds.
    """

    ROLE_CREDITS = {MuscleRole.DIRECT: 1.0, MuscleRole.INDIRECT: 0.5}
    EFFORT_MULTIPLIERS = {
        EffortLabel.EASY: 0.5,
        EffortLabel.PRODUCTIVE: 1.0,
        EffortLabel.HARD: 1.0,
        EffortLabel.FAILURE: 1.0,
    }
    DEFAULT_EFFORT_MULTIPLIER = 1.0
    DEFAULT_METCON_DISCOUNT = 1.0

    def __init__(
        self,
        muscle_groups: Iterable[MuscleGroup],
        excluded_exercises: Iterable[str] = (),
        metcon_discounts: Optional[Mapping[str, float]] = None,
    ) -> None:
        self.muscle_groups: List[MuscleGroup] = list(muscle_groups)
        self.excluded_exercises = frozenset(excluded_exercises)
        self.metcon_discounts: Dict[str, float] = dict(metcon_discounts or {})

    def role_credit(self, role) -> float:
        """Direct work counts as a full set, indirect work as half."""
        try:
            return self.ROLE_CREDITS[MuscleRole(role)]
        except ValueError:
            return 0.0

    def effort_multiplier(self, effort) -> float:
        """Easy sets count half. Unknown labels count in full."""
        try:
            return self.EFFORT_MULTIPLIERS[EffortLabel(effort)]
        except ValueError:
            return self.DEFAULT_EFFORT_MULTIPLIER

    def metcon_discount(self, exercise_id: str) -> float:
        """Return the conditioning discount for ``exercise_id`` (1.0 if none)."""
        return self.metcon_discounts.get(exercise_id, self.DEFAULT_METCON_DISCOUNT)

    def accumulate(self, sets: Iterable[SetForVolume]) -> Dict[str, float]:
        totals: Dict[str, float] = {}
        for logged in sets:
            if logged.is_warmup or logged.exercise_id in self.excluded_exercises:
                continue
            factor = self.effort_multiplier(logged.effort_label) * self.metcon_discount(
                logged.exercise_id
            )
            for mapping in logged.mappings:
                credit = self.role_credit(mapping.role) * factor
                totals[mapping.muscle_group] = (
                    totals.get(mapping.muscle_group, 0.0) + credit
                )
        return totals

    @staticmethod
    def zone_for(total: float, group: MuscleGroup) -> VolumeZone:
        if total < group.mev_low:
            return VolumeZone.RED
        if total < group.optimal_low:
            return VolumeZone.YELLOW
        if total <= group.optimal_high:
            return VolumeZone.GREEN
        if total <= group.mrv_high:
            return VolumeZone.AMBER
        return VolumeZone.ORANGE

    def classify(self, totals: Mapping[str, float]) -> List[MuscleVolumeResult]:
        """Return one result per known muscle group, in table order.

        The zone is decided on the raw total; the reported value is rounded
        to the nearest half set.
        """
        results: List[MuscleVolumeResult] = []
        for group in self.muscle_groups:
            raw = float(totals.get(group.id, 0.0))
            results.append(
                MuscleVolumeResult(
                    muscle_group_id=group.id,
                    display_name=group.display_name,
                    effective_sets=MathTools.round_to_nearest_half(raw),
                    zone=self.zone_for(raw, group),
                    thresholds=group.thresholds,
                )
            )
        return results

    def calculate(self, sets: Iterable[SetForVolume]) -> List[MuscleVolumeResult]:
        return self.classify(self.accumulate(sets))
