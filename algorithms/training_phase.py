from models import TrainingPhase, TrainingPhaseInfo

NEURAL_UPPER_WEEKS = 3
TRANSITION_UPPER_WEEKS = 8

PHASE_INFO = {
    TrainingPhase.NEURAL: TrainingPhaseInfo(
        phase=TrainingPhase.NEURAL,
        title="Neural Adaptation Phase",
        description=(
            "Most of your strength gains right now come from your nervous "
            "system learning to recruit muscle more efficiently - not from "
            "muscle growth. This is normal and expected. Hypertrophy is "
            "beginning at the cellular level but is not yet detectable by "
            "most measurement methods."
        ),
        citation="Moritani & deVries 1979; Sale 1988",
    ),
    TrainingPhase.TRANSITION: TrainingPhaseInfo(
        phase=TrainingPhase.TRANSITION,
        title="Transition Phase",
        description=(
            "Measurable muscle growth is now contributing to your strength "
            "gains alongside continued neural adaptations. One study detected "
            "significant quadriceps size increases by day 20 of training. "
            "Both mechanisms are active - strength gains reflect a mix of "
            "skill, neural drive, and actual muscle tissue."
        ),
        citation="Seynnes et al. 2007; Damas et al. 2016",
    ),
    TrainingPhase.HYPERTROPHIC: TrainingPhaseInfo(
        phase=TrainingPhase.HYPERTROPHIC,
        title="Hypertrophy-Driven Phase",
        description=(
            "Muscle growth is now an increasingly important driver of "
            "continued strength gains, though neural factors remain "
            "significant - especially for 1RM performance where coordination "
            "matters. One study found ~40% of force increase was attributable "
            "to hypertrophy after 60 days of training."
        ),
        citation="Narici et al. 1996; Sale 1988",
    ),
}


def classify_training_phase(weeks_training: float) -> TrainingPhaseInfo:
    """Map weeks since the first workout to a training phase."""
    if weeks_training < NEURAL_UPPER_WEEKS:
        return PHASE_INFO[TrainingPhase.NEURAL]
    if weeks_training < TRANSITION_UPPER_WEEKS:
        return PHASE_INFO[TrainingPhase.TRANSITION]
    return PHASE_INFO[TrainingPhase.HYPERTROPHIC]
