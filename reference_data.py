"""Static reference tables seeded into the database.

Exercise catalog, exercise to muscle mappings, weekly volume thresholds,
conditioning discounts and the literature progression curves used by the
analytics.
"""
from __future__ import annotations

from typing import Dict, FrozenSet, List

from models import (
    Exercise,
    ExerciseCategory as C,
    ExerciseMuscleMapping,
    MuscleGroup,
    MuscleRole,
    ProgressionReference,
    ReferenceSegment,
)

SEED_VERSION = "1"
PROGRAM_ID = "hybrid-bb-2"
PHASE_ID = "hybrid-bb-2-phase-1"
DEFAULT_TARGET_REP_HIGH = 10
DEFAULT_REST_SECONDS = 90

LOWER_BODY_MUSCLES: FrozenSet[str] = frozenset({"quads", "hamstrings", "glutes"})

EXERCISES: List[Exercise] = [
    Exercise("broad-jumps", "Broad Jumps", C.METCON, "bodyweight"),
    Exercise("barbell-back-squat", "Barbell Back Squat", C.COMPOUND, "barbell"),
    Exercise("seated-leg-curl", "Seated Leg Curl", C.ISOLATION, "machine"),
    Exercise("ghd-raise", "GHD Raise", C.ISOLATION, "machine"),
    Exercise("hanging-knee-raise", "Hanging Knee Raise", C.ISOLATION, "bodyweight"),
    Exercise("wall-hip-flexor-stretch", "Wall Hip Flexor Stretch", C.MOBILITY, "bodyweight"),
    Exercise("barbell-bench-press", "Barbell Bench Press", C.COMPOUND, "barbell"),
    Exercise("assisted-dips", "Assisted Dips", C.COMPOUND, "assisted"),
    Exercise("cable-lateral-raise", "Cable Lateral Raise", C.ISOLATION, "cable"),
    Exercise("preacher-curl-ez", "Preacher Curl (EZ)", C.ISOLATION, "barbell"),
    Exercise("spider-curl", "Spider Curl", C.ISOLATION, "dumbbell"),
    Exercise("dead-hang-passive", "Dead Hang (Passive)", C.MOBILITY, "bodyweight"),
    Exercise("rack-assisted-chin-up", "Rack/Assisted Chin-Up", C.COMPOUND, "assisted"),
    Exercise("seated-cable-row", "Seated Cable Row", C.COMPOUND, "cable"),
    Exercise("machine-row", "Machine Row", C.COMPOUND, "machine"),
    Exercise("cable-y-raise", "Cable Y-Raise", C.ISOLATION, "cable"),
    Exercise("triceps-extension-cable", "Triceps Extension", C.ISOLATION, "cable"),
    Exercise("box-step-overs", "Box Step-Overs", C.METCON, "bodyweight"),
    Exercise("ql-walk-carry", "QL Walk (Carry)", C.METCON, "mixed"),
    Exercise("bss-hops", "BSS Hops", C.METCON, "bodyweight"),
    Exercise("bulgarian-split-squat", "Bulgarian Split Squat", C.COMPOUND, "dumbbell"),
    Exercise(
        "single-leg-stiff-leg-deadlift",
        "Single-Leg Stiff-Leg Deadlift",
        C.COMPOUND,
        "dumbbell",
    ),
    Exercise("leg-extension", "Leg Extension", C.ISOLATION, "machine"),
    Exercise("mobility-metcon", "Mobility MetCon", C.MOBILITY, "bodyweight"),
    Exercise("db-incline-press", "DB Incline Press", C.COMPOUND, "dumbbell"),
    Exercise("cable-crossover", "Cable Crossover", C.ISOLATION, "cable"),
    Exercise("side-lying-lateral-raise", "Side-Lying Lateral Raise", C.ISOLATION, "dumbbell"),
    Exercise("barbell-curl", "Barbell Curl", C.ISOLATION, "barbell"),
    Exercise("dumbbell-curl", "Dumbbell Curl", C.ISOLATION, "dumbbell"),
    Exercise("lat-pulldown", "Lat Pulldown", C.COMPOUND, "machine"),
    Exercise("inverted-row", "Inverted Row", C.COMPOUND, "bodyweight"),
    Exercise("rear-delt-fly", "Rear Delt Fly", C.ISOLATION, "dumbbell"),
    Exercise("hill-sprints", "Hill Sprints", C.METCON, "bodyweight"),
]

_D = MuscleRole.DIRECT
_I = MuscleRole.INDIRECT

_MAPPING_ROWS = [
    ("broad-jumps", "quads", _D),
    ("broad-jumps", "glutes", _D),
    ("barbell-back-squat", "quads", _D),
    ("barbell-back-squat", "glutes", _D),
    ("seated-leg-curl", "hamstrings", _D),
    ("ghd-raise", "abs", _D),
    ("hanging-knee-raise", "abs", _D),
    ("barbell-bench-press", "chest", _D),
    ("barbell-bench-press", "triceps", _I),
    ("barbell-bench-press", "front-delts", _I),
    ("assisted-dips", "triceps", _D),
    ("assisted-dips", "chest", _D),
    ("cable-lateral-raise", "side-delts", _D),
    ("preacher-curl-ez", "biceps", _D),
    ("spider-curl", "biceps", _D),
    ("barbell-curl", "biceps", _D),
    ("dumbbell-curl", "biceps", _D),
    ("dead-hang-passive", "forearms", _D),
    ("rack-assisted-chin-up", "lats", _D),
    ("rack-assisted-chin-up", "biceps", _I),
    ("seated-cable-row", "upper-back", _D),
    ("seated-cable-row", "lats", _I),
    ("seated-cable-row", "biceps", _I),
    ("machine-row", "upper-back", _D),
    ("machine-row", "lats", _I),
    ("machine-row", "biceps", _I),
    ("cable-y-raise", "lower-traps", _D),
    ("cable-y-raise", "rear-delts", _D),
    ("triceps-extension-cable", "triceps", _D),
    ("box-step-overs", "quads", _D),
    ("box-step-overs", "glutes", _D),
    ("ql-walk-carry", "obliques", _D),
    ("ql-walk-carry", "forearms", _D),
    ("bss-hops", "quads", _D),
    ("bss-hops", "glutes", _D),
    ("bulgarian-split-squat", "quads", _D),
    ("bulgarian-split-squat", "glutes", _D),
    ("single-leg-stiff-leg-deadlift", "hamstrings", _D),
    ("single-leg-stiff-leg-deadlift", "glutes", _D),
    ("leg-extension", "quads", _D),
    ("db-incline-press", "chest", _D),
    ("db-incline-press", "triceps", _I),
    ("db-incline-press", "front-delts", _I),
    ("cable-crossover", "chest", _D),
    ("side-lying-lateral-raise", "side-delts", _D),
    ("lat-pulldown", "lats", _D),
    ("lat-pulldown", "biceps", _I),
    ("inverted-row", "upper-back", _D),
    ("inverted-row", "biceps", _I),
    ("inverted-row", "lats", _I),
    ("rear-delt-fly", "rear-delts", _D),
    ("rear-delt-fly", "upper-back", _I),
    ("hill-sprints", "glutes", _D),
    ("hill-sprints", "hamstrings", _D),
]

EXERCISE_MUSCLE_MAPPINGS: List[ExerciseMuscleMapping] = [
    ExerciseMuscleMapping(exercise_id, muscle, role)
    for exercise_id, muscle, role in _MAPPING_ROWS
]

# (id, display name, size, mev_low, mev_high, optimal_low, optimal_high,
#  mrv_low, mrv_high, evidence grade)
_MUSCLE_GROUP_ROWS = [
    ("quads", "Quads", "large", 4, 6, 6, 12, 16, 20, "HIGH"),
    ("hamstrings", "Hamstrings", "large", 4, 6, 6, 10, 14, 18, "MEDIUM"),
    ("glutes", "Glutes", "large", 2, 4, 4, 10, 14, 18, "MEDIUM"),
    ("chest", "Chest", "large", 4, 6, 6, 12, 16, 20, "HIGH"),
    ("lats", "Lats", "large", 4, 6, 6, 12, 16, 20, "MEDIUM"),
    ("upper-back", "Upper Back", "large", 4, 6, 6, 12, 16, 22, "MEDIUM"),
    ("front-delts", "Front Delts", "small", 0, 2, 2, 6, 10, 12, "LOW"),
    ("side-delts", "Side Delts", "small", 4, 6, 6, 12, 16, 22, "MEDIUM"),
    ("rear-delts", "Rear Delts", "small", 2, 4, 4, 10, 14, 18, "LOW"),
    ("lower-traps", "Lower Traps", "small", 2, 3, 3, 8, 12, 16, "LOW"),
    ("triceps", "Triceps", "small", 2, 4, 4, 10, 14, 18, "MEDIUM"),
    ("biceps", "Biceps", "small", 2, 4, 4, 10, 14, 20, "MEDIUM"),
    ("forearms", "Forearms", "small", 0, 2, 2, 8, 12, 16, "LOW"),
    ("abs", "Abs", "small", 0, 2, 2, 10, 14, 20, "LOW"),
    ("obliques", "Obliques", "small", 0, 2, 2, 8, 12, 16, "LOW"),
]

MUSCLE_GROUPS: List[MuscleGroup] = [MuscleGroup(*row) for row in _MUSCLE_GROUP_ROWS]

METCON_DISCOUNTS: Dict[str, float] = {
    "broad-jumps": 0.1,
    "bss-hops": 0.1,
    "box-step-overs": 0.35,
    "hill-sprints": 0.2,
    "ql-walk-carry": 0.3,
}

EXCLUDED_FROM_HYPERTROPHY_VOLUME: FrozenSet[str] = frozenset({"dead-hang-passive"})

PROGRESSION_REFERENCES: List[ProgressionReference] = [
    ProgressionReference(
        exercise_id="barbell-bench-press",
        label="Ogasawara et al. 2012 (n=7)",
        citation=(
            "PMC3831787 - 7 untrained men, bench-only program, 3x/wk for 24 weeks."
        ),
        caveat=(
            "Single small study, bench-press-only program, lighter bodyweight "
            "cohort (65 kg avg). Your program and body differ - treat as loose "
            "context, not a target."
        ),
        segments=(
            ReferenceSegment(0, 6, 1.7),
            ReferenceSegment(6, 12, 1.25),
            ReferenceSegment(12, 18, 0.8),
            ReferenceSegment(18, 24, 0.65),
        ),
    ),
    ProgressionReference(
        exercise_id="barbell-back-squat",
        label="Spence et al. 2011 (n=13)",
        citation=(
            "PMC3240883 - 13 untrained men, supervised full-body RT, 24 weeks. "
            "Only pre/post 1RM reported (no intermediate timepoints)."
        ),
        caveat=(
            "Only a 24-week average rate - no monthly breakdown exists. Early "
            "gains were likely faster, later gains slower, but this cannot be "
            "verified from the published data."
        ),
        segments=(ReferenceSegment(0, 24, 1.74),),
    ),
]

_STRENGTH = {"target_sets": 2, "target_rep_low": 6, "target_rep_high": 10, "rest_seconds": 90}
_ACCESSORY = {"target_sets": 2, "target_rep_low": 10, "target_rep_high": 15, "rest_seconds": 75}


def _timed(sets: int, rest: int) -> dict:
    return {
        "input_mode": "timed",
        "target_sets": sets,
        "target_rep_low": 1,
        "target_rep_high": 1,
        "rest_seconds": rest,
    }


PROGRAM_DAYS: List[dict] = [
    {
        "day_number": 1,
        "day_name": "Lower A",
        "slots": [
            {
                "exercise_id": "broad-jumps",
                "target_sets": 3,
                "target_rep_low": 5,
                "target_rep_high": 5,
                "rest_seconds": 90,
                "notes": "Explosive intent, reset each rep.",
            },
            {"exercise_id": "barbell-back-squat", **_STRENGTH},
            {"exercise_id": "seated-leg-curl", **_ACCESSORY},
            {
                "exercise_id": "ghd-raise",
                **_ACCESSORY,
                "alternates": ["hanging-knee-raise"],
            },
            {
                "exercise_id": "wall-hip-flexor-stretch",
                **_timed(2, 30),
                "notes": "Mobility hold 30-60s per side.",
            },
        ],
    },
    {
        "day_number": 2,
        "day_name": "Upper Push A",
        "slots": [
            {"exercise_id": "barbell-bench-press", **_STRENGTH},
            {"exercise_id": "assisted-dips", **_ACCESSORY},
            {"exercise_id": "cable-lateral-raise", **_ACCESSORY},
            {
                "exercise_id": "preacher-curl-ez",
                **_ACCESSORY,
                "alternates": ["spider-curl"],
            },
            {
                "exercise_id": "dead-hang-passive",
                **_timed(2, 60),
                "notes": "Passive hang for 30-60s.",
            },
        ],
    },
    {
        "day_number": 3,
        "day_name": "Upper Pull A",
        "slots": [
            {"exercise_id": "rack-assisted-chin-up", **_STRENGTH},
            {
                "exercise_id": "machine-row",
                **_ACCESSORY,
                "alternates": ["inverted-row", "seated-cable-row"],
            },
            {"exercise_id": "cable-y-raise", **_ACCESSORY},
            {"exercise_id": "triceps-extension-cable", **_ACCESSORY},
            {
                "exercise_id": "box-step-overs",
                **_timed(1, 120),
                "notes": "Timed: 2 minutes total alternating legs.",
            },
            {
                "exercise_id": "ql-walk-carry",
                **_timed(1, 60),
                "notes": "Timed: 1 minute loaded carry.",
            },
        ],
    },
    {
        "day_number": 4,
        "day_name": "Lower B",
        "slots": [
            {
                "exercise_id": "bss-hops",
                "target_sets": 2,
                "target_rep_low": 20,
                "target_rep_high": 20,
                "rest_seconds": 90,
                "notes": "Per leg explosive contacts.",
            },
            {
                "exercise_id": "bulgarian-split-squat",
                **_ACCESSORY,
                "notes": "Slow 3s eccentric.",
            },
            {"exercise_id": "single-leg-stiff-leg-deadlift", **_ACCESSORY},
            {"exercise_id": "leg-extension", **_ACCESSORY},
            {
                "exercise_id": "mobility-metcon",
                **_timed(1, 45),
                "notes": "Mobility circuit; not counted toward hypertrophy volume.",
            },
        ],
    },
    {
        "day_number": 5,
        "day_name": "Upper Push B",
        "slots": [
            {"exercise_id": "db-incline-press", **_STRENGTH},
            {"exercise_id": "cable-crossover", **_ACCESSORY},
            {"exercise_id": "side-lying-lateral-raise", **_ACCESSORY},
            {
                "exercise_id": "spider-curl",
                **_ACCESSORY,
                "alternates": ["preacher-curl-ez", "barbell-curl", "dumbbell-curl"],
            },
            {
                "exercise_id": "dead-hang-passive",
                **_timed(2, 60),
                "notes": "Passive hang for 30-60s.",
            },
        ],
    },
    {
        "day_number": 6,
        "day_name": "Upper Pull B",
        "slots": [
            {"exercise_id": "lat-pulldown", **_STRENGTH},
            {
                "exercise_id": "inverted-row",
                **_ACCESSORY,
                "alternates": ["machine-row"],
            },
            {"exercise_id": "rear-delt-fly", **_ACCESSORY},
            {"exercise_id": "triceps-extension-cable", **_ACCESSORY},
            {
                "exercise_id": "hill-sprints",
                **_timed(6, 60),
                "notes": "Timed intervals: 60s on / 60s off.",
            },
        ],
    },
]


