import sqlite3
import aiosqlite
import logging
import math
import uuid
from contextlib import contextmanager, asynccontextmanager
from typing import Dict, Iterable, List, Optional, Tuple

import reference_data
from algorithms.progression_rate import best_set_points
from algorithms.timestamps import (
    ONE_WEEK,
    format_timestamp,
    normalize_timestamp,
    parse_timestamp,
    utc_now_iso,
)
from config import YamlConfig
from export_schema import parse_payload
from models import (
    EffortLabel,
    Exercise,
    ExerciseCategory,
    ExerciseMuscleMapping,
    MuscleGroup,
    MuscleMapping,
    MuscleRole,
    ProgressionExposure,
    SetForVolume,
    StrengthTrendPoint,
)
from settings_schema import validate_settings

logger = logging.getLogger(__name__)

FIRST_WORKOUT_ANCHOR_KEY = "first_workout_timestamp"
SEED_VERSION_KEY = "seed_version"
CUSTOM_EXERCISE_PREFIX = "custom-"
CATEGORIES = {category.value for category in ExerciseCategory}
ROLES = {role.value for role in MuscleRole}


class Database:
    """Provides SQLite connection management and schema initialization."""

    _TABLE_DEFINITIONS = {
        "exercises": (
            """CREATE TABLE exercises (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    category TEXT NOT NULL,
                    equipment TEXT,
                    is_active INTEGER NOT NULL DEFAULT 1
                );""",
            ["id", "name", "category", "equipment", "is_active"],
        ),
        "exercise_muscle_mappings": (
            """CREATE TABLE exercise_muscle_mappings (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    exercise_id TEXT NOT NULL REFERENCES exercises(id),
                    muscle_group TEXT NOT NULL,
                    role TEXT NOT NULL CHECK(role IN ('direct', 'indirect')),
                    UNIQUE(exercise_id, muscle_group)
                );""",
            ["id", "exercise_id", "muscle_group", "role"],
        ),
        "muscle_groups": (
            """CREATE TABLE muscle_groups (
                    id TEXT PRIMARY KEY,
                    display_name TEXT NOT NULL,
                    size_category TEXT NOT NULL CHECK(size_category IN ('large', 'small')),
                    mev_low REAL NOT NULL,
                    mev_high REAL NOT NULL,
                    optimal_low REAL NOT NULL,
                    optimal_high REAL NOT NULL,
                    mrv_low REAL NOT NULL,
                    mrv_high REAL NOT NULL,
                    evidence_grade TEXT NOT NULL,
                    position INTEGER NOT NULL DEFAULT 0
                );""",
            [
                "id",
                "display_name",
                "size_category",
                "mev_low",
                "mev_high",
                "optimal_low",
                "optimal_high",
                "mrv_low",
                "mrv_high",
                "evidence_grade",
                "position",
            ],
        ),
        "programs": (
            """CREATE TABLE programs (
                    id TEXT PRIMARY KEY,
                    name TEXT NOT NULL,
                    is_active INTEGER NOT NULL DEFAULT 1
                );""",
            ["id", "name", "is_active"],
        ),
        "program_phases": (
            """CREATE TABLE program_phases (
                    id TEXT PRIMARY KEY,
                    program_id TEXT NOT NULL REFERENCES programs(id),
                    name TEXT NOT NULL,
                    phase_order INTEGER NOT NULL,
                    is_active INTEGER NOT NULL DEFAULT 1
                );""",
            ["id", "program_id", "name", "phase_order", "is_active"],
        ),
        "day_templates": (
            """CREATE TABLE day_templates (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    phase_id TEXT NOT NULL REFERENCES program_phases(id),
                    day_number INTEGER NOT NULL,
                    day_name TEXT NOT NULL,
                    UNIQUE(phase_id, day_number)
                );""",
            ["id", "phase_id", "day_number", "day_name"],
        ),
        "template_exercise_slots": (
            """CREATE TABLE template_exercise_slots (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    day_template_id INTEGER NOT NULL REFERENCES day_templates(id),
                    slot_order INTEGER NOT NULL,
                    default_exercise_id TEXT NOT NULL REFERENCES exercises(id),
                    input_mode TEXT NOT NULL DEFAULT 'reps',
                    target_sets INTEGER NOT NULL DEFAULT 2,
                    target_rep_low INTEGER NOT NULL,
                    target_rep_high INTEGER NOT NULL,
                    rest_seconds INTEGER,
                    notes TEXT,
                    UNIQUE(day_template_id, slot_order)
                );""",
            [
                "id",
                "day_template_id",
                "slot_order",
                "default_exercise_id",
                "input_mode",
                "target_sets",
                "target_rep_low",
                "target_rep_high",
                "rest_seconds",
                "notes",
            ],
        ),
        "slot_alternate_exercises": (
            """CREATE TABLE slot_alternate_exercises (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    slot_id INTEGER NOT NULL REFERENCES template_exercise_slots(id),
                    exercise_id TEXT NOT NULL REFERENCES exercises(id),
                    UNIQUE(slot_id, exercise_id)
                );""",
            ["id", "slot_id", "exercise_id"],
        ),
        "workouts": (
            """CREATE TABLE workouts (
                    id TEXT PRIMARY KEY,
                    phase_id TEXT REFERENCES program_phases(id),
                    day_template_id INTEGER REFERENCES day_templates(id),
                    started_at TEXT NOT NULL,
                    completed_at TEXT,
                    prs_score INTEGER,
                    bodyweight_kg REAL,
                    notes TEXT
                );""",
            [
                "id",
                "phase_id",
                "day_template_id",
                "started_at",
                "completed_at",
                "prs_score",
                "bodyweight_kg",
                "notes",
            ],
        ),
        "sets": (
            """CREATE TABLE sets (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    workout_id TEXT NOT NULL REFERENCES workouts(id),
                    exercise_id TEXT NOT NULL REFERENCES exercises(id),
                    set_order INTEGER NOT NULL,
                    reps INTEGER NOT NULL,
                    load_kg REAL NOT NULL,
                    effort_label TEXT NOT NULL CHECK(effort_label IN ('easy', 'productive', 'hard', 'failure')),
                    is_warmup INTEGER NOT NULL DEFAULT 0,
                    logged_at TEXT NOT NULL,
                    notes TEXT
                );""",
            [
                "id",
                "workout_id",
                "exercise_id",
                "set_order",
                "reps",
                "load_kg",
                "effort_label",
                "is_warmup",
                "logged_at",
                "notes",
            ],
        ),
        "bodyweight_log": (
            """CREATE TABLE bodyweight_log (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    workout_id TEXT REFERENCES workouts(id),
                    weight_kg REAL NOT NULL,
                    logged_at TEXT NOT NULL,
                    source TEXT NOT NULL CHECK(source IN ('workout', 'manual'))
                );""",
            ["id", "workout_id", "weight_kg", "logged_at", "source"],
        ),
        "settings": (
            """CREATE TABLE settings (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );""",
            ["key", "value"],
        ),
        "app_state": (
            """CREATE TABLE app_state (
                    key TEXT PRIMARY KEY,
                    value TEXT NOT NULL
                );""",
            ["key", "value"],
        ),
    }

    _INDEXES = [
        "CREATE INDEX IF NOT EXISTS idx_sets_workout_id ON sets(workout_id);",
        "CREATE INDEX IF NOT EXISTS idx_sets_exercise_id ON sets(exercise_id);",
        "CREATE INDEX IF NOT EXISTS idx_sets_logged_at ON sets(logged_at);",
        "CREATE INDEX IF NOT EXISTS idx_workouts_completed_at ON workouts(completed_at);",
        "CREATE INDEX IF NOT EXISTS idx_workouts_started_at ON workouts(started_at);",
        "CREATE INDEX IF NOT EXISTS idx_bodyweight_logged_at ON bodyweight_log(logged_at);",
    ]

    _DEFAULT_SETTINGS = {
        "theme": "dark",
        "units": "kg",
        "default_rest_seconds": "90",
        "planned_workouts_per_week": "6",
        "log_level": "INFO",
    }

    def __init__(self, db_path: str = "tracker.db") -> None:
        self._db_path = db_path
        self._ensure_schema()
        self._seed_reference_data()
        self._init_settings()

    @property
    def db_path(self) -> str:
        return self._db_path

    @contextmanager
    def _connection(self):
        connection = sqlite3.connect(self._db_path)
        try:
            yield connection
            connection.commit()
        finally:
            connection.close()

    def _ensure_schema(self) -> None:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute("PRAGMA foreign_keys=off;")
            for table, (sql, columns) in self._TABLE_DEFINITIONS.items():
                self._ensure_table(conn, table, sql, columns)
            for statement in self._INDEXES:
                cursor.execute(statement)
            cursor.execute("PRAGMA foreign_keys=on;")

    def _ensure_table(
        self, conn: sqlite3.Connection, table: str, sql: str, columns: List[str]
    ) -> None:
        cur = conn.execute(
            "SELECT name FROM sqlite_master WHERE type='table' AND name=?;", (table,)
        )
        if cur.fetchone() is None:
            conn.execute(sql)
            return

        cur = conn.execute(f"PRAGMA table_info({table});")
        existing_cols = [row[1] for row in cur.fetchall()]
        if existing_cols == columns:
            return

        logger.info("migrating table %s", table)
        conn.execute(f"DROP TABLE IF EXISTS {table}_old;")
        conn.execute(f"ALTER TABLE {table} RENAME TO {table}_old;")
        conn.execute(sql)

        common = [c for c in existing_cols if c in columns]
        if common:
            cols = ", ".join(common)
            missing = [c for c in columns if c not in existing_cols]
            if missing:
                def default_val(col: str) -> str:
                    if col == "input_mode":
                        return "'reps'"
                    if col in ("position", "is_warmup"):
                        return "0"
                    if col == "is_active":
                        return "1"
                    return "NULL"

                defaults = ", ".join(default_val(c) for c in missing)
                conn.execute(
                    f"INSERT INTO {table} ({cols}, {', '.join(missing)}) SELECT {cols}, {defaults} FROM {table}_old;"
                )
            else:
                conn.execute(
                    f"INSERT INTO {table} ({cols}) SELECT {cols} FROM {table}_old;"
                )
        conn.execute(f"DROP TABLE {table}_old;")

    def _seed_reference_data(self) -> None:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT value FROM app_state WHERE key = ?;", (SEED_VERSION_KEY,)
            ).fetchone()
            if row and row[0] == reference_data.SEED_VERSION:
                return
            logger.info("seeding reference data version %s", reference_data.SEED_VERSION)
            for position, group in enumerate(reference_data.MUSCLE_GROUPS):
                conn.execute(
                    "INSERT INTO muscle_groups (id, display_name, size_category, mev_low, mev_high, "
                    "optimal_low, optimal_high, mrv_low, mrv_high, evidence_grade, position) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?) "
                    "ON CONFLICT(id) DO UPDATE SET display_name=excluded.display_name, "
                    "size_category=excluded.size_category, mev_low=excluded.mev_low, "
                    "mev_high=excluded.mev_high, optimal_low=excluded.optimal_low, "
                    "optimal_high=excluded.optimal_high, mrv_low=excluded.mrv_low, "
                    "mrv_high=excluded.mrv_high, evidence_grade=excluded.evidence_grade, "
                    "position=excluded.position;",
                    (
                        group.id,
                        group.display_name,
                        group.size_category,
                        group.mev_low,
                        group.mev_high,
                        group.optimal_low,
                        group.optimal_high,
                        group.mrv_low,
                        group.mrv_high,
                        group.evidence_grade,
                        position,
                    ),
                )
            for ex in reference_data.EXERCISES:
                conn.execute(
                    "INSERT INTO exercises (id, name, category, equipment, is_active) "
                    "VALUES (?, ?, ?, ?, ?) "
                    "ON CONFLICT(id) DO UPDATE SET name=excluded.name, "
                    "category=excluded.category, equipment=excluded.equipment;",
                    (ex.id, ex.name, ex.category.value, ex.equipment, int(ex.is_active)),
                )
            for mapping in reference_data.EXERCISE_MUSCLE_MAPPINGS:
                conn.execute(
                    "INSERT INTO exercise_muscle_mappings (exercise_id, muscle_group, role) "
                    "VALUES (?, ?, ?) "
                    "ON CONFLICT(exercise_id, muscle_group) DO UPDATE SET role=excluded.role;",
                    (mapping.exercise_id, mapping.muscle_group, mapping.role.value),
                )
            conn.execute(
                "INSERT INTO programs (id, name, is_active) VALUES (?, ?, 1) "
                "ON CONFLICT(id) DO UPDATE SET name=excluded.name;",
                (reference_data.PROGRAM_ID, "Hybrid Bodybuilding 2.0"),
            )
            conn.execute(
                "INSERT INTO program_phases (id, program_id, name, phase_order, is_active) "
                "VALUES (?, ?, 'Phase 1', 1, 1) "
                "ON CONFLICT(id) DO UPDATE SET program_id=excluded.program_id;",
                (reference_data.PHASE_ID, reference_data.PROGRAM_ID),
            )
            for day in reference_data.PROGRAM_DAYS:
                self._seed_day(conn, day)
            conn.execute(
                "INSERT INTO app_state (key, value) VALUES (?, ?) "
                "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
                (SEED_VERSION_KEY, reference_data.SEED_VERSION),
            )

    @staticmethod
    def _seed_day(conn: sqlite3.Connection, day: dict) -> None:
        conn.execute(
            "INSERT INTO day_templates (phase_id, day_number, day_name) VALUES (?, ?, ?) "
            "ON CONFLICT(phase_id, day_number) DO UPDATE SET day_name=excluded.day_name;",
            (reference_data.PHASE_ID, day["day_number"], day["day_name"]),
        )
        day_id = conn.execute(
            "SELECT id FROM day_templates WHERE phase_id = ? AND day_number = ?;",
            (reference_data.PHASE_ID, day["day_number"]),
        ).fetchone()[0]
        for order, slot in enumerate(day["slots"], start=1):
            conn.execute(
                "INSERT INTO template_exercise_slots (day_template_id, slot_order, "
                "default_exercise_id, input_mode, target_sets, target_rep_low, "
                "target_rep_high, rest_seconds, notes) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?) "
                "ON CONFLICT(day_template_id, slot_order) DO UPDATE SET "
                "default_exercise_id=excluded.default_exercise_id, "
                "input_mode=excluded.input_mode, target_sets=excluded.target_sets, "
                "target_rep_low=excluded.target_rep_low, "
                "target_rep_high=excluded.target_rep_high, "
                "rest_seconds=excluded.rest_seconds, notes=excluded.notes;",
                (
                    day_id,
                    order,
                    slot["exercise_id"],
                    slot.get("input_mode", "reps"),
                    slot["target_sets"],
                    slot["target_rep_low"],
                    slot["target_rep_high"],
                    slot["rest_seconds"],
                    slot.get("notes"),
                ),
            )
            slot_id = conn.execute(
                "SELECT id FROM template_exercise_slots WHERE day_template_id = ? AND slot_order = ?;",
                (day_id, order),
            ).fetchone()[0]
            for alternate in slot.get("alternates", []):
                conn.execute(
                    "INSERT OR IGNORE INTO slot_alternate_exercises (slot_id, exercise_id) VALUES (?, ?);",
                    (slot_id, alternate),
                )

    def _init_settings(self) -> None:
        with self._connection() as conn:
            for key, value in self._DEFAULT_SETTINGS.items():
                conn.execute(
                    "INSERT OR IGNORE INTO settings (key, value) VALUES (?, ?);",
                    (key, value),
                )


class BaseRepository(Database):
    """Base repository providing helper methods."""

    def execute(self, query: str, params: Tuple = ()) -> int:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.lastrowid

    def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        with self._connection() as conn:
            cursor = conn.cursor()
            cursor.execute(query, params)
            return cursor.fetchall()

    def _delete_all(self, table: str) -> None:
        self.execute(f"DELETE FROM {table};")


def _recompute_anchor(conn) -> Optional[str]:
    """Store the earliest start among completed workouts as the anchor."""
    row = conn.execute(
        "SELECT started_at FROM workouts WHERE completed_at IS NOT NULL "
        "ORDER BY started_at ASC LIMIT 1;"
    ).fetchone()
    if row and row[0]:
        conn.execute(
            "INSERT INTO app_state (key, value) VALUES (?, ?) "
            "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
            (FIRST_WORKOUT_ANCHOR_KEY, row[0]),
        )
        return row[0]
    conn.execute("DELETE FROM app_state WHERE key = ?;", (FIRST_WORKOUT_ANCHOR_KEY,))
    return None


_SETS_BY_DATE_RANGE_SQL = """
    SELECT s.id, s.exercise_id, e.name, e.category, s.reps, s.load_kg,
           s.effort_label, s.is_warmup, s.logged_at, emm.muscle_group, emm.role
    FROM sets s
    JOIN workouts w ON w.id = s.workout_id
    JOIN exercises e ON e.id = s.exercise_id
    LEFT JOIN exercise_muscle_mappings emm ON emm.exercise_id = s.exercise_id
    WHERE s.logged_at >= ? AND s.logged_at < ? AND w.completed_at IS NOT NULL
    ORDER BY s.logged_at ASC, s.id ASC, emm.id ASC;
"""

_EXPOSURE_WORKOUTS_SQL = """
    SELECT DISTINCT w.id, w.completed_at
    FROM workouts w
    JOIN sets s ON s.workout_id = w.id
    WHERE s.exercise_id = ? AND w.completed_at IS NOT NULL
    ORDER BY w.completed_at DESC
    LIMIT ?;
"""

_EXPOSURE_TARGET_SQL = """
    SELECT tes.target_rep_high
    FROM workouts w
    JOIN template_exercise_slots tes ON tes.day_template_id = w.day_template_id
    LEFT JOIN slot_alternate_exercises sae
        ON sae.slot_id = tes.id AND sae.exercise_id = ?
    WHERE w.id = ? AND (tes.default_exercise_id = ? OR sae.exercise_id IS NOT NULL)
    ORDER BY tes.slot_order ASC
    LIMIT 1;
"""

_EXPOSURE_SETS_SQL = """
    SELECT reps, load_kg FROM sets
    WHERE workout_id = ? AND exercise_id = ? AND is_warmup = 0
    ORDER BY set_order ASC, id ASC;
"""

_STRENGTH_TREND_SQL = """
    SELECT w.id, s.exercise_id, e.name, w.completed_at, s.reps, s.load_kg
    FROM sets s
    JOIN workouts w ON w.id = s.workout_id
    JOIN exercises e ON e.id = s.exercise_id
    WHERE s.exercise_id = ? AND w.completed_at IS NOT NULL AND s.is_warmup = 0
    ORDER BY w.completed_at ASC, s.logged_at ASC, s.id ASC;
"""

_ANCHOR_SQL = (
    "SELECT started_at FROM workouts WHERE completed_at IS NOT NULL "
    "ORDER BY started_at ASC LIMIT 1;"
)


def _merge_volume_rows(rows: Iterable[Tuple]) -> List[SetForVolume]:
    merged: Dict[int, list] = {}
    mappings: Dict[int, List[MuscleMapping]] = {}
    for (
        set_id,
        exercise_id,
        name,
        category,
        reps,
        load_kg,
        effort,
        warmup,
        logged_at,
        muscle,
        role,
    ) in rows:
        if set_id not in merged:
            merged[set_id] = [
                set_id,
                exercise_id,
                name,
                ExerciseCategory(category),
                int(reps),
                float(load_kg),
                EffortLabel(effort),
                bool(warmup),
                logged_at,
            ]
            mappings[set_id] = []
        if muscle and role:
            mappings[set_id].append(MuscleMapping(muscle, MuscleRole(role)))
    return [
        SetForVolume(*fields, mappings=tuple(mappings[set_id]))
        for set_id, fields in merged.items()
    ]


def _build_exposure(
    workout_id: str, completed_at: str, target_row, set_rows
) -> ProgressionExposure:
    target = int(target_row[0]) if target_row else reference_data.DEFAULT_TARGET_REP_HIGH
    return ProgressionExposure(
        workout_id=workout_id,
        completed_at=completed_at,
        target_rep_high=target,
        working_set_reps=tuple(int(r[0]) for r in set_rows),
        top_load_kg=max((float(r[1]) for r in set_rows), default=0.0),
    )


def _trend_points(rows: Iterable[Tuple]) -> List[StrengthTrendPoint]:
    return best_set_points(
        {
            "workout_id": r[0],
            "exercise_id": r[1],
            "exercise_name": r[2],
            "completed_at": r[3],
            "reps": r[4],
            "load_kg": r[5],
        }
        for r in rows
    )


def _window_bounds(start_iso: str, end_iso: str) -> Tuple[str, str]:
    return normalize_timestamp(start_iso), normalize_timestamp(end_iso)


class ExerciseRepository(BaseRepository):
    """Repository for the exercise catalog and muscle mappings."""

    @staticmethod
    def _to_exercise(row: Tuple) -> Exercise:
        return Exercise(
            id=row[0],
            name=row[1],
            category=ExerciseCategory(row[2]),
            equipment=row[3],
            is_active=bool(row[4]),
        )

    def fetch_active(self) -> List[Exercise]:
        rows = self.fetch_all(
            "SELECT id, name, category, equipment, is_active FROM exercises "
            "WHERE is_active = 1 ORDER BY name ASC;"
        )
        return [self._to_exercise(r) for r in rows]

    def fetch_library(self) -> List[Exercise]:
        rows = self.fetch_all(
            "SELECT id, name, category, equipment, is_active FROM exercises ORDER BY name ASC;"
        )
        return [self._to_exercise(r) for r in rows]

    def fetch(self, exercise_id: str) -> Optional[Exercise]:
        rows = self.fetch_all(
            "SELECT id, name, category, equipment, is_active FROM exercises WHERE id = ?;",
            (exercise_id,),
        )
        return self._to_exercise(rows[0]) if rows else None

    def set_active(self, exercise_id: str, active: bool) -> None:
        if self.fetch(exercise_id) is None:
            raise ValueError("exercise not found")
        self.execute(
            "UPDATE exercises SET is_active = ? WHERE id = ?;",
            (int(active), exercise_id),
        )

    def add_custom(
        self,
        exercise_id: str,
        name: str,
        category: str,
        equipment: Optional[str] = None,
    ) -> None:
        if not exercise_id.startswith(CUSTOM_EXERCISE_PREFIX):
            raise ValueError("custom exercise ids must start with 'custom-'")
        if not name or not name.strip():
            raise ValueError("name must not be empty")
        if category not in CATEGORIES:
            raise ValueError(f"invalid category: {category}")
        if self.fetch(exercise_id) is not None:
            raise ValueError("exercise already exists")
        self.execute(
            "INSERT INTO exercises (id, name, category, equipment, is_active) VALUES (?, ?, ?, ?, 1);",
            (exercise_id, name.strip(), category, equipment),
        )

    def update_custom(self, exercise_id: str, name: str, category: str) -> None:
        if not exercise_id.startswith(CUSTOM_EXERCISE_PREFIX):
            raise ValueError("Only custom exercises can be edited.")
        if category not in CATEGORIES:
            raise ValueError(f"invalid category: {category}")
        if self.fetch(exercise_id) is None:
            raise ValueError("exercise not found")
        self.execute(
            "UPDATE exercises SET name = ?, category = ? WHERE id = ?;",
            (name, category, exercise_id),
        )

    def delete_custom(self, exercise_id: str) -> None:
        if not exercise_id.startswith(CUSTOM_EXERCISE_PREFIX):
            raise ValueError("Only custom exercises can be deleted.")
        if self.fetch(exercise_id) is None:
            raise ValueError("exercise not found")
        with self._connection() as conn:
            usage = conn.execute(
                "SELECT COUNT(*) FROM sets WHERE exercise_id = ?;", (exercise_id,)
            ).fetchone()[0]
            if usage > 0:
                raise ValueError(
                    "Cannot delete a custom exercise that already has logged sets."
                )
            conn.execute(
                "DELETE FROM slot_alternate_exercises WHERE exercise_id = ?;",
                (exercise_id,),
            )
            conn.execute(
                "DELETE FROM exercise_muscle_mappings WHERE exercise_id = ?;",
                (exercise_id,),
            )
            conn.execute("DELETE FROM exercises WHERE id = ?;", (exercise_id,))

    def fetch_mappings(self, exercise_id: str) -> List[MuscleMapping]:
        rows = self.fetch_all(
            "SELECT muscle_group, role FROM exercise_muscle_mappings "
            "WHERE exercise_id = ? ORDER BY id;",
            (exercise_id,),
        )
        return [MuscleMapping(m, MuscleRole(r)) for m, r in rows]

    def upsert_mappings(self, mappings: Iterable[ExerciseMuscleMapping]) -> None:
        items = list(mappings)
        for item in items:
            if getattr(item.role, "value", item.role) not in ROLES:
                raise ValueError(f"invalid role: {item.role}")
        with self._connection() as conn:
            for item in items:
                conn.execute(
                    "INSERT INTO exercise_muscle_mappings (exercise_id, muscle_group, role) "
                    "VALUES (?, ?, ?) "
                    "ON CONFLICT(exercise_id, muscle_group) DO UPDATE SET role=excluded.role;",
                    (item.exercise_id, item.muscle_group, MuscleRole(item.role).value),
                )


class MuscleGroupRepository(BaseRepository):
    """Repository for muscle-group volume thresholds."""

    def fetch_all_groups(self) -> List[MuscleGroup]:
        rows = self.fetch_all(
            "SELECT id, display_name, size_category, mev_low, mev_high, optimal_low, "
            "optimal_high, mrv_low, mrv_high, evidence_grade FROM muscle_groups "
            "ORDER BY position, id;"
        )
        return [
            MuscleGroup(r[0], r[1], r[2], *(float(v) for v in r[3:9]), r[9])
            for r in rows
        ]


class ProgramRepository(BaseRepository):
    """Repository for day templates, their slots and alternates."""

    def __init__(
        self, db_path: str = "tracker.db", phase_id: str = reference_data.PHASE_ID
    ) -> None:
        super().__init__(db_path)
        self.phase_id = phase_id

    def _slots(self, day_template_id: int) -> List[dict]:
        rows = self.fetch_all(
            "SELECT tes.id, tes.slot_order, tes.default_exercise_id, e.name, "
            "tes.input_mode, tes.target_sets, tes.target_rep_low, "
            "tes.target_rep_high, tes.rest_seconds, tes.notes "
            "FROM template_exercise_slots tes "
            "JOIN exercises e ON e.id = tes.default_exercise_id "
            "WHERE tes.day_template_id = ? ORDER BY tes.slot_order ASC;",
            (day_template_id,),
        )
        slots = []
        for r in rows:
            alternates = self.fetch_all(
                "SELECT sae.exercise_id, e.name FROM slot_alternate_exercises sae "
                "JOIN exercises e ON e.id = sae.exercise_id "
                "WHERE sae.slot_id = ? ORDER BY e.name ASC;",
                (r[0],),
            )
            slots.append(
                {
                    "id": r[0],
                    "day_template_id": day_template_id,
                    "slot_order": r[1],
                    "default_exercise_id": r[2],
                    "default_exercise_name": r[3],
                    "input_mode": r[4],
                    "target_sets": r[5],
                    "target_rep_low": r[6],
                    "target_rep_high": r[7],
                    "rest_seconds": r[8],
                    "notes": r[9],
                    "alternates": [{"id": a[0], "name": a[1]} for a in alternates],
                }
            )
        return slots

    def _template(self, row: Tuple) -> dict:
        return {
            "id": row[0],
            "phase_id": row[1],
            "day_number": row[2],
            "day_name": row[3],
            "slots": self._slots(row[0]),
        }

    def fetch_days(self) -> List[dict]:
        rows = self.fetch_all(
            "SELECT id, phase_id, day_number, day_name FROM day_templates "
            "WHERE phase_id = ? ORDER BY day_number ASC;",
            (self.phase_id,),
        )
        return [self._template(r) for r in rows]

    def fetch_day(self, day_template_id: int) -> Optional[dict]:
        rows = self.fetch_all(
            "SELECT id, phase_id, day_number, day_name FROM day_templates WHERE id = ?;",
            (day_template_id,),
        )
        return self._template(rows[0]) if rows else None

    def fetch_day_by_number(self, day_number: int) -> Optional[dict]:
        rows = self.fetch_all(
            "SELECT id, phase_id, day_number, day_name FROM day_templates "
            "WHERE phase_id = ? AND day_number = ?;",
            (self.phase_id, day_number),
        )
        return self._template(rows[0]) if rows else None

    def day_count(self) -> int:
        rows = self.fetch_all(
            "SELECT COUNT(*) FROM day_templates WHERE phase_id = ?;", (self.phase_id,)
        )
        return int(rows[0][0]) if rows else 0

    def latest_completed_day_number(self) -> Optional[int]:
        rows = self.fetch_all(
            "SELECT dt.day_number FROM workouts w "
            "JOIN day_templates dt ON dt.id = w.day_template_id "
            "WHERE w.completed_at IS NOT NULL "
            "ORDER BY w.completed_at DESC LIMIT 1;"
        )
        return int(rows[0][0]) if rows else None

    def rename_day(self, day_template_id: int, day_name: str) -> None:
        if not day_name or not day_name.strip():
            raise ValueError("day name must not be empty")
        if self.fetch_day(day_template_id) is None:
            raise ValueError("day template not found")
        self.execute(
            "UPDATE day_templates SET day_name = ? WHERE id = ?;",
            (day_name.strip(), day_template_id),
        )

    def update_slot(
        self,
        slot_id: int,
        target_sets: int,
        target_rep_low: int,
        target_rep_high: int,
        rest_seconds: int,
        notes: Optional[str] = None,
    ) -> None:
        if target_sets <= 0:
            raise ValueError("target sets must be positive")
        if target_rep_low <= 0 or target_rep_high < target_rep_low:
            raise ValueError("invalid rep range")
        if rest_seconds < 0:
            raise ValueError("rest seconds must be non-negative")
        rows = self.fetch_all(
            "SELECT id FROM template_exercise_slots WHERE id = ?;", (slot_id,)
        )
        if not rows:
            raise ValueError("slot not found")
        self.execute(
            "UPDATE template_exercise_slots SET target_sets = ?, target_rep_low = ?, "
            "target_rep_high = ?, rest_seconds = ?, notes = ? WHERE id = ?;",
            (target_sets, target_rep_low, target_rep_high, rest_seconds, notes, slot_id),
        )

    def add_slot_alternate(self, slot_id: int, exercise_id: str) -> None:
        if not self.fetch_all(
            "SELECT id FROM template_exercise_slots WHERE id = ?;", (slot_id,)
        ):
            raise ValueError("slot not found")
        if not self.fetch_all("SELECT id FROM exercises WHERE id = ?;", (exercise_id,)):
            raise ValueError("exercise not found")
        self.execute(
            "INSERT OR IGNORE INTO slot_alternate_exercises (slot_id, exercise_id) VALUES (?, ?);",
            (slot_id, exercise_id),
        )


class WorkoutRepository(BaseRepository):
    """Repository for workout table operations."""

    def create(
        self,
        day_template_id: Optional[int],
        prs_score: Optional[int] = None,
        bodyweight_kg: Optional[float] = None,
        started_at: Optional[str] = None,
        phase_id: str = reference_data.PHASE_ID,
    ) -> str:
        if prs_score is not None and not 0 <= prs_score <= 10:
            raise ValueError("prs score must be between 0 and 10")
        if bodyweight_kg is not None and (
            not math.isfinite(bodyweight_kg) or bodyweight_kg <= 0
        ):
            raise ValueError("bodyweight must be positive")
        started = normalize_timestamp(started_at) if started_at else utc_now_iso()
        workout_id = str(uuid.uuid4())
        with self._connection() as conn:
            conn.execute(
                "INSERT INTO workouts (id, phase_id, day_template_id, started_at, prs_score, bodyweight_kg) "
                "VALUES (?, ?, ?, ?, ?, ?);",
                (workout_id, phase_id, day_template_id, started, prs_score, bodyweight_kg),
            )
            if bodyweight_kg is not None:
                conn.execute(
                    "INSERT INTO bodyweight_log (workout_id, weight_kg, logged_at, source) "
                    "VALUES (?, ?, ?, 'workout');",
                    (workout_id, bodyweight_kg, started),
                )
        logger.info("started workout %s (day template %s)", workout_id, day_template_id)
        return workout_id

    def complete(
        self,
        workout_id: str,
        notes: Optional[str] = None,
        completed_at: Optional[str] = None,
    ) -> Optional[str]:
        """Mark ``workout_id`` completed and return the recomputed anchor."""
        completed = normalize_timestamp(completed_at) if completed_at else utc_now_iso()
        with self._connection() as conn:
            row = conn.execute(
                "SELECT started_at FROM workouts WHERE id = ?;", (workout_id,)
            ).fetchone()
            if row is None:
                raise ValueError("workout not found")
            conn.execute(
                "UPDATE workouts SET completed_at = ?, notes = ? WHERE id = ?;",
                (completed, notes, workout_id),
            )
            anchor = _recompute_anchor(conn)
        logger.info("completed workout %s", workout_id)
        return anchor

    def active(self) -> Optional[dict]:
        rows = self.fetch_all(
            "SELECT w.id, w.day_template_id, dt.day_number, dt.day_name, w.started_at "
            "FROM workouts w LEFT JOIN day_templates dt ON dt.id = w.day_template_id "
            "WHERE w.completed_at IS NULL ORDER BY w.started_at DESC LIMIT 1;"
        )
        if not rows:
            return None
        r = rows[0]
        return {
            "workout_id": r[0],
            "day_template_id": r[1],
            "day_number": r[2],
            "day_name": r[3],
            "started_at": r[4],
        }

    @staticmethod
    def _duration_minutes(started_at: str, completed_at: Optional[str]) -> int:
        if not completed_at:
            return 0
        delta = parse_timestamp(completed_at) - parse_timestamp(started_at)
        return max(0, int(delta.total_seconds() // 60))

    def history(self, limit: int = 50) -> List[dict]:
        rows = self.fetch_all(
            "SELECT w.id, dt.day_name, dt.day_number, w.started_at, w.completed_at, "
            "w.prs_score, COUNT(s.id) FROM workouts w "
            "LEFT JOIN day_templates dt ON dt.id = w.day_template_id "
            "LEFT JOIN sets s ON s.workout_id = w.id "
            "WHERE w.completed_at IS NOT NULL GROUP BY w.id "
            "ORDER BY w.completed_at DESC LIMIT ?;",
            (limit,),
        )
        return [
            {
                "workout_id": r[0],
                "day_name": r[1] or "Workout",
                "day_number": r[2] or 1,
                "started_at": r[3],
                "completed_at": r[4],
                "prs_score": r[5],
                "duration_minutes": self._duration_minutes(r[3], r[4]),
                "total_sets": int(r[6]),
            }
            for r in rows
        ]

    def detail(self, workout_id: str) -> Optional[dict]:
        rows = self.fetch_all(
            "SELECT w.id, dt.day_name, dt.day_number, w.started_at, w.completed_at, "
            "w.prs_score, w.bodyweight_kg, w.notes FROM workouts w "
            "LEFT JOIN day_templates dt ON dt.id = w.day_template_id WHERE w.id = ?;",
            (workout_id,),
        )
        if not rows:
            return None
        r = rows[0]
        sets = SetRepository(self._db_path).fetch_for_workout(workout_id)
        return {
            "workout_id": r[0],
            "day_name": r[1] or "Workout",
            "day_number": r[2] or 1,
            "started_at": r[3],
            "completed_at": r[4],
            "prs_score": r[5],
            "bodyweight_kg": r[6],
            "notes": r[7],
            "duration_minutes": self._duration_minutes(r[3], r[4]),
            "total_sets": len(sets),
            "sets": sets,
        }

    def week_stats(self, start_iso: str, end_iso: str) -> dict:
        start, end = _window_bounds(start_iso, end_iso)
        rows = self.fetch_all(
            "SELECT COUNT(DISTINCT w.id), COUNT(s.id) FROM workouts w "
            "LEFT JOIN sets s ON s.workout_id = w.id "
            "WHERE w.completed_at IS NOT NULL AND w.completed_at >= ? AND w.completed_at < ?;",
            (start, end),
        )
        workouts, sets = rows[0] if rows else (0, 0)
        return {"workouts": int(workouts or 0), "sets": int(sets or 0)}

    def adherence_stats(
        self, start_iso: str, end_iso: str, planned_per_week: float
    ) -> dict:
        """Completed versus planned workouts over a window of whole weeks.

        Workouts count by their start time. Raises ``ValueError`` for
        unparseable bounds or an end that does not follow the start.
        """
        try:
            start = parse_timestamp(start_iso)
            end = parse_timestamp(end_iso)
        except ValueError:
            raise ValueError("Invalid adherence window dates.")
        if end <= start:
            raise ValueError("Adherence window end must be after start.")
        rows = self.fetch_all(
            "SELECT DISTINCT id, started_at FROM workouts "
            "WHERE completed_at IS NOT NULL AND started_at >= ? AND started_at < ? "
            "ORDER BY started_at ASC;",
            (format_timestamp(start), format_timestamp(end)),
        )
        total_weeks = max(1, math.ceil((end - start) / ONE_WEEK))
        breakdown = [
            {"week_start_iso": format_timestamp(start + ONE_WEEK * i), "count": 0}
            for i in range(total_weeks)
        ]
        for _, started_at in rows:
            index = (parse_timestamp(started_at) - start) // ONE_WEEK
            if 0 <= index < total_weeks:
                breakdown[index]["count"] += 1
        completed = len(rows)
        planned = max(0, math.floor(planned_per_week)) * total_weeks
        percentage = completed / planned * 100 if planned > 0 else 0.0
        return {
            "completed": completed,
            "planned": planned,
            "percentage": percentage,
            "weekly_breakdown": breakdown,
        }

    def first_workout_anchor(self) -> Optional[str]:
        """Return the anchor, reconciling the stored value with the workouts."""
        with self._connection() as conn:
            persisted = conn.execute(
                "SELECT value FROM app_state WHERE key = ?;", (FIRST_WORKOUT_ANCHOR_KEY,)
            ).fetchone()
            inferred = conn.execute(_ANCHOR_SQL).fetchone()
            stored = persisted[0] if persisted else None
            anchor = inferred[0] if inferred else None
            if stored != anchor:
                logger.debug("reconciling anchor %s -> %s", stored, anchor)
                _recompute_anchor(conn)
            return anchor

    def delete(self, workout_id: str) -> None:
        with self._connection() as conn:
            if conn.execute(
                "SELECT id FROM workouts WHERE id = ?;", (workout_id,)
            ).fetchone() is None:
                raise ValueError("workout not found")
            conn.execute("DELETE FROM sets WHERE workout_id = ?;", (workout_id,))
            conn.execute("DELETE FROM bodyweight_log WHERE workout_id = ?;", (workout_id,))
            conn.execute("DELETE FROM workouts WHERE id = ?;", (workout_id,))
            _recompute_anchor(conn)
        logger.info("deleted workout %s", workout_id)


class SetRepository(BaseRepository):
    """Repository for sets table operations and the analytics reads."""

    @staticmethod
    def _validate(reps: int, load_kg: float, effort_label: str) -> str:
        """Check a set's numbers and return the stored effort label."""
        if reps <= 0:
            raise ValueError("reps must be positive")
        if not math.isfinite(load_kg) or load_kg < 0:
            raise ValueError("load must be non-negative")
        try:
            return EffortLabel(effort_label).value
        except ValueError:
            raise ValueError(f"invalid effort label: {effort_label}")

    def add(
        self,
        workout_id: str,
        exercise_id: str,
        reps: int,
        load_kg: float,
        effort_label: str,
        is_warmup: bool = False,
        notes: Optional[str] = None,
        logged_at: Optional[str] = None,
    ) -> int:
        effort_label = self._validate(reps, load_kg, effort_label)
        logged = normalize_timestamp(logged_at) if logged_at else utc_now_iso()
        with self._connection() as conn:
            if conn.execute(
                "SELECT id FROM workouts WHERE id = ?;", (workout_id,)
            ).fetchone() is None:
                raise ValueError("workout not found")
            if conn.execute(
                "SELECT id FROM exercises WHERE id = ?;", (exercise_id,)
            ).fetchone() is None:
                raise ValueError("exercise not found")
            order = conn.execute(
                "SELECT COALESCE(MAX(set_order), 0) + 1 FROM sets "
                "WHERE workout_id = ? AND exercise_id = ?;",
                (workout_id, exercise_id),
            ).fetchone()[0]
            cursor = conn.execute(
                "INSERT INTO sets (workout_id, exercise_id, set_order, reps, load_kg, "
                "effort_label, is_warmup, logged_at, notes) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?);",
                (
                    workout_id,
                    exercise_id,
                    int(order),
                    reps,
                    load_kg,
                    effort_label,
                    int(is_warmup),
                    logged,
                    notes,
                ),
            )
            return cursor.lastrowid

    def _require(self, set_id: int) -> None:
        if not self.fetch_all("SELECT id FROM sets WHERE id = ?;", (set_id,)):
            raise ValueError("set not found")

    def update(
        self,
        set_id: int,
        reps: int,
        load_kg: float,
        effort_label: str,
        is_warmup: bool = False,
        notes: Optional[str] = None,
    ) -> None:
        effort_label = self._validate(reps, load_kg, effort_label)
        self._require(set_id)
        self.execute(
            "UPDATE sets SET reps = ?, load_kg = ?, effort_label = ?, is_warmup = ?, notes = ? "
            "WHERE id = ?;",
            (reps, load_kg, effort_label, int(is_warmup), notes, set_id),
        )

    def remove(self, set_id: int) -> None:
        self._require(set_id)
        self.execute("DELETE FROM sets WHERE id = ?;", (set_id,))

    def fetch_for_workout(self, workout_id: str) -> List[dict]:
        rows = self.fetch_all(
            "SELECT s.id, s.workout_id, s.exercise_id, e.name, e.category, s.set_order, "
            "s.reps, s.load_kg, s.effort_label, s.is_warmup, s.logged_at, s.notes "
            "FROM sets s LEFT JOIN exercises e ON e.id = s.exercise_id "
            "WHERE s.workout_id = ? ORDER BY s.logged_at ASC, s.id ASC, s.set_order ASC;",
            (workout_id,),
        )
        return [
            {
                "id": r[0],
                "workout_id": r[1],
                "exercise_id": r[2],
                "exercise_name": r[3] or r[2],
                "exercise_category": r[4] or ExerciseCategory.COMPOUND.value,
                "set_order": r[5],
                "reps": r[6],
                "load_kg": r[7],
                "effort_label": r[8],
                "is_warmup": bool(r[9]),
                "logged_at": r[10],
                "notes": r[11],
            }
            for r in rows
        ]

    def most_recent_load(self, exercise_id: str) -> Optional[float]:
        rows = self.fetch_all(
            "SELECT load_kg FROM sets WHERE exercise_id = ? AND is_warmup = 0 "
            "ORDER BY logged_at DESC, id DESC LIMIT 1;",
            (exercise_id,),
        )
        return float(rows[0][0]) if rows else None

    def fetch_sets_by_date_range(
        self, start_iso: str, end_iso: str
    ) -> List[SetForVolume]:
        """Sets of completed workouts logged in ``[start_iso, end_iso)``."""
        start, end = _window_bounds(start_iso, end_iso)
        return _merge_volume_rows(self.fetch_all(_SETS_BY_DATE_RANGE_SQL, (start, end)))

    def fetch_recent_exposures(
        self, exercise_id: str, limit: int = 2
    ) -> List[ProgressionExposure]:
        """Most recent completed workouts containing ``exercise_id``, newest first."""
        with self._connection() as conn:
            workouts = conn.execute(
                _EXPOSURE_WORKOUTS_SQL, (exercise_id, limit)
            ).fetchall()
            exposures = []
            for workout_id, completed_at in workouts:
                target = conn.execute(
                    _EXPOSURE_TARGET_SQL, (exercise_id, workout_id, exercise_id)
                ).fetchone()
                sets = conn.execute(
                    _EXPOSURE_SETS_SQL, (workout_id, exercise_id)
                ).fetchall()
                exposures.append(_build_exposure(workout_id, completed_at, target, sets))
            return exposures

    def fetch_strength_trend_series(self, exercise_id: str) -> List[StrengthTrendPoint]:
        return _trend_points(self.fetch_all(_STRENGTH_TREND_SQL, (exercise_id,)))


class BodyweightRepository(BaseRepository):
    """Repository for body weight logs."""

    def log(self, weight_kg: float, logged_at: Optional[str] = None) -> int:
        if not math.isfinite(weight_kg) or weight_kg <= 0:
            raise ValueError("weight must be positive")
        logged = normalize_timestamp(logged_at) if logged_at else utc_now_iso()
        return self.execute(
            "INSERT INTO bodyweight_log (workout_id, weight_kg, logged_at, source) "
            "VALUES (NULL, ?, ?, 'manual');",
            (weight_kg, logged),
        )

    def fetch_log(self, limit: int = 100) -> List[dict]:
        rows = self.fetch_all(
            "SELECT id, workout_id, weight_kg, logged_at, source FROM bodyweight_log "
            "ORDER BY logged_at DESC, id DESC LIMIT ?;",
            (limit,),
        )
        return [
            {
                "id": r[0],
                "workout_id": r[1],
                "weight_kg": float(r[2]),
                "logged_at": r[3],
                "source": r[4],
            }
            for r in rows
        ]


class SettingsRepository(BaseRepository):
    """Repository for user preferences synchronized with YAML."""

    def __init__(
        self, db_path: str = "tracker.db", yaml_path: str = "settings.yaml"
    ) -> None:
        super().__init__(db_path)
        self._yaml = YamlConfig(yaml_path)
        self._sync_from_yaml()
        self._sync_to_yaml()

    def _raw_all_settings(self) -> dict:
        rows = self.fetch_all("SELECT key, value FROM settings ORDER BY key;")
        result: dict[str, int | float | str] = {}
        for k, v in rows:
            try:
                result[k] = int(v)
                continue
            except ValueError:
                pass
            try:
                result[k] = float(v)
            except ValueError:
                result[k] = v
        return result

    def _sync_from_yaml(self) -> None:
        data = self._yaml.load()
        if not data:
            return
        validate_settings(data)
        with self._connection() as conn:
            for key, value in data.items():
                conn.execute(
                    "INSERT INTO settings (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
                    (key, str(value)),
                )

    def _sync_to_yaml(self) -> None:
        self._yaml.save(self._raw_all_settings())

    def all_settings(self) -> dict:
        self._sync_from_yaml()
        return self._raw_all_settings()

    def get_text(self, key: str, default: str) -> str:
        self._sync_from_yaml()
        rows = self.fetch_all("SELECT value FROM settings WHERE key = ?;", (key,))
        return rows[0][0] if rows else default

    def get_int(self, key: str, default: int) -> int:
        try:
            return int(float(self.get_text(key, str(default))))
        except ValueError:
            return default

    def set_text(self, key: str, value: str) -> None:
        self.update({key: value})

    def update(self, values: dict) -> dict:
        """Validate and persist ``values``, returning the merged settings."""
        merged = {**self._raw_all_settings(), **values}
        validate_settings(merged)
        with self._connection() as conn:
            for key, value in values.items():
                conn.execute(
                    "INSERT INTO settings (key, value) VALUES (?, ?) "
                    "ON CONFLICT(key) DO UPDATE SET value=excluded.value;",
                    (key, str(value)),
                )
        self._sync_to_yaml()
        return self._raw_all_settings()


class DataTransferRepository(BaseRepository):
    """Full JSON export and restore of the user's training data."""

    def export_all(self) -> dict:
        workouts = self.fetch_all(
            "SELECT id, phase_id, day_template_id, started_at, completed_at, "
            "prs_score, bodyweight_kg, notes FROM workouts ORDER BY started_at ASC;"
        )
        sets = self.fetch_all(
            "SELECT id, workout_id, exercise_id, set_order, reps, load_kg, "
            "effort_label, is_warmup, logged_at, notes FROM sets "
            "ORDER BY logged_at ASC, id ASC;"
        )
        exercises = self.fetch_all(
            "SELECT id, name, category, equipment, is_active FROM exercises ORDER BY name ASC;"
        )
        mappings = self.fetch_all(
            "SELECT exercise_id, muscle_group, role FROM exercise_muscle_mappings "
            "ORDER BY exercise_id ASC, id ASC;"
        )
        bodyweight = self.fetch_all(
            "SELECT id, workout_id, weight_kg, logged_at, source FROM bodyweight_log "
            "ORDER BY logged_at DESC, id DESC;"
        )
        workout_cols = self._TABLE_DEFINITIONS["workouts"][1]
        set_cols = self._TABLE_DEFINITIONS["sets"][1]
        exercise_cols = self._TABLE_DEFINITIONS["exercises"][1]
        bodyweight_cols = self._TABLE_DEFINITIONS["bodyweight_log"][1]
        return {
            "exported_at": utc_now_iso(),
            "workouts": [dict(zip(workout_cols, r)) for r in workouts],
            "sets": [
                {**dict(zip(set_cols, r)), "is_warmup": bool(r[7])} for r in sets
            ],
            "exercises": [
                {**dict(zip(exercise_cols, r)), "is_active": bool(r[4])}
                for r in exercises
            ],
            "exercise_muscle_mappings": [
                {"exercise_id": e, "muscle_group": m, "role": role}
                for e, m, role in mappings
            ],
            "bodyweight_log": [dict(zip(bodyweight_cols, r)) for r in bodyweight],
        }

    def restore(self, data: dict) -> dict:
        """Replace workouts, sets and body weight entries with ``data``.

        Exercises are upserted and mappings are replaced only when the
        payload carries any. Everything runs in one transaction.
        """
        payload = parse_payload(data)
        workouts = [
            (
                w.id,
                w.phase_id,
                w.day_template_id,
                normalize_timestamp(w.started_at),
                normalize_timestamp(w.completed_at) if w.completed_at else None,
                w.prs_score,
                w.bodyweight_kg,
                w.notes,
            )
            for w in payload.workouts
        ]
        sets = [
            (
                s.id,
                s.workout_id,
                s.exercise_id,
                s.set_order,
                s.reps,
                s.load_kg,
                s.effort_label,
                int(s.is_warmup),
                normalize_timestamp(s.logged_at),
                s.notes,
            )
            for s in payload.sets
        ]
        bodyweight = [
            (b.id, b.workout_id, b.weight_kg, normalize_timestamp(b.logged_at), b.source)
            for b in payload.bodyweight_log
        ]
        with self._connection() as conn:
            conn.execute("DELETE FROM sets;")
            conn.execute("DELETE FROM bodyweight_log;")
            conn.execute("DELETE FROM workouts;")
            for ex in payload.exercises:
                conn.execute(
                    "INSERT INTO exercises (id, name, category, equipment, is_active) "
                    "VALUES (?, ?, ?, ?, ?) "
                    "ON CONFLICT(id) DO UPDATE SET name=excluded.name, "
                    "category=excluded.category, equipment=excluded.equipment, "
                    "is_active=excluded.is_active;",
                    (ex.id, ex.name, ex.category, ex.equipment, int(ex.is_active)),
                )
            if payload.exercise_muscle_mappings:
                conn.execute("DELETE FROM exercise_muscle_mappings;")
                for m in payload.exercise_muscle_mappings:
                    conn.execute(
                        "INSERT INTO exercise_muscle_mappings (exercise_id, muscle_group, role) "
                        "VALUES (?, ?, ?) "
                        "ON CONFLICT(exercise_id, muscle_group) DO UPDATE SET role=excluded.role;",
                        (m.exercise_id, m.muscle_group, m.role),
                    )
            conn.execute(
                "DELETE FROM sqlite_sequence WHERE name IN ('sets', 'bodyweight_log');"
            )
            conn.executemany(
                "INSERT INTO workouts (id, phase_id, day_template_id, started_at, "
                "completed_at, prs_score, bodyweight_kg, notes) VALUES (?, ?, ?, ?, ?, ?, ?, ?);",
                workouts,
            )
            conn.executemany(
                "INSERT INTO sets (id, workout_id, exercise_id, set_order, reps, load_kg, "
                "effort_label, is_warmup, logged_at, notes) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?);",
                sets,
            )
            conn.executemany(
                "INSERT INTO bodyweight_log (id, workout_id, weight_kg, logged_at, source) "
                "VALUES (?, ?, ?, ?, ?);",
                bodyweight,
            )
            _recompute_anchor(conn)
        logger.info(
            "restored %d workouts, %d sets, %d bodyweight entries",
            len(workouts),
            len(sets),
            len(bodyweight),
        )
        return {
            "workouts": len(workouts),
            "sets": len(sets),
            "bodyweight_entries": len(bodyweight),
        }


class AsyncDatabase(Database):
    """Provides asynchronous connection management."""

    @asynccontextmanager
    async def _async_connection(self):
        conn = await aiosqlite.connect(self._db_path)
        try:
            yield conn
            await conn.commit()
        finally:
            await conn.close()


class AsyncBaseRepository(AsyncDatabase):
    """Asynchronous variant of BaseRepository using aiosqlite."""

    async def execute(self, query: str, params: Tuple = ()) -> int:
        async with self._async_connection() as conn:
            cursor = await conn.execute(query, params)
            await conn.commit()
            return cursor.lastrowid

    async def fetch_all(self, query: str, params: Tuple = ()) -> List[Tuple]:
        async with self._async_connection() as conn:
            cursor = await conn.execute(query, params)
            rows = await cursor.fetchall()
            return rows


class AsyncAnalyticsRepository(AsyncBaseRepository):
    """Async read-only access to the analytics queries."""

    async def fetch_sets_by_date_range(
        self, start_iso: str, end_iso: str
    ) -> List[SetForVolume]:
        start, end = _window_bounds(start_iso, end_iso)
        rows = await self.fetch_all(_SETS_BY_DATE_RANGE_SQL, (start, end))
        return _merge_volume_rows(rows)

    async def fetch_recent_exposures(
        self, exercise_id: str, limit: int = 2
    ) -> List[ProgressionExposure]:
        async with self._async_connection() as conn:
            cursor = await conn.execute(_EXPOSURE_WORKOUTS_SQL, (exercise_id, limit))
            workouts = await cursor.fetchall()
            exposures = []
            for workout_id, completed_at in workouts:
                cursor = await conn.execute(
                    _EXPOSURE_TARGET_SQL, (exercise_id, workout_id, exercise_id)
                )
                target = await cursor.fetchone()
                cursor = await conn.execute(_EXPOSURE_SETS_SQL, (workout_id, exercise_id))
                sets = await cursor.fetchall()
                exposures.append(_build_exposure(workout_id, completed_at, target, sets))
            return exposures

    async def fetch_strength_trend_series(
        self, exercise_id: str
    ) -> List[StrengthTrendPoint]:
        rows = await self.fetch_all(_STRENGTH_TREND_SQL, (exercise_id,))
        return _trend_points(rows)

    async def fetch_muscle_groups(self) -> List[MuscleGroup]:
        rows = await self.fetch_all(
            "SELECT id, display_name, size_category, mev_low, mev_high, optimal_low, "
            "optimal_high, mrv_low, mrv_high, evidence_grade FROM muscle_groups "
            "ORDER BY position, id;"
        )
        return [
            MuscleGroup(r[0], r[1], r[2], *(float(v) for v in r[3:9]), r[9])
            for r in rows
        ]

    async def first_workout_anchor(self) -> Optional[str]:
        rows = await self.fetch_all(_ANCHOR_SQL)
        return rows[0][0] if rows else None
