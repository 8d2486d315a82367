import argparse
import datetime
import json
import logging
import shutil
from typing import Optional

from algorithms.timestamps import format_timestamp, parse_timestamp, utc_now_iso
from algorithms.weight_converter import WeightConverter
from config import DEFAULT_DB_PATH, DEFAULT_SETTINGS_PATH
from db import (
    DataTransferRepository,
    ExerciseRepository,
    MuscleGroupRepository,
    ProgramRepository,
    SetRepository,
    SettingsRepository,
    WorkoutRepository,
)
from planner_service import PlannerService
from stats_service import StatisticsService

logger = logging.getLogger(__name__)

DEMO_STARTING_LOADS = {
    "barbell-back-squat": 60.0,
    "barbell-bench-press": 50.0,
    "db-incline-press": 18.0,
    "lat-pulldown": 45.0,
    "rack-assisted-chin-up": 0.0,
}


def _statistics(db_path: str, yaml_path: Optional[str] = None) -> StatisticsService:
    settings = SettingsRepository(db_path, yaml_path) if yaml_path else None
    return StatisticsService(
        SetRepository(db_path),
        WorkoutRepository(db_path),
        MuscleGroupRepository(db_path),
        ExerciseRepository(db_path),
        settings,
        ProgramRepository(db_path),
    )


def export_data(db_path: str, out_path: str) -> None:
    payload = DataTransferRepository(db_path).export_all()
    with open(out_path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=2)
    logger.info("exported %d workouts to %s", len(payload["workouts"]), out_path)


def import_data(db_path: str, in_path: str) -> dict:
    with open(in_path, "r", encoding="utf-8") as f:
        payload = json.load(f)
    return DataTransferRepository(db_path).restore(payload)


def backup_db(db_path: str, backup_path: str) -> None:
    shutil.copy(db_path, backup_path)


def restore_db(backup_path: str, db_path: str) -> None:
    shutil.copy(backup_path, db_path)


def demo_data(
    db_path: str,
    yaml_path: str,
    weeks: int = 4,
    now: Optional[str] = None,
) -> int:
    """Populate the database with completed demo workouts if it has none.

    Returns the number of workouts created.
    """
    workouts = WorkoutRepository(db_path)
    if workouts.history(1) or workouts.active():
        print("Database already contains workouts")
        return 0
    sets = SetRepository(db_path)
    planner = PlannerService(
        workouts, ProgramRepository(db_path), sets, SettingsRepository(db_path, yaml_path)
    )
    end = parse_timestamp(now or utc_now_iso())
    start = end - datetime.timedelta(weeks=weeks)
    created = 0
    for day in range(weeks * 7):
        if day % 7 == 6:
            continue
        started = start + datetime.timedelta(days=day, hours=7)
        if started >= end:
            break
        session = planner.start_workout(started_at=format_timestamp(started))
        week = day // 7
        logged = started
        for slot in session["slots"]:
            exercise_id = slot["default_exercise_id"]
            base = DEMO_STARTING_LOADS.get(exercise_id, 20.0)
            load = base + 2.5 * week if base else 0.0
            for _ in range(slot["target_sets"]):
                logged += datetime.timedelta(minutes=3)
                sets.add(
                    session["workout_id"],
                    exercise_id,
                    slot["target_rep_high"],
                    load,
                    "productive",
                    logged_at=format_timestamp(logged),
                )
        workouts.complete(
            session["workout_id"],
            "demo",
            format_timestamp(logged + datetime.timedelta(minutes=5)),
        )
        created += 1
    print(f"Demo data inserted ({created} workouts)")
    return created


def print_volume(
    db_path: str, start: Optional[str], end: Optional[str], now: Optional[str]
) -> None:
    stats = _statistics(db_path)
    if start is None or end is None:
        window = stats.current_window(now or utc_now_iso())
        start, end = window.start_iso, window.end_iso
    print(f"Volume {start} .. {end}")
    for result in stats.volume_for_date_range(start, end):
        print(
            f"{result.display_name:<14} {result.effective_sets:>5.1f}  {result.zone.value}"
        )


def print_rate(db_path: str, exercise_id: str) -> None:
    result = _statistics(db_path).progression_rate(exercise_id)
    print(f"{exercise_id}: {result.session_count} sessions over {result.weeks_of_data:.1f} weeks")
    if not result.has_enough_data:
        print("Not enough data for a rate yet")
    else:
        print(f"Estimated 1RM change: {result.actual_rate_kg_per_week:.2f} kg/week")
    if result.reference_label:
        print(
            f"Reference ({result.reference_label}): "
            f"{result.reference_rate_kg_per_week:.2f} kg/week"
        )
        print(result.reference_caveat)


def main(argv: Optional[list] = None) -> None:
    parser = argparse.ArgumentParser(description="Strength tracker utilities")
    parser.add_argument("--log-level", default="WARNING")
    sub = parser.add_subparsers(dest="cmd", required=True)

    exp = sub.add_parser("export")
    exp.add_argument("--db", default=DEFAULT_DB_PATH)
    exp.add_argument("--out", default="export.json")

    imp = sub.add_parser("import")
    imp.add_argument("--db", default=DEFAULT_DB_PATH)
    imp.add_argument("--in", dest="src", required=True)

    bkp = sub.add_parser("backup")
    bkp.add_argument("--db", default=DEFAULT_DB_PATH)
    bkp.add_argument("--out", default="backup.db")

    rst = sub.add_parser("restore")
    rst.add_argument("--in", dest="src", default="backup.db")
    rst.add_argument("--db", default=DEFAULT_DB_PATH)

    demo = sub.add_parser("demo")
    demo.add_argument("--db", default=DEFAULT_DB_PATH)
    demo.add_argument("--yaml", default=DEFAULT_SETTINGS_PATH)
    demo.add_argument("--weeks", type=int, default=4)

    conv = sub.add_parser("convert")
    conv.add_argument("--weight", type=float, required=True)
    conv.add_argument("--unit", choices=["kg", "lb"], required=True)

    vol = sub.add_parser("volume")
    vol.add_argument("--db", default=DEFAULT_DB_PATH)
    vol.add_argument("--start")
    vol.add_argument("--end")
    vol.add_argument("--now")

    rate = sub.add_parser("rate")
    rate.add_argument("--db", default=DEFAULT_DB_PATH)
    rate.add_argument("--exercise", required=True)

    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level.upper())

    if args.cmd == "export":
        export_data(args.db, args.out)
    elif args.cmd == "import":
        summary = import_data(args.db, args.src)
        print(
            f"Imported {summary['workouts']} workouts, {summary['sets']} sets, "
            f"{summary['bodyweight_entries']} bodyweight entries"
        )
    elif args.cmd == "backup":
        backup_db(args.db, args.out)
    elif args.cmd == "restore":
        restore_db(args.src, args.db)
    elif args.cmd == "demo":
        demo_data(args.db, args.yaml, args.weeks)
    elif args.cmd == "convert":
        if args.unit == "kg":
            print(f"{args.weight} kg = {WeightConverter.kg_to_lb(args.weight)} lb")
        else:
            print(f"{args.weight} lb = {WeightConverter.lb_to_kg(args.weight)} kg")
    elif args.cmd == "volume":
        print_volume(args.db, args.start, args.end, args.now)
    elif args.cmd == "rate":
        print_rate(args.db, args.exercise)


if __name__ == "__main__":
    main()
