import os
import sys
import pytest

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from db import (
    AsyncAnalyticsRepository,
    AsyncBaseRepository,
    ProgramRepository,
    SetRepository,
    WorkoutRepository,
)


class NumberRepository(AsyncBaseRepository):
    async def init_db(self) -> None:
        async with self._async_connection() as conn:
            await conn.execute("CREATE TABLE IF NOT EXISTS numbers (val INTEGER)")
            await conn.commit()

    async def add(self, val: int) -> int:
        return await self.execute("INSERT INTO numbers (val) VALUES (?)", (val,))

    async def all(self):
        rows = await self.fetch_all("SELECT val FROM numbers")
        return [r[0] for r in rows]


def seed_bench_workouts(db_file: str) -> None:
    workouts = WorkoutRepository(db_file)
    sets = SetRepository(db_file)
    day_id = ProgramRepository(db_file).fetch_day_by_number(2)["id"]
    for day, load in ((3, 60.0), (10, 62.5)):
        started = f"2024-01-{day:02d}T09:00:00Z"
        wid = workouts.create(day_id, started_at=started)
        sets.add(wid, "barbell-bench-press", 10, load, "hard",
                 logged_at=f"2024-01-{day:02d}T09:10:00Z")
        sets.add(wid, "barbell-bench-press", 10, load, "hard",
                 logged_at=f"2024-01-{day:02d}T09:14:00Z")
        workouts.complete(wid, completed_at=f"2024-01-{day:02d}T10:00:00Z")


@pytest.mark.asyncio
async def test_async_repository(tmp_path):
    repo = NumberRepository(str(tmp_path / "test.db"))
    await repo.init_db()
    await repo.add(5)
    assert await repo.all() == [5]


@pytest.mark.asyncio
async def test_async_analytics_matches_sync(tmp_path):
    db_file = str(tmp_path / "tracker.db")
    seed_bench_workouts(db_file)
    repo = AsyncAnalyticsRepository(db_file)
    sync_sets = SetRepository(db_file)

    rows = await repo.fetch_sets_by_date_range(
        "2024-01-01T00:00:00Z", "2024-01-08T00:00:00Z"
    )
    assert rows == sync_sets.fetch_sets_by_date_range(
        "2024-01-01T00:00:00Z", "2024-01-08T00:00:00Z"
    )
    assert len(rows) == 2

    exposures = await repo.fetch_recent_exposures("barbell-bench-press")
    assert [e.top_load_kg for e in exposures] == [62.5, 60.0]

    trend = await repo.fetch_strength_trend_series("barbell-bench-press")
    assert [p.best_set_load_kg for p in trend] == [60.0, 62.5]

    groups = await repo.fetch_muscle_groups()
    assert groups[0].id == "quads"
    assert await repo.first_workout_anchor() == "2024-01-03T09:00:00.000Z"


@pytest.mark.asyncio
async def test_async_anchor_empty(tmp_path):
    repo = AsyncAnalyticsRepository(str(tmp_path / "empty.db"))
    assert await repo.first_workout_anchor() is None
    assert await repo.fetch_strength_trend_series("barbell-bench-press") == []
