from __future__ import annotations

from plan_admin.crud.migration import migrate_workouts_to_global_refs
from plan_admin.crud.plan import days_path, plan_path, weeks_path, workouts_path
from plan_admin.database import StoreError
from plan_admin.memory_store import MemoryDocumentStore
from plan_admin.utils.notifier import CollectingNotifier

from conftest import run

WORKOUTS = workouts_path("p1", "w1", "d1")


def _seed_legacy_plan(store):
    async def _seed():
        await store.set(plan_path("p1"), {"name": "Legacy"})
        await store.set(weeks_path("p1") + ("w1",), {"weekNumber": 1})
        await store.set(days_path("p1", "w1") + ("d1",), {"name": "Day 1", "order": 1})
        await store.set(WORKOUTS + ("a",), {
            "name": "BENCH PRESS", "type": "weight", "muscleGroups": ["Chest"], "equipment": ["Barbell"],
            "order": 1, "numSets": 4, "targetReps": "8", "createdAt": "2024-01-01T00:00:00+00:00",
        })
        await store.set(WORKOUTS + ("b",), {"name": "Mystery Move", "order": 2})
        await store.set(WORKOUTS + ("c",), {"order": 3})
        await store.set(WORKOUTS + ("d",), {"globalWorkoutId": "squat", "order": 4})

    run(_seed())


def test_migration_rewrites_matching_workouts(store, library):
    _seed_legacy_plan(store)
    notifier = CollectingNotifier()

    stats = run(migrate_workouts_to_global_refs(store, notifier, page_size=1))

    assert (stats.total_plans, stats.total_weeks, stats.total_days, stats.total_workouts) == (1, 1, 1, 4)
    assert stats.workouts_updated == 1
    assert stats.workouts_skipped == 3
    assert stats.already_migrated == 1
    assert stats.warnings == [
        'No global workout found for "Mystery Move" (ID: b)',
        "Workout c has no name field - skipping",
    ]
    assert stats.errors == []
    assert notifier.messages[-1].message == "Migration completed: 1 updated, 3 skipped"

    migrated = run(store.get(WORKOUTS + ("a",)))
    assert migrated["globalWorkoutId"] == "bench-press"
    assert not {"name", "type", "muscleGroups", "equipment"} & set(migrated)
    assert (migrated["order"], migrated["numSets"], migrated["targetReps"]) == (1, 4, "8")
    assert migrated["createdAt"] == "2024-01-01T00:00:00+00:00"


def test_second_run_updates_nothing(store, library):
    _seed_legacy_plan(store)
    run(migrate_workouts_to_global_refs(store))
    store.reset_ops()

    stats = run(migrate_workouts_to_global_refs(store))

    assert stats.workouts_updated == 0
    assert stats.already_migrated == 2
    assert store.writes() == []


class _BrokenWrites(MemoryDocumentStore):
    async def update(self, path, fields):
        raise StoreError("permission denied")


def test_write_failures_are_recorded_and_walk_continues():
    store = _BrokenWrites()
    run(store.set(("global_workouts", "bench-press"), {"name": "Bench Press"}))
    _seed_legacy_plan(store)
    run(store.set(WORKOUTS + ("e",), {"name": "bench press", "order": 5}))
    notifier = CollectingNotifier()

    stats = run(migrate_workouts_to_global_refs(store, notifier))

    assert stats.total_workouts == 5
    assert stats.errors == [
        "Failed to migrate workout a: permission denied",
        "Failed to migrate workout e: permission denied",
    ]
    assert notifier.messages[-1].level == "warning"
