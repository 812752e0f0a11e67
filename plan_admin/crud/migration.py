# plan_admin/crud/migration.py
"""One-shot rewrite of plan-local workouts to global workout references.

Before: every workout document carried ``name``, ``type``, ``muscleGroups`` and
``equipment``. After: it carries ``globalWorkoutId`` instead, resolved by a
case-insensitive match of ``name`` against ``global_workouts``. ``order``,
``numSets``, ``targetReps``, ``baseWeight``, ``restTimerSeconds``,
``workoutDurationSeconds`` and ``createdAt`` are kept.

Running it again is harmless: migrated workouts are recognised by their
``globalWorkoutId`` and skipped.
"""

import logging
from typing import Mapping, Optional

from ..core.config import MIGRATION_PAGE_SIZE
from ..database import DELETE_FIELD, DocumentStore, Path, StoreError, server_timestamp
from ..schemas.global_workout import GlobalWorkout
from ..schemas.migration import MigrationStats
from ..utils.notifier import Notifier
from . import global_workout as global_crud
from .plan import PLANS, days_path, weeks_path, workouts_path

_LOGGER = logging.getLogger(__name__)

DENORMALIZED_FIELDS = ("name", "type", "muscleGroups", "equipment")


async def migrate_workout(
    store: DocumentStore,
    path: Path,
    data: dict,
    lookup: Mapping[str, GlobalWorkout],
    stats: MigrationStats,
) -> None:
    workout_id = path[-1]
    if data.get("globalWorkoutId"):
        stats.workouts_skipped += 1
        stats.already_migrated += 1
        _LOGGER.debug("Already migrated: %s", data.get("name") or workout_id)
        return

    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        stats.warnings.append(f"Workout {workout_id} has no name field - skipping")
        stats.workouts_skipped += 1
        return

    ref = lookup.get(name.strip().lower())
    if ref is None:
        stats.warnings.append(f'No global workout found for "{name}" (ID: {workout_id})')
        stats.workouts_skipped += 1
        return

    fields = {"globalWorkoutId": ref.id, "updatedAt": server_timestamp()}
    fields.update({field: DELETE_FIELD for field in DENORMALIZED_FIELDS})
    try:
        await store.update(path, fields)
    except StoreError as err:
        stats.errors.append(f"Failed to migrate workout {workout_id}: {err}")
        _LOGGER.error("Error migrating workout %s: %s", workout_id, err)
        return
    stats.workouts_updated += 1
    _LOGGER.info("Migrated: %s -> globalWorkoutId: %s", name, ref.id)


async def migrate_workouts_to_global_refs(
    store: DocumentStore,
    notifier: Optional[Notifier] = None,
    page_size: int = MIGRATION_PAGE_SIZE,
) -> MigrationStats:
    """Walk every plan, week, day and workout serially and migrate each workout."""
    stats = MigrationStats()
    try:
        lookup = await global_crud.get_name_lookup(store)
        _LOGGER.info("Loaded %s global workouts", len(lookup))

        async for plan in store.iter_documents(PLANS, page_size):
            stats.total_plans += 1
            _LOGGER.info("Processing plan: %s (ID: %s)", plan.data.get("name"), plan.id)
            async for week in store.iter_documents(weeks_path(plan.id), page_size):
                stats.total_weeks += 1
                async for day in store.iter_documents(days_path(plan.id, week.id), page_size):
                    stats.total_days += 1
                    collection = workouts_path(plan.id, week.id, day.id)
                    async for workout in store.iter_documents(collection, page_size):
                        stats.total_workouts += 1
                        await migrate_workout(store, collection + (workout.id,), workout.data, lookup, stats)
    except StoreError as err:
        _LOGGER.exception("Migration failed")
        stats.errors.append(f"Migration failed: {err}")

    if notifier is not None:
        if stats.errors:
            notifier.warning("Migration completed with errors. Check the logs below.")
        else:
            notifier.success(
                f"Migration completed: {stats.workouts_updated} updated, {stats.workouts_skipped} skipped"
            )
    return stats
