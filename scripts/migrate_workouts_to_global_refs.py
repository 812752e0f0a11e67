# migrate_workouts_to_global_refs.py
#
# Rewrites every plan workout to reference the global workout library by id.
# Safe to run more than once: migrated workouts are skipped.
#
#   python scripts/migrate_workouts_to_global_refs.py [--log migration-log.json]

import argparse
import asyncio
import json
import logging
import sys

from plan_admin.core.config import DATABASE_URL, LOG_LEVEL, STORE_BACKEND
from plan_admin.crud.migration import migrate_workouts_to_global_refs
from plan_admin.database import create_store
from plan_admin.schemas.migration import MigrationStats
from plan_admin.utils.notifier import LoggingNotifier


# 1. Summary
def print_summary(stats: MigrationStats):
    print("=" * 60)
    print("MIGRATION SUMMARY")
    print("=" * 60)
    print(f"Total plans processed:     {stats.total_plans}")
    print(f"Total weeks processed:     {stats.total_weeks}")
    print(f"Total days processed:      {stats.total_days}")
    print(f"Total workouts processed:  {stats.total_workouts}")
    print(f"Workouts updated:          {stats.workouts_updated}")
    print(f"Workouts skipped:          {stats.workouts_skipped}")
    print(f"  (already migrated:       {stats.already_migrated})")

    if stats.warnings:
        print(f"\nWarnings ({len(stats.warnings)}):")
        for warning in stats.warnings:
            print(f"  - {warning}")
    if stats.errors:
        print(f"\nErrors ({len(stats.errors)}):")
        for error in stats.errors:
            print(f"  - {error}")


# 2. Run against the configured store
async def run(log_path):
    store = create_store(STORE_BACKEND, DATABASE_URL)
    await store.connect()
    try:
        stats = await migrate_workouts_to_global_refs(store, LoggingNotifier())
    finally:
        await store.disconnect()

    print_summary(stats)
    with open(log_path, "w", encoding="utf-8") as outfile:
        json.dump(stats.model_dump(), outfile, ensure_ascii=False, indent=2)
    print(f"\nDetailed log saved to {log_path}")
    return stats


# 3. Entry point
if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Migrate plan workouts to global workout references")
    parser.add_argument("--log", default="migration-log.json", help="where to write the JSON log")
    args = parser.parse_args()

    logging.basicConfig(level=LOG_LEVEL)
    stats = asyncio.run(run(args.log))
    sys.exit(1 if stats.errors else 0)
