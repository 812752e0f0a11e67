# plan_admin/crud/plan.py
"""Persisting plan trees.

Layout: ``workout_plans/{plan}/weeks/{week}/days/{day}/workouts/{workout}``.
Plan-local workouts store only ``globalWorkoutId``, ``order`` and their
configuration; names, types, muscle groups and equipment are read from
``global_workouts`` when a plan is loaded.
"""

import logging
from typing import Any, Mapping, Optional

from ..core.exceptions import PlanSaveError
from ..database import DocumentNotFound, DocumentStore, StoreError, server_timestamp
from ..schemas.global_workout import GlobalWorkout
from ..schemas.plan import (
    DayNode,
    PlanNode,
    PlanSummary,
    SaveReport,
    WeekNode,
    WorkoutConfig,
    WorkoutDisplay,
    WorkoutNode,
)
from ..utils.change_detector import plan_fields_changed, week_equal, workout_equal
from ..utils.notifier import LoggingNotifier, Notifier
from ..utils.plan_tree import PlanTree, display_from
from . import global_workout as global_crud

_LOGGER = logging.getLogger(__name__)

PLANS = ("workout_plans",)


def plan_path(plan_id: str) -> tuple[str, ...]:
    return PLANS + (plan_id,)


def weeks_path(plan_id: str) -> tuple[str, ...]:
    return plan_path(plan_id) + ("weeks",)


def days_path(plan_id: str, week_id: str) -> tuple[str, ...]:
    return weeks_path(plan_id) + (week_id, "days")


def workouts_path(plan_id: str, week_id: str, day_id: str) -> tuple[str, ...]:
    return days_path(plan_id, week_id) + (day_id, "workouts")


def workout_fields(workout: WorkoutNode) -> dict[str, Any]:
    """The only fields a plan-local workout document carries."""
    config = workout.config
    return {
        "globalWorkoutId": workout.global_workout_id,
        "order": workout.order,
        "numSets": config.num_sets,
        "targetReps": config.target_reps,
        "baseWeight": config.base_weight,
        "restTimerSeconds": config.rest_timer,
        "workoutDurationSeconds": config.workout_duration,
    }


def _workout_from_document(
    doc_id: str,
    day_id: str,
    data: dict,
    by_id: Mapping[str, GlobalWorkout],
    by_name: Mapping[str, GlobalWorkout],
) -> WorkoutNode:
    reps = data.get("targetReps")
    workout = WorkoutNode(
        id=doc_id,
        day_id=day_id,
        global_workout_id=data.get("globalWorkoutId"),
        order=int(data.get("order") or 0),
        config=WorkoutConfig(
            num_sets=int(data.get("numSets") or 0),
            target_reps=str(reps) if reps is not None else None,
            base_weight=data.get("baseWeight"),
            rest_timer=data.get("restTimerSeconds"),
            workout_duration=data.get("workoutDurationSeconds"),
        ),
    )
    ref = by_id.get(workout.global_workout_id or "")
    if ref is None and data.get("name"):
        # Not migrated yet: link by the denormalized name.
        ref = by_name.get(str(data["name"]).lower())
        if ref is not None:
            workout.global_workout_id = ref.id
    if ref is not None:
        workout.display = display_from(ref)
    elif data.get("name"):
        workout.display = WorkoutDisplay(
            name=data["name"],
            type="Timer" if str(data.get("type", "")).lower() == "timer" else "Weight",
            muscle_groups=list(data.get("muscleGroups") or []),
            equipment=list(data.get("equipment") or []),
        )
    return workout


async def load_plan_tree(store: DocumentStore, plan_id: str) -> PlanTree:
    """Read a whole plan from the store, with display fields resolved."""
    data = await store.get(plan_path(plan_id))
    if data is None:
        raise DocumentNotFound(plan_path(plan_id))

    by_id = await global_crud.get_lookup(store)
    by_name = {ref.name.lower(): ref for ref in by_id.values()}
    tree = PlanTree(
        plan=PlanNode(
            id=plan_id,
            name=data.get("name") or "",
            description=data.get("description") or "",
            is_active=bool(data.get("isActive", True)),
        )
    )

    week_docs = await store.list(weeks_path(plan_id))
    week_docs.sort(key=lambda d: (d.data.get("weekNumber") or 0, d.id))
    for week_doc in week_docs:
        week = WeekNode(id=week_doc.id, number=int(week_doc.data.get("weekNumber") or 0))
        tree.weeks[week.id] = week
        tree.plan.week_ids.append(week.id)

        day_docs = await store.list(days_path(plan_id, week.id))
        day_docs.sort(key=lambda d: (d.data.get("order") or 0, d.id))
        for day_doc in day_docs:
            day = DayNode(
                id=day_doc.id,
                week_id=week.id,
                name=day_doc.data.get("name") or "",
                order=int(day_doc.data.get("order") or 0),
            )
            tree.days[day.id] = day
            week.day_ids.append(day.id)

            workout_docs = await store.list(workouts_path(plan_id, week.id, day.id))
            workout_docs.sort(key=lambda d: (d.data.get("order") or 0, d.id))
            for workout_doc in workout_docs:
                workout = _workout_from_document(workout_doc.id, day.id, workout_doc.data, by_id, by_name)
                tree.workouts[workout.id] = workout
                day.workout_ids.append(workout.id)

    tree.active_week_id = tree.plan.week_ids[0] if tree.plan.week_ids else None
    return tree


class PlanReconciler:
    """Make the stored plan match a locally edited tree.

    Only nodes that are new or changed relative to ``snapshot`` are written, and
    stored nodes that no longer exist locally are deleted (without their
    sub-collections). The first failing write aborts the pass; writes already
    made stay in place.
    """

    def __init__(self, store: DocumentStore, notifier: Optional[Notifier] = None) -> None:
        self.store = store
        self.notifier = notifier or LoggingNotifier()

    async def save(self, tree: PlanTree, snapshot: Optional[PlanTree]) -> SaveReport:
        report = SaveReport()
        try:
            created_plan = await self._save_plan(tree, snapshot, report)
            if not created_plan:
                await self._delete_orphans(tree, report)
            await self._save_children(tree, snapshot, report)
        except StoreError as err:
            _LOGGER.exception("Error saving plan %s", tree.plan.id)
            self.notifier.error(f"Failed to save plan: {err}")
            raise PlanSaveError(f"Failed to save plan: {err}") from err

        report.plan_id = tree.plan.id
        self.notifier.success("Plan saved successfully!")
        _LOGGER.info(
            "Saved plan %s (created=%s updated=%s deleted=%s)",
            tree.plan.id, report.created, report.updated, report.deleted,
        )
        return report

    async def _save_plan(self, tree: PlanTree, snapshot: Optional[PlanTree], report: SaveReport) -> bool:
        plan = tree.plan
        fields = {
            "name": plan.name,
            "description": plan.description,
            "totalWeeks": len(plan.week_ids),
            "updatedAt": server_timestamp(),
        }
        if plan.id is None:
            plan.id = await self.store.add(PLANS, {**fields, "isActive": plan.is_active, "createdAt": fields["updatedAt"]})
            report.created.plan += 1
            return True
        if snapshot is None and await self.store.get(plan_path(plan.id)) is None:
            await self.store.set(plan_path(plan.id), {**fields, "isActive": plan.is_active, "createdAt": fields["updatedAt"]})
            report.created.plan += 1
            return True
        if plan_fields_changed(tree, snapshot):
            await self.store.update(plan_path(plan.id), fields)
            report.updated.plan += 1
        return False

    async def _delete_orphans(self, tree: PlanTree, report: SaveReport) -> None:
        plan_id = tree.plan.id
        stored_weeks = {doc.id for doc in await self.store.list(weeks_path(plan_id))}
        for week_id in sorted(stored_weeks - set(tree.plan.week_ids)):
            await self.store.delete(weeks_path(plan_id) + (week_id,))
            report.deleted.weeks += 1

        for week in tree.ordered_weeks():
            if week.id not in stored_weeks:
                continue
            stored_days = {doc.id for doc in await self.store.list(days_path(plan_id, week.id))}
            for day_id in sorted(stored_days - set(week.day_ids)):
                await self.store.delete(days_path(plan_id, week.id) + (day_id,))
                report.deleted.days += 1

            for day in tree.days_of(week.id):
                if day.id not in stored_days:
                    continue
                collection = workouts_path(plan_id, week.id, day.id)
                stored_workouts = {doc.id for doc in await self.store.list(collection)}
                for workout_id in sorted(stored_workouts - set(day.workout_ids)):
                    await self.store.delete(collection + (workout_id,))
                    report.deleted.workouts += 1

    async def _save_children(self, tree: PlanTree, snapshot: Optional[PlanTree], report: SaveReport) -> None:
        plan_id = tree.plan.id
        snap = snapshot or PlanTree()

        for week in tree.ordered_weeks():
            snap_week = snap.weeks.get(week.id)
            now = server_timestamp()
            if snap_week is None:
                await self.store.add(
                    weeks_path(plan_id),
                    {"weekNumber": week.number, "createdAt": now, "updatedAt": now},
                    doc_id=week.id,
                )
                report.created.weeks += 1
            elif not week_equal(tree, week, snap, snap_week) and week.number != snap_week.number:
                # Child-only changes are written below; the week document itself only holds its number.
                await self.store.update(
                    weeks_path(plan_id) + (week.id,), {"weekNumber": week.number, "updatedAt": now}
                )
                report.updated.weeks += 1

            for position, day in enumerate(tree.days_of(week.id), start=1):
                snap_day = snap.days.get(day.id)
                if snap_day is None:
                    await self.store.add(
                        days_path(plan_id, week.id),
                        {"name": day.name, "order": position, "createdAt": now, "updatedAt": now},
                        doc_id=day.id,
                    )
                    report.created.days += 1
                elif day.name != snap_day.name or day.order != position:
                    # Deletes leave gaps; surviving days are restamped so stored orders stay unique.
                    await self.store.update(
                        days_path(plan_id, week.id) + (day.id,),
                        {"name": day.name, "order": position, "updatedAt": now},
                    )
                    report.updated.days += 1
                day.order = position

                collection = workouts_path(plan_id, week.id, day.id)
                for workout in tree.workouts_of(day.id):
                    snap_workout = snap.workouts.get(workout.id)
                    if snap_workout is None:
                        await self.store.add(
                            collection,
                            {**workout_fields(workout), "createdAt": now, "updatedAt": now},
                            doc_id=workout.id,
                        )
                        report.created.workouts += 1
                    elif not workout_equal(workout, snap_workout):
                        await self.store.update(
                            collection + (workout.id,), {**workout_fields(workout), "updatedAt": now}
                        )
                        report.updated.workouts += 1


async def list_plans(store: DocumentStore, search: Optional[str] = None) -> list[PlanSummary]:
    plans = []
    for doc in await store.list(PLANS):
        name = doc.data.get("name") or ""
        if search and search.lower() not in name.lower():
            continue
        total_weeks = len(await store.list(weeks_path(doc.id)))
        plans.append(PlanSummary(
            id=doc.id,
            name=name,
            description=doc.data.get("description") or "",
            is_active=bool(doc.data.get("isActive", True)),
            total_weeks=total_weeks,
        ))
    return sorted(plans, key=lambda p: p.name.lower())


async def set_plan_active(store: DocumentStore, plan_id: str, is_active: bool) -> bool:
    if await store.get(plan_path(plan_id)) is None:
        return False
    await store.update(plan_path(plan_id), {"isActive": is_active, "updatedAt": server_timestamp()})
    return True


async def delete_plan(store: DocumentStore, plan_id: str, cascade: bool = False) -> bool:
    """Delete a plan document.

    Without ``cascade`` only the plan document goes away and its weeks, days
    and workouts stay behind as orphans.
    """
    if await store.get(plan_path(plan_id)) is None:
        return False
    if cascade:
        await delete_plan_with_subcollections(store, plan_id)
    else:
        await store.delete(plan_path(plan_id))
    return True


async def delete_plan_with_subcollections(store: DocumentStore, plan_id: str) -> int:
    """Best-effort cascade: workouts, then days, then weeks, then the plan, in batches."""
    _LOGGER.info("Starting cascade deletion for plan: %s", plan_id)
    deleted = 0
    week_docs = await store.list(weeks_path(plan_id))
    for week in week_docs:
        day_docs = await store.list(days_path(plan_id, week.id))
        for day in day_docs:
            collection = workouts_path(plan_id, week.id, day.id)
            deleted += await store.batch_delete([collection + (w.id,) for w in await store.list(collection)])
        deleted += await store.batch_delete([days_path(plan_id, week.id) + (d.id,) for d in day_docs])
    deleted += await store.batch_delete([weeks_path(plan_id) + (w.id,) for w in week_docs])
    await store.delete(plan_path(plan_id))
    _LOGGER.info("Deleted plan %s and %s nested documents", plan_id, deleted)
    return deleted + 1
