# plan_admin/utils/change_detector.py
"""Node-by-node comparison of a plan tree against its snapshot.

Nodes are matched by id only, never by position. Display fields of a workout
(name, type, muscle groups, equipment) are derived from the global workout and
take no part in any comparison.
"""

from __future__ import annotations

from typing import Optional, Sequence

from ..schemas.plan import DayNode, LevelDiff, TreeDiff, WeekNode, WorkoutNode
from .plan_tree import PlanTree

CONFIG_FIELDS = ("base_weight", "target_reps", "num_sets", "rest_timer", "workout_duration")


def workout_equal(local: WorkoutNode, snapshot: WorkoutNode) -> bool:
    if local.global_workout_id != snapshot.global_workout_id or local.order != snapshot.order:
        return False
    return all(getattr(local.config, f) == getattr(snapshot.config, f) for f in CONFIG_FIELDS)


def day_equal(local_tree: PlanTree, local: DayNode, snapshot_tree: PlanTree, snapshot: DayNode) -> bool:
    if local.name != snapshot.name or len(local.workout_ids) != len(snapshot.workout_ids):
        return False
    for workout_id in local.workout_ids:
        if workout_id not in snapshot_tree.workouts:
            return False
        if not workout_equal(local_tree.workouts[workout_id], snapshot_tree.workouts[workout_id]):
            return False
    return True


def week_equal(local_tree: PlanTree, local: WeekNode, snapshot_tree: PlanTree, snapshot: WeekNode) -> bool:
    if local.number != snapshot.number or len(local.day_ids) != len(snapshot.day_ids):
        return False
    for day_id in local.day_ids:
        snap_day = snapshot_tree.days.get(day_id)
        if snap_day is None or not day_equal(local_tree, local_tree.days[day_id], snapshot_tree, snap_day):
            return False
    return True


def plan_fields_changed(local: PlanTree, snapshot: Optional[PlanTree]) -> bool:
    if snapshot is None:
        return True
    return (
        local.plan.name != snapshot.plan.name
        or local.plan.description != snapshot.plan.description
        or len(local.plan.week_ids) != len(snapshot.plan.week_ids)
    )


def diff_level(local_ids: Sequence[str], snapshot_ids: Sequence[str]) -> tuple[list[str], list[str], list[str]]:
    """Split ids into (new, removed, common); local order is kept."""
    snapshot_set = set(snapshot_ids)
    local_set = set(local_ids)
    new = [i for i in local_ids if i not in snapshot_set]
    common = [i for i in local_ids if i in snapshot_set]
    removed = [i for i in snapshot_ids if i not in local_set]
    return new, removed, common


def diff_trees(local: PlanTree, snapshot: Optional[PlanTree]) -> TreeDiff:
    diff = TreeDiff(plan_changed=plan_fields_changed(local, snapshot))
    snapshot = snapshot or PlanTree()
    _fill(diff.weeks, list(local.weeks), list(snapshot.weeks),
          lambda i: week_equal(local, local.weeks[i], snapshot, snapshot.weeks[i]))
    _fill(diff.days, list(local.days), list(snapshot.days),
          lambda i: day_equal(local, local.days[i], snapshot, snapshot.days[i]))
    _fill(diff.workouts, list(local.workouts), list(snapshot.workouts),
          lambda i: workout_equal(local.workouts[i], snapshot.workouts[i]))
    return diff


def _fill(level: LevelDiff, local_ids: list[str], snapshot_ids: list[str], equal) -> None:
    new, removed, common = diff_level(local_ids, snapshot_ids)
    level.new = new
    level.removed = removed
    level.changed = [i for i in common if not equal(i)]
