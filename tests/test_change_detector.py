from __future__ import annotations

from plan_admin.schemas.plan import WorkoutDisplay
from plan_admin.utils.change_detector import diff_level, diff_trees, plan_fields_changed, workout_equal
from plan_admin.utils.plan_tree import PlanTree

from conftest import build_tree


def test_unchanged_tree_has_empty_diff(library):
    tree = build_tree(library)
    assert diff_trees(tree, tree.snapshot()).is_empty


def test_display_fields_do_not_count_as_changes(library):
    tree = build_tree(library)
    snapshot = tree.snapshot()
    workout = next(iter(tree.workouts.values()))
    workout.display = WorkoutDisplay(name="Renamed", type="Timer", muscle_groups=["Back"], equipment=[])
    assert workout_equal(workout, snapshot.workouts[workout.id])
    assert diff_trees(tree, snapshot).is_empty


def test_config_change_marks_workout_and_its_ancestors(library):
    tree = build_tree(library)
    snapshot = tree.snapshot()
    workout = next(iter(tree.workouts.values()))
    workout.config.base_weight = 62.5

    diff = diff_trees(tree, snapshot)

    day = tree.days[workout.day_id]
    assert diff.workouts.changed == [workout.id]
    assert diff.days.changed == [day.id]
    assert diff.weeks.changed == [day.week_id]
    assert not diff.plan_changed


def test_order_change_is_a_change(library):
    tree = build_tree(library)
    snapshot = tree.snapshot()
    day_id = next(iter(tree.days))
    tree.reorder_workouts(day_id, 0, 1)
    assert len(diff_trees(tree, snapshot).workouts.changed) == 2


def test_new_and_removed_nodes_are_matched_by_id(library):
    tree = build_tree(library)
    snapshot = tree.snapshot()
    first, second = tree.plan.week_ids
    tree.delete_week(second)
    copy = tree.copy_week()

    diff = diff_trees(tree, snapshot)

    assert diff.weeks.new == [copy.id]
    assert diff.weeks.removed == [second]
    assert len(diff.days.new) == 2
    assert len(diff.workouts.new) == 4
    assert diff.plan_changed is False


def test_plan_fields():
    tree = PlanTree()
    assert plan_fields_changed(tree, None)
    snapshot = tree.snapshot()
    assert not plan_fields_changed(tree, snapshot)
    tree.plan.description = "new"
    assert plan_fields_changed(tree, snapshot)


def test_diff_level_keeps_local_order():
    assert diff_level(["c", "a", "b"], ["a", "d"]) == (["c", "b"], ["d"], ["a"])
