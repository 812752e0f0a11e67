from __future__ import annotations

import json

import pytest

from plan_admin.core.exceptions import PlanValidationError
from plan_admin.crud.editor import EditorSession
from plan_admin.schemas.plan import WorkoutConfig
from plan_admin.utils.plan_io import (
    ImportFileRejected,
    check_import_file,
    export_filename,
    export_plan_document,
    import_plan_document,
    parse_plan_file,
    validate_plan_document,
)
from plan_admin.utils.plan_tree import PlanTree

from conftest import build_tree


def _document():
    return {
        "name": "Imported",
        "description": "from file",
        "weeks": [
            {"number": 1, "days": [{"name": "Push", "workouts": [
                {"name": "Bench Press", "type": "Weight", "muscleGroups": [], "equipment": [],
                 "config": {"numSets": 3, "targetReps": "10", "baseWeight": 50, "restTimer": 90}},
            ]}]},
            {"number": 2, "days": [{"name": "Core", "workouts": [
                {"name": "plank", "type": "Timer", "muscleGroups": [], "equipment": [],
                 "config": {"numSets": 2, "workoutDuration": 45}},
            ]}]},
        ],
    }


def test_timer_without_duration_is_rejected_with_path():
    doc = _document()
    doc["weeks"][1]["days"][0]["workouts"][0]["name"] = "Plank"
    del doc["weeks"][1]["days"][0]["workouts"][0]["config"]["workoutDuration"]
    with pytest.raises(PlanValidationError) as err:
        validate_plan_document(doc)
    assert str(err.value) == "Week 2, Day 1, Plank: Timer workouts require workoutDuration (number)"


def test_boolean_is_not_a_number():
    doc = _document()
    doc["weeks"][1]["days"][0]["workouts"][0]["config"]["workoutDuration"] = True
    with pytest.raises(PlanValidationError, match="workoutDuration"):
        validate_plan_document(doc)
    doc = _document()
    doc["weeks"][0]["number"] = False
    with pytest.raises(PlanValidationError, match="Week 1: week number is required"):
        validate_plan_document(doc)


@pytest.mark.parametrize(
    "mutate, message",
    [
        (lambda d: d.pop("name"), "Invalid plan file: plan name is required"),
        (lambda d: d.update(weeks={}), "Invalid plan file: weeks must be an array"),
        (lambda d: d["weeks"][0]["days"][0].update(name=""), "Week 1, Day 1: day name is required"),
        (lambda d: d["weeks"][0]["days"][0]["workouts"][0].update(type="Cardio"),
         "Week 1, Day 1, Bench Press: type must be 'Weight' or 'Timer'"),
        (lambda d: d["weeks"][0]["days"][0]["workouts"][0]["config"].pop("targetReps"),
         "Week 1, Day 1, Bench Press: Weight workouts require targetReps"),
    ],
)
def test_first_problem_is_reported(mutate, message):
    doc = _document()
    mutate(doc)
    with pytest.raises(PlanValidationError) as err:
        validate_plan_document(doc)
    assert str(err.value) == message


def test_non_object_document_is_rejected():
    with pytest.raises(PlanValidationError, match="expected a JSON object"):
        validate_plan_document([1, 2])


def test_import_resolves_names_and_regenerates_ids(library):
    tree = import_plan_document(_document(), library, plan_id="plan-1")

    assert tree.plan.id == "plan-1"
    assert [w.number for w in tree.ordered_weeks()] == [1, 2]
    bench, plank = tree.workouts.values()
    assert bench.global_workout_id == "bench-press"
    assert bench.config.base_weight == 50.0
    assert bench.config.rest_timer == 90
    assert plank.global_workout_id == "plank"
    assert plank.display.type == "Timer"
    assert plank.config.workout_duration == 45
    assert tree.active_week_id == tree.plan.week_ids[0]


def test_import_rejects_unknown_workout(library):
    doc = _document()
    doc["weeks"][0]["days"][0]["workouts"][0]["name"] = "Moon Lift"
    with pytest.raises(PlanValidationError, match="Week 1, Day 1, Moon Lift: no global workout named 'Moon Lift'"):
        import_plan_document(doc, library)


def test_export_then_import_keeps_content_but_not_ids(library):
    tree = build_tree(library)
    exported = json.loads(json.dumps(export_plan_document(tree)))

    imported = import_plan_document(exported, library, plan_id=tree.plan.id)

    assert [w.global_workout_id for w in imported.workouts.values()] == [
        w.global_workout_id for w in tree.workouts.values()
    ]
    assert [w.config for w in imported.workouts.values()] == [w.config for w in tree.workouts.values()]
    assert not set(imported.workouts) & set(tree.workouts)
    assert [d.name for d in imported.days.values()] == ["Push", "Core"]


def test_rejected_import_leaves_session_tree_alone(store, library):
    tree = build_tree(library)
    session = EditorSession(store, tree, tree.snapshot(), library)
    before = session.tree.snapshot()
    doc = _document()
    del doc["weeks"][1]["days"][0]["workouts"][0]["config"]["workoutDuration"]

    with pytest.raises(PlanValidationError):
        session.import_document(doc)

    assert session.tree == before
    assert session.snapshot is not None


def test_accepted_import_replaces_tree_and_clears_snapshot(store, library):
    tree = build_tree(library)
    tree.plan.id = "plan-1"
    session = EditorSession(store, tree, tree.snapshot(), library)
    session.import_document(_document())
    assert session.tree.plan.id == "plan-1"
    assert session.tree.plan.name == "Imported"
    assert session.snapshot is None


def test_file_checks():
    with pytest.raises(ImportFileRejected) as err:
        check_import_file("plan.txt", 10)
    assert err.value.reason == "extension"
    with pytest.raises(ImportFileRejected) as err:
        check_import_file("plan.json", 2048, max_bytes=1024)
    assert err.value.reason == "size"
    check_import_file("PLAN.JSON", 1024, max_bytes=1024)


def test_malformed_json_is_a_validation_error():
    with pytest.raises(PlanValidationError, match="Invalid JSON file"):
        parse_plan_file(b"{not json")


def test_export_filename():
    assert export_filename("Strength Block") == "Strength Block.json"
    assert export_filename("") == "workout-plan.json"
    assert export_filename("Week\t1\x00 / Block") == "Week1  Block.json"


def test_default_config_workouts_survive_export_then_import(store, library):
    session = EditorSession(store, PlanTree(), None, library)
    session.tree.plan.name = "Defaults"
    day = session.tree.add_day(session.tree.add_week().id)
    bench = session.add_workout(day.id, "bench-press")
    plank = session.add_workout(day.id, "plank", WorkoutConfig())
    assert bench.config.target_reps == "12"
    assert plank.config.workout_duration == 60

    imported = import_plan_document(json.loads(session.export()[1]), library)

    assert [w.config for w in imported.workouts.values()] == [bench.config, plank.config]


def test_switching_to_timer_workout_fills_duration(store, library):
    tree = build_tree(library)
    session = EditorSession(store, tree, tree.snapshot(), library)
    workout = tree.workouts_of(tree.days_of(tree.plan.week_ids[0])[0].id)[0]

    session.edit_workout(workout.id, global_workout_id="plank")

    assert workout.config.workout_duration == 60
    assert workout.config.target_reps == "8-10"
    validate_plan_document(export_plan_document(session.tree))
