from __future__ import annotations

import pytest

from plan_admin.core.exceptions import DuplicateWorkoutName
from plan_admin.crud import global_workout as global_crud
from plan_admin.crud.plan import PlanReconciler
from plan_admin.schemas.global_workout import GlobalWorkoutCreate, GlobalWorkoutUpdate
from plan_admin.utils.fuzzy_search import search_workouts

from conftest import build_tree, run


def test_slugify():
    assert global_crud.slugify("  Bench Press ") == "bench-press"
    assert global_crud.slugify("Farmer's Walk (DB)") == "farmers-walk-db"


def test_create_uses_slug_id_and_refuses_duplicates(store, library):
    created = run(global_crud.create_global_workout(
        store, GlobalWorkoutCreate(name="Deadlift", search_keywords=[" Hinge ", ""])
    ))
    assert created.id == "deadlift"
    assert created.search_keywords == ["hinge"]
    assert run(global_crud.create_global_workout(store, GlobalWorkoutCreate(name="deadlift"))) is None


def test_create_rejects_name_without_letters(store):
    with pytest.raises(ValueError):
        run(global_crud.create_global_workout(store, GlobalWorkoutCreate(name="!!!")))


def test_list_sorted_and_active_filter(store, library):
    run(global_crud.update_global_workout(store, "squat", GlobalWorkoutUpdate(is_active=False)))
    names = [w.name for w in run(global_crud.list_global_workouts(store))]
    assert names == ["Bench Press", "Incline Bench Press", "Plank", "Squat"]
    active = [w.name for w in run(global_crud.list_global_workouts(store, active_only=True))]
    assert "Squat" not in active


def test_update_missing_returns_none(store):
    assert run(global_crud.update_global_workout(store, "nope", GlobalWorkoutUpdate(name="x"))) is None


def test_rename_to_a_taken_name_is_refused(store, library):
    with pytest.raises(DuplicateWorkoutName, match="\"squat\" already exists"):
        run(global_crud.update_global_workout(store, "bench-press", GlobalWorkoutUpdate(name=" squat ")))
    assert run(global_crud.get_global_workout(store, "bench-press")).name == "Bench Press"

    renamed = run(global_crud.update_global_workout(store, "bench-press", GlobalWorkoutUpdate(name="BENCH PRESS")))
    assert renamed.name == "BENCH PRESS"


def test_reference_check_walks_plans(store, library):
    tree = build_tree(library)
    run(PlanReconciler(store).save(tree, None))

    report = run(global_crud.check_references(store, "plank"))
    assert report.is_referenced
    assert report.plan_names == ["Strength Block"]

    assert not run(global_crud.check_references(store, "deadlift")).is_referenced


def test_search_ranks_prefix_then_substring_then_keywords(library):
    workouts = list(library.values())
    assert [w.name for w in search_workouts("bench", workouts)] == ["Bench Press", "Incline Bench Press"]
    assert [w.name for w in search_workouts("press", workouts)] == ["Bench Press", "Incline Bench Press"]
    assert [w.name for w in search_workouts("abs", workouts)] == ["Plank"]
    assert search_workouts("  ", workouts) == []


def test_search_falls_back_to_close_matches(library):
    assert [w.name for w in search_workouts("sqat", list(library.values()))] == ["Squat"]


def test_search_respects_limit(library):
    assert len(search_workouts("e", list(library.values()), limit=2)) == 2
