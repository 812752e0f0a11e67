from __future__ import annotations

import asyncio

import pytest
from fastapi.testclient import TestClient

from plan_admin.crud.global_workout import create_global_workout, get_lookup
from plan_admin.crud.user import create_user
from plan_admin.main import create_app
from plan_admin.memory_store import MemoryDocumentStore
from plan_admin.schemas.global_workout import GlobalWorkoutCreate
from plan_admin.schemas.plan import WorkoutConfig
from plan_admin.schemas.user import UserCreate
from plan_admin.utils.jwt_handler import create_access_token
from plan_admin.utils.plan_tree import PlanTree, display_from

ADMIN_EMAIL = "admin@example.com"

LIBRARY = [
    GlobalWorkoutCreate(name="Bench Press", muscle_groups=["Chest"], equipment=["Barbell"], search_keywords=["push"]),
    GlobalWorkoutCreate(name="Incline Bench Press", muscle_groups=["Chest"], equipment=["Barbell"]),
    GlobalWorkoutCreate(name="Squat", muscle_groups=["Legs"], equipment=["Barbell"]),
    GlobalWorkoutCreate(name="Plank", type="Timer", muscle_groups=["Core"], search_keywords=["core", "abs"]),
]


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def store() -> MemoryDocumentStore:
    return MemoryDocumentStore()


@pytest.fixture
def library(store):
    async def _seed():
        for workout in LIBRARY:
            await create_global_workout(store, workout)
        return await get_lookup(store)

    return run(_seed())


@pytest.fixture
def client(store, library):
    run(create_user(store, UserCreate(email=ADMIN_EMAIL, is_admin=True, display_name="Admin")))
    with TestClient(create_app(store)) as test_client:
        test_client.headers.update({"Authorization": f"Bearer {create_access_token({'sub': ADMIN_EMAIL})}"})
        yield test_client


def build_tree(lookup) -> PlanTree:
    """Two weeks; week 1 has a push day (bench, incline, squat) and a core day (plank)."""
    tree = PlanTree()
    tree.plan.name = "Strength Block"
    tree.plan.description = "Four week base"
    week = tree.add_week()
    push = tree.add_day(week.id, "Push")
    for slug, reps in (("bench-press", "8-10"), ("incline-bench-press", "10"), ("squat", "5")):
        tree.add_workout(push.id, slug, WorkoutConfig(num_sets=4, target_reps=reps, base_weight=60.0), display_from(lookup[slug]))
    core = tree.add_day(week.id, "Core")
    tree.add_workout(core.id, "plank", WorkoutConfig(num_sets=3, workout_duration=60), display_from(lookup["plank"]))
    tree.add_week()
    tree.select_week(week.id)
    return tree
