# plan_admin/crud/global_workout.py
import logging
import re
from typing import Any, Optional

from ..core.exceptions import DuplicateWorkoutName
from ..database import DocumentStore, server_timestamp
from ..schemas.global_workout import (
    GlobalWorkout,
    GlobalWorkoutCreate,
    GlobalWorkoutUpdate,
    ReferenceReport,
)
from ..utils.fuzzy_search import search_workouts

_LOGGER = logging.getLogger(__name__)

GLOBAL_WORKOUTS = ("global_workouts",)

_FIELD_NAMES = {
    "name": "name",
    "type": "type",
    "muscle_groups": "muscleGroups",
    "equipment": "equipment",
    "search_keywords": "searchKeywords",
    "is_active": "isActive",
}


def slugify(name: str) -> str:
    slug = re.sub(r"\s+", "-", name.strip().lower())
    return re.sub(r"[^a-z0-9-]", "", slug)


def _normalize_type(value: Any) -> str:
    # Older documents used lowercase tags.
    return "Timer" if str(value or "").lower() == "timer" else "Weight"


def from_document(doc_id: str, data: dict) -> GlobalWorkout:
    return GlobalWorkout(
        id=doc_id,
        name=data.get("name") or doc_id,
        type=_normalize_type(data.get("type")),
        muscle_groups=list(data.get("muscleGroups") or []),
        equipment=list(data.get("equipment") or []),
        search_keywords=list(data.get("searchKeywords") or []),
        is_active=bool(data.get("isActive", True)),
        created_at=data.get("createdAt"),
        updated_at=data.get("updatedAt"),
    )


def _clean_list(values: list[str], lower: bool = False) -> list[str]:
    cleaned = [v.strip() for v in values if v and v.strip()]
    return [v.lower() for v in cleaned] if lower else cleaned


async def list_global_workouts(store: DocumentStore, active_only: bool = False) -> list[GlobalWorkout]:
    workouts = [from_document(doc.id, doc.data) for doc in await store.list(GLOBAL_WORKOUTS)]
    if active_only:
        workouts = [w for w in workouts if w.is_active]
    return sorted(workouts, key=lambda w: w.name.lower())


async def get_global_workout(store: DocumentStore, workout_id: str) -> Optional[GlobalWorkout]:
    data = await store.get(GLOBAL_WORKOUTS + (workout_id,))
    return from_document(workout_id, data) if data is not None else None


async def get_lookup(store: DocumentStore) -> dict[str, GlobalWorkout]:
    """Global workouts keyed by id."""
    return {doc.id: from_document(doc.id, doc.data) for doc in await store.list(GLOBAL_WORKOUTS)}


async def get_name_lookup(store: DocumentStore) -> dict[str, GlobalWorkout]:
    """Global workouts keyed by lowercased name (the pre-normalization natural key)."""
    lookup = {}
    for doc in await store.list(GLOBAL_WORKOUTS):
        workout = from_document(doc.id, doc.data)
        lookup[workout.name.lower()] = workout
    return lookup


async def create_global_workout(store: DocumentStore, workout: GlobalWorkoutCreate) -> Optional[GlobalWorkout]:
    # The id is derived from the name, so a taken id means a duplicate name
    workout_id = slugify(workout.name)
    if not workout_id:
        raise ValueError("Workout name must contain letters or digits")
    if await store.get(GLOBAL_WORKOUTS + (workout_id,)) is not None:
        return None

    now = server_timestamp()
    data = {
        "name": workout.name.strip(),
        "type": workout.type,
        "muscleGroups": _clean_list(workout.muscle_groups),
        "equipment": _clean_list(workout.equipment),
        "searchKeywords": _clean_list(workout.search_keywords, lower=True),
        "isActive": workout.is_active,
        "createdAt": now,
        "updatedAt": now,
    }
    await store.add(GLOBAL_WORKOUTS, data, doc_id=workout_id)
    _LOGGER.info("Created global workout %s", workout_id)
    return from_document(workout_id, data)


async def update_global_workout(
    store: DocumentStore, workout_id: str, changes: GlobalWorkoutUpdate
) -> Optional[GlobalWorkout]:
    path = GLOBAL_WORKOUTS + (workout_id,)
    if await store.get(path) is None:
        return None
    fields: dict[str, Any] = {}
    for attr, value in changes.model_dump(exclude_unset=True).items():
        if value is None:
            continue
        if attr in ("muscle_groups", "equipment"):
            value = _clean_list(value)
        elif attr == "search_keywords":
            value = _clean_list(value, lower=True)
        elif attr == "name":
            value = value.strip()
            taken = (await get_name_lookup(store)).get(value.lower())
            if taken is not None and taken.id != workout_id:
                raise DuplicateWorkoutName(value)
        fields[_FIELD_NAMES[attr]] = value
    fields["updatedAt"] = server_timestamp()
    await store.update(path, fields)
    return await get_global_workout(store, workout_id)


async def delete_global_workout(store: DocumentStore, workout_id: str) -> bool:
    path = GLOBAL_WORKOUTS + (workout_id,)
    if await store.get(path) is None:
        return False
    await store.delete(path)
    _LOGGER.info("Deleted global workout %s", workout_id)
    return True


async def check_references(store: DocumentStore, workout_id: str) -> ReferenceReport:
    """Find the plans whose workouts point at ``workout_id``.

    The store cannot query nested collections by field, so every plan is
    walked until its first match.
    """
    plan_names = []
    for plan in await store.list(("workout_plans",)):
        if await _plan_references(store, plan.id, workout_id):
            plan_names.append(plan.data.get("name") or "Unnamed Plan")
    return ReferenceReport(is_referenced=bool(plan_names), plan_count=len(plan_names), plan_names=plan_names)


async def _plan_references(store: DocumentStore, plan_id: str, workout_id: str) -> bool:
    weeks = ("workout_plans", plan_id, "weeks")
    for week in await store.list(weeks):
        days = weeks + (week.id, "days")
        for day in await store.list(days):
            for workout in await store.list(days + (day.id, "workouts")):
                if workout.data.get("globalWorkoutId") == workout_id:
                    return True
    return False


async def search_global_workouts(store: DocumentStore, query: str, limit: int = 10) -> list[GlobalWorkout]:
    return search_workouts(query, await list_global_workouts(store, active_only=True), limit=limit)
