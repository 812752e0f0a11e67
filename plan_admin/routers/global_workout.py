# plan_admin/routers/global_workout.py
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import List

from ..core.exceptions import DuplicateWorkoutName
from ..crud import global_workout as global_crud
from ..database import DocumentStore
from ..dependencies import get_current_admin, get_store
from ..schemas.global_workout import GlobalWorkout, GlobalWorkoutCreate, GlobalWorkoutUpdate

router = APIRouter(
    prefix="/global-workouts",
    tags=["global_workouts"],
    dependencies=[Depends(get_current_admin)],
)


@router.get("", response_model=List[GlobalWorkout])
async def read_global_workouts(active_only: bool = False, store: DocumentStore = Depends(get_store)):
    return await global_crud.list_global_workouts(store, active_only=active_only)


@router.get("/search", response_model=List[GlobalWorkout])
async def search_global_workouts(
    q: str = Query(..., min_length=1),
    limit: int = Query(10, ge=1, le=50),
    store: DocumentStore = Depends(get_store),
):
    """Autocomplete for the add-workout picker."""
    return await global_crud.search_global_workouts(store, q, limit=limit)


@router.get("/{workout_id}", response_model=GlobalWorkout)
async def read_global_workout(workout_id: str, store: DocumentStore = Depends(get_store)):
    workout = await global_crud.get_global_workout(store, workout_id)
    if workout is None:
        raise HTTPException(status_code=404, detail="Workout not found.")
    return workout


@router.post("", response_model=GlobalWorkout, status_code=201)
async def create_global_workout(workout: GlobalWorkoutCreate, store: DocumentStore = Depends(get_store)):
    try:
        created = await global_crud.create_global_workout(store, workout)
    except ValueError as err:
        raise HTTPException(status_code=400, detail=str(err))
    if created is None:
        raise HTTPException(status_code=409, detail=f'A workout named "{workout.name}" already exists.')
    return created


@router.patch("/{workout_id}", response_model=GlobalWorkout)
async def update_global_workout(
    workout_id: str, changes: GlobalWorkoutUpdate, store: DocumentStore = Depends(get_store)
):
    try:
        updated = await global_crud.update_global_workout(store, workout_id, changes)
    except DuplicateWorkoutName as err:
        raise HTTPException(status_code=409, detail=str(err))
    if updated is None:
        raise HTTPException(status_code=404, detail="Workout not found.")
    return updated


@router.delete("/{workout_id}")
async def delete_global_workout(
    workout_id: str,
    confirm: bool = False,
    store: DocumentStore = Depends(get_store),
):
    if await global_crud.get_global_workout(store, workout_id) is None:
        raise HTTPException(status_code=404, detail="Workout not found.")
    references = await global_crud.check_references(store, workout_id)
    if references.is_referenced and not confirm:
        raise HTTPException(
            status_code=409,
            detail={
                "message": f"This workout is used in {references.plan_count} plan(s). Delete anyway?",
                "plan_names": references.plan_names,
            },
        )
    await global_crud.delete_global_workout(store, workout_id)
    return {"message": "Workout deleted successfully!", "references": references}
