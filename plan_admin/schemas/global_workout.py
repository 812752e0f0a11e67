# plan_admin/schemas/global_workout.py
from pydantic import BaseModel, Field
from typing import Optional

from .plan import WorkoutType


class GlobalWorkoutCreate(BaseModel):
    name: str = Field(min_length=1)
    type: WorkoutType = "Weight"
    muscle_groups: list[str] = Field(default_factory=list)
    equipment: list[str] = Field(default_factory=list)
    search_keywords: list[str] = Field(default_factory=list)
    is_active: bool = True


class GlobalWorkoutUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    type: Optional[WorkoutType] = None
    muscle_groups: Optional[list[str]] = None
    equipment: Optional[list[str]] = None
    search_keywords: Optional[list[str]] = None
    is_active: Optional[bool] = None


class GlobalWorkout(GlobalWorkoutCreate):
    id: str
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class ReferenceReport(BaseModel):
    is_referenced: bool
    plan_count: int
    plan_names: list[str]
