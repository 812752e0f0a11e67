# plan_admin/schemas/plan.py
from pydantic import BaseModel, Field
from typing import Literal, Optional

WorkoutType = Literal["Weight", "Timer"]


class WorkoutConfig(BaseModel):
    num_sets: int = 3
    target_reps: Optional[str] = None
    base_weight: Optional[float] = None
    rest_timer: Optional[int] = 45
    workout_duration: Optional[int] = None


class WorkoutDisplay(BaseModel):
    """Display fields resolved from the global workout. Never persisted on the plan."""
    name: str
    type: WorkoutType = "Weight"
    muscle_groups: list[str] = Field(default_factory=list)
    equipment: list[str] = Field(default_factory=list)


class WorkoutNode(BaseModel):
    id: str
    day_id: str
    global_workout_id: Optional[str] = None
    order: int = 1
    config: WorkoutConfig = Field(default_factory=WorkoutConfig)
    display: Optional[WorkoutDisplay] = None


class DayNode(BaseModel):
    id: str
    week_id: str
    name: str
    # Position last written to the store; 0 until the day is saved
    order: int = 0
    workout_ids: list[str] = Field(default_factory=list)


class WeekNode(BaseModel):
    id: str
    number: int
    day_ids: list[str] = Field(default_factory=list)


class PlanNode(BaseModel):
    id: Optional[str] = None
    name: str = ""
    description: str = ""
    is_active: bool = True
    week_ids: list[str] = Field(default_factory=list)


# --- request bodies ---

class EditorOpen(BaseModel):
    plan_id: Optional[str] = None


class PlanFieldsUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None


class DayCreate(BaseModel):
    name: Optional[str] = None


class DayRename(BaseModel):
    name: str = Field(min_length=1)


class WorkoutCreate(BaseModel):
    global_workout_id: str
    config: WorkoutConfig = Field(default_factory=WorkoutConfig)


class WorkoutUpdate(BaseModel):
    global_workout_id: Optional[str] = None
    config: Optional[WorkoutConfig] = None


class ReorderRequest(BaseModel):
    source_index: int = Field(ge=0)
    destination_index: int = Field(ge=0)


class BulkTargetRepsRequest(BaseModel):
    mapping: dict[str, str]


class PlanActiveUpdate(BaseModel):
    is_active: bool


# --- responses ---

class PlanSummary(BaseModel):
    id: str
    name: str
    description: str = ""
    is_active: bool = True
    total_weeks: int = 0


class LevelCounts(BaseModel):
    plan: int = 0
    weeks: int = 0
    days: int = 0
    workouts: int = 0


class SaveReport(BaseModel):
    plan_id: Optional[str] = None
    created: LevelCounts = Field(default_factory=LevelCounts)
    updated: LevelCounts = Field(default_factory=LevelCounts)
    deleted: LevelCounts = Field(default_factory=LevelCounts)

    @property
    def writes(self) -> int:
        return sum(
            getattr(counts, level)
            for counts in (self.created, self.updated)
            for level in ("plan", "weeks", "days", "workouts")
        )


class LevelDiff(BaseModel):
    new: list[str] = Field(default_factory=list)
    removed: list[str] = Field(default_factory=list)
    changed: list[str] = Field(default_factory=list)


class TreeDiff(BaseModel):
    plan_changed: bool = False
    weeks: LevelDiff = Field(default_factory=LevelDiff)
    days: LevelDiff = Field(default_factory=LevelDiff)
    workouts: LevelDiff = Field(default_factory=LevelDiff)

    @property
    def is_empty(self) -> bool:
        return not self.plan_changed and not any(
            level.new or level.removed or level.changed
            for level in (self.weeks, self.days, self.workouts)
        )
