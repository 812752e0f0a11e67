# plan_admin/utils/plan_tree.py
"""In-memory plan tree being edited.

Nodes live in flat id-keyed tables; each parent keeps the ordered list of its
children's ids. Matching a node against a snapshot is then a dict lookup and
new/removed detection is a set difference per level.
"""

from __future__ import annotations

from typing import Iterable, Mapping, Optional
from uuid import uuid4

from pydantic import BaseModel, Field

from ..core.exceptions import LastWeekError, NodeNotFound, PlanEditError
from ..schemas.plan import (
    DayNode,
    PlanNode,
    WeekNode,
    WorkoutConfig,
    WorkoutDisplay,
    WorkoutNode,
)


def new_node_id(kind: str) -> str:
    return f"{kind}-{uuid4().hex}"


class PlanTree(BaseModel):
    plan: PlanNode = Field(default_factory=PlanNode)
    weeks: dict[str, WeekNode] = Field(default_factory=dict)
    days: dict[str, DayNode] = Field(default_factory=dict)
    workouts: dict[str, WorkoutNode] = Field(default_factory=dict)
    active_week_id: Optional[str] = None

    # ---- lookups ----

    def week(self, week_id: str) -> WeekNode:
        try:
            return self.weeks[week_id]
        except KeyError:
            raise NodeNotFound("Week", week_id) from None

    def day(self, day_id: str) -> DayNode:
        try:
            return self.days[day_id]
        except KeyError:
            raise NodeNotFound("Day", day_id) from None

    def workout(self, workout_id: str) -> WorkoutNode:
        try:
            return self.workouts[workout_id]
        except KeyError:
            raise NodeNotFound("Workout", workout_id) from None

    def ordered_weeks(self) -> list[WeekNode]:
        return [self.weeks[wid] for wid in self.plan.week_ids]

    def days_of(self, week_id: str) -> list[DayNode]:
        return [self.days[did] for did in self.week(week_id).day_ids]

    def workouts_of(self, day_id: str) -> list[WorkoutNode]:
        return [self.workouts[wid] for wid in self.day(day_id).workout_ids]

    def active_week(self) -> Optional[WeekNode]:
        if self.active_week_id in self.weeks:
            return self.weeks[self.active_week_id]
        if self.plan.week_ids:
            return self.weeks[self.plan.week_ids[0]]
        return None

    def select_week(self, week_id: str) -> WeekNode:
        week = self.week(week_id)
        self.active_week_id = week.id
        return week

    def snapshot(self) -> "PlanTree":
        return self.model_copy(deep=True)

    # ---- weeks ----

    def add_week(self) -> WeekNode:
        week = WeekNode(id=new_node_id("week"), number=len(self.plan.week_ids) + 1)
        self.weeks[week.id] = week
        self.plan.week_ids.append(week.id)
        self.active_week_id = week.id
        return week

    def copy_week(self) -> WeekNode:
        """Append a duplicate of the active week under fresh ids.

        Day names are carried over unchanged.
        """
        source = self.active_week()
        if source is None:
            raise PlanEditError("There is no week to copy")
        week = WeekNode(id=new_node_id("week"), number=len(self.plan.week_ids) + 1)
        self.weeks[week.id] = week
        self.plan.week_ids.append(week.id)
        for day in self.days_of(source.id):
            self._clone_day(day, week)
        return week

    def delete_week(self, week_id: str) -> None:
        week = self.week(week_id)
        if len(self.plan.week_ids) <= 1:
            raise LastWeekError()
        index = self.plan.week_ids.index(week.id)
        for day_id in list(week.day_ids):
            self._drop_day(day_id)
        self.plan.week_ids.remove(week.id)
        del self.weeks[week.id]
        if self.active_week_id == week.id or self.active_week_id not in self.weeks:
            self.active_week_id = self.plan.week_ids[max(0, index - 1)]

    # ---- days ----

    def add_day(self, week_id: Optional[str] = None, name: Optional[str] = None) -> DayNode:
        week = self._target_week(week_id)
        name = (name or "").strip() or f"Day {len(week.day_ids) + 1}"
        day = DayNode(id=new_node_id("day"), week_id=week.id, name=name)
        self.days[day.id] = day
        week.day_ids.append(day.id)
        return day

    def copy_day(self, day_id: str) -> DayNode:
        source = self.day(day_id)
        return self._clone_day(source, self.week(source.week_id))

    def rename_day(self, day_id: str, name: str) -> DayNode:
        name = name.strip()
        if not name:
            raise PlanEditError("Day name is required")
        day = self.day(day_id)
        day.name = name
        return day

    def delete_day(self, day_id: str) -> None:
        day = self.day(day_id)
        self.week(day.week_id).day_ids.remove(day.id)
        self._drop_day(day.id)

    def _clone_day(self, source: DayNode, week: WeekNode) -> DayNode:
        day = DayNode(id=new_node_id("day"), week_id=week.id, name=source.name)
        self.days[day.id] = day
        week.day_ids.append(day.id)
        for workout in self.workouts_of(source.id):
            clone = workout.model_copy(deep=True, update={"id": new_node_id("workout"), "day_id": day.id})
            self.workouts[clone.id] = clone
            day.workout_ids.append(clone.id)
        return day

    def _drop_day(self, day_id: str) -> None:
        day = self.days.pop(day_id)
        for workout_id in day.workout_ids:
            self.workouts.pop(workout_id, None)

    def _target_week(self, week_id: Optional[str]) -> WeekNode:
        if week_id is not None:
            return self.week(week_id)
        week = self.active_week()
        if week is None:
            raise PlanEditError("Add a week first")
        return week

    # ---- workouts ----

    def add_workout(
        self,
        day_id: str,
        global_workout_id: str,
        config: Optional[WorkoutConfig] = None,
        display: Optional[WorkoutDisplay] = None,
    ) -> WorkoutNode:
        day = self.day(day_id)
        workout = WorkoutNode(
            id=new_node_id("workout"),
            day_id=day.id,
            global_workout_id=global_workout_id,
            order=len(day.workout_ids) + 1,
            config=config.model_copy() if config else WorkoutConfig(),
            display=display,
        )
        self.workouts[workout.id] = workout
        day.workout_ids.append(workout.id)
        return workout

    def edit_workout(
        self,
        workout_id: str,
        config: Optional[WorkoutConfig] = None,
        global_workout_id: Optional[str] = None,
        display: Optional[WorkoutDisplay] = None,
    ) -> WorkoutNode:
        workout = self.workout(workout_id)
        if config is not None:
            workout.config = config.model_copy()
        if global_workout_id is not None:
            workout.global_workout_id = global_workout_id
            workout.display = display
        return workout

    def delete_workout(self, workout_id: str) -> None:
        # Remaining workouts keep their order values until the next reorder.
        workout = self.workout(workout_id)
        self.day(workout.day_id).workout_ids.remove(workout.id)
        del self.workouts[workout.id]

    def reorder_workouts(self, day_id: str, source_index: int, destination_index: int) -> list[WorkoutNode]:
        day = self.day(day_id)
        count = len(day.workout_ids)
        if not (0 <= source_index < count and 0 <= destination_index < count):
            raise PlanEditError(f"Workout index out of range (day has {count} workouts)")
        moved = day.workout_ids.pop(source_index)
        day.workout_ids.insert(destination_index, moved)
        return self.restamp_order(day.id)

    def restamp_order(self, day_id: str) -> list[WorkoutNode]:
        workouts = self.workouts_of(day_id)
        for position, workout in enumerate(workouts, start=1):
            workout.order = position
        return workouts

    # ---- bulk edits ----

    def _weight_workouts(self, week_id: Optional[str]) -> Iterable[WorkoutNode]:
        week = self._target_week(week_id)
        for day in self.days_of(week.id):
            for workout in self.workouts_of(day.id):
                if workout.display is not None and workout.display.type == "Weight":
                    yield workout

    def distinct_target_reps(self, week_id: Optional[str] = None) -> list[str]:
        values = {w.config.target_reps for w in self._weight_workouts(week_id) if w.config.target_reps}
        return sorted(values)

    def bulk_edit_target_reps(self, mapping: Mapping[str, str], week_id: Optional[str] = None) -> int:
        """Rewrite target reps of Weight workouts in one week; returns how many changed."""
        cleaned = {old: new.strip() for old, new in mapping.items() if new and new.strip()}
        changed = 0
        for workout in self._weight_workouts(week_id):
            replacement = cleaned.get(workout.config.target_reps or "")
            if replacement is not None and replacement != workout.config.target_reps:
                workout.config.target_reps = replacement
                changed += 1
        return changed

    # ---- display resolution ----

    def resolve_display(self, lookup: Mapping[str, object]) -> None:
        """Fill display fields from global workouts keyed by id.

        ``lookup`` values need ``name``, ``type``, ``muscle_groups`` and
        ``equipment`` attributes. Unknown references keep whatever display
        they already carry.
        """
        for workout in self.workouts.values():
            ref = lookup.get(workout.global_workout_id) if workout.global_workout_id else None
            if ref is not None:
                workout.display = display_from(ref)


def display_from(ref: object) -> WorkoutDisplay:
    return WorkoutDisplay(
        name=ref.name,
        type=ref.type,
        muscle_groups=list(ref.muscle_groups),
        equipment=list(ref.equipment),
    )


DEFAULT_TARGET_REPS = "12"
DEFAULT_WORKOUT_DURATION = 60


def with_type_defaults(config: Optional[WorkoutConfig], kind: str) -> WorkoutConfig:
    """Copy of ``config`` with the field its workout type requires filled in."""
    config = config.model_copy() if config is not None else WorkoutConfig()
    if kind == "Timer":
        if config.workout_duration is None:
            config.workout_duration = DEFAULT_WORKOUT_DURATION
    elif not (config.target_reps or "").strip():
        config.target_reps = DEFAULT_TARGET_REPS
    return config
