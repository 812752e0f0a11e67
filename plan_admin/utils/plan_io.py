# plan_admin/utils/plan_io.py
"""JSON import/export of a plan tree.

Document shape (the same one export produces)::

    {"id", "name", "description",
     "weeks": [{"id", "number",
                "days": [{"id", "name",
                          "workouts": [{"id", "globalWorkoutId", "name", "type",
                                        "muscleGroups", "equipment",
                                        "config": {"numSets", "targetReps", "baseWeight",
                                                   "restTimer", "workoutDuration"}}]}]}]}

Validation stops at the first problem and raises one PlanValidationError whose
message names the week/day/workout it refers to.
"""

from __future__ import annotations

import json
import re
from typing import Any, Mapping, Optional

from ..core.config import IMPORT_MAX_BYTES
from ..core.exceptions import PlanValidationError
from ..schemas.plan import DayNode, PlanNode, WeekNode, WorkoutConfig, WorkoutNode
from .plan_tree import PlanTree, display_from, new_node_id

WORKOUT_TYPES = ("Weight", "Timer")


class ImportFileRejected(ValueError):
    def __init__(self, message: str, reason: str) -> None:
        super().__init__(message)
        self.reason = reason


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_text(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def check_import_file(filename: str, size: int, max_bytes: int = IMPORT_MAX_BYTES) -> None:
    if not filename.lower().endswith(".json"):
        raise ImportFileRejected("Please select a .json file", reason="extension")
    if size > max_bytes:
        raise ImportFileRejected(
            f"File is too large ({size} bytes, limit {max_bytes} bytes)", reason="size"
        )


def parse_plan_file(raw: bytes) -> Any:
    try:
        return json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as err:
        raise PlanValidationError(f"Invalid JSON file: {err}") from err


def validate_plan_document(doc: Any) -> None:
    if not isinstance(doc, dict):
        raise PlanValidationError("Invalid plan file: expected a JSON object")
    if not _is_text(doc.get("name")):
        raise PlanValidationError("Invalid plan file: plan name is required")
    if not isinstance(doc.get("weeks"), list):
        raise PlanValidationError("Invalid plan file: weeks must be an array")

    for w, week in enumerate(doc["weeks"], start=1):
        where = f"Week {w}"
        if not isinstance(week, dict):
            raise PlanValidationError(f"{where}: expected an object")
        if not _is_number(week.get("number")):
            raise PlanValidationError(f"{where}: week number is required (number)")
        if not isinstance(week.get("days"), list):
            raise PlanValidationError(f"{where}: days must be an array")

        for d, day in enumerate(week["days"], start=1):
            where = f"Week {w}, Day {d}"
            if not isinstance(day, dict):
                raise PlanValidationError(f"{where}: expected an object")
            if not _is_text(day.get("name")):
                raise PlanValidationError(f"{where}: day name is required")
            if not isinstance(day.get("workouts"), list):
                raise PlanValidationError(f"{where}: workouts must be an array")

            for k, workout in enumerate(day["workouts"], start=1):
                _validate_workout(workout, f"Week {w}, Day {d}", k)


def _validate_workout(workout: Any, where: str, position: int) -> None:
    if not isinstance(workout, dict):
        raise PlanValidationError(f"{where}, Workout {position}: expected an object")
    name = workout.get("name")
    if not isinstance(name, str) or not name.strip():
        raise PlanValidationError(f"{where}, Workout {position}: workout name is required")
    where = f"{where}, {name}"
    kind = workout.get("type")
    if kind not in WORKOUT_TYPES:
        raise PlanValidationError(f"{where}: type must be 'Weight' or 'Timer'")
    if not isinstance(workout.get("muscleGroups"), list):
        raise PlanValidationError(f"{where}: muscleGroups must be an array")
    if not isinstance(workout.get("equipment"), list):
        raise PlanValidationError(f"{where}: equipment must be an array")
    config = workout.get("config")
    if not isinstance(config, dict):
        raise PlanValidationError(f"{where}: config must be an object")
    if kind == "Weight":
        reps = config.get("targetReps")
        if not (_is_text(reps) or _is_number(reps)):
            raise PlanValidationError(f"{where}: Weight workouts require targetReps")
    elif not _is_number(config.get("workoutDuration")):
        raise PlanValidationError(f"{where}: Timer workouts require workoutDuration (number)")


def _config_from_document(config: Mapping[str, Any]) -> WorkoutConfig:
    reps = config.get("targetReps")

    def _int(key: str, default: Optional[int] = None) -> Optional[int]:
        value = config.get(key)
        return int(value) if _is_number(value) else default

    return WorkoutConfig(
        num_sets=_int("numSets", 3),
        target_reps=str(reps).strip() if reps is not None and str(reps).strip() else None,
        base_weight=float(config["baseWeight"]) if _is_number(config.get("baseWeight")) else None,
        rest_timer=_int("restTimer"),
        workout_duration=_int("workoutDuration"),
    )


def import_plan_document(
    doc: Any,
    by_id: Mapping[str, Any],
    plan_id: Optional[str] = None,
) -> PlanTree:
    """Validate ``doc`` and build a fresh tree from it.

    Every week/day/workout gets a newly generated id; the plan keeps
    ``plan_id`` (the plan being edited). Workouts are linked to global workouts
    by ``globalWorkoutId`` when it is known, otherwise by case-insensitive name.
    """
    validate_plan_document(doc)
    by_name = {ref.name.lower(): ref for ref in by_id.values()}

    tree = PlanTree(
        plan=PlanNode(
            id=plan_id,
            name=doc["name"].strip(),
            description=str(doc.get("description") or ""),
        )
    )
    for w, week_doc in enumerate(doc["weeks"], start=1):
        week = WeekNode(id=new_node_id("week"), number=int(week_doc["number"]))
        tree.weeks[week.id] = week
        tree.plan.week_ids.append(week.id)
        for d, day_doc in enumerate(week_doc["days"], start=1):
            day = DayNode(id=new_node_id("day"), week_id=week.id, name=day_doc["name"].strip())
            tree.days[day.id] = day
            week.day_ids.append(day.id)
            for position, workout_doc in enumerate(day_doc["workouts"], start=1):
                name = workout_doc["name"]
                ref = by_id.get(workout_doc.get("globalWorkoutId") or "") or by_name.get(name.strip().lower())
                if ref is None:
                    raise PlanValidationError(
                        f"Week {w}, Day {d}, {name}: no global workout named '{name}'"
                    )
                workout = WorkoutNode(
                    id=new_node_id("workout"),
                    day_id=day.id,
                    global_workout_id=ref.id,
                    order=position,
                    config=_config_from_document(workout_doc["config"]),
                    display=display_from(ref),
                )
                tree.workouts[workout.id] = workout
                day.workout_ids.append(workout.id)
    tree.active_week_id = tree.plan.week_ids[0] if tree.plan.week_ids else None
    return tree


def export_plan_document(tree: PlanTree) -> dict[str, Any]:
    weeks = []
    for week in tree.ordered_weeks():
        days = []
        for day in tree.days_of(week.id):
            workouts = []
            for workout in tree.workouts_of(day.id):
                display = workout.display
                config = workout.config
                workouts.append({
                    "id": workout.id,
                    "globalWorkoutId": workout.global_workout_id,
                    "order": workout.order,
                    "name": display.name if display else "",
                    "type": display.type if display else "Weight",
                    "muscleGroups": list(display.muscle_groups) if display else [],
                    "equipment": list(display.equipment) if display else [],
                    "config": {
                        "numSets": config.num_sets,
                        "targetReps": config.target_reps,
                        "baseWeight": config.base_weight,
                        "restTimer": config.rest_timer,
                        "workoutDuration": config.workout_duration,
                    },
                })
            days.append({"id": day.id, "name": day.name, "workouts": workouts})
        weeks.append({"id": week.id, "number": week.number, "days": days})
    return {
        "id": tree.plan.id,
        "name": tree.plan.name,
        "description": tree.plan.description,
        "weeks": weeks,
    }


def export_filename(plan_name: str) -> str:
    base = re.sub(r'[\\/:*?"<>|\x00-\x1f\x7f]+', "", plan_name or "").strip()
    return f"{base or 'workout-plan'}.json"


def dump_plan_document(tree: PlanTree) -> str:
    return json.dumps(export_plan_document(tree), indent=2, ensure_ascii=False)

