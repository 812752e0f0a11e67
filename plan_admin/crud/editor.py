# plan_admin/crud/editor.py
"""Plan edit sessions: the tree being edited plus the baseline it is diffed against."""

import logging
from typing import Any, Optional
from uuid import uuid4

from ..core.exceptions import PlanEditError
from ..database import DocumentStore
from ..schemas.global_workout import GlobalWorkout
from ..schemas.plan import SaveReport, TreeDiff, WorkoutConfig, WorkoutNode
from ..utils.change_detector import diff_trees
from ..utils.notifier import Confirm, Notifier
from ..utils.plan_io import dump_plan_document, export_filename, import_plan_document
from ..utils.plan_tree import PlanTree, display_from, with_type_defaults
from . import global_workout as global_crud
from .plan import PlanReconciler, load_plan_tree

_LOGGER = logging.getLogger(__name__)


class EditorSession:
    def __init__(
        self,
        store: DocumentStore,
        tree: PlanTree,
        snapshot: Optional[PlanTree],
        lookup: dict[str, GlobalWorkout],
    ) -> None:
        self.id = uuid4().hex
        self.store = store
        self.tree = tree
        self.snapshot = snapshot
        self.lookup = lookup

    @classmethod
    async def open(cls, store: DocumentStore, plan_id: Optional[str] = None) -> "EditorSession":
        lookup = await global_crud.get_lookup(store)
        if plan_id is None:
            return cls(store, PlanTree(), None, lookup)
        tree = await load_plan_tree(store, plan_id)
        return cls(store, tree, tree.snapshot(), lookup)

    def _global(self, global_workout_id: str) -> GlobalWorkout:
        ref = self.lookup.get(global_workout_id)
        if ref is None:
            raise PlanEditError(f"Unknown global workout: {global_workout_id}")
        return ref

    async def refresh_lookup(self) -> None:
        self.lookup = await global_crud.get_lookup(self.store)
        self.tree.resolve_display(self.lookup)

    # ---- destructive edits go through a confirmation ----

    async def delete_week(self, week_id: str, confirm: Confirm) -> bool:
        self.tree.week(week_id)
        if len(self.tree.plan.week_ids) > 1:
            if not await confirm("Are you sure you want to delete this week?"):
                return False
        self.tree.delete_week(week_id)
        return True

    async def delete_day(self, day_id: str, confirm: Confirm) -> bool:
        self.tree.day(day_id)
        if not await confirm("Are you sure you want to delete this day?"):
            return False
        self.tree.delete_day(day_id)
        return True

    async def delete_workout(self, workout_id: str, confirm: Confirm) -> bool:
        self.tree.workout(workout_id)
        if not await confirm("Are you sure you want to delete this workout?"):
            return False
        self.tree.delete_workout(workout_id)
        return True

    # ---- workouts need their global reference resolved ----

    def add_workout(self, day_id: str, global_workout_id: str, config: Optional[WorkoutConfig] = None) -> WorkoutNode:
        ref = self._global(global_workout_id)
        return self.tree.add_workout(day_id, ref.id, with_type_defaults(config, ref.type), display_from(ref))

    def edit_workout(
        self,
        workout_id: str,
        config: Optional[WorkoutConfig] = None,
        global_workout_id: Optional[str] = None,
    ) -> WorkoutNode:
        workout = self.tree.workout(workout_id)
        display = None
        if global_workout_id is not None:
            display = display_from(self._global(global_workout_id))
        shown = display or workout.display
        if shown is not None and (config is not None or display is not None):
            config = with_type_defaults(config if config is not None else workout.config, shown.type)
        return self.tree.edit_workout(workout_id, config, global_workout_id, display)

    # ---- persistence ----

    def pending_changes(self) -> TreeDiff:
        return diff_trees(self.tree, self.snapshot)

    async def save(self, notifier: Optional[Notifier] = None) -> SaveReport:
        if not self.tree.plan.name.strip():
            raise PlanEditError("Plan name is required")
        report = await PlanReconciler(self.store, notifier).save(self.tree, self.snapshot)
        # Only a fully successful pass moves the baseline forward.
        self.snapshot = self.tree.snapshot()
        return report

    def export(self) -> tuple[str, str]:
        return export_filename(self.tree.plan.name), dump_plan_document(self.tree)

    def import_document(self, doc: Any) -> PlanTree:
        """Replace the tree with an imported document.

        A rejected document leaves the current tree untouched. An accepted one
        clears the baseline, so the next save rewrites everything under this
        plan id.
        """
        tree = import_plan_document(doc, self.lookup, plan_id=self.tree.plan.id)
        tree.plan.is_active = self.tree.plan.is_active
        self.tree = tree
        self.snapshot = None
        _LOGGER.info("Imported plan document into session %s", self.id)
        return tree


class EditorSessions:
    """Open edit sessions of this process, keyed by session id."""

    def __init__(self) -> None:
        self._sessions: dict[str, EditorSession] = {}

    def add(self, session: EditorSession) -> EditorSession:
        self._sessions[session.id] = session
        return session

    def get(self, session_id: str) -> Optional[EditorSession]:
        return self._sessions.get(session_id)

    def close(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def __len__(self) -> int:
        return len(self._sessions)
