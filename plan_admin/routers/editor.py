# plan_admin/routers/editor.py
"""The plan edit screen.

Every edit is applied to the session's in-memory tree; nothing reaches the
store until ``save``. Responses carry the whole tree so the client can
re-render from it.
"""
import logging
from contextlib import contextmanager
from typing import Optional
from urllib.parse import quote

from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile

from ..core.config import IMPORT_MAX_BYTES
from ..core.exceptions import NodeNotFound, PlanEditError, PlanSaveError, PlanValidationError
from ..crud.editor import EditorSession, EditorSessions
from ..database import DocumentNotFound, DocumentStore
from ..dependencies import get_current_admin, get_notifier, get_store
from ..schemas.plan import (
    BulkTargetRepsRequest,
    DayCreate,
    DayRename,
    EditorOpen,
    PlanFieldsUpdate,
    ReorderRequest,
    WorkoutCreate,
    WorkoutUpdate,
)
from ..utils.notifier import CollectingNotifier, static_confirm
from ..utils.plan_io import ImportFileRejected, check_import_file, parse_plan_file

_LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/plans/editor", tags=["editor"], dependencies=[Depends(get_current_admin)])

# Open sessions of this process
editor_sessions = EditorSessions()


def get_session(session_id: str) -> EditorSession:
    session = editor_sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Editor session not found.")
    return session


@contextmanager
def editing():
    try:
        yield
    except NodeNotFound as err:
        raise HTTPException(status_code=404, detail=str(err))
    except (PlanEditError, PlanValidationError) as err:
        raise HTTPException(status_code=400, detail=str(err))


def session_view(session: EditorSession, notifier: Optional[CollectingNotifier] = None) -> dict:
    tree = session.tree
    active = tree.active_week()
    return {
        "session_id": session.id,
        "tree": tree.model_dump(),
        "active_week_id": active.id if active else None,
        "has_changes": not session.pending_changes().is_empty,
        "notifications": notifier.as_list() if notifier else [],
    }


def _require_confirm(confirmed: bool) -> None:
    if not confirmed:
        raise HTTPException(status_code=409, detail="Confirmation required. Repeat the request with confirm=true.")


# ---- sessions ----

@router.post("", status_code=201)
async def open_editor(body: EditorOpen, store: DocumentStore = Depends(get_store)):
    try:
        session = await EditorSession.open(store, body.plan_id)
    except DocumentNotFound:
        raise HTTPException(status_code=404, detail="Plan not found.")
    editor_sessions.add(session)
    _LOGGER.info("Opened editor session %s for plan %s", session.id, body.plan_id or "<new>")
    return session_view(session)


@router.get("/{session_id}")
async def read_editor(session: EditorSession = Depends(get_session)):
    return session_view(session)


@router.delete("/{session_id}")
async def close_editor(session_id: str):
    if not editor_sessions.close(session_id):
        raise HTTPException(status_code=404, detail="Editor session not found.")
    return {"message": "Editor closed"}


@router.get("/{session_id}/changes")
async def read_changes(session: EditorSession = Depends(get_session)):
    return session.pending_changes()


@router.patch("/{session_id}/plan")
async def update_plan_fields(body: PlanFieldsUpdate, session: EditorSession = Depends(get_session)):
    if body.name is not None:
        session.tree.plan.name = body.name
    if body.description is not None:
        session.tree.plan.description = body.description
    return session_view(session)


# ---- weeks ----

@router.post("/{session_id}/weeks", status_code=201)
async def add_week(session: EditorSession = Depends(get_session)):
    session.tree.add_week()
    return session_view(session)


@router.post("/{session_id}/weeks/copy", status_code=201)
async def copy_week(session: EditorSession = Depends(get_session)):
    with editing():
        session.tree.copy_week()
    return session_view(session)


@router.put("/{session_id}/weeks/{week_id}/select")
async def select_week(week_id: str, session: EditorSession = Depends(get_session)):
    with editing():
        session.tree.select_week(week_id)
    return session_view(session)


@router.delete("/{session_id}/weeks/{week_id}")
async def delete_week(
    week_id: str,
    confirm: bool = False,
    session: EditorSession = Depends(get_session),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    with editing():
        deleted = await session.delete_week(week_id, static_confirm(confirm))
    _require_confirm(deleted)
    notifier.success("Week deleted")
    return session_view(session, notifier)


# ---- days ----

@router.post("/{session_id}/weeks/{week_id}/days", status_code=201)
async def add_day(week_id: str, body: DayCreate, session: EditorSession = Depends(get_session)):
    with editing():
        session.tree.add_day(week_id, body.name)
    return session_view(session)


@router.post("/{session_id}/days/{day_id}/copy", status_code=201)
async def copy_day(day_id: str, session: EditorSession = Depends(get_session)):
    with editing():
        session.tree.copy_day(day_id)
    return session_view(session)


@router.patch("/{session_id}/days/{day_id}")
async def rename_day(day_id: str, body: DayRename, session: EditorSession = Depends(get_session)):
    with editing():
        session.tree.rename_day(day_id, body.name)
    return session_view(session)


@router.delete("/{session_id}/days/{day_id}")
async def delete_day(
    day_id: str,
    confirm: bool = False,
    session: EditorSession = Depends(get_session),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    with editing():
        deleted = await session.delete_day(day_id, static_confirm(confirm))
    _require_confirm(deleted)
    notifier.success("Day deleted")
    return session_view(session, notifier)


# ---- workouts ----

@router.post("/{session_id}/days/{day_id}/workouts", status_code=201)
async def add_workout(day_id: str, body: WorkoutCreate, session: EditorSession = Depends(get_session)):
    with editing():
        session.add_workout(day_id, body.global_workout_id, body.config)
    return session_view(session)


@router.patch("/{session_id}/workouts/{workout_id}")
async def edit_workout(workout_id: str, body: WorkoutUpdate, session: EditorSession = Depends(get_session)):
    with editing():
        session.edit_workout(workout_id, body.config, body.global_workout_id)
    return session_view(session)


@router.delete("/{session_id}/workouts/{workout_id}")
async def delete_workout(
    workout_id: str,
    confirm: bool = False,
    session: EditorSession = Depends(get_session),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    with editing():
        deleted = await session.delete_workout(workout_id, static_confirm(confirm))
    _require_confirm(deleted)
    notifier.success("Workout deleted")
    return session_view(session, notifier)


@router.post("/{session_id}/days/{day_id}/reorder")
async def reorder_workouts(day_id: str, body: ReorderRequest, session: EditorSession = Depends(get_session)):
    with editing():
        session.tree.reorder_workouts(day_id, body.source_index, body.destination_index)
    return session_view(session)


# ---- bulk target reps ----

@router.get("/{session_id}/target-reps")
async def read_target_reps(week_id: Optional[str] = None, session: EditorSession = Depends(get_session)):
    with editing():
        return {"values": session.tree.distinct_target_reps(week_id)}


@router.post("/{session_id}/target-reps")
async def bulk_edit_target_reps(
    body: BulkTargetRepsRequest,
    week_id: Optional[str] = None,
    session: EditorSession = Depends(get_session),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    with editing():
        changed = session.tree.bulk_edit_target_reps(body.mapping, week_id)
    notifier.success(f"Updated target reps on {changed} workout(s)")
    return {**session_view(session, notifier), "changed": changed}


# ---- save / export / import ----

@router.post("/{session_id}/save")
async def save_plan(
    session: EditorSession = Depends(get_session),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    with editing():
        try:
            report = await session.save(notifier)
        except PlanSaveError as err:
            raise HTTPException(
                status_code=502,
                detail={"message": str(err), "notifications": notifier.as_list()},
            )
    return {**session_view(session, notifier), "report": report}


def attachment_header(filename: str) -> str:
    """Content-Disposition for a download; non-ASCII names go in ``filename*``."""
    fallback = filename.encode("ascii", "ignore").decode("ascii").strip()
    if not fallback or fallback.startswith("."):
        fallback = "workout-plan.json"
    header = f'attachment; filename="{fallback}"'
    if fallback != filename:
        header += f"; filename*=UTF-8''{quote(filename)}"
    return header


@router.get("/{session_id}/export")
async def export_plan(session: EditorSession = Depends(get_session)):
    filename, text = session.export()
    return Response(
        content=text,
        media_type="application/json",
        headers={"Content-Disposition": attachment_header(filename)},
    )


@router.post("/{session_id}/import")
async def import_plan(
    file: UploadFile = File(...),
    session: EditorSession = Depends(get_session),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    try:
        check_import_file(file.filename or "", file.size or 0, max_bytes=IMPORT_MAX_BYTES)
        # Uploads without a declared size are read only one byte past the ceiling
        raw = await file.read(IMPORT_MAX_BYTES + 1)
        check_import_file(file.filename or "", len(raw), max_bytes=IMPORT_MAX_BYTES)
    except ImportFileRejected as err:
        raise HTTPException(status_code=415 if err.reason == "extension" else 413, detail=str(err))

    with editing():
        session.import_document(parse_plan_file(raw))
    notifier.success("Plan imported successfully! Review and save to apply.")
    return session_view(session, notifier)
