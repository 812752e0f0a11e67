# plan_admin/routers/migration.py
from fastapi import APIRouter, Depends, HTTPException

from ..crud.migration import migrate_workouts_to_global_refs
from ..database import DocumentStore
from ..dependencies import get_current_admin, get_notifier, get_store
from ..utils.notifier import CollectingNotifier

router = APIRouter(prefix="/migrations", tags=["migrations"], dependencies=[Depends(get_current_admin)])


@router.post("/global-refs")
async def run_global_refs_migration(
    confirm: bool = False,
    store: DocumentStore = Depends(get_store),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    """Rewrite plan workouts to reference global workouts by id."""
    if not confirm:
        raise HTTPException(
            status_code=409,
            detail=(
                "This rewrites every workout of every plan to reference the global library. "
                "Already migrated workouts are skipped, so it is safe to run again. "
                "Repeat the request with confirm=true to start."
            ),
        )
    stats = await migrate_workouts_to_global_refs(store, notifier)
    return {"stats": stats, "notifications": notifier.as_list()}
