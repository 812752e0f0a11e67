# plan_admin/routers/plan.py
from fastapi import APIRouter, Depends, HTTPException
from typing import List, Optional

from ..crud import plan as plan_crud
from ..database import DocumentStore
from ..dependencies import get_current_admin, get_notifier, get_store
from ..schemas.plan import PlanActiveUpdate, PlanSummary
from ..utils.notifier import CollectingNotifier

router = APIRouter(prefix="/plans", tags=["plans"], dependencies=[Depends(get_current_admin)])


@router.get("", response_model=List[PlanSummary])
async def read_plans(search: Optional[str] = None, store: DocumentStore = Depends(get_store)):
    return await plan_crud.list_plans(store, search)


@router.patch("/{plan_id}/active")
async def update_plan_active(
    plan_id: str,
    body: PlanActiveUpdate,
    store: DocumentStore = Depends(get_store),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    if not await plan_crud.set_plan_active(store, plan_id, body.is_active):
        raise HTTPException(status_code=404, detail="Plan not found.")
    notifier.success(f"Plan {'activated' if body.is_active else 'deactivated'} successfully!")
    return {"id": plan_id, "is_active": body.is_active, "notifications": notifier.as_list()}


@router.delete("/{plan_id}")
async def delete_plan(
    plan_id: str,
    confirm: bool = False,
    cascade: bool = False,
    store: DocumentStore = Depends(get_store),
    notifier: CollectingNotifier = Depends(get_notifier),
):
    if not confirm:
        raise HTTPException(status_code=409, detail="Are you sure you want to delete this plan?")
    if not await plan_crud.delete_plan(store, plan_id, cascade=cascade):
        raise HTTPException(status_code=404, detail="Plan not found.")
    notifier.success("Plan deleted successfully!")
    return {"id": plan_id, "cascade": cascade, "notifications": notifier.as_list()}
