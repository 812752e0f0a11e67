# plan_admin/routers/user.py
from fastapi import APIRouter, Depends, HTTPException
from typing import List

from ..core.exceptions import SelfModificationError
from ..crud import user as user_crud
from ..database import DocumentStore
from ..dependencies import get_current_admin, get_store
from ..schemas.user import UserAccount, UserCreate, UserUpdate

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=List[UserAccount])
async def read_users(
    store: DocumentStore = Depends(get_store),
    current_admin: UserAccount = Depends(get_current_admin),
):
    return await user_crud.list_users(store)


@router.post("", response_model=UserAccount, status_code=201)
async def create_user(
    user: UserCreate,
    store: DocumentStore = Depends(get_store),
    current_admin: UserAccount = Depends(get_current_admin),
):
    if not await user_crud.create_user(store, user):
        raise HTTPException(status_code=409, detail="A user with this email already exists.")
    return await user_crud.get_user_by_email(store, user.email)


@router.patch("/{email}", response_model=UserAccount)
async def update_user(
    email: str,
    changes: UserUpdate,
    store: DocumentStore = Depends(get_store),
    current_admin: UserAccount = Depends(get_current_admin),
):
    try:
        updated = await user_crud.update_user(store, current_admin.email, email, changes)
    except SelfModificationError as err:
        raise HTTPException(status_code=403, detail=str(err))
    if updated is None:
        raise HTTPException(status_code=404, detail="User not found.")
    return updated


@router.delete("/{email}")
async def delete_user(
    email: str,
    store: DocumentStore = Depends(get_store),
    current_admin: UserAccount = Depends(get_current_admin),
):
    try:
        removed = await user_crud.delete_user(store, current_admin.email, email)
    except SelfModificationError as err:
        raise HTTPException(status_code=403, detail=str(err))
    if not removed:
        raise HTTPException(status_code=404, detail="User not found.")
    return {"message": f"{email} removed"}
