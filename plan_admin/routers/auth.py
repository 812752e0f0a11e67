# plan_admin/routers/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException

from ..core.exceptions import AccessDenied
from ..crud.user import sign_in
from ..database import DocumentStore
from ..dependencies import get_current_admin, get_store
from ..schemas.user import LoginRequest, UserAccount
from ..utils.identity import verify_id_token
from ..utils.jwt_handler import create_access_token

_LOGGER = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login")
async def login(body: LoginRequest, store: DocumentStore = Depends(get_store)):
    """Exchange an identity-provider ID token for a dashboard session."""
    try:
        claims = verify_id_token(body.id_token)
        account = await sign_in(store, claims)
    except AccessDenied as err:
        # The client drops the provider session and returns to the sign-in screen
        _LOGGER.info("Sign-in refused: %s", err)
        raise HTTPException(status_code=403, detail=str(err))

    access_token = create_access_token(data={"sub": account.email})
    return {
        "access_token": access_token,
        "token_type": "bearer",
        "user": account,
        "message": f"Welcome back, {account.display_name or account.email}!",
    }


@router.post("/logout")
async def logout(current_admin: UserAccount = Depends(get_current_admin)):
    return {"message": "Signed out successfully"}


@router.get("/me", response_model=UserAccount)
async def read_me(current_admin: UserAccount = Depends(get_current_admin)):
    return current_admin
