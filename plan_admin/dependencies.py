# plan_admin/dependencies.py

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from .core.exceptions import AccessDenied
from .crud.user import check_admin, get_user_by_email
from .database import DocumentStore
from .schemas.user import UserAccount
from .utils.jwt_handler import verify_token
from .utils.notifier import CollectingNotifier

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/login")


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def get_notifier() -> CollectingNotifier:
    return CollectingNotifier()


async def get_current_admin(
    token: str = Depends(oauth2_scheme),
    store: DocumentStore = Depends(get_store),
) -> UserAccount:
    # Account is re-read on every request
    try:
        email = verify_token(token)
        return check_admin(await get_user_by_email(store, email))
    except AccessDenied as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=str(err),
            headers={"WWW-Authenticate": "Bearer"},
        )
