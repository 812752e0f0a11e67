# plan_admin/crud/user.py
import logging
from typing import Optional

from ..core.exceptions import AccessDenied, SelfModificationError
from ..database import DocumentStore, StoreError, server_timestamp
from ..schemas.user import IdentityClaims, UserAccount, UserCreate, UserUpdate

_LOGGER = logging.getLogger(__name__)

USERS = ("users",)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def from_document(email: str, data: dict) -> UserAccount:
    return UserAccount(
        email=email,
        is_admin=bool(data.get("isAdmin", False)),
        is_active=bool(data.get("isActive", True)),
        display_name=data.get("displayName"),
        photo_url=data.get("photoURL"),
        created_at=data.get("createdAt"),
        last_login_at=data.get("lastLoginAt"),
    )


async def get_user_by_email(store: DocumentStore, email: str) -> Optional[UserAccount]:
    email = normalize_email(email)
    data = await store.get(USERS + (email,))
    return from_document(email, data) if data is not None else None


async def list_users(store: DocumentStore) -> list[UserAccount]:
    users = [from_document(doc.id, doc.data) for doc in await store.list(USERS)]
    return sorted(users, key=lambda u: u.email)


async def create_user(store: DocumentStore, user: UserCreate) -> bool:
    email = normalize_email(user.email)
    if await store.get(USERS + (email,)) is not None:
        return False  # already provisioned

    await store.set(USERS + (email,), {
        "email": email,
        "isAdmin": user.is_admin,
        "isActive": user.is_active,
        "displayName": user.display_name,
        "createdAt": server_timestamp(),
    })
    _LOGGER.info("Provisioned account %s (admin=%s)", email, user.is_admin)
    return True


async def update_user(
    store: DocumentStore, acting_email: str, email: str, changes: UserUpdate
) -> Optional[UserAccount]:
    email = normalize_email(email)
    if email == normalize_email(acting_email):
        raise SelfModificationError("edit")
    if await store.get(USERS + (email,)) is None:
        return None

    fields = {}
    if changes.is_admin is not None:
        fields["isAdmin"] = changes.is_admin
    if changes.is_active is not None:
        fields["isActive"] = changes.is_active
    if changes.display_name is not None:
        fields["displayName"] = changes.display_name
    if fields:
        await store.update(USERS + (email,), fields)
    return await get_user_by_email(store, email)


async def delete_user(store: DocumentStore, acting_email: str, email: str) -> bool:
    email = normalize_email(email)
    if email == normalize_email(acting_email):
        raise SelfModificationError("remove")
    if await store.get(USERS + (email,)) is None:
        return False
    await store.delete(USERS + (email,))
    _LOGGER.info("Removed account %s", email)
    return True


def check_admin(account: Optional[UserAccount]) -> UserAccount:
    if account is None:
        raise AccessDenied("Access denied. Admin access only. Contact an administrator for access.")
    if not account.is_active:
        raise AccessDenied("Your account has been deactivated. Contact an administrator.")
    if not account.is_admin:
        raise AccessDenied("Admin access required. Please use the mobile app instead.")
    return account


async def sign_in(store: DocumentStore, claims: IdentityClaims) -> UserAccount:
    """Admit a verified identity only when it maps to an active admin account."""
    account = check_admin(await get_user_by_email(store, claims.email))

    fields = {"lastLoginAt": server_timestamp()}
    if claims.name and not account.display_name:
        fields["displayName"] = claims.name
    if claims.picture and not account.photo_url:
        fields["photoURL"] = claims.picture
    try:
        await store.update(USERS + (account.email,), fields)
    except StoreError:
        # Sign-in still succeeds without the timestamp
        _LOGGER.exception("Error updating last login for %s", account.email)
    return (await get_user_by_email(store, account.email)) or account
