# plan_admin/utils/jwt_handler.py

from datetime import datetime, timedelta, timezone
from jose import JWTError, jwt

from ..core.config import SECRET_KEY, ALGORITHM, ACCESS_TOKEN_EXPIRE_MINUTES
from ..core.exceptions import AccessDenied


# Session token for a signed-in admin; "sub" is the account email
def create_access_token(data: dict, expires_minutes: int = ACCESS_TOKEN_EXPIRE_MINUTES) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=expires_minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def verify_token(token: str) -> str:
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as err:
        raise AccessDenied("Could not validate credentials.") from err
    email = payload.get("sub")
    if not email:
        raise AccessDenied("Could not validate credentials.")
    return email
