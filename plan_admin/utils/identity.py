# plan_admin/utils/identity.py
"""Verification of ID tokens issued by the external identity provider."""

from jose import JWTError, jwt

from ..core.config import IDP_ALGORITHM, IDP_AUDIENCE, IDP_SECRET
from ..core.exceptions import AccessDenied
from ..schemas.user import IdentityClaims


def verify_id_token(id_token: str) -> IdentityClaims:
    options = {"verify_aud": IDP_AUDIENCE is not None}
    try:
        payload = jwt.decode(
            id_token,
            IDP_SECRET,
            algorithms=[IDP_ALGORITHM],
            audience=IDP_AUDIENCE,
            options=options,
        )
    except JWTError as err:
        raise AccessDenied("Failed to sign in. Please try again.") from err

    email = (payload.get("email") or "").strip().lower()
    if not email:
        raise AccessDenied("Unable to retrieve email from the identity provider")
    return IdentityClaims(email=email, name=payload.get("name"), picture=payload.get("picture"))
