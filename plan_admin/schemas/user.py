# plan_admin/schemas/user.py
from pydantic import BaseModel, Field
from typing import Optional


class UserCreate(BaseModel):
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    is_admin: bool = False
    is_active: bool = True
    display_name: Optional[str] = None


class UserUpdate(BaseModel):
    is_admin: Optional[bool] = None
    is_active: Optional[bool] = None
    display_name: Optional[str] = None


class UserAccount(BaseModel):
    email: str
    is_admin: bool = False
    is_active: bool = True
    display_name: Optional[str] = None
    photo_url: Optional[str] = None
    created_at: Optional[str] = None
    last_login_at: Optional[str] = None


class LoginRequest(BaseModel):
    id_token: str


class IdentityClaims(BaseModel):
    email: str
    name: Optional[str] = None
    picture: Optional[str] = None
