"""
User and authentication I/O models.

Covers registration, login, the administrator's user management forms and
the self-service profile endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from mis_compras.core.models.domain.enums import Role
from mis_compras.core.validation import is_valid_email, is_valid_password, is_valid_phone

from .common import PartialUpdate


def _check_email(value: str) -> str:
    if not is_valid_email(value):
        raise ValueError("Invalid email format")
    return value.strip().lower()


def _check_password(value: str) -> str:
    if not is_valid_password(value):
        raise ValueError("Password must be at least 8 characters")
    return value


def _check_phone(value: str) -> str:
    if not is_valid_phone(value):
        raise ValueError("Invalid phone number")
    return value


Email = Annotated[str, AfterValidator(_check_email)]
Password = Annotated[str, AfterValidator(_check_password)]
Phone = Annotated[str, AfterValidator(_check_phone)]


class UserRead(BaseModel):
    """Schema for reading a user. Never includes the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    role: str
    area_id: Optional[str] = None
    phone: Optional[str] = None
    position: Optional[str] = None
    is_active: bool
    last_login_at: Optional[datetime] = None
    created_at: datetime


class RegisterRequest(BaseModel):
    """Self-registration form. New accounts always get the USER role."""

    email: Email
    password: Password
    name: str = Field(min_length=1, max_length=255)
    area_id: str = Field(min_length=1)


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


class TokenResponse(BaseModel):
    """Bearer token issued on login."""

    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Token lifetime in seconds")
    user: UserRead


class UserCreate(BaseModel):
    """Schema for an administrator creating an account."""

    email: Email
    password: Password
    name: str = Field(min_length=1, max_length=255)
    role: Role = Role.user
    area_id: Optional[str] = None
    phone: Optional[Phone] = None
    position: Optional[str] = None
    is_active: bool = True


class UserUpdate(PartialUpdate):
    """Schema for an administrator editing an account. ``password`` resets it."""

    nullable_fields = frozenset({"area_id", "phone", "position"})

    email: Optional[Email] = None
    password: Optional[Password] = None
    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    role: Optional[Role] = None
    area_id: Optional[str] = None
    phone: Optional[Phone] = None
    position: Optional[str] = None
    is_active: Optional[bool] = None


class ProfileUpdate(PartialUpdate):
    """Fields a user may change on their own profile."""

    nullable_fields = frozenset({"phone", "position"})

    name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    phone: Optional[Phone] = None
    position: Optional[str] = None


class PasswordChange(BaseModel):
    current_password: str
    new_password: Password


class GeneratedPassword(BaseModel):
    password: str
