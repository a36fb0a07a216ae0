"""
User entity models.

Users authenticate with email and password and carry exactly one role.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from mis_compras.core.models.domain.enums import Role

from ..base import Base, new_id, utc_now


class UserBase(Base):
    """Base fields for user accounts."""

    email: str = Field(max_length=255, unique=True, index=True, description="Login email, stored lowercase")
    name: str = Field(max_length=255, description="Full name")
    role: str = Field(default=Role.user.value, max_length=32, index=True, description="Role name")
    area_id: Optional[str] = Field(default=None, foreign_key="areas.id", max_length=64, index=True)
    phone: Optional[str] = Field(default=None, max_length=32)
    position: Optional[str] = Field(default=None, max_length=128, description="Job title")
    is_active: bool = Field(default=True)


class User(UserBase, table=True):
    """Persistent user account.

    Table: users
    """

    __tablename__ = "users"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    password_hash: str = Field(max_length=255)
    last_login_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"User(email={self.email}, role={self.role}, active={self.is_active})"
