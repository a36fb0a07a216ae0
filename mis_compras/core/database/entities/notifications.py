"""Notification entity model."""

from datetime import datetime
from typing import Optional

from sqlalchemy import Text
from sqlmodel import Field

from mis_compras.core.models.domain.enums import NotificationType

from ..base import Base, new_id, utc_now


class Notification(Base, table=True):
    """In-app message for a single user.

    Table: notifications
    """

    __tablename__ = "notifications"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    user_id: str = Field(foreign_key="users.id", max_length=64, index=True)
    title: str = Field(max_length=255)
    message: str = Field(sa_type=Text)
    type: str = Field(default=NotificationType.info.value, max_length=16)
    is_read: bool = Field(default=False, index=True)
    requirement_id: Optional[str] = Field(default=None, foreign_key="requirements.id", max_length=64)
    created_at: datetime = Field(default_factory=utc_now, index=True)
