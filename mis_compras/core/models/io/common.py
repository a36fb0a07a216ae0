"""Shared request and response shapes."""

from __future__ import annotations

from typing import ClassVar, FrozenSet, Generic, List, TypeVar

from pydantic import BaseModel, Field, model_validator

ItemType = TypeVar("ItemType")


class PartialUpdate(BaseModel):
    """Base for edit requests where every field is optional.

    Omitted fields are left alone. An explicit ``null`` clears the field, which
    is only accepted for the names in ``nullable_fields``; anything else is a
    validation error.
    """

    nullable_fields: ClassVar[FrozenSet[str]] = frozenset()

    @model_validator(mode="after")
    def _reject_null_required_fields(self):
        cleared = sorted(
            name for name in self.model_fields_set if getattr(self, name) is None and name not in self.nullable_fields
        )
        if cleared:
            raise ValueError(f"Fields cannot be null: {', '.join(cleared)}")
        return self


class Page(BaseModel, Generic[ItemType]):
    """One page of a paginated listing."""

    items: List[ItemType]
    total: int = Field(description="Rows matching the filters across all pages")
    page: int
    limit: int
    pages: int = Field(description="Total number of pages")


class MessageResponse(BaseModel):
    message: str


class CountResponse(BaseModel):
    count: int
