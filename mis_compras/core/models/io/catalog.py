"""
Catalog I/O models.

Areas, projects, categories, suppliers, the system configuration and the
administration dashboard counters.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from mis_compras.core.validation import (
    is_blank,
    is_valid_code,
    is_valid_email,
    is_valid_phone,
    is_valid_tax_id,
    normalize_tax_id,
)

from .common import PartialUpdate


def _strip_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Name is required")
    return value


def _check_code(value: str) -> str:
    value = value.strip().upper()
    if not is_valid_code(value):
        raise ValueError("Code may only contain uppercase letters, digits and dashes")
    return value


def _check_tax_id(value: str) -> Optional[str]:
    if not is_valid_tax_id(value):
        raise ValueError("Invalid NIT")
    return normalize_tax_id(value)


def _check_contact_email(value: str) -> Optional[str]:
    if is_blank(value):
        return None
    if not is_valid_email(value):
        raise ValueError("Invalid email format")
    return value.strip().lower()


def _check_phone(value: str) -> str:
    if not is_valid_phone(value):
        raise ValueError("Invalid phone number")
    return value


Name = Annotated[str, AfterValidator(_strip_name)]
Code = Annotated[str, AfterValidator(_check_code)]
TaxId = Annotated[str, AfterValidator(_check_tax_id)]
ContactEmail = Annotated[str, AfterValidator(_check_contact_email)]
Phone = Annotated[str, AfterValidator(_check_phone)]


# ----- Areas -----


class AreaCreate(BaseModel):
    name: Name
    description: Optional[str] = None


class AreaUpdate(PartialUpdate):
    nullable_fields = frozenset({"description"})

    name: Optional[Name] = None
    description: Optional[str] = None


class AreaRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    description: Optional[str] = None
    created_at: datetime


# ----- Projects -----


class ProjectCreate(BaseModel):
    name: Name
    code: Optional[Code] = None
    description: Optional[str] = None
    is_active: bool = True


class ProjectUpdate(PartialUpdate):
    nullable_fields = frozenset({"code", "description"})

    name: Optional[Name] = None
    code: Optional[Code] = None
    description: Optional[str] = None
    is_active: Optional[bool] = None


class ProjectRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    code: Optional[str] = None
    description: Optional[str] = None
    is_active: bool
    created_at: datetime


# ----- Categories -----


class CategoryCreate(BaseModel):
    code: Code
    name: Name
    description: Optional[str] = None


class CategoryUpdate(PartialUpdate):
    nullable_fields = frozenset({"description"})

    code: Optional[Code] = None
    name: Optional[Name] = None
    description: Optional[str] = None


class CategoryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    code: str
    name: str
    description: Optional[str] = None


# ----- Suppliers -----


class SupplierCreate(BaseModel):
    """Schema for registering a supplier. ``tax_id`` is the NIT, dots allowed."""

    name: Name
    tax_id: Optional[TaxId] = None
    contact_name: Optional[str] = None
    contact_email: Optional[ContactEmail] = None
    contact_phone: Optional[Phone] = None
    address: Optional[str] = None
    is_active: bool = True


class SupplierUpdate(PartialUpdate):
    nullable_fields = frozenset({"tax_id", "contact_name", "contact_email", "contact_phone", "address"})

    name: Optional[Name] = None
    tax_id: Optional[TaxId] = None
    contact_name: Optional[str] = None
    contact_email: Optional[ContactEmail] = None
    contact_phone: Optional[Phone] = None
    address: Optional[str] = None
    is_active: Optional[bool] = None


class SupplierRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    tax_id: Optional[str] = None
    contact_name: Optional[str] = None
    contact_email: Optional[str] = None
    contact_phone: Optional[str] = None
    address: Optional[str] = None
    is_active: bool


# ----- System -----


class SystemConfigRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    active_year: int
    app_name: str
    is_registration_enabled: bool
    maintenance_mode: bool
    updated_at: datetime


class SystemConfigUpdate(PartialUpdate):
    active_year: Optional[int] = Field(default=None, ge=2000, le=2100)
    app_name: Optional[str] = Field(default=None, min_length=1, max_length=128)
    is_registration_enabled: Optional[bool] = None
    maintenance_mode: Optional[bool] = None


class CatalogStats(BaseModel):
    areas: int
    projects: int
    categories: int
    suppliers: int
    users: int
