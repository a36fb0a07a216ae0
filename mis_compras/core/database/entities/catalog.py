"""
Reference catalog entities.

Areas, projects, spending categories and suppliers are maintained by
administrators and referenced by budgets and requirements. ``SystemConfig``
is a single-row table with global switches.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now


class Area(Base, table=True):
    """Organizational area (department) of the museum.

    Table: areas
    """

    __tablename__ = "areas"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    name: str = Field(max_length=128, unique=True, index=True)
    description: Optional[str] = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"Area(name={self.name})"


class Project(Base, table=True):
    """Project budgets and requirements are charged to.

    Table: projects
    """

    __tablename__ = "projects"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    name: str = Field(max_length=255, unique=True, index=True)
    code: Optional[str] = Field(default=None, max_length=32, unique=True)
    description: Optional[str] = Field(default=None, max_length=1000)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"Project(name={self.name}, code={self.code})"


class Category(Base, table=True):
    """Spending category of a budget.

    Table: categories
    """

    __tablename__ = "categories"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    code: str = Field(max_length=32, unique=True, index=True)
    name: str = Field(max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    created_at: datetime = Field(default_factory=utc_now)


class Supplier(Base, table=True):
    """Supplier that requirements are bought from and that issues invoices.

    Table: suppliers
    """

    __tablename__ = "suppliers"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=64)
    name: str = Field(max_length=255, index=True)
    tax_id: Optional[str] = Field(default=None, max_length=32, unique=True, description="NIT without dots")
    contact_name: Optional[str] = Field(default=None, max_length=255)
    contact_email: Optional[str] = Field(default=None, max_length=255)
    contact_phone: Optional[str] = Field(default=None, max_length=32)
    address: Optional[str] = Field(default=None, max_length=500)
    is_active: bool = Field(default=True)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})

    def __repr__(self) -> str:
        return f"Supplier(name={self.name}, tax_id={self.tax_id})"


class SystemConfig(Base, table=True):
    """Global switches, always stored as the row with id 1.

    Table: system_config
    """

    __tablename__ = "system_config"
    __table_args__ = ({"extend_existing": True},)

    id: int = Field(default=1, primary_key=True)
    active_year: int = Field(description="Year new requirements and budgets default to")
    app_name: str = Field(default="MisCompras", max_length=128)
    is_registration_enabled: bool = Field(default=True)
    maintenance_mode: bool = Field(default=False)
    updated_at: datetime = Field(default_factory=utc_now, sa_column_kwargs={"onupdate": utc_now})
