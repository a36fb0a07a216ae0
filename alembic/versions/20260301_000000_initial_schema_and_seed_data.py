"""Initial schema and seed data for Mis Compras

Revision ID: 20260301_000000
Revises: None
Create Date: 2026-03-01 00:00:00.000000

This is the initial migration that creates all necessary tables and seeds default data
for the Mis Compras service. This includes:
- Catalog tables (areas, projects, categories, suppliers, system configuration)
- Users
- Budgets, sub-leaders and budget adjustments
- Requirements with their attachments, history and payments
- Invoices and notifications
- The reference catalog every installation starts with

Revision format: YYYYMMDD_HHMMSS_description

"""

from datetime import datetime, timezone
from typing import Sequence, Union
from uuid import uuid4

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20260301_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _id() -> str:
    return uuid4().hex


def upgrade() -> None:
    """Create all tables and seed initial data."""

    # ----- catalog -----
    op.create_table(
        "areas",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(128), nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
        sa.Index("ix_areas_name", "name"),
    )

    op.create_table(
        "projects",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("code", sa.String(32), nullable=True),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
        sa.UniqueConstraint("code"),
        sa.Index("ix_projects_name", "name"),
    )

    op.create_table(
        "categories",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("code", sa.String(32), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.String(1000), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("code"),
        sa.Index("ix_categories_code", "code"),
    )

    op.create_table(
        "suppliers",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("tax_id", sa.String(32), nullable=True),
        sa.Column("contact_name", sa.String(255), nullable=True),
        sa.Column("contact_email", sa.String(255), nullable=True),
        sa.Column("contact_phone", sa.String(32), nullable=True),
        sa.Column("address", sa.String(500), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tax_id"),
        sa.Index("ix_suppliers_name", "name"),
    )

    op.create_table(
        "system_config",
        sa.Column("id", sa.Integer(), nullable=False),
        sa.Column("active_year", sa.Integer(), nullable=False),
        sa.Column("app_name", sa.String(128), nullable=False),
        sa.Column("is_registration_enabled", sa.Boolean(), nullable=False),
        sa.Column("maintenance_mode", sa.Boolean(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )

    # ----- users -----
    op.create_table(
        "users",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("role", sa.String(32), nullable=False),
        sa.Column("area_id", sa.String(64), sa.ForeignKey("areas.id"), nullable=True),
        sa.Column("phone", sa.String(32), nullable=True),
        sa.Column("position", sa.String(128), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("last_login_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_users_email", "email", unique=True),
        sa.Index("ix_users_role", "role"),
        sa.Index("ix_users_area_id", "area_id"),
    )

    # ----- budgets -----
    op.create_table(
        "budgets",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("code", sa.String(64), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.String(2000), nullable=True),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("available", sa.Float(), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("expiration_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("is_blocked", sa.Boolean(), nullable=False),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.Column("project_id", sa.String(64), sa.ForeignKey("projects.id"), nullable=False),
        sa.Column("area_id", sa.String(64), sa.ForeignKey("areas.id"), nullable=False),
        sa.Column("category_id", sa.String(64), sa.ForeignKey("categories.id"), nullable=True),
        sa.Column("manager_id", sa.String(64), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("created_by_id", sa.String(64), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("approved_by_id", sa.String(64), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("approved_at", sa.DateTime(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_budgets_code", "code", unique=True),
        sa.Index("ix_budgets_year", "year"),
        sa.Index("ix_budgets_status", "status"),
        sa.Index("ix_budgets_project_id", "project_id"),
        sa.Index("ix_budgets_area_id", "area_id"),
        sa.Index("ix_budgets_manager_id", "manager_id"),
    )

    op.create_table(
        "budget_sub_leaders",
        sa.Column("budget_id", sa.String(64), sa.ForeignKey("budgets.id"), nullable=False),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.PrimaryKeyConstraint("budget_id", "user_id"),
    )

    op.create_table(
        "budget_adjustments",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("code", sa.String(32), nullable=False),
        sa.Column("type", sa.String(16), nullable=False),
        sa.Column("budget_id", sa.String(64), sa.ForeignKey("budgets.id"), nullable=False),
        sa.Column("requested_amount", sa.Float(), nullable=False),
        sa.Column("reason", sa.String(2000), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("requested_by_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("requested_at", sa.DateTime(), nullable=False),
        sa.Column("reviewed_by_id", sa.String(64), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(), nullable=True),
        sa.Column("review_comment", sa.String(2000), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_budget_adjustments_code", "code", unique=True),
        sa.Index("ix_budget_adjustments_budget_id", "budget_id"),
        sa.Index("ix_budget_adjustments_status", "status"),
        sa.Index("ix_budget_adjustments_requested_by_id", "requested_by_id"),
    )

    op.create_table(
        "adjustment_sources",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("adjustment_id", sa.String(64), sa.ForeignKey("budget_adjustments.id"), nullable=False),
        sa.Column("budget_id", sa.String(64), sa.ForeignKey("budgets.id"), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_adjustment_sources_adjustment_id", "adjustment_id"),
        sa.Index("ix_adjustment_sources_budget_id", "budget_id"),
    )

    # ----- requirements -----
    op.create_table(
        "requirements",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("quantity", sa.String(64), nullable=False),
        sa.Column("total_amount", sa.Float(), nullable=False),
        sa.Column("actual_amount", sa.Float(), nullable=True),
        sa.Column("req_category", sa.String(32), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("project_id", sa.String(64), sa.ForeignKey("projects.id"), nullable=True),
        sa.Column("area_id", sa.String(64), sa.ForeignKey("areas.id"), nullable=True),
        sa.Column("budget_id", sa.String(64), sa.ForeignKey("budgets.id"), nullable=True),
        sa.Column("supplier_id", sa.String(64), sa.ForeignKey("suppliers.id"), nullable=True),
        sa.Column("manual_supplier_name", sa.String(255), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("procurement_status", sa.String(32), nullable=False),
        sa.Column("is_asiento", sa.Boolean(), nullable=False),
        sa.Column("has_multiple_payments", sa.Boolean(), nullable=False),
        sa.Column("purchase_order_number", sa.String(64), nullable=True),
        sa.Column("invoice_number", sa.String(64), nullable=True),
        sa.Column("delivery_date", sa.Date(), nullable=True),
        sa.Column("received_at_satisfaction", sa.Boolean(), nullable=True),
        sa.Column("satisfaction_comments", sa.Text(), nullable=True),
        sa.Column("observations", sa.Text(), nullable=True),
        sa.Column("created_by_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_requirements_year", "year"),
        sa.Index("ix_requirements_status", "status"),
        sa.Index("ix_requirements_is_asiento", "is_asiento"),
        sa.Index("ix_requirements_project_id", "project_id"),
        sa.Index("ix_requirements_area_id", "area_id"),
        sa.Index("ix_requirements_budget_id", "budget_id"),
        sa.Index("ix_requirements_supplier_id", "supplier_id"),
        sa.Index("ix_requirements_created_by_id", "created_by_id"),
        sa.Index("ix_requirements_created_at", "created_at"),
    )

    op.create_table(
        "attachments",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("requirement_id", sa.String(64), sa.ForeignKey("requirements.id"), nullable=False),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("file_url", sa.String(1000), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_attachments_requirement_id", "requirement_id"),
    )

    op.create_table(
        "history_logs",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("requirement_id", sa.String(64), sa.ForeignKey("requirements.id"), nullable=False),
        sa.Column("action", sa.String(64), nullable=False),
        sa.Column("details", sa.Text(), nullable=True),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_history_logs_requirement_id", "requirement_id"),
        sa.Index("ix_history_logs_created_at", "created_at"),
    )

    op.create_table(
        "payments",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("requirement_id", sa.String(64), sa.ForeignKey("requirements.id"), nullable=False),
        sa.Column("payment_number", sa.Integer(), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("invoice_number", sa.String(64), nullable=True),
        sa.Column("payment_date", sa.Date(), nullable=False),
        sa.Column("observations", sa.Text(), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_payments_requirement_id", "requirement_id"),
    )

    # ----- invoices and notifications -----
    op.create_table(
        "invoices",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("invoice_number", sa.String(64), nullable=False),
        sa.Column("supplier_id", sa.String(64), sa.ForeignKey("suppliers.id"), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("issue_date", sa.Date(), nullable=False),
        sa.Column("due_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("file_url", sa.String(1000), nullable=False),
        sa.Column("requirement_id", sa.String(64), sa.ForeignKey("requirements.id"), nullable=True),
        sa.Column("amount_variance", sa.Float(), nullable=True),
        sa.Column("amount_matched", sa.Boolean(), nullable=True),
        sa.Column("paid_at", sa.Date(), nullable=True),
        sa.Column("transaction_number", sa.String(64), nullable=True),
        sa.Column("created_by_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_invoices_invoice_number", "invoice_number"),
        sa.Index("ix_invoices_supplier_id", "supplier_id"),
        sa.Index("ix_invoices_status", "status"),
        sa.Index("ix_invoices_requirement_id", "requirement_id"),
        sa.Index("ix_invoices_created_by_id", "created_by_id"),
    )

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("type", sa.String(16), nullable=False),
        sa.Column("is_read", sa.Boolean(), nullable=False),
        sa.Column("requirement_id", sa.String(64), sa.ForeignKey("requirements.id"), nullable=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_notifications_user_id", "user_id"),
        sa.Index("ix_notifications_is_read", "is_read"),
        sa.Index("ix_notifications_created_at", "created_at"),
    )

    # Seed the reference catalog
    now = datetime.now(timezone.utc).replace(tzinfo=None)

    areas = sa.table(
        "areas",
        sa.column("id", sa.String),
        sa.column("name", sa.String),
        sa.column("created_at", sa.DateTime),
    )
    op.bulk_insert(
        areas,
        [{"id": _id(), "name": name, "created_at": now} for name in ("Administrativa", "Curaduría")],
    )

    projects = sa.table(
        "projects",
        sa.column("id", sa.String),
        sa.column("name", sa.String),
        sa.column("code", sa.String),
        sa.column("description", sa.String),
        sa.column("is_active", sa.Boolean),
        sa.column("created_at", sa.DateTime),
    )
    op.bulk_insert(
        projects,
        [
            {
                "id": _id(),
                "name": "Exposición Fernando Botero 2024",
                "code": "P-BOTERO-2024",
                "description": "Proyecto de exposición temporal",
                "is_active": True,
                "created_at": now,
            }
        ],
    )

    categories = sa.table(
        "categories",
        sa.column("id", sa.String),
        sa.column("code", sa.String),
        sa.column("name", sa.String),
        sa.column("created_at", sa.DateTime),
    )
    op.bulk_insert(
        categories,
        [
            {"id": _id(), "code": "1-1", "name": "Refrigerios", "created_at": now},
            {"id": _id(), "code": "2-2", "name": "Equipos de Cómputo", "created_at": now},
        ],
    )

    suppliers = sa.table(
        "suppliers",
        sa.column("id", sa.String),
        sa.column("name", sa.String),
        sa.column("tax_id", sa.String),
        sa.column("contact_email", sa.String),
        sa.column("is_active", sa.Boolean),
        sa.column("created_at", sa.DateTime),
        sa.column("updated_at", sa.DateTime),
    )
    op.bulk_insert(
        suppliers,
        [
            {
                "id": _id(),
                "name": "Papelería El Cid",
                "tax_id": "900123456-7",
                "contact_email": "ventas@elcid.com",
                "is_active": True,
                "created_at": now,
                "updated_at": now,
            }
        ],
    )

    system_config = sa.table(
        "system_config",
        sa.column("id", sa.Integer),
        sa.column("active_year", sa.Integer),
        sa.column("app_name", sa.String),
        sa.column("is_registration_enabled", sa.Boolean),
        sa.column("maintenance_mode", sa.Boolean),
        sa.column("updated_at", sa.DateTime),
    )
    op.bulk_insert(
        system_config,
        [
            {
                "id": 1,
                "active_year": now.year,
                "app_name": "MisCompras",
                "is_registration_enabled": True,
                "maintenance_mode": False,
                "updated_at": now,
            }
        ],
    )


def downgrade() -> None:
    """Drop all tables created in upgrade."""
    op.drop_table("notifications")
    op.drop_table("invoices")
    op.drop_table("payments")
    op.drop_table("history_logs")
    op.drop_table("attachments")
    op.drop_table("requirements")
    op.drop_table("adjustment_sources")
    op.drop_table("budget_adjustments")
    op.drop_table("budget_sub_leaders")
    op.drop_table("budgets")
    op.drop_table("users")
    op.drop_table("system_config")
    op.drop_table("suppliers")
    op.drop_table("categories")
    op.drop_table("projects")
    op.drop_table("areas")
