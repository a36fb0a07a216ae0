"""
Catalog administration service.

Areas, projects, categories and suppliers: uniqueness checks on create and
update, and delete guards that refuse to remove anything still referenced.
"""

from __future__ import annotations

from typing import List

from mis_compras.core.database.entities import Area, Category, Project, Supplier, SystemConfig
from mis_compras.core.errors import BusinessRuleError, ConflictError, NotFoundError
from mis_compras.core.logging_config import get_logger
from mis_compras.core.models.io.catalog import (
    AreaCreate,
    AreaUpdate,
    CatalogStats,
    CategoryCreate,
    CategoryUpdate,
    ProjectCreate,
    ProjectUpdate,
    SupplierCreate,
    SupplierUpdate,
    SystemConfigUpdate,
)

from .base import ServiceBase, current_year

logger = get_logger(__name__)


class CatalogService(ServiceBase):
    """Reference data maintained by administrators."""

    # ----- areas -----

    async def list_areas(self) -> List[Area]:
        return await self.repos.areas.list_ordered()

    async def get_area(self, area_id: str) -> Area:
        area = await self.repos.areas.get_by_id(area_id)
        if area is None:
            raise NotFoundError("Area", area_id)
        return area

    async def create_area(self, data: AreaCreate) -> Area:
        if await self.repos.areas.get_by_name(data.name):
            raise ConflictError(f"Area '{data.name}' already exists")
        area = await self.repos.areas.create(Area(**data.model_dump()))
        await self.commit()
        return area

    async def update_area(self, area_id: str, data: AreaUpdate) -> Area:
        area = await self.get_area(area_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("name") and changes["name"].lower() != area.name.lower():
            if await self.repos.areas.get_by_name(changes["name"]):
                raise ConflictError(f"Area '{changes['name']}' already exists")
        for key, value in changes.items():
            setattr(area, key, value)
        await self.repos.areas.update(area)
        await self.commit()
        return area

    async def delete_area(self, area_id: str) -> None:
        area = await self.get_area(area_id)
        users = await self.repos.areas.count_users(area.id)
        if users:
            raise BusinessRuleError(f"Cannot delete area with {users} assigned users")
        await self.repos.areas.delete(area.id)
        await self.commit()
        logger.info(f"Deleted area {area.name}")

    # ----- projects -----

    async def list_projects(self) -> List[Project]:
        return await self.repos.projects.list_ordered()

    async def get_project(self, project_id: str) -> Project:
        project = await self.repos.projects.get_by_id(project_id)
        if project is None:
            raise NotFoundError("Project", project_id)
        return project

    async def create_project(self, data: ProjectCreate) -> Project:
        await self._ensure_project_unique(data.name, data.code)
        project = await self.repos.projects.create(Project(**data.model_dump()))
        await self.commit()
        return project

    async def update_project(self, project_id: str, data: ProjectUpdate) -> Project:
        project = await self.get_project(project_id)
        changes = data.model_dump(exclude_unset=True)
        await self._ensure_project_unique(changes.get("name"), changes.get("code"), exclude_id=project.id)
        for key, value in changes.items():
            setattr(project, key, value)
        await self.repos.projects.update(project)
        await self.commit()
        return project

    async def delete_project(self, project_id: str) -> None:
        project = await self.get_project(project_id)
        requirements = await self.repos.projects.count_requirements(project.id)
        budgets = await self.repos.projects.count_budgets(project.id)
        if requirements or budgets:
            raise BusinessRuleError(
                f"Cannot delete project with {requirements} requirements and {budgets} budgets"
            )
        await self.repos.projects.delete(project.id)
        await self.commit()

    async def _ensure_project_unique(self, name, code, exclude_id=None) -> None:
        if name:
            existing = await self.repos.projects.get_by_name(name)
            if existing and existing.id != exclude_id:
                raise ConflictError(f"Project '{name}' already exists")
        if code:
            existing = await self.repos.projects.get_by_code(code)
            if existing and existing.id != exclude_id:
                raise ConflictError(f"Project code '{code}' already exists")

    # ----- categories -----

    async def list_categories(self) -> List[Category]:
        return await self.repos.categories.list_ordered()

    async def get_category(self, category_id: str) -> Category:
        category = await self.repos.categories.get_by_id(category_id)
        if category is None:
            raise NotFoundError("Category", category_id)
        return category

    async def create_category(self, data: CategoryCreate) -> Category:
        if await self.repos.categories.get_by_code(data.code):
            raise ConflictError(f"Category code '{data.code}' already exists")
        category = await self.repos.categories.create(Category(**data.model_dump()))
        await self.commit()
        return category

    async def update_category(self, category_id: str, data: CategoryUpdate) -> Category:
        category = await self.get_category(category_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("code") and changes["code"] != category.code:
            if await self.repos.categories.get_by_code(changes["code"]):
                raise ConflictError(f"Category code '{changes['code']}' already exists")
        for key, value in changes.items():
            setattr(category, key, value)
        await self.repos.categories.update(category)
        await self.commit()
        return category

    async def delete_category(self, category_id: str) -> None:
        category = await self.get_category(category_id)
        budgets = await self.repos.categories.count_budgets(category.id)
        if budgets:
            raise BusinessRuleError(f"Cannot delete category with {budgets} budgets")
        await self.repos.categories.delete(category.id)
        await self.commit()

    # ----- suppliers -----

    async def list_suppliers(self, active_only: bool = False) -> List[Supplier]:
        return await self.repos.suppliers.list_ordered(active_only=active_only)

    async def get_supplier(self, supplier_id: str) -> Supplier:
        supplier = await self.repos.suppliers.get_by_id(supplier_id)
        if supplier is None:
            raise NotFoundError("Supplier", supplier_id)
        return supplier

    async def create_supplier(self, data: SupplierCreate) -> Supplier:
        if data.tax_id and await self.repos.suppliers.get_by_tax_id(data.tax_id):
            raise ConflictError(f"Supplier with NIT {data.tax_id} already exists")
        supplier = await self.repos.suppliers.create(Supplier(**data.model_dump()))
        await self.commit()
        return supplier

    async def update_supplier(self, supplier_id: str, data: SupplierUpdate) -> Supplier:
        supplier = await self.get_supplier(supplier_id)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("tax_id") and changes["tax_id"] != supplier.tax_id:
            if await self.repos.suppliers.get_by_tax_id(changes["tax_id"]):
                raise ConflictError(f"Supplier with NIT {changes['tax_id']} already exists")
        for key, value in changes.items():
            setattr(supplier, key, value)
        await self.repos.suppliers.update(supplier)
        await self.commit()
        return supplier

    async def delete_supplier(self, supplier_id: str) -> None:
        supplier = await self.get_supplier(supplier_id)
        requirements = await self.repos.suppliers.count_requirements(supplier.id)
        invoices = await self.repos.suppliers.count_invoices(supplier.id)
        if requirements or invoices:
            raise BusinessRuleError(
                f"Cannot delete supplier with {requirements} requirements and {invoices} invoices"
            )
        await self.repos.suppliers.delete(supplier.id)
        await self.commit()

    # ----- system -----

    async def stats(self) -> CatalogStats:
        return CatalogStats(
            areas=await self.repos.areas.count(),
            projects=await self.repos.projects.count(),
            categories=await self.repos.categories.count(),
            suppliers=await self.repos.suppliers.count(),
            users=await self.repos.users.count(),
        )

    async def get_system_config(self) -> SystemConfig:
        config = await self.repos.system_config.get_or_create(current_year())
        await self.commit()
        return config

    async def update_system_config(self, data: SystemConfigUpdate) -> SystemConfig:
        config = await self.repos.system_config.get_or_create(current_year())
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(config, key, value)
        await self.repos.system_config.update(config)
        await self.commit()
        logger.info(f"System configuration updated: active_year={config.active_year}")
        return config
