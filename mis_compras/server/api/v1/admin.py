"""
Catalog Administration Endpoints.

Areas, projects, categories and suppliers, the catalog statistics and the
single-row system configuration. Any authenticated user may read the
catalogs; only ADMIN users may change them.
"""

from typing import List

from fastapi import APIRouter

from mis_compras.core.models.io.catalog import (
    AreaCreate,
    AreaRead,
    AreaUpdate,
    CatalogStats,
    CategoryCreate,
    CategoryRead,
    CategoryUpdate,
    ProjectCreate,
    ProjectRead,
    ProjectUpdate,
    SupplierCreate,
    SupplierRead,
    SupplierUpdate,
    SystemConfigRead,
    SystemConfigUpdate,
)
from mis_compras.server.services.deps import AdminUser, CatalogServiceDep, CurrentUser

router = APIRouter()

IN_USE = {400: {"description": "Still referenced by other records"}}
DUPLICATE = {409: {"description": "Name or code already exists"}}


# ----- stats and configuration -----


@router.get("/stats", response_model=CatalogStats, summary="Catalog Statistics")
async def stats(admin: AdminUser, service: CatalogServiceDep) -> CatalogStats:
    return await service.stats()


@router.get(
    "/system-config",
    response_model=SystemConfigRead,
    summary="Get System Configuration",
    description="Read the system configuration; it is created with defaults on first access.",
)
async def get_system_config(user: CurrentUser, service: CatalogServiceDep) -> SystemConfigRead:
    return SystemConfigRead.model_validate(await service.get_system_config())


@router.put("/system-config", response_model=SystemConfigRead, summary="Update System Configuration")
async def update_system_config(
    data: SystemConfigUpdate, admin: AdminUser, service: CatalogServiceDep
) -> SystemConfigRead:
    return SystemConfigRead.model_validate(await service.update_system_config(data))


# ----- areas -----


@router.get("/areas", response_model=List[AreaRead], summary="List Areas")
async def list_areas(user: CurrentUser, service: CatalogServiceDep) -> List[AreaRead]:
    return [AreaRead.model_validate(a) for a in await service.list_areas()]


@router.post("/areas", response_model=AreaRead, status_code=201, summary="Create Area", responses=DUPLICATE)
async def create_area(data: AreaCreate, admin: AdminUser, service: CatalogServiceDep) -> AreaRead:
    return AreaRead.model_validate(await service.create_area(data))


@router.put("/areas/{area_id}", response_model=AreaRead, summary="Update Area", responses=DUPLICATE)
async def update_area(area_id: str, data: AreaUpdate, admin: AdminUser, service: CatalogServiceDep) -> AreaRead:
    return AreaRead.model_validate(await service.update_area(area_id, data))


@router.delete("/areas/{area_id}", status_code=204, summary="Delete Area", responses=IN_USE)
async def delete_area(area_id: str, admin: AdminUser, service: CatalogServiceDep) -> None:
    await service.delete_area(area_id)


# ----- projects -----


@router.get("/projects", response_model=List[ProjectRead], summary="List Projects")
async def list_projects(user: CurrentUser, service: CatalogServiceDep) -> List[ProjectRead]:
    return [ProjectRead.model_validate(p) for p in await service.list_projects()]


@router.post("/projects", response_model=ProjectRead, status_code=201, summary="Create Project", responses=DUPLICATE)
async def create_project(data: ProjectCreate, admin: AdminUser, service: CatalogServiceDep) -> ProjectRead:
    return ProjectRead.model_validate(await service.create_project(data))


@router.put("/projects/{project_id}", response_model=ProjectRead, summary="Update Project", responses=DUPLICATE)
async def update_project(
    project_id: str, data: ProjectUpdate, admin: AdminUser, service: CatalogServiceDep
) -> ProjectRead:
    return ProjectRead.model_validate(await service.update_project(project_id, data))


@router.delete("/projects/{project_id}", status_code=204, summary="Delete Project", responses=IN_USE)
async def delete_project(project_id: str, admin: AdminUser, service: CatalogServiceDep) -> None:
    await service.delete_project(project_id)


# ----- categories -----


@router.get("/categories", response_model=List[CategoryRead], summary="List Categories")
async def list_categories(user: CurrentUser, service: CatalogServiceDep) -> List[CategoryRead]:
    return [CategoryRead.model_validate(c) for c in await service.list_categories()]


@router.post(
    "/categories", response_model=CategoryRead, status_code=201, summary="Create Category", responses=DUPLICATE
)
async def create_category(data: CategoryCreate, admin: AdminUser, service: CatalogServiceDep) -> CategoryRead:
    return CategoryRead.model_validate(await service.create_category(data))


@router.put("/categories/{category_id}", response_model=CategoryRead, summary="Update Category", responses=DUPLICATE)
async def update_category(
    category_id: str, data: CategoryUpdate, admin: AdminUser, service: CatalogServiceDep
) -> CategoryRead:
    return CategoryRead.model_validate(await service.update_category(category_id, data))


@router.delete("/categories/{category_id}", status_code=204, summary="Delete Category", responses=IN_USE)
async def delete_category(category_id: str, admin: AdminUser, service: CatalogServiceDep) -> None:
    await service.delete_category(category_id)


# ----- suppliers -----


@router.get("/suppliers", response_model=List[SupplierRead], summary="List Suppliers")
async def list_suppliers(
    user: CurrentUser, service: CatalogServiceDep, active_only: bool = False
) -> List[SupplierRead]:
    return [SupplierRead.model_validate(s) for s in await service.list_suppliers(active_only=active_only)]


@router.get("/suppliers/{supplier_id}", response_model=SupplierRead, summary="Get Supplier")
async def get_supplier(supplier_id: str, user: CurrentUser, service: CatalogServiceDep) -> SupplierRead:
    return SupplierRead.model_validate(await service.get_supplier(supplier_id))


@router.post(
    "/suppliers", response_model=SupplierRead, status_code=201, summary="Create Supplier", responses=DUPLICATE
)
async def create_supplier(data: SupplierCreate, admin: AdminUser, service: CatalogServiceDep) -> SupplierRead:
    return SupplierRead.model_validate(await service.create_supplier(data))


@router.put("/suppliers/{supplier_id}", response_model=SupplierRead, summary="Update Supplier", responses=DUPLICATE)
async def update_supplier(
    supplier_id: str, data: SupplierUpdate, admin: AdminUser, service: CatalogServiceDep
) -> SupplierRead:
    return SupplierRead.model_validate(await service.update_supplier(supplier_id, data))


@router.delete("/suppliers/{supplier_id}", status_code=204, summary="Delete Supplier", responses=IN_USE)
async def delete_supplier(supplier_id: str, admin: AdminUser, service: CatalogServiceDep) -> None:
    await service.delete_supplier(supplier_id)
