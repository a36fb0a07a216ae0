"""
User Endpoints.

Account administration for ADMIN users and the self-service profile for
everyone else.
"""

from typing import List, Optional

from fastapi import APIRouter, Query

from mis_compras.core.models.io.common import MessageResponse
from mis_compras.core.models.io.users import (
    GeneratedPassword,
    PasswordChange,
    ProfileUpdate,
    UserCreate,
    UserRead,
    UserUpdate,
)
from mis_compras.server.core.security import generate_password
from mis_compras.server.services.deps import AdminUser, CurrentUser, ManagerUser, UserServiceDep

router = APIRouter()


@router.get(
    "",
    response_model=List[UserRead],
    summary="List Users",
    description="List users, optionally filtered by role, area, state or a name/email fragment.",
)
async def list_users(
    user: ManagerUser,
    service: UserServiceDep,
    role: Optional[str] = None,
    area_id: Optional[str] = None,
    is_active: Optional[bool] = None,
    search: Optional[str] = Query(default=None, max_length=100),
) -> List[UserRead]:
    users = await service.list_users(role=role, area_id=area_id, is_active=is_active, search=search)
    return [UserRead.model_validate(u) for u in users]


@router.get("/me", response_model=UserRead, summary="Current User")
async def read_me(user: CurrentUser) -> UserRead:
    return UserRead.model_validate(user)


@router.patch("/me/profile", response_model=UserRead, summary="Update Profile")
async def update_profile(data: ProfileUpdate, user: CurrentUser, service: UserServiceDep) -> UserRead:
    return UserRead.model_validate(await service.update_profile(user, data))


@router.patch(
    "/me/password",
    response_model=MessageResponse,
    summary="Change Password",
    responses={400: {"description": "Current password is incorrect"}},
)
async def change_password(data: PasswordChange, user: CurrentUser, service: UserServiceDep) -> MessageResponse:
    await service.change_password(user, data)
    return MessageResponse(message="Password updated")


@router.get(
    "/generate-password",
    response_model=GeneratedPassword,
    summary="Generate Password",
    description="Suggest a random password that satisfies the password policy.",
)
async def suggest_password(user: AdminUser) -> GeneratedPassword:
    return GeneratedPassword(password=generate_password())


@router.get("/{user_id}", response_model=UserRead, summary="Get User", responses={404: {"description": "Not found"}})
async def get_user(user_id: str, user: ManagerUser, service: UserServiceDep) -> UserRead:
    return UserRead.model_validate(await service.get_user(user_id))


@router.post(
    "",
    response_model=UserRead,
    status_code=201,
    summary="Create User",
    responses={409: {"description": "Email already registered"}},
)
async def create_user(data: UserCreate, admin: AdminUser, service: UserServiceDep) -> UserRead:
    return UserRead.model_validate(await service.create_user(data))


@router.put("/{user_id}", response_model=UserRead, summary="Update User")
async def update_user(user_id: str, data: UserUpdate, admin: AdminUser, service: UserServiceDep) -> UserRead:
    return UserRead.model_validate(await service.update_user(user_id, data, admin))


@router.patch(
    "/{user_id}/toggle-status",
    response_model=UserRead,
    summary="Toggle User Status",
    description="Activate or deactivate an account. Administrators cannot deactivate themselves.",
)
async def toggle_status(user_id: str, admin: AdminUser, service: UserServiceDep) -> UserRead:
    return UserRead.model_validate(await service.toggle_status(user_id, admin))


@router.delete(
    "/{user_id}",
    status_code=204,
    summary="Delete User",
    responses={400: {"description": "Own account, or the user still has related records"}},
)
async def delete_user(user_id: str, admin: AdminUser, service: UserServiceDep) -> None:
    await service.delete_user(user_id, admin)
