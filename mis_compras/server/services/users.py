"""
User and authentication service.

Registration, login, account administration and the self-service profile.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from mis_compras.core.database import utc_now
from mis_compras.core.database.entities import User
from mis_compras.core.errors import (
    AuthenticationError,
    BusinessRuleError,
    ConflictError,
    NotFoundError,
    PermissionDeniedError,
)
from mis_compras.core.logging_config import get_logger
from mis_compras.core.models.domain.enums import Role
from mis_compras.core.models.io.users import (
    PasswordChange,
    ProfileUpdate,
    RegisterRequest,
    UserCreate,
    UserUpdate,
)
from mis_compras.server.core.security import create_access_token, hash_password, verify_password

from .base import ServiceBase, current_year

logger = get_logger(__name__)


class UserService(ServiceBase):
    """Accounts and authentication."""

    # ----- authentication -----

    async def register(self, data: RegisterRequest) -> User:
        """Create a USER account, if self-registration is switched on."""
        config = await self.repos.system_config.get_or_create(current_year())
        if not config.is_registration_enabled:
            raise PermissionDeniedError("Registration is disabled")
        if await self.repos.areas.get_by_id(data.area_id) is None:
            raise NotFoundError("Area", data.area_id)
        await self._ensure_email_free(data.email)

        user = User(
            email=data.email,
            name=data.name.strip(),
            area_id=data.area_id,
            role=Role.user.value,
            password_hash=hash_password(data.password),
        )
        await self.repos.users.create(user)
        await self.commit()
        logger.info(f"Registered user {user.email}")
        return user

    async def login(self, email: str, password: str) -> Tuple[User, str]:
        """Check credentials and issue an access token.

        Unknown emails and wrong passwords are indistinguishable to the caller.

        Returns:
            The user and their signed token
        """
        user = await self.repos.users.get_by_email(email)
        if user is None or not verify_password(password, user.password_hash):
            logger.info(f"Failed login for {email}")
            raise AuthenticationError("Invalid email or password")
        if not user.is_active:
            raise PermissionDeniedError("Account is disabled")

        user.last_login_at = utc_now()
        await self.repos.users.update(user)
        await self.commit()
        token = create_access_token(user.id, user.email, user.role, user.area_id)
        return user, token

    async def ensure_default_admin(self, email: str, password: str) -> Optional[User]:
        """Create the bootstrap ADMIN account unless the email already exists."""
        if await self.repos.users.get_by_email(email) is not None:
            return None
        user = User(
            email=email.strip().lower(),
            name="Administrador",
            role=Role.admin.value,
            password_hash=hash_password(password),
        )
        await self.repos.users.create(user)
        await self.commit()
        logger.info(f"Created default admin {user.email}")
        return user

    # ----- administration -----

    async def list_users(
        self,
        role: Optional[str] = None,
        area_id: Optional[str] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> List[User]:
        return await self.repos.users.search(role=role, area_id=area_id, is_active=is_active, search=search)

    async def get_user(self, user_id: str) -> User:
        user = await self.repos.users.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User", user_id)
        return user

    async def create_user(self, data: UserCreate) -> User:
        await self._ensure_email_free(data.email)
        if data.area_id and await self.repos.areas.get_by_id(data.area_id) is None:
            raise NotFoundError("Area", data.area_id)

        user = User(
            **data.model_dump(exclude={"password", "role"}),
            role=data.role.value,
            password_hash=hash_password(data.password),
        )
        await self.repos.users.create(user)
        await self.commit()
        logger.info(f"Created user {user.email} with role {user.role}")
        return user

    async def update_user(self, user_id: str, data: UserUpdate, acting: User) -> User:
        user = await self.get_user(user_id)
        changes = data.model_dump(exclude_unset=True)

        if "email" in changes and changes["email"] != user.email:
            await self._ensure_email_free(changes["email"])
        if changes.get("area_id") and await self.repos.areas.get_by_id(changes["area_id"]) is None:
            raise NotFoundError("Area", changes["area_id"])
        if user.id == acting.id and changes.get("is_active") is False:
            raise BusinessRuleError("You cannot deactivate your own account")

        password = changes.pop("password", None)
        if password:
            user.password_hash = hash_password(password)
        if changes.get("role") is not None:
            changes["role"] = changes["role"].value
        for key, value in changes.items():
            setattr(user, key, value)

        await self.repos.users.update(user)
        await self.commit()
        return user

    async def toggle_status(self, user_id: str, acting: User) -> User:
        user = await self.get_user(user_id)
        if user.id == acting.id:
            raise BusinessRuleError("You cannot deactivate your own account")
        user.is_active = not user.is_active
        await self.repos.users.update(user)
        await self.commit()
        logger.info(f"User {user.email} active={user.is_active}")
        return user

    async def delete_user(self, user_id: str, acting: User) -> None:
        user = await self.get_user(user_id)
        if user.id == acting.id:
            raise BusinessRuleError("You cannot delete your own account")
        references = await self.repos.users.count_references(user.id)
        if references:
            raise BusinessRuleError(
                f"User has {references} related records; deactivate the account instead of deleting it"
            )
        await self.repos.users.delete_account(user)
        await self.commit()
        logger.info(f"Deleted user {user.email}")

    # ----- self-service -----

    async def update_profile(self, user: User, data: ProfileUpdate) -> User:
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(user, key, value)
        await self.repos.users.update(user)
        await self.commit()
        return user

    async def change_password(self, user: User, data: PasswordChange) -> None:
        if not verify_password(data.current_password, user.password_hash):
            raise BusinessRuleError("Current password is incorrect")
        user.password_hash = hash_password(data.new_password)
        await self.repos.users.update(user)
        await self.commit()

    async def _ensure_email_free(self, email: str) -> None:
        if await self.repos.users.get_by_email(email) is not None:
            raise ConflictError(f"Email {email} is already registered")
