"""
Request Dependencies.

Database session, authenticated user, role guards and per-request service
instances for API endpoints.
"""

from typing import Annotated, Callable, Optional, Type

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from mis_compras.core.database import get_session
from mis_compras.core.database.entities import User
from mis_compras.core.errors import AuthenticationError, PermissionDeniedError
from mis_compras.core.logging_config import get_logger
from mis_compras.core.models.domain.enums import Role
from mis_compras.server.core.security import decode_access_token

from .adjustments import AdjustmentService
from .base import ServiceBase
from .budgets import BudgetService
from .catalog import CatalogService
from .documents import DocumentService
from .invoices import InvoiceService
from .notifications import NotificationService
from .payments import PaymentService
from .reports import ReportService
from .requirements import RequirementService
from .users import UserService

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)

SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def get_current_user(
    session: SessionDep,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> User:
    """
    Resolve the user behind the bearer token.

    Raises:
        AuthenticationError: No token, invalid token or unknown user (401)
        PermissionDeniedError: The account has been deactivated (403)
    """
    if credentials is None:
        raise AuthenticationError("Authentication required")
    payload = decode_access_token(credentials.credentials)
    user = await session.get(User, payload["sub"])
    if user is None:
        raise AuthenticationError("User no longer exists")
    if not user.is_active:
        raise PermissionDeniedError("Account is disabled")
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]


def require_roles(*roles: Role) -> Callable:
    """
    Build a dependency that only lets the given roles through.

    Usage::

        @router.post("", dependencies=[Depends(require_roles(Role.admin))])
        async def create(...): ...

    Or, when the handler needs the user, ``user: User = Depends(require_roles(...))``.
    """
    allowed = {role.value for role in roles}

    async def checker(user: CurrentUser) -> User:
        if user.role not in allowed:
            logger.info(f"Denied {user.email} ({user.role}); requires one of {sorted(allowed)}")
            raise PermissionDeniedError(f"Requires role: {', '.join(sorted(allowed))}")
        return user

    return checker


AdminUser = Annotated[User, Depends(require_roles(Role.admin))]
DirectorUser = Annotated[User, Depends(require_roles(Role.director))]
ManagerUser = Annotated[User, Depends(require_roles(Role.admin, Role.director, Role.leader))]
ExecutiveUser = Annotated[User, Depends(require_roles(Role.admin, Role.director))]
WorkflowUser = Annotated[User, Depends(require_roles(Role.admin, Role.director, Role.leader, Role.coordinator))]


# =====================================================================
# Service dependencies
# =====================================================================


def _provide(service_cls: Type[ServiceBase]) -> Callable:
    """Dependency building ``service_cls`` on the request's session."""

    async def provider(session: SessionDep) -> ServiceBase:
        return service_cls(session)

    return provider


UserServiceDep = Annotated[UserService, Depends(_provide(UserService))]
CatalogServiceDep = Annotated[CatalogService, Depends(_provide(CatalogService))]
BudgetServiceDep = Annotated[BudgetService, Depends(_provide(BudgetService))]
AdjustmentServiceDep = Annotated[AdjustmentService, Depends(_provide(AdjustmentService))]
RequirementServiceDep = Annotated[RequirementService, Depends(_provide(RequirementService))]
PaymentServiceDep = Annotated[PaymentService, Depends(_provide(PaymentService))]
InvoiceServiceDep = Annotated[InvoiceService, Depends(_provide(InvoiceService))]
NotificationServiceDep = Annotated[NotificationService, Depends(_provide(NotificationService))]
ReportServiceDep = Annotated[ReportService, Depends(_provide(ReportService))]
DocumentServiceDep = Annotated[DocumentService, Depends(_provide(DocumentService))]
