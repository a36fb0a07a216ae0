"""Unit tests for the request dependencies."""

import pytest
from fastapi.security import HTTPAuthorizationCredentials

from mis_compras.core.database.entities import User
from mis_compras.core.errors import AuthenticationError, PermissionDeniedError
from mis_compras.core.models.domain.enums import Role
from mis_compras.server.core.security import create_access_token
from mis_compras.server.services.budgets import BudgetService
from mis_compras.server.services.deps import _provide, get_current_user, require_roles

pytestmark = pytest.mark.asyncio


def _bearer(user: User) -> HTTPAuthorizationCredentials:
    token = create_access_token(user.id, user.email, user.role, user.area_id)
    return HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)


class TestGetCurrentUser:
    async def test_resolves_token_owner(self, session, leader):
        user = await get_current_user(session, _bearer(leader))
        assert user.id == leader.id

    async def test_missing_credentials(self, session):
        with pytest.raises(AuthenticationError, match="Authentication required"):
            await get_current_user(session, None)

    async def test_unknown_user(self, session):
        credentials = HTTPAuthorizationCredentials(
            scheme="Bearer", credentials=create_access_token("ghost", "ghost@museo.co", "USER")
        )
        with pytest.raises(AuthenticationError, match="no longer exists"):
            await get_current_user(session, credentials)

    async def test_disabled_account(self, session, make_user):
        user = await make_user(Role.user, is_active=False)
        with pytest.raises(PermissionDeniedError, match="disabled"):
            await get_current_user(session, _bearer(user))


class TestRequireRoles:
    async def test_allows_listed_role(self, director):
        checker = require_roles(Role.admin, Role.director)
        assert await checker(director) is director

    async def test_rejects_other_roles(self, requester):
        checker = require_roles(Role.admin, Role.director)
        with pytest.raises(PermissionDeniedError, match="ADMIN, DIRECTOR"):
            await checker(requester)


async def test_service_provider_binds_session(session):
    service = await _provide(BudgetService)(session)
    assert isinstance(service, BudgetService)
    assert service.session is session
    assert service.repos.budgets.session is session
