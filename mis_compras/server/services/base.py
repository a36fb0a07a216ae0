"""Common plumbing for the application services."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from mis_compras.core.database import RepoBundle, build_repos
from mis_compras.core.database.entities import User
from mis_compras.core.errors import PermissionDeniedError
from mis_compras.core.models.domain.enums import Role


def current_year() -> int:
    return datetime.now(timezone.utc).year


def has_role(user: User, roles: Iterable[str]) -> bool:
    return user.role in {r.value if isinstance(r, Role) else r for r in roles}


class ServiceBase:
    """Holds the session and the repository bundle built on it."""

    def __init__(self, session: AsyncSession, repos: Optional[RepoBundle] = None) -> None:
        self.session = session
        self.repos = repos or build_repos(session)

    async def commit(self) -> None:
        await self.session.commit()

    @staticmethod
    def ensure_role(user: User, roles: Iterable[str], detail: str = "Insufficient permissions") -> None:
        if not has_role(user, roles):
            raise PermissionDeniedError(detail)

    async def active_year(self) -> int:
        """Year new records default to, taken from the system configuration."""
        config = await self.repos.system_config.get_or_create(current_year())
        return config.active_year
