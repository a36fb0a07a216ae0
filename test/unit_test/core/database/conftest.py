"""Test configuration for database unit tests.

This module provides common fixtures for testing the centralized database
layer against an in-memory SQLite database.
"""

from __future__ import annotations

from typing import AsyncGenerator

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlmodel.pool import StaticPool

from mis_compras.core.database import RepoBundle, build_repos, create_all, create_sessionmaker
from mis_compras.core.database.entities import Area, Project, User


@pytest.fixture(scope="function")
async def in_memory_engine() -> AsyncGenerator:
    """Create in-memory SQLite engine with every table."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all(engine)
    try:
        yield engine
    finally:
        await engine.dispose()


@pytest.fixture(scope="function")
async def in_memory_session(in_memory_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create in-memory SQLite session for testing."""
    async with create_sessionmaker(in_memory_engine)() as session:
        yield session


@pytest.fixture(scope="function")
def repos(in_memory_session: AsyncSession) -> RepoBundle:
    return build_repos(in_memory_session)


@pytest.fixture(scope="function")
async def seed(in_memory_session: AsyncSession) -> dict:
    """An area, a project and two users."""
    area = Area(name="Administrativa")
    project = Project(name="Exposición Botero", code="P-BOTERO")
    in_memory_session.add_all([area, project])
    await in_memory_session.flush()
    owner = User(email="ana@museo.co", name="Ana", role="USER", area_id=area.id, password_hash="x")
    other = User(email="beto@museo.co", name="Beto", role="LEADER", area_id=area.id, password_hash="x")
    in_memory_session.add_all([owner, other])
    await in_memory_session.commit()
    return {"area": area, "project": project, "owner": owner, "other": other}
