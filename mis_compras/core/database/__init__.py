"""
Centralized database layer for Mis Compras.

This package provides a unified location for all database entities and repositories,
organized by business domain.

Structure:
- entities/: Database entity models organized by table/business logic
- repositories/: Data access layer organized by table/business logic
- session.py: Global engine and session factory management
- utils.py: Database utility functions (engine, session, repo bundle)
"""

from .base import Base, new_id, utc_now
from .session import (
    async_session_maker,
    engine,
    get_session,
    init_db,
)
from .utils import (
    RepoBundle,
    build_repos,
    create_all,
    create_engine,
    create_sessionmaker,
)

__all__ = [
    "Base",
    "RepoBundle",
    "async_session_maker",
    "build_repos",
    "create_all",
    "create_engine",
    "create_sessionmaker",
    "engine",
    "get_session",
    "init_db",
    "new_id",
    "utc_now",
]
