"""Fixtures for the server tests.

Every test gets a fresh in-memory SQLite database with the full schema, an
HTTP client bound to the application with the session dependency overridden,
and factories for users and the catalog rows most flows need.
"""

import smtplib
from typing import AsyncGenerator, Callable, Dict

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlmodel.pool import StaticPool

from mis_compras.core.database import create_all, create_sessionmaker, new_id
from mis_compras.core.database.entities import Area, Budget, Project, Supplier, SystemConfig, User
from mis_compras.core.models.domain.enums import BudgetStatus, Role
from mis_compras.server.core.config import settings
from mis_compras.server.core.security import create_access_token, hash_password

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
ACTIVE_YEAR = 2025
PASSWORD = "Secreto123"
# Hashed once; bcrypt is deliberately slow
PASSWORD_HASH = hash_password(PASSWORD)


def auth_headers(user: User) -> Dict[str, str]:
    token = create_access_token(user.id, user.email, user.role, user.area_id)
    return {"Authorization": f"Bearer {token}"}


@pytest_asyncio.fixture
async def test_engine():
    """Create a test database engine with every table."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a new session for each test, with the active year configured."""
    async_session_maker = create_sessionmaker(test_engine)

    async with async_session_maker() as session:
        session.add(SystemConfig(id=1, active_year=ACTIVE_YEAR))
        await session.commit()
        yield session


@pytest_asyncio.fixture(name="client")
async def client_fixture(session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create an async HTTP client with the database session overridden."""
    from mis_compras.core.database import get_session
    from mis_compras.server.main import app

    async def get_session_override() -> AsyncGenerator[AsyncSession, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://localhost") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def auth() -> Callable[[User], Dict[str, str]]:
    """Build the bearer header for a user."""
    return auth_headers


@pytest.fixture
def make_user(session: AsyncSession):
    """Factory persisting a user whose password is ``PASSWORD``."""

    async def _make(
        role: Role = Role.user,
        email: str = None,
        name: str = None,
        area_id: str = None,
        is_active: bool = True,
    ) -> User:
        user = User(
            email=email or f"{role.value.lower()}-{new_id()[:8]}@museo.co",
            name=name or f"{role.value.title()} Prueba",
            role=role.value,
            area_id=area_id,
            is_active=is_active,
            password_hash=PASSWORD_HASH,
        )
        session.add(user)
        await session.commit()
        return user

    return _make


@pytest_asyncio.fixture
async def area(session: AsyncSession) -> Area:
    area = Area(name="Curaduría")
    session.add(area)
    await session.commit()
    return area


@pytest_asyncio.fixture
async def project(session: AsyncSession) -> Project:
    project = Project(name="Exposición Fernando Botero 2024", code="P-BOTERO-2024")
    session.add(project)
    await session.commit()
    return project


@pytest_asyncio.fixture
async def supplier(session: AsyncSession) -> Supplier:
    supplier = Supplier(name="Papelería El Cid", tax_id="900123456-7", contact_email="ventas@elcid.com")
    session.add(supplier)
    await session.commit()
    return supplier


@pytest_asyncio.fixture
async def admin(make_user, area) -> User:
    return await make_user(Role.admin, email="admin@museo.co", name="Ana Admin", area_id=area.id)


@pytest_asyncio.fixture
async def director(make_user, area) -> User:
    return await make_user(Role.director, email="director@museo.co", name="Diego Director", area_id=area.id)


@pytest_asyncio.fixture
async def leader(make_user, area) -> User:
    return await make_user(Role.leader, email="lider@museo.co", name="Laura Líder", area_id=area.id)


@pytest_asyncio.fixture
async def coordinator(make_user, area) -> User:
    return await make_user(Role.coordinator, email="coord@museo.co", name="Carlos Coordinador", area_id=area.id)


@pytest_asyncio.fixture
async def requester(make_user, area) -> User:
    return await make_user(Role.user, email="usuario@museo.co", name="Uriel Usuario", area_id=area.id)


@pytest.fixture
def make_budget(session: AsyncSession, project: Project, area: Area, director: User):
    """Factory persisting a budget of the active year, approved unless told otherwise."""

    async def _make(
        amount: float = 10_000_000,
        available: float = None,
        status: BudgetStatus = BudgetStatus.approved,
        manager: User = None,
        code: str = None,
        is_blocked: bool = False,
    ) -> Budget:
        budget = Budget(
            code=code or f"BUD-{ACTIVE_YEAR}-{new_id()[:4].upper()}",
            title="Montaje de sala",
            amount=amount,
            available=amount if available is None else available,
            year=ACTIVE_YEAR,
            status=status.value,
            is_blocked=is_blocked,
            project_id=project.id,
            area_id=area.id,
            manager_id=manager.id if manager else None,
            created_by_id=director.id,
        )
        session.add(budget)
        await session.commit()
        return budget

    return _make


class FakeSMTP:
    """In-memory stand-in for ``smtplib.SMTP``; every connection is kept on ``connections``."""

    connections: list = []

    def __init__(self, host, port, timeout=None, context=None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.implicit_tls = context is not None
        self.started_tls = False
        self.credentials = None
        self.messages = []
        self.closed = False
        self.connections.append(self)

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.closed = True

    def ehlo(self):
        return 250, b"ok"

    def starttls(self, context=None):
        self.started_tls = True

    def login(self, username, password):
        self.credentials = (username, password)

    def send_message(self, message):
        self.messages.append(message)

    def close(self):
        self.closed = True


@pytest.fixture
def smtp(monkeypatch):
    """Enable e-mail against :class:`FakeSMTP` and return the list of connections opened."""
    connections: list = []
    monkeypatch.setattr(FakeSMTP, "connections", connections)
    monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)
    monkeypatch.setattr(smtplib, "SMTP_SSL", FakeSMTP)
    monkeypatch.setattr(settings, "smtp_host", "smtp.museo.co")
    return connections