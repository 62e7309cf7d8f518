from __future__ import annotations

import uuid
from datetime import date
from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from leavedesk.db import get_session
from leavedesk.main import app
from leavedesk.models import SQLModel
from leavedesk.models.enums import EmployeeRole
from leavedesk.services import leave as leave_service
from leavedesk.services.directory import EmployeeInfo, InMemoryOrgDirectory, set_org_directory
from leavedesk.services.events import (
    InMemoryEventDispatcher,
    LoggingEventDispatcher,
    set_event_dispatcher,
    wait_for_pending_events,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

    from sqlalchemy.ext.asyncio import AsyncEngine

TEST_DATABASE_URL = "sqlite+aiosqlite://"

# Fixed "today" for lifecycle tests: Thursday, 2 January 2025.
TODAY = date(2025, 1, 2)

ENGINEERING = uuid.uuid4()
MARKETING = uuid.uuid4()

ADMIN_ID = uuid.uuid4()
ENG_MANAGER_ID = uuid.uuid4()
MKT_MANAGER_ID = uuid.uuid4()
EMPLOYEE_ID = uuid.uuid4()
COLLEAGUE_ID = uuid.uuid4()
MKT_EMPLOYEE_ID = uuid.uuid4()


def headers(user_id: uuid.UUID, role: EmployeeRole = EmployeeRole.EMPLOYEE) -> dict[str, str]:
    """Dev auth headers for a user."""
    return {"X-User-Id": str(user_id), "X-Role": role.value}


EMPLOYEE_HEADERS = headers(EMPLOYEE_ID)
COLLEAGUE_HEADERS = headers(COLLEAGUE_ID)
ENG_MANAGER_HEADERS = headers(ENG_MANAGER_ID, EmployeeRole.MANAGER)
MKT_MANAGER_HEADERS = headers(MKT_MANAGER_ID, EmployeeRole.MANAGER)
ADMIN_HEADERS = headers(ADMIN_ID, EmployeeRole.ADMIN)


def _employee(
    employee_id: uuid.UUID,
    name: str,
    department_id: uuid.UUID,
    role: EmployeeRole = EmployeeRole.EMPLOYEE,
    manager_id: uuid.UUID | None = None,
) -> EmployeeInfo:
    return EmployeeInfo(
        id=employee_id,
        name=name,
        email=f"{name.lower()}@example.com",
        department_id=department_id,
        manager_id=manager_id,
        role=role,
    )


@pytest.fixture
def directory() -> Iterator[InMemoryOrgDirectory]:
    """Org directory with two departments, their managers, and an admin."""
    svc = InMemoryOrgDirectory()
    svc.seed(_employee(ADMIN_ID, "Ada", ENGINEERING, EmployeeRole.ADMIN))
    svc.seed(_employee(ENG_MANAGER_ID, "Grace", ENGINEERING, EmployeeRole.MANAGER))
    svc.seed(_employee(MKT_MANAGER_ID, "Don", MARKETING, EmployeeRole.MANAGER))
    svc.seed(_employee(EMPLOYEE_ID, "Linus", ENGINEERING, manager_id=ENG_MANAGER_ID))
    svc.seed(_employee(COLLEAGUE_ID, "Ken", ENGINEERING, manager_id=ENG_MANAGER_ID))
    svc.seed(_employee(MKT_EMPLOYEE_ID, "Peggy", MARKETING, manager_id=MKT_MANAGER_ID))
    set_org_directory(svc)
    yield svc
    set_org_directory(InMemoryOrgDirectory())


@pytest.fixture
def dispatcher() -> Iterator[InMemoryEventDispatcher]:
    """Capture published domain events."""
    svc = InMemoryEventDispatcher()
    set_event_dispatcher(svc)
    yield svc
    set_event_dispatcher(LoggingEventDispatcher())


@pytest.fixture
def frozen_today(monkeypatch: pytest.MonkeyPatch) -> date:
    """Pin the lifecycle service's notion of today."""
    monkeypatch.setattr(leave_service, "_today", lambda: TODAY)
    return TODAY


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """Fresh in-memory SQLite database per test."""
    _engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    await _engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory: async_sessionmaker[AsyncSession]) -> AsyncIterator[AsyncSession]:
    """Session for seeding and asserting directly against the database."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(
    session_factory: async_sessionmaker[AsyncSession],
    directory: InMemoryOrgDirectory,
    dispatcher: InMemoryEventDispatcher,
    frozen_today: date,
) -> AsyncIterator[AsyncClient]:
    """Async HTTP client; every request gets its own session."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()
    # Deliveries must finish on this test's event loop.
    await wait_for_pending_events()
