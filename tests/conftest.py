"""
conftest.py: shared fixtures for all tests.

Strategy:
- Every test gets a fresh in-memory SQLite database (aiosqlite, StaticPool so
  all sessions share the one connection) built from the model metadata.
- The app's get_db and get_clock dependencies are overridden so HTTP tests hit
  the same database and a pinned clock.
- People are created through make_person(); each gets a User, a linked
  Employee and a ready-made Authorization header.
"""

from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("RUN_MIGRATIONS_ON_STARTUP", "false")

import uuid
from datetime import date, datetime, timedelta, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from hris.core.scope import CallerScope
from hris.core.security import create_access_token, hash_password
from hris.db.models import Base, Employee, User
from hris.db.session import get_db
from hris.main import app
from hris.services.attendance import AttendanceEngine
from hris.services.clock import get_clock
from hris.services.leave import LeaveWorkflowEngine
from hris.services.reporting import ReportingService


class FixedClock:
    """Clock pinned to a settable instant (UTC)."""

    def __init__(self, instant: datetime) -> None:
        self.instant = instant

    def set(self, year: int, month: int, day: int, hour: int = 0, minute: int = 0) -> None:
        self.instant = datetime(year, month, day, hour, minute, tzinfo=timezone.utc)

    def advance(self, **kwargs) -> None:
        self.instant += timedelta(**kwargs)

    def now(self) -> datetime:
        return self.instant

    def today(self) -> date:
        return self.instant.date()


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def engine():
    test_engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def db(session_factory) -> AsyncSession:
    """Raw DB session for engine-level tests and direct DB checks."""
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture
async def file_session_factory(tmp_path) -> async_sessionmaker[AsyncSession]:
    """
    Sessions on a file-backed database, each with its own connection, so two
    sessions can genuinely race for the same row.
    """
    file_engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'race.db'}",
        connect_args={"timeout": 30},
    )
    async with file_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(file_engine, class_=AsyncSession, expire_on_commit=False)
    await file_engine.dispose()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 3, 1, 9, 0, tzinfo=timezone.utc))


# ---------------------------------------------------------------------------
# Engines
# ---------------------------------------------------------------------------


@pytest.fixture
def attendance(db: AsyncSession, clock: FixedClock) -> AttendanceEngine:
    return AttendanceEngine(db, clock)


@pytest.fixture
def leave(db: AsyncSession, clock: FixedClock) -> LeaveWorkflowEngine:
    return LeaveWorkflowEngine(db, clock)


@pytest.fixture
def reporting(
    attendance: AttendanceEngine, leave: LeaveWorkflowEngine, clock: FixedClock
) -> ReportingService:
    return ReportingService(attendance, leave, clock)


# ---------------------------------------------------------------------------
# People
# ---------------------------------------------------------------------------


@pytest.fixture
def make_person(session_factory):
    """
    Factory: create a User (with the given role) and a linked Employee.
    Returns dict with user_id, employee_id, username, password, full_name,
    position, scope, headers.
    Pass linked=False to create a user without an employee record.
    """

    async def _make(role: str = "employee", linked: bool = True, full_name: str | None = None) -> dict:
        uid_short = uuid.uuid4().hex[:8]
        username = f"qa_{role}_{uid_short}"
        password = "QaPass123!"
        name = full_name or f"QA {role.title()} {uid_short}"

        async with session_factory() as session:
            user = User(
                username=username,
                password_hash=hash_password(password),
                role=role,
                full_name=name,
                is_active=True,
            )
            session.add(user)
            await session.flush()
            employee_id = None
            if linked:
                employee = Employee(
                    user_id=user.id,
                    employee_code=f"E-{uid_short}",
                    full_name=name,
                    position=f"{role.title()} staff",
                )
                session.add(employee)
                await session.flush()
                employee_id = employee.id
            await session.commit()
            user_id = user.id

        token = create_access_token({"sub": str(user_id)})
        return {
            "user_id": user_id,
            "employee_id": employee_id,
            "username": username,
            "password": password,
            "full_name": name,
            "position": f"{role.title()} staff" if linked else None,
            "scope": CallerScope(user_id=user_id, role=role, employee_id=employee_id),
            "headers": {"Authorization": f"Bearer {token}"},
        }

    return _make


@pytest_asyncio.fixture
async def employee(make_person) -> dict:
    return await make_person("employee")


@pytest_asyncio.fixture
async def other_employee(make_person) -> dict:
    return await make_person("employee")


@pytest_asyncio.fixture
async def manager(make_person) -> dict:
    return await make_person("manager")


@pytest_asyncio.fixture
async def admin(make_person) -> dict:
    return await make_person("admin")


# ---------------------------------------------------------------------------
# HTTP client
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def client(session_factory, clock: FixedClock) -> AsyncClient:
    """HTTPX async client against the app, wired to the test DB and clock."""

    async def _get_test_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_test_db
    app.dependency_overrides[get_clock] = lambda: clock
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()
