"""Shared test fixtures — async DB, HTTP client, seed data.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Settings are read at import time; point them at test values first
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOG_LEVEL", "warning")

from datetime import date, timedelta
from decimal import Decimal
from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from hrms.client.api import ApiClient
from hrms.client.session import SessionContext, SessionUser
from hrms.database import Base, get_db
from hrms.main import create_app

# Import ALL model modules so every table is registered on Base.metadata
import hrms.attendance.models  # noqa: F401
import hrms.common.audit  # noqa: F401
import hrms.core_hr.models  # noqa: F401
import hrms.leave.models  # noqa: F401
import hrms.payroll.models  # noqa: F401


# ── Test database (SQLite in-memory) ────────────────────────────────

TEST_DATABASE_URL = "sqlite+aiosqlite://"

engine = create_async_engine(
    TEST_DATABASE_URL,
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestSessionFactory = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False,
)


@pytest.fixture(autouse=True)
async def _setup_db():
    """Create all tables before each test, drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture(autouse=True)
def _reset_rate_limiter():
    """Reset rate limiter storage between tests to prevent cross-test interference."""
    from hrms.common.rate_limit import limiter

    limiter.reset()
    yield


async def _override_get_db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependency overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client wired to the test app."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
async def api(app) -> AsyncGenerator[ApiClient, None]:
    """The package's own ApiClient, routed into the test app."""
    async with ApiClient("http://test/api", transport=ASGITransport(app=app)) as api_client:
        yield api_client


# ── Database session (for direct service calls in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


# ── Dates ───────────────────────────────────────────────────────────

@pytest.fixture
def next_monday() -> date:
    """A Monday at least a week away, so leave never starts in the past."""
    today = date.today()
    return today + timedelta(days=7 + (7 - today.weekday()) % 7)


# ── Seed data ───────────────────────────────────────────────────────

@pytest.fixture
def make_employee(db):
    """Factory: insert an employee and return the ORM row."""
    from hrms.core_hr.models import Employee

    counter = {"n": 0}

    async def _make(**overrides) -> Employee:
        counter["n"] += 1
        data = dict(
            first_name="Test",
            last_name=f"User{counter['n']}",
            email=f"test.user{counter['n']}@example.com",
            hire_date=date(2022, 3, 1),
            position="Engineer",
            salary=Decimal("60000.00"),
        )
        data.update(overrides)
        employee = Employee(**data)
        db.add(employee)
        await db.commit()
        return employee

    return _make


@pytest.fixture
async def employee(make_employee):
    return await make_employee(first_name="Asha", last_name="Rao", email="asha.rao@example.com")


@pytest.fixture
async def manager(make_employee):
    return await make_employee(
        first_name="Maya", last_name="Iyer", email="maya.iyer@example.com", position="Manager",
    )


@pytest.fixture
def session_file(tmp_path):
    return tmp_path / "session.json"


@pytest.fixture
def manager_session(manager, session_file) -> SessionContext:
    """A session signed in as the manager (not persisted)."""
    ctx = SessionContext(session_file)
    ctx.sign_in(
        SessionUser(id="user-1", username="maya", employee_id=manager.id, role="manager"),
        persist=False,
    )
    return ctx
