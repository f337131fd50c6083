"""Pytest fixtures for payroll tests."""

from __future__ import annotations

from collections.abc import AsyncGenerator, Callable
from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from habitat_payroll.api.app import create_app
from habitat_payroll.api.dependencies import get_db_session, get_payroll_policy
from habitat_payroll.calculators.policy import PayrollPolicy
from habitat_payroll.calculators.types import (
    AttendanceRecord,
    LeaveRecord,
    LeaveType,
    PayModel,
    PayrollPeriod,
    Worker,
    WorkerClass,
)
from habitat_payroll.models import Base

# In-memory SQLite shared across sessions through a single static connection
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

MARCH_2026 = PayrollPeriod(start=date(2026, 3, 1), end=date(2026, 3, 31))


@pytest_asyncio.fixture
async def engine():
    """Create test database engine."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, backed by the test database."""
    app = create_app()

    async def override_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db_session] = override_session
    app.dependency_overrides[get_payroll_policy] = lambda: PayrollPolicy()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def period() -> PayrollPeriod:
    return MARCH_2026


@pytest.fixture
def make_worker() -> Callable[..., Worker]:
    """Factory for workers; defaults to an hourly FOREIGN worker at $10/hr."""

    def _make(**overrides) -> Worker:
        fields = {
            "id": str(uuid4()),
            "name": "Worker",
            "pay_model": PayModel.HOURLY,
            "worker_class": WorkerClass.FOREIGN,
            "salary": Decimal("10"),
        }
        fields.update(overrides)
        return Worker(**fields)

    return _make


@pytest.fixture
def make_attendance() -> Callable[..., AttendanceRecord]:
    """Factory for attendance logs."""

    def _make(worker_id: str, work_date: date, hours: str = "0", ot: str = "0", **extra):
        record_id = extra.pop("id", str(uuid4()))
        return AttendanceRecord(
            id=record_id,
            worker_id=worker_id,
            work_date=work_date,
            hours_worked=Decimal(hours),
            overtime_hours=Decimal(ot),
            **extra,
        )

    return _make


@pytest.fixture
def make_leave() -> Callable[..., LeaveRecord]:
    """Factory for leave records."""

    def _make(
        worker_id: str,
        start: date,
        end: date | None = None,
        leave_type: LeaveType = LeaveType.ANNUAL,
        days: str | None = None,
        **extra,
    ) -> LeaveRecord:
        end = end or start
        total = Decimal(days) if days is not None else Decimal((end - start).days + 1)
        record_id = extra.pop("id", str(uuid4()))
        return LeaveRecord(
            id=record_id,
            worker_id=worker_id,
            start_date=start,
            end_date=end,
            leave_type=leave_type,
            total_days=total,
            **extra,
        )

    return _make
