"""Shared test fixtures — async DB, client, factories, in-memory report source.

Uses SQLite + aiosqlite for fast isolated tests without PostgreSQL.
"""

from __future__ import annotations

import os

# Keep SQL echo off before any other import touches pydantic-settings
os.environ.setdefault("ENVIRONMENT", "test")

from datetime import date, datetime, time, timezone
from typing import AsyncGenerator, Optional

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from attendance_engine.attendance.schemas import ClockEvent
from attendance_engine.calendar.schemas import HolidayRecord
from attendance_engine.common.constants import (
    ClockType,
    LeaveStatus,
    LeaveType,
    Weekday,
)
from attendance_engine.database import Base, get_db, get_session_factory
from attendance_engine.leave.schemas import LeaveQuota, LeaveRecord
from attendance_engine.main import create_app
from attendance_engine.schedules.schemas import TimeBlock, WeeklyTemplate

# Import ALL model modules so every table is registered on Base.metadata
import attendance_engine.attendance.models  # noqa: F401
import attendance_engine.calendar.models  # noqa: F401
import attendance_engine.leave.models  # noqa: F401
import attendance_engine.schedules.models  # noqa: F401


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
    from attendance_engine.common.rate_limit import limiter

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


def _override_get_session_factory() -> async_sessionmaker[AsyncSession]:
    return TestSessionFactory


# ── FastAPI test client ─────────────────────────────────────────────

@pytest.fixture
async def app():
    """Create a fresh app instance with DB dependencies overridden."""
    application = create_app()
    application.dependency_overrides[get_db] = _override_get_db
    application.dependency_overrides[get_session_factory] = _override_get_session_factory
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


# ── Database session (for direct DB operations in tests) ────────────

@pytest.fixture
async def db() -> AsyncGenerator[AsyncSession, None]:
    async with TestSessionFactory() as session:
        yield session
        await session.commit()


@pytest.fixture
def session_factory() -> async_sessionmaker[AsyncSession]:
    """The test session factory, for code that opens its own sessions."""
    return TestSessionFactory


# ── Model factories ─────────────────────────────────────────────────

def _make_holiday(
    *,
    name: str = "Independence Day",
    day: date = date(2024, 8, 17),
    is_recurring: bool = False,
    description: Optional[str] = None,
) -> dict:
    return dict(
        name=name,
        date=day,
        is_recurring=is_recurring,
        description=description,
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )


def _make_leave(
    *,
    user_id: int = 1,
    leave_type: LeaveType = LeaveType.personal_leave,
    start_date: date = date(2024, 1, 10),
    end_date: date = date(2024, 1, 10),
    status: LeaveStatus = LeaveStatus.approved,
    reason: str = "Family matters",
) -> dict:
    return dict(
        user_id=user_id,
        type=leave_type,
        reason=reason,
        start_date=start_date,
        end_date=end_date,
        status=status,
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )


def _make_clock_event(
    *,
    user_id: int = 1,
    clock_type: ClockType = ClockType.clock_in,
    created_at: datetime = datetime(2024, 1, 8, 9, 0),
    location: Optional[str] = "Jakarta HQ",
    method: Optional[str] = "qr",
) -> dict:
    return dict(
        user_id=user_id,
        clock_type=clock_type,
        created_at=created_at,
        location=location,
        method=method,
    )


# ── In-memory builders ──────────────────────────────────────────────

def office_template(
    user_id: int = 1,
    *,
    days: tuple[Weekday, ...] = (
        Weekday.monday,
        Weekday.tuesday,
        Weekday.wednesday,
        Weekday.thursday,
        Weekday.friday,
    ),
    start: time = time(9, 0),
    end: time = time(17, 0),
) -> WeeklyTemplate:
    """09:00–17:00 on ``days``, off otherwise."""
    block = TimeBlock(start=start, end=end)
    return WeeklyTemplate(user_id=user_id, days={d: block for d in days})


def holiday(
    holiday_id: int,
    day: date,
    *,
    name: str = "Holiday",
    is_recurring: bool = False,
) -> HolidayRecord:
    return HolidayRecord(id=holiday_id, name=name, date=day, is_recurring=is_recurring)


def leave(
    leave_id: int,
    start: date,
    end: date,
    *,
    user_id: int = 1,
    leave_type: LeaveType = LeaveType.personal_leave,
    status: LeaveStatus = LeaveStatus.approved,
) -> LeaveRecord:
    return LeaveRecord(
        id=leave_id,
        user_id=user_id,
        type=leave_type,
        start_date=start,
        end_date=end,
        status=status,
    )


def clock(
    event_id: int,
    clock_type: ClockType,
    stamp: datetime,
    *,
    user_id: int = 1,
) -> ClockEvent:
    return ClockEvent(id=event_id, user_id=user_id, clock_type=clock_type, timestamp=stamp)


class InMemoryReportSource:
    """ReportDataSource backed by plain lists.

    ``fail_on`` names a method that raises instead of answering; ``calls``
    records which reads were started.
    """

    def __init__(
        self,
        *,
        template: Optional[WeeklyTemplate] = None,
        holidays: Optional[list[HolidayRecord]] = None,
        leaves: Optional[list[LeaveRecord]] = None,
        clock_events: Optional[list[ClockEvent]] = None,
        quota: Optional[LeaveQuota] = None,
        fail_on: Optional[str] = None,
    ) -> None:
        self.template = template
        self.holidays = holidays or []
        self.leaves = leaves or []
        self.clock_events = clock_events or []
        self.quota = quota
        self.fail_on = fail_on
        self.calls: list[str] = []

    def _enter(self, name: str) -> None:
        self.calls.append(name)
        if self.fail_on == name:
            raise RuntimeError(f"{name} unavailable")

    async def get_template(self, user_id: int) -> WeeklyTemplate:
        self._enter("get_template")
        return self.template or WeeklyTemplate(user_id=user_id)

    async def list_holidays(self, start: date, end: date) -> list[HolidayRecord]:
        self._enter("list_holidays")
        return list(self.holidays)

    async def list_leaves(self, user_id: int, start: date, end: date) -> list[LeaveRecord]:
        self._enter("list_leaves")
        return [lv for lv in self.leaves if lv.user_id == user_id]

    async def list_clock_events(
        self, user_id: int, start: date, end: date,
    ) -> list[ClockEvent]:
        self._enter("list_clock_events")
        return list(self.clock_events)

    async def get_leave_quota(self, user_id: int, year: int) -> LeaveQuota:
        self._enter("get_leave_quota")
        return self.quota or LeaveQuota(total=0, used=0, remaining=0, year=year)
