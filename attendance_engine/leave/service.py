"""Leave service layer — which leaves shape a schedule, durations, quota.

Business logic:
  - Approved leaves override the weekly template; sick leave is
    auto-approved, so it counts unless explicitly rejected
  - Durations are inclusive of both endpoints
  - Working-day counts skip Saturday/Sunday
  - Quota usage is a percentage rounded half up, 0 when there is no allotment
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date, timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from attendance_engine.calendar.service import classify_weekday, iter_dates
from attendance_engine.common.constants import (
    MAX_LEAVE_DURATION_DAYS,
    DayKind,
    LeaveStatus,
    LeaveType,
)
from attendance_engine.common.exceptions import ValidationException
from attendance_engine.common.formatting import format_percentage, percentage
from attendance_engine.leave.models import LeaveQuota as LeaveQuotaRow
from attendance_engine.leave.models import LeaveRequest
from attendance_engine.leave.schemas import LeaveQuota, LeaveQuotaSummary, LeaveRecord


# ── Pure helpers ────────────────────────────────────────────────────


def affects_schedule(leave: LeaveRecord) -> bool:
    if leave.status == LeaveStatus.approved:
        return True
    return leave.type == LeaveType.sick and leave.status != LeaveStatus.rejected


def calculate_duration(start_date: date, end_date: date) -> int:
    """Calendar days from start to end, both included."""
    return abs((end_date - start_date).days) + 1


def calculate_working_days(start_date: date, end_date: date) -> int:
    """Monday–Friday days in the inclusive range; 0 for an inverted range."""
    if start_date > end_date:
        return 0
    return sum(
        1 for d in iter_dates(start_date, end_date)
        if classify_weekday(d) == DayKind.weekday
    )


def validate_leave_range(
    start_date: date,
    end_date: date,
    *,
    min_start_date: Optional[date] = None,
) -> None:
    """Reject a leave request whose dates are out of order, too early or too long."""

    errors: dict[str, list[str]] = {}
    if min_start_date is not None and start_date < min_start_date:
        errors.setdefault("start_date", []).append(
            f"Start date cannot be before {min_start_date.isoformat()}."
        )
    if end_date < start_date:
        errors.setdefault("end_date", []).append(
            "End date cannot be before start date."
        )
    elif calculate_duration(start_date, end_date) > MAX_LEAVE_DURATION_DAYS:
        errors.setdefault("end_date", []).append(
            f"Leave duration cannot exceed {MAX_LEAVE_DURATION_DAYS} days."
        )
    if errors:
        raise ValidationException(errors)


def quota_usage_percentage(used: int, total: int) -> int:
    return percentage(used, total)


def summarize_quota(quota: LeaveQuota) -> LeaveQuotaSummary:
    used_pct = quota_usage_percentage(quota.used, quota.total)
    return LeaveQuotaSummary(
        total=quota.total,
        used=quota.used,
        remaining=quota.remaining,
        year=quota.year,
        percentage_used=used_pct,
        percentage_used_formatted=format_percentage(used_pct),
    )


class LeaveIndex:
    """Date → covering leave for one employee, schedule-affecting leaves only.

    Overlapping leaves keep the one listed first.
    """

    def __init__(self, user_id: int, leaves: Iterable[LeaveRecord]) -> None:
        self.user_id = user_id
        self._by_date: dict[date, LeaveRecord] = {}
        for leave in leaves:
            if leave.user_id != user_id or not affects_schedule(leave):
                continue
            current = leave.start_date
            while current <= leave.end_date:
                self._by_date.setdefault(current, leave)
                current += timedelta(days=1)

    def __len__(self) -> int:
        return len(self._by_date)

    def lookup(self, value: date) -> Optional[LeaveRecord]:
        return self._by_date.get(value)


# ═════════════════════════════════════════════════════════════════════
# LeaveRepository
# ═════════════════════════════════════════════════════════════════════


class LeaveRepository:
    """Async reads of leave requests and quota rows."""

    @staticmethod
    async def list_leaves(
        db: AsyncSession,
        user_id: int,
        from_date: date,
        to_date: date,
        *,
        status_filter: Optional[LeaveStatus] = None,
    ) -> list[LeaveRecord]:
        """Leaves of ``user_id`` overlapping the inclusive range, oldest first."""

        query = (
            select(LeaveRequest)
            .where(
                LeaveRequest.user_id == user_id,
                LeaveRequest.start_date <= to_date,
                LeaveRequest.end_date >= from_date,
            )
            .order_by(LeaveRequest.start_date, LeaveRequest.id)
        )
        if status_filter is not None:
            query = query.where(LeaveRequest.status == status_filter)

        result = await db.execute(query)
        return [LeaveRecord.model_validate(r) for r in result.scalars().all()]

    @staticmethod
    async def get_quota(db: AsyncSession, user_id: int, year: int) -> LeaveQuota:
        """Quota snapshot for the year; an employee with no row has none."""

        result = await db.execute(
            select(LeaveQuotaRow).where(
                LeaveQuotaRow.user_id == user_id,
                LeaveQuotaRow.year == year,
            )
        )
        row = result.scalars().first()
        if row is None:
            return LeaveQuota(total=0, used=0, remaining=0, year=year)
        return LeaveQuota(
            total=row.total_quota,
            used=row.used_quota,
            remaining=row.remaining_quota,
            year=row.year,
        )
