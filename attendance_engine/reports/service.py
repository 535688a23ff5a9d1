"""Report service layer — summary roll-up and report orchestration.

Business logic:
  - Inputs (template, holidays, leaves, clock events, quota) are independent
    reads and are fetched concurrently; any failure fails the whole report
  - Resolution → aggregation → summary then runs synchronously in memory
  - Attendance rate is present / work days rounded half up, 0% when there
    are no work days
  - A present day is late when the first clock-in is after the scheduled start
  - Overtime / undertime compares actual with scheduled minutes
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Optional, Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from attendance_engine.attendance.schemas import AggregationAnomaly, ClockEvent
from attendance_engine.attendance.service import AttendanceAggregator, ClockEventRepository
from attendance_engine.calendar.schemas import HolidayRecord
from attendance_engine.calendar.service import HolidayRepository
from attendance_engine.common.constants import DayStatus, DifferenceType, LeaveType
from attendance_engine.common.exceptions import ValidationException
from attendance_engine.common.formatting import format_percentage, percentage
from attendance_engine.config import settings
from attendance_engine.leave.schemas import LeaveQuota, LeaveRecord
from attendance_engine.leave.service import LeaveRepository, summarize_quota
from attendance_engine.reports.resolver import resolve_range
from attendance_engine.reports.schemas import (
    AttendanceStats,
    DailyAttendanceRecord,
    DateRangeSummary,
    LeaveBreakdown,
    ReportSummary,
    WorkHourDifference,
    WorkHoursSummary,
)
from attendance_engine.schedules.schemas import WeeklyTemplate
from attendance_engine.schedules.service import ScheduleTemplateStore

logger = logging.getLogger(__name__)


# ── Formatting ──────────────────────────────────────────────────────


def format_duration(minutes: int) -> str:
    """``"8h 30m"`` for a non-negative minute count."""
    hours, mins = divmod(abs(minutes), 60)
    return f"{hours}h {mins}m"


def format_difference(minutes: int) -> str:
    if minutes > 0:
        return f"+{format_duration(minutes)}"
    if minutes < 0:
        return f"-{format_duration(minutes)}"
    return format_duration(0)


# ═════════════════════════════════════════════════════════════════════
# ReportSummaryBuilder
# ═════════════════════════════════════════════════════════════════════


class ReportSummaryBuilder:
    """Roll daily records up into a ReportSummary."""

    @staticmethod
    def build_summary(
        daily_records: Sequence[DailyAttendanceRecord],
        leave_quota: LeaveQuota,
    ) -> ReportSummary:
        work_days = present_days = late_days = 0
        holiday_days = weekend_days = off_days = 0
        scheduled_total = actual_total = 0
        breakdown = LeaveBreakdown()

        for record in daily_records:
            if record.status == DayStatus.working:
                work_days += 1
                scheduled_total += record.scheduled_minutes
            elif record.status == DayStatus.leave:
                if record.leave_type == LeaveType.sick:
                    breakdown.sick += 1
                else:
                    breakdown.personal_leave += 1
            elif record.status == DayStatus.holiday:
                holiday_days += 1
            elif record.status == DayStatus.weekend:
                weekend_days += 1
            else:
                off_days += 1

            if record.is_present:
                present_days += 1
            if record.is_late:
                late_days += 1
            actual_total += record.actual_minutes

        rate = percentage(present_days, work_days)
        difference = actual_total - scheduled_total
        if difference > 0:
            difference_type = DifferenceType.overtime
        elif difference < 0:
            difference_type = DifferenceType.undertime
        else:
            difference_type = DifferenceType.exact

        return ReportSummary(
            date_range=DateRangeSummary(
                start_date=daily_records[0].date if daily_records else None,
                end_date=daily_records[-1].date if daily_records else None,
                total_days=len(daily_records),
                work_days=work_days,
            ),
            attendance=AttendanceStats(
                present_days=present_days,
                absent_days=max(work_days - present_days, 0),
                late_days=late_days,
                leave_days=breakdown.sick + breakdown.personal_leave,
                leave_breakdown=breakdown,
                holiday_days=holiday_days,
                weekend_days=weekend_days,
                off_days=off_days,
                attendance_rate=format_percentage(rate),
                attendance_rate_value=rate,
            ),
            work_hours=WorkHoursSummary(
                scheduled_minutes_total=scheduled_total,
                actual_minutes_total=actual_total,
                scheduled_hours=round(scheduled_total / 60, 2),
                scheduled_hours_formatted=format_duration(scheduled_total),
                actual_hours=round(actual_total / 60, 2),
                actual_hours_formatted=format_duration(actual_total),
                average_hours_per_day=round(actual_total / max(present_days, 1) / 60, 1),
                difference=WorkHourDifference(
                    minutes=difference,
                    hours_formatted=format_difference(difference),
                    type=difference_type,
                ),
            ),
            leave_quota=summarize_quota(leave_quota),
        )


# ═════════════════════════════════════════════════════════════════════
# Data sources
# ═════════════════════════════════════════════════════════════════════


class ReportDataSource(Protocol):
    """The external reads a report needs; each is independent of the others."""

    async def get_template(self, user_id: int) -> WeeklyTemplate: ...

    async def list_holidays(self, start: date, end: date) -> list[HolidayRecord]: ...

    async def list_leaves(self, user_id: int, start: date, end: date) -> list[LeaveRecord]: ...

    async def list_clock_events(
        self, user_id: int, start: date, end: date,
    ) -> list[ClockEvent]: ...

    async def get_leave_quota(self, user_id: int, year: int) -> LeaveQuota: ...


class SqlReportDataSource:
    """ReportDataSource over the SQL store; one session per read."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self.session_factory = session_factory

    async def get_template(self, user_id: int) -> WeeklyTemplate:
        async with self.session_factory() as db:
            return await ScheduleTemplateStore.get_template(db, user_id)

    async def list_holidays(self, start: date, end: date) -> list[HolidayRecord]:
        async with self.session_factory() as db:
            return await HolidayRepository.list_holidays(
                db, start_date=start, end_date=end,
            )

    async def list_leaves(self, user_id: int, start: date, end: date) -> list[LeaveRecord]:
        async with self.session_factory() as db:
            return await LeaveRepository.list_leaves(db, user_id, start, end)

    async def list_clock_events(
        self, user_id: int, start: date, end: date,
    ) -> list[ClockEvent]:
        async with self.session_factory() as db:
            return await ClockEventRepository.list_events(db, user_id, start, end)

    async def get_leave_quota(self, user_id: int, year: int) -> LeaveQuota:
        async with self.session_factory() as db:
            return await LeaveRepository.get_quota(db, user_id, year)


# ═════════════════════════════════════════════════════════════════════
# ReportService
# ═════════════════════════════════════════════════════════════════════


@dataclass
class ReportInputs:
    template: WeeklyTemplate
    holidays: list[HolidayRecord]
    leaves: list[LeaveRecord]
    clock_events: list[ClockEvent]
    leave_quota: LeaveQuota


@dataclass
class ReportResult:
    user_id: int
    days: list[DailyAttendanceRecord]
    summary: ReportSummary
    anomalies: list[AggregationAnomaly] = field(default_factory=list)


class ReportService:
    """Fetch report inputs, then run resolve → aggregate → summarize."""

    def __init__(
        self,
        source: ReportDataSource,
        *,
        aggregator: Optional[AttendanceAggregator] = None,
        max_range_days: Optional[int] = None,
    ) -> None:
        self.source = source
        self.aggregator = aggregator or AttendanceAggregator()
        self.max_range_days = max_range_days or settings.MAX_REPORT_RANGE_DAYS

    def _validate_date_range(self, start: date, end: date) -> None:
        if start > end:
            raise ValidationException(
                {"date_range": ["start_date must be before or equal to end_date."]}
            )
        if (end - start).days + 1 > self.max_range_days:
            raise ValidationException(
                {"date_range": [f"Date range cannot exceed {self.max_range_days} days."]}
            )

    async def load_inputs(self, user_id: int, start: date, end: date) -> ReportInputs:
        """Run the five reads concurrently. The first failure propagates."""

        template, holidays, leaves, clock_events, leave_quota = await asyncio.gather(
            self.source.get_template(user_id),
            self.source.list_holidays(start, end),
            self.source.list_leaves(user_id, start, end),
            self.source.list_clock_events(user_id, start, end),
            self.source.get_leave_quota(user_id, start.year),
        )
        return ReportInputs(
            template=template,
            holidays=holidays,
            leaves=leaves,
            clock_events=clock_events,
            leave_quota=leave_quota,
        )

    async def generate_report(self, user_id: int, start: date, end: date) -> ReportResult:
        self._validate_date_range(start, end)

        inputs = await self.load_inputs(user_id, start, end)

        resolved = resolve_range(
            user_id, start, end, inputs.template, inputs.holidays, inputs.leaves,
        )
        aggregation = self.aggregator.aggregate(user_id, resolved, inputs.clock_events)
        summary = ReportSummaryBuilder.build_summary(
            aggregation.records, inputs.leave_quota,
        )

        logger.info(
            "Report for user %s %s..%s: %d/%d present, %d anomaly(ies)",
            user_id,
            start,
            end,
            summary.attendance.present_days,
            summary.date_range.work_days,
            len(aggregation.anomalies),
        )
        return ReportResult(
            user_id=user_id,
            days=aggregation.records,
            summary=summary,
            anomalies=aggregation.anomalies,
        )
