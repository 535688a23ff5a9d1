"""Report Pydantic v2 schemas — resolved days, daily records and summaries.

Naming conventions:
  - ResolvedDay / DailyAttendanceRecord → per-date rows for calendar views
  - *Summary / *Stats                   → aggregates for dashboard cards
  - *Response                           → response bodies (read)
"""

from __future__ import annotations

from datetime import date, datetime, time
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_serializer

from attendance_engine.attendance.schemas import AggregationAnomaly
from attendance_engine.calendar.schemas import HolidayRecord
from attendance_engine.common.constants import (
    TIME_FORMAT,
    DayStatus,
    DifferenceType,
    LeaveType,
    Weekday,
)
from attendance_engine.leave.schemas import LeaveQuotaSummary


# ═════════════════════════════════════════════════════════════════════
# Per-day rows
# ═════════════════════════════════════════════════════════════════════


class ResolvedDay(BaseModel):
    """The single authoritative status and schedule for one employee-date."""

    model_config = ConfigDict(frozen=True)

    date: date
    weekday: Weekday
    status: DayStatus
    scheduled_start: Optional[time] = None
    scheduled_end: Optional[time] = None
    scheduled_minutes: int = 0
    holiday: Optional[HolidayRecord] = None
    leave_id: Optional[int] = None
    leave_type: Optional[LeaveType] = None

    @field_serializer("scheduled_start", "scheduled_end")
    def _hh_mm(self, value: Optional[time]) -> Optional[str]:
        return value.strftime(TIME_FORMAT) if value is not None else None


class DailyAttendanceRecord(ResolvedDay):
    """A resolved day merged with the employee's actual clock bracket."""

    actual_clock_in: Optional[datetime] = None
    actual_clock_out: Optional[datetime] = None
    actual_minutes: int = 0
    is_present: bool = False
    is_late: bool = False


# ═════════════════════════════════════════════════════════════════════
# Summary
# ═════════════════════════════════════════════════════════════════════


class DateRangeSummary(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    total_days: int = 0
    work_days: int = 0


class LeaveBreakdown(BaseModel):
    sick: int = 0
    personal_leave: int = 0


class AttendanceStats(BaseModel):
    present_days: int = 0
    absent_days: int = 0
    late_days: int = 0
    leave_days: int = 0
    leave_breakdown: LeaveBreakdown = LeaveBreakdown()
    holiday_days: int = 0
    weekend_days: int = 0
    off_days: int = 0
    attendance_rate: str = "0%"
    attendance_rate_value: int = 0


class WorkHourDifference(BaseModel):
    minutes: int = 0
    hours_formatted: str = "0h 0m"
    type: DifferenceType = DifferenceType.exact


class WorkHoursSummary(BaseModel):
    scheduled_minutes_total: int = 0
    actual_minutes_total: int = 0
    scheduled_hours: float = 0.0
    scheduled_hours_formatted: str = "0h 0m"
    actual_hours: float = 0.0
    actual_hours_formatted: str = "0h 0m"
    average_hours_per_day: float = 0.0
    difference: WorkHourDifference = WorkHourDifference()


class ReportSummary(BaseModel):
    """Date-range roll-up for the attendance report cards."""

    date_range: DateRangeSummary
    attendance: AttendanceStats
    work_hours: WorkHoursSummary
    leave_quota: LeaveQuotaSummary


# ═════════════════════════════════════════════════════════════════════
# Responses
# ═════════════════════════════════════════════════════════════════════


class AttendanceReportResponse(BaseModel):
    """Full report for one employee and date range."""

    user_id: int
    days: list[DailyAttendanceRecord]
    summary: ReportSummary
    anomalies: list[AggregationAnomaly] = []


class ResolvedWeekResponse(BaseModel):
    """Monday → Sunday schedule around a reference date."""

    user_id: int
    week_start: date
    week_end: date
    days: list[ResolvedDay]
