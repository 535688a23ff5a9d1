"""Daily schedule resolution — template + holidays + leaves → ResolvedDay.

Rules, first match wins:
  1. a schedule-affecting leave covers the date      → leave
  2. a holiday falls on the date                     → holiday
  3. Saturday/Sunday with no template block          → weekend
  4. a template block exists for the weekday         → working
  5. anything else                                   → off

Leave beats holiday so quota accounting sees the leave. A weekend day with a
configured block is a regular working day.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import date
from typing import Optional

from attendance_engine.calendar.schemas import HolidayRecord
from attendance_engine.calendar.service import (
    HolidayIndex,
    classify_weekday,
    iter_dates,
    week_bounds,
)
from attendance_engine.common.constants import DayKind, DayStatus, Weekday
from attendance_engine.leave.schemas import LeaveRecord
from attendance_engine.leave.service import LeaveIndex
from attendance_engine.reports.schemas import ResolvedDay
from attendance_engine.schedules.schemas import WeeklyTemplate

logger = logging.getLogger(__name__)


def resolve_day(
    value: date,
    template: WeeklyTemplate,
    *,
    holiday: Optional[HolidayRecord] = None,
    leave: Optional[LeaveRecord] = None,
) -> ResolvedDay:
    """Resolve one date from its already-matched holiday and leave."""

    weekday = Weekday.from_date(value)
    block = template.block_for(weekday)

    if leave is not None:
        return ResolvedDay(
            date=value,
            weekday=weekday,
            status=DayStatus.leave,
            holiday=holiday,
            leave_id=leave.id,
            leave_type=leave.type,
        )
    if holiday is not None:
        return ResolvedDay(
            date=value, weekday=weekday, status=DayStatus.holiday, holiday=holiday,
        )
    if block is None and classify_weekday(value) == DayKind.weekend:
        return ResolvedDay(date=value, weekday=weekday, status=DayStatus.weekend)
    if block is not None:
        return ResolvedDay(
            date=value,
            weekday=weekday,
            status=DayStatus.working,
            scheduled_start=block.start,
            scheduled_end=block.end,
            scheduled_minutes=block.minutes,
        )

    logger.debug(
        "Data gap for user %s on %s: no template block, holiday or leave; resolved as off",
        template.user_id,
        value,
    )
    return ResolvedDay(date=value, weekday=weekday, status=DayStatus.off)


def resolve_range(
    user_id: int,
    start: date,
    end: date,
    template: WeeklyTemplate,
    holidays: Sequence[HolidayRecord] = (),
    leaves: Sequence[LeaveRecord] = (),
) -> list[ResolvedDay]:
    """One ResolvedDay per date in ``[start, end]``, ascending."""

    holiday_index = HolidayIndex(holidays)
    leave_index = LeaveIndex(user_id, leaves)

    return [
        resolve_day(
            d,
            template,
            holiday=holiday_index.lookup(d),
            leave=leave_index.lookup(d),
        )
        for d in iter_dates(start, end)
    ]


def resolve_week(
    user_id: int,
    ref: date,
    template: WeeklyTemplate,
    holidays: Sequence[HolidayRecord] = (),
    leaves: Sequence[LeaveRecord] = (),
) -> list[ResolvedDay]:
    """The Monday → Sunday week containing ``ref``."""
    monday, sunday = week_bounds(ref)
    return resolve_range(user_id, monday, sunday, template, holidays, leaves)
