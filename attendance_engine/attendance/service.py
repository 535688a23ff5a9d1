"""Attendance service layer — pairing clock events with resolved days.

Business logic:
  - Events are grouped by local calendar date (``settings.TIMEZONE``)
  - A day's bracket is its earliest clock-in and latest clock-out
  - Worked minutes need both ends with out after in; otherwise 0
  - Present means a working day with a clock-in
  - Late means present with the clock-in after the scheduled start
  - Unpairable days are reported as anomalies and logged, never raised
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Optional
from zoneinfo import ZoneInfo

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from attendance_engine.attendance.models import ClockEvent as ClockEventRow
from attendance_engine.attendance.schemas import AggregationAnomaly, ClockEvent
from attendance_engine.common.constants import AnomalyKind, ClockType, DayStatus
from attendance_engine.config import settings
from attendance_engine.reports.schemas import DailyAttendanceRecord, ResolvedDay

logger = logging.getLogger(__name__)


def to_local(value: datetime, tz: ZoneInfo) -> datetime:
    """Aware timestamps are converted; naive ones are taken as already local."""
    if value.tzinfo is None:
        return value.replace(tzinfo=tz)
    return value.astimezone(tz)


def local_date(value: datetime, tz: ZoneInfo) -> date:
    return to_local(value, tz).date()


@dataclass
class _DayBracket:
    clock_in: Optional[datetime] = None
    clock_out: Optional[datetime] = None


@dataclass
class AggregationResult:
    records: list[DailyAttendanceRecord] = field(default_factory=list)
    anomalies: list[AggregationAnomaly] = field(default_factory=list)


# ═════════════════════════════════════════════════════════════════════
# AttendanceAggregator
# ═════════════════════════════════════════════════════════════════════


class AttendanceAggregator:
    """Merge resolved days with raw clock events into daily records."""

    def __init__(self, timezone_name: Optional[str] = None) -> None:
        self.tz = ZoneInfo(timezone_name or settings.TIMEZONE)

    def _brackets(
        self,
        user_id: int,
        events: Iterable[ClockEvent],
    ) -> dict[date, _DayBracket]:
        brackets: dict[date, _DayBracket] = defaultdict(_DayBracket)
        for event in events:
            if event.user_id != user_id:
                continue
            stamp = to_local(event.timestamp, self.tz)
            bracket = brackets[stamp.date()]
            if event.clock_type == ClockType.clock_in:
                if bracket.clock_in is None or stamp < bracket.clock_in:
                    bracket.clock_in = stamp
            elif bracket.clock_out is None or stamp > bracket.clock_out:
                bracket.clock_out = stamp
        return brackets

    @staticmethod
    def _check_bracket(
        day: date,
        bracket: _DayBracket,
    ) -> Optional[AggregationAnomaly]:
        if bracket.clock_out is None:
            return None
        if bracket.clock_in is None:
            return AggregationAnomaly(
                date=day,
                kind=AnomalyKind.orphan_clock_out,
                detail=f"Clock-out at {bracket.clock_out.isoformat()} has no clock-in.",
            )
        if bracket.clock_out <= bracket.clock_in:
            return AggregationAnomaly(
                date=day,
                kind=AnomalyKind.clock_out_before_clock_in,
                detail=(
                    f"Latest clock-out {bracket.clock_out.isoformat()} is not after "
                    f"earliest clock-in {bracket.clock_in.isoformat()}."
                ),
            )
        return None

    def aggregate(
        self,
        user_id: int,
        resolved_days: Sequence[ResolvedDay],
        clock_events: Iterable[ClockEvent],
    ) -> AggregationResult:
        """One DailyAttendanceRecord per resolved day, in the same order.

        Events on dates outside ``resolved_days`` are ignored.
        """

        brackets = self._brackets(user_id, clock_events)
        result = AggregationResult()

        for day in resolved_days:
            bracket = brackets.get(day.date, _DayBracket())

            anomaly = self._check_bracket(day.date, bracket)
            if anomaly is not None:
                logger.warning(
                    "Attendance anomaly for user %s on %s (%s): %s",
                    user_id,
                    day.date,
                    anomaly.kind.value,
                    anomaly.detail,
                )
                result.anomalies.append(anomaly)

            actual_minutes = 0
            if anomaly is None and bracket.clock_in and bracket.clock_out:
                actual_minutes = int(
                    (bracket.clock_out - bracket.clock_in).total_seconds() // 60
                )

            is_present = (
                day.status == DayStatus.working and bracket.clock_in is not None
            )
            result.records.append(
                DailyAttendanceRecord(
                    **day.model_dump(),
                    actual_clock_in=bracket.clock_in,
                    actual_clock_out=bracket.clock_out,
                    actual_minutes=actual_minutes,
                    is_present=is_present,
                    is_late=(
                        is_present
                        and day.scheduled_start is not None
                        and bracket.clock_in.time() > day.scheduled_start
                    ),
                )
            )

        return result


# ═════════════════════════════════════════════════════════════════════
# ClockEventRepository
# ═════════════════════════════════════════════════════════════════════


class ClockEventRepository:
    """Async reads of raw clock events."""

    @staticmethod
    async def list_events(
        db: AsyncSession,
        user_id: int,
        from_date: date,
        to_date: date,
        *,
        timezone_name: Optional[str] = None,
    ) -> list[ClockEvent]:
        """Events whose local date lies in the inclusive range, oldest first."""

        tz = ZoneInfo(timezone_name or settings.TIMEZONE)
        window_start = datetime.combine(from_date, time.min, tzinfo=tz)
        window_end = datetime.combine(to_date + timedelta(days=1), time.min, tzinfo=tz)

        result = await db.execute(
            select(ClockEventRow)
            .where(
                ClockEventRow.user_id == user_id,
                ClockEventRow.created_at >= window_start,
                ClockEventRow.created_at < window_end,
            )
            .order_by(ClockEventRow.created_at, ClockEventRow.id)
        )
        return [ClockEvent.model_validate(row) for row in result.scalars().all()]
