"""Calendar service layer — weekday classification and holiday lookup.

Business logic:
  - Saturday/Sunday are weekend, every other day is a weekday
  - Holidays match by exact date, or by month/day when recurring
  - Holiday lookups for a date range go through a (month, day) / date index
  - Holiday listing and dashboard counters for the admin views
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Sequence
from datetime import date, timedelta
from typing import Optional

from sqlalchemy import and_, extract, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from attendance_engine.calendar.models import Holiday
from attendance_engine.calendar.schemas import HolidayRecord, HolidayStats
from attendance_engine.common.constants import DayKind
from attendance_engine.common.exceptions import ValidationException


# ── Pure helpers ────────────────────────────────────────────────────


def classify_weekday(value: date) -> DayKind:
    """Saturday/Sunday → weekend; else weekday."""
    return DayKind.weekend if value.weekday() >= 5 else DayKind.weekday


def holiday_matches(holiday: HolidayRecord, value: date) -> bool:
    if holiday.is_recurring:
        return (holiday.date.month, holiday.date.day) == (value.month, value.day)
    return holiday.date == value


def find_holiday(
    value: date,
    holidays: Iterable[HolidayRecord],
) -> Optional[HolidayRecord]:
    """First holiday in list order that falls on ``value``."""
    for holiday in holidays:
        if holiday_matches(holiday, value):
            return holiday
    return None


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Every date from ``start`` to ``end`` inclusive."""
    if start > end:
        raise ValidationException(
            {"date_range": ["start_date must be before or equal to end_date."]}
        )
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def week_bounds(ref: date) -> tuple[date, date]:
    """Monday and Sunday of the week containing ``ref``."""
    monday = ref - timedelta(days=ref.weekday())
    return monday, monday + timedelta(days=6)


def holiday_stats(holidays: Sequence[HolidayRecord], today: date) -> HolidayStats:
    """Dashboard counters, evaluated against each holiday's occurrence this year."""
    stats = HolidayStats(total=len(holidays))
    for holiday in holidays:
        if holiday.is_recurring:
            stats.recurring += 1
        occurrence = holiday.occurrence_in(today.year)
        if occurrence is None:
            continue
        if occurrence.month == today.month:
            stats.this_month += 1
        if occurrence >= today:
            stats.upcoming += 1
    return stats


class HolidayIndex:
    """Constant-time holiday lookup for range resolution.

    Gives the same answer as ``find_holiday`` over the same list: when
    several records fall on one date the earliest in list order wins.
    """

    def __init__(self, holidays: Iterable[HolidayRecord]) -> None:
        self._exact: dict[date, tuple[int, HolidayRecord]] = {}
        self._recurring: dict[tuple[int, int], tuple[int, HolidayRecord]] = {}
        for position, holiday in enumerate(holidays):
            if holiday.is_recurring:
                key = (holiday.date.month, holiday.date.day)
                self._recurring.setdefault(key, (position, holiday))
            else:
                self._exact.setdefault(holiday.date, (position, holiday))

    def __len__(self) -> int:
        return len(self._exact) + len(self._recurring)

    def lookup(self, value: date) -> Optional[HolidayRecord]:
        candidates = [
            hit
            for hit in (
                self._exact.get(value),
                self._recurring.get((value.month, value.day)),
            )
            if hit is not None
        ]
        if not candidates:
            return None
        return min(candidates, key=lambda hit: hit[0])[1]


# ═════════════════════════════════════════════════════════════════════
# HolidayRepository
# ═════════════════════════════════════════════════════════════════════


class HolidayRepository:
    """Async reads of the global holiday list."""

    @staticmethod
    async def list_holidays(
        db: AsyncSession,
        *,
        year: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
        is_recurring: Optional[bool] = None,
    ) -> list[HolidayRecord]:
        """List holidays, ordered by date then id.

        Recurring holidays are kept regardless of their stored year; range
        and year filters only narrow them by month/day afterwards.
        """

        query = select(Holiday).order_by(Holiday.date, Holiday.id)

        if is_recurring is not None:
            query = query.where(Holiday.is_recurring.is_(is_recurring))

        exact_filters = []
        if year is not None:
            exact_filters.append(extract("year", Holiday.date) == year)
        if start_date is not None:
            exact_filters.append(Holiday.date >= start_date)
        if end_date is not None:
            exact_filters.append(Holiday.date <= end_date)
        if exact_filters:
            query = query.where(
                or_(Holiday.is_recurring.is_(True), and_(*exact_filters))
            )

        result = await db.execute(query)
        records = [HolidayRecord.model_validate(h) for h in result.scalars().all()]

        # An open-ended range always contains some occurrence of a recurring day
        if start_date is None or end_date is None:
            return records

        years = range(start_date.year, end_date.year + 1)
        kept: list[HolidayRecord] = []
        for record in records:
            if not record.is_recurring or any(
                occurrence is not None and start_date <= occurrence <= end_date
                for occurrence in (record.occurrence_in(y) for y in years)
            ):
                kept.append(record)
        return kept
