"""Calendar tests — weekday classification, holiday lookup, repository filters."""

from __future__ import annotations

from datetime import date

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from attendance_engine.calendar.models import Holiday
from attendance_engine.calendar.service import (
    HolidayIndex,
    HolidayRepository,
    classify_weekday,
    find_holiday,
    holiday_stats,
    iter_dates,
    week_bounds,
)
from attendance_engine.common.constants import DayKind, Weekday
from attendance_engine.common.exceptions import ValidationException
from tests.conftest import _make_holiday, holiday


async def _seed_holiday(db: AsyncSession, **kwargs) -> Holiday:
    row = Holiday(**_make_holiday(**kwargs))
    db.add(row)
    await db.flush()
    return row


# ═════════════════════════════════════════════════════════════════════
# Pure helpers
# ═════════════════════════════════════════════════════════════════════


class TestClassifyWeekday:

    @pytest.mark.parametrize(
        "day, expected",
        [
            (date(2024, 1, 8), DayKind.weekday),   # Monday
            (date(2024, 1, 12), DayKind.weekday),  # Friday
            (date(2024, 1, 13), DayKind.weekend),  # Saturday
            (date(2024, 1, 14), DayKind.weekend),  # Sunday
        ],
    )
    def test_saturday_and_sunday_are_weekend(self, day, expected):
        assert classify_weekday(day) == expected

    def test_weekday_from_date(self):
        assert Weekday.from_date(date(2024, 1, 8)) == Weekday.monday
        assert Weekday.from_date(date(2024, 1, 14)) == Weekday.sunday
        assert Weekday.sunday.is_weekend
        assert not Weekday.friday.is_weekend


class TestFindHoliday:

    def test_exact_date_matches_only_its_year(self):
        h = holiday(1, date(2024, 8, 17))
        assert find_holiday(date(2024, 8, 17), [h]) == h
        assert find_holiday(date(2025, 8, 17), [h]) is None

    def test_recurring_matches_every_year(self):
        h = holiday(1, date(2020, 12, 25), is_recurring=True)
        assert find_holiday(date(2024, 12, 25), [h]) == h
        assert find_holiday(date(2031, 12, 25), [h]) == h
        assert find_holiday(date(2024, 12, 24), [h]) is None

    def test_first_listed_wins(self):
        first = holiday(1, date(2024, 1, 1), name="New Year", is_recurring=True)
        second = holiday(2, date(2024, 1, 1), name="Company Day")
        assert find_holiday(date(2024, 1, 1), [first, second]) == first
        assert find_holiday(date(2024, 1, 1), [second, first]) == second

    def test_recurring_leap_day_skips_common_years(self):
        h = holiday(1, date(2020, 2, 29), is_recurring=True)
        assert find_holiday(date(2024, 2, 29), [h]) == h
        assert find_holiday(date(2023, 2, 28), [h]) is None
        assert find_holiday(date(2023, 3, 1), [h]) is None

    def test_empty_list(self):
        assert find_holiday(date(2024, 1, 1), []) is None


class TestHolidayIndex:

    def test_agrees_with_linear_scan(self):
        holidays = [
            holiday(1, date(2024, 5, 1), name="Labour Day", is_recurring=True),
            holiday(2, date(2024, 5, 1), name="Office Closure"),
            holiday(3, date(2024, 5, 9)),
            holiday(4, date(2019, 5, 9), is_recurring=True),
        ]
        index = HolidayIndex(holidays)
        for d in iter_dates(date(2024, 4, 25), date(2025, 5, 15)):
            assert index.lookup(d) == find_holiday(d, holidays)

    def test_exact_listed_before_recurring_wins(self):
        exact = holiday(1, date(2024, 8, 17), name="Exact")
        recurring = holiday(2, date(2000, 8, 17), name="Recurring", is_recurring=True)
        index = HolidayIndex([exact, recurring])
        assert index.lookup(date(2024, 8, 17)) == exact
        assert index.lookup(date(2025, 8, 17)) == recurring
        assert len(index) == 2


class TestDateHelpers:

    def test_iter_dates_inclusive(self):
        days = list(iter_dates(date(2024, 2, 27), date(2024, 3, 1)))
        assert days == [
            date(2024, 2, 27),
            date(2024, 2, 28),
            date(2024, 2, 29),
            date(2024, 3, 1),
        ]

    def test_iter_dates_single_day(self):
        assert list(iter_dates(date(2024, 1, 1), date(2024, 1, 1))) == [date(2024, 1, 1)]

    def test_iter_dates_inverted_range_rejected(self):
        with pytest.raises(ValidationException) as exc_info:
            list(iter_dates(date(2024, 1, 2), date(2024, 1, 1)))
        assert "date_range" in exc_info.value.errors

    def test_week_bounds(self):
        assert week_bounds(date(2024, 1, 10)) == (date(2024, 1, 8), date(2024, 1, 14))
        assert week_bounds(date(2024, 1, 8)) == (date(2024, 1, 8), date(2024, 1, 14))
        assert week_bounds(date(2024, 1, 14)) == (date(2024, 1, 8), date(2024, 1, 14))


class TestHolidayStats:

    def test_counts(self):
        holidays = [
            holiday(1, date(2024, 3, 11)),                      # this month, past
            holiday(2, date(2024, 3, 29)),                      # this month, upcoming
            holiday(3, date(2020, 12, 25), is_recurring=True),  # upcoming this year
            holiday(4, date(2023, 3, 20)),                      # other year
        ]
        stats = holiday_stats(holidays, date(2024, 3, 15))
        assert stats.total == 4
        assert stats.this_month == 2
        assert stats.recurring == 1
        assert stats.upcoming == 2


# ═════════════════════════════════════════════════════════════════════
# HolidayRepository
# ═════════════════════════════════════════════════════════════════════


class TestHolidayRepository:

    async def test_list_all_ordered_by_date(self, db):
        await _seed_holiday(db, name="B", day=date(2024, 8, 17))
        await _seed_holiday(db, name="A", day=date(2024, 1, 1))
        records = await HolidayRepository.list_holidays(db)
        assert [r.name for r in records] == ["A", "B"]

    async def test_range_keeps_recurring_occurrences_only(self, db):
        await _seed_holiday(db, name="In range", day=date(2024, 8, 17))
        await _seed_holiday(db, name="Out of range", day=date(2024, 10, 1))
        await _seed_holiday(db, name="Christmas", day=date(2019, 12, 25), is_recurring=True)
        await _seed_holiday(db, name="Labour", day=date(2019, 8, 20), is_recurring=True)

        records = await HolidayRepository.list_holidays(
            db, start_date=date(2024, 8, 1), end_date=date(2024, 8, 31),
        )
        assert {r.name for r in records} == {"In range", "Labour"}

    async def test_range_across_year_boundary(self, db):
        await _seed_holiday(db, name="New Year", day=date(2000, 1, 1), is_recurring=True)
        records = await HolidayRepository.list_holidays(
            db, start_date=date(2024, 12, 20), end_date=date(2025, 1, 5),
        )
        assert [r.name for r in records] == ["New Year"]

    async def test_year_filter(self, db):
        await _seed_holiday(db, name="2024", day=date(2024, 5, 1))
        await _seed_holiday(db, name="2025", day=date(2025, 5, 1))
        await _seed_holiday(db, name="Recurring", day=date(2010, 6, 1), is_recurring=True)
        records = await HolidayRepository.list_holidays(db, year=2024)
        assert {r.name for r in records} == {"2024", "Recurring"}

    async def test_recurring_filter(self, db):
        await _seed_holiday(db, name="Once", day=date(2024, 5, 1))
        await _seed_holiday(db, name="Yearly", day=date(2024, 6, 1), is_recurring=True)
        records = await HolidayRepository.list_holidays(db, is_recurring=False)
        assert [r.name for r in records] == ["Once"]


class TestHolidayAPI:

    async def test_list_with_stats(self, client, db):
        await _seed_holiday(db, name="Independence Day", day=date(2024, 8, 17))
        await _seed_holiday(db, name="Christmas", day=date(2000, 12, 25), is_recurring=True)
        await db.commit()

        resp = await client.get("/api/v1/holidays", params={"year": 2024})
        assert resp.status_code == 200
        body = resp.json()
        assert {h["name"] for h in body["data"]} == {"Independence Day", "Christmas"}
        assert body["stats"]["total"] == 2
        assert body["stats"]["recurring"] == 1

    async def test_invalid_query_is_problem_detail(self, client):
        resp = await client.get("/api/v1/holidays", params={"start_date": "not-a-date"})
        assert resp.status_code == 422
        assert resp.headers["content-type"].startswith("application/problem+json")
        assert "start_date" in resp.json()["errors"]
