"""Calendar Pydantic v2 schemas — holiday records and holiday statistics."""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict


class HolidayRecord(BaseModel):
    """A global holiday. Recurring records match every year on month/day."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    name: str
    date: date
    is_recurring: bool = False
    description: Optional[str] = None

    def occurrence_in(self, year: int) -> Optional[date]:
        """Date this holiday falls on in ``year``, or None if it does not.

        Recurring 29 February only occurs in leap years.
        """
        if not self.is_recurring:
            return self.date if self.date.year == year else None
        try:
            return self.date.replace(year=year)
        except ValueError:
            return None


class HolidayStats(BaseModel):
    """Counters shown on the holiday admin dashboard."""

    total: int = 0
    this_month: int = 0
    recurring: int = 0
    upcoming: int = 0


class HolidayListResponse(BaseModel):
    """Holidays matching a filter, with dashboard counters."""

    data: list[HolidayRecord]
    stats: HolidayStats
