"""Calendar router — holiday listing with dashboard counters."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from attendance_engine.calendar.schemas import HolidayListResponse
from attendance_engine.calendar.service import HolidayRepository, holiday_stats
from attendance_engine.database import get_db

router = APIRouter(prefix="", tags=["holidays"])


# ── GET / ───────────────────────────────────────────────────────────

@router.get("", response_model=HolidayListResponse)
async def list_holidays(
    year: Optional[int] = Query(None, ge=1900, le=9999),
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    is_recurring: Optional[bool] = Query(None),
    db: AsyncSession = Depends(get_db),
):
    """List holidays, optionally filtered by year, range, or recurrence."""
    holidays = await HolidayRepository.list_holidays(
        db,
        year=year,
        start_date=start_date,
        end_date=end_date,
        is_recurring=is_recurring,
    )
    return HolidayListResponse(
        data=holidays,
        stats=holiday_stats(holidays, date.today()),
    )
