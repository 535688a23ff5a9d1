"""Schedules router — weekly template read/replace and the resolved week view."""

from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from attendance_engine.calendar.service import HolidayRepository, week_bounds
from attendance_engine.database import get_db
from attendance_engine.leave.service import LeaveRepository
from attendance_engine.reports.resolver import resolve_week
from attendance_engine.reports.schemas import ResolvedWeekResponse
from attendance_engine.schedules.schemas import (
    ReplaceTemplateRequest,
    WeeklyTemplateResponse,
)
from attendance_engine.schedules.service import ScheduleTemplateStore

router = APIRouter(prefix="", tags=["schedules"])


# ── GET /{user_id} ──────────────────────────────────────────────────

@router.get("/{user_id}", response_model=WeeklyTemplateResponse)
async def get_schedule(
    user_id: int,
    db: AsyncSession = Depends(get_db),
):
    """Seven-day template; unconfigured days come back with null times."""
    template = await ScheduleTemplateStore.get_template(db, user_id)
    updated_at = await ScheduleTemplateStore.last_updated(db, user_id)
    return WeeklyTemplateResponse.from_template(template, updated_at)


# ── PUT /{user_id} ──────────────────────────────────────────────────

@router.put("/{user_id}", response_model=WeeklyTemplateResponse)
async def replace_schedule(
    user_id: int,
    body: ReplaceTemplateRequest,
    db: AsyncSession = Depends(get_db),
):
    """Replace the whole template. Weekdays left out of the body become off."""
    template = await ScheduleTemplateStore.replace_template(
        db, user_id, body.schedules,
    )
    updated_at = await ScheduleTemplateStore.last_updated(db, user_id)
    return WeeklyTemplateResponse.from_template(template, updated_at)


# ── GET /{user_id}/week ─────────────────────────────────────────────

@router.get("/{user_id}/week", response_model=ResolvedWeekResponse)
async def get_resolved_week(
    user_id: int,
    ref_date: Optional[date] = Query(None, alias="date"),
    db: AsyncSession = Depends(get_db),
):
    """Resolved Monday → Sunday week containing ``date`` (default: today)."""
    ref = ref_date or date.today()
    week_start, week_end = week_bounds(ref)

    template = await ScheduleTemplateStore.get_template(db, user_id)
    holidays = await HolidayRepository.list_holidays(
        db, start_date=week_start, end_date=week_end,
    )
    leaves = await LeaveRepository.list_leaves(db, user_id, week_start, week_end)

    return ResolvedWeekResponse(
        user_id=user_id,
        week_start=week_start,
        week_end=week_end,
        days=resolve_week(user_id, ref, template, holidays, leaves),
    )
