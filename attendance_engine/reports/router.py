"""Reports router — per-employee attendance report over a date range."""

from datetime import date

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from attendance_engine.common.rate_limit import limiter
from attendance_engine.config import settings
from attendance_engine.database import get_session_factory
from attendance_engine.reports.schemas import AttendanceReportResponse
from attendance_engine.reports.service import (
    ReportDataSource,
    ReportService,
    SqlReportDataSource,
)

router = APIRouter(prefix="", tags=["reports"])


def get_report_source(
    session_factory: async_sessionmaker[AsyncSession] = Depends(get_session_factory),
) -> ReportDataSource:
    """FastAPI dependency: the data source reports read from."""
    return SqlReportDataSource(session_factory)


# ── GET /{user_id} ──────────────────────────────────────────────────

@router.get("/{user_id}", response_model=AttendanceReportResponse)
@limiter.limit(settings.RATE_LIMIT_DEFAULT)
async def get_report(
    request: Request,
    user_id: int,
    start_date: date = Query(...),
    end_date: date = Query(...),
    source: ReportDataSource = Depends(get_report_source),
):
    """Daily records, summary and anomalies for ``[start_date, end_date]``."""
    result = await ReportService(source).generate_report(user_id, start_date, end_date)
    return AttendanceReportResponse(
        user_id=result.user_id,
        days=result.days,
        summary=result.summary,
        anomalies=result.anomalies,
    )
