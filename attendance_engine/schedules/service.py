"""Schedule service layer — weekly template read, validation and replacement.

Business logic:
  - A template always exposes all seven weekdays; unconfigured days are off
  - A submitted entry needs both start and end, or neither, and start < end
  - Saving replaces the whole template; omitted weekdays become off
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from attendance_engine.common.constants import Weekday
from attendance_engine.common.exceptions import ValidationException
from attendance_engine.schedules.models import WorkingHour
from attendance_engine.schedules.schemas import ScheduleEntry, TimeBlock, WeeklyTemplate

logger = logging.getLogger(__name__)


def validate_entries(entries: Sequence[ScheduleEntry]) -> dict[Weekday, TimeBlock]:
    """Check a full replacement set and return the configured blocks.

    Raises ValidationException keyed by weekday name, listing every invalid
    day at once. Nothing is corrected silently.
    """

    errors: dict[str, list[str]] = {}
    blocks: dict[Weekday, TimeBlock] = {}
    seen: set[Weekday] = set()

    for entry in entries:
        day = entry.day_of_week
        if day in seen:
            errors.setdefault(day.value, []).append(
                "Day submitted more than once."
            )
            continue
        seen.add(day)

        if entry.is_off:
            continue
        if entry.start_time is None or entry.end_time is None:
            errors.setdefault(day.value, []).append(
                "Both start_time and end_time are required, or neither."
            )
            continue
        if entry.start_time >= entry.end_time:
            errors.setdefault(day.value, []).append(
                "start_time must be before end_time."
            )
            continue
        blocks[day] = TimeBlock(start=entry.start_time, end=entry.end_time)

    if errors:
        raise ValidationException(errors)
    return blocks


# ═════════════════════════════════════════════════════════════════════
# ScheduleTemplateStore
# ═════════════════════════════════════════════════════════════════════


class ScheduleTemplateStore:
    """Async weekly-template persistence on the ``working_hours`` table."""

    @staticmethod
    async def get_template(db: AsyncSession, user_id: int) -> WeeklyTemplate:
        """Current seven-day template; a user with no rows is off every day."""

        result = await db.execute(
            select(WorkingHour).where(WorkingHour.user_id == user_id)
        )
        rows = result.scalars().all()
        return WeeklyTemplate(
            user_id=user_id,
            days={
                row.day_of_week: TimeBlock(start=row.start_time, end=row.end_time)
                for row in rows
            },
        )

    @staticmethod
    async def last_updated(db: AsyncSession, user_id: int) -> Optional[datetime]:
        result = await db.execute(
            select(func.max(WorkingHour.updated_at)).where(
                WorkingHour.user_id == user_id
            )
        )
        return result.scalar()

    @staticmethod
    async def replace_template(
        db: AsyncSession,
        user_id: int,
        entries: Sequence[ScheduleEntry],
    ) -> WeeklyTemplate:
        """Validate, then swap the stored rows for the submitted set."""

        blocks = validate_entries(entries)

        await db.execute(delete(WorkingHour).where(WorkingHour.user_id == user_id))

        now = datetime.now(timezone.utc)
        for day, block in blocks.items():
            db.add(
                WorkingHour(
                    user_id=user_id,
                    day_of_week=day,
                    start_time=block.start,
                    end_time=block.end,
                    created_at=now,
                    updated_at=now,
                )
            )
        await db.flush()

        logger.info(
            "Replaced weekly template for user %s: %d working day(s)",
            user_id,
            len(blocks),
        )
        return WeeklyTemplate(user_id=user_id, days=dict(blocks))
