"""Attendance ORM models: ClockEvent (immutable clock-in/out rows)."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from attendance_engine.common.constants import ClockType
from attendance_engine.database import Base


class ClockEvent(Base):
    __tablename__ = "attendances"

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(sa.Integer, nullable=False, index=True)
    clock_type: Mapped[ClockType] = mapped_column(
        sa.Enum(
            ClockType,
            name="clock_type",
            native_enum=False,
            length=8,
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )
    location: Mapped[Optional[str]] = mapped_column(sa.String(255))
    method: Mapped[Optional[str]] = mapped_column(sa.String(50))
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        index=True,
    )
