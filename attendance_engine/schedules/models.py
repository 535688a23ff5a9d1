"""Schedule ORM models: WorkingHour (one configured weekday block per row)."""

from __future__ import annotations

from datetime import datetime, time, timezone

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from attendance_engine.common.constants import Weekday
from attendance_engine.database import Base


class WorkingHour(Base):
    __tablename__ = "working_hours"
    __table_args__ = (
        sa.UniqueConstraint("user_id", "day_of_week", name="uq_working_hours_user_day"),
    )

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(sa.Integer, nullable=False, index=True)
    day_of_week: Mapped[Weekday] = mapped_column(
        sa.Enum(Weekday, name="day_of_week", native_enum=False, length=16),
        nullable=False,
    )
    start_time: Mapped[time] = mapped_column(sa.Time, nullable=False)
    end_time: Mapped[time] = mapped_column(sa.Time, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
