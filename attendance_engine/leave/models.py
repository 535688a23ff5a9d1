"""Leave ORM models: LeaveRequest, LeaveQuota."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.orm import Mapped, mapped_column

from attendance_engine.common.constants import LeaveStatus, LeaveType
from attendance_engine.database import Base


class LeaveRequest(Base):
    __tablename__ = "leave_requests"
    __table_args__ = (
        sa.CheckConstraint("start_date <= end_date", name="ck_leave_date_order"),
    )

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(sa.Integer, nullable=False, index=True)
    type: Mapped[LeaveType] = mapped_column(
        sa.Enum(LeaveType, name="leave_type", native_enum=False, length=32),
        nullable=False,
    )
    reason: Mapped[Optional[str]] = mapped_column(sa.Text)
    start_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    end_date: Mapped[date] = mapped_column(sa.Date, nullable=False)
    status: Mapped[LeaveStatus] = mapped_column(
        sa.Enum(LeaveStatus, name="leave_status", native_enum=False, length=16),
        nullable=False,
        default=LeaveStatus.pending,
    )
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )


class LeaveQuota(Base):
    __tablename__ = "leave_quotas"
    __table_args__ = (
        sa.UniqueConstraint("user_id", "year", name="uq_leave_quota_user_year"),
    )

    id: Mapped[int] = mapped_column(sa.Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(sa.Integer, nullable=False, index=True)
    year: Mapped[int] = mapped_column(sa.Integer, nullable=False)
    total_quota: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=12)
    used_quota: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=0)
    remaining_quota: Mapped[int] = mapped_column(sa.Integer, nullable=False, default=12)
    created_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
    updated_at: Mapped[datetime] = mapped_column(
        sa.DateTime(timezone=True), default=lambda: datetime.now(timezone.utc)
    )
