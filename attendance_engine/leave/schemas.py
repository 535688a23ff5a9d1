"""Leave Pydantic v2 schemas — leave records and quota snapshots."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from attendance_engine.common.constants import LEAVE_TYPE_ALIASES, LeaveStatus, LeaveType
from attendance_engine.common.exceptions import ValidationException


class LeaveRecord(BaseModel):
    """A leave request as supplied by the data store. Dates are inclusive."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    user_id: int
    type: LeaveType
    start_date: date
    end_date: date
    status: LeaveStatus = LeaveStatus.pending

    @field_validator("type", mode="before")
    @classmethod
    def _normalise_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            key = value.strip().lower()
            return LEAVE_TYPE_ALIASES.get(key, key)
        return value

    @model_validator(mode="after")
    def _check_order(self) -> LeaveRecord:
        if self.start_date > self.end_date:
            raise ValidationException(
                {"end_date": ["end_date cannot be before start_date."]}
            )
        return self

    @property
    def duration_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    def covers(self, value: date) -> bool:
        return self.start_date <= value <= self.end_date


class LeaveQuota(BaseModel):
    """Yearly personal-leave allotment snapshot."""

    model_config = ConfigDict(frozen=True)

    total: int = Field(0, ge=0)
    used: int = Field(0, ge=0)
    remaining: int = 0
    year: int


class LeaveQuotaSummary(LeaveQuota):
    """Quota snapshot as shown on the dashboard card."""

    percentage_used: int = 0
    percentage_used_formatted: str = "0%"
