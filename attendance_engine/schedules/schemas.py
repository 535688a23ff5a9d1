"""Schedule Pydantic v2 schemas — weekly templates and their wire entries.

Naming conventions:
  - *Request  → request bodies (write)
  - *Response → response bodies (read)
"""

from __future__ import annotations

from datetime import datetime, time
from typing import Any, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from attendance_engine.common.constants import TIME_FORMAT, WEEKDAYS, Weekday


def _minutes_of(value: time) -> int:
    return value.hour * 60 + value.minute


# ═════════════════════════════════════════════════════════════════════
# Template
# ═════════════════════════════════════════════════════════════════════


class TimeBlock(BaseModel):
    """A configured start/end pair for one weekday. Always start < end."""

    model_config = ConfigDict(frozen=True)

    start: time
    end: time

    @property
    def minutes(self) -> int:
        return _minutes_of(self.end) - _minutes_of(self.start)


class ScheduleEntry(BaseModel):
    """One ``{day_of_week, start_time, end_time}`` row; null times mean off."""

    model_config = ConfigDict(from_attributes=True)

    day_of_week: Weekday
    start_time: Optional[time] = None
    end_time: Optional[time] = None

    @field_validator("day_of_week", mode="before")
    @classmethod
    def _lower_day(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def _blank_is_none(cls, value: Any) -> Any:
        # Legacy forms post "" for an unchecked day
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @field_serializer("start_time", "end_time")
    def _hh_mm(self, value: Optional[time]) -> Optional[str]:
        return value.strftime(TIME_FORMAT) if value is not None else None

    @property
    def is_off(self) -> bool:
        return self.start_time is None and self.end_time is None


class WeeklyTemplate(BaseModel):
    """An employee's recurring weekday blocks; always carries all seven days."""

    user_id: int
    days: dict[Weekday, Optional[TimeBlock]] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _fill_week(self) -> WeeklyTemplate:
        for day in WEEKDAYS:
            self.days.setdefault(day, None)
        self.days = {day: self.days[day] for day in WEEKDAYS}
        return self

    def block_for(self, day: Weekday) -> Optional[TimeBlock]:
        return self.days.get(day)

    @property
    def working_days(self) -> list[Weekday]:
        return [day for day, block in self.days.items() if block is not None]

    def to_entries(self) -> list[ScheduleEntry]:
        return [
            ScheduleEntry(
                day_of_week=day,
                start_time=block.start if block else None,
                end_time=block.end if block else None,
            )
            for day, block in self.days.items()
        ]


# ═════════════════════════════════════════════════════════════════════
# Request / response
# ═════════════════════════════════════════════════════════════════════


class ReplaceTemplateRequest(BaseModel):
    """Full replacement set; weekdays not listed become off."""

    schedules: list[ScheduleEntry] = Field(default_factory=list)


class WeeklyTemplateResponse(BaseModel):
    """Seven entries in Monday → Sunday order."""

    user_id: int
    schedule: list[ScheduleEntry]
    updated_at: Optional[datetime] = None

    @classmethod
    def from_template(
        cls,
        template: WeeklyTemplate,
        updated_at: Optional[datetime] = None,
    ) -> WeeklyTemplateResponse:
        return cls(
            user_id=template.user_id,
            schedule=template.to_entries(),
            updated_at=updated_at,
        )
