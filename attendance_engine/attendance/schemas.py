"""Attendance Pydantic v2 schemas — raw clock events and aggregation anomalies."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from attendance_engine.common.constants import AnomalyKind, ClockType


class ClockEvent(BaseModel):
    """One clock-in or clock-out. ``created_at`` on the wire."""

    model_config = ConfigDict(from_attributes=True, frozen=True, populate_by_name=True)

    id: int
    user_id: int
    clock_type: ClockType
    timestamp: datetime = Field(validation_alias=AliasChoices("timestamp", "created_at"))
    location: Optional[str] = None
    method: Optional[str] = None


class AggregationAnomaly(BaseModel):
    """A day whose clock events could not be paired; reported, never raised."""

    date: date
    kind: AnomalyKind
    detail: str
