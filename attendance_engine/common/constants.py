"""Enums and constants for the attendance schedule engine."""

from __future__ import annotations

import enum
from datetime import date


# ── Calendar ────────────────────────────────────────────────────────

class Weekday(str, enum.Enum):
    monday = "monday"
    tuesday = "tuesday"
    wednesday = "wednesday"
    thursday = "thursday"
    friday = "friday"
    saturday = "saturday"
    sunday = "sunday"

    @classmethod
    def from_date(cls, value: date) -> Weekday:
        """Map ``date.weekday()`` (0=Mon … 6=Sun) to a Weekday."""
        return WEEKDAYS[value.weekday()]

    @property
    def is_weekend(self) -> bool:
        return self in (Weekday.saturday, Weekday.sunday)


WEEKDAYS: tuple[Weekday, ...] = tuple(Weekday)


class DayKind(str, enum.Enum):
    weekday = "weekday"
    weekend = "weekend"


# ── Schedule resolution ─────────────────────────────────────────────

class DayStatus(str, enum.Enum):
    working = "working"
    holiday = "holiday"
    leave = "leave"
    weekend = "weekend"
    off = "off"


# ── Leave ───────────────────────────────────────────────────────────

class LeaveType(str, enum.Enum):
    sick = "sick"
    personal_leave = "personal_leave"


class LeaveStatus(str, enum.Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


# Upstream payloads still carry the Indonesian codes and dashed spelling.
LEAVE_TYPE_ALIASES: dict[str, LeaveType] = {
    "sakit": LeaveType.sick,
    "cuti": LeaveType.personal_leave,
    "personal-leave": LeaveType.personal_leave,
    "personal": LeaveType.personal_leave,
}


# ── Attendance ──────────────────────────────────────────────────────

class ClockType(str, enum.Enum):
    clock_in = "in"
    clock_out = "out"


class AnomalyKind(str, enum.Enum):
    orphan_clock_out = "orphan_clock_out"
    clock_out_before_clock_in = "clock_out_before_clock_in"


class DifferenceType(str, enum.Enum):
    overtime = "overtime"
    undertime = "undertime"
    exact = "exact"


# ── Misc constants ──────────────────────────────────────────────────

TIME_FORMAT = "%H:%M"
MAX_LEAVE_DURATION_DAYS = 90
