"""Common module — shared enums, errors, formatting, logging and rate limiting."""

from attendance_engine.common.constants import (
    MAX_LEAVE_DURATION_DAYS,
    TIME_FORMAT,
    WEEKDAYS,
    AnomalyKind,
    ClockType,
    DayKind,
    DayStatus,
    DifferenceType,
    LeaveStatus,
    LeaveType,
    Weekday,
)
from attendance_engine.common.exceptions import (
    AppException,
    ValidationError,
    ValidationException,
    register_exception_handlers,
)
from attendance_engine.common.formatting import format_percentage, percentage
from attendance_engine.common.logging_config import configure_logging

__all__ = [
    # Constants / Enums
    "AnomalyKind",
    "ClockType",
    "DayKind",
    "DayStatus",
    "DifferenceType",
    "LeaveStatus",
    "LeaveType",
    "Weekday",
    "WEEKDAYS",
    "TIME_FORMAT",
    "MAX_LEAVE_DURATION_DAYS",
    # Exceptions
    "AppException",
    "ValidationException",
    "ValidationError",
    "register_exception_handlers",
    # Formatting
    "percentage",
    "format_percentage",
    # Logging
    "configure_logging",
]
