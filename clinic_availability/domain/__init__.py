"""
Domain layer - Pure business logic without external dependencies.
"""

from .converter import to_editable, to_storage
from .models import (
    BookableWindow,
    ExceptionPeriod,
    FlatSlot,
    ScheduleConfig,
    TimeInterval,
    WeeklyRule,
)
from .resolver import AvailabilityResolver, resolve
from .validator import ValidationError, validate_exceptions, validate_rules, validate_schedule

__all__ = [
    "AvailabilityResolver",
    "BookableWindow",
    "ExceptionPeriod",
    "FlatSlot",
    "ScheduleConfig",
    "TimeInterval",
    "ValidationError",
    "WeeklyRule",
    "resolve",
    "to_editable",
    "to_storage",
    "validate_exceptions",
    "validate_rules",
    "validate_schedule",
]
