"""
Validation of weekly rules and exception periods.

Problems are collected and returned as data, never raised, so callers can
report every issue at once.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

from .models import (
    ANNUAL_PATTERN,
    ExceptionPeriod,
    WeeklyRule,
    get_day_name,
    is_valid_day_of_week,
)

RULES_FIELD = "weeklyAvailability"
EXCEPTIONS_FIELD = "vacations"


@dataclass(frozen=True)
class ValidationError:
    """
    A single field-addressable validation problem.

    ``index`` is the position of the offending rule or period in its list;
    ``slot_indices`` point at intervals within that rule.
    """
    field: str
    index: int
    message: str
    day_of_week: Optional[int] = None
    slot_indices: Tuple[int, ...] = ()

    def __str__(self) -> str:
        address = f"{self.field}[{self.index}]"
        if self.slot_indices:
            address += " slots " + ", ".join(str(i) for i in self.slot_indices)
        return f"{address}: {self.message}"


def validate_rules(rules: Sequence[WeeklyRule], locale: str = "en") -> List[ValidationError]:
    """
    Check weekly rules for well-formed, non-overlapping intervals and
    unique days.

    Args:
        rules: Grouped rules as edited
        locale: Language used for day names in messages

    Returns:
        Every problem found, in rule/slot order. Empty when valid.
    """
    errors: List[ValidationError] = []
    first_seen: Dict[int, int] = {}

    for index, rule in enumerate(rules):
        day = rule.day_of_week
        day_name = get_day_name(day, locale)

        if not is_valid_day_of_week(day):
            errors.append(ValidationError(
                field=RULES_FIELD,
                index=index,
                day_of_week=day,
                message=f"Invalid day of week {day!r} (must be 0-6)",
            ))
        elif day in first_seen:
            errors.append(ValidationError(
                field=RULES_FIELD,
                index=index,
                day_of_week=day,
                message=(
                    f"{day_name} is defined more than once "
                    f"(first defined at position {first_seen[day]})"
                ),
            ))
        else:
            first_seen[day] = index

        for slot_index, interval in enumerate(rule.intervals):
            if interval.start is None or interval.end is None:
                errors.append(ValidationError(
                    field=RULES_FIELD,
                    index=index,
                    day_of_week=day,
                    slot_indices=(slot_index,),
                    message=f"{day_name}: missing start or end time",
                ))
            elif not interval.is_well_formed():
                errors.append(ValidationError(
                    field=RULES_FIELD,
                    index=index,
                    day_of_week=day,
                    slot_indices=(slot_index,),
                    message=f"{day_name}: start time must be before end time ({interval})",
                ))

        errors.extend(_find_overlaps(rule, index, day_name))

    return errors


def _find_overlaps(rule: WeeklyRule, index: int, day_name: str) -> List[ValidationError]:
    """Report each pair of overlapping intervals of one rule."""
    errors: List[ValidationError] = []
    intervals = rule.intervals

    for i in range(len(intervals)):
        for j in range(i + 1, len(intervals)):
            if intervals[i].overlaps(intervals[j]):
                errors.append(ValidationError(
                    field=RULES_FIELD,
                    index=index,
                    day_of_week=rule.day_of_week,
                    slot_indices=(i, j),
                    message=(
                        f"{day_name}: time slots {i} ({intervals[i]}) and "
                        f"{j} ({intervals[j]}) overlap"
                    ),
                ))

    return errors


def validate_exceptions(periods: Sequence[ExceptionPeriod]) -> List[ValidationError]:
    """
    Check exception periods for ordered dates and a supported recurrence.

    Overlapping periods are allowed.
    """
    errors: List[ValidationError] = []

    for index, period in enumerate(periods):
        if period.start_date > period.end_date:
            errors.append(ValidationError(
                field=EXCEPTIONS_FIELD,
                index=index,
                message=(
                    f"End date {period.end_date.isoformat()} must not be before "
                    f"start date {period.start_date.isoformat()}"
                ),
            ))

        pattern = (period.recurrence_pattern or "").strip().lower()
        if period.is_recurring_annually and pattern and pattern != ANNUAL_PATTERN:
            errors.append(ValidationError(
                field=EXCEPTIONS_FIELD,
                index=index,
                message=f"Unsupported recurrence pattern '{period.recurrence_pattern}' (only 'annual')",
            ))

    return errors


def validate_schedule(
    rules: Sequence[WeeklyRule],
    periods: Sequence[ExceptionPeriod],
    locale: str = "en",
) -> List[ValidationError]:
    """Validate a whole schedule: rules first, then exception periods."""
    return validate_rules(rules, locale=locale) + validate_exceptions(periods)
