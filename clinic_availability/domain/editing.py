"""
Pure edit operations for weekly rules and exception periods.

Each function takes an immutable collection and returns a new list; the
editing surface owns any mutable staging copy.
"""

from dataclasses import replace
from datetime import time
from typing import List, Optional, Sequence

from .models import ExceptionPeriod, TimeInterval, WeeklyRule, day_sort_key

DEFAULT_INTERVAL = TimeInterval(start=time(9, 0), end=time(17, 0))


def _find_rule(rules: Sequence[WeeklyRule], day_of_week: int) -> int:
    for index, rule in enumerate(rules):
        if rule.day_of_week == day_of_week:
            return index
    raise KeyError(f"No rule for day of week {day_of_week}")


def _replace_rule(rules: Sequence[WeeklyRule], index: int, rule: WeeklyRule) -> List[WeeklyRule]:
    updated = list(rules)
    updated[index] = rule
    return updated


def add_day(
    rules: Sequence[WeeklyRule],
    day_of_week: int,
    interval: TimeInterval = DEFAULT_INTERVAL,
) -> List[WeeklyRule]:
    """
    Add a day with a single starting interval.

    Returns the rules unchanged (as a new list) if the day already exists.
    """
    if any(rule.day_of_week == day_of_week for rule in rules):
        return list(rules)

    updated = list(rules) + [WeeklyRule(day_of_week=day_of_week, intervals=(interval,))]
    return sorted(updated, key=lambda rule: day_sort_key(rule.day_of_week))


def remove_day(rules: Sequence[WeeklyRule], day_of_week: int) -> List[WeeklyRule]:
    """Remove every rule for the given day."""
    return [rule for rule in rules if rule.day_of_week != day_of_week]


def add_interval(
    rules: Sequence[WeeklyRule],
    day_of_week: int,
    interval: TimeInterval = DEFAULT_INTERVAL,
) -> List[WeeklyRule]:
    """Append an interval to an existing day."""
    index = _find_rule(rules, day_of_week)
    rule = rules[index]
    return _replace_rule(rules, index, replace(rule, intervals=rule.intervals + (interval,)))


def remove_interval(
    rules: Sequence[WeeklyRule],
    day_of_week: int,
    slot_index: int,
) -> List[WeeklyRule]:
    """Remove one interval of a day; the day stays, possibly empty."""
    index = _find_rule(rules, day_of_week)
    rule = rules[index]

    if not 0 <= slot_index < len(rule.intervals):
        raise IndexError(f"Slot {slot_index} out of range for day {day_of_week}")

    intervals = rule.intervals[:slot_index] + rule.intervals[slot_index + 1:]
    return _replace_rule(rules, index, replace(rule, intervals=intervals))


def update_interval(
    rules: Sequence[WeeklyRule],
    day_of_week: int,
    slot_index: int,
    start: Optional[time] = None,
    end: Optional[time] = None,
) -> List[WeeklyRule]:
    """Change the start and/or end of one interval. Omitted bounds are kept."""
    index = _find_rule(rules, day_of_week)
    rule = rules[index]

    if not 0 <= slot_index < len(rule.intervals):
        raise IndexError(f"Slot {slot_index} out of range for day {day_of_week}")

    current = rule.intervals[slot_index]
    changed = TimeInterval(
        start=start if start is not None else current.start,
        end=end if end is not None else current.end,
    )
    intervals = rule.intervals[:slot_index] + (changed,) + rule.intervals[slot_index + 1:]
    return _replace_rule(rules, index, replace(rule, intervals=intervals))


def add_exception(
    periods: Sequence[ExceptionPeriod],
    period: ExceptionPeriod,
) -> List[ExceptionPeriod]:
    """Append an exception period."""
    return list(periods) + [period]


def remove_exception(periods: Sequence[ExceptionPeriod], index: int) -> List[ExceptionPeriod]:
    """Remove the exception period at the given position."""
    if not 0 <= index < len(periods):
        raise IndexError(f"Exception period {index} out of range")
    return [period for position, period in enumerate(periods) if position != index]
