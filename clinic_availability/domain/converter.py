"""
Conversion between the stored flat shape (one row per day and interval)
and the editable grouped shape (one rule per day with its intervals).

Ill-formed rows are carried through untouched and left to the validator,
so a user can see and fix them. Rows marked unavailable only keep their
day; times stored on them are dropped.
"""

from typing import Dict, List, Sequence, Union

from .exceptions import FormatError
from .models import FlatSlot, TimeInterval, WeeklyRule, day_sort_key

AvailabilityRecord = Union[FlatSlot, WeeklyRule]


def to_editable(records: Sequence[AvailabilityRecord]) -> List[WeeklyRule]:
    """
    Group flat slot records into one WeeklyRule per day.

    Input that is already grouped is returned unchanged, which makes the
    conversion idempotent. Mixed input is merged into the groups.

    Args:
        records: FlatSlot rows, WeeklyRule groups, or a mix of both

    Returns:
        Rules in canonical day order (Monday first, Sunday last), each with
        its intervals in ascending start-time order

    Raises:
        FormatError: If a record is neither a FlatSlot nor a WeeklyRule
    """
    records = list(records)

    for index, record in enumerate(records):
        if not isinstance(record, (FlatSlot, WeeklyRule)):
            raise FormatError(
                f"Unrecognised availability record at position {index}: "
                f"{type(record).__name__}"
            )

    if all(isinstance(record, WeeklyRule) for record in records):
        return records

    grouped: Dict[int, List[TimeInterval]] = {}

    for record in records:
        intervals = grouped.setdefault(record.day_of_week, [])

        if isinstance(record, WeeklyRule):
            intervals.extend(record.intervals)
            continue

        # Unavailable rows only mark the day; any times they carry are ignored
        if not record.is_available:
            continue

        intervals.append(TimeInterval(start=record.start_time, end=record.end_time))

    return [
        WeeklyRule(
            day_of_week=day,
            intervals=sorted(intervals, key=TimeInterval.sort_key),
        )
        for day, intervals in sorted(grouped.items(), key=lambda item: day_sort_key(item[0]))
    ]


def to_storage(rules: Sequence[WeeklyRule]) -> List[FlatSlot]:
    """
    Flatten grouped rules into one FlatSlot per (day, interval) pair.

    A rule without intervals produces a single unavailable row so that the
    day survives a round trip.

    Raises:
        FormatError: If a record is not a WeeklyRule
    """
    slots: List[FlatSlot] = []

    for index, rule in enumerate(rules):
        if not isinstance(rule, WeeklyRule):
            raise FormatError(
                f"Expected a WeeklyRule at position {index}, got {type(rule).__name__}"
            )

        if not rule.intervals:
            slots.append(FlatSlot(day_of_week=rule.day_of_week, is_available=False))
            continue

        for interval in rule.intervals:
            slots.append(
                FlatSlot(
                    day_of_week=rule.day_of_week,
                    start_time=interval.start,
                    end_time=interval.end,
                    is_available=True,
                )
            )

    return slots
