"""
Core business logic for resolving bookable windows.

Pure domain logic without any external dependencies (no API calls, no
database, no I/O). Input is assumed to have passed validation; anything
malformed that reaches the resolver is skipped, never raised.
"""

import logging
from datetime import date, datetime, timedelta
from typing import Dict, List, Optional, Sequence, Union

import pendulum
from pendulum import DateTime

from .models import (
    BookableWindow,
    ExceptionPeriod,
    ScheduleConfig,
    TimeInterval,
    WeeklyRule,
    as_date,
    day_of_week_for,
    is_valid_day_of_week,
)

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime]


class AvailabilityResolver:
    """
    Resolves weekly rules and exception periods into bookable windows.

    Algorithm:
    1. Walk every calendar date of the (inclusive) range
    2. Pick the weekly rule for that date's day of week
    3. Drop the whole day if an exception period (or its yearly
       projection) covers it
    4. Localise each interval in the configured time zone
    5. Push later windows forward so consecutive windows keep the buffer
    6. Return windows ordered by date, then start
    """

    def __init__(self, config: ScheduleConfig):
        self.config = config

    def resolve(
        self,
        rules: Sequence[WeeklyRule],
        exceptions: Sequence[ExceptionPeriod],
        range_start: DateLike,
        range_end: DateLike,
    ) -> List[BookableWindow]:
        """
        Compute bookable windows for every date in [range_start, range_end].

        Args:
            rules: Weekly rules, at most one per day of week
            exceptions: Whole-day exception periods
            range_start: First date of the range (date part of a datetime)
            range_end: Last date of the range, inclusive

        Returns:
            Windows sorted by (date, start). Empty when range_start > range_end.
        """
        first_day = as_date(range_start)
        last_day = as_date(range_end)

        if first_day > last_day:
            logger.debug("Empty range %s > %s, nothing to resolve", first_day, last_day)
            return []

        rules_by_day = self._index_rules(rules)
        if not rules_by_day:
            return []

        windows: List[BookableWindow] = []

        for offset in range((last_day - first_day).days + 1):
            current = first_day + timedelta(days=offset)
            rule = rules_by_day.get(day_of_week_for(current))

            if rule and rule.intervals and not self._is_excluded(current, exceptions):
                windows.extend(self._resolve_day(current, rule))

        windows.sort(key=lambda w: (w.date, w.start))
        return windows

    def _index_rules(self, rules: Sequence[WeeklyRule]) -> Dict[int, WeeklyRule]:
        """Map day of week to its rule, ignoring invalid and duplicate days."""
        indexed: Dict[int, WeeklyRule] = {}

        for rule in rules:
            if not is_valid_day_of_week(rule.day_of_week):
                logger.debug("Skipping rule with invalid day of week %r", rule.day_of_week)
                continue
            if rule.day_of_week in indexed:
                logger.debug("Skipping duplicate rule for day %s", rule.day_of_week)
                continue
            indexed[rule.day_of_week] = rule

        return indexed

    @staticmethod
    def _is_excluded(day: date, exceptions: Sequence[ExceptionPeriod]) -> bool:
        """Overlapping periods simply union: any match excludes the day."""
        return any(period.covers(day) for period in exceptions)

    def _resolve_day(self, day: date, rule: WeeklyRule) -> List[BookableWindow]:
        """
        Localise a day's intervals and enforce the buffer between them.

        The earlier window always keeps its bounds; a later window that
        starts inside the buffer is shortened, or dropped if nothing is left.
        """
        buffer = timedelta(minutes=self.config.buffer_minutes)
        windows: List[BookableWindow] = []
        previous_end: Optional[DateTime] = None

        for interval in rule.sorted_intervals():
            localized = self._localize(day, interval)
            if localized is None:
                continue

            start, end = localized

            if previous_end is not None and start < previous_end + buffer:
                start = previous_end + buffer

            if start >= end:
                logger.debug(
                    "Dropping interval %s on %s: no time left after %s min buffer",
                    interval, day, self.config.buffer_minutes,
                )
                continue

            windows.append(BookableWindow(date=day, start=start, end=end))
            previous_end = end

        return windows

    def _localize(self, day: date, interval: TimeInterval) -> Optional[tuple]:
        """Turn a wall-clock interval into absolute datetimes, or None to skip it."""
        if not interval.is_well_formed():
            logger.debug("Skipping ill-formed interval %s on %s", interval, day)
            return None

        tz = self.config.timezone
        start = pendulum.datetime(
            day.year, day.month, day.day,
            interval.start.hour, interval.start.minute,
            tz=tz,
        )
        end = pendulum.datetime(
            day.year, day.month, day.day,
            interval.end.hour, interval.end.minute,
            tz=tz,
        )

        # A DST transition can swallow a short interval entirely
        if start >= end:
            logger.debug("Skipping interval %s on %s: empty after DST shift", interval, day)
            return None

        return start, end


def resolve(
    rules: Sequence[WeeklyRule],
    exceptions: Sequence[ExceptionPeriod],
    config: ScheduleConfig,
    range_start: DateLike,
    range_end: DateLike,
) -> List[BookableWindow]:
    """Resolve bookable windows with a one-off resolver."""
    return AvailabilityResolver(config).resolve(rules, exceptions, range_start, range_end)

