"""
Domain models for weekly availability rules, exception periods and
resolved bookable windows.
"""

import re
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Optional, Tuple

import pendulum
from pendulum import DateTime

from .exceptions import ConfigurationError

ANNUAL_PATTERN = "annual"

_CLOCK_RE = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])$")

DAY_NAMES = {
    "es": ["Domingo", "Lunes", "Martes", "Miércoles", "Jueves", "Viernes", "Sábado"],
    "en": ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"],
}


def is_valid_day_of_week(day: int) -> bool:
    """Check that a day index is within 0 (Sunday) .. 6 (Saturday)."""
    return isinstance(day, int) and not isinstance(day, bool) and 0 <= day <= 6


def day_of_week_for(value: date) -> int:
    """Return the 0=Sunday..6=Saturday index for a calendar date."""
    return value.isoweekday() % 7


def as_date(value: date) -> date:
    """Reduce a date or datetime (pendulum included) to a plain calendar date."""
    if isinstance(value, datetime):
        value = value.date()
    return date(value.year, value.month, value.day)


def day_sort_key(day: int) -> int:
    """
    Canonical editing order: Monday first, Sunday last.

    Out-of-range days sort after the valid ones so they stay visible.
    """
    if is_valid_day_of_week(day):
        return (day - 1) % 7
    return 7 + abs(day)


def get_day_name(day: int, locale: str = "es") -> str:
    """Get the display name of a day of week."""
    names = DAY_NAMES.get(locale)
    if names is None or not is_valid_day_of_week(day):
        return f"Day {day}"
    return names[day]


def parse_clock(value: str) -> time:
    """
    Parse a wall-clock "HH:MM" string.

    Raises:
        ValueError: If the string is not a valid 24h time of day
    """
    match = _CLOCK_RE.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Invalid time format '{value}'. Use HH:MM")
    return time(hour=int(match.group(1)), minute=int(match.group(2)))


def format_clock(value: Optional[time]) -> str:
    """Format a time of day as "HH:MM" (empty string when missing)."""
    if value is None:
        return ""
    return value.strftime("%H:%M")


@dataclass(frozen=True)
class TimeInterval:
    """
    A wall-clock interval within a single day.

    Not checked on construction: ill-formed intervals are kept so they can
    be reported by the validator and corrected by the user.
    """
    start: Optional[time]
    end: Optional[time]

    def is_well_formed(self) -> bool:
        """Both bounds present and start strictly before end."""
        return self.start is not None and self.end is not None and self.start < self.end

    def overlaps(self, other: "TimeInterval") -> bool:
        """Check if this interval overlaps another (half-open semantics)."""
        if not (self.is_well_formed() and other.is_well_formed()):
            return False
        return self.start < other.end and other.start < self.end

    def duration_minutes(self) -> int:
        """Return the duration in minutes (0 for ill-formed intervals)."""
        if not self.is_well_formed():
            return 0
        start = self.start.hour * 60 + self.start.minute
        end = self.end.hour * 60 + self.end.minute
        return end - start

    def sort_key(self):
        return (
            self.start is None,
            self.start or time.min,
            self.end is None,
            self.end or time.min,
        )

    def __str__(self) -> str:
        return f"{format_clock(self.start) or '--:--'}-{format_clock(self.end) or '--:--'}"


@dataclass(frozen=True)
class WeeklyRule:
    """
    Recurring availability for one day of the week (0=Sunday..6=Saturday).

    A rule without intervals marks the day as explicitly unavailable.
    """
    day_of_week: int
    intervals: Tuple[TimeInterval, ...] = ()

    def __post_init__(self):
        # Accept any iterable but always store an immutable tuple
        object.__setattr__(self, "intervals", tuple(self.intervals))

    def is_available(self) -> bool:
        """A day is available when it has at least one interval."""
        return bool(self.intervals)

    def sorted_intervals(self) -> Tuple[TimeInterval, ...]:
        return tuple(sorted(self.intervals, key=TimeInterval.sort_key))


@dataclass(frozen=True)
class FlatSlot:
    """
    One stored availability row: a single interval of a single day.

    ``is_available=False`` without times marks a day with no availability.
    """
    day_of_week: int
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    is_available: bool = True


@dataclass(frozen=True)
class ExceptionPeriod:
    """
    Whole-day absence (vacation, leave) between two inclusive dates.

    Recurring periods repeat every year on the same month/day.
    """
    start_date: date
    end_date: date
    reason: str = ""
    is_recurring_annually: bool = False
    recurrence_pattern: Optional[str] = None

    def covers(self, day: date) -> bool:
        """Check if the period (or its yearly projection) contains a date."""
        if self.start_date <= day <= self.end_date:
            return True
        if not self.is_recurring_annually or self.start_date > self.end_date:
            return False

        span_years = self.end_date.year - self.start_date.year
        for year in range(day.year - span_years, day.year + 1):
            if year <= self.start_date.year:
                continue
            projected = self._project(year)
            if projected and projected[0] <= day <= projected[1]:
                return True
        return False

    def _project(self, year: int) -> Optional[Tuple[date, date]]:
        """
        Project the period onto the given start year.

        A period starting on Feb 29 only exists in leap years; one ending
        on Feb 29 ends on Feb 28 otherwise.
        """
        try:
            start = self.start_date.replace(year=year)
        except ValueError:
            return None

        end_year = year + (self.end_date.year - self.start_date.year)
        try:
            end = self.end_date.replace(year=end_year)
        except ValueError:
            # Past the last representable year, or Feb 29 in a common year
            end = date.max if end_year > date.max.year else date(end_year, 2, 28)
        return start, end


@dataclass(frozen=True)
class ScheduleConfig:
    """Time zone and buffer settings of a professional's schedule."""
    timezone: str = "UTC"
    buffer_minutes: int = 0

    def __post_init__(self):
        if isinstance(self.buffer_minutes, bool) or not isinstance(self.buffer_minutes, int):
            raise ConfigurationError(f"buffer_minutes must be an integer, got {self.buffer_minutes!r}")
        if self.buffer_minutes < 0:
            raise ConfigurationError(f"buffer_minutes must not be negative, got {self.buffer_minutes}")
        try:
            pendulum.timezone(self.timezone)
        except (ValueError, KeyError) as exc:
            raise ConfigurationError(f"Unknown time zone: '{self.timezone}'") from exc


@dataclass(frozen=True)
class BookableWindow:
    """
    A resolved, date-stamped interval that can be offered for booking.

    Invariant: start must be before end.
    """
    date: date
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)

    def overlaps(self, other: "BookableWindow") -> bool:
        """Check if this window overlaps with another."""
        return self.start < other.end and self.end > other.start

    def format_display(self, locale: str = "es") -> str:
        """
        Format the window for display.
        Format: Weekday, DD.MM.YYYY | HH:MM - HH:MM (N min)
        """
        weekday = get_day_name(day_of_week_for(self.date), locale)
        date_str = self.start.format("DD.MM.YYYY")
        time_str = f"{self.start.format('HH:mm')} - {self.end.format('HH:mm')}"
        return f"{weekday}, {date_str} | {time_str} ({self.duration_minutes()} min)"

    def __str__(self) -> str:
        return f"{self.start.format('DD.MM.YYYY HH:mm')} - {self.end.format('HH:mm')}"
