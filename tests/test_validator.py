"""
Tests for rule and exception validation.
"""

from datetime import date, time

from clinic_availability.domain.models import ExceptionPeriod, TimeInterval, WeeklyRule
from clinic_availability.domain.validator import (
    validate_exceptions,
    validate_rules,
    validate_schedule,
)


class TestValidateRules:
    """Tests for validate_rules."""

    def test_valid_rules(self):
        """Test that a clean schedule produces no errors."""
        rules = [
            WeeklyRule(1, (TimeInterval(time(9, 0), time(12, 0)), TimeInterval(time(12, 0), time(17, 0)))),
            WeeklyRule(0, ()),
        ]

        assert validate_rules(rules) == []

    def test_overlapping_monday_intervals(self):
        """Test one error naming Monday and both slot indices for an overlap."""
        rules = [
            WeeklyRule(1, (TimeInterval(time(9, 0), time(11, 0)), TimeInterval(time(10, 0), time(12, 0)))),
        ]

        errors = validate_rules(rules)

        assert len(errors) == 1
        assert errors[0].day_of_week == 1
        assert errors[0].slot_indices == (0, 1)
        assert "Monday" in errors[0].message
        assert errors[0].field == "weeklyAvailability"

    def test_start_not_before_end(self):
        """Test that start >= end is reported with its slot index."""
        rules = [
            WeeklyRule(2, (TimeInterval(time(9, 0), time(10, 0)), TimeInterval(time(14, 0), time(14, 0)))),
        ]

        errors = validate_rules(rules)

        assert len(errors) == 1
        assert errors[0].slot_indices == (1,)
        assert "start time must be before end time" in errors[0].message

    def test_missing_time(self):
        """Test that a missing bound is reported."""
        errors = validate_rules([WeeklyRule(3, (TimeInterval(None, time(10, 0)),))])

        assert len(errors) == 1
        assert "missing start or end time" in errors[0].message

    def test_duplicate_day(self):
        """Test that a second rule for the same day is reported."""
        rules = [
            WeeklyRule(1, (TimeInterval(time(9, 0), time(12, 0)),)),
            WeeklyRule(1, (TimeInterval(time(13, 0), time(17, 0)),)),
        ]

        errors = validate_rules(rules)

        assert len(errors) == 1
        assert errors[0].index == 1
        assert "more than once" in errors[0].message

    def test_invalid_day(self):
        """Test that a day outside 0-6 is reported."""
        errors = validate_rules([WeeklyRule(7, (TimeInterval(time(9, 0), time(12, 0)),))])

        assert len(errors) == 1
        assert "Invalid day of week" in errors[0].message

    def test_collects_all_problems(self):
        """Test that validation reports everything instead of failing fast."""
        rules = [
            WeeklyRule(1, (
                TimeInterval(time(9, 0), time(11, 0)),
                TimeInterval(time(10, 0), time(12, 0)),
                TimeInterval(time(15, 0), time(14, 0)),
            )),
            WeeklyRule(1, ()),
            WeeklyRule(8, ()),
        ]

        errors = validate_rules(rules)

        assert len(errors) == 4
        assert [e.index for e in errors] == [0, 0, 1, 2]

    def test_spanish_messages(self):
        """Test that day names follow the requested locale."""
        rules = [
            WeeklyRule(1, (TimeInterval(time(9, 0), time(11, 0)), TimeInterval(time(10, 0), time(12, 0)))),
        ]

        assert "Lunes" in validate_rules(rules, locale="es")[0].message

    def test_error_str_is_addressable(self):
        """Test the rendered form of an error."""
        rules = [
            WeeklyRule(1, (TimeInterval(time(9, 0), time(11, 0)), TimeInterval(time(10, 0), time(12, 0)))),
        ]

        assert str(validate_rules(rules)[0]).startswith("weeklyAvailability[0] slots 0, 1: ")


class TestValidateExceptions:
    """Tests for validate_exceptions."""

    def test_end_before_start(self):
        """Test that an inverted period is reported."""
        errors = validate_exceptions([
            ExceptionPeriod(start_date=date(2024, 8, 7), end_date=date(2024, 8, 1)),
        ])

        assert len(errors) == 1
        assert errors[0].field == "vacations"
        assert errors[0].index == 0

    def test_overlapping_periods_are_allowed(self):
        """Test that overlapping vacations are not an error."""
        errors = validate_exceptions([
            ExceptionPeriod(start_date=date(2024, 8, 1), end_date=date(2024, 8, 10)),
            ExceptionPeriod(start_date=date(2024, 8, 5), end_date=date(2024, 8, 15)),
        ])

        assert errors == []

    def test_unsupported_recurrence_pattern(self):
        """Test that only the annual pattern is accepted for recurring periods."""
        errors = validate_exceptions([
            ExceptionPeriod(
                start_date=date(2024, 8, 1),
                end_date=date(2024, 8, 7),
                is_recurring_annually=True,
                recurrence_pattern="FREQ=WEEKLY",
            ),
            ExceptionPeriod(
                start_date=date(2024, 12, 24),
                end_date=date(2024, 12, 26),
                is_recurring_annually=True,
                recurrence_pattern="annual",
            ),
        ])

        assert len(errors) == 1
        assert "Unsupported recurrence pattern" in errors[0].message


def test_validate_schedule_combines_both():
    """Rule errors come first, then exception errors."""
    errors = validate_schedule(
        [WeeklyRule(1, (TimeInterval(time(12, 0), time(9, 0)),))],
        [ExceptionPeriod(start_date=date(2024, 8, 7), end_date=date(2024, 8, 1))],
    )

    assert [e.field for e in errors] == ["weeklyAvailability", "vacations"]
