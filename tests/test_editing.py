"""
Tests for pure edit operations.
"""

from datetime import date, time

import pytest

from clinic_availability.domain import editing
from clinic_availability.domain.models import ExceptionPeriod, TimeInterval, WeeklyRule

MORNING = TimeInterval(time(9, 0), time(12, 0))
AFTERNOON = TimeInterval(time(13, 0), time(17, 0))


@pytest.fixture
def rules():
    return (
        WeeklyRule(1, (MORNING,)),
        WeeklyRule(0, (AFTERNOON,)),
    )


def test_add_day_keeps_canonical_order(rules):
    """A new Wednesday lands between Monday and Sunday."""
    updated = editing.add_day(rules, 3)

    assert [rule.day_of_week for rule in updated] == [1, 3, 0]
    assert updated[1].intervals == (editing.DEFAULT_INTERVAL,)
    assert len(rules) == 2


def test_add_existing_day_is_noop(rules):
    """Adding a day that exists leaves the rules as they were."""
    assert editing.add_day(rules, 1, AFTERNOON) == list(rules)


def test_remove_day(rules):
    """Removing a day drops its rule."""
    assert [rule.day_of_week for rule in editing.remove_day(rules, 1)] == [0]


def test_add_and_remove_interval(rules):
    """Intervals can be appended and removed without touching the input."""
    added = editing.add_interval(rules, 1, AFTERNOON)
    removed = editing.remove_interval(added, 1, 0)

    assert added[0].intervals == (MORNING, AFTERNOON)
    assert removed[0].intervals == (AFTERNOON,)
    assert rules[0].intervals == (MORNING,)


def test_remove_last_interval_keeps_empty_day(rules):
    """A day whose last slot is removed stays, without intervals."""
    updated = editing.remove_interval(rules, 0, 0)

    assert updated[1] == WeeklyRule(0, ())


def test_update_interval_partial(rules):
    """Only the given bound changes."""
    updated = editing.update_interval(rules, 1, 0, end=time(11, 30))

    assert updated[0].intervals == (TimeInterval(time(9, 0), time(11, 30)),)


def test_update_interval_allows_invalid_values(rules):
    """Edits may produce invalid intervals; validation reports them later."""
    updated = editing.update_interval(rules, 1, 0, start=time(13, 0))

    assert not updated[0].intervals[0].is_well_formed()


def test_unknown_day_and_slot_raise(rules):
    """Editing a missing day or slot fails loudly."""
    with pytest.raises(KeyError):
        editing.add_interval(rules, 4)
    with pytest.raises(IndexError):
        editing.remove_interval(rules, 1, 3)
    with pytest.raises(IndexError):
        editing.update_interval(rules, 1, -1, start=time(8, 0))


def test_add_and_remove_exception():
    """Exception periods are appended and removed by position."""
    summer = ExceptionPeriod(start_date=date(2024, 8, 1), end_date=date(2024, 8, 15), reason="Verano")
    christmas = ExceptionPeriod(start_date=date(2024, 12, 24), end_date=date(2024, 12, 26))

    periods = editing.add_exception(editing.add_exception((), summer), christmas)

    assert periods == [summer, christmas]
    assert editing.remove_exception(periods, 0) == [christmas]
    with pytest.raises(IndexError):
        editing.remove_exception(periods, 2)
