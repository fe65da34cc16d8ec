"""
Tests for the command line interface.
"""

import json

import pytest
from typer.testing import CliRunner

from clinic_availability import __version__
from clinic_availability.cli.app import app

runner = CliRunner()


@pytest.fixture
def config_path(tmp_path):
    schedules = tmp_path / "schedules"
    schedules.mkdir()
    (schedules / "dr-garcia.json").write_text(json.dumps({
        "professionalId": "dr-garcia",
        "timezone": "Europe/Madrid",
        "bufferMinutes": 0,
        "weeklyAvailability": [
            {"dayOfWeek": 1, "startTime": "09:00", "endTime": "14:00"},
        ],
        "vacations": [],
    }), encoding="utf-8")
    (schedules / "dr-lopez.json").write_text(json.dumps({
        "professionalId": "dr-lopez",
        "weeklyAvailability": [
            {"dayOfWeek": 1, "startTime": "09:00", "endTime": "11:00"},
            {"dayOfWeek": 1, "startTime": "10:00", "endTime": "12:00"},
        ],
    }), encoding="utf-8")

    path = tmp_path / "config.yaml"
    path.write_text("data_dir: schedules\nlocale: es\n", encoding="utf-8")
    return path


def test_windows(config_path):
    """Windows are listed with localized day names."""
    result = runner.invoke(app, [
        "windows", "dr-garcia", "--config", str(config_path),
        "--start", "2024-11-25", "--end", "2024-11-26",
    ])

    assert result.exit_code == 0
    assert "Lunes, 25.11.2024 | 09:00 - 14:00 (300 min)" in result.output


def test_windows_unknown_professional(config_path):
    """An unknown professional exits with an error."""
    result = runner.invoke(app, [
        "windows", "nobody", "--config", str(config_path), "--start", "2024-11-25",
    ])

    assert result.exit_code == 1
    assert "No schedule stored" in result.output


def test_windows_rejects_both_week_flags(config_path):
    """--this-week and --next-week cannot be combined."""
    result = runner.invoke(app, [
        "windows", "dr-garcia", "--config", str(config_path), "--this-week", "--next-week",
    ])

    assert result.exit_code == 1


def test_validate_reports_problems(config_path):
    """An overlapping schedule fails validation with exit code 1."""
    result = runner.invoke(app, ["validate", "dr-lopez", "--config", str(config_path)])

    assert result.exit_code == 1
    assert "overlap" in result.output


def test_validate_clean_schedule(config_path):
    """A clean schedule passes validation."""
    result = runner.invoke(app, ["validate", "dr-garcia", "--config", str(config_path)])

    assert result.exit_code == 0
    assert "valid" in result.output


def test_add_day_creates_schedule(config_path, tmp_path):
    """Adding a day for a new professional stores a document with the editor."""
    result = runner.invoke(app, [
        "add-day", "dr-nuevo", "3", "--editor", "admin-1", "--config", str(config_path),
    ])

    assert result.exit_code == 0
    stored = json.loads((tmp_path / "schedules" / "dr-nuevo.json").read_text(encoding="utf-8"))
    assert stored["updatedBy"] == "admin-1"
    assert stored["weeklyAvailability"] == [
        {"dayOfWeek": 3, "startTime": "09:00", "endTime": "17:00", "isAvailable": True},
    ]


def test_add_vacation(config_path, tmp_path):
    """A vacation is appended to the stored schedule."""
    result = runner.invoke(app, [
        "add-vacation", "dr-garcia", "2024-08-01", "2024-08-15",
        "--editor", "admin-1", "--reason", "Verano", "--recurring",
        "--config", str(config_path),
    ])

    assert result.exit_code == 0
    stored = json.loads((tmp_path / "schedules" / "dr-garcia.json").read_text(encoding="utf-8"))
    assert stored["vacations"] == [{
        "startDate": "2024-08-01",
        "endDate": "2024-08-15",
        "reason": "Verano",
        "isRecurring": True,
        "recurrencePattern": "annual",
    }]


def test_add_vacation_inverted_dates(config_path):
    """An inverted vacation is reported and not stored."""
    result = runner.invoke(app, [
        "add-vacation", "dr-garcia", "2024-08-15", "2024-08-01",
        "--editor", "admin-1", "--config", str(config_path),
    ])

    assert result.exit_code == 1


def test_professionals(config_path):
    """Stored professionals are listed."""
    result = runner.invoke(app, ["professionals", "--config", str(config_path)])

    assert result.exit_code == 0
    assert "dr-garcia" in result.output
    assert "dr-lopez" in result.output


def test_version():
    """The version command prints the package version."""
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output
