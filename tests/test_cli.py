"""
Tests for the Typer command line interface.
"""

import pytest
from typer.testing import CliRunner

from carwash import __version__
from carwash.adapters.sql_storage import SqlBookingStorage
from carwash.cli.app import app
from carwash.domain.exceptions import StorageError

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        f"database_url: sqlite:///{tmp_path / 'carwash.db'}\n"
        "timezone: Europe/Berlin\n"
        "log_level: ERROR\n",
        encoding="utf-8",
    )
    return path


def _invoke(config_file, *args):
    return runner.invoke(app, ["--config", str(config_file), *args])


@pytest.fixture
def seeded(config_file):
    """One customer (id 1) and one service (id 1)."""
    assert _invoke(config_file, "customers", "create", "Anna", "0171").exit_code == 0
    assert _invoke(config_file, "services", "add", "Basic", "9.5").exit_code == 0
    return config_file


def test_version():
    result = runner.invoke(app, ["version"])

    assert result.exit_code == 0
    assert __version__ in result.output


def test_missing_config_file_fails(tmp_path):
    result = runner.invoke(app, ["--config", str(tmp_path / "missing.yaml"), "bookings", "list"])

    assert result.exit_code == 1
    assert "Config file not found" in result.output


def test_create_and_list_bookings(seeded):
    created = _invoke(seeded, "bookings", "create", "1", "1", "2024-11-25 10:00", "2024-11-25 11:00")
    listed = _invoke(seeded, "bookings", "list")

    assert created.exit_code == 0
    assert "Booking 1 created" in created.output
    assert listed.exit_code == 0
    assert "2024-11-25 10:00" in listed.output


def test_overlapping_booking_reports_conflict(seeded):
    _invoke(seeded, "bookings", "create", "1", "1", "2024-11-25 10:00", "2024-11-25 11:00")

    conflict = _invoke(seeded, "bookings", "create", "1", "1", "2024-11-25 10:30", "2024-11-25 11:30")
    touching = _invoke(seeded, "bookings", "create", "1", "1", "2024-11-25 11:00", "2024-11-25 12:00")

    assert conflict.exit_code == 1
    assert "409" in conflict.output
    assert "Time slot is not available" in conflict.output
    assert touching.exit_code == 0


def test_unknown_customer_reports_not_found(seeded):
    result = _invoke(seeded, "bookings", "create", "999", "1", "2024-11-25 10:00", "2024-11-25 11:00")

    assert result.exit_code == 1
    assert "404" in result.output
    assert "Customer not found" in result.output


def test_reversed_interval_reports_validation_error(seeded):
    result = _invoke(seeded, "bookings", "create", "1", "1", "2024-11-25 11:00", "2024-11-25 10:00")

    assert result.exit_code == 1
    assert "400" in result.output


def test_non_positive_id_is_a_usage_error(seeded):
    result = _invoke(seeded, "bookings", "get", "0")

    assert result.exit_code == 2


def test_unparseable_datetime_is_a_usage_error(seeded):
    result = _invoke(seeded, "bookings", "create", "1", "1", "tomorrow-ish", "2024-11-25 10:00")

    assert result.exit_code == 2


def test_update_and_get_booking(seeded):
    _invoke(seeded, "bookings", "create", "1", "1", "2024-11-25 10:00", "2024-11-25 11:00")

    updated = _invoke(seeded, "bookings", "update", "1", "2024-11-25 14:00", "2024-11-25 15:00")
    shown = _invoke(seeded, "bookings", "get", "1")

    assert updated.exit_code == 0
    assert "2024-11-25 14:00" in shown.output


def test_get_missing_booking(seeded):
    result = _invoke(seeded, "bookings", "get", "5")

    assert result.exit_code == 1
    assert "404" in result.output


def test_delete_missing_booking_succeeds(seeded):
    result = _invoke(seeded, "bookings", "delete", "5")

    assert result.exit_code == 0


def test_check_lists_conflicts(seeded):
    _invoke(seeded, "bookings", "create", "1", "1", "2024-11-25 10:00", "2024-11-25 11:00")

    blocked = _invoke(seeded, "bookings", "check", "2024-11-25 10:30", "2024-11-25 11:30")
    free = _invoke(seeded, "bookings", "check", "2024-11-25 11:00", "2024-11-25 11:30")

    assert blocked.exit_code == 1
    assert "Conflicting bookings" in blocked.output
    assert free.exit_code == 0
    assert "available" in free.output


def test_availability_shows_open_timeslots(seeded):
    _invoke(seeded, "timeslots", "add", "1", "2024-11-25 09:00", "2024-11-25 10:00")
    _invoke(seeded, "timeslots", "add", "1", "2024-11-25 12:00", "2024-11-25 13:00", "--unavailable")

    result = _invoke(seeded, "bookings", "availability", "1")

    assert result.exit_code == 0
    assert "2024-11-25 09:00" in result.output
    assert "2024-11-25 12:00" not in result.output


def test_duplicate_service_name_conflicts(seeded):
    result = _invoke(seeded, "services", "add", "Basic", "12")

    assert result.exit_code == 1
    assert "409" in result.output


def test_customer_lookup_by_phone(seeded):
    result = _invoke(seeded, "customers", "find", "0171")

    assert result.exit_code == 0
    assert "Anna" in result.output


def test_remaining_time_without_bookings(seeded):
    result = _invoke(seeded, "customers", "remaining-time", "0171")

    assert result.exit_code == 1
    assert "No upcoming booking" in result.output


def _raise_storage_error(*args, **kwargs):
    raise StorageError("disk gone")


def test_storage_failure_on_create_reports_500(seeded, monkeypatch):
    monkeypatch.setattr(SqlBookingStorage, "save", _raise_storage_error)

    result = _invoke(seeded, "bookings", "create", "1", "1", "2024-11-25 10:00", "2024-11-25 11:00")

    assert result.exit_code == 1
    assert "Error [500]" in result.output
    assert "disk gone" in result.output


@pytest.mark.parametrize(
    "args",
    [
        ("bookings", "list"),
        ("bookings", "get", "1"),
        ("bookings", "delete", "1"),
        ("bookings", "update", "1", "2024-11-25 14:00", "2024-11-25 15:00"),
        ("bookings", "check", "2024-11-25 10:00", "2024-11-25 11:00"),
    ],
)
def test_storage_failures_on_booking_commands_report_500(seeded, monkeypatch, args):
    for name in ("find_all", "find_by_id", "delete_by_id", "find_overlapping"):
        monkeypatch.setattr(SqlBookingStorage, name, _raise_storage_error)

    result = _invoke(seeded, *args)

    assert result.exit_code == 1
    assert "Error [500]" in result.output


def test_check_requires_service_under_service_scope(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        f"database_url: sqlite:///{tmp_path / 'carwash.db'}\n"
        "overlap_scope: service\n"
        "log_level: ERROR\n",
        encoding="utf-8",
    )

    without = _invoke(path, "bookings", "check", "2024-11-25 10:00", "2024-11-25 11:00")
    scoped = _invoke(path, "bookings", "check", "2024-11-25 10:00", "2024-11-25 11:00", "--service", "1")

    assert without.exit_code == 2
    assert scoped.exit_code == 0
