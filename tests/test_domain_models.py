"""
Tests for domain models.
"""

import pendulum
import pytest

from carwash.domain.exceptions import ValidationError
from carwash.domain.models import Booking, TimeRange, validate_interval

from .conftest import at


class TestTimeRange:
    """Tests for TimeRange model."""

    def test_reversed_range_is_a_validation_error(self):
        with pytest.raises(ValidationError) as exc_info:
            TimeRange(start=at("17:00"), end=at("09:00"))

        assert exc_info.value.field == "end_time"

    def test_empty_range_is_a_validation_error(self):
        with pytest.raises(ValidationError):
            TimeRange(start=at("10:00"), end=at("10:00"))

    def test_str_is_half_open_iso(self):
        tr = TimeRange(start=at("09:00"), end=at("10:00"))

        assert str(tr) == "[2024-11-25T09:00:00+01:00, 2024-11-25T10:00:00+01:00)"

    def test_overlaps(self):
        """Test overlap detection."""
        tr1 = TimeRange(start=at("09:00"), end=at("12:00"))
        tr2 = TimeRange(start=at("11:00"), end=at("14:00"))
        tr3 = TimeRange(start=at("14:00"), end=at("17:00"))

        assert tr1.overlaps(tr2)
        assert tr2.overlaps(tr1)
        assert not tr1.overlaps(tr3)

    def test_touching_ranges_do_not_overlap(self):
        """Half-open ranges sharing an endpoint are disjoint."""
        first = TimeRange(start=at("10:00"), end=at("11:00"))
        second = TimeRange(start=at("11:00"), end=at("12:00"))

        assert not first.overlaps(second)
        assert not second.overlaps(first)

    def test_containment_overlaps(self):
        outer = TimeRange(start=at("09:00"), end=at("17:00"))
        inner = TimeRange(start=at("10:00"), end=at("10:30"))

        assert outer.overlaps(inner)
        assert inner.overlaps(outer)


class TestBooking:
    """Tests for the Booking entity."""

    def test_with_interval_keeps_identity_and_references(self):
        booking = Booking(customer_id=1, service_id=2, start_time=at("10:00"), end_time=at("11:00"), id=7)

        moved = booking.with_interval(TimeRange(at("12:00"), at("13:00")))

        assert moved.id == 7
        assert moved.customer_id == 1
        assert moved.service_id == 2
        assert moved.time_range == TimeRange(start=at("12:00"), end=at("13:00"))
        assert booking.start_time == at("10:00")


class TestValidateInterval:
    """Tests for request interval validation."""

    def test_returns_the_interval(self):
        interval = validate_interval(at("10:00"), at("10:01"))

        assert interval == TimeRange(start=at("10:00"), end=at("10:01"))

    def test_rejects_end_before_start(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_interval(at("11:00"), at("10:00"))

        assert exc_info.value.field == "end_time"
        assert exc_info.value.status_code == 400

    def test_rejects_zero_length(self):
        with pytest.raises(ValidationError):
            validate_interval(at("10:00"), at("10:00"))

    def test_rejects_missing_start(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_interval(None, at("10:00"))

        assert exc_info.value.field == "start_time"

    def test_compares_across_timezones(self):
        """10:30 UTC is 11:30 in Berlin in November, so it is after 11:00 Berlin."""
        utc_end = pendulum.parse("2024-11-25 10:30", tz="UTC")

        validate_interval(at("11:00"), utc_end)
