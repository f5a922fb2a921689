"""
Domain models for customers, services, timeslots and bookings.

Entities reference each other by id only; collections such as "bookings of a
customer" are fetched through storage queries.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional

from pendulum import DateTime

from .exceptions import ValidationError


@dataclass(frozen=True)
class TimeRange:
    """
    A requested or booked interval [start, end), end exclusive.

    Invariant: start is strictly before end. Instants are compared, so the
    two ends may carry different timezones.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.end <= self.start:
            raise ValidationError("end_time", "must be after start_time")

    def overlaps(self, other: "TimeRange") -> bool:
        """Each range starts before the other ends. Touching ranges are disjoint."""
        return self.start < other.end and self.end > other.start

    def __str__(self) -> str:
        return f"[{self.start.to_iso8601_string()}, {self.end.to_iso8601_string()})"


@dataclass
class Customer:
    """A car-wash customer. Phone numbers are unique by convention only."""
    name: str
    phone_number: str
    id: Optional[int] = None


@dataclass
class Service:
    """A washing service offered by the business."""
    name: str
    price: float
    id: Optional[int] = None


@dataclass
class Timeslot:
    """
    An advertised window for a service.

    Timeslots are not reservations; booking a time does not flip ``available``.
    """
    service_id: int
    start_time: DateTime
    end_time: DateTime
    available: bool = True
    id: Optional[int] = None


@dataclass
class Booking:
    """A committed reservation of a service by a customer."""
    customer_id: int
    service_id: int
    start_time: DateTime
    end_time: DateTime
    id: Optional[int] = None

    @property
    def time_range(self) -> TimeRange:
        return TimeRange(start=self.start_time, end=self.end_time)

    def with_interval(self, interval: TimeRange) -> "Booking":
        """Return a copy moved to a new interval, keeping id and references."""
        return replace(self, start_time=interval.start, end_time=interval.end)


def validate_interval(start_time: Optional[DateTime], end_time: Optional[DateTime]) -> TimeRange:
    """
    Check that a requested interval is present and ends after it starts.

    Returns:
        The interval as a TimeRange

    Raises:
        ValidationError: Naming the offending field
    """
    if start_time is None:
        raise ValidationError("start_time", "must not be empty")
    if end_time is None:
        raise ValidationError("end_time", "must not be empty")
    return TimeRange(start=start_time, end=end_time)
