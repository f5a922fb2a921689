"""
Storage protocols consumed by the services.

Services depend on these protocols only, so the SQLAlchemy adapter and the
in-memory adapter are interchangeable.
"""

from __future__ import annotations

from typing import List, Optional, Protocol

from ..domain.conflict_checker import OverlapQueryProtocol
from ..domain.models import Booking, Customer, Service, Timeslot


class CustomerStorage(Protocol):
    def save(self, customer: Customer) -> Customer: ...

    def find_by_id(self, customer_id: int) -> Optional[Customer]: ...

    def find_all(self) -> List[Customer]: ...

    def find_by_phone_number(self, phone_number: str) -> Optional[Customer]: ...

    def exists_by_id(self, customer_id: int) -> bool: ...

    def delete_by_id(self, customer_id: int) -> None: ...


class ServiceStorage(Protocol):
    def save(self, service: Service) -> Service: ...

    def find_by_id(self, service_id: int) -> Optional[Service]: ...

    def find_all(self) -> List[Service]: ...

    def find_by_name(self, name: str) -> Optional[Service]: ...

    def exists_by_id(self, service_id: int) -> bool: ...

    def delete_by_id(self, service_id: int) -> None: ...


class TimeslotStorage(Protocol):
    def save(self, timeslot: Timeslot) -> Timeslot: ...

    def find_by_id(self, timeslot_id: int) -> Optional[Timeslot]: ...

    def find_all(self) -> List[Timeslot]: ...

    def find_by_service_id(self, service_id: int) -> List[Timeslot]: ...

    def exists_by_id(self, timeslot_id: int) -> bool: ...

    def delete_by_id(self, timeslot_id: int) -> None: ...


class BookingStorage(OverlapQueryProtocol, Protocol):
    """Booking persistence plus the overlap queries used by the conflict checker."""

    def save(self, booking: Booking) -> Booking:
        """Insert (id is None) or update a booking and return the stored copy."""

    def find_by_id(self, booking_id: int) -> Optional[Booking]: ...

    def find_all(self) -> List[Booking]: ...

    def find_by_customer_id(self, customer_id: int) -> List[Booking]: ...

    def delete_by_id(self, booking_id: int) -> None:
        """Delete a booking; a missing id is not an error."""


class StorageGateway(Protocol):
    """Bundle of the per-entity stores."""

    customers: CustomerStorage
    services: ServiceStorage
    timeslots: TimeslotStorage
    bookings: BookingStorage


__all__ = [
    "BookingStorage",
    "CustomerStorage",
    "ServiceStorage",
    "StorageGateway",
    "TimeslotStorage",
]
