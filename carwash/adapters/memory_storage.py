"""
In-memory storage for testing without a database.
"""

from __future__ import annotations

import itertools
import threading
from dataclasses import replace
from typing import Callable, Dict, Generic, List, Optional, TypeVar

from pendulum import DateTime

from ..domain.models import Booking, Customer, Service, TimeRange, Timeslot

E = TypeVar("E", Customer, Service, Timeslot, Booking)


class _MemoryTable(Generic[E]):
    """
    Dictionary-backed table with generated integer ids.

    Entities are copied on the way in and out, so callers never hold a
    reference to the stored row.
    """

    def __init__(self) -> None:
        self._rows: Dict[int, E] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def save(self, entity: E) -> E:
        with self._lock:
            if entity.id is None:
                entity = replace(entity, id=next(self._ids))
            self._rows[entity.id] = replace(entity)
            return replace(entity)

    def find_by_id(self, entity_id: int) -> Optional[E]:
        with self._lock:
            row = self._rows.get(entity_id)
            return replace(row) if row is not None else None

    def find_all(self) -> List[E]:
        return self._select(lambda row: True)

    def exists_by_id(self, entity_id: int) -> bool:
        with self._lock:
            return entity_id in self._rows

    def delete_by_id(self, entity_id: int) -> None:
        with self._lock:
            self._rows.pop(entity_id, None)

    def _select(self, predicate: Callable[[E], bool]) -> List[E]:
        with self._lock:
            return [replace(row) for _, row in sorted(self._rows.items()) if predicate(row)]


class MemoryCustomerStorage(_MemoryTable[Customer]):
    def find_by_phone_number(self, phone_number: str) -> Optional[Customer]:
        matches = self._select(lambda row: row.phone_number == phone_number)
        return matches[0] if matches else None


class MemoryServiceStorage(_MemoryTable[Service]):
    def find_by_name(self, name: str) -> Optional[Service]:
        matches = self._select(lambda row: row.name == name)
        return matches[0] if matches else None


class MemoryTimeslotStorage(_MemoryTable[Timeslot]):
    def find_by_service_id(self, service_id: int) -> List[Timeslot]:
        return self._select(lambda row: row.service_id == service_id)


class MemoryBookingStorage(_MemoryTable[Booking]):
    def find_by_customer_id(self, customer_id: int) -> List[Booking]:
        return self._select(lambda row: row.customer_id == customer_id)

    def find_overlapping(
        self,
        start: DateTime,
        end: DateTime,
        exclude_id: Optional[int] = None,
        service_id: Optional[int] = None,
    ) -> List[Booking]:
        window = TimeRange(start=start, end=end)

        def matches(row: Booking) -> bool:
            if exclude_id is not None and row.id == exclude_id:
                return False
            if service_id is not None and row.service_id != service_id:
                return False
            return row.time_range.overlaps(window)

        return sorted(self._select(matches), key=lambda row: row.start_time)

    def count_overlapping(
        self,
        start: DateTime,
        end: DateTime,
        service_id: Optional[int] = None,
    ) -> int:
        return len(self.find_overlapping(start, end, service_id=service_id))

    def count_overlapping_excluding(
        self,
        start: DateTime,
        end: DateTime,
        exclude_id: int,
        service_id: Optional[int] = None,
    ) -> int:
        return len(self.find_overlapping(start, end, exclude_id=exclude_id, service_id=service_id))


class MemoryStorage:
    """Storage gateway keeping every table in process memory."""

    def __init__(self) -> None:
        self.customers = MemoryCustomerStorage()
        self.services = MemoryServiceStorage()
        self.timeslots = MemoryTimeslotStorage()
        self.bookings = MemoryBookingStorage()
