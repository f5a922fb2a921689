"""
Wiring of services onto a storage gateway.
"""

from __future__ import annotations

from dataclasses import dataclass

from ..domain.conflict_checker import BookingConflictChecker, OverlapScope
from .bookings import BookingService
from .catalog import CatalogService
from .customers import CustomerService
from .storage import StorageGateway
from .timeslots import TimeslotService


@dataclass
class Services:
    customers: CustomerService
    catalog: CatalogService
    timeslots: TimeslotService
    bookings: BookingService


def build_services(
    storage: StorageGateway,
    scope: OverlapScope = OverlapScope.GLOBAL,
) -> Services:
    """Construct every service with explicit dependencies on ``storage``."""
    customers = CustomerService(storage.customers, storage.bookings)
    catalog = CatalogService(storage.services)
    timeslots = TimeslotService(storage.timeslots, catalog)
    bookings = BookingService(
        bookings=storage.bookings,
        conflict_checker=BookingConflictChecker(storage.bookings, scope),
        customer_service=customers,
        catalog_service=catalog,
        timeslot_service=timeslots,
    )
    return Services(customers=customers, catalog=catalog, timeslots=timeslots, bookings=bookings)
