"""
Booking orchestration.

Composes validation, the conflict checker, customer/service lookup and
persistence into the booking operations. Business failures are returned as
``Err`` values rather than raised, so callers must look at the result.

Each mutating operation checks first and writes once afterwards. The check
and the write are separate storage calls, so two concurrent requests can both
pass the check before either commits.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from pendulum import DateTime

from ..domain.conflict_checker import BookingConflictChecker
from ..domain.exceptions import CarWashError, ConflictError, NotFoundError
from ..domain.models import Booking, Customer, Service, TimeRange, Timeslot, validate_interval
from ..domain.result import Err, Ok, Result
from .catalog import CatalogService
from .customers import CustomerService
from .storage import BookingStorage
from .timeslots import TimeslotService

logger = logging.getLogger(__name__)

UNAVAILABLE_REASON = "Time slot is not available"


class BookingService:
    """
    Creates, moves, reads and deletes bookings.

    Create runs Validate -> CheckConflict -> ResolveCustomer -> ResolveService
    -> Persist and stops at the first failing step.
    """

    def __init__(
        self,
        bookings: BookingStorage,
        conflict_checker: BookingConflictChecker,
        customer_service: CustomerService,
        catalog_service: CatalogService,
        timeslot_service: Optional[TimeslotService] = None,
    ) -> None:
        self._bookings = bookings
        self._conflict_checker = conflict_checker
        self._customers = customer_service
        self._catalog = catalog_service
        self._timeslots = timeslot_service

    def create_booking(
        self,
        customer_id: int,
        service_id: int,
        start_time: DateTime,
        end_time: DateTime,
    ) -> Result[Booking]:
        """
        Reserve [start_time, end_time) for a customer and service.

        Returns:
            Ok(booking) with the generated id, or Err carrying a
            ValidationError, ConflictError, NotFoundError or StorageError
        """
        logger.info("Creating booking %s - %s", start_time, end_time)

        try:
            interval = validate_interval(start_time, end_time)

            if not self._conflict_checker.is_available(interval.start, interval.end, service_id=service_id):
                return self._conflict(interval, service_id=service_id)

            customer = self._customers.get_customer(customer_id)
            service = self._catalog.get_service(service_id)

            booking = self._bookings.save(
                Booking(
                    customer_id=customer.id,
                    service_id=service.id,
                    start_time=interval.start,
                    end_time=interval.end,
                )
            )
        except CarWashError as exc:
            logger.warning("Booking rejected: %s", exc)
            return Err(exc)

        logger.info("Booking %s created for %s", booking.id, interval)
        return Ok(booking)

    def update_booking(
        self,
        booking_id: int,
        start_time: DateTime,
        end_time: DateTime,
    ) -> Result[Booking]:
        """
        Move an existing booking to a new interval.

        The booking itself is excluded from the conflict check, so keeping the
        current interval always succeeds. Customer and service stay unchanged.
        """
        logger.info("Updating booking %s to %s - %s", booking_id, start_time, end_time)

        try:
            interval = validate_interval(start_time, end_time)

            existing = self._bookings.find_by_id(booking_id)
            if existing is None:
                raise NotFoundError("booking", booking_id)

            if not self._conflict_checker.is_available(
                interval.start,
                interval.end,
                exclude_booking_id=booking_id,
                service_id=existing.service_id,
            ):
                return self._conflict(
                    interval,
                    exclude_booking_id=booking_id,
                    service_id=existing.service_id,
                )

            updated = self._bookings.save(existing.with_interval(interval))
        except CarWashError as exc:
            logger.warning("Booking update rejected: %s", exc)
            return Err(exc)

        logger.info("Booking %s moved to %s", booking_id, interval)
        return Ok(updated)

    def get_booking(self, booking_id: int) -> Optional[Booking]:
        logger.info("Looking up booking %s", booking_id)
        return self._bookings.find_by_id(booking_id)

    def delete_booking(self, booking_id: int) -> None:
        """Delete a booking. Unknown ids are ignored."""
        logger.info("Deleting booking %s", booking_id)
        self._bookings.delete_by_id(booking_id)

    def list_bookings(self) -> List[Booking]:
        logger.info("Listing all bookings")
        return self._bookings.find_all()

    def list_services(self) -> List[Service]:
        return self._catalog.list_services()

    def list_customers(self) -> List[Customer]:
        return self._customers.list_customers()

    def find_conflicts(
        self,
        start_time: DateTime,
        end_time: DateTime,
        service_id: Optional[int] = None,
    ) -> List[Booking]:
        """Bookings that would block a new booking over [start_time, end_time)."""
        return self._conflict_checker.find_conflicts(start_time, end_time, service_id=service_id)

    def get_available_timeslots(self, service_id: int) -> Result[List[Timeslot]]:
        """Open timeslots advertised for a service."""
        if self._timeslots is None:
            raise RuntimeError("BookingService was built without a TimeslotService")
        try:
            return Ok(self._timeslots.available_for_service(service_id))
        except CarWashError as exc:
            return Err(exc)

    def _conflict(
        self,
        interval: TimeRange,
        exclude_booking_id: Optional[int] = None,
        service_id: Optional[int] = None,
    ) -> Err:
        conflicts = self._conflict_checker.find_conflicts(
            interval.start,
            interval.end,
            exclude_booking_id=exclude_booking_id,
            service_id=service_id,
        )
        ids = [booking.id for booking in conflicts]
        logger.warning("%s: %s overlaps bookings %s", UNAVAILABLE_REASON, interval, ids)
        return Err(ConflictError(UNAVAILABLE_REASON, ids))
