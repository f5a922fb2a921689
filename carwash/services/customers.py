"""
Customer management and lookup.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import pendulum
from pendulum import DateTime

from ..domain.exceptions import NotFoundError, ValidationError
from ..domain.models import Customer
from .storage import BookingStorage, CustomerStorage

logger = logging.getLogger(__name__)


def _require_text(field: str, value: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(field, "must not be blank")
    return value.strip()


class CustomerService:
    """CRUD for customers plus the point lookup used when booking."""

    def __init__(self, customers: CustomerStorage, bookings: BookingStorage) -> None:
        self._customers = customers
        self._bookings = bookings

    def get_customer(self, customer_id: int) -> Customer:
        """
        Fetch a customer by id.

        Raises:
            NotFoundError: If no customer has this id
        """
        logger.info("Looking up customer %s", customer_id)
        customer = self._customers.find_by_id(customer_id)
        if customer is None:
            raise NotFoundError("customer", customer_id)
        return customer

    def get_customer_by_phone(self, phone_number: str) -> Customer:
        logger.info("Looking up customer by phone number %s", phone_number)
        customer = self._customers.find_by_phone_number(phone_number)
        if customer is None:
            raise NotFoundError("customer", phone_number)
        return customer

    def list_customers(self) -> List[Customer]:
        logger.info("Listing all customers")
        return self._customers.find_all()

    def create_customer(self, name: str, phone_number: str) -> Customer:
        customer = Customer(
            name=_require_text("name", name),
            phone_number=_require_text("phone_number", phone_number),
        )
        logger.info("Creating customer %s", customer.name)
        return self._customers.save(customer)

    def update_customer(self, customer_id: int, name: str, phone_number: str) -> Customer:
        logger.info("Updating customer %s", customer_id)
        name = _require_text("name", name)
        phone_number = _require_text("phone_number", phone_number)

        customer = self.get_customer(customer_id)
        customer.name = name
        customer.phone_number = phone_number
        return self._customers.save(customer)

    def delete_customer(self, customer_id: int) -> None:
        logger.info("Deleting customer %s", customer_id)
        self._customers.delete_by_id(customer_id)

    def minutes_until_next_booking(
        self,
        customer_id: int,
        now: Optional[DateTime] = None,
    ) -> Optional[int]:
        """
        Minutes from ``now`` until the customer's next booking starts.

        Only bookings starting strictly after ``now`` count. Returns None when
        the customer has no upcoming booking.
        """
        now = now or pendulum.now("UTC")
        upcoming = [
            booking.start_time
            for booking in self._bookings.find_by_customer_id(customer_id)
            if booking.start_time > now
        ]
        if not upcoming:
            return None
        return int((min(upcoming) - now).total_seconds() // 60)

    def minutes_until_next_booking_by_phone(
        self,
        phone_number: str,
        now: Optional[DateTime] = None,
    ) -> Optional[int]:
        customer = self.get_customer_by_phone(phone_number)
        return self.minutes_until_next_booking(customer.id, now=now)
