"""
Advertised timeslots per service.
"""

from __future__ import annotations

import logging
from typing import List

from pendulum import DateTime

from ..domain.exceptions import NotFoundError
from ..domain.models import Timeslot, validate_interval
from .catalog import CatalogService
from .storage import TimeslotStorage

logger = logging.getLogger(__name__)


class TimeslotService:
    """
    CRUD for timeslots.

    A timeslot always belongs to an existing service; the service is resolved
    through the catalog before anything is written.
    """

    def __init__(self, timeslots: TimeslotStorage, catalog: CatalogService) -> None:
        self._timeslots = timeslots
        self._catalog = catalog

    def get_timeslot(self, timeslot_id: int) -> Timeslot:
        logger.info("Looking up timeslot %s", timeslot_id)
        timeslot = self._timeslots.find_by_id(timeslot_id)
        if timeslot is None:
            logger.warning("Timeslot %s not found", timeslot_id)
            raise NotFoundError("timeslot", timeslot_id)
        return timeslot

    def list_timeslots(self) -> List[Timeslot]:
        logger.info("Listing all timeslots")
        return self._timeslots.find_all()

    def add_timeslot(
        self,
        service_id: int,
        start_time: DateTime,
        end_time: DateTime,
        available: bool = True,
    ) -> Timeslot:
        interval = validate_interval(start_time, end_time)
        service = self._catalog.get_service(service_id)

        logger.info("Adding timeslot %s for service %s", interval, service.name)
        return self._timeslots.save(
            Timeslot(
                service_id=service.id,
                start_time=start_time,
                end_time=end_time,
                available=available,
            )
        )

    def update_timeslot(
        self,
        timeslot_id: int,
        service_id: int,
        start_time: DateTime,
        end_time: DateTime,
        available: bool,
    ) -> Timeslot:
        logger.info("Updating timeslot %s", timeslot_id)
        validate_interval(start_time, end_time)
        timeslot = self.get_timeslot(timeslot_id)
        service = self._catalog.get_service(service_id)

        timeslot.service_id = service.id
        timeslot.start_time = start_time
        timeslot.end_time = end_time
        timeslot.available = available
        return self._timeslots.save(timeslot)

    def delete_timeslot(self, timeslot_id: int) -> None:
        logger.info("Deleting timeslot %s", timeslot_id)
        if not self._timeslots.exists_by_id(timeslot_id):
            logger.warning("Timeslot %s not found, nothing deleted", timeslot_id)
            raise NotFoundError("timeslot", timeslot_id)
        self._timeslots.delete_by_id(timeslot_id)

    def available_for_service(self, service_id: int) -> List[Timeslot]:
        """Open timeslots of a service, earliest first."""
        service = self._catalog.get_service(service_id)
        logger.info("Listing available timeslots for service %s", service.name)
        slots = [slot for slot in self._timeslots.find_by_service_id(service.id) if slot.available]
        return sorted(slots, key=lambda slot: slot.start_time)
