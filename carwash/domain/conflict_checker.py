"""
Booking conflict detection.

Decides whether a half-open interval [start, end) may become (or remain) a
booking. Two intervals overlap iff each starts before the other ends, so a
booking ending at 11:00 never blocks one starting at 11:00. The same test is
used whether or not a booking is being excluded.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import List, Optional, Protocol

from pendulum import DateTime

from .models import Booking

logger = logging.getLogger(__name__)


class OverlapScope(str, Enum):
    """Which bookings compete for the same time."""

    GLOBAL = "global"  # one wash bay for the whole business
    SERVICE = "service"  # one bay per service


class OverlapQueryProtocol(Protocol):
    """Storage queries the checker needs."""

    def count_overlapping(
        self,
        start: DateTime,
        end: DateTime,
        service_id: Optional[int] = None,
    ) -> int:
        """Count bookings with ``end > start and start < end``."""

    def count_overlapping_excluding(
        self,
        start: DateTime,
        end: DateTime,
        exclude_id: int,
        service_id: Optional[int] = None,
    ) -> int:
        """Same as ``count_overlapping`` but ignoring booking ``exclude_id``."""

    def find_overlapping(
        self,
        start: DateTime,
        end: DateTime,
        exclude_id: Optional[int] = None,
        service_id: Optional[int] = None,
    ) -> List[Booking]:
        """Return the overlapping bookings ordered by start time."""


class BookingConflictChecker:
    """
    Checks proposed intervals against committed bookings.

    The checker only answers yes or no; turning "not available" into a
    conflict error is the caller's job.
    """

    def __init__(
        self,
        storage: OverlapQueryProtocol,
        scope: OverlapScope = OverlapScope.GLOBAL,
    ) -> None:
        self._storage = storage
        self._scope = OverlapScope(scope)

    @property
    def scope(self) -> OverlapScope:
        return self._scope

    def is_available(
        self,
        start: DateTime,
        end: DateTime,
        exclude_booking_id: Optional[int] = None,
        service_id: Optional[int] = None,
    ) -> bool:
        """
        Return True iff no other booking overlaps [start, end).

        Args:
            start: Proposed start
            end: Proposed end (exclusive)
            exclude_booking_id: Booking to ignore, used when moving a booking
            service_id: Service of the proposed booking; only consulted when
                the scope is per service
        """
        scoped_service = self._scoped_service(service_id)

        if exclude_booking_id is None:
            count = self._storage.count_overlapping(start, end, service_id=scoped_service)
        else:
            count = self._storage.count_overlapping_excluding(
                start, end, exclude_booking_id, service_id=scoped_service
            )

        logger.debug(
            "Overlap check %s - %s (exclude=%s, service=%s): %d conflicting",
            start, end, exclude_booking_id, scoped_service, count,
        )
        return count == 0

    def find_conflicts(
        self,
        start: DateTime,
        end: DateTime,
        exclude_booking_id: Optional[int] = None,
        service_id: Optional[int] = None,
    ) -> List[Booking]:
        """Return the bookings that block [start, end)."""
        return self._storage.find_overlapping(
            start,
            end,
            exclude_id=exclude_booking_id,
            service_id=self._scoped_service(service_id),
        )

    def _scoped_service(self, service_id: Optional[int]) -> Optional[int]:
        if self._scope is OverlapScope.SERVICE:
            return service_id
        return None
