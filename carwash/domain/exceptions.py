"""
Domain-specific exception hierarchy for the car-wash booking backend.

Every error carries the status code the boundary layer reports for it.
"""

from __future__ import annotations

from typing import Iterable, Tuple


class CarWashError(Exception):
    """Base class for all application-level errors."""

    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class NotFoundError(CarWashError):
    """Raised when a customer, service, timeslot or booking does not exist."""

    status_code = 404

    def __init__(self, kind: str, entity_id: object):
        self.kind = kind
        self.entity_id = entity_id
        super().__init__(f"{kind.capitalize()} not found with id: {entity_id}")


class ConflictError(CarWashError):
    """Raised when a requested time interval or name is already taken."""

    status_code = 409

    def __init__(self, reason: str, conflicting_ids: Iterable[int] = ()):
        self.reason = reason
        self.conflicting_ids: Tuple[int, ...] = tuple(conflicting_ids)
        super().__init__(reason)


class ValidationError(CarWashError):
    """Raised when request data breaks a field constraint."""

    status_code = 400

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")


class StorageError(CarWashError):
    """Raised when the storage backend fails. The driver error is chained as __cause__."""
