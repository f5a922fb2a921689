"""
Domain layer - Pure business logic without external dependencies.
"""

from .conflict_checker import BookingConflictChecker, OverlapScope
from .exceptions import CarWashError, ConflictError, NotFoundError, StorageError, ValidationError
from .models import Booking, Customer, Service, Timeslot, TimeRange
from .result import Err, Ok, Result

__all__ = [
    "Booking",
    "BookingConflictChecker",
    "CarWashError",
    "ConflictError",
    "Customer",
    "Err",
    "NotFoundError",
    "Ok",
    "OverlapScope",
    "Result",
    "Service",
    "StorageError",
    "TimeRange",
    "Timeslot",
    "ValidationError",
]
