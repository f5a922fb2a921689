"""
Service layer helpers that orchestrate storage and domain logic.
"""

from .bookings import BookingService
from .catalog import CatalogService
from .customers import CustomerService
from .factory import Services, build_services
from .storage import BookingStorage, CustomerStorage, ServiceStorage, StorageGateway, TimeslotStorage
from .timeslots import TimeslotService

__all__ = [
    "BookingService",
    "BookingStorage",
    "CatalogService",
    "CustomerService",
    "CustomerStorage",
    "ServiceStorage",
    "Services",
    "StorageGateway",
    "TimeslotService",
    "TimeslotStorage",
    "build_services",
]
