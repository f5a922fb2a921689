"""
Service catalog: the washing services a customer can book.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..domain.exceptions import ConflictError, NotFoundError, ValidationError
from ..domain.models import Service
from .storage import ServiceStorage

logger = logging.getLogger(__name__)


class CatalogService:
    """CRUD for services. Names are unique and prices strictly positive."""

    def __init__(self, services: ServiceStorage) -> None:
        self._services = services

    def get_service(self, service_id: int) -> Service:
        """
        Fetch a service by id.

        Raises:
            NotFoundError: If no service has this id
        """
        logger.info("Looking up service %s", service_id)
        service = self._services.find_by_id(service_id)
        if service is None:
            logger.warning("Service %s not found", service_id)
            raise NotFoundError("service", service_id)
        return service

    def list_services(self) -> List[Service]:
        logger.info("Listing all services")
        return self._services.find_all()

    def add_service(self, name: str, price: float) -> Service:
        name = self._validate(name, price)
        self._ensure_name_free(name)

        logger.info("Adding service %s at %.2f", name, price)
        return self._services.save(Service(name=name, price=price))

    def update_service(self, service_id: int, name: str, price: float) -> Service:
        logger.info("Updating service %s", service_id)
        name = self._validate(name, price)
        service = self.get_service(service_id)
        self._ensure_name_free(name, keep_id=service_id)

        service.name = name
        service.price = price
        return self._services.save(service)

    def delete_service(self, service_id: int) -> None:
        logger.info("Deleting service %s", service_id)
        if not self._services.exists_by_id(service_id):
            logger.warning("Service %s not found, nothing deleted", service_id)
            raise NotFoundError("service", service_id)
        self._services.delete_by_id(service_id)

    @staticmethod
    def _validate(name: str, price: float) -> str:
        if name is None or not name.strip():
            raise ValidationError("name", "must not be blank")
        if price is None or price <= 0:
            raise ValidationError("price", "must be a positive value")
        return name.strip()

    def _ensure_name_free(self, name: str, keep_id: Optional[int] = None) -> None:
        existing = self._services.find_by_name(name)
        if existing is not None and existing.id != keep_id:
            raise ConflictError(f"Service name already in use: {name}", [existing.id])
