"""
Shared fixtures: both storage backends and a wired service bundle.
"""

import pendulum
import pytest

from carwash.adapters.memory_storage import MemoryStorage
from carwash.adapters.sql_storage import SqlStorage
from carwash.services.factory import build_services


def at(hhmm: str, day: str = "2024-11-25"):
    """Berlin-local DateTime on ``day`` at ``hhmm``."""
    return pendulum.parse(f"{day} {hhmm}", tz="Europe/Berlin")


def _sql_storage() -> SqlStorage:
    storage = SqlStorage("sqlite://")
    storage.create_schema()
    return storage


@pytest.fixture(params=["memory", "sql"])
def storage(request):
    """Every storage backend, so behaviour is checked against each."""
    if request.param == "memory":
        return MemoryStorage()
    return _sql_storage()


@pytest.fixture
def services(storage):
    return build_services(storage)


@pytest.fixture
def customer(services):
    return services.customers.create_customer("Anna Schmidt", "+49 151 0000001")


@pytest.fixture
def wash(services):
    return services.catalog.add_service("Premium Wash", 29.9)
