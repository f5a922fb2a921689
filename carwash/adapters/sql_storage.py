"""
SQLAlchemy storage for customers, services, timeslots and bookings.

Timestamps are stored as naive UTC and come back as pendulum DateTimes in UTC.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, List, Optional

import pendulum
from pendulum import DateTime
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime as SQLDateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    create_engine,
    func,
    select,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from ..domain.exceptions import StorageError
from ..domain.models import Booking, Customer, Service, Timeslot

logger = logging.getLogger(__name__)

Base = declarative_base()


class CustomerRow(Base):
    __tablename__ = "customers"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    phone_number = Column(String(64), nullable=False, index=True)


class ServiceRow(Base):
    __tablename__ = "services"
    __table_args__ = (CheckConstraint("price > 0", name="ck_services_price_positive"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    price = Column(Float, nullable=False)


class TimeslotRow(Base):
    __tablename__ = "timeslots"
    __table_args__ = (CheckConstraint("start_time < end_time", name="ck_timeslots_interval"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False, index=True)
    start_time = Column(SQLDateTime, nullable=False)
    end_time = Column(SQLDateTime, nullable=False)
    available = Column(Boolean, nullable=False, default=True)


class BookingRow(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_bookings_interval"),
        Index("ix_bookings_interval", "start_time", "end_time"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    customer_id = Column(Integer, ForeignKey("customers.id"), nullable=False, index=True)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False, index=True)
    start_time = Column(SQLDateTime, nullable=False)
    end_time = Column(SQLDateTime, nullable=False)


def _to_db(value: DateTime) -> datetime:
    return pendulum.instance(value).in_timezone("UTC").naive()


def _from_db(value: datetime) -> DateTime:
    return pendulum.instance(value, tz="UTC")


def create_db_engine(database_url: str) -> Engine:
    """Create an engine; in-memory SQLite shares one connection across sessions."""
    if database_url in ("sqlite://", "sqlite:///:memory:"):
        return create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(database_url)


class _SqlTable:
    """Common CRUD over one mapped table."""

    row_type: Any = None

    def __init__(self, session_factory: sessionmaker) -> None:
        self._session_factory = session_factory

    @contextmanager
    def _session(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error("%s storage failure: %s", self.row_type.__tablename__, exc)
            raise StorageError(f"Storage operation failed: {exc}") from exc
        finally:
            session.close()

    def _to_domain(self, row: Any) -> Any:
        raise NotImplementedError

    def _apply(self, row: Any, entity: Any) -> None:
        raise NotImplementedError

    def save(self, entity: Any) -> Any:
        with self._session() as session:
            row = session.get(self.row_type, entity.id) if entity.id is not None else None
            if row is None:
                row = self.row_type(id=entity.id)
                session.add(row)
            self._apply(row, entity)
            session.flush()
            return self._to_domain(row)

    def find_by_id(self, entity_id: int) -> Optional[Any]:
        with self._session() as session:
            row = session.get(self.row_type, entity_id)
            return self._to_domain(row) if row is not None else None

    def find_all(self) -> List[Any]:
        return self._select(select(self.row_type).order_by(self.row_type.id))

    def exists_by_id(self, entity_id: int) -> bool:
        with self._session() as session:
            return session.get(self.row_type, entity_id) is not None

    def delete_by_id(self, entity_id: int) -> None:
        with self._session() as session:
            row = session.get(self.row_type, entity_id)
            if row is not None:
                session.delete(row)

    def _select(self, statement: Any) -> List[Any]:
        with self._session() as session:
            return [self._to_domain(row) for row in session.scalars(statement)]


class SqlCustomerStorage(_SqlTable):
    row_type = CustomerRow

    def _to_domain(self, row: CustomerRow) -> Customer:
        return Customer(id=row.id, name=row.name, phone_number=row.phone_number)

    def _apply(self, row: CustomerRow, entity: Customer) -> None:
        row.name = entity.name
        row.phone_number = entity.phone_number

    def find_by_phone_number(self, phone_number: str) -> Optional[Customer]:
        matches = self._select(
            select(CustomerRow).where(CustomerRow.phone_number == phone_number).order_by(CustomerRow.id)
        )
        return matches[0] if matches else None


class SqlServiceStorage(_SqlTable):
    row_type = ServiceRow

    def _to_domain(self, row: ServiceRow) -> Service:
        return Service(id=row.id, name=row.name, price=row.price)

    def _apply(self, row: ServiceRow, entity: Service) -> None:
        row.name = entity.name
        row.price = entity.price

    def find_by_name(self, name: str) -> Optional[Service]:
        matches = self._select(select(ServiceRow).where(ServiceRow.name == name))
        return matches[0] if matches else None


class SqlTimeslotStorage(_SqlTable):
    row_type = TimeslotRow

    def _to_domain(self, row: TimeslotRow) -> Timeslot:
        return Timeslot(
            id=row.id,
            service_id=row.service_id,
            start_time=_from_db(row.start_time),
            end_time=_from_db(row.end_time),
            available=row.available,
        )

    def _apply(self, row: TimeslotRow, entity: Timeslot) -> None:
        row.service_id = entity.service_id
        row.start_time = _to_db(entity.start_time)
        row.end_time = _to_db(entity.end_time)
        row.available = entity.available

    def find_by_service_id(self, service_id: int) -> List[Timeslot]:
        return self._select(
            select(TimeslotRow).where(TimeslotRow.service_id == service_id).order_by(TimeslotRow.id)
        )


class SqlBookingStorage(_SqlTable):
    row_type = BookingRow

    def _to_domain(self, row: BookingRow) -> Booking:
        return Booking(
            id=row.id,
            customer_id=row.customer_id,
            service_id=row.service_id,
            start_time=_from_db(row.start_time),
            end_time=_from_db(row.end_time),
        )

    def _apply(self, row: BookingRow, entity: Booking) -> None:
        row.customer_id = entity.customer_id
        row.service_id = entity.service_id
        row.start_time = _to_db(entity.start_time)
        row.end_time = _to_db(entity.end_time)

    def find_by_customer_id(self, customer_id: int) -> List[Booking]:
        return self._select(
            select(BookingRow).where(BookingRow.customer_id == customer_id).order_by(BookingRow.start_time)
        )

    @staticmethod
    def _overlap_filters(
        start: DateTime,
        end: DateTime,
        exclude_id: Optional[int],
        service_id: Optional[int],
    ) -> list:
        filters = [
            BookingRow.end_time > _to_db(start),
            BookingRow.start_time < _to_db(end),
        ]
        if exclude_id is not None:
            filters.append(BookingRow.id != exclude_id)
        if service_id is not None:
            filters.append(BookingRow.service_id == service_id)
        return filters

    def find_overlapping(
        self,
        start: DateTime,
        end: DateTime,
        exclude_id: Optional[int] = None,
        service_id: Optional[int] = None,
    ) -> List[Booking]:
        return self._select(
            select(BookingRow)
            .where(*self._overlap_filters(start, end, exclude_id, service_id))
            .order_by(BookingRow.start_time)
        )

    def _count(self, filters: list) -> int:
        with self._session() as session:
            return session.scalar(select(func.count()).select_from(BookingRow).where(*filters)) or 0

    def count_overlapping(
        self,
        start: DateTime,
        end: DateTime,
        service_id: Optional[int] = None,
    ) -> int:
        return self._count(self._overlap_filters(start, end, None, service_id))

    def count_overlapping_excluding(
        self,
        start: DateTime,
        end: DateTime,
        exclude_id: int,
        service_id: Optional[int] = None,
    ) -> int:
        return self._count(self._overlap_filters(start, end, exclude_id, service_id))


class SqlStorage:
    """
    Storage gateway backed by a relational database.

    Each call opens its own session and commits before returning.
    """

    def __init__(self, database_url: str = "sqlite://", engine: Optional[Engine] = None) -> None:
        self.engine = engine or create_db_engine(database_url)
        session_factory = sessionmaker(bind=self.engine, autoflush=False, expire_on_commit=False)

        self.customers = SqlCustomerStorage(session_factory)
        self.services = SqlServiceStorage(session_factory)
        self.timeslots = SqlTimeslotStorage(session_factory)
        self.bookings = SqlBookingStorage(session_factory)

    def create_schema(self) -> None:
        """Create missing tables."""
        logger.info("Ensuring database schema on %s", self.engine.url)
        try:
            Base.metadata.create_all(self.engine)
        except SQLAlchemyError as exc:
            raise StorageError(f"Could not create schema: {exc}") from exc
