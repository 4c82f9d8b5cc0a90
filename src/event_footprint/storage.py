"""Database access for event footprints.

Reads attendee and activity rows for one event and writes the computed total
back to ``events.carbon_footprint``. Statements are built with SQLAlchemy Core,
so identifiers and values always travel as bound parameters.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import (
    Column,
    Float,
    Integer,
    MetaData,
    Table,
    Text,
    create_engine,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import InterfaceError, OperationalError, SQLAlchemyError

from .calculator import Activity, Attendee

LOGGER = logging.getLogger("event_footprint.storage")

metadata = MetaData()

events_table = Table(
    "events",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("carbon_footprint", Float, nullable=True),
)

attendees_table = Table(
    "attendees",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("event_id", Integer, nullable=False, index=True),
    Column("travel_mode", Text),
    Column("distance", Float),
)

activities_table = Table(
    "activities",
    metadata,
    Column("id", Integer, primary_key=True),
    Column("event_id", Integer, nullable=False, index=True),
    Column("activity_type", Text),
)


class DataAccessError(RuntimeError):
    """Base class for failures raised by the storage layer."""


class StorageConnectionError(DataAccessError):
    """The database could not be reached."""


class QueryError(DataAccessError):
    """A read statement was rejected or failed to execute."""


class WriteError(DataAccessError):
    """The footprint update was rejected."""


def _read_error(label: str, exc: SQLAlchemyError) -> DataAccessError:
    if isinstance(exc, (OperationalError, InterfaceError)) and exc.connection_invalidated:
        return StorageConnectionError(f"SELECT {label} failed: connection lost ({exc})")
    return QueryError(f"SELECT {label} failed: {exc}")


class EventFootprintStore:
    """Data-access collaborator bound to a SQLAlchemy engine."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def _read_rows(self, stmt, label: str) -> list:
        try:
            conn = self.engine.connect()
        except SQLAlchemyError as exc:
            raise StorageConnectionError(f"SELECT {label} failed: cannot connect ({exc})") from exc
        with conn:
            try:
                return conn.execute(stmt).all()
            except SQLAlchemyError as exc:
                raise _read_error(label, exc) from exc

    def fetch_attendees(self, event_id: int) -> list[Attendee]:
        stmt = (
            select(
                attendees_table.c.id,
                attendees_table.c.travel_mode,
                attendees_table.c.distance,
            )
            .where(attendees_table.c.event_id == event_id)
            .order_by(attendees_table.c.id)
        )
        rows = self._read_rows(stmt, "attendees")
        attendees = [
            Attendee(
                id=int(row.id),
                travel_mode=row.travel_mode if row.travel_mode is not None else "",
                distance=float(row.distance) if row.distance is not None else 0.0,
            )
            for row in rows
        ]
        LOGGER.info("Fetched %d attendees for event %s", len(attendees), event_id)
        return attendees

    def fetch_activities(self, event_id: int) -> list[Activity]:
        stmt = (
            select(activities_table.c.id, activities_table.c.activity_type)
            .where(activities_table.c.event_id == event_id)
            .order_by(activities_table.c.id)
        )
        rows = self._read_rows(stmt, "activities")
        activities = [
            Activity(
                id=int(row.id),
                activity_type=row.activity_type if row.activity_type is not None else "",
            )
            for row in rows
        ]
        LOGGER.info("Fetched %d activities for event %s", len(activities), event_id)
        return activities

    def persist_event_footprint(self, event_id: int, total: float) -> bool:
        """Overwrite the stored footprint; return False when no event row matched."""
        stmt = (
            update(events_table)
            .where(events_table.c.id == event_id)
            .values(carbon_footprint=float(total))
        )
        try:
            with self.engine.begin() as conn:
                result = conn.execute(stmt)
        except SQLAlchemyError as exc:
            raise WriteError(f"UPDATE event failed: {exc}") from exc
        if result.rowcount == 0:
            LOGGER.warning("No event with id %s; footprint %.4f not stored", event_id, total)
            return False
        return True


def create_schema(engine: Engine) -> None:
    """Create the events/attendees/activities tables when they do not exist."""
    metadata.create_all(engine)


@contextmanager
def open_store(database_url: str, **engine_kwargs) -> Iterator[EventFootprintStore]:
    """Yield a store for ``database_url`` and dispose of the engine afterwards."""
    try:
        engine = create_engine(database_url, **engine_kwargs)
    except (SQLAlchemyError, ImportError) as exc:
        raise StorageConnectionError(f"Connection to database failed: {exc}") from exc
    try:
        try:
            with engine.connect():
                pass
        except SQLAlchemyError as exc:
            raise StorageConnectionError(f"Connection to database failed: {exc}") from exc
        yield EventFootprintStore(engine)
    finally:
        engine.dispose()
