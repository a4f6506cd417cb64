"""PostgreSQL event store.

Events live in ``meetsync_events``; each user's availability record is a row
in ``meetsync_availabilities`` whose ``position`` keeps submission order.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import psycopg
from psycopg import errors as pg_errors
from psycopg.types.json import Json

from meetsync.db.base import EventStore
from meetsync.db.core import _get_connection, close_pool
from meetsync.errors import ConflictError, DatabaseError
from meetsync.models.events import Availability, Event

logger = logging.getLogger(__name__)

EVENT_COLUMNS = (
    "id, title, description, start_time, end_time, created_by, "
    "participants, time_slots, best_time, created_at, updated_at"
)


@contextmanager
def _db_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except pg_errors.UniqueViolation as e:
        raise ConflictError(detail="Event ID already in use") from e
    except psycopg.Error as e:
        logger.exception("Postgres %s failed", operation)
        raise DatabaseError(detail=f"Event store {operation} failed", backend="postgres") from e


def _row_to_event(row: tuple, availability: list[Availability]) -> Event:
    return Event(
        id=row[0],
        title=row[1],
        description=row[2],
        start_time=row[3],
        end_time=row[4],
        created_by=row[5],
        participants=row[6],
        time_slots=row[7],
        best_time=row[8],
        created_at=row[9],
        updated_at=row[10],
        availability=availability,
    )


def _row_to_availability(row: tuple) -> Availability:
    return Availability(user_id=row[0], responses=row[1])


def _event_params(event: Event) -> dict[str, Any]:
    data = event.model_dump(mode="json", include={"participants", "time_slots", "best_time"})
    return {
        "id": event.id,
        "title": event.title,
        "description": event.description,
        "start_time": event.start_time,
        "end_time": event.end_time,
        "created_by": event.created_by,
        "participants": Json(data["participants"]),
        "time_slots": Json(data["time_slots"]),
        "best_time": Json(data["best_time"]) if event.best_time is not None else None,
        "created_at": event.created_at,
        "updated_at": event.updated_at,
    }


async def _insert_availability(conn: psycopg.AsyncConnection, event: Event) -> None:
    for position, record in enumerate(event.availability):
        await conn.execute(
            """INSERT INTO meetsync_availabilities (event_id, user_id, position, responses)
               VALUES (%s, %s, %s, %s)""",
            (event.id, record.user_id, position, Json(record.model_dump(mode="json")["responses"])),
        )


class PostgresEventStore(EventStore):
    async def create(self, event: Event) -> Event:
        with _db_errors("create"):
            async with _get_connection() as conn:
                async with conn.transaction():
                    await conn.execute(
                        f"""INSERT INTO meetsync_events ({EVENT_COLUMNS})
                            VALUES (%(id)s, %(title)s, %(description)s, %(start_time)s, %(end_time)s,
                                    %(created_by)s, %(participants)s, %(time_slots)s, %(best_time)s,
                                    %(created_at)s, %(updated_at)s)""",
                        _event_params(event),
                    )
                    await _insert_availability(conn, event)
        return event

    async def get(self, event_id: str) -> Event | None:
        with _db_errors("get"):
            async with _get_connection() as conn:
                row = await (
                    await conn.execute(
                        f"SELECT {EVENT_COLUMNS} FROM meetsync_events WHERE id = %s",
                        (event_id,),
                    )
                ).fetchone()
                if not row:
                    return None
                rows = await (
                    await conn.execute(
                        "SELECT user_id, responses FROM meetsync_availabilities WHERE event_id = %s ORDER BY position",
                        (event_id,),
                    )
                ).fetchall()
        return _row_to_event(row, [_row_to_availability(r) for r in rows])

    async def update(self, event: Event) -> bool:
        with _db_errors("update"):
            async with _get_connection() as conn:
                async with conn.transaction():
                    cur = await conn.execute(
                        """UPDATE meetsync_events
                           SET title = %(title)s, description = %(description)s,
                               start_time = %(start_time)s, end_time = %(end_time)s,
                               created_by = %(created_by)s, participants = %(participants)s,
                               time_slots = %(time_slots)s, best_time = %(best_time)s,
                               updated_at = %(updated_at)s
                           WHERE id = %(id)s""",
                        _event_params(event),
                    )
                    if cur.rowcount == 0:
                        return False
                    await conn.execute(
                        "DELETE FROM meetsync_availabilities WHERE event_id = %s",
                        (event.id,),
                    )
                    await _insert_availability(conn, event)
        return True

    async def delete(self, event_id: str) -> bool:
        with _db_errors("delete"):
            async with _get_connection() as conn:
                cur = await conn.execute("DELETE FROM meetsync_events WHERE id = %s", (event_id,))
                return cur.rowcount > 0

    async def list_events(self) -> list[Event]:
        with _db_errors("list"):
            async with _get_connection() as conn:
                event_rows = await (
                    await conn.execute(f"SELECT {EVENT_COLUMNS} FROM meetsync_events ORDER BY created_at")
                ).fetchall()
                avail_rows = await (
                    await conn.execute(
                        "SELECT event_id, user_id, responses FROM meetsync_availabilities ORDER BY event_id, position"
                    )
                ).fetchall()
        by_event: dict[str, list[Availability]] = {}
        for row in avail_rows:
            by_event.setdefault(row[0], []).append(_row_to_availability(row[1:]))
        return [_row_to_event(row, by_event.get(row[0], [])) for row in event_rows]

    async def ping(self) -> bool:
        try:
            async with _get_connection() as conn:
                await conn.execute("SELECT 1")
            return True
        except psycopg.Error as e:
            logger.warning("Postgres ping failed: %s", e)
            return False

    async def close(self) -> None:
        await close_pool()
