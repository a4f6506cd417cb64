"""Redis event store: one JSON document per event plus an ID index set."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

import redis.asyncio as redis
from redis.exceptions import RedisError

from meetsync.db.base import EventStore
from meetsync.errors import ConflictError, DatabaseError
from meetsync.models.events import Event

logger = logging.getLogger(__name__)


@contextmanager
def _redis_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except RedisError as e:
        logger.exception("Redis %s failed", operation)
        raise DatabaseError(detail=f"Event store {operation} failed", backend="redis") from e


class RedisEventStore(EventStore):
    def __init__(self, client: redis.Redis, prefix: str = "meetsync:event:") -> None:
        self._redis = client
        self._prefix = prefix
        # "_" never appears in generated event IDs
        self._index_key = f"{prefix}_index"

    def _key(self, event_id: str) -> str:
        return f"{self._prefix}{event_id}"

    async def create(self, event: Event) -> Event:
        with _redis_errors("create"):
            created = await self._redis.set(self._key(event.id), event.model_dump_json(), nx=True)
            if not created:
                raise ConflictError(detail="Event ID already in use", event_id=event.id)
            await self._redis.sadd(self._index_key, event.id)
        return event

    async def get(self, event_id: str) -> Event | None:
        with _redis_errors("get"):
            raw = await self._redis.get(self._key(event_id))
        if raw is None:
            return None
        return Event.model_validate_json(raw)

    async def update(self, event: Event) -> bool:
        with _redis_errors("update"):
            updated = await self._redis.set(self._key(event.id), event.model_dump_json(), xx=True)
        return bool(updated)

    async def delete(self, event_id: str) -> bool:
        with _redis_errors("delete"):
            removed = await self._redis.delete(self._key(event_id))
            await self._redis.srem(self._index_key, event_id)
        return removed > 0

    async def list_events(self) -> list[Event]:
        with _redis_errors("list"):
            ids = await self._redis.smembers(self._index_key)
            if not ids:
                return []
            raws = await self._redis.mget([self._key(i) for i in ids])
        events = [Event.model_validate_json(raw) for raw in raws if raw is not None]
        events.sort(key=lambda e: e.created_at)
        return events

    async def ping(self) -> bool:
        try:
            return bool(await self._redis.ping())
        except RedisError as e:
            logger.warning("Redis ping failed: %s", e)
            return False

    async def close(self) -> None:
        aclose = getattr(self._redis, "aclose", None)
        if callable(aclose):
            await aclose()
