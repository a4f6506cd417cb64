"""Application startup and shutdown.

Builds the configured event store, wraps it in an EventService and releases
the backend's connections on shutdown.
"""

import logging
from dataclasses import dataclass

import redis.asyncio as redis
from redis.asyncio import BlockingConnectionPool as RedisConnectionPool

from meetsync.config import Settings, get_settings
from meetsync.db import core as db_core
from meetsync.db.base import EventStore
from meetsync.db.memory import InMemoryEventStore
from meetsync.db.postgres import PostgresEventStore
from meetsync.db.redis_store import RedisEventStore
from meetsync.service import EventService

logger = logging.getLogger(__name__)


@dataclass
class LifespanResources:
    """Container for resources initialized during lifespan."""

    store: EventStore | None = None
    service: EventService | None = None


async def init_redis() -> redis.Redis:
    """Initialize Redis connection with connection pool.

    Returns:
        Configured Redis client.
    """
    settings = get_settings()

    redis_pool = RedisConnectionPool(
        host=settings.redis.host,
        port=settings.redis.port,
        password=settings.redis.password if settings.redis.password else None,
        max_connections=settings.redis.max_connections,
        timeout=settings.redis.pool_timeout_sec,
        socket_timeout=settings.redis.socket_timeout,
        socket_connect_timeout=settings.redis.socket_connect_timeout,
        decode_responses=True,
    )
    return redis.Redis(connection_pool=redis_pool)


async def build_event_store(settings: Settings) -> EventStore:
    """Create the store selected by STORE_BACKEND."""
    backend = settings.store.backend
    if backend == "redis":
        client = await init_redis()
        return RedisEventStore(client, prefix=settings.store.redis_prefix)
    if backend == "postgres":
        await db_core.init_pool()
        return PostgresEventStore()
    return InMemoryEventStore()


async def setup_resources() -> LifespanResources:
    """Set up the event store and service."""
    settings = get_settings()
    resources = LifespanResources()
    resources.store = await build_event_store(settings)
    resources.service = EventService(
        resources.store,
        keep_stale_best_time=settings.aggregation.keep_stale_best_time,
    )
    logger.info(
        "Event store ready (backend=%s, keep_stale_best_time=%s)",
        settings.store.backend,
        settings.aggregation.keep_stale_best_time,
    )
    return resources


async def cleanup_resources(resources: LifespanResources) -> None:
    """Release store connections on shutdown."""
    if resources.store is not None:
        try:
            await resources.store.close()
        except Exception as e:
            logger.warning("Failed to close event store: %s", e)
    resources.store = None
    resources.service = None
