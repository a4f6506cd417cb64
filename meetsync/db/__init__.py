from meetsync.db.base import EventStore
from meetsync.db.memory import InMemoryEventStore
from meetsync.db.postgres import PostgresEventStore
from meetsync.db.redis_store import RedisEventStore

__all__ = [
    "EventStore",
    "InMemoryEventStore",
    "PostgresEventStore",
    "RedisEventStore",
]
