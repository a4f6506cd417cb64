"""Database schema management.

Tables are created with IF NOT EXISTS, so this can run on every startup.
"""

import logging

from meetsync.db.core import _get_connection

logger = logging.getLogger(__name__)

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS meetsync_events (
    id TEXT PRIMARY KEY,
    title TEXT NOT NULL,
    description TEXT NOT NULL DEFAULT '',
    start_time TIMESTAMPTZ NOT NULL,
    end_time TIMESTAMPTZ NOT NULL,
    created_by TEXT NOT NULL,
    participants JSONB NOT NULL,
    time_slots JSONB NOT NULL,
    best_time JSONB,
    created_at TIMESTAMPTZ NOT NULL,
    updated_at TIMESTAMPTZ NOT NULL
);
CREATE TABLE IF NOT EXISTS meetsync_availabilities (
    id BIGSERIAL PRIMARY KEY,
    event_id TEXT NOT NULL REFERENCES meetsync_events(id) ON DELETE CASCADE,
    user_id TEXT NOT NULL,
    position INTEGER NOT NULL,
    responses JSONB NOT NULL,
    UNIQUE (event_id, user_id)
);
CREATE INDEX IF NOT EXISTS idx_meetsync_avail_event ON meetsync_availabilities (event_id, position);
"""


async def _ensure_schema() -> None:
    async with _get_connection() as conn:
        await conn.execute(SCHEMA_SQL)
    logger.info("Event schema ensured")
