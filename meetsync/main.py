import logging

# set up root logging before importing modules that create loggers
logging.basicConfig(
    level=logging.INFO,
    format="[%(asctime)s] [%(levelname)s] [%(name)s] %(message)s",
)
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from meetsync.config import get_settings
from meetsync.controllers.events import router as events_router
from meetsync.controllers.health import router as health_router
from meetsync.errors import register_exception_handlers
from meetsync.lifespan import cleanup_resources, setup_resources
from meetsync.middleware import HTTPLogMiddleware


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    resources = await setup_resources()
    app.state.event_service = resources.service
    try:
        yield
    finally:
        app.state.event_service = None
        await cleanup_resources(resources)


settings = get_settings()

app = FastAPI(title="MeetSync API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors.origins,
    allow_origin_regex=settings.cors.origins_regex or None,
    allow_credentials=settings.cors.allow_credentials,
    allow_methods=["*"],
    allow_headers=["*"],
)

if settings.debug.request:
    logging.getLogger("meetsync.http").setLevel(logging.DEBUG)
    app.add_middleware(HTTPLogMiddleware)

register_exception_handlers(app)

app.include_router(health_router)
app.include_router(events_router)
