from fastapi import APIRouter

from meetsync.dependencies import OptionalEvents

router = APIRouter()


@router.get("/health")
async def health(events: OptionalEvents) -> dict[str, str]:
    store_status = "unavailable"
    if events is not None:
        store_status = "healthy" if await events.store.ping() else "unhealthy"
    return {"status": "ok", "store": store_status}
