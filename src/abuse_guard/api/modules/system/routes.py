from dishka import FromDishka
from dishka.integrations.fastapi import DishkaRoute
from fastapi import APIRouter
from fastapi.responses import JSONResponse, PlainTextResponse

from abuse_guard.api.modules.inspection.services import KeyValueStore

router = APIRouter(route_class=DishkaRoute)


@router.get("/health")
async def health(store: FromDishka[KeyValueStore]) -> JSONResponse:
    if await store.ping():
        return JSONResponse({"status": "ok", "store": "connected"})
    return JSONResponse({"status": "error", "store": "down"}, status_code=500)


@router.get("/", response_class=PlainTextResponse)
async def root() -> str:
    return "API Abuse Guard running"
