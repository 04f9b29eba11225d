"""GET /health liveness probe."""

import time

from fastapi import APIRouter

from api.base import HealthStatus
from core.stores import RecordStore
from utils.timezone import now_utc


def create_health_router(store: RecordStore) -> APIRouter:
    router = APIRouter(tags=["health"])
    started = time.monotonic()

    @router.get("/health")
    def health():
        return HealthStatus(
            status="OK",
            timestamp=now_utc(),
            database="Connected" if store.ping() else "Disconnected",
            backend=store.backend,
            uptime=round(time.monotonic() - started, 3),
        ).model_dump(mode="json", by_alias=True)

    return router
