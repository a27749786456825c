from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from app.api import router
from logging_config import configure_logging
from services.devices import build_default_device_client
from services.health import build_default_health_service


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
    service = build_default_health_service()
    try:
        yield
    finally:
        service.devices.close()
        build_default_health_service.cache_clear()
        build_default_device_client.cache_clear()


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title="Vitals Dashboard",
        description="Vital-sign readings, windowed analytics and a health assistant.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.include_router(router)
    return app

app = create_app()
