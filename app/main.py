from __future__ import annotations
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from fastapi import FastAPI

from app.api import router
from logging_config import configure_logging
from services.context import MonitorContext, build_context
from settings import Settings


def _lifespan(context: MonitorContext):
    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncIterator[None]:
        context.sampler.start()
        try:
            yield
        finally:
            context.sampler.shutdown()

    return lifespan


def create_app(
    settings: Optional[Settings] = None,
    context: Optional[MonitorContext] = None,
) -> FastAPI:
    configure_logging()
    context = context or build_context(settings)
    app = FastAPI(
        title="W1 Temperature Exporter",
        description="Samples one-wire temperature sensors and serves the latest readings.",
        version="0.1.0",
        lifespan=_lifespan(context),
    )
    app.state.context = context
    app.include_router(router)
    return app
