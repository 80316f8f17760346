from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from rebroadcast.admission.mute import populate_muted
from rebroadcast.admission.pipeline import AdmissionPipeline, FatalHandler, terminate_process
from rebroadcast.admission.state import CacheSet
from rebroadcast.api.admin.verdicts import router as admin_router
from rebroadcast.api.events import router as events_router
from rebroadcast.api.health import router as health_router
from rebroadcast.core.errors import FatalError
from rebroadcast.core.logging import configure_logging, log_event
from rebroadcast.plugins.registry import Collaborators
from rebroadcast.settings import Settings, load_settings


def create_app(
    settings: Optional[Settings] = None,
    collaborators: Optional[Collaborators] = None,
    on_fatal: FatalHandler = terminate_process,
) -> FastAPI:
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        configure_logging(level=settings.LOG_LEVEL)
        log_event("startup", app=settings.APP_NAME, env=settings.ENV, test_mode=settings.TEST_MODE)

        collab = collaborators if collaborators is not None else Collaborators.from_settings(settings)
        caches = CacheSet.from_settings(settings)

        # la lista de muteados se carga una vez al arrancar; si falla, no arrancamos
        if settings.LOAD_MUTES_ON_STARTUP:
            try:
                await populate_muted(collab.muted, caches.muted_ids)
            except FatalError:
                await collab.aclose()
                raise

        pipeline = AdmissionPipeline(settings=settings, caches=caches, collaborators=collab, on_fatal=on_fatal)
        app.state.settings = settings
        app.state.pipeline = pipeline
        try:
            yield
        finally:
            await pipeline.drain()
            await collab.aclose()
            log_event("shutdown")

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.settings = settings

    app.include_router(health_router)
    app.include_router(events_router)
    app.include_router(admin_router)

    return app


app = create_app()

if __name__ == "__main__":
    _settings = app.state.settings
    uvicorn.run("rebroadcast.main:app", host=_settings.HOST, port=_settings.PORT, reload=(_settings.ENV == "dev"))
