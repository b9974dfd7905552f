"""
PWA Template Store API
Settings, application data, backup export/import and storage housekeeping.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from api.routes import (
    data_router,
    health_router,
    items_router,
    settings_router,
    storage_router,
)
from config import Settings, get_settings
from repositories import build_backend
from store import PersistentStore

logger = logging.getLogger(__name__)


def build_store(settings: Settings) -> PersistentStore:
    """One store per process, wired from configuration."""
    return PersistentStore(
        build_backend(settings),
        app_name=settings.PWA_APP_NAME,
        migration_policy=settings.PWA_MIGRATION_POLICY,
        retention_days=settings.PWA_RETENTION_DAYS,
        backup_dir=settings.PWA_BACKUP_DIR,
    )


def create_app(store: Optional[PersistentStore] = None) -> FastAPI:
    settings = get_settings()
    logging.basicConfig(level=getattr(logging, settings.LOG_LEVEL, logging.INFO))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.store = store or build_store(settings)
        # Storage failures here are fatal: the app cannot run without storage.
        await app.state.store.initialize()
        logger.info("Storage ready (backend=%s, app=%s)", settings.PWA_STORAGE, settings.PWA_APP_NAME)
        yield

    app = FastAPI(title=settings.APP_TITLE, version=settings.APP_VERSION, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.ALLOWED_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    for router in (health_router, settings_router, data_router, items_router, storage_router):
        app.include_router(router)
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
