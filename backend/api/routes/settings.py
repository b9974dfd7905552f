"""User settings: read, partial update, reset."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from api.deps import get_store
from api.helpers import require_write
from schemas.requests import SettingsUpdate
from store import PersistentStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/settings", tags=["settings"])


@router.get("")
async def get_settings(store: Annotated[PersistentStore, Depends(get_store)]):
    settings = store.get_settings()
    if settings is None:
        settings = store.default_settings
    return JSONResponse(settings)


@router.patch("")
async def patch_settings(
    body: SettingsUpdate,
    store: Annotated[PersistentStore, Depends(get_store)],
):
    # Only the fields the client sent; never the whole record.
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    require_write(store.set_settings(changes), "settings")
    logger.info("Settings updated: %s", sorted(changes))
    return JSONResponse(store.get_settings())


@router.post("/reset")
async def reset_settings(store: Annotated[PersistentStore, Depends(get_store)]):
    require_write(store.set_settings(store.default_settings), "settings")
    return JSONResponse(store.get_settings())
