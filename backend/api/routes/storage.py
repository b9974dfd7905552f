"""Storage housekeeping: usage, keys, cleanup, clear, backup export/import."""

import json
import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from fastapi.responses import JSONResponse, Response

from api.deps import get_store
from api.helpers import error_detail, require_write
from errors import InvalidBackupError
from store import PersistentStore

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/storage", tags=["storage"])

MAX_BACKUP_BYTES = 5 * 1024 * 1024


@router.get("/usage")
async def storage_usage(store: Annotated[PersistentStore, Depends(get_store)]):
    return JSONResponse({
        "usage": store.get_storage_usage(),
        "quota": await store.get_storage_quota(),
    })


@router.get("/keys")
async def storage_keys(store: Annotated[PersistentStore, Depends(get_store)]):
    return JSONResponse({"keys": store.get_all_keys()})


@router.post("/cleanup")
async def cleanup(store: Annotated[PersistentStore, Depends(get_store)]):
    before = len(store.get_data())
    await store.cleanup_old_data()
    after = len(store.get_data())
    return JSONResponse({"kept": after, "removed": before - after})


@router.delete("")
async def clear_all(store: Annotated[PersistentStore, Depends(get_store)]):
    require_write(store.clear_all(), "cleared storage")
    return JSONResponse({"cleared": True})


@router.get("/export")
async def download_backup(store: Annotated[PersistentStore, Depends(get_store)]):
    body = json.dumps(store.export_bundle(), indent=2)
    return Response(
        body,
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="{store.export_filename()}"'},
    )


@router.post("/export")
async def write_backup(store: Annotated[PersistentStore, Depends(get_store)]):
    require_write(store.export_data(), "backup file")
    return JSONResponse({"filename": store.export_filename()})


@router.post("/import")
async def import_backup(
    store: Annotated[PersistentStore, Depends(get_store)],
    file: UploadFile = File(..., description="Backup JSON produced by /api/storage/export"),
):
    content = await file.read()
    if len(content) > MAX_BACKUP_BYTES:
        raise HTTPException(413, detail=error_detail("backup_too_large", "Backup file too large. Maximum 5 MB."))
    try:
        ok = await store.import_data(content)
    except InvalidBackupError as e:
        logger.warning("Rejected backup %s: %s", file.filename, e.message)
        raise HTTPException(400, detail=error_detail(e.code, e.message)) from e
    require_write(ok, "imported backup")
    return JSONResponse({"imported": True, "settings": store.get_settings()})
