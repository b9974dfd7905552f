"""Application data record: read, replace, merge, clear."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from api.deps import get_store
from api.helpers import require_write
from store import PersistentStore

router = APIRouter(prefix="/api/data", tags=["data"])


@router.get("")
async def get_data(store: Annotated[PersistentStore, Depends(get_store)]):
    return JSONResponse(store.get_data())


@router.put("")
async def replace_data(
    data: Annotated[dict[str, Any], Body()],
    store: Annotated[PersistentStore, Depends(get_store)],
):
    require_write(store.set_data(data), "data")
    return JSONResponse(store.get_data())


@router.patch("")
async def update_data(
    updates: Annotated[dict[str, Any], Body()],
    store: Annotated[PersistentStore, Depends(get_store)],
):
    require_write(store.update_data(updates), "data")
    return JSONResponse(store.get_data())


@router.delete("")
async def clear_data(store: Annotated[PersistentStore, Depends(get_store)]):
    require_write(store.clear_data(), "data")
    return JSONResponse({"cleared": store.storage_key})
