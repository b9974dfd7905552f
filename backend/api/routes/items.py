"""Generic JSON items by key."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import JSONResponse

from api.deps import get_store
from api.helpers import error_detail, require_write
from store import PersistentStore

router = APIRouter(prefix="/api/items", tags=["items"])

_MISSING = object()


@router.get("/{key}")
async def get_item(key: str, store: Annotated[PersistentStore, Depends(get_store)]):
    value = store.get_item(key, _MISSING)
    if value is _MISSING:
        raise HTTPException(404, detail=error_detail("item_not_found", f"Item '{key}' not found"))
    return JSONResponse({"key": key, "value": value})


@router.put("/{key}")
async def set_item(
    key: str,
    value: Annotated[Any, Body()],
    store: Annotated[PersistentStore, Depends(get_store)],
):
    require_write(store.set_item(key, value), f"item '{key}'")
    return JSONResponse({"key": key, "value": value})


@router.delete("/{key}")
async def remove_item(key: str, store: Annotated[PersistentStore, Depends(get_store)]):
    require_write(store.remove_item(key), f"item '{key}'")
    return JSONResponse({"deleted": key})
