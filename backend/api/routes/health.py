from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends

from api.deps import get_store
from config import get_settings
from store import PersistentStore

router = APIRouter(tags=["health"])


@router.get("/health")
async def health(store: Annotated[PersistentStore, Depends(get_store)]):
    settings = get_settings()
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": settings.APP_VERSION,
        "schema_version": store.get_version(),
        "initialized": store.is_initialized,
    }
