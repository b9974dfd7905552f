"""API route modules."""

from .health import router as health_router
from .settings import router as settings_router
from .data import router as data_router
from .items import router as items_router
from .storage import router as storage_router

__all__ = [
    "health_router",
    "settings_router",
    "data_router",
    "items_router",
    "storage_router",
]
