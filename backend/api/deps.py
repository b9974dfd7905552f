"""FastAPI dependencies for routes."""

from fastapi import Request

from store import PersistentStore


def get_store(request: Request) -> PersistentStore:
    """Return the store built at startup. Use in Depends()."""
    return request.app.state.store
