"""Shared helpers for API routes (error payloads, write checks)."""

from fastapi import HTTPException


def error_detail(code: str, message: str) -> dict:
    return {"code": code, "message": message}


def require_write(ok: bool, what: str) -> None:
    """Turn a failed store write into 507 Insufficient Storage."""
    if not ok:
        raise HTTPException(507, detail=error_detail("storage_write_failed", f"Could not save {what}."))
