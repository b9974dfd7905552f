"""Request body models for the PWA Template Store API."""

from typing import Optional

from pydantic import BaseModel, ConfigDict

from .records import Theme


class SettingsUpdate(BaseModel):
    """Partial settings change. Only the fields sent are written."""

    model_config = ConfigDict(extra="allow")

    theme: Optional[Theme] = None
    notifications: Optional[bool] = None
    autoUpdate: Optional[bool] = None
    language: Optional[str] = None
    debugMode: Optional[bool] = None
