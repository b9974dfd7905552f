"""Pydantic schemas for records and API request bodies."""

from .records import ExportBundle, SettingsRecord
from .requests import SettingsUpdate

__all__ = [
    "ExportBundle",
    "SettingsRecord",
    "SettingsUpdate",
]
