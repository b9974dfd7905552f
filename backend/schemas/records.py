"""Pydantic models for the persisted records and the backup bundle."""

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr, field_validator

Theme = Literal["auto", "light", "dark"]


class SettingsRecord(BaseModel):
    """Known settings keys. Unknown keys are kept as-is."""

    model_config = ConfigDict(extra="allow")

    theme: Theme = "auto"
    notifications: bool = True
    autoUpdate: bool = True
    language: str = "en"
    debugMode: bool = False


class ExportBundle(BaseModel):
    """Backup file shape. `version` and `settings` are mandatory for import."""

    model_config = ConfigDict(extra="ignore")

    settings: dict[str, Any]
    data: Optional[dict[str, Any]] = None
    # Older backups may carry a numeric version; any non-empty value is accepted.
    version: Union[StrictStr, StrictInt]
    exportDate: Optional[str] = None

    @field_validator("version")
    @classmethod
    def version_present(cls, value):
        if value == "" or value == 0:
            raise ValueError("version must be non-empty")
        return value
