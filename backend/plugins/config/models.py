from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class ConfigMetadata(BaseModel):
    """Write-time snapshot stored next to the config document."""

    model_config = ConfigDict(populate_by_name=True)

    last_modified: datetime = Field(..., alias="lastModified")
    size: int = Field(..., description="UTF-8 byte length of the stored document.")


class SaveConfigResponse(BaseModel):
    success: bool = True
    message: str
    metadata: ConfigMetadata


class ResetConfigResponse(BaseModel):
    success: bool = True
    message: str


class ConfigMetaResponse(BaseModel):
    """Response model for the metadata-only query."""

    exists: bool
    message: str | None = None
    metadata: ConfigMetadata | None = None
