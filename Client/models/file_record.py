"""
PatraKosh Client - File Record Models

Pydantic models for the file records and collection statistics returned by
the file store. Wire names are camelCase; attributes are snake_case.

Author: PatraKosh Project
"""

from typing import Optional, Union
from pydantic import BaseModel, ConfigDict, Field


DEFAULT_MIME_TYPE = "application/octet-stream"


class FileRecord(BaseModel):
    """A stored file as reported by the server. Immutable once parsed."""
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    id: Union[int, str]
    filename: str
    file_size: int = Field(alias="fileSize", ge=0)
    mime_type: Optional[str] = Field(default=None, alias="mimeType")


class CollectionStats(BaseModel):
    """Collection-wide totals; never derived from a filtered listing."""
    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    file_count: int = Field(default=0, alias="fileCount", ge=0)
    storage_used: int = Field(default=0, alias="storageUsed", ge=0)
