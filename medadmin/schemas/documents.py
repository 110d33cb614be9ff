"""Request/response schemas for the document registry."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class DocumentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: str
    category: str
    file_url: str | None = None
    file_type: str
    size_bytes: int
    embedding_status: str
    created_by: int | None = None
    upload_date: datetime | None = None
    last_edited: datetime | None = None


class DocumentsResponse(BaseModel):
    documents: list[DocumentOut]
    count: int = Field(..., ge=0)


class DocumentUpdate(BaseModel):
    """Editable metadata. The name is the AI service's key for the file and cannot change."""

    model_config = ConfigDict(extra="forbid")

    description: str | None = Field(default=None, max_length=10_000)
    category: str | None = Field(default=None, min_length=1, max_length=255)


class BulkDeleteRequest(BaseModel):
    names: list[str] = Field(..., min_length=1, max_length=500)


class BulkDeleteResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    deleted_count: int = Field(..., alias="deletedCount")
    failed_count: int = Field(default=0, alias="failedCount")
    failed: list[str] = Field(default_factory=list)


class DeleteResponse(BaseModel):
    success: bool = True


class ReEmbedResponse(BaseModel):
    success: bool = True
    message: str
    data: Any = None
