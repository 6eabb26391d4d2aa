"""API specific media models."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from sentinela.domain.entities.media import MediaRecord, MediaType
from sentinela.services.models import Page


class MediaResponse(BaseModel):
    """API model for a media record."""
    id: int = Field(..., description="Media identifier")
    type: MediaType = Field(..., description="Media type")
    url: str = Field(..., description="Storage URL of the asset")
    label: Optional[str] = Field(None, description="Short label")
    description: Optional[str] = Field(None, description="Description")
    person_id: int = Field(..., description="Owning person")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    has_embedding: bool = Field(..., description="Whether the photo is searchable by face")

    @classmethod
    def from_record(cls, record: MediaRecord) -> "MediaResponse":
        return cls(**record.model_dump())


class PaginatedMediaResponse(BaseModel):
    """Response model for media listings."""
    data: List[MediaResponse]
    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def from_page(cls, page: Page[MediaRecord]) -> "PaginatedMediaResponse":
        return cls(
            data=[MediaResponse.from_record(m) for m in page.data],
            total=page.total,
            page=page.page,
            limit=page.limit,
            total_pages=page.total_pages,
        )
