"""API specific person and face search models."""
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from sentinela.domain.entities.person import PersonRecord
from sentinela.domain.value_objects.search import FaceMatch
from sentinela.services.models import Page


class PersonResponse(BaseModel):
    """API model for a person."""
    id: int = Field(..., description="Person identifier")
    full_name: str = Field(..., description="Full name")
    nickname: Optional[str] = Field(None, description="Nickname")
    cpf: Optional[str] = Field(None, description="Taxpayer identifier (digits only)")
    rg: Optional[str] = Field(None, description="Document identifier")
    voter_id: Optional[str] = Field(None, description="Voter registration")
    mother_name: Optional[str] = Field(None, description="Mother's name")
    father_name: Optional[str] = Field(None, description="Father's name")
    address_primary: Optional[str] = Field(None, description="Primary address")
    address_secondary: Optional[str] = Field(None, description="Secondary address")
    latitude: Optional[float] = Field(None, description="Latitude")
    longitude: Optional[float] = Field(None, description="Longitude")
    warrant_status: Optional[str] = Field(None, description="Warrant status")
    warrant_file_url: Optional[str] = Field(None, description="Warrant document URL")
    notes: Optional[str] = Field(None, description="Free-text notes")
    is_confidential: bool = Field(..., description="Restricted to privileged roles")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    updated_at: Optional[datetime] = Field(None, description="Last update timestamp")

    @classmethod
    def from_record(cls, record: PersonRecord) -> "PersonResponse":
        return cls(**record.model_dump(exclude={"created_by", "updated_by"}))


class FaceSearchResultResponse(BaseModel):
    """API model for one face search match.

    Similarity is ``1 - cosine distance`` without clamping or rescaling.
    """
    person: PersonResponse = Field(..., description="Matched person")
    similarity: float = Field(..., description="Similarity score (1 = identical)")
    distance: float = Field(..., description="Cosine distance (lower = closer)")
    face_photo_url: str = Field(..., description="URL of the matched face photo")

    @classmethod
    def from_match(cls, match: FaceMatch) -> "FaceSearchResultResponse":
        """Convert a domain FaceMatch to the API response model."""
        return cls(
            person=PersonResponse.from_record(match.person),
            similarity=match.similarity,
            distance=match.distance,
            face_photo_url=match.face_photo_url,
        )


class PaginatedPeopleResponse(BaseModel):
    """Response model for person listings."""
    data: List[PersonResponse]
    total: int
    page: int
    limit: int
    total_pages: int

    @classmethod
    def from_page(cls, page: Page[PersonRecord]) -> "PaginatedPeopleResponse":
        return cls(
            data=[PersonResponse.from_record(p) for p in page.data],
            total=page.total,
            page=page.page,
            limit=page.limit,
            total_pages=page.total_pages,
        )
