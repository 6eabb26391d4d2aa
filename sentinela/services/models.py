"""Service-specific models.

This module contains the input and paging models used by services that are
independent of the API layer.
"""
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field, HttpUrl

from sentinela.domain.entities.media import MediaType

T = TypeVar("T")

CPF_PATTERN = r"^\d{3}\.\d{3}\.\d{3}-\d{2}$|^\d{11}$"


class PersonCreate(BaseModel):
    """Fields accepted when registering a person."""
    full_name: str = Field(..., description="Full name", min_length=1, max_length=255)
    nickname: Optional[str] = Field(None, description="Nickname", max_length=100)
    cpf: Optional[str] = Field(
        None,
        description="Taxpayer identifier, 000.000.000-00 or 11 digits",
        pattern=CPF_PATTERN, max_length=14
    )
    rg: Optional[str] = Field(None, description="Document identifier", max_length=20)
    voter_id: Optional[str] = Field(None, description="Voter registration", max_length=20)
    address_primary: Optional[str] = Field(None, description="Primary address")
    address_secondary: Optional[str] = Field(None, description="Secondary address")
    latitude: Optional[float] = Field(None, description="Latitude", ge=-90, le=90)
    longitude: Optional[float] = Field(None, description="Longitude", ge=-180, le=180)
    mother_name: Optional[str] = Field(None, description="Mother's name", max_length=255)
    father_name: Optional[str] = Field(None, description="Father's name", max_length=255)
    warrant_status: Optional[str] = Field(None, description="Warrant status")
    warrant_file_url: Optional[HttpUrl] = Field(None, description="Warrant document URL")
    notes: Optional[str] = Field(None, description="Free-text notes")
    is_confidential: bool = Field(False, description="Restrict to privileged roles")


class PersonUpdate(BaseModel):
    """Fields accepted when changing a person; unset fields keep their value."""
    full_name: Optional[str] = Field(None, description="Full name", min_length=1, max_length=255)
    nickname: Optional[str] = Field(None, description="Nickname", max_length=100)
    cpf: Optional[str] = Field(
        None,
        description="Taxpayer identifier, 000.000.000-00 or 11 digits",
        pattern=CPF_PATTERN, max_length=14
    )
    rg: Optional[str] = Field(None, description="Document identifier", max_length=20)
    voter_id: Optional[str] = Field(None, description="Voter registration", max_length=20)
    address_primary: Optional[str] = Field(None, description="Primary address")
    address_secondary: Optional[str] = Field(None, description="Secondary address")
    latitude: Optional[float] = Field(None, description="Latitude", ge=-90, le=90)
    longitude: Optional[float] = Field(None, description="Longitude", ge=-180, le=180)
    mother_name: Optional[str] = Field(None, description="Mother's name", max_length=255)
    father_name: Optional[str] = Field(None, description="Father's name", max_length=255)
    warrant_status: Optional[str] = Field(None, description="Warrant status")
    warrant_file_url: Optional[HttpUrl] = Field(None, description="Warrant document URL")
    notes: Optional[str] = Field(None, description="Free-text notes")
    is_confidential: Optional[bool] = Field(None, description="Restrict to privileged roles")


class PersonQuery(BaseModel):
    """Filters and paging for person listing.

    Name filters match case-insensitive substrings; the others match exactly.
    """
    full_name: Optional[str] = Field(None, description="Substring of the full name")
    nickname: Optional[str] = Field(None, description="Substring of the nickname")
    mother_name: Optional[str] = Field(None, description="Substring of the mother's name")
    father_name: Optional[str] = Field(None, description="Substring of the father's name")
    cpf: Optional[str] = Field(None, description="Exact taxpayer identifier")
    is_confidential: Optional[bool] = Field(None, description="Confidentiality flag")
    created_by: Optional[int] = Field(None, description="Creating user")
    page: int = Field(1, ge=1)
    limit: int = Field(20, ge=1, le=100)


class MediaCreate(BaseModel):
    """Fields accepted when attaching media to a person."""
    type: MediaType = Field(..., description="Media type")
    url: str = Field(..., description="Storage URL of the asset", min_length=1, max_length=500)
    label: Optional[str] = Field(None, description="Short label", max_length=100)
    description: Optional[str] = Field(None, description="Description")
    person_id: int = Field(..., description="Owning person", ge=1)


class MediaUpdate(BaseModel):
    """Fields accepted when changing a media record.

    The asset itself (``type`` and ``url``) is immutable; replacing a face
    photo means deleting the record and creating a new one, which re-extracts
    its embedding.
    """
    label: Optional[str] = Field(None, description="Short label", max_length=100)
    description: Optional[str] = Field(None, description="Description")
    person_id: Optional[int] = Field(None, description="New owning person", ge=1)


class MediaQuery(BaseModel):
    """Filters and paging for media listing."""
    type: Optional[MediaType] = Field(None, description="Media type")
    person_id: Optional[int] = Field(None, description="Owning person", ge=1)
    page: int = Field(1, ge=1)
    limit: int = Field(10, ge=1, le=100)


class Page(BaseModel, Generic[T]):
    """One page of a listing."""
    data: List[T] = Field(..., description="Items on this page")
    total: int = Field(..., description="Total matching items")
    page: int = Field(..., description="Current page, starting at 1")
    limit: int = Field(..., description="Page size")
    total_pages: int = Field(..., description="Number of pages")

    @classmethod
    def build(cls, data: List[T], total: int, page: int, limit: int) -> "Page[T]":
        total_pages = (total + limit - 1) // limit if limit else 0
        return cls(data=data, total=total, page=page, limit=limit, total_pages=total_pages)
