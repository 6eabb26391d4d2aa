"""API request and response models."""
from .media import MediaResponse, PaginatedMediaResponse
from .people import (
    FaceSearchResultResponse,
    PaginatedPeopleResponse,
    PersonResponse,
)

__all__ = [
    "FaceSearchResultResponse",
    "MediaResponse",
    "PaginatedMediaResponse",
    "PaginatedPeopleResponse",
    "PersonResponse",
]
