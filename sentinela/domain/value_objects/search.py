"""Face search value objects."""
from typing import List, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from sentinela.core.config import settings
from sentinela.core.exceptions import InvalidSearchParamsError
from sentinela.domain.entities.person import PersonRecord

FeatureVector = List[float]

MIN_THRESHOLD = 0.0
MAX_THRESHOLD = 1.0


class SearchParams(BaseModel):
    """Result-count limit and similarity threshold of a face search."""
    limit: int = Field(
        settings.DEFAULT_SEARCH_LIMIT,
        description="Maximum number of people to return",
        ge=1, le=settings.MAX_SEARCH_LIMIT
    )
    threshold: float = Field(
        settings.DEFAULT_SIMILARITY_THRESHOLD,
        description="Minimum similarity (0.0 to 1.0)",
        ge=MIN_THRESHOLD, le=MAX_THRESHOLD
    )

    @classmethod
    def create(
        cls,
        limit: Union[int, str, None] = None,
        threshold: Union[float, str, None] = None,
    ) -> "SearchParams":
        """Build params, substituting defaults for missing values.

        Values may arrive as raw form strings; blank strings count as missing.

        Raises:
            InvalidSearchParamsError: If a value is not a number or is outside
                its valid range
        """
        values = {}
        for name, value in (("limit", limit), ("threshold", threshold)):
            if isinstance(value, str):
                value = value.strip() or None
            if value is not None:
                values[name] = value
        try:
            return cls(**values)
        except ValidationError as e:
            raise InvalidSearchParamsError(
                "Invalid search parameters",
                details={"errors": e.errors(include_url=False)},
            ) from e


class FaceCandidate(BaseModel):
    """A FACE media row scored against a query vector by an embedding store."""
    person: PersonRecord = Field(..., description="Owning person")
    media_id: int = Field(..., description="Matched media identifier")
    face_photo_url: str = Field(..., description="URL of the matched face photo")
    distance: float = Field(..., description="Cosine distance to the query vector")


class FaceMatch(BaseModel):
    """Ranked face search result."""
    person: PersonRecord = Field(..., description="Matched person")
    similarity: float = Field(..., description="1 - cosine distance (1 = identical)")
    distance: float = Field(..., description="Cosine distance (lower = closer)")
    face_photo_url: str = Field(..., description="URL of the matched face photo")
    media_id: int = Field(..., description="Matched media identifier")
