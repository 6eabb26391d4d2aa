"""Media domain entities."""
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class MediaType(str, Enum):
    """Kinds of photographic asset attached to a person."""
    FACE = "FACE"
    FULL_BODY = "FULL_BODY"
    TATTOO = "TATTOO"


class MediaRecord(BaseModel):
    """Media record as exposed outside the persistence layer.

    The embedding itself never leaves the store; ``has_embedding`` tells whether
    the row is visible to face search.
    """
    id: int = Field(..., description="Media identifier")
    type: MediaType = Field(..., description="Media type")
    url: str = Field(..., description="Storage URL of the asset")
    label: Optional[str] = Field(None, description="Short label")
    description: Optional[str] = Field(None, description="Free-text description")
    person_id: int = Field(..., description="Owning person identifier")
    created_at: Optional[datetime] = Field(None, description="Creation timestamp")
    has_embedding: bool = Field(False, description="Whether a face embedding is stored")

    model_config = ConfigDict(from_attributes=True)
