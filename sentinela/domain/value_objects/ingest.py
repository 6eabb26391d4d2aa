"""Ingestion value objects."""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ImageSource:
    """Where the face image of a new media row can be read from.

    Raw bytes win over the URL when both are present.
    """
    url: Optional[str] = None
    data: Optional[bytes] = None
    content_type: str = "image/jpeg"

    def __post_init__(self) -> None:
        if not self.url and not self.data:
            raise ValueError("ImageSource needs either a URL or image bytes")


@dataclass(frozen=True)
class IngestJob:
    """Request to extract and attach the embedding of one media row."""
    media_id: int
    source: ImageSource
