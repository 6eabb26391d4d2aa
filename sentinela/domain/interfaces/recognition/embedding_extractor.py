"""Face embedding extraction interface."""
from abc import ABC, abstractmethod
from typing import Optional

from ...value_objects.search import FeatureVector


class EmbeddingExtractor(ABC):
    """Interface for turning face images into feature vectors.

    Implementations never raise: every failure resolves to ``None`` (or
    ``False`` for the availability check) so callers can proceed without an
    embedding.
    """

    @abstractmethod
    async def extract_from_buffer(
        self,
        image_bytes: bytes,
        content_type: str = "image/jpeg",
    ) -> Optional[FeatureVector]:
        """Extract the embedding of the face in ``image_bytes``."""
        pass

    @abstractmethod
    async def extract_from_url(self, url: str) -> Optional[FeatureVector]:
        """Download ``url`` and extract the embedding of its face."""
        pass

    @abstractmethod
    async def is_available(self) -> bool:
        """Lightweight liveness check of the extraction backend."""
        pass
