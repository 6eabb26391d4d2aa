"""Embedding store interface for face feature vectors."""
from abc import ABC, abstractmethod
from typing import List, Optional

from ...entities.media import MediaRecord
from ...entities.person import PersonRecord
from ...value_objects.filters import FilterSpec
from ...value_objects.search import FaceCandidate, FeatureVector


class FaceEmbeddingStore(ABC):
    """Interface for reading and writing face embeddings attached to media rows."""

    @abstractmethod
    async def find_candidates(
        self,
        query: FeatureVector,
        filters: FilterSpec,
        max_distance: Optional[float] = None,
        limit: Optional[int] = None,
    ) -> List[FaceCandidate]:
        """
        Score stored embeddings against a query vector.

        Implementations must honour every predicate in ``filters`` and use
        cosine distance. They may additionally drop rows farther than
        ``max_distance``, keep only the closest row per person, order by
        distance and stop after ``limit`` rows; callers must not rely on it.

        Args:
            query: Query feature vector
            filters: Predicates every returned row must satisfy
            max_distance: Optional cosine distance cutoff
            limit: Optional maximum number of people to return

        Returns:
            Candidate rows with their cosine distance

        Raises:
            VectorStoreError: If the query cannot be executed
        """
        pass

    @abstractmethod
    async def attach_embedding(self, media_id: int, embedding: FeatureVector) -> bool:
        """
        Store the feature vector of a media row.

        Args:
            media_id: Media row to update
            embedding: Validated feature vector

        Returns:
            False if the media row no longer exists, True otherwise

        Raises:
            VectorStoreError: If the write fails
        """
        pass

    # Catalogue hooks. Stores that read media and people from the database
    # (pgvector) need none of these; stores keeping their own copy override them.

    async def register_media(self, media: MediaRecord, person: PersonRecord) -> None:
        """Record a new or changed media row, keeping any embedding it already has."""
        return None

    async def remove_media(self, media_id: int) -> None:
        """Forget a deleted media row and its embedding."""
        return None

    async def update_person(self, person: PersonRecord) -> None:
        """Refresh the owning-person snapshot of every media row of ``person``."""
        return None

    async def remove_person(self, person_id: int) -> None:
        """Forget every media row of a deleted person."""
        return None
