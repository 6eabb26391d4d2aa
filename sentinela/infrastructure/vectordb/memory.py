"""In-process face embedding store with exact numpy search."""
from dataclasses import dataclass
from typing import Dict, List, Optional

import numpy as np

from sentinela.core.logging import get_logger
from sentinela.domain.entities.media import MediaRecord, MediaType
from sentinela.domain.entities.person import PersonRecord
from sentinela.domain.interfaces.storage.embedding_store import FaceEmbeddingStore
from sentinela.domain.value_objects.filters import (
    ExcludeConfidential,
    FilterSpec,
    HasEmbedding,
    MediaTypeIs,
    Predicate,
)
from sentinela.domain.value_objects.search import FaceCandidate, FeatureVector

logger = get_logger(__name__)


@dataclass
class IndexedFace:
    """One media row as held by the in-memory store."""
    person: PersonRecord
    media_id: int
    url: str
    media_type: MediaType = MediaType.FACE
    embedding: Optional[np.ndarray] = None


def _matches(predicate: Predicate, entry: IndexedFace) -> bool:
    if isinstance(predicate, MediaTypeIs):
        return entry.media_type == predicate.media_type
    if isinstance(predicate, HasEmbedding):
        return entry.embedding is not None
    if isinstance(predicate, ExcludeConfidential):
        return not entry.person.is_confidential
    raise ValueError(f"Unsupported filter predicate: {type(predicate).__name__}")


def cosine_distances(matrix: np.ndarray, query: np.ndarray) -> np.ndarray:
    """Cosine distance of every row of ``matrix`` to ``query``.

    Rows (or a query) with zero norm yield NaN, as pgvector does.
    """
    norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    with np.errstate(divide="ignore", invalid="ignore"):
        return 1.0 - (matrix @ query) / norms


class InMemoryFaceStore(FaceEmbeddingStore):
    """Face embedding store keeping every row in process memory.

    Search is brute force over all rows, so it suits development setups and
    tests rather than large archives. Only filtering and the distance cutoff
    are applied here; ranking is left to the caller.
    """

    def __init__(self) -> None:
        self._faces: Dict[int, IndexedFace] = {}

    def add(
        self,
        person: PersonRecord,
        media_id: int,
        url: str,
        media_type: MediaType = MediaType.FACE,
        embedding: Optional[FeatureVector] = None,
    ) -> IndexedFace:
        """Register a media row, optionally with its embedding."""
        entry = IndexedFace(
            person=person,
            media_id=media_id,
            url=url,
            media_type=media_type,
            embedding=None if embedding is None else np.asarray(embedding, dtype=np.float64),
        )
        self._faces[media_id] = entry
        return entry

    def remove(self, media_id: int) -> None:
        self._faces.pop(media_id, None)

    def get(self, media_id: int) -> Optional[IndexedFace]:
        return self._faces.get(media_id)

    def __len__(self) -> int:
        return len(self._faces)

    async def register_media(self, media: MediaRecord, person: PersonRecord) -> None:
        current = self._faces.get(media.id)
        embedding = current.embedding if current is not None else None
        self._faces[media.id] = IndexedFace(
            person=person,
            media_id=media.id,
            url=media.url,
            media_type=media.type,
            embedding=embedding,
        )

    async def remove_media(self, media_id: int) -> None:
        self.remove(media_id)

    async def update_person(self, person: PersonRecord) -> None:
        for entry in self._faces.values():
            if entry.person.id == person.id:
                entry.person = person

    async def remove_person(self, person_id: int) -> None:
        stale = [media_id for media_id, entry in self._faces.items() if entry.person.id == person_id]
        for media_id in stale:
            del self._faces[media_id]
        if stale:
            logger.debug("Dropped media of deleted person", person_id=person_id, count=len(stale))

    async def find_candidates(
        self,
        query: FeatureVector,
        filters: FilterSpec,
        max_distance: Optional[float] = None,
        limit: Optional[int] = None,
    ) -> List[FaceCandidate]:
        query_vector = np.asarray(query, dtype=np.float64)
        rows = [
            entry for entry in self._faces.values()
            if all(_matches(p, entry) for p in filters)
            and entry.embedding is not None
            and entry.embedding.shape == query_vector.shape
        ]
        if not rows:
            return []

        matrix = np.vstack([entry.embedding for entry in rows])
        distances = cosine_distances(matrix, query_vector)

        candidates = []
        for entry, distance in zip(rows, distances):
            if not np.isfinite(distance):
                continue
            if max_distance is not None and distance > max_distance:
                continue
            candidates.append(FaceCandidate(
                person=entry.person,
                media_id=entry.media_id,
                face_photo_url=entry.url,
                distance=float(distance),
            ))
        return candidates

    async def attach_embedding(self, media_id: int, embedding: FeatureVector) -> bool:
        entry = self._faces.get(media_id)
        if entry is None:
            logger.warning("Media row vanished before its embedding was stored", media_id=media_id)
            return False
        entry.embedding = np.asarray(embedding, dtype=np.float64)
        return True
