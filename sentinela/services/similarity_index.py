"""Nearest-neighbour face search over stored embeddings."""
import math
from typing import Dict, Iterable, List

from sentinela.core.logging import get_logger
from sentinela.domain.interfaces.storage.embedding_store import FaceEmbeddingStore
from sentinela.domain.value_objects.filters import FilterSpec
from sentinela.domain.value_objects.search import FaceCandidate, FaceMatch, FeatureVector

logger = get_logger(__name__)

# Slack added to the distance cutoff handed to the store, so floating point
# rounding there never drops a row the similarity check here would keep.
_CUTOFF_SLACK = 1e-9


def rank_candidates(
    candidates: Iterable[FaceCandidate],
    threshold: float,
    limit: int,
) -> List[FaceMatch]:
    """Threshold, de-duplicate per person, sort and truncate candidates.

    Ordering is distance ascending, then person id, then media id, so equal
    distances always come back in the same order.

    Args:
        candidates: Scored media rows, in any order, possibly several per person
        threshold: Minimum similarity (``1 - distance``) to keep
        limit: Maximum number of people to return

    Returns:
        At most ``limit`` matches, one per person, closest first
    """
    closest: Dict[int, FaceCandidate] = {}
    for candidate in candidates:
        if not math.isfinite(candidate.distance):
            continue
        if 1.0 - candidate.distance < threshold:
            continue
        person_id = candidate.person.id
        current = closest.get(person_id)
        if current is None or (candidate.distance, candidate.media_id) < (current.distance, current.media_id):
            closest[person_id] = candidate

    ranked = sorted(
        closest.values(),
        key=lambda c: (c.distance, c.person.id, c.media_id),
    )
    return [
        FaceMatch(
            person=c.person,
            similarity=1.0 - c.distance,
            distance=c.distance,
            face_photo_url=c.face_photo_url,
            media_id=c.media_id,
        )
        for c in ranked[:limit]
    ]


class SimilarityIndex:
    """Ranks people by how close their face photos are to a query vector.

    The store does the scoring and may push filtering, the distance cutoff,
    per-person de-duplication and the limit down to the database; this class
    re-applies thresholding, de-duplication, ordering and truncation so the
    result contract holds for every store.

    Example:
        ```python
        index = SimilarityIndex(PgVectorFaceStore(get_session_factory()))
        matches = await index.search(
            query=embedding,
            filters=FilterSpec.for_face_search(caller),
            threshold=0.5,
            limit=10,
        )
        ```
    """

    def __init__(self, store: FaceEmbeddingStore) -> None:
        """Initialize the index.

        Args:
            store: Embedding store holding FACE media vectors
        """
        self.store = store

    async def search(
        self,
        query: FeatureVector,
        filters: FilterSpec,
        threshold: float,
        limit: int,
    ) -> List[FaceMatch]:
        """Find the people whose face photos best match ``query``.

        Args:
            query: Query feature vector
            filters: Visibility and eligibility predicates
            threshold: Minimum similarity (0.0 to 1.0)
            limit: Maximum number of people to return

        Returns:
            Matches sorted by distance ascending; empty when nothing qualifies

        Raises:
            VectorStoreError: If the store query fails
        """
        candidates = await self.store.find_candidates(
            query,
            filters,
            max_distance=(1.0 - threshold) + _CUTOFF_SLACK,
            limit=limit,
        )
        matches = rank_candidates(candidates, threshold, limit)
        logger.info(
            "Face similarity search complete",
            candidates=len(candidates),
            matches=len(matches),
            threshold=threshold,
            limit=limit,
            excludes_confidential=filters.excludes_confidential
        )
        return matches
