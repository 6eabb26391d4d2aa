"""Postgres/pgvector implementation of the face embedding store."""
from typing import List, Optional

from sqlalchemy import Select, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from sentinela.core.exceptions import VectorStoreError
from sentinela.core.logging import get_logger
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
from sentinela.infrastructure.database.models import Media, Person
from sentinela.infrastructure.database.repositories import MediaRepository

logger = get_logger(__name__)


def compile_predicate(predicate: Predicate):
    """Translate a filter predicate into a SQLAlchemy boolean expression."""
    if isinstance(predicate, MediaTypeIs):
        return Media.type == predicate.media_type
    if isinstance(predicate, HasEmbedding):
        return Media.embedding.is_not(None)
    if isinstance(predicate, ExcludeConfidential):
        return Person.is_confidential.is_(False)
    raise VectorStoreError(
        f"Unsupported filter predicate: {type(predicate).__name__}"
    )


def build_nearest_query(
    query: FeatureVector,
    filters: FilterSpec,
    max_distance: Optional[float] = None,
    limit: Optional[int] = None,
) -> Select:
    """Build the closest-face-per-person statement.

    The inner query keeps, for every person, only the media row nearest to
    ``query`` (``DISTINCT ON person_id``); the outer query ranks those rows by
    distance and applies the limit.
    """
    distance = Media.embedding.cosine_distance(query)

    closest = (
        select(
            Media.id.label("media_id"),
            Media.person_id.label("person_id"),
            Media.url.label("url"),
            distance.label("distance"),
        )
        .select_from(Media)
        .join(Media.person)
        .where(*[compile_predicate(p) for p in filters])
    )
    if max_distance is not None:
        closest = closest.where(distance <= max_distance)
    closest = (
        closest
        .distinct(Media.person_id)
        .order_by(Media.person_id, distance, Media.id)
        .subquery("closest")
    )

    stmt = (
        select(Person, closest.c.media_id, closest.c.url, closest.c.distance)
        .join(closest, closest.c.person_id == Person.id)
        .order_by(closest.c.distance, Person.id, closest.c.media_id)
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    return stmt


class PgVectorFaceStore(FaceEmbeddingStore):
    """Face embedding store backed by the ``media.embedding`` pgvector column."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        """Initialize the store.

        Args:
            session_factory: Factory for short-lived sessions, one per operation
        """
        self._session_factory = session_factory

    async def find_candidates(
        self,
        query: FeatureVector,
        filters: FilterSpec,
        max_distance: Optional[float] = None,
        limit: Optional[int] = None,
    ) -> List[FaceCandidate]:
        """Run the nearest-face query with filter, cutoff and limit pushed down."""
        stmt = build_nearest_query(query, filters, max_distance, limit)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                rows = result.all()
        except SQLAlchemyError as e:
            logger.error(
                "Face similarity query failed",
                error=str(e),
                exc_info=True
            )
            raise VectorStoreError(f"Face similarity query failed: {str(e)}") from e

        candidates = [
            FaceCandidate(
                person=PersonRecord.model_validate(person),
                media_id=media_id,
                face_photo_url=url,
                distance=float(distance),
            )
            for person, media_id, url, distance in rows
        ]
        logger.debug(
            "Face similarity query complete",
            candidates=len(candidates),
            max_distance=max_distance,
            limit=limit
        )
        return candidates

    async def attach_embedding(self, media_id: int, embedding: FeatureVector) -> bool:
        """Write the embedding in its own short transaction."""
        try:
            async with self._session_factory() as session:
                updated = await MediaRepository(session).set_embedding(media_id, embedding)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(
                "Failed to store face embedding",
                media_id=media_id,
                error=str(e),
                exc_info=True
            )
            raise VectorStoreError(f"Failed to store face embedding: {str(e)}") from e

        if not updated:
            logger.warning("Media row vanished before its embedding was stored", media_id=media_id)
        return updated
