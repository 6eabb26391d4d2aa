"""Media ingestion service: attach face embeddings to new FACE media."""
from typing import Optional

from sentinela.core.config import settings
from sentinela.core.logging import get_logger
from sentinela.domain.interfaces.recognition.embedding_extractor import EmbeddingExtractor
from sentinela.domain.interfaces.storage.embedding_store import FaceEmbeddingStore
from sentinela.domain.value_objects.ingest import IngestJob
from sentinela.domain.value_objects.search import FeatureVector

logger = get_logger(__name__)


class MediaIngestService:
    """Service for indexing freshly created FACE media.

    Ingestion is best effort: the media row already exists when a job runs,
    and it is left without an embedding when extraction or validation fails.
    Such rows stay visible to ordinary media listing but never surface in
    face search until they are backfilled.
    """

    def __init__(
        self,
        embedding_client: EmbeddingExtractor,
        store: FaceEmbeddingStore,
        expected_dim: Optional[int] = None,
    ) -> None:
        """Initialize the ingestion service.

        Args:
            embedding_client: Extractor for face embeddings
            store: Store the embeddings are written to
            expected_dim: Required embedding dimension
        """
        self.embedding_client = embedding_client
        self.store = store
        self.expected_dim = expected_dim or settings.EMBEDDING_DIM

    def is_valid_embedding(self, embedding: Optional[FeatureVector]) -> bool:
        return bool(embedding) and len(embedding) == self.expected_dim

    async def ingest(self, job: IngestJob) -> bool:
        """Extract and attach the embedding of one media row.

        Never raises; every failure is logged.

        Args:
            job: Media row and where to read its image from

        Returns:
            True if an embedding was stored
        """
        source = job.source
        try:
            if source.data:
                embedding = await self.embedding_client.extract_from_buffer(
                    source.data, source.content_type
                )
            else:
                embedding = await self.embedding_client.extract_from_url(source.url)

            if embedding is None:
                logger.warning(
                    "No embedding extracted, media stays unindexed",
                    media_id=job.media_id
                )
                return False

            if not self.is_valid_embedding(embedding):
                logger.warning(
                    "Embedding rejected, media stays unindexed",
                    media_id=job.media_id,
                    dimension=len(embedding),
                    expected=self.expected_dim
                )
                return False

            stored = await self.store.attach_embedding(job.media_id, embedding)
            if stored:
                logger.info("Face embedding stored", media_id=job.media_id)
            return stored

        except Exception as e:
            logger.error(
                "Unexpected error during media ingestion",
                media_id=job.media_id,
                error=str(e),
                exc_info=True
            )
            return False
