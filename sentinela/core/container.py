"""Service container for dependency injection."""
from typing import Optional

from sentinela.consumers.ingest_worker import IngestQueue
from sentinela.core.config import settings
from sentinela.core.logging import get_logger
from sentinela.domain.interfaces.recognition.embedding_extractor import EmbeddingExtractor
from sentinela.domain.interfaces.storage.embedding_store import FaceEmbeddingStore
from sentinela.infrastructure.database.session import (
    dispose_engine,
    get_session_factory,
    init_models,
)
from sentinela.infrastructure.vectordb import InMemoryFaceStore, PgVectorFaceStore
from sentinela.services.embedding_client import EmbeddingClient
from sentinela.services.face_search import FaceSearchService
from sentinela.services.media_ingest import MediaIngestService
from sentinela.services.similarity_index import SimilarityIndex

logger = get_logger(__name__)


class ServiceContainer:
    """Container for application services.

    This container manages the lifecycle and dependencies of all services in the application.
    It ensures proper initialization order and provides a single source of truth for service instances.

    Example:
        ```python
        container = ServiceContainer()
        await container.initialize()

        face_search = container.face_search_service
        queue = container.ingest_queue
        ```
    """

    def __init__(self) -> None:
        """Initialize empty container."""
        # Core services
        self.embedding_client: Optional[EmbeddingExtractor] = None
        self.embedding_store: Optional[FaceEmbeddingStore] = None

        # Domain services
        self.similarity_index: Optional[SimilarityIndex] = None
        self.face_search_service: Optional[FaceSearchService] = None
        self.media_ingest_service: Optional[MediaIngestService] = None
        self.ingest_queue: Optional[IngestQueue] = None

    @property
    def initialized(self) -> bool:
        return self.face_search_service is not None

    def _build_store(self) -> FaceEmbeddingStore:
        backend = settings.VECTOR_BACKEND.lower()
        if backend == "memory":
            return InMemoryFaceStore()
        if backend == "pgvector":
            return PgVectorFaceStore(get_session_factory())
        raise ValueError(f"Unknown VECTOR_BACKEND: {settings.VECTOR_BACKEND}")

    async def initialize(
        self,
        embedding_client: Optional[EmbeddingExtractor] = None,
        embedding_store: Optional[FaceEmbeddingStore] = None,
    ) -> None:
        """Initialize all services in the correct order.

        Args:
            embedding_client: Optional extractor overriding the HTTP client
            embedding_store: Optional store overriding ``VECTOR_BACKEND``
        """
        if settings.VECTOR_BACKEND.lower() == "pgvector" and settings.DB_AUTO_CREATE:
            await init_models()

        self.embedding_client = embedding_client or EmbeddingClient()
        self.embedding_store = embedding_store or self._build_store()

        self.similarity_index = SimilarityIndex(self.embedding_store)
        self.face_search_service = FaceSearchService(
            embedding_client=self.embedding_client,
            index=self.similarity_index,
        )
        self.media_ingest_service = MediaIngestService(
            embedding_client=self.embedding_client,
            store=self.embedding_store,
        )
        self.ingest_queue = IngestQueue(self.media_ingest_service)
        await self.ingest_queue.start()

        logger.info(
            "Service container initialized",
            vector_backend=type(self.embedding_store).__name__
        )

    async def cleanup(self) -> None:
        """Cleanup all services in reverse order of initialization."""
        if self.ingest_queue:
            await self.ingest_queue.stop()
            self.ingest_queue = None

        self.media_ingest_service = None
        self.face_search_service = None
        self.similarity_index = None

        if isinstance(self.embedding_client, EmbeddingClient):
            await self.embedding_client.close()
        self.embedding_client = None

        if isinstance(self.embedding_store, PgVectorFaceStore):
            await dispose_engine()
        self.embedding_store = None


# Global container instance
container = ServiceContainer()
