"""Face search service: query image in, ranked people out."""
from typing import FrozenSet, List, Optional

from sentinela.core.config import settings
from sentinela.core.exceptions import EmbeddingExtractionError, InvalidImageError
from sentinela.core.logging import get_logger
from sentinela.domain.access import CallerContext
from sentinela.domain.interfaces.recognition.embedding_extractor import EmbeddingExtractor
from sentinela.domain.value_objects.filters import FilterSpec
from sentinela.domain.value_objects.search import FaceMatch, SearchParams
from sentinela.services.similarity_index import SimilarityIndex

logger = get_logger(__name__)

ALLOWED_IMAGE_TYPES: FrozenSet[str] = frozenset({"image/jpeg", "image/jpg", "image/png"})


class FaceSearchService:
    """Service for finding people by a face photo.

    This service:
    1. Extracts the query embedding through the embedding service
    2. Derives the visibility filter from the caller's role
    3. Queries the similarity index and returns ranked matches

    Example:
        ```python
        service = FaceSearchService(EmbeddingClient(), SimilarityIndex(store))
        matches = await service.search_by_face(
            image_bytes,
            SearchParams(limit=5, threshold=0.6),
            CallerContext(user_id=7, role=UserRole.GESTOR),
        )
        ```
    """

    def __init__(
        self,
        embedding_client: EmbeddingExtractor,
        index: SimilarityIndex,
        expected_dim: Optional[int] = None,
    ) -> None:
        """Initialize the face search service.

        Args:
            embedding_client: Extractor for the query embedding
            index: Similarity index over stored face embeddings
            expected_dim: Embedding dimension the index holds
        """
        self.embedding_client = embedding_client
        self.index = index
        self.expected_dim = expected_dim or settings.EMBEDDING_DIM

    async def search_by_face(
        self,
        image_bytes: bytes,
        params: SearchParams,
        caller: CallerContext,
        content_type: str = "image/jpeg",
    ) -> List[FaceMatch]:
        """Search for people whose face photos match the query image.

        Args:
            image_bytes: Uploaded query image
            params: Result limit and similarity threshold
            caller: Authenticated caller; decides confidential visibility
            content_type: MIME type of the query image

        Returns:
            Ranked matches; an empty list when nothing clears the threshold

        Raises:
            InvalidImageError: If the image is empty or of an unsupported type
            EmbeddingExtractionError: If no usable embedding could be extracted
            VectorStoreError: If the similarity query fails
        """
        if not image_bytes:
            raise InvalidImageError("The image is required. Send the file in the \"image\" field")
        if content_type not in ALLOWED_IMAGE_TYPES:
            raise InvalidImageError(
                "Invalid image format. Accepted formats: JPEG, JPG, PNG",
                details={"content_type": content_type}
            )

        embedding = await self.embedding_client.extract_from_buffer(image_bytes, content_type)
        if embedding is None:
            logger.warning("Face search aborted: no embedding extracted", user_id=caller.user_id)
            raise EmbeddingExtractionError(
                "Could not process the image. Make sure it shows a face clearly and send it again"
            )
        if len(embedding) != self.expected_dim:
            logger.warning(
                "Face search aborted: query embedding has unexpected dimension",
                dimension=len(embedding),
                expected=self.expected_dim,
                user_id=caller.user_id
            )
            raise EmbeddingExtractionError(
                "Could not process the image. Make sure it shows a face clearly and send it again",
                details={"dimension": len(embedding), "expected": self.expected_dim}
            )

        filters = FilterSpec.for_face_search(caller)
        logger.info(
            "Searching people by face",
            user_id=caller.user_id,
            role=caller.role.value,
            threshold=params.threshold,
            limit=params.limit
        )
        return await self.index.search(
            query=embedding,
            filters=filters,
            threshold=params.threshold,
            limit=params.limit,
        )
