"""Client for the external face embedding service."""
import numbers
from types import TracebackType
from typing import Any, Optional, Type

import httpx

from sentinela.core.config import settings
from sentinela.core.logging import get_logger
from sentinela.domain.interfaces.recognition.embedding_extractor import EmbeddingExtractor
from sentinela.domain.value_objects.search import FeatureVector

logger = get_logger(__name__)

EXTRACT_PATH = "/api/v1/embeddings/extract"
HEALTH_PATH = "/health"


class EmbeddingClient(EmbeddingExtractor):
    """HTTP client turning face images into feature vectors.

    Every failure (transport error, timeout, non-2xx status, malformed body)
    is logged and resolved to ``None`` / ``False``, so the client is safe to
    call without exception handling at the call site.

    Example:
        ```python
        async with EmbeddingClient() as client:
            embedding = await client.extract_from_url("https://cdn.example/faces/1.jpg")
            if embedding is None:
                ...  # carry on without an embedding
        ```
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        expected_dim: Optional[int] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        extract_timeout: Optional[float] = None,
        download_timeout: Optional[float] = None,
        health_timeout: Optional[float] = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Base URL of the embedding service
            expected_dim: Expected embedding length; other lengths are logged
            http_client: Optional pre-built httpx client (tests inject a mock transport)
            extract_timeout: Timeout in seconds for extraction requests
            download_timeout: Timeout in seconds for image downloads
            health_timeout: Timeout in seconds for the health check
        """
        self.base_url = (base_url or settings.FACE_RECOGNITION_API_URL).rstrip("/")
        self.expected_dim = expected_dim or settings.EMBEDDING_DIM
        self.extract_timeout = extract_timeout or settings.EMBEDDING_EXTRACT_TIMEOUT
        self.download_timeout = download_timeout or settings.IMAGE_DOWNLOAD_TIMEOUT
        self.health_timeout = health_timeout or settings.EMBEDDING_HEALTH_TIMEOUT
        self._client = http_client or httpx.AsyncClient(follow_redirects=True)

    async def __aenter__(self) -> "EmbeddingClient":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[TracebackType],
    ) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP connection pool."""
        await self._client.aclose()

    async def extract_from_buffer(
        self,
        image_bytes: bytes,
        content_type: str = "image/jpeg",
    ) -> Optional[FeatureVector]:
        """Extract a face embedding from raw image bytes.

        Args:
            image_bytes: Encoded image
            content_type: MIME type of the image

        Returns:
            The feature vector, or None if extraction failed. A vector whose
            length differs from the expected dimension is returned as-is
            after a warning.
        """
        logger.info("Extracting embedding from buffer", size_bytes=len(image_bytes))
        try:
            response = await self._client.post(
                f"{self.base_url}{EXTRACT_PATH}",
                files={"file": ("image.jpg", image_bytes, content_type)},
                timeout=self.extract_timeout,
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as e:
            logger.error("Embedding extraction timed out", error=str(e))
            return None
        except httpx.HTTPStatusError as e:
            logger.error(
                "Embedding service returned an error status",
                status_code=e.response.status_code,
                error=str(e)
            )
            return None
        except httpx.HTTPError as e:
            logger.error("Embedding service request failed", error=str(e), exc_info=True)
            return None
        except ValueError as e:
            logger.error("Embedding service returned invalid JSON", error=str(e))
            return None
        except Exception as e:
            logger.error("Unexpected error during embedding extraction", error=str(e), exc_info=True)
            return None

        embedding = self._parse_embedding(payload)
        if embedding is None:
            return None

        if len(embedding) != self.expected_dim:
            logger.warning(
                "Embedding has unexpected dimension",
                dimension=len(embedding),
                expected=self.expected_dim
            )

        logger.info("Embedding extracted", dimension=len(embedding))
        return embedding

    async def extract_from_url(self, url: str) -> Optional[FeatureVector]:
        """Download an image and extract its face embedding.

        Args:
            url: Public URL of the image

        Returns:
            The feature vector, or None if download or extraction failed
        """
        logger.info("Downloading image for embedding extraction", url=url)
        try:
            response = await self._client.get(url, timeout=self.download_timeout)
            response.raise_for_status()
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.error("Failed to download image", url=url, error=str(e))
            return None
        except Exception as e:
            logger.error("Unexpected error downloading image", url=url, error=str(e), exc_info=True)
            return None

        content_type = response.headers.get("content-type") or "image/jpeg"
        content_type = content_type.split(";")[0].strip() or "image/jpeg"
        logger.debug("Image downloaded", url=url, size_bytes=len(response.content))
        return await self.extract_from_buffer(response.content, content_type)

    async def is_available(self) -> bool:
        """Check the embedding service health endpoint."""
        try:
            response = await self._client.get(
                f"{self.base_url}{HEALTH_PATH}",
                timeout=self.health_timeout,
            )
            response.raise_for_status()
            return True
        except Exception as e:
            logger.warning("Face recognition service unavailable", error=str(e))
            return False

    @staticmethod
    def _parse_embedding(payload: Any) -> Optional[FeatureVector]:
        """Pull a list of floats out of the service response body."""
        embedding = payload.get("embedding") if isinstance(payload, dict) else None
        if not isinstance(embedding, list):
            logger.error("Invalid response: embedding is not an array")
            return None
        if not embedding:
            logger.error("Invalid response: embedding is empty")
            return None
        if not all(
            isinstance(x, numbers.Real) and not isinstance(x, bool) for x in embedding
        ):
            logger.error("Invalid response: embedding contains non-numeric values")
            return None
        return [float(x) for x in embedding]
