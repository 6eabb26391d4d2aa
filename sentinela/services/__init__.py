"""Application services."""
from .embedding_client import EmbeddingClient
from .face_search import FaceSearchService
from .media_ingest import MediaIngestService
from .similarity_index import SimilarityIndex

__all__ = ["EmbeddingClient", "FaceSearchService", "MediaIngestService", "SimilarityIndex"]
