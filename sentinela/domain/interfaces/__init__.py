"""Service interfaces package."""
from .recognition import EmbeddingExtractor
from .storage import FaceEmbeddingStore

__all__ = ["EmbeddingExtractor", "FaceEmbeddingStore"]
