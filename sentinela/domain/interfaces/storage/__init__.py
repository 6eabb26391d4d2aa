"""Storage interfaces."""
from .embedding_store import FaceEmbeddingStore

__all__ = ["FaceEmbeddingStore"]
