"""Face embedding store backends."""
from .memory import InMemoryFaceStore, IndexedFace
from .pgvector import PgVectorFaceStore

__all__ = ["InMemoryFaceStore", "IndexedFace", "PgVectorFaceStore"]
