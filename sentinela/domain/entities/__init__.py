"""Domain entities package."""
from .media import MediaRecord, MediaType
from .person import PersonRecord

__all__ = ["MediaRecord", "MediaType", "PersonRecord"]
