"""Value objects package."""
from .filters import ExcludeConfidential, FilterSpec, HasEmbedding, MediaTypeIs
from .ingest import ImageSource, IngestJob
from .search import FaceCandidate, FaceMatch, FeatureVector, SearchParams

__all__ = [
    "ExcludeConfidential",
    "FaceCandidate",
    "FaceMatch",
    "FeatureVector",
    "FilterSpec",
    "HasEmbedding",
    "ImageSource",
    "IngestJob",
    "MediaTypeIs",
    "SearchParams",
]
