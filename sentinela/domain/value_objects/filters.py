"""Filter specification for embedding store queries.

A ``FilterSpec`` is an ordered tuple of typed predicates. Stores translate each
predicate into their own query language; callers never build query text.
"""
from dataclasses import dataclass
from typing import Tuple, Union

from sentinela.domain.access import CallerContext, can_view_confidential
from sentinela.domain.entities.media import MediaType


@dataclass(frozen=True)
class MediaTypeIs:
    """Only media of the given type."""
    media_type: MediaType


@dataclass(frozen=True)
class HasEmbedding:
    """Only media rows holding a feature vector."""


@dataclass(frozen=True)
class ExcludeConfidential:
    """Only media whose owning person is not confidential."""


Predicate = Union[MediaTypeIs, HasEmbedding, ExcludeConfidential]


@dataclass(frozen=True)
class FilterSpec:
    """Ordered, immutable list of predicates, all of which must hold."""
    predicates: Tuple[Predicate, ...] = ()

    def __iter__(self):
        return iter(self.predicates)

    def __len__(self) -> int:
        return len(self.predicates)

    def and_(self, predicate: Predicate) -> "FilterSpec":
        """Return a new spec with ``predicate`` appended."""
        return FilterSpec(self.predicates + (predicate,))

    @property
    def excludes_confidential(self) -> bool:
        return any(isinstance(p, ExcludeConfidential) for p in self.predicates)

    @classmethod
    def for_face_search(cls, caller: CallerContext) -> "FilterSpec":
        """Visibility filter for a face search issued by ``caller``."""
        spec = cls((MediaTypeIs(MediaType.FACE), HasEmbedding()))
        if not can_view_confidential(caller.role):
            spec = spec.and_(ExcludeConfidential())
        return spec
