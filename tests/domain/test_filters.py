"""Tests for the filter specification."""
from sentinela.domain.entities.media import MediaType
from sentinela.domain.value_objects.filters import (
    ExcludeConfidential,
    FilterSpec,
    HasEmbedding,
    MediaTypeIs,
)


def test_face_search_filter_for_privileged_caller(privileged_caller):
    spec = FilterSpec.for_face_search(privileged_caller)

    assert list(spec) == [MediaTypeIs(MediaType.FACE), HasEmbedding()]
    assert not spec.excludes_confidential


def test_face_search_filter_for_plain_user(unprivileged_caller):
    spec = FilterSpec.for_face_search(unprivileged_caller)

    assert list(spec) == [MediaTypeIs(MediaType.FACE), HasEmbedding(), ExcludeConfidential()]
    assert spec.excludes_confidential


def test_and_returns_new_spec():
    base = FilterSpec((HasEmbedding(),))
    extended = base.and_(ExcludeConfidential())

    assert len(base) == 1
    assert len(extended) == 2
    assert extended.predicates[-1] == ExcludeConfidential()
