"""Tests for person identity normalization."""
import pytest

from sentinela.core.exceptions import InvalidSearchParamsError
from sentinela.domain.entities.person import identity_key, normalize_cpf, normalize_name
from sentinela.domain.value_objects.ingest import ImageSource
from sentinela.domain.value_objects.search import SearchParams


def test_normalize_name_folds_accents_case_and_spacing():
    assert normalize_name("  José   da SILVA ") == "jose da silva"
    assert normalize_name("JOÃO") == normalize_name("joao")


def test_identity_key_matches_equivalent_spellings():
    assert identity_key("Ana Conceição", "Maria José") == identity_key("ana conceicao", "MARIA  JOSE")


@pytest.mark.parametrize("mother_name", [None, "", "   "])
def test_identity_key_requires_mother_name(mother_name):
    assert identity_key("Ana", mother_name) is None


@pytest.mark.parametrize("raw, expected", [
    ("123.456.789-09", "12345678909"),
    ("12345678909", "12345678909"),
    ("", None),
    (None, None),
])
def test_normalize_cpf(raw, expected):
    assert normalize_cpf(raw) == expected


def test_search_params_defaults():
    params = SearchParams.create()
    assert params.limit == 10
    assert params.threshold == 0.5


@pytest.mark.parametrize("limit, threshold", [(0, 0.5), (51, 0.5), (10, -0.1), (10, 1.5)])
def test_search_params_out_of_range(limit, threshold):
    with pytest.raises(InvalidSearchParamsError):
        SearchParams.create(limit=limit, threshold=threshold)


def test_image_source_requires_url_or_bytes():
    with pytest.raises(ValueError):
        ImageSource()
