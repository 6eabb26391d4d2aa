"""Tests for request-scoped logging context and identifier masking."""
import pytest
import structlog

from sentinela.core.logging import (
    bind_request_context,
    clear_request_context,
    mask_identifier,
    mask_sensitive_fields,
)
from sentinela.infrastructure.dependencies import get_caller


@pytest.fixture(autouse=True)
def clean_context():
    clear_request_context()
    yield
    clear_request_context()


@pytest.mark.parametrize(
    "value, expected",
    [
        ("123.456.789-09", "***.***.***-09"),
        ("12345678909", "*********09"),
        ("7", "7"),
        (None, None),
    ],
)
def test_mask_identifier(value, expected):
    assert mask_identifier(value) == expected


def test_sensitive_fields_masked_in_event_and_details():
    event = mask_sensitive_fields(
        None, "warning",
        {"event": "Person update conflicts", "cpf": "12345678909",
         "details": {"cpf": "98765432100", "field": "cpf"}},
    )

    assert event["cpf"] == "*********09"
    assert event["details"] == {"cpf": "*********00", "field": "cpf"}


def test_bound_context_reaches_log_events():
    bind_request_context(request_id="abc", path="/api/v1/people")

    event = structlog.contextvars.merge_contextvars(None, "info", {"event": "x"})

    assert event["request_id"] == "abc"
    assert event["path"] == "/api/v1/people"


async def test_caller_identity_bound_to_context():
    caller = await get_caller(x_user_id="5", x_user_role="gestor")

    context = structlog.contextvars.get_contextvars()
    assert context["user_id"] == caller.user_id == 5
    assert context["role"] == "gestor"
