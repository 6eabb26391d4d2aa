"""Shared fixtures for the Sentinela test suite."""
import pytest

from sentinela.domain.access import CallerContext, UserRole
from sentinela.infrastructure.vectordb.memory import InMemoryFaceStore


@pytest.fixture
def store() -> InMemoryFaceStore:
    return InMemoryFaceStore()


@pytest.fixture
def privileged_caller() -> CallerContext:
    return CallerContext(user_id=1, role=UserRole.GESTOR)


@pytest.fixture
def unprivileged_caller() -> CallerContext:
    return CallerContext(user_id=2, role=UserRole.USUARIO)
