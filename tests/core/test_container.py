"""Tests for service container wiring."""
import pytest

from sentinela.core.config import settings
from sentinela.core.container import ServiceContainer
from sentinela.domain.entities.media import MediaType
from sentinela.domain.value_objects.search import SearchParams
from sentinela.infrastructure.vectordb.memory import InMemoryFaceStore
from sentinela.services.media import MediaService
from sentinela.services.models import MediaCreate
from sentinela.services.people import PeopleService
from tests.factories import FakeEmbeddingExtractor, FakeUnitOfWork, query_vector


@pytest.fixture
async def memory_container(monkeypatch):
    monkeypatch.setattr(settings, "VECTOR_BACKEND", "memory")
    container = ServiceContainer()
    await container.initialize(embedding_client=FakeEmbeddingExtractor(query_vector()))
    yield container
    await container.cleanup()


@pytest.fixture
def uow() -> FakeUnitOfWork:
    uow = FakeUnitOfWork()
    uow.people.add(1, full_name="Public Person")
    return uow


def media_service(container: ServiceContainer, uow: FakeUnitOfWork) -> MediaService:
    return MediaService(
        uow,
        store=container.embedding_store,
        on_face_media_created=container.ingest_queue.on_face_media_created,
    )


class TestMemoryBackend:
    async def test_builds_memory_store(self, memory_container):
        assert isinstance(memory_container.embedding_store, InMemoryFaceStore)
        assert memory_container.initialized

    async def test_created_face_media_becomes_searchable(
        self, memory_container, uow, privileged_caller
    ):
        media = await media_service(memory_container, uow).create(
            MediaCreate(type=MediaType.FACE, url="https://cdn.example/1.jpg", person_id=1),
            privileged_caller,
        )
        await memory_container.ingest_queue.join()

        assert memory_container.ingest_queue.succeeded == 1
        matches = await memory_container.face_search_service.search_by_face(
            image_bytes=b"jpeg-bytes",
            params=SearchParams.create(),
            caller=privileged_caller,
        )
        assert [(m.person.id, m.media_id) for m in matches] == [(1, media.id)]

    async def test_deleted_person_leaves_search(self, memory_container, uow, privileged_caller):
        await media_service(memory_container, uow).create(
            MediaCreate(type=MediaType.FACE, url="https://cdn.example/1.jpg", person_id=1),
            privileged_caller,
        )
        await memory_container.ingest_queue.join()

        await PeopleService(uow, store=memory_container.embedding_store).remove(1, privileged_caller)

        matches = await memory_container.face_search_service.search_by_face(
            image_bytes=b"jpeg-bytes",
            params=SearchParams.create(),
            caller=privileged_caller,
        )
        assert matches == []


async def test_unknown_backend_rejected(monkeypatch):
    monkeypatch.setattr(settings, "VECTOR_BACKEND", "faiss")

    with pytest.raises(ValueError):
        await ServiceContainer().initialize(embedding_client=FakeEmbeddingExtractor(query_vector()))
