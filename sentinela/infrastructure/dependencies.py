"""FastAPI dependency providers."""
from typing import AsyncGenerator, Optional

from fastapi import Depends, Header

from sentinela.consumers.ingest_worker import IngestQueue
from sentinela.core.container import ServiceContainer, container
from sentinela.core.exceptions import ServiceNotInitializedError, UnauthorizedError
from sentinela.core.logging import bind_request_context
from sentinela.domain.access import CallerContext, UserRole
from sentinela.domain.interfaces.recognition.embedding_extractor import EmbeddingExtractor
from sentinela.infrastructure.database.dependencies import get_uow
from sentinela.infrastructure.database.unit_of_work import UnitOfWork
from sentinela.services.face_search import FaceSearchService
from sentinela.services.media import MediaService
from sentinela.services.people import PeopleService


async def get_container() -> ServiceContainer:
    """Dependency provider for the global ServiceContainer instance."""
    if not container.initialized:
        raise ServiceNotInitializedError("Service container is not initialized")
    return container


async def get_caller(
    x_user_id: Optional[str] = Header(None),
    x_user_role: Optional[str] = Header(None),
) -> CallerContext:
    """Caller identity forwarded by the authentication layer.

    Raises:
        UnauthorizedError: If the identity headers are missing or malformed
    """
    if not x_user_id or not x_user_role:
        raise UnauthorizedError("Missing caller identity")
    try:
        caller = CallerContext(user_id=int(x_user_id), role=UserRole(x_user_role))
    except ValueError as e:
        raise UnauthorizedError("Invalid caller identity") from e
    bind_request_context(user_id=caller.user_id, role=caller.role.value)
    return caller


async def get_embedding_client(
    cont: ServiceContainer = Depends(get_container),
) -> EmbeddingExtractor:
    if cont.embedding_client is None:
        raise ServiceNotInitializedError("Embedding client not initialized")
    return cont.embedding_client


async def get_ingest_queue(
    cont: ServiceContainer = Depends(get_container),
) -> IngestQueue:
    if cont.ingest_queue is None:
        raise ServiceNotInitializedError("Ingest queue not initialized")
    return cont.ingest_queue


async def get_face_search_service(
    cont: ServiceContainer = Depends(get_container),
) -> AsyncGenerator[FaceSearchService, None]:
    """Provide the face search service.

    Yields:
        FaceSearchService: Initialized search service

    Raises:
        ServiceNotInitializedError: If service is not initialized
    """
    if cont.face_search_service is None:
        raise ServiceNotInitializedError("Face search service not initialized")
    yield cont.face_search_service


async def get_people_service(
    uow: UnitOfWork = Depends(get_uow),
    cont: ServiceContainer = Depends(get_container),
) -> AsyncGenerator[PeopleService, None]:
    """Provide a people service that keeps the embedding store in step."""
    yield PeopleService(uow, store=cont.embedding_store)


async def get_media_service(
    uow: UnitOfWork = Depends(get_uow),
    cont: ServiceContainer = Depends(get_container),
    queue: IngestQueue = Depends(get_ingest_queue),
) -> AsyncGenerator[MediaService, None]:
    """Provide a media service wired to the embedding store and the ingestion queue."""
    yield MediaService(
        uow,
        store=cont.embedding_store,
        on_face_media_created=queue.on_face_media_created,
    )
