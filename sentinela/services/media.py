"""Media service: photographic assets attached to people."""
from typing import Callable, Optional

from sentinela.core.exceptions import NotFoundError
from sentinela.core.logging import get_logger
from sentinela.domain.access import CallerContext, can_view_confidential, ensure_can_view
from sentinela.domain.entities.media import MediaRecord, MediaType
from sentinela.domain.entities.person import PersonRecord
from sentinela.domain.interfaces.storage.embedding_store import FaceEmbeddingStore
from sentinela.domain.value_objects.ingest import ImageSource
from sentinela.infrastructure.database.unit_of_work import UnitOfWork
from sentinela.services.models import MediaCreate, MediaQuery, MediaUpdate, Page

logger = get_logger(__name__)

FaceMediaHook = Callable[[int, ImageSource], None]


class MediaService:
    """Service for creating, reading, changing and deleting media records.

    Every committed change is mirrored to ``store`` so face search sees the
    current catalogue. New FACE media are then handed to
    ``on_face_media_created``; extraction happens in the background and never
    affects the creation itself.
    """

    def __init__(
        self,
        uow: UnitOfWork,
        store: Optional[FaceEmbeddingStore] = None,
        on_face_media_created: Optional[FaceMediaHook] = None,
    ) -> None:
        """Initialize the media service.

        Args:
            uow: Unit of work for the current request
            store: Embedding store searched by face search
            on_face_media_created: Hook scheduling embedding ingestion
        """
        self.uow = uow
        self.store = store
        self.on_face_media_created = on_face_media_created

    async def _load_person(self, person_id: int, caller: CallerContext):
        person = await self.uow.people.get(person_id)
        if person is None:
            raise NotFoundError.for_entity("Person", person_id)
        ensure_can_view(person, caller)
        return person

    async def _load(self, media_id: int, caller: CallerContext):
        media = await self.uow.media.get(media_id)
        if media is None:
            raise NotFoundError.for_entity("Media", media_id)
        ensure_can_view(media.person, caller)
        return media

    async def create(
        self,
        data: MediaCreate,
        caller: CallerContext,
        image_bytes: Optional[bytes] = None,
        content_type: str = "image/jpeg",
    ) -> MediaRecord:
        """Attach a media record to a person.

        Args:
            data: Media fields
            caller: Creating user
            image_bytes: Raw image when already at hand; saves a download during ingestion
            content_type: MIME type of ``image_bytes``

        Returns:
            The stored media record (without embedding yet)

        Raises:
            NotFoundError: If the person does not exist
            ConfidentialAccessError: If the caller may not view the person
        """
        person = await self._load_person(data.person_id, caller)
        owner = PersonRecord.model_validate(person)

        media = await self.uow.media.create(
            person_id=data.person_id,
            media_type=data.type,
            url=data.url,
            label=data.label,
            description=data.description,
        )
        record = MediaRecord.model_validate(media)
        await self.uow.commit()
        logger.info(
            "Media created",
            media_id=record.id,
            person_id=record.person_id,
            type=record.type.value,
            uploaded=image_bytes is not None,
            user_id=caller.user_id
        )

        if self.store is not None:
            await self.store.register_media(record, owner)

        if record.type == MediaType.FACE and self.on_face_media_created is not None:
            source = ImageSource(url=record.url, data=image_bytes, content_type=content_type)
            self.on_face_media_created(record.id, source)

        return record

    async def get(self, media_id: int, caller: CallerContext) -> MediaRecord:
        """Read one media record, enforcing access to its owning person."""
        return MediaRecord.model_validate(await self._load(media_id, caller))

    async def update(self, media_id: int, data: MediaUpdate, caller: CallerContext) -> MediaRecord:
        """Change the label, description or owning person of a media record.

        Moving media to another person requires access to both people. The
        stored embedding, if any, moves with the media.

        Raises:
            NotFoundError: If the media or the new person does not exist
            ConfidentialAccessError: If the caller may not view either person
        """
        media = await self._load(media_id, caller)
        changes = data.model_dump(exclude_unset=True)
        if changes.get("person_id") is None:
            changes.pop("person_id", None)

        owner = media.person
        if "person_id" in changes and changes["person_id"] != media.person_id:
            owner = await self._load_person(changes["person_id"], caller)

        media = await self.uow.media.update(media, **changes)
        record = MediaRecord.model_validate(media)
        await self.uow.commit()
        logger.info(
            "Media updated",
            media_id=media_id,
            person_id=record.person_id,
            fields=sorted(changes),
            user_id=caller.user_id
        )

        if self.store is not None:
            await self.store.register_media(record, PersonRecord.model_validate(owner))
        return record

    async def remove(self, media_id: int, caller: CallerContext) -> None:
        """Delete a media record; a deleted face photo never matches a search again.

        Raises:
            NotFoundError: If the media does not exist
            ConfidentialAccessError: If the caller may not view its owning person
        """
        await self._load(media_id, caller)
        await self.uow.media.delete(media_id)
        await self.uow.commit()
        logger.info("Media deleted", media_id=media_id, user_id=caller.user_id)

        if self.store is not None:
            await self.store.remove_media(media_id)

    async def list(self, query: MediaQuery, caller: CallerContext) -> Page[MediaRecord]:
        """List media visible to the caller, newest first."""
        items, total = await self.uow.media.list(
            include_confidential=can_view_confidential(caller.role),
            media_type=query.type,
            person_id=query.person_id,
            offset=(query.page - 1) * query.limit,
            limit=query.limit,
        )
        return Page[MediaRecord].build(
            [MediaRecord.model_validate(m) for m in items],
            total, query.page, query.limit,
        )
