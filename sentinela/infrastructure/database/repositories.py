"""Database repositories for the Sentinela service."""
from typing import List, Optional, Tuple

from sqlalchemy import delete, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sentinela.domain.entities.media import MediaType
from sentinela.infrastructure.database.models import Media, Person


class PersonRepository:
    """Repository for person operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository.

        Args:
            session: Database session
        """
        self._session = session

    async def get(self, person_id: int) -> Optional[Person]:
        return await self._session.get(Person, person_id)

    async def get_by_cpf(self, cpf: str) -> Optional[Person]:
        stmt = select(Person).where(Person.cpf == cpf)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_by_identity_key(self, key: str) -> Optional[Person]:
        stmt = select(Person).where(Person.identity_key == key)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(self, **fields) -> Person:
        """Create a new person record.

        Args:
            **fields: Column values of the new row

        Returns:
            Person: Created person, flushed so its id is populated
        """
        person = Person(**fields)
        self._session.add(person)
        await self._session.flush()
        await self._session.refresh(person)
        return person

    async def update(self, person: Person, **fields) -> Person:
        """Apply column changes to a loaded person.

        Args:
            person: Person loaded in this session
            **fields: Column values to change

        Returns:
            Person: Updated person, refreshed so server-side timestamps are current
        """
        for name, value in fields.items():
            setattr(person, name, value)
        await self._session.flush()
        await self._session.refresh(person)
        return person

    async def delete(self, person_id: int) -> bool:
        """Delete a person; the database cascades the delete to its media.

        Returns:
            bool: False if no row with ``person_id`` exists
        """
        result = await self._session.execute(delete(Person).where(Person.id == person_id))
        return result.rowcount > 0

    async def list(
        self,
        include_confidential: bool,
        full_name: Optional[str] = None,
        nickname: Optional[str] = None,
        mother_name: Optional[str] = None,
        father_name: Optional[str] = None,
        cpf: Optional[str] = None,
        is_confidential: Optional[bool] = None,
        created_by: Optional[int] = None,
        offset: int = 0,
        limit: int = 20,
    ) -> Tuple[List[Person], int]:
        """List people, newest first.

        Args:
            include_confidential: Whether confidential people are visible
            full_name: Optional case-insensitive substring of the full name
            nickname: Optional case-insensitive substring of the nickname
            mother_name: Optional case-insensitive substring of the mother's name
            father_name: Optional case-insensitive substring of the father's name
            cpf: Optional exact taxpayer identifier
            is_confidential: Optional exact confidentiality flag
            created_by: Optional creating user
            offset: Number of rows to skip
            limit: Maximum number of rows to return

        Returns:
            Tuple of (page of people, total matching count)
        """
        conditions = []
        if not include_confidential:
            conditions.append(Person.is_confidential.is_(False))
        for column, value in (
            (Person.full_name, full_name),
            (Person.nickname, nickname),
            (Person.mother_name, mother_name),
            (Person.father_name, father_name),
        ):
            if value:
                conditions.append(column.ilike(f"%{value}%"))
        if cpf:
            conditions.append(Person.cpf == cpf)
        if is_confidential is not None:
            conditions.append(Person.is_confidential.is_(is_confidential))
        if created_by is not None:
            conditions.append(Person.created_by == created_by)

        total = await self._session.scalar(
            select(func.count()).select_from(Person).where(*conditions)
        )
        stmt = (
            select(Person)
            .where(*conditions)
            .order_by(Person.created_at.desc(), Person.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all()), int(total or 0)


class MediaRepository:
    """Repository for media operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize repository.

        Args:
            session: Database session
        """
        self._session = session

    async def get(self, media_id: int) -> Optional[Media]:
        stmt = (
            select(Media)
            .where(Media.id == media_id)
            .options(selectinload(Media.person))
        )
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def create(
        self,
        person_id: int,
        media_type: MediaType,
        url: str,
        label: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Media:
        """Create a new media record without an embedding.

        Args:
            person_id: Owning person
            media_type: Media type
            url: Storage URL of the asset
            label: Optional short label
            description: Optional description

        Returns:
            Media: Created media record
        """
        media = Media(
            person_id=person_id,
            type=media_type,
            url=url,
            label=label,
            description=description
        )
        self._session.add(media)
        await self._session.flush()
        await self._session.refresh(media)
        return media

    async def list(
        self,
        include_confidential: bool,
        media_type: Optional[MediaType] = None,
        person_id: Optional[int] = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[Media], int]:
        """List media, newest first, hiding media of confidential people when asked."""
        conditions = []
        if not include_confidential:
            conditions.append(Person.is_confidential.is_(False))
        if media_type is not None:
            conditions.append(Media.type == media_type)
        if person_id is not None:
            conditions.append(Media.person_id == person_id)

        total = await self._session.scalar(
            select(func.count(Media.id)).select_from(Media).join(Media.person).where(*conditions)
        )
        stmt = (
            select(Media)
            .join(Media.person)
            .where(*conditions)
            .order_by(Media.created_at.desc(), Media.id.desc())
            .offset(offset)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all()), int(total or 0)

    async def update(self, media: Media, **fields) -> Media:
        """Apply column changes to a loaded media row and reload its owning person."""
        for name, value in fields.items():
            setattr(media, name, value)
        await self._session.flush()
        await self._session.refresh(media, attribute_names=["person"])
        return media

    async def delete(self, media_id: int) -> bool:
        """Delete a media row together with its embedding.

        Returns:
            bool: False if no row with ``media_id`` exists
        """
        result = await self._session.execute(delete(Media).where(Media.id == media_id))
        return result.rowcount > 0

    async def set_embedding(self, media_id: int, embedding: List[float]) -> bool:
        """Write the embedding of a single media row.

        Returns:
            bool: False if no row with ``media_id`` exists
        """
        stmt = (
            update(Media)
            .where(Media.id == media_id)
            .values(embedding=embedding)
        )
        result = await self._session.execute(stmt)
        return result.rowcount > 0
