"""People service: identity records with confidentiality checks."""
from typing import Optional

from sentinela.core.exceptions import ConflictError, NotFoundError
from sentinela.core.logging import get_logger
from sentinela.domain.access import CallerContext, can_view_confidential, ensure_can_view
from sentinela.domain.entities.person import PersonRecord, identity_key, normalize_cpf
from sentinela.domain.interfaces.storage.embedding_store import FaceEmbeddingStore
from sentinela.infrastructure.database.unit_of_work import UnitOfWork
from sentinela.services.models import Page, PersonCreate, PersonQuery, PersonUpdate

logger = get_logger(__name__)


class PeopleService:
    """Service for registering, reading, changing and deleting people.

    Changes are committed before ``store`` is told about them, so a store
    keeping its own copy of the catalogue never sees uncommitted state.
    """

    def __init__(self, uow: UnitOfWork, store: Optional[FaceEmbeddingStore] = None) -> None:
        self.uow = uow
        self.store = store

    async def _load(self, person_id: int, caller: CallerContext):
        person = await self.uow.people.get(person_id)
        if person is None:
            raise NotFoundError.for_entity("Person", person_id)
        ensure_can_view(person, caller)
        return person

    async def _ensure_cpf_free(self, cpf: Optional[str], person_id: Optional[int] = None) -> None:
        if not cpf:
            return
        existing = await self.uow.people.get_by_cpf(cpf)
        if existing is not None and existing.id != person_id:
            raise ConflictError("Person with this CPF already exists", details={"field": "cpf"})

    async def _ensure_identity_free(self, key: Optional[str], person_id: Optional[int] = None) -> None:
        if not key:
            return
        existing = await self.uow.people.get_by_identity_key(key)
        if existing is not None and existing.id != person_id:
            raise ConflictError(
                "Person with this full name and mother's name already exists",
                details={"field": "full_name,mother_name"}
            )

    async def create(self, data: PersonCreate, caller: CallerContext) -> PersonRecord:
        """Register a person.

        Args:
            data: Person fields
            caller: Creating user

        Returns:
            The stored person

        Raises:
            ConflictError: If the CPF, or the full name and mother's name pair,
                is already registered
        """
        cpf = normalize_cpf(data.cpf)
        await self._ensure_cpf_free(cpf)

        key = identity_key(data.full_name, data.mother_name)
        await self._ensure_identity_free(key)

        fields = data.model_dump(exclude={"cpf", "warrant_file_url"})
        person = await self.uow.people.create(
            **fields,
            cpf=cpf,
            warrant_file_url=str(data.warrant_file_url) if data.warrant_file_url else None,
            identity_key=key,
            created_by=caller.user_id,
        )
        logger.info(
            "Person created",
            person_id=person.id,
            is_confidential=person.is_confidential,
            user_id=caller.user_id
        )
        return PersonRecord.model_validate(person)

    async def get(self, person_id: int, caller: CallerContext) -> PersonRecord:
        """Read one person.

        Raises:
            NotFoundError: If the person does not exist
            ConfidentialAccessError: If the person is confidential and the caller
                may not view it
        """
        return PersonRecord.model_validate(await self._load(person_id, caller))

    async def get_by_cpf(self, cpf: str, caller: CallerContext) -> PersonRecord:
        """Read the person holding a CPF, formatted or bare.

        Raises:
            NotFoundError: If no person holds the CPF
            ConfidentialAccessError: If the person is confidential and the caller
                may not view it
        """
        normalized = normalize_cpf(cpf)
        person = await self.uow.people.get_by_cpf(normalized) if normalized else None
        if person is None:
            raise NotFoundError("Person with this CPF not found", details={"cpf": cpf})
        ensure_can_view(person, caller)
        return PersonRecord.model_validate(person)

    async def update(self, person_id: int, data: PersonUpdate, caller: CallerContext) -> PersonRecord:
        """Change the fields set in ``data``.

        The uniqueness rules of :meth:`create` are checked again against every
        other person. Search results pick up the change immediately.

        Raises:
            NotFoundError: If the person does not exist
            ConfidentialAccessError: If the caller may not view the person
            ConflictError: If the new CPF or name pair belongs to someone else
        """
        person = await self._load(person_id, caller)
        changes = data.model_dump(exclude_unset=True)

        if "cpf" in changes:
            changes["cpf"] = normalize_cpf(changes["cpf"])
            await self._ensure_cpf_free(changes["cpf"], person_id)
        if changes.get("warrant_file_url") is not None:
            changes["warrant_file_url"] = str(changes["warrant_file_url"])
        if changes.get("full_name") is None:
            changes.pop("full_name", None)
        if changes.get("is_confidential") is None:
            changes.pop("is_confidential", None)

        if "full_name" in changes or "mother_name" in changes:
            key = identity_key(
                changes.get("full_name", person.full_name),
                changes.get("mother_name", person.mother_name),
            )
            await self._ensure_identity_free(key, person_id)
            changes["identity_key"] = key

        person = await self.uow.people.update(person, **changes, updated_by=caller.user_id)
        record = PersonRecord.model_validate(person)
        await self.uow.commit()
        logger.info(
            "Person updated",
            person_id=person_id,
            fields=sorted(k for k in changes if k != "identity_key"),
            user_id=caller.user_id
        )

        if self.store is not None:
            await self.store.update_person(record)
        return record

    async def remove(self, person_id: int, caller: CallerContext) -> None:
        """Delete a person together with all of their media.

        Raises:
            NotFoundError: If the person does not exist
            ConfidentialAccessError: If the caller may not view the person
        """
        await self._load(person_id, caller)
        await self.uow.people.delete(person_id)
        await self.uow.commit()
        logger.info("Person deleted", person_id=person_id, user_id=caller.user_id)

        if self.store is not None:
            await self.store.remove_person(person_id)

    async def list(self, query: PersonQuery, caller: CallerContext) -> Page[PersonRecord]:
        """List people visible to the caller, newest first."""
        people, total = await self.uow.people.list(
            include_confidential=can_view_confidential(caller.role),
            full_name=query.full_name,
            nickname=query.nickname,
            mother_name=query.mother_name,
            father_name=query.father_name,
            cpf=normalize_cpf(query.cpf),
            is_confidential=query.is_confidential,
            created_by=query.created_by,
            offset=(query.page - 1) * query.limit,
            limit=query.limit,
        )
        return Page[PersonRecord].build(
            [PersonRecord.model_validate(p) for p in people],
            total, query.page, query.limit,
        )
