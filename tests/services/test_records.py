"""Tests for the people and media services."""
import pytest

from sentinela.core.exceptions import ConfidentialAccessError, ConflictError, NotFoundError
from sentinela.domain.entities.media import MediaType
from sentinela.domain.value_objects.filters import FilterSpec
from sentinela.services.media import MediaService
from sentinela.services.models import (
    MediaCreate,
    MediaQuery,
    MediaUpdate,
    PersonCreate,
    PersonQuery,
    PersonUpdate,
)
from sentinela.services.people import PeopleService
from tests.factories import FakeUnitOfWork, make_person, query_vector, vector_at_distance


@pytest.fixture
def uow() -> FakeUnitOfWork:
    uow = FakeUnitOfWork()
    uow.people.add(1, full_name="Public Person")
    uow.people.add(2, is_confidential=True, full_name="Secret Person")
    return uow


class TestPeopleService:
    async def test_create_normalizes_cpf_and_records_creator(self, uow, privileged_caller):
        service = PeopleService(uow)

        person = await service.create(
            PersonCreate(full_name="Ana Lima", cpf="123.456.789-09", mother_name="Rosa Lima"),
            privileged_caller,
        )

        assert person.cpf == "12345678909"
        assert person.created_by == privileged_caller.user_id
        assert uow.people.rows[person.id].identity_key == "ana lima|rosa lima"

    async def test_duplicate_cpf_rejected(self, uow, privileged_caller):
        service = PeopleService(uow)
        await service.create(PersonCreate(full_name="Ana", cpf="12345678909"), privileged_caller)

        with pytest.raises(ConflictError):
            await service.create(PersonCreate(full_name="Bia", cpf="123.456.789-09"), privileged_caller)

    async def test_duplicate_name_and_mother_rejected(self, uow, privileged_caller):
        service = PeopleService(uow)
        await service.create(PersonCreate(full_name="José Silva", mother_name="Maria"), privileged_caller)

        with pytest.raises(ConflictError):
            await service.create(
                PersonCreate(full_name="jose  silva", mother_name="MARIA"), privileged_caller
            )

    async def test_same_name_without_mother_allowed(self, uow, privileged_caller):
        service = PeopleService(uow)
        await service.create(PersonCreate(full_name="José Silva"), privileged_caller)
        await service.create(PersonCreate(full_name="José Silva"), privileged_caller)

    async def test_get_confidential(self, uow, privileged_caller, unprivileged_caller):
        service = PeopleService(uow)

        assert (await service.get(2, privileged_caller)).id == 2
        with pytest.raises(ConfidentialAccessError):
            await service.get(2, unprivileged_caller)

    async def test_get_missing(self, uow, privileged_caller):
        with pytest.raises(NotFoundError):
            await PeopleService(uow).get(404, privileged_caller)

    async def test_list_hides_confidential(self, uow, privileged_caller, unprivileged_caller):
        service = PeopleService(uow)

        full = await service.list(PersonQuery(), privileged_caller)
        restricted = await service.list(PersonQuery(), unprivileged_caller)

        assert [p.id for p in full.data] == [2, 1]
        assert [p.id for p in restricted.data] == [1]
        assert restricted.total == 1
        assert restricted.total_pages == 1


    async def test_list_filters(self, uow, privileged_caller):
        uow.people.add(3, full_name="Rui Costa", nickname="Ruizinho", mother_name="Ana Costa")
        uow.people.rows[3].created_by = 7
        service = PeopleService(uow)

        async def ids(**filters):
            page = await service.list(PersonQuery(**filters), privileged_caller)
            return [p.id for p in page.data]

        assert await ids(nickname="ruiz") == [3]
        assert await ids(mother_name="COSTA") == [3]
        assert await ids(is_confidential=True) == [2]
        assert await ids(is_confidential=False) == [3, 1]
        assert await ids(created_by=7) == [3]

    async def test_confidential_filter_never_widens_visibility(self, uow, unprivileged_caller):
        page = await PeopleService(uow).list(PersonQuery(is_confidential=True), unprivileged_caller)
        assert page.data == []

    async def test_get_by_cpf_accepts_formatted_value(self, uow, privileged_caller, unprivileged_caller):
        uow.people.rows[1].cpf = "12345678909"
        uow.people.rows[2].cpf = "98765432100"
        service = PeopleService(uow)

        assert (await service.get_by_cpf("123.456.789-09", unprivileged_caller)).id == 1
        with pytest.raises(ConfidentialAccessError):
            await service.get_by_cpf("98765432100", unprivileged_caller)
        with pytest.raises(NotFoundError):
            await service.get_by_cpf("000.000.000-00", privileged_caller)

    async def test_update_changes_only_given_fields(self, uow, privileged_caller):
        uow.people.rows[1].nickname = "Old"
        service = PeopleService(uow)

        person = await service.update(1, PersonUpdate(notes="seen downtown"), privileged_caller)

        assert person.notes == "seen downtown"
        assert person.nickname == "Old"
        assert person.updated_by == privileged_caller.user_id
        assert uow.commits == 1

    async def test_update_keeps_own_cpf(self, uow, privileged_caller):
        uow.people.rows[1].cpf = "12345678909"

        person = await PeopleService(uow).update(
            1, PersonUpdate(cpf="123.456.789-09"), privileged_caller
        )
        assert person.cpf == "12345678909"

    async def test_update_to_taken_cpf_rejected(self, uow, privileged_caller):
        uow.people.rows[2].cpf = "12345678909"

        with pytest.raises(ConflictError):
            await PeopleService(uow).update(1, PersonUpdate(cpf="12345678909"), privileged_caller)

    async def test_update_to_taken_name_pair_rejected(self, uow, privileged_caller):
        service = PeopleService(uow)
        await service.create(PersonCreate(full_name="Ana Lima", mother_name="Rosa"), privileged_caller)

        with pytest.raises(ConflictError):
            await service.update(1, PersonUpdate(full_name="ana lima", mother_name="ROSA"), privileged_caller)

    async def test_update_recomputes_identity_key(self, uow, privileged_caller):
        await PeopleService(uow).update(1, PersonUpdate(mother_name="Rosa"), privileged_caller)
        assert uow.people.rows[1].identity_key == "public person|rosa"

    async def test_update_confidential_by_plain_user(self, uow, unprivileged_caller):
        with pytest.raises(ConfidentialAccessError):
            await PeopleService(uow).update(2, PersonUpdate(notes="x"), unprivileged_caller)
        assert uow.commits == 0

    async def test_update_refreshes_search_snapshot(self, uow, store, unprivileged_caller):
        store.add(make_person(1), media_id=10, url="u10", embedding=query_vector())

        await PeopleService(uow, store=store).update(
            1, PersonUpdate(is_confidential=True), unprivileged_caller
        )

        candidates = await store.find_candidates(
            query_vector(), FilterSpec.for_face_search(unprivileged_caller)
        )
        assert candidates == []

    async def test_remove_deletes_person_and_media(self, uow, store, privileged_caller):
        media = await MediaService(uow, store=store).create(
            MediaCreate(type=MediaType.FACE, url="a", person_id=1), privileged_caller
        )

        await PeopleService(uow, store=store).remove(1, privileged_caller)

        assert 1 not in uow.people.rows
        assert media.id not in uow.media.rows
        assert store.get(media.id) is None

    async def test_remove_missing_or_forbidden(self, uow, privileged_caller, unprivileged_caller):
        service = PeopleService(uow)
        with pytest.raises(NotFoundError):
            await service.remove(404, privileged_caller)
        with pytest.raises(ConfidentialAccessError):
            await service.remove(2, unprivileged_caller)
        assert 2 in uow.people.rows


class TestMediaService:
    async def test_face_media_scheduled_after_commit(self, uow, privileged_caller):
        scheduled = []

        def hook(media_id, source):
            scheduled.append((media_id, source, uow.commits))

        service = MediaService(uow, on_face_media_created=hook)
        media = await service.create(
            MediaCreate(type=MediaType.FACE, url="https://cdn.example/1.jpg", person_id=1),
            privileged_caller,
        )

        assert media.has_embedding is False
        assert len(scheduled) == 1
        media_id, source, commits_at_schedule = scheduled[0]
        assert media_id == media.id
        assert source.url == "https://cdn.example/1.jpg"
        assert commits_at_schedule == 1

    async def test_non_face_media_not_scheduled(self, uow, privileged_caller):
        scheduled = []
        service = MediaService(uow, on_face_media_created=lambda *args: scheduled.append(args))

        await service.create(
            MediaCreate(type=MediaType.TATTOO, url="https://cdn.example/t.jpg", person_id=1),
            privileged_caller,
        )
        assert scheduled == []

    async def test_create_for_missing_person(self, uow, privileged_caller):
        with pytest.raises(NotFoundError):
            await MediaService(uow).create(
                MediaCreate(type=MediaType.FACE, url="u", person_id=99), privileged_caller
            )

    async def test_create_for_confidential_person_by_plain_user(self, uow, unprivileged_caller):
        with pytest.raises(ConfidentialAccessError):
            await MediaService(uow).create(
                MediaCreate(type=MediaType.FACE, url="u", person_id=2), unprivileged_caller
            )

    async def test_get_and_list_respect_confidentiality(self, uow, privileged_caller, unprivileged_caller):
        service = MediaService(uow)
        public = await service.create(
            MediaCreate(type=MediaType.FACE, url="a", person_id=1), privileged_caller
        )
        secret = await service.create(
            MediaCreate(type=MediaType.FACE, url="b", person_id=2), privileged_caller
        )

        assert (await service.get(public.id, unprivileged_caller)).url == "a"
        with pytest.raises(ConfidentialAccessError):
            await service.get(secret.id, unprivileged_caller)

        page = await service.list(MediaQuery(), unprivileged_caller)
        assert [m.id for m in page.data] == [public.id]

    async def test_create_registers_media_with_store(self, uow, store, privileged_caller):
        media = await MediaService(uow, store=store).create(
            MediaCreate(type=MediaType.FACE, url="https://cdn.example/1.jpg", person_id=1),
            privileged_caller,
        )

        entry = store.get(media.id)
        assert entry.person.id == 1
        assert entry.url == "https://cdn.example/1.jpg"
        assert entry.embedding is None

    async def test_uploaded_bytes_handed_to_ingestion(self, uow, privileged_caller):
        scheduled = []
        service = MediaService(uow, on_face_media_created=lambda *args: scheduled.append(args))

        await service.create(
            MediaCreate(type=MediaType.FACE, url="https://cdn.example/1.png", person_id=1),
            privileged_caller,
            image_bytes=b"png-bytes",
            content_type="image/png",
        )

        _, source = scheduled[0]
        assert source.data == b"png-bytes"
        assert source.content_type == "image/png"

    async def test_update_label(self, uow, privileged_caller):
        service = MediaService(uow)
        media = await service.create(
            MediaCreate(type=MediaType.FACE, url="a", label="old", person_id=1), privileged_caller
        )

        updated = await service.update(media.id, MediaUpdate(label="new"), privileged_caller)

        assert updated.label == "new"
        assert updated.url == "a"
        assert updated.person_id == 1

    async def test_move_to_person_checks_new_owner(self, uow, privileged_caller, unprivileged_caller):
        service = MediaService(uow)
        media = await service.create(
            MediaCreate(type=MediaType.FACE, url="a", person_id=1), privileged_caller
        )

        with pytest.raises(ConfidentialAccessError):
            await service.update(media.id, MediaUpdate(person_id=2), unprivileged_caller)
        with pytest.raises(NotFoundError):
            await service.update(media.id, MediaUpdate(person_id=99), privileged_caller)
        assert uow.media.rows[media.id].person_id == 1

    async def test_moved_media_matches_new_owner(self, uow, store, privileged_caller):
        service = MediaService(uow, store=store)
        media = await service.create(
            MediaCreate(type=MediaType.FACE, url="a", person_id=1), privileged_caller
        )
        await store.attach_embedding(media.id, query_vector())

        await service.update(media.id, MediaUpdate(person_id=2), privileged_caller)

        candidates = await store.find_candidates(
            query_vector(), FilterSpec.for_face_search(privileged_caller)
        )
        assert [(c.media_id, c.person.id) for c in candidates] == [(media.id, 2)]

    async def test_deleted_media_never_returned_by_search(self, uow, store, privileged_caller):
        service = MediaService(uow, store=store)
        closest = await service.create(
            MediaCreate(type=MediaType.FACE, url="a", person_id=1), privileged_caller
        )
        other = await service.create(
            MediaCreate(type=MediaType.FACE, url="b", person_id=1), privileged_caller
        )
        await store.attach_embedding(closest.id, query_vector())
        await store.attach_embedding(other.id, vector_at_distance(0.3))

        await service.remove(closest.id, privileged_caller)

        candidates = await store.find_candidates(
            query_vector(), FilterSpec.for_face_search(privileged_caller)
        )
        assert [c.media_id for c in candidates] == [other.id]
        assert closest.id not in uow.media.rows

    async def test_remove_media_of_confidential_person_by_plain_user(
        self, uow, privileged_caller, unprivileged_caller
    ):
        service = MediaService(uow)
        media = await service.create(
            MediaCreate(type=MediaType.FACE, url="b", person_id=2), privileged_caller
        )

        with pytest.raises(ConfidentialAccessError):
            await service.remove(media.id, unprivileged_caller)
        with pytest.raises(NotFoundError):
            await service.remove(999, privileged_caller)
        assert media.id in uow.media.rows
