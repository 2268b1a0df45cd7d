"""Two sessions editing the same row: the later write must not win silently."""

import pytest

from roster.domain.people import Person
from roster.domain.roles import Role
from roster.domain.shared import ConcurrencyError
from roster.infrastructure.persistence.sqlalchemy.repositories import (
    PersonRepositorySQLAlchemy,
    RoleRepositorySQLAlchemy,
)


async def _store(session_maker, repo_class, entity):
    async with session_maker() as session:
        await repo_class(session).save(entity)
        await session.commit()


class TestPersonRowVersion:
    async def test_stale_update_raises_concurrency_error(self, session_maker):
        person = Person.create("Grace Hopper", phone="+1 555 0100")
        await _store(session_maker, PersonRepositorySQLAlchemy, person)

        async with session_maker() as first, session_maker() as second:
            first_repo = PersonRepositorySQLAlchemy(first)
            second_repo = PersonRepositorySQLAlchemy(second)
            mine = await first_repo.find_by_id(person.id)
            theirs = await second_repo.find_by_id(person.id)

            theirs.update("Grace B. Hopper", theirs.phone, [])
            await second_repo.save(theirs)
            await second.commit()

            mine.update("Admiral Hopper", mine.phone, [])
            with pytest.raises(ConcurrencyError) as exc_info:
                await first_repo.save(mine)
            await first.rollback()

        assert exc_info.value.details["person_id"] == str(person.id)
        async with session_maker() as session:
            stored = await PersonRepositorySQLAlchemy(session).find_by_id(person.id)
        assert stored.full_name == "Grace B. Hopper"
        assert stored.row_version == 2

    async def test_sequential_updates_bump_the_version(self, session_maker):
        person = Person.create("Alan Turing")
        await _store(session_maker, PersonRepositorySQLAlchemy, person)

        for name in ("Alan M. Turing", "Alan Mathison Turing"):
            async with session_maker() as session:
                repo = PersonRepositorySQLAlchemy(session)
                current = await repo.find_by_id(person.id)
                current.update(name, None, [])
                await repo.save(current)
                await session.commit()

        async with session_maker() as session:
            stored = await PersonRepositorySQLAlchemy(session).find_by_id(person.id)
        assert stored.row_version == 3


async def test_stale_role_update_raises_concurrency_error(session_maker):
    role = Role.create("Reviewer")
    await _store(session_maker, RoleRepositorySQLAlchemy, role)

    async with session_maker() as first, session_maker() as second:
        first_repo = RoleRepositorySQLAlchemy(first)
        second_repo = RoleRepositorySQLAlchemy(second)
        mine = await first_repo.find_by_id(role.id)
        theirs = await second_repo.find_by_id(role.id)

        theirs.update("Senior Reviewer", None)
        await second_repo.save(theirs)
        await second.commit()

        mine.update("Lead Reviewer", "Signs off releases")
        with pytest.raises(ConcurrencyError):
            await first_repo.save(mine)
        await first.rollback()
