from roster.domain.people.repositories.person_repository import PersonRepository

__all__ = ["PersonRepository"]
