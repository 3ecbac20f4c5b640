"""Repository ports for the Identity bounded context."""
from datetime import datetime
from typing import Protocol
from uuid import UUID

from .entities import Operator, Person, Session


class DirectoryLookupError(Exception):
    """The person directory could not answer a lookup."""
    pass


class IPersonRepository(Protocol):
    async def get_by_id(self, person_id: UUID) -> Person | None: ...

    async def get_by_email(self, email: str) -> Person | None: ...

    async def find_by_curp_fragment(self, fragment: str) -> Person | None: ...

    async def lock(self, person_id: UUID) -> None: ...

    async def save(self, person: Person) -> Person: ...


class IOperatorRepository(Protocol):
    async def get_by_id(self, operator_id: int) -> Operator | None: ...


class ISessionRepository(Protocol):
    async def get_by_id(self, session_id: str) -> Session | None: ...

    async def get_active_by_token(self, token: str) -> Session | None: ...

    async def get_live_by_context(
        self, person_id: UUID, ip_address: str | None, user_agent: str | None, now: datetime
    ) -> Session | None: ...

    async def list_live_by_person(self, person_id: UUID, now: datetime) -> list[Session]: ...

    async def save(self, session: Session) -> Session: ...

    async def revoke(self, session_id: str, now: datetime) -> None: ...

    async def revoke_all_except(
        self, person_id: UUID, keep_session_id: str | None, now: datetime
    ) -> int: ...
