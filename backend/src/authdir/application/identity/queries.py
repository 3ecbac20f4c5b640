"""Identity use-case queries."""
from datetime import datetime, timezone
from uuid import UUID

from authdir.domain.identity.entities import Session
from authdir.domain.identity.repositories import ISessionRepository


async def list_person_sessions(
    person_id: UUID,
    session_repo: ISessionRepository,
    now: datetime | None = None,
) -> list[Session]:
    return await session_repo.list_live_by_person(person_id, now or datetime.now(timezone.utc))
