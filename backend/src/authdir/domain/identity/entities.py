"""Domain entities for the Identity bounded context."""
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import StrEnum
from uuid import UUID

from .value_objects import Email, PasswordHash


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Person:
    """A citizen registered in the directory. PII fields hold plaintext here."""
    id: UUID
    email: Email
    password_hash: PasswordHash
    name: str
    first_name: str | None = None
    last_name: str | None = None
    curp: str | None = None
    rfc: str | None = None
    banned_at: datetime | None = None
    created_at: datetime = field(default_factory=_utcnow)
    deleted_at: datetime | None = None

    @property
    def is_banned(self) -> bool:
        return self.banned_at is not None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.name, self.first_name, self.last_name) if p)


@dataclass
class Operator:
    """Back-office user who attends recovery requests."""
    id: int
    email: str
    first_name: str
    last_name: str = ""
    is_active: bool = True


@dataclass
class Session:
    session_id: str
    person_id: UUID
    token: str
    begin_at: datetime
    end_at: datetime
    ip_address: str | None = None
    user_agent: str | None = None
    deleted_at: datetime | None = None

    @property
    def is_revoked(self) -> bool:
        return self.deleted_at is not None

    def is_expired(self, now: datetime | None = None) -> bool:
        return self.end_at < (now or _utcnow())

    def extend(self, lifetime: timedelta, now: datetime | None = None) -> None:
        """Push the expiry to now + lifetime. An expiry already further out is kept."""
        candidate = (now or _utcnow()) + lifetime
        if candidate > self.end_at:
            self.end_at = candidate


class AuthFailure(StrEnum):
    INVALID_TOKEN = "invalid_token"
    SESSION_EXPIRED = "session_expired"
    PERSON_BANNED = "person_banned"


@dataclass(frozen=True)
class SessionValidation:
    """Outcome of checking a bearer token: either a person or a failure reason."""
    person: Person | None = None
    session: Session | None = None
    failure: AuthFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None and self.person is not None

    @classmethod
    def success(cls, person: Person, session: Session) -> "SessionValidation":
        return cls(person=person, session=session)

    @classmethod
    def fail(cls, failure: AuthFailure) -> "SessionValidation":
        return cls(failure=failure)
