"""Identity use-case commands: session lifecycle, login, logout."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from uuid import UUID, uuid4

from authdir.config import get_settings
from authdir.domain.identity.entities import AuthFailure, Person, Session, SessionValidation
from authdir.domain.identity.repositories import IPersonRepository, ISessionRepository
from authdir.infrastructure.auth.password import verify_password
from authdir.infrastructure.auth.tokens import generate_session_token

logger = logging.getLogger(__name__)


class IdentityError(Exception):
    pass


class InvalidCredentialsError(IdentityError):
    pass


@dataclass
class LoginResult:
    person: Person
    token: str
    expires_at: datetime


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _lifetime(lifetime: timedelta | None) -> timedelta:
    if lifetime is not None:
        return lifetime
    return timedelta(minutes=get_settings().session_lifetime_minutes)


async def start_session(
    *,
    person_id: UUID,
    person_repo: IPersonRepository,
    session_repo: ISessionRepository,
    ip_address: str | None = None,
    user_agent: str | None = None,
    lifetime: timedelta | None = None,
    secret: str | None = None,
    now: datetime | None = None,
) -> Session:
    """Issue or reuse the single live session of a person.

    A live session opened from the same ip and user agent is extended and
    reused; every other live session of the person is revoked.
    """
    now = now or _utcnow()
    lifetime = _lifetime(lifetime)

    # Serializes concurrent logins of the same person for the rest of the transaction
    await person_repo.lock(person_id)

    if ip_address and user_agent:
        current = await session_repo.get_live_by_context(person_id, ip_address, user_agent, now)
        if current is not None:
            revoked = await session_repo.revoke_all_except(person_id, current.session_id, now)
            current.extend(lifetime, now)
            await session_repo.save(current)
            logger.info(
                "Reused session %s for person %s (%d other sessions revoked)",
                current.session_id, person_id, revoked,
            )
            return current

    revoked = await session_repo.revoke_all_except(person_id, None, now)
    token = generate_session_token(
        person_id, ip_address, user_agent, now, secret or get_settings().secret_key
    )
    session = Session(
        session_id=str(uuid4()),
        person_id=person_id,
        token=token,
        begin_at=now,
        end_at=now + lifetime,
        ip_address=ip_address,
        user_agent=user_agent,
    )
    await session_repo.save(session)
    logger.info(
        "Started session %s for person %s (%d previous sessions revoked)",
        session.session_id, person_id, revoked,
    )
    return session


async def validate_session(
    *,
    token: str,
    person_repo: IPersonRepository,
    session_repo: ISessionRepository,
    now: datetime | None = None,
) -> SessionValidation:
    now = now or _utcnow()
    session = await session_repo.get_active_by_token(token) if token else None
    if session is None:
        return SessionValidation.fail(AuthFailure.INVALID_TOKEN)

    if session.is_expired(now):
        await session_repo.revoke(session.session_id, now)
        return SessionValidation.fail(AuthFailure.SESSION_EXPIRED)

    person = await person_repo.get_by_id(session.person_id)
    if person is None or person.is_deleted:
        return SessionValidation.fail(AuthFailure.INVALID_TOKEN)
    if person.is_banned:
        return SessionValidation.fail(AuthFailure.PERSON_BANNED)

    return SessionValidation.success(person, session)


async def revoke_session(
    *,
    session_id: str,
    session_repo: ISessionRepository,
    now: datetime | None = None,
) -> None:
    """Soft-delete one session. Revoking twice is a no-op."""
    await session_repo.revoke(session_id, now or _utcnow())


async def revoke_all_except(
    *,
    person_id: UUID,
    session_repo: ISessionRepository,
    keep_session_id: str | None = None,
    now: datetime | None = None,
) -> int:
    return await session_repo.revoke_all_except(person_id, keep_session_id, now or _utcnow())


async def login(
    *,
    email: str,
    password: str,
    person_repo: IPersonRepository,
    session_repo: ISessionRepository,
    ip_address: str | None = None,
    user_agent: str | None = None,
    now: datetime | None = None,
) -> LoginResult:
    """Authenticate a person by email and password and hand out a session token."""
    person = await person_repo.get_by_email(email.strip())
    if person is None or person.is_deleted or person.is_banned:
        raise InvalidCredentialsError("Invalid credentials")

    if not verify_password(password, person.password_hash):
        raise InvalidCredentialsError("Invalid credentials")

    session = await start_session(
        person_id=person.id,
        person_repo=person_repo,
        session_repo=session_repo,
        ip_address=ip_address,
        user_agent=user_agent,
        now=now,
    )
    return LoginResult(person=person, token=session.token, expires_at=session.end_at)


async def logout(
    *,
    token: str,
    session_repo: ISessionRepository,
    now: datetime | None = None,
) -> None:
    """Revoke the session carrying token. Unknown tokens are ignored."""
    session = await session_repo.get_active_by_token(token)
    if session is None:
        return
    await session_repo.revoke(session.session_id, now or _utcnow())
