"""Concrete SQLAlchemy repository implementations for the identity context."""
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from authdir.domain.identity.entities import Operator, Person, Session
from authdir.domain.identity.repositories import DirectoryLookupError
from authdir.domain.identity.value_objects import Email, PasswordHash
from authdir.infrastructure.crypto.pii import PiiCodec, PiiDecryptionError
from authdir.infrastructure.database.models.identity import OperatorModel, PersonModel, SessionModel


class PersonRepository:
    """Person directory. PII columns are encrypted on write and decrypted on read."""

    def __init__(self, session: AsyncSession, codec: PiiCodec) -> None:
        self._session = session
        self._codec = codec

    async def get_by_id(self, person_id: UUID) -> Person | None:
        result = await self._session.get(PersonModel, person_id)
        return self._to_person(result) if result else None

    async def get_by_email(self, email: str) -> Person | None:
        stmt = select(PersonModel).where(
            func.lower(PersonModel.email) == email.lower(), PersonModel.deleted_at.is_(None)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        return self._to_person(row) if row else None

    async def find_by_curp_fragment(self, fragment: str) -> Person | None:
        """First live person whose CURP contains fragment, ignoring case.

        Ciphertext can't be searched in SQL, so candidates are decrypted here.
        """
        needle = fragment.strip().lower()
        if not needle:
            return None
        stmt = (
            select(PersonModel)
            .where(PersonModel.deleted_at.is_(None), PersonModel.curp.is_not(None))
            .order_by(PersonModel.created_at)
        )
        try:
            rows = (await self._session.execute(stmt)).scalars().all()
            for row in rows:
                curp = self._codec.decrypt(row.curp)
                if curp and needle in curp.lower():
                    return self._to_person(row)
        except (SQLAlchemyError, PiiDecryptionError) as exc:
            raise DirectoryLookupError(str(exc)) from exc
        return None

    async def lock(self, person_id: UUID) -> None:
        stmt = select(PersonModel.id).where(PersonModel.id == person_id).with_for_update()
        await self._session.execute(stmt)

    async def save(self, person: Person) -> Person:
        encrypt = self._codec.encrypt
        existing = await self._session.get(PersonModel, person.id)
        if existing:
            existing.email = str(person.email)
            existing.password_hash = str(person.password_hash)
            existing.curp = encrypt(person.curp)
            existing.rfc = encrypt(person.rfc)
            existing.name = encrypt(person.name)
            existing.first_name = encrypt(person.first_name)
            existing.last_name = encrypt(person.last_name)
            existing.banned_at = person.banned_at
            existing.deleted_at = person.deleted_at
        else:
            self._session.add(PersonModel(
                id=person.id,
                email=str(person.email),
                password_hash=str(person.password_hash),
                curp=encrypt(person.curp),
                rfc=encrypt(person.rfc),
                name=encrypt(person.name),
                first_name=encrypt(person.first_name),
                last_name=encrypt(person.last_name),
                banned_at=person.banned_at,
                created_at=person.created_at,
                deleted_at=person.deleted_at,
            ))
        await self._session.flush()
        return person

    def _to_person(self, m: PersonModel) -> Person:
        decrypt = self._codec.decrypt
        return Person(
            id=m.id,
            email=Email(m.email),
            password_hash=PasswordHash(m.password_hash),
            name=decrypt(m.name) or "",
            first_name=decrypt(m.first_name),
            last_name=decrypt(m.last_name),
            curp=decrypt(m.curp),
            rfc=decrypt(m.rfc),
            banned_at=_as_utc(m.banned_at),
            created_at=_as_utc(m.created_at),
            deleted_at=_as_utc(m.deleted_at),
        )


class OperatorRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, operator_id: int) -> Operator | None:
        row = await self._session.get(OperatorModel, operator_id)
        if row is None or not row.is_active:
            return None
        return Operator(
            id=row.id,
            email=row.email,
            first_name=row.first_name,
            last_name=row.last_name,
            is_active=row.is_active,
        )


class SessionRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, session_id: str) -> Session | None:
        row = await self._session.get(SessionModel, session_id)
        return _to_session(row) if row else None

    async def get_active_by_token(self, token: str) -> Session | None:
        stmt = select(SessionModel).where(
            SessionModel.token == token,
            SessionModel.deleted_at.is_(None),
        )
        row = (await self._session.execute(stmt)).scalars().first()
        return _to_session(row) if row else None

    async def get_live_by_context(
        self, person_id: UUID, ip_address: str | None, user_agent: str | None, now: datetime
    ) -> Session | None:
        stmt = (
            select(SessionModel)
            .where(
                SessionModel.person_id == person_id,
                SessionModel.ip_address == ip_address,
                SessionModel.user_agent == user_agent,
                SessionModel.deleted_at.is_(None),
                SessionModel.end_at > now,
            )
            .order_by(SessionModel.end_at.desc())
        )
        row = (await self._session.execute(stmt)).scalars().first()
        return _to_session(row) if row else None

    async def list_live_by_person(self, person_id: UUID, now: datetime) -> list[Session]:
        stmt = (
            select(SessionModel)
            .where(
                SessionModel.person_id == person_id,
                SessionModel.deleted_at.is_(None),
                SessionModel.end_at > now,
            )
            .order_by(SessionModel.begin_at)
        )
        result = await self._session.execute(stmt)
        return [_to_session(r) for r in result.scalars()]

    async def save(self, session: Session) -> Session:
        existing = await self._session.get(SessionModel, session.session_id)
        if existing:
            # token and begin_at never change after issuance
            existing.end_at = session.end_at
            existing.deleted_at = session.deleted_at
        else:
            self._session.add(SessionModel(
                session_id=session.session_id,
                person_id=session.person_id,
                ip_address=session.ip_address,
                user_agent=session.user_agent,
                token=session.token,
                begin_at=session.begin_at,
                end_at=session.end_at,
                deleted_at=session.deleted_at,
            ))
        await self._session.flush()
        return session

    async def revoke(self, session_id: str, now: datetime) -> None:
        stmt = (
            update(SessionModel)
            .where(SessionModel.session_id == session_id, SessionModel.deleted_at.is_(None))
            .values(deleted_at=now)
        )
        await self._session.execute(stmt)

    async def revoke_all_except(
        self, person_id: UUID, keep_session_id: str | None, now: datetime
    ) -> int:
        stmt = (
            update(SessionModel)
            .where(SessionModel.person_id == person_id, SessionModel.deleted_at.is_(None))
            .values(deleted_at=now)
        )
        if keep_session_id is not None:
            stmt = stmt.where(SessionModel.session_id != keep_session_id)
        result = await self._session.execute(stmt)
        return result.rowcount or 0


# ── Mappers ───────────────────────────────────────────────────────────────────

def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; everything is stored as UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_session(m: SessionModel) -> Session:
    return Session(
        session_id=m.session_id,
        person_id=m.person_id,
        token=m.token,
        ip_address=m.ip_address,
        user_agent=m.user_agent,
        begin_at=_as_utc(m.begin_at),
        end_at=_as_utc(m.end_at),
        deleted_at=_as_utc(m.deleted_at),
    )
