"""Concrete SQLAlchemy repository implementations for the recovery context."""
from collections import defaultdict
from datetime import datetime, timezone
from uuid import UUID

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from authdir.domain.recovery.entities import AccountRecovery, AccountRecoveryFile
from authdir.domain.recovery.value_objects import DedupField, DedupKey, ListFilters
from authdir.infrastructure.database.models.recovery import (
    AccountRecoveryFileModel,
    AccountRecoveryModel,
    DocumentTypeModel,
)


class AccountRecoveryRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._s = session

    async def get_by_id(self, request_id: UUID) -> AccountRecovery | None:
        row = await self._s.get(AccountRecoveryModel, request_id)
        return _to_request(row) if row else None

    async def load_with_files(self, request_id: UUID) -> AccountRecovery | None:
        row = await self._s.get(AccountRecoveryModel, request_id)
        if row is None:
            return None
        files = await self._files_for([request_id])
        return _to_request(row, files.get(request_id, []))

    async def find_blocking(self, key: DedupKey) -> AccountRecovery | None:
        """Most recent request sharing the key that is not both resolved and deleted."""
        column = (
            AccountRecoveryModel.curp if key.field == DedupField.CURP
            else AccountRecoveryModel.contact_email
        )
        stmt = (
            select(AccountRecoveryModel)
            .where(
                func.lower(column) == key.value.lower(),
                or_(
                    AccountRecoveryModel.attending_at.is_(None),
                    AccountRecoveryModel.deleted_at.is_(None),
                ),
            )
            .order_by(AccountRecoveryModel.created_at.desc())
        )
        row = (await self._s.execute(stmt)).scalars().first()
        return _to_request(row) if row else None

    async def list_filtered(self, filters: ListFilters) -> tuple[list[AccountRecovery], int]:
        stmt = select(AccountRecoveryModel)
        if filters.exclude_resolved:
            stmt = stmt.where(AccountRecoveryModel.attending_at.is_(None))
        if filters.exclude_deleted:
            stmt = stmt.where(AccountRecoveryModel.deleted_at.is_(None))

        total = await self._count(stmt)

        column = getattr(AccountRecoveryModel, filters.sort_attribute)
        ordering = column.asc() if filters.ascending else column.desc()
        stmt = (
            stmt.order_by(ordering, AccountRecoveryModel.id)
            .offset(filters.offset)
            .limit(filters.take)
        )
        return await self._materialize(stmt), total

    async def list_by_person(
        self, person_id: UUID, limit: int, offset: int
    ) -> tuple[list[AccountRecovery], int]:
        stmt = select(AccountRecoveryModel).where(AccountRecoveryModel.person_id == person_id)
        total = await self._count(stmt)
        stmt = stmt.order_by(AccountRecoveryModel.created_at.desc()).offset(offset).limit(limit)
        return await self._materialize(stmt), total

    async def save(self, request: AccountRecovery) -> AccountRecovery:
        existing = await self._s.get(AccountRecoveryModel, request.id)
        if existing:
            existing.person_id = request.person_id
            existing.attending_at = request.attending_at
            existing.attending_by = request.attending_by
            existing.response_comments = request.response_comments
            existing.notification_response = request.notification_response
            existing.notification_content = request.notification_content
            existing.deleted_at = request.deleted_at
            existing.deleted_by = request.deleted_by
        else:
            self._s.add(AccountRecoveryModel(
                id=request.id,
                name=request.name,
                first_name=request.first_name,
                last_name=request.last_name,
                birth_date=request.birth_date,
                gender_id=request.gender_id,
                nationality_id=request.nationality_id,
                occupation_id=request.occupation_id,
                marital_status_id=request.marital_status_id,
                curp=request.curp,
                contact_email=request.contact_email,
                contact_email2=request.contact_email2,
                contact_phone=request.contact_phone,
                contact_phone2=request.contact_phone2,
                request_comments=request.request_comments,
                person_id=request.person_id,
                attending_at=request.attending_at,
                attending_by=request.attending_by,
                response_comments=request.response_comments,
                notification_response=request.notification_response,
                notification_content=request.notification_content,
                deleted_at=request.deleted_at,
                deleted_by=request.deleted_by,
                created_at=request.created_at,
            ))
        await self._s.flush()
        return request

    async def add_file(self, file: AccountRecoveryFile) -> AccountRecoveryFile:
        self._s.add(AccountRecoveryFileModel(
            id=file.id,
            request_id=file.request_id,
            file_name=file.file_name,
            storage_path=file.storage_path,
            mime_type=file.mime_type,
            size_bytes=file.size_bytes,
            document_type_id=file.document_type_id,
            created_at=file.created_at,
            deleted_at=file.deleted_at,
        ))
        await self._s.flush()
        return file

    async def record_notification(self, request_id: UUID, response: str, content: str | None) -> bool:
        """Store the delivery receipt without touching the resolution columns."""
        stmt = (
            update(AccountRecoveryModel)
            .where(AccountRecoveryModel.id == request_id)
            .values(notification_response=response, notification_content=content)
        )
        result = await self._s.execute(stmt)
        return result.rowcount > 0

    async def _count(self, stmt) -> int:
        count_stmt = select(func.count()).select_from(stmt.subquery())
        return (await self._s.execute(count_stmt)).scalar_one()

    async def _materialize(self, stmt) -> list[AccountRecovery]:
        rows = (await self._s.execute(stmt)).scalars().all()
        files = await self._files_for([r.id for r in rows])
        return [_to_request(r, files.get(r.id, [])) for r in rows]

    async def _files_for(self, request_ids: list[UUID]) -> dict[UUID, list[AccountRecoveryFile]]:
        if not request_ids:
            return {}
        stmt = (
            select(AccountRecoveryFileModel)
            .where(AccountRecoveryFileModel.request_id.in_(request_ids))
            .order_by(AccountRecoveryFileModel.created_at)
        )
        grouped: dict[UUID, list[AccountRecoveryFile]] = defaultdict(list)
        for row in (await self._s.execute(stmt)).scalars():
            grouped[row.request_id].append(_to_file(row))
        return grouped


class DocumentTypeRepository:
    def __init__(self, session: AsyncSession) -> None:
        self._s = session

    async def exists(self, document_type_id: int) -> bool:
        return await self.get_name(document_type_id) is not None

    async def get_name(self, document_type_id: int) -> str | None:
        row = await self._s.get(DocumentTypeModel, document_type_id)
        if row is None or row.deleted_at is not None:
            return None
        return row.name


# ── Mappers ───────────────────────────────────────────────────────────────────

def _as_utc(value: datetime | None) -> datetime | None:
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_file(m: AccountRecoveryFileModel) -> AccountRecoveryFile:
    return AccountRecoveryFile(
        id=m.id,
        request_id=m.request_id,
        file_name=m.file_name,
        storage_path=m.storage_path,
        mime_type=m.mime_type,
        size_bytes=m.size_bytes,
        document_type_id=m.document_type_id,
        created_at=_as_utc(m.created_at),
        deleted_at=_as_utc(m.deleted_at),
    )


def _to_request(m: AccountRecoveryModel, files: list[AccountRecoveryFile] | None = None) -> AccountRecovery:
    return AccountRecovery(
        id=m.id,
        name=m.name,
        first_name=m.first_name,
        last_name=m.last_name,
        birth_date=m.birth_date,
        gender_id=m.gender_id,
        nationality_id=m.nationality_id,
        occupation_id=m.occupation_id,
        marital_status_id=m.marital_status_id,
        curp=m.curp,
        contact_email=m.contact_email,
        contact_email2=m.contact_email2,
        contact_phone=m.contact_phone,
        contact_phone2=m.contact_phone2,
        request_comments=m.request_comments,
        person_id=m.person_id,
        attending_at=_as_utc(m.attending_at),
        attending_by=m.attending_by,
        response_comments=m.response_comments,
        notification_response=m.notification_response,
        notification_content=m.notification_content,
        deleted_at=_as_utc(m.deleted_at),
        deleted_by=m.deleted_by,
        created_at=_as_utc(m.created_at),
        files=list(files or []),
    )
