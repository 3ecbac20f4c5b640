"""Domain entities for the Account Recovery bounded context."""
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import IntEnum, StrEnum
from uuid import UUID


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class RecoveryStatus(StrEnum):
    PENDING = "pending"
    RESOLVED = "resolved"
    DELETED = "deleted"


class ResponseTemplate(IntEnum):
    FINISHED = 1
    INCOMPLETED = 2
    NOT_FOUND = 3
    CUSTOM = 4

    @property
    def label(self) -> str:
        return _TEMPLATE_LABELS[self]

    @property
    def display_name(self) -> str:
        return _TEMPLATE_NAMES[self]


_TEMPLATE_NAMES = {
    ResponseTemplate.FINISHED: "Finished",
    ResponseTemplate.INCOMPLETED: "Incompleted",
    ResponseTemplate.NOT_FOUND: "NotFound",
    ResponseTemplate.CUSTOM: "Custom",
}

_TEMPLATE_LABELS = {
    ResponseTemplate.FINISHED: "Solicitud finalizada",
    ResponseTemplate.INCOMPLETED: "Solicitud incompleta",
    ResponseTemplate.NOT_FOUND: "Sin coincidencia",
    ResponseTemplate.CUSTOM: "Respuesta personalizada",
}


@dataclass
class AccountRecoveryFile:
    id: UUID
    request_id: UUID
    file_name: str
    storage_path: str
    mime_type: str
    size_bytes: int
    document_type_id: int
    created_at: datetime = field(default_factory=_utcnow)
    deleted_at: datetime | None = None
    # Filled by queries that hand out temporary download links
    url: str | None = None

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


@dataclass
class AccountRecovery:
    """A citizen's request to regain access; pending until an operator attends it."""
    id: UUID
    name: str
    birth_date: date
    nationality_id: int
    first_name: str | None = None
    last_name: str | None = None
    gender_id: int | None = None
    occupation_id: int | None = None
    marital_status_id: int | None = None
    curp: str | None = None
    contact_email: str | None = None
    contact_email2: str | None = None
    contact_phone: str | None = None
    contact_phone2: str | None = None
    request_comments: str | None = None
    person_id: UUID | None = None
    attending_at: datetime | None = None
    attending_by: int | None = None
    response_comments: str | None = None
    notification_response: str | None = None
    notification_content: str | None = None
    deleted_at: datetime | None = None
    deleted_by: int | None = None
    created_at: datetime = field(default_factory=_utcnow)
    files: list[AccountRecoveryFile] = field(default_factory=list)

    @property
    def status(self) -> RecoveryStatus:
        if self.attending_at is not None:
            return RecoveryStatus.RESOLVED
        if self.deleted_at is not None:
            return RecoveryStatus.DELETED
        return RecoveryStatus.PENDING

    @property
    def is_pending(self) -> bool:
        return self.status == RecoveryStatus.PENDING

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.name, self.first_name, self.last_name) if p)

    def resolve(self, operator_id: int, response_comments: str | None, now: datetime | None = None) -> None:
        if not self.is_pending:
            raise ValueError(f"Request {self.id} is not pending (current: {self.status})")
        self.response_comments = response_comments
        self.attending_at = now or _utcnow()
        self.attending_by = operator_id

    def soft_delete(self, operator_id: int | None, now: datetime | None = None) -> None:
        if self.deleted_at is None:
            self.deleted_at = now or _utcnow()
            self.deleted_by = operator_id
