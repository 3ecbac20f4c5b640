"""Value objects and typed outcomes for the Account Recovery bounded context."""
from dataclasses import dataclass, field
from enum import StrEnum

# Public sort keys accepted by the listing, mapped to entity attributes.
ORDERABLE_FIELDS: dict[str, str] = {
    "id": "id",
    "name": "name",
    "folio": "id",
    "status": "attending_at",
    "area": "nationality_id",
    "createdAt": "created_at",
}


class DedupField(StrEnum):
    CURP = "curp"
    EMAIL = "email"


@dataclass(frozen=True)
class DedupKey:
    field: DedupField
    value: str


@dataclass(frozen=True)
class RecoverySubmission:
    """Raw citizen payload; birth_date stays a string until validated."""
    name: str | None
    birth_date: str | None
    nationality_id: int | None
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


@dataclass(frozen=True)
class FileUpload:
    file_name: str
    mime_type: str
    content: bytes
    document_type_id: int

    @property
    def size_bytes(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class ListFilters:
    order_by: str = "createdAt"
    ascending: bool = False
    exclude_resolved: bool = False
    exclude_deleted: bool = False
    take: int = 5
    offset: int = 0

    def __post_init__(self) -> None:
        if self.order_by not in ORDERABLE_FIELDS:
            raise ValueError(
                f"Unknown order field '{self.order_by}', expected one of {sorted(ORDERABLE_FIELDS)}"
            )
        if self.take < 0 or self.offset < 0:
            raise ValueError("take and offset must be non-negative")

    @property
    def sort_attribute(self) -> str:
        return ORDERABLE_FIELDS[self.order_by]


@dataclass(frozen=True)
class ValidationFailure:
    errors: dict[str, str] = field(default_factory=dict)
    title: str = "La solicitud contiene datos inválidos"


@dataclass(frozen=True)
class DuplicateFailure:
    field: DedupField
    message: str = (
        "Ya existe una petición de recuperación de cuenta registrada, "
        "espere que concluya o comuníquese con el administrador."
    )
