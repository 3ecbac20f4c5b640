"""Pydantic v2 schemas for account recovery endpoints.

Payloads use camelCase on the wire.
"""
from datetime import date, datetime
from typing import Literal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# ── Requests ──────────────────────────────────────────────────────────────────

class RecoverySubmitRequest(_CamelModel):
    # Field rules are enforced by the workflow so every problem is reported at once
    name: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    birth_date: str | None = None
    gender_id: int | None = None
    nationality_id: int | None = None
    occupation_id: int | None = None
    marital_status_id: int | None = None
    curp: str | None = None
    contact_email: str | None = None
    contact_email2: str | None = None
    contact_phone: str | None = None
    contact_phone2: str | None = None
    request_comments: str | None = None


class ResolveRequest(_CamelModel):
    template_id: int = Field(ge=1, le=4)
    response_comments: str | None = None
    notify_email: Literal[0, 1] = 0


# ── Responses ─────────────────────────────────────────────────────────────────

class RecoveryFileResponse(_CamelModel):
    id: UUID
    file_name: str
    mime_type: str
    size_bytes: int
    document_type_id: int
    created_at: datetime
    deleted_at: datetime | None = None
    url: str | None = None


class RecoveryResponse(_CamelModel):
    id: UUID
    status: str
    name: str
    first_name: str | None
    last_name: str | None
    birth_date: date
    gender_id: int | None
    nationality_id: int
    occupation_id: int | None
    marital_status_id: int | None
    curp: str | None
    contact_email: str | None
    contact_email2: str | None
    contact_phone: str | None
    contact_phone2: str | None
    request_comments: str | None
    person_id: UUID | None
    attending_at: datetime | None
    attending_by: int | None
    response_comments: str | None
    notification_response: str | None
    deleted_at: datetime | None
    created_at: datetime
    files: list[RecoveryFileResponse] = []


class RecoveryListResponse(_CamelModel):
    items: list[RecoveryResponse]
    total: int
    take: int
    offset: int


class TemplateResponse(_CamelModel):
    id: int
    name: str
    label: str


class ValidationProblem(_CamelModel):
    title: str
    errors: dict[str, str]


class ValidationErrorResponse(BaseModel):
    detail: ValidationProblem
