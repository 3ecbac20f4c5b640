"""Account recovery use-case commands: submit, attach, resolve, delete."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime, timezone
from uuid import UUID, uuid4

from authdir.config import get_settings
from authdir.domain.identity.repositories import DirectoryLookupError, IPersonRepository
from authdir.domain.identity.value_objects import is_valid_curp, is_valid_email
from authdir.domain.recovery.entities import AccountRecovery, AccountRecoveryFile, ResponseTemplate
from authdir.domain.recovery.repositories import (
    IAccountRecoveryRepository,
    IBlobStore,
    IDocumentTypeCatalog,
)
from authdir.domain.recovery.value_objects import (
    DedupField,
    DedupKey,
    DuplicateFailure,
    FileUpload,
    RecoverySubmission,
    ValidationFailure,
)

logger = logging.getLogger(__name__)

FILES_PREFIX = "accountRecoveryFiles"
BIRTH_DATE_FORMAT = "%Y-%m-%d"


class RecoveryError(Exception):
    pass


class NotFoundError(RecoveryError):
    pass


class UnauthorizedError(RecoveryError):
    pass


class RequestNotPendingError(RecoveryError):
    pass


class InvalidTemplateError(RecoveryError):
    pass


class InvalidOrderByError(RecoveryError):
    pass


class FileTooLargeError(RecoveryError):
    pass


@dataclass(frozen=True)
class NotificationJob:
    """Everything needed to tell the requester how their request ended."""
    request_id: UUID
    template: ResponseTemplate
    recipient: str
    full_name: str
    comments: str | None


@dataclass
class ResolveResult:
    request: AccountRecovery
    notification: NotificationJob | None = None


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _clean(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


# ── Submission ────────────────────────────────────────────────────────────────

def parse_birth_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return datetime.strptime(value.strip(), BIRTH_DATE_FORMAT).date()
    except ValueError:
        return None


def validate_submission(
    submission: RecoverySubmission, domestic_nationality_id: int
) -> ValidationFailure | None:
    """Collect every field error of a submission. None means the payload is acceptable."""
    errors: dict[str, str] = {}

    if not _clean(submission.name):
        errors["name"] = "El campo es requerido"

    if parse_birth_date(submission.birth_date) is None:
        errors["birthDate"] = (
            "La fecha de nacimiento es incorrecta, el formato requerido es yyyy-MM-dd"
        )

    if submission.nationality_id is None:
        errors["nationalityId"] = "El campo es requerido"

    contacts = (
        submission.contact_email,
        submission.contact_email2,
        submission.contact_phone,
        submission.contact_phone2,
    )
    if not any(_clean(c) for c in contacts):
        errors["contact"] = "Se requiere al menos un correo o teléfono de contacto"

    for key, value in (("contactEmail", submission.contact_email), ("contactEmail2", submission.contact_email2)):
        email = _clean(value)
        if email and not is_valid_email(email):
            errors[key] = "El correo electrónico no es válido"

    curp = _clean(submission.curp)
    if submission.nationality_id == domestic_nationality_id and not curp:
        errors["curp"] = "El campo es requerido"
    elif curp and not is_valid_curp(curp):
        errors["curp"] = "La CURP debe tener 18 caracteres alfanuméricos"

    if errors:
        return ValidationFailure(errors=errors)
    return None


def dedup_key_for(submission: RecoverySubmission, domestic_nationality_id: int) -> DedupKey | None:
    """Domestic requesters are keyed by CURP, everyone else by their primary contact email."""
    if submission.nationality_id == domestic_nationality_id:
        curp = _clean(submission.curp)
        return DedupKey(DedupField.CURP, curp.upper()) if curp else None
    email = _clean(submission.contact_email)
    return DedupKey(DedupField.EMAIL, email) if email else None


async def submit_recovery_request(
    *,
    submission: RecoverySubmission,
    recovery_repo: IAccountRecoveryRepository,
    person_repo: IPersonRepository,
    domestic_nationality_id: int | None = None,
    now: datetime | None = None,
) -> AccountRecovery | ValidationFailure | DuplicateFailure:
    """Register a citizen's recovery request.

    Validation problems and duplicates come back as values; nothing is
    persisted in either case.
    """
    if domestic_nationality_id is None:
        domestic_nationality_id = get_settings().domestic_nationality_id

    failure = validate_submission(submission, domestic_nationality_id)
    if failure is not None:
        return failure

    key = dedup_key_for(submission, domestic_nationality_id)
    if key is not None:
        blocking = await recovery_repo.find_blocking(key)
        if blocking is not None:
            logger.info("Recovery request rejected, %s already has request %s", key.field, blocking.id)
            return DuplicateFailure(field=key.field)

    curp = _clean(submission.curp)
    request = AccountRecovery(
        id=uuid4(),
        name=_clean(submission.name),
        first_name=_clean(submission.first_name),
        last_name=_clean(submission.last_name),
        birth_date=parse_birth_date(submission.birth_date),
        gender_id=submission.gender_id,
        nationality_id=submission.nationality_id,
        occupation_id=submission.occupation_id,
        marital_status_id=submission.marital_status_id,
        curp=curp.upper() if curp else None,
        contact_email=_clean(submission.contact_email),
        contact_email2=_clean(submission.contact_email2),
        contact_phone=_clean(submission.contact_phone),
        contact_phone2=_clean(submission.contact_phone2),
        request_comments=_clean(submission.request_comments),
        created_at=now or _utcnow(),
    )

    if request.curp:
        try:
            person = await person_repo.find_by_curp_fragment(request.curp)
        except DirectoryLookupError:
            logger.warning("Person lookup failed for recovery request %s", request.id, exc_info=True)
            person = None
        if person is not None:
            request.person_id = person.id

    await recovery_repo.save(request)
    logger.info("Recovery request %s registered", request.id)
    return request


# ── Files ─────────────────────────────────────────────────────────────────────

async def attach_file(
    *,
    request_id: UUID,
    upload: FileUpload,
    recovery_repo: IAccountRecoveryRepository,
    document_types: IDocumentTypeCatalog,
    blob_store: IBlobStore,
    max_bytes: int | None = None,
    allowed_types: list[str] | None = None,
    now: datetime | None = None,
) -> AccountRecoveryFile | ValidationFailure:
    settings = get_settings()
    max_bytes = max_bytes if max_bytes is not None else settings.max_upload_bytes
    allowed_types = allowed_types if allowed_types is not None else settings.allowed_upload_types

    request = await recovery_repo.get_by_id(request_id)
    if request is None:
        raise NotFoundError("Recovery request not found")
    if request.deleted_at is not None:
        logger.warning("Upload refused, recovery request %s was deleted", request.id)
        raise RequestNotPendingError(f"Request {request.id} was deleted")

    if upload.size_bytes > max_bytes:
        raise FileTooLargeError(f"File exceeds {max_bytes} bytes")

    errors: dict[str, str] = {}
    if upload.size_bytes == 0:
        errors["file"] = "El archivo está vacío"
    if upload.mime_type not in allowed_types:
        errors["file"] = "Tipo de archivo no permitido, se aceptan pdf, jpg y png"
    if not await document_types.exists(upload.document_type_id):
        errors["documentTypeId"] = "El tipo de documento no existe"
    if errors:
        return ValidationFailure(errors=errors, title="El archivo no es válido")

    path = await blob_store.put(upload.content, upload.file_name, f"{FILES_PREFIX}/{request.id}")
    file = AccountRecoveryFile(
        id=uuid4(),
        request_id=request.id,
        file_name=upload.file_name,
        storage_path=path,
        mime_type=upload.mime_type,
        size_bytes=upload.size_bytes,
        document_type_id=upload.document_type_id,
        created_at=now or _utcnow(),
    )
    await recovery_repo.add_file(file)
    logger.info("Attached %s (%d bytes) to recovery request %s", path, file.size_bytes, request.id)
    return file


# ── Resolution ────────────────────────────────────────────────────────────────

async def resolve_request(
    *,
    request_id: UUID,
    operator_id: int | None,
    template_id: int,
    response_comments: str | None,
    notify: bool,
    recovery_repo: IAccountRecoveryRepository,
    now: datetime | None = None,
) -> ResolveResult:
    """Mark a pending request as attended and describe the notification to send, if any."""
    if operator_id is None:
        raise UnauthorizedError("An operator is required to resolve requests")

    try:
        template = ResponseTemplate(template_id)
    except ValueError as exc:
        raise InvalidTemplateError(f"Unknown response template {template_id}") from exc

    request = await recovery_repo.get_by_id(request_id)
    if request is None:
        raise NotFoundError("Recovery request not found")

    try:
        request.resolve(operator_id, _clean(response_comments), now)
    except ValueError as exc:
        raise RequestNotPendingError(str(exc)) from exc
    await recovery_repo.save(request)
    logger.info("Recovery request %s resolved by operator %s with %s", request.id, operator_id, template.display_name)

    if not notify or not request.contact_email:
        return ResolveResult(request=request)

    job = NotificationJob(
        request_id=request.id,
        template=template,
        recipient=request.contact_email,
        full_name=request.full_name,
        comments=request.response_comments,
    )
    return ResolveResult(request=request, notification=job)


async def delete_request(
    *,
    request_id: UUID,
    operator_id: int | None,
    recovery_repo: IAccountRecoveryRepository,
    now: datetime | None = None,
) -> AccountRecovery:
    if operator_id is None:
        raise UnauthorizedError("An operator is required to delete requests")
    request = await recovery_repo.get_by_id(request_id)
    if request is None:
        raise NotFoundError("Recovery request not found")
    request.soft_delete(operator_id, now)
    return await recovery_repo.save(request)
