"""Account recovery router: submit, attach files, list, resolve, delete."""
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, File, Form, HTTPException, Query, UploadFile, status

from authdir.application.recovery.commands import (
    FileTooLargeError,
    InvalidOrderByError,
    InvalidTemplateError,
    NotFoundError,
    RequestNotPendingError,
    UnauthorizedError,
)
from authdir.config import get_settings
from authdir.domain.recovery.entities import AccountRecovery
from authdir.domain.recovery.value_objects import (
    DuplicateFailure,
    FileUpload,
    RecoverySubmission,
    ValidationFailure,
)
from authdir.interfaces.api.v1.schemas.recovery import (
    RecoveryFileResponse,
    RecoveryListResponse,
    RecoveryResponse,
    RecoverySubmitRequest,
    ResolveRequest,
    TemplateResponse,
    ValidationErrorResponse,
    ValidationProblem,
)
from authdir.interfaces.dependencies import CurrentOperator, DbSession, Facade, Notifier

router = APIRouter(prefix="/recovery-requests", tags=["recovery"])

_INVALID = {status.HTTP_422_UNPROCESSABLE_ENTITY: {"model": ValidationErrorResponse}}


@router.get("", response_model=RecoveryListResponse)
async def list_requests(
    facade: Facade,
    operator: CurrentOperator,
    order_by: Annotated[str, Query(alias="orderBy")] = "createdAt",
    ascending: Annotated[bool, Query()] = False,
    exclude_resolved: Annotated[bool, Query(alias="excludeResolved")] = False,
    exclude_deleted: Annotated[bool, Query(alias="excludeDeleted")] = False,
    take: Annotated[int, Query(ge=0, le=500)] = 5,
    offset: Annotated[int, Query(ge=0)] = 0,
):
    try:
        page = await facade.list_requests(
            order_by=order_by,
            ascending=ascending,
            exclude_resolved=exclude_resolved,
            exclude_deleted=exclude_deleted,
            take=take,
            offset=offset,
        )
    except InvalidOrderByError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    return RecoveryListResponse(
        items=[_recovery_response(r) for r in page.items],
        total=page.total,
        take=page.take,
        offset=page.offset,
    )


@router.get("/templates", response_model=list[TemplateResponse])
async def list_templates(facade: Facade, operator: CurrentOperator):
    return [TemplateResponse.model_validate(t) for t in facade.list_templates()]


@router.get("/people/{person_id}", response_model=RecoveryListResponse)
async def list_for_person(
    person_id: UUID,
    facade: Facade,
    operator: CurrentOperator,
    take: Annotated[int, Query(ge=0, le=500)] = 5,
    offset: Annotated[int, Query(ge=0)] = 0,
):
    try:
        page = await facade.list_requests_for_person(person_id, take=take, offset=offset)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Person not found")
    return RecoveryListResponse(
        items=[_recovery_response(r) for r in page.items],
        total=page.total,
        take=page.take,
        offset=page.offset,
    )


@router.get("/{request_id}", response_model=RecoveryResponse)
async def get_request(request_id: UUID, facade: Facade, operator: CurrentOperator):
    request = await facade.get_request(request_id)
    if request is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recovery request not found")
    return _recovery_response(request)


@router.post("", response_model=RecoveryResponse, status_code=status.HTTP_201_CREATED, responses=_INVALID)
async def submit_request(body: RecoverySubmitRequest, facade: Facade):
    result = await facade.submit_recovery_request(RecoverySubmission(**body.model_dump()))
    if isinstance(result, ValidationFailure):
        raise _validation_error(result)
    if isinstance(result, DuplicateFailure):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"field": result.field.value, "message": result.message},
        )
    return _recovery_response(result)


@router.post(
    "/{request_id}/files",
    response_model=RecoveryFileResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_INVALID,
)
async def attach_file(
    request_id: UUID,
    facade: Facade,
    file: Annotated[UploadFile, File()],
    document_type_id: Annotated[int, Form(alias="documentTypeId")],
):
    max_bytes = get_settings().max_upload_bytes
    if file.size is not None and file.size > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File exceeds {max_bytes} bytes",
        )

    # One byte past the limit is enough for the workflow to refuse it
    upload = FileUpload(
        file_name=file.filename or "upload",
        mime_type=file.content_type or "application/octet-stream",
        content=await file.read(max_bytes + 1),
        document_type_id=document_type_id,
    )
    try:
        result = await facade.attach_file(request_id, upload)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recovery request not found")
    except FileTooLargeError as exc:
        raise HTTPException(status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE, detail=str(exc))
    except RequestNotPendingError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))

    if isinstance(result, ValidationFailure):
        raise _validation_error(result)
    return RecoveryFileResponse.model_validate(result)


@router.patch("/{request_id}", response_model=RecoveryResponse)
async def resolve_request(
    request_id: UUID,
    body: ResolveRequest,
    facade: Facade,
    session: DbSession,
    operator: CurrentOperator,
    notifier: Notifier,
    background_tasks: BackgroundTasks,
):
    try:
        result = await facade.resolve_request(
            request_id,
            operator_id=operator.id,
            template_id=body.template_id,
            response_comments=body.response_comments,
            notify=body.notify_email == 1,
        )
    except UnauthorizedError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Operator required")
    except InvalidTemplateError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc))
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recovery request not found")
    except RequestNotPendingError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))

    if result.notification is not None:
        # Commit first: the job updates this row from its own session
        await session.commit()
        background_tasks.add_task(notifier, result.notification)
    return _recovery_response(result.request)


@router.delete("/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_request(request_id: UUID, facade: Facade, operator: CurrentOperator):
    try:
        await facade.delete_request(request_id, operator.id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Recovery request not found")


def _recovery_response(request: AccountRecovery) -> RecoveryResponse:
    return RecoveryResponse.model_validate(request)


def _validation_error(failure: ValidationFailure) -> HTTPException:
    problem = ValidationProblem(title=failure.title, errors=failure.errors)
    return HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=problem.model_dump())
