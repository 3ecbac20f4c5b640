"""Account recovery use-case queries."""
from __future__ import annotations

from dataclasses import dataclass, field
from uuid import UUID

from authdir.application.recovery.commands import InvalidOrderByError, NotFoundError
from authdir.domain.identity.repositories import IPersonRepository
from authdir.domain.recovery.entities import AccountRecovery, ResponseTemplate
from authdir.domain.recovery.repositories import IAccountRecoveryRepository, IBlobStore
from authdir.domain.recovery.value_objects import ListFilters


@dataclass
class Page:
    items: list[AccountRecovery] = field(default_factory=list)
    total: int = 0
    take: int = 0
    offset: int = 0


@dataclass(frozen=True)
class TemplateInfo:
    id: int
    name: str
    label: str


async def list_requests(
    *,
    recovery_repo: IAccountRecoveryRepository,
    order_by: str = "createdAt",
    ascending: bool = False,
    exclude_resolved: bool = False,
    exclude_deleted: bool = False,
    take: int = 5,
    offset: int = 0,
) -> Page:
    try:
        filters = ListFilters(
            order_by=order_by,
            ascending=ascending,
            exclude_resolved=exclude_resolved,
            exclude_deleted=exclude_deleted,
            take=take,
            offset=offset,
        )
    except ValueError as exc:
        raise InvalidOrderByError(str(exc)) from exc

    items, total = await recovery_repo.list_filtered(filters)
    return Page(items=items, total=total, take=take, offset=offset)


async def get_request_with_files(
    request_id: UUID,
    recovery_repo: IAccountRecoveryRepository,
    blob_store: IBlobStore,
) -> AccountRecovery | None:
    """Load the aggregate and hand out temporary links for files still attached."""
    request = await recovery_repo.load_with_files(request_id)
    if request is None:
        return None
    for file in request.files:
        if not file.is_deleted:
            file.url = blob_store.signed_url(file.storage_path)
    return request


async def list_requests_for_person(
    *,
    person_id: UUID,
    recovery_repo: IAccountRecoveryRepository,
    person_repo: IPersonRepository,
    take: int = 5,
    offset: int = 0,
) -> Page:
    if await person_repo.get_by_id(person_id) is None:
        raise NotFoundError("Person not found")
    items, total = await recovery_repo.list_by_person(person_id, take, offset)
    return Page(items=items, total=total, take=take, offset=offset)


def list_templates() -> list[TemplateInfo]:
    return [TemplateInfo(id=t.value, name=t.display_name, label=t.label) for t in ResponseTemplate]
