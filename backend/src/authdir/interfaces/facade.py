"""AuthDirFacade: the single entry point to the application layer.

All routers go through this facade instead of calling application functions directly.
This enforces the Facade pattern and keeps the API layer thin.
"""
from __future__ import annotations

from typing import TYPE_CHECKING
from uuid import UUID

from authdir.application.identity import commands as id_commands
from authdir.application.identity import queries as id_queries
from authdir.application.recovery import commands as rec_commands
from authdir.application.recovery import queries as rec_queries
from authdir.domain.identity.entities import Operator, Session, SessionValidation
from authdir.domain.recovery.entities import AccountRecovery, AccountRecoveryFile
from authdir.domain.recovery.value_objects import (
    DuplicateFailure,
    FileUpload,
    RecoverySubmission,
    ValidationFailure,
)

if TYPE_CHECKING:
    from authdir.application.identity.commands import LoginResult
    from authdir.application.recovery.commands import ResolveResult
    from authdir.application.recovery.queries import Page, TemplateInfo


class AuthDirFacade:
    """Aggregates all application use cases. Injected via FastAPI dependency."""

    def __init__(
        self,
        person_repo,
        operator_repo,
        session_repo,
        recovery_repo,
        document_type_repo,
        blob_store,
    ) -> None:
        self._person_repo = person_repo
        self._operator_repo = operator_repo
        self._session_repo = session_repo
        self._recovery_repo = recovery_repo
        self._document_type_repo = document_type_repo
        self._blob_store = blob_store

    # ── Sessions ──────────────────────────────────────────────────────────────

    async def login(
        self, email: str, password: str,
        ip_address: str | None = None, user_agent: str | None = None,
    ) -> "LoginResult":
        return await id_commands.login(
            email=email, password=password,
            person_repo=self._person_repo, session_repo=self._session_repo,
            ip_address=ip_address, user_agent=user_agent,
        )

    async def validate_session(self, token: str) -> SessionValidation:
        return await id_commands.validate_session(
            token=token, person_repo=self._person_repo, session_repo=self._session_repo,
        )

    async def logout(self, token: str) -> None:
        await id_commands.logout(token=token, session_repo=self._session_repo)

    async def list_person_sessions(self, person_id: UUID) -> list[Session]:
        return await id_queries.list_person_sessions(person_id, self._session_repo)

    async def get_operator(self, operator_id: int) -> Operator | None:
        return await self._operator_repo.get_by_id(operator_id)

    # ── Recovery requests ─────────────────────────────────────────────────────

    async def submit_recovery_request(
        self, submission: RecoverySubmission
    ) -> AccountRecovery | ValidationFailure | DuplicateFailure:
        return await rec_commands.submit_recovery_request(
            submission=submission,
            recovery_repo=self._recovery_repo,
            person_repo=self._person_repo,
        )

    async def attach_file(
        self, request_id: UUID, upload: FileUpload
    ) -> AccountRecoveryFile | ValidationFailure:
        return await rec_commands.attach_file(
            request_id=request_id, upload=upload,
            recovery_repo=self._recovery_repo,
            document_types=self._document_type_repo,
            blob_store=self._blob_store,
        )

    async def resolve_request(
        self, request_id: UUID, operator_id: int | None, template_id: int,
        response_comments: str | None, notify: bool,
    ) -> "ResolveResult":
        return await rec_commands.resolve_request(
            request_id=request_id, operator_id=operator_id, template_id=template_id,
            response_comments=response_comments, notify=notify,
            recovery_repo=self._recovery_repo,
        )

    async def delete_request(self, request_id: UUID, operator_id: int | None) -> AccountRecovery:
        return await rec_commands.delete_request(
            request_id=request_id, operator_id=operator_id, recovery_repo=self._recovery_repo,
        )

    async def list_requests(self, **filters) -> "Page":
        return await rec_queries.list_requests(recovery_repo=self._recovery_repo, **filters)

    async def get_request(self, request_id: UUID) -> AccountRecovery | None:
        return await rec_queries.get_request_with_files(request_id, self._recovery_repo, self._blob_store)

    async def list_requests_for_person(self, person_id: UUID, take: int = 5, offset: int = 0) -> "Page":
        return await rec_queries.list_requests_for_person(
            person_id=person_id, take=take, offset=offset,
            recovery_repo=self._recovery_repo, person_repo=self._person_repo,
        )

    def list_templates(self) -> list["TemplateInfo"]:
        return rec_queries.list_templates()
