"""FastAPI dependency injection: DB session, session validation, current operator, and AuthDirFacade."""
from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable
from functools import partial
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from authdir.application.recovery.commands import NotificationJob
from authdir.application.recovery.notifications import dispatch_outcome
from authdir.domain.identity.entities import AuthFailure, Operator, SessionValidation
from authdir.infrastructure.auth.jwt import get_operator_id_from_token
from authdir.infrastructure.database.connection import get_db_session, get_session_factory
from authdir.infrastructure.notifications.email import get_email_dispatcher
from authdir.infrastructure.storage.blob import LocalBlobStore, get_blob_store
from authdir.interfaces.facade import AuthDirFacade

# ── Session ───────────────────────────────────────────────────────────────────

_bearer = HTTPBearer(auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with get_db_session() as session:
        yield session


# ── Repositories (lazy imports to avoid circular) ────────────────────────────

def _build_facade(session: AsyncSession, blob_store: LocalBlobStore) -> AuthDirFacade:
    from authdir.infrastructure.crypto.pii import get_pii_codec
    from authdir.infrastructure.database.repositories.identity import (
        OperatorRepository,
        PersonRepository,
        SessionRepository,
    )
    from authdir.infrastructure.database.repositories.recovery import (
        AccountRecoveryRepository,
        DocumentTypeRepository,
    )

    return AuthDirFacade(
        person_repo=PersonRepository(session, get_pii_codec()),
        operator_repo=OperatorRepository(session),
        session_repo=SessionRepository(session),
        recovery_repo=AccountRecoveryRepository(session),
        document_type_repo=DocumentTypeRepository(session),
        blob_store=blob_store,
    )


async def get_facade(
    session: Annotated[AsyncSession, Depends(get_db)],
    blob_store: Annotated[LocalBlobStore, Depends(get_blob_store)],
) -> AuthDirFacade:
    return _build_facade(session, blob_store)


def get_notifier() -> Callable[[NotificationJob], Awaitable[str]]:
    """Background job that mails a resolution outcome and stores the receipt."""
    from authdir.infrastructure.database.repositories.recovery import AccountRecoveryRepository

    return partial(
        dispatch_outcome,
        dispatcher=get_email_dispatcher(),
        session_factory=get_session_factory(),
        repository_factory=AccountRecoveryRepository,
    )


# ── Auth ──────────────────────────────────────────────────────────────────────

def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_session_validation(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
    facade: Annotated[AuthDirFacade, Depends(get_facade)],
    session: Annotated[AsyncSession, Depends(get_db)],
) -> SessionValidation:
    if credentials is None:
        raise _unauthorized(AuthFailure.INVALID_TOKEN.value)

    result = await facade.validate_session(credentials.credentials)
    if not result.ok:
        # Expiry revokes the session; keep that write even though the request fails
        await session.commit()
        raise _unauthorized(result.failure.value)
    return result


async def get_current_operator(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_bearer)],
    facade: Annotated[AuthDirFacade, Depends(get_facade)],
) -> Operator:
    if credentials is None:
        raise _unauthorized("Could not validate credentials")
    try:
        operator_id = get_operator_id_from_token(credentials.credentials)
    except JWTError:
        raise _unauthorized("Could not validate credentials")

    operator = await facade.get_operator(operator_id)
    if operator is None:
        raise _unauthorized("Could not validate credentials")
    return operator


# Type aliases for cleaner signatures
DbSession = Annotated[AsyncSession, Depends(get_db)]
Facade = Annotated[AuthDirFacade, Depends(get_facade)]
BlobStore = Annotated[LocalBlobStore, Depends(get_blob_store)]
Notifier = Annotated[Callable[[NotificationJob], Awaitable[str]], Depends(get_notifier)]
CurrentValidation = Annotated[SessionValidation, Depends(get_session_validation)]
CurrentOperator = Annotated[Operator, Depends(get_current_operator)]
