"""Detached delivery of recovery outcomes to the requester.

Scheduled only after the resolving transaction has committed. It opens its
own database session and writes nothing but the receipt columns, so a slow
or broken provider can never undo a resolution.
"""
from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from authdir.application.recovery.commands import NotificationJob
from authdir.config import get_settings
from authdir.domain.recovery.repositories import IAccountRecoveryRepository
from authdir.infrastructure.notifications.email import EmailDispatcher, NotificationError
from authdir.infrastructure.notifications.templates import render_outcome

logger = logging.getLogger(__name__)

FAILED_RECEIPT = "failed"

RepositoryFactory = Callable[[AsyncSession], IAccountRecoveryRepository]


async def dispatch_outcome(
    job: NotificationJob,
    *,
    dispatcher: EmailDispatcher,
    session_factory: async_sessionmaker[AsyncSession],
    repository_factory: RepositoryFactory,
    timeout: float | None = None,
) -> str:
    """Send the outcome email and record the receipt on the request.

    Returns the stored receipt: the provider message id, or a value starting
    with ``failed`` when delivery did not happen. Never raises.
    """
    if timeout is None:
        timeout = get_settings().notification_timeout_seconds

    body: str | None = None
    try:
        rendered = render_outcome(job.template, job.full_name, job.comments)
        body = rendered.html_body
        receipt = await asyncio.wait_for(
            dispatcher.send(job.recipient, rendered.subject, rendered.html_body),
            timeout=timeout,
        )
        response = receipt.provider_id
    except asyncio.TimeoutError:
        logger.warning("Notification for request %s timed out after %ss", job.request_id, timeout)
        response = f"{FAILED_RECEIPT}: timeout"
    except NotificationError as exc:
        logger.error("Notification for request %s failed: %s", job.request_id, exc)
        response = f"{FAILED_RECEIPT}: {exc}"
    except Exception as exc:
        logger.exception("Unexpected error notifying request %s", job.request_id)
        response = f"{FAILED_RECEIPT}: {type(exc).__name__}"

    try:
        async with session_factory() as session:
            stored = await repository_factory(session).record_notification(job.request_id, response, body)
            await session.commit()
    except Exception:
        logger.exception("Could not store notification receipt for request %s", job.request_id)
        return response

    if not stored:
        logger.warning("Request %s vanished before its notification receipt was stored", job.request_id)
    return response
