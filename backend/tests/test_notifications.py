# backend/tests/test_notifications.py
import asyncio
import json
from unittest.mock import AsyncMock

import httpx
import pytest

from authdir.application.recovery.commands import NotificationJob
from authdir.application.recovery.notifications import FAILED_RECEIPT, dispatch_outcome
from authdir.domain.recovery.entities import ResponseTemplate
from authdir.infrastructure.database.repositories.recovery import AccountRecoveryRepository
from authdir.infrastructure.notifications.email import (
    EmailDispatcher,
    NotificationError,
    NotificationReceipt,
)

from conftest import make_request


def _dispatcher(handler) -> EmailDispatcher:
    return EmailDispatcher(
        endpoint="https://mail.test/send",
        sender="no-reply@authdir.local",
        api_key="k-123",
        timeout=2.0,
        transport=httpx.MockTransport(handler),
    )


# ── EmailDispatcher ───────────────────────────────────────────────────────────

@pytest.mark.asyncio
async def test_send_posts_message_and_returns_provider_id():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers.get("authorization")
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"id": "msg-42"})

    receipt = await _dispatcher(handler).send("juan@example.com", "Asunto", "<p>hola</p>")

    assert receipt == NotificationReceipt(provider_id="msg-42", body="<p>hola</p>")
    assert seen["auth"] == "Bearer k-123"
    assert seen["body"]["to"] == "juan@example.com"
    assert seen["body"]["from"] == "no-reply@authdir.local"


@pytest.mark.asyncio
async def test_send_accepts_message_id_key():
    receipt = await _dispatcher(lambda r: httpx.Response(202, json={"messageId": "abc"})).send("a@b.co", "s", "b")
    assert receipt.provider_id == "abc"


@pytest.mark.asyncio
async def test_provider_error_status_raises():
    with pytest.raises(NotificationError):
        await _dispatcher(lambda r: httpx.Response(500, json={"error": "boom"})).send("a@b.co", "s", "b")


@pytest.mark.asyncio
async def test_response_without_id_raises():
    with pytest.raises(NotificationError):
        await _dispatcher(lambda r: httpx.Response(200, json={"ok": True})).send("a@b.co", "s", "b")


@pytest.mark.asyncio
async def test_connection_failure_raises():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    with pytest.raises(NotificationError):
        await _dispatcher(handler).send("a@b.co", "s", "b")


# ── dispatch_outcome ──────────────────────────────────────────────────────────

async def _committed_request(session_factory):
    async with session_factory() as session:
        request = await AccountRecoveryRepository(session).save(make_request())
        await session.commit()
    return request


async def _reload(session_factory, request_id):
    async with session_factory() as session:
        return await AccountRecoveryRepository(session).get_by_id(request_id)


def _job(request) -> NotificationJob:
    return NotificationJob(
        request_id=request.id,
        template=ResponseTemplate.FINISHED,
        recipient="juan@example.com",
        full_name=request.full_name,
        comments=None,
    )


async def _dispatch(request, dispatcher, session_factory, timeout=1):
    return await dispatch_outcome(
        _job(request),
        dispatcher=dispatcher,
        session_factory=session_factory,
        repository_factory=AccountRecoveryRepository,
        timeout=timeout,
    )


@pytest.mark.asyncio
async def test_dispatch_records_receipt_and_body(session_factory):
    request = await _committed_request(session_factory)
    dispatcher = AsyncMock()
    dispatcher.send.return_value = NotificationReceipt(provider_id="msg-1", body="ignored")

    response = await _dispatch(request, dispatcher, session_factory)

    assert response == "msg-1"
    stored = await _reload(session_factory, request.id)
    assert stored.notification_response == "msg-1"
    assert "Juan Pérez Soto" in stored.notification_content
    to, subject, _ = dispatcher.send.await_args.args
    assert to == "juan@example.com"
    assert subject == "Actualización de Correo Electrónico"


@pytest.mark.asyncio
async def test_dispatch_timeout_records_failed_receipt(session_factory):
    request = await _committed_request(session_factory)

    async def slow_send(*args):
        await asyncio.sleep(5)

    dispatcher = AsyncMock()
    dispatcher.send.side_effect = slow_send

    response = await _dispatch(request, dispatcher, session_factory, timeout=0.05)

    assert response.startswith(FAILED_RECEIPT)
    stored = await _reload(session_factory, request.id)
    assert stored.notification_response.startswith(FAILED_RECEIPT)
    assert stored.notification_content


@pytest.mark.asyncio
async def test_dispatch_provider_failure_is_recorded_not_raised(session_factory):
    request = await _committed_request(session_factory)
    dispatcher = AsyncMock()
    dispatcher.send.side_effect = NotificationError("rejected")

    response = await _dispatch(request, dispatcher, session_factory)

    assert response == f"{FAILED_RECEIPT}: rejected"
    stored = await _reload(session_factory, request.id)
    assert stored.notification_response == f"{FAILED_RECEIPT}: rejected"


@pytest.mark.asyncio
async def test_dispatch_unexpected_error_is_recorded_not_raised(session_factory):
    request = await _committed_request(session_factory)
    dispatcher = AsyncMock()
    dispatcher.send.side_effect = RuntimeError("socket closed")

    response = await _dispatch(request, dispatcher, session_factory)

    assert response == f"{FAILED_RECEIPT}: RuntimeError"
    stored = await _reload(session_factory, request.id)
    assert stored.notification_response == response


@pytest.mark.asyncio
async def test_receipt_write_leaves_resolution_columns_alone(session_factory):
    request = await _committed_request(session_factory)
    async with session_factory() as session:
        repo = AccountRecoveryRepository(session)
        resolved = await repo.get_by_id(request.id)
        resolved.resolve(7, "Listo")
        await repo.save(resolved)
        await session.commit()

    dispatcher = AsyncMock()
    dispatcher.send.return_value = NotificationReceipt(provider_id="msg-9", body="")
    await _dispatch(request, dispatcher, session_factory)

    stored = await _reload(session_factory, request.id)
    assert stored.attending_by == 7
    assert stored.response_comments == "Listo"
    assert stored.notification_response == "msg-9"


@pytest.mark.asyncio
async def test_receipt_for_missing_request_is_dropped(session_factory):
    dispatcher = AsyncMock()
    dispatcher.send.return_value = NotificationReceipt(provider_id="msg-0", body="")

    response = await _dispatch(make_request(), dispatcher, session_factory)

    assert response == "msg-0"
