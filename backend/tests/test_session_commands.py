# backend/tests/test_session_commands.py
from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from authdir.application.identity.commands import (
    InvalidCredentialsError,
    login,
    logout,
    revoke_all_except,
    revoke_session,
    start_session,
    validate_session,
)
from authdir.application.identity.queries import list_person_sessions
from authdir.domain.identity.entities import AuthFailure

from conftest import PASSWORD

NOW = datetime(2024, 6, 1, 12, 0, 0, tzinfo=timezone.utc)
HOUR = timedelta(hours=1)
SECRET = "test-secret"


async def _start(person, person_repo, session_repo, ip="10.0.0.1", ua="Mozilla/5.0", now=NOW):
    return await start_session(
        person_id=person.id,
        person_repo=person_repo,
        session_repo=session_repo,
        ip_address=ip,
        user_agent=ua,
        lifetime=HOUR,
        secret=SECRET,
        now=now,
    )


@pytest.mark.asyncio
async def test_start_session_issues_one_hour_session(person, person_repo, session_repo):
    session = await _start(person, person_repo, session_repo)

    assert len(session.token) == 64
    assert session.begin_at == NOW
    assert session.end_at == NOW + HOUR
    stored = await session_repo.get_active_by_token(session.token)
    assert stored.session_id == session.session_id


@pytest.mark.asyncio
async def test_same_context_reuses_session_and_extends_expiry(person, person_repo, session_repo):
    first = await _start(person, person_repo, session_repo)
    later = NOW + timedelta(minutes=20)
    second = await _start(person, person_repo, session_repo, now=later)

    assert second.session_id == first.session_id
    assert second.token == first.token
    assert second.end_at == later + HOUR
    assert len(await list_person_sessions(person.id, session_repo, now=later)) == 1


@pytest.mark.asyncio
async def test_reuse_never_shortens_expiry(person, person_repo, session_repo):
    await _start(person, person_repo, session_repo)
    reused = await start_session(
        person_id=person.id, person_repo=person_repo, session_repo=session_repo,
        ip_address="10.0.0.1", user_agent="Mozilla/5.0",
        lifetime=timedelta(minutes=5), secret=SECRET, now=NOW + timedelta(minutes=1),
    )
    assert reused.end_at == NOW + HOUR


@pytest.mark.asyncio
async def test_new_context_revokes_previous_sessions(person, person_repo, session_repo):
    phone = await _start(person, person_repo, session_repo, ip="10.0.0.1", ua="Phone")
    laptop = await _start(person, person_repo, session_repo, ip="10.0.0.2", ua="Laptop", now=NOW + timedelta(seconds=5))

    assert phone.token != laptop.token
    assert await session_repo.get_active_by_token(phone.token) is None
    live = await list_person_sessions(person.id, session_repo, now=NOW + timedelta(seconds=5))
    assert [s.session_id for s in live] == [laptop.session_id]


@pytest.mark.asyncio
async def test_missing_context_always_starts_fresh_session(person, person_repo, session_repo):
    first = await _start(person, person_repo, session_repo, ip=None, ua=None)
    second = await _start(person, person_repo, session_repo, ip=None, ua=None, now=NOW + timedelta(seconds=2))

    assert first.session_id != second.session_id
    live = await list_person_sessions(person.id, session_repo, now=NOW + timedelta(seconds=2))
    assert len(live) == 1


@pytest.mark.asyncio
async def test_sequential_logins_leave_at_most_one_live_session(person, person_repo, session_repo):
    for i in range(5):
        await _start(person, person_repo, session_repo, ip=f"10.0.0.{i}", ua=f"UA{i}", now=NOW + timedelta(seconds=i))
    live = await list_person_sessions(person.id, session_repo, now=NOW + timedelta(seconds=5))
    assert len(live) == 1


@pytest.mark.asyncio
async def test_start_session_takes_person_lock_first():
    person_repo = AsyncMock()
    session_repo = AsyncMock()
    session_repo.get_live_by_context.return_value = None
    session_repo.revoke_all_except.return_value = 0
    person_id = uuid4()

    await start_session(
        person_id=person_id, person_repo=person_repo, session_repo=session_repo,
        ip_address="1.1.1.1", user_agent="UA", lifetime=HOUR, secret=SECRET, now=NOW,
    )

    person_repo.lock.assert_awaited_once_with(person_id)
    session_repo.revoke_all_except.assert_awaited_once_with(person_id, None, NOW)


@pytest.mark.asyncio
async def test_validate_session_ok(person, person_repo, session_repo):
    session = await _start(person, person_repo, session_repo)
    result = await validate_session(
        token=session.token, person_repo=person_repo, session_repo=session_repo,
        now=NOW + timedelta(minutes=30),
    )
    assert result.ok
    assert result.person.id == person.id
    assert result.session.session_id == session.session_id


@pytest.mark.asyncio
async def test_validate_unknown_token_is_invalid(person_repo, session_repo):
    result = await validate_session(token="0" * 64, person_repo=person_repo, session_repo=session_repo, now=NOW)
    assert not result.ok
    assert result.failure == AuthFailure.INVALID_TOKEN


@pytest.mark.asyncio
async def test_expired_session_is_revoked_then_invalid(person, person_repo, session_repo):
    session = await _start(person, person_repo, session_repo)
    after_expiry = NOW + HOUR + timedelta(seconds=1)

    first = await validate_session(
        token=session.token, person_repo=person_repo, session_repo=session_repo, now=after_expiry
    )
    second = await validate_session(
        token=session.token, person_repo=person_repo, session_repo=session_repo, now=after_expiry
    )

    assert first.failure == AuthFailure.SESSION_EXPIRED
    assert second.failure == AuthFailure.INVALID_TOKEN
    assert (await session_repo.get_by_id(session.session_id)).is_revoked


@pytest.mark.asyncio
async def test_banned_person_is_reported_and_session_kept(person, person_repo, session_repo):
    session = await _start(person, person_repo, session_repo)
    person.banned_at = NOW
    await person_repo.save(person)

    result = await validate_session(
        token=session.token, person_repo=person_repo, session_repo=session_repo, now=NOW
    )

    assert result.failure == AuthFailure.PERSON_BANNED
    assert await session_repo.get_active_by_token(session.token) is not None


@pytest.mark.asyncio
async def test_deleted_person_token_is_invalid(person, person_repo, session_repo):
    session = await _start(person, person_repo, session_repo)
    person.deleted_at = NOW
    await person_repo.save(person)

    result = await validate_session(
        token=session.token, person_repo=person_repo, session_repo=session_repo, now=NOW
    )
    assert result.failure == AuthFailure.INVALID_TOKEN


@pytest.mark.asyncio
async def test_revoke_session_is_idempotent(person, person_repo, session_repo):
    session = await _start(person, person_repo, session_repo)

    await revoke_session(session_id=session.session_id, session_repo=session_repo, now=NOW)
    await revoke_session(session_id=session.session_id, session_repo=session_repo, now=NOW + HOUR)

    stored = await session_repo.get_by_id(session.session_id)
    assert stored.deleted_at == NOW


@pytest.mark.asyncio
async def test_revoke_all_except_keeps_one(person, person_repo, session_repo):
    kept = await _start(person, person_repo, session_repo, ip=None, ua=None)
    # Revoking everything but the live one touches nothing
    count = await revoke_all_except(
        person_id=person.id, keep_session_id=kept.session_id, session_repo=session_repo, now=NOW
    )
    assert count == 0

    count = await revoke_all_except(person_id=person.id, session_repo=session_repo, now=NOW)
    assert count == 1
    assert await session_repo.get_active_by_token(kept.token) is None


@pytest.mark.asyncio
async def test_login_with_valid_password(person, person_repo, session_repo):
    result = await login(
        email="MARIA@example.com", password=PASSWORD,
        person_repo=person_repo, session_repo=session_repo,
        ip_address="10.0.0.1", user_agent="UA", now=NOW,
    )
    assert result.person.id == person.id
    assert result.expires_at > NOW
    assert (await session_repo.get_active_by_token(result.token)) is not None


@pytest.mark.asyncio
async def test_login_rejects_wrong_password(person, person_repo, session_repo):
    with pytest.raises(InvalidCredentialsError):
        await login(email="maria@example.com", password="nope", person_repo=person_repo, session_repo=session_repo)


@pytest.mark.asyncio
async def test_login_rejects_banned_person(person, person_repo, session_repo):
    person.banned_at = NOW
    await person_repo.save(person)
    with pytest.raises(InvalidCredentialsError):
        await login(email="maria@example.com", password=PASSWORD, person_repo=person_repo, session_repo=session_repo)


@pytest.mark.asyncio
async def test_logout_revokes_and_ignores_unknown_tokens(person, person_repo, session_repo):
    session = await _start(person, person_repo, session_repo)

    await logout(token=session.token, session_repo=session_repo, now=NOW)
    await logout(token="f" * 64, session_repo=session_repo, now=NOW)

    assert await session_repo.get_active_by_token(session.token) is None
