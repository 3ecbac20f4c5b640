"""Operator JWT creation and verification using python-jose."""
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from authdir.config import get_settings


def _settings():
    return get_settings()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def create_operator_token(operator_id: int) -> tuple[str, datetime]:
    """Create a signed JWT for a back-office operator.

    Returns:
        (token_string, expires_at)
    """
    settings = _settings()
    expires_at = _utcnow() + timedelta(minutes=settings.jwt_access_token_expire_minutes)

    payload: dict[str, Any] = {
        "sub": str(operator_id),
        "userId": operator_id,
        "iat": _utcnow(),
        "exp": expires_at,
        "type": "operator",
    }
    token = jwt.encode(payload, settings.secret_key, algorithm=settings.jwt_algorithm)
    return token, expires_at


def decode_operator_token(token: str) -> dict[str, Any]:
    """Decode and validate an operator JWT. Raises JWTError on failure."""
    settings = _settings()
    payload = jwt.decode(token, settings.secret_key, algorithms=[settings.jwt_algorithm])
    if payload.get("type") != "operator":
        raise JWTError("Not an operator token")
    return payload


def get_operator_id_from_token(token: str) -> int:
    """Extract the operator id from a valid token or raise JWTError."""
    payload = decode_operator_token(token)
    try:
        return int(payload["userId"])
    except (KeyError, TypeError, ValueError) as exc:
        raise JWTError("Token carries no operator id") from exc
