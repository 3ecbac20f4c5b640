"""Deterministic session token generation (HMAC-SHA256, 64 hex chars)."""
import hashlib
import hmac
from datetime import datetime
from uuid import UUID

TOKEN_LENGTH = 64
ISSUED_AT_FORMAT = "%Y%m%d%H%M%S"


def generate_session_token(
    person_id: UUID | str,
    ip_address: str | None,
    user_agent: str | None,
    issued_at: datetime,
    secret: str,
) -> str:
    """Return the keyed hash of the session context, truncated to second precision.

    The same person, context and second always produce the same token.
    """
    payload = "|".join(
        (
            str(person_id),
            ip_address or "",
            user_agent or "",
            issued_at.strftime(ISSUED_AT_FORMAT),
        )
    )
    digest = hmac.new(secret.encode(), payload.encode(), hashlib.sha256).hexdigest()
    return digest[:TOKEN_LENGTH]
