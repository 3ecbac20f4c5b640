"""Password checks against the argon2id hashes kept in the person directory.

Hashes are written by the directory's enrolment flow; this service only
verifies them at login.
"""
import logging

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from authdir.domain.identity.value_objects import PasswordHash

logger = logging.getLogger(__name__)

# Parameters are read back from each stored hash, so defaults are enough here
_verifier = PasswordHasher()


def verify_password(raw_password: str, password_hash: PasswordHash | None) -> bool:
    """True only when ``raw_password`` matches the stored hash.

    A missing or malformed stored hash counts as a mismatch and is logged, so
    a corrupt directory row never turns into a server error at login.
    """
    if password_hash is None or not str(password_hash):
        return False
    try:
        return _verifier.verify(str(password_hash), raw_password)
    except VerifyMismatchError:
        return False
    except (InvalidHashError, VerificationError):
        logger.warning("Stored password hash could not be checked", exc_info=True)
        return False
