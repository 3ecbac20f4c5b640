"""Explicit encrypt/decrypt boundary for personally identifiable columns.

Repositories call the codec when mapping between entities and ORM rows, so the
database only ever sees ciphertext for these fields.
"""
from cryptography.fernet import Fernet, InvalidToken

from authdir.config import get_settings


class PiiDecryptionError(Exception):
    pass


class PiiCodec:
    def __init__(self, key: str | bytes) -> None:
        self._fernet = Fernet(key.encode() if isinstance(key, str) else key)

    def encrypt(self, value: str | None) -> str | None:
        if value is None:
            return None
        return self._fernet.encrypt(value.encode("utf-8")).decode("ascii")

    def decrypt(self, value: str | None) -> str | None:
        if value is None:
            return None
        try:
            return self._fernet.decrypt(value.encode("ascii")).decode("utf-8")
        except InvalidToken as exc:
            raise PiiDecryptionError("Stored value could not be decrypted with the configured key") from exc


def get_pii_codec() -> PiiCodec:
    return PiiCodec(get_settings().pii_encryption_key)
