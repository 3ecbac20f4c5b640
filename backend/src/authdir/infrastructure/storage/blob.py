"""Local-disk blob store with HMAC-signed, expiring download URLs."""
import hashlib
import hmac
import time
from pathlib import Path
from urllib.parse import quote, urlencode
from uuid import uuid4

from authdir.config import get_settings


class BlobNotFoundError(Exception):
    pass


class LocalBlobStore:
    def __init__(
        self,
        root: Path,
        secret: str,
        public_base_url: str,
        expire_seconds: int = 600,
    ) -> None:
        self._root = root
        self._secret = secret.encode()
        self._base_url = public_base_url.rstrip("/")
        self._expire_seconds = expire_seconds

    async def put(self, content: bytes, file_name: str, prefix: str) -> str:
        """Write the bytes under prefix and return the store-relative path."""
        safe_name = Path(file_name).name or "upload"
        relative = f"{prefix.strip('/')}/{uuid4().hex}_{safe_name}"
        target = self._root / relative
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(content)
        return relative

    def signed_url(self, path: str) -> str:
        expires = int(time.time()) + self._expire_seconds
        query = urlencode({"expires": expires, "signature": self._sign(path, expires)})
        return f"{self._base_url}/api/v1/files/{quote(path)}?{query}"

    def verify(self, path: str, expires: int, signature: str) -> bool:
        if expires < int(time.time()):
            return False
        return hmac.compare_digest(self._sign(path, expires), signature)

    def resolve(self, path: str) -> Path:
        """Map a store path to a file on disk, refusing anything outside the root."""
        root = self._root.resolve()
        target = (root / path).resolve()
        if root not in target.parents or not target.is_file():
            raise BlobNotFoundError(path)
        return target

    def _sign(self, path: str, expires: int) -> str:
        message = f"{path}:{expires}".encode()
        return hmac.new(self._secret, message, hashlib.sha256).hexdigest()


def get_blob_store() -> LocalBlobStore:
    settings = get_settings()
    return LocalBlobStore(
        root=settings.storage_path,
        secret=settings.secret_key,
        public_base_url=settings.public_base_url,
        expire_seconds=settings.signed_url_expire_seconds,
    )
