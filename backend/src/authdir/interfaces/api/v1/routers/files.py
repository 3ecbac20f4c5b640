"""Signed blob downloads for recovery attachments."""
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.responses import FileResponse

from authdir.infrastructure.storage.blob import BlobNotFoundError
from authdir.interfaces.dependencies import BlobStore

router = APIRouter(prefix="/files", tags=["files"])


@router.get("/{path:path}")
async def download(
    path: str,
    blob_store: BlobStore,
    expires: Annotated[int, Query()],
    signature: Annotated[str, Query()],
):
    if not blob_store.verify(path, expires, signature):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid or expired link")
    try:
        target = blob_store.resolve(path)
    except BlobNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    return FileResponse(target)
