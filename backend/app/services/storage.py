"""Image upload storage service."""
import logging
import os
import time
import uuid
from typing import Optional

from fastapi import HTTPException, Request, UploadFile, status

from app.services.storage_base import StorageBackend

logger = logging.getLogger(__name__)


def get_storage(request: Request) -> StorageBackend:
    """Get the storage backend created at startup."""
    return request.app.state.storage


def _image_object_name(filename: Optional[str]) -> str:
    # image-<epoch millis>-<random><ext>, e.g. image-1719900000000-3f9a1c2b.png
    ext = os.path.splitext(filename or "")[1].lower()
    return f"image-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{ext}"


async def store_image(
    storage: StorageBackend,
    upload: UploadFile,
    max_size_bytes: int,
) -> str:
    """Validate and store an uploaded image, returning its public URL."""
    if not (upload.content_type or "").startswith("image/"):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only image files are allowed!",
        )

    data = await upload.read()
    if len(data) > max_size_bytes:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Image exceeds the {max_size_bytes} byte limit",
        )

    object_name = await storage.upload_bytes(
        data, _image_object_name(upload.filename), content_type=upload.content_type
    )
    logger.info(f"Stored image {object_name} ({len(data)} bytes)")
    return storage.get_public_url(object_name)


async def discard_image(storage: StorageBackend, image_url: Optional[str]) -> None:
    """Best-effort removal of a previously stored image."""
    object_name = storage.object_name_from_url(image_url) if image_url else None
    if not object_name:
        return
    try:
        await storage.delete_object(object_name)
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to delete image {object_name}: {e}")
