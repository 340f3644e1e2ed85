"""Local filesystem storage backend implementation.

Uploaded images are written under UPLOAD_DIR and served by the app's
StaticFiles mount at UPLOAD_URL_PATH.
"""
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os

from app.services.storage_base import StorageBackend


class LocalStorageBackend(StorageBackend):
    """Storage backend using local filesystem."""

    def __init__(self, base_path: str, public_base_url: str, url_path: str = "/uploads"):
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.url_prefix = f"{public_base_url.rstrip('/')}/{url_path.strip('/')}/"

    def _resolve(self, object_name: str) -> Path:
        """Resolve object name to absolute path with path traversal protection."""
        if not object_name or object_name.startswith("/"):
            raise ValueError(f"Invalid object name: {object_name}")
        target = (self.base_path / object_name).resolve()
        if not target.is_relative_to(self.base_path.resolve()):
            raise ValueError(f"Path traversal detected: {object_name}")
        return target

    async def upload_bytes(
        self,
        data: bytes,
        object_name: str,
        content_type: Optional[str] = None,
    ) -> str:
        dest = self._resolve(object_name)
        dest.parent.mkdir(parents=True, exist_ok=True)
        async with aiofiles.open(dest, "wb") as f:
            await f.write(data)
        return object_name

    async def delete_object(self, object_name: str) -> None:
        target = self._resolve(object_name)
        if await aiofiles.os.path.exists(target):
            await aiofiles.os.remove(target)

    def get_public_url(self, object_name: str) -> str:
        return f"{self.url_prefix}{object_name}"

    def object_name_from_url(self, url: str) -> Optional[str]:
        if not url or not url.startswith(self.url_prefix):
            return None
        return url[len(self.url_prefix):] or None
