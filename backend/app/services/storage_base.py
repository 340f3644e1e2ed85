"""Storage backend abstract base class.

Defines the interface for image storage backends.
Consumers should use get_storage() from storage.py to get the active backend.
"""
from abc import ABC, abstractmethod
from typing import Optional


class StorageBackend(ABC):
    """Abstract base class for storage backends."""

    @abstractmethod
    async def upload_bytes(
        self,
        data: bytes,
        object_name: str,
        content_type: Optional[str] = None,
    ) -> str:
        """Store bytes under object_name.

        Returns:
            The object name/key
        """
        ...

    @abstractmethod
    async def delete_object(self, object_name: str) -> None:
        """Delete an object from storage. Missing objects are ignored."""
        ...

    @abstractmethod
    def get_public_url(self, object_name: str) -> str:
        """Return the stable, browser-accessible URL of an object."""
        ...

    @abstractmethod
    def object_name_from_url(self, url: str) -> Optional[str]:
        """Inverse of get_public_url; None if the URL is not one of ours."""
        ...
