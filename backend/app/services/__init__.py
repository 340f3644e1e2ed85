"""Services exports."""
from app.services.storage import get_storage
from app.services.storage_base import StorageBackend
from app.services.region_resolver import KakaoRegionResolver, get_region_resolver

__all__ = [
    "StorageBackend",
    "get_storage",
    "KakaoRegionResolver",
    "get_region_resolver",
]
