"""Reverse geocoding of coordinates to administrative dong labels.

Wraps the Kakao Local ``coord2regioncode`` API. Lookups never raise: every
failure is reported as a ``RegionResolution`` with a non-RESOLVED status, whose
``value`` is the sentinel string persisted on rows and echoed to clients.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Any, Optional

import httpx
from fastapi import Request

from app.config import Settings

logger = logging.getLogger("app.geocoding")

# Sentinels are part of the wire contract; clients compare against them verbatim.
CALL_FAILED_SENTINEL = "API 호출 중 오류가 발생했거나 API 키가 설정되지 않았습니다."
ADMIN_DONG_NOT_FOUND_SENTINEL = "행정동 주소를 찾을 수 없습니다."
UPPER_ADMIN_DONG_NOT_FOUND_SENTINEL = "상위 행정동 주소를 찾을 수 없습니다."

REGION_TYPE_ADMINISTRATIVE = "H"
REGION_TYPE_LEGAL = "B"


class ResolutionStatus(str, enum.Enum):
    RESOLVED = "resolved"
    CALL_FAILED = "call_failed"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class RegionResolution:
    status: ResolutionStatus
    label: Optional[str] = None
    not_found_sentinel: str = ADMIN_DONG_NOT_FOUND_SENTINEL

    @property
    def resolved(self) -> bool:
        return self.status is ResolutionStatus.RESOLVED

    @property
    def value(self) -> str:
        """Label to persist/serialize: the region name or its failure sentinel."""
        if self.status is ResolutionStatus.RESOLVED:
            return self.label
        if self.status is ResolutionStatus.CALL_FAILED:
            return CALL_FAILED_SENTINEL
        return self.not_found_sentinel


def _find_document(documents: list[dict[str, Any]], region_type: str) -> Optional[dict[str, Any]]:
    return next((doc for doc in documents if doc.get("region_type") == region_type), None)


def select_admin_dong(documents: Optional[list[dict[str, Any]]]) -> RegionResolution:
    """Pick the administrative-dong label from a coord2regioncode document list.

    ``None`` means the provider call itself failed.
    """
    if documents is None:
        return RegionResolution(ResolutionStatus.CALL_FAILED)

    admin = _find_document(documents, REGION_TYPE_ADMINISTRATIVE)
    if admin and admin.get("address_name"):
        return RegionResolution(ResolutionStatus.RESOLVED, admin["address_name"])
    return RegionResolution(ResolutionStatus.NOT_FOUND)


def select_upper_admin_dong(documents: Optional[list[dict[str, Any]]]) -> RegionResolution:
    """Build "<region_1depth_name> <region_2depth_name>" from the H document, else B."""
    if documents is None:
        return RegionResolution(
            ResolutionStatus.CALL_FAILED,
            not_found_sentinel=UPPER_ADMIN_DONG_NOT_FOUND_SENTINEL,
        )

    region = _find_document(documents, REGION_TYPE_ADMINISTRATIVE) or _find_document(
        documents, REGION_TYPE_LEGAL
    )
    if region:
        return RegionResolution(
            ResolutionStatus.RESOLVED,
            f"{region.get('region_1depth_name', '')} {region.get('region_2depth_name', '')}",
            not_found_sentinel=UPPER_ADMIN_DONG_NOT_FOUND_SENTINEL,
        )
    return RegionResolution(
        ResolutionStatus.NOT_FOUND,
        not_found_sentinel=UPPER_ADMIN_DONG_NOT_FOUND_SENTINEL,
    )


class KakaoRegionResolver:
    """Resolves (lon, lat) to admin dong labels through the Kakao Local API.

    No caching and no retries: each call queries the provider once.
    """

    def __init__(
        self,
        api_key: str,
        url: str,
        timeout: float = 5.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        self.api_key = api_key
        self.url = url
        self.client = client or httpx.AsyncClient(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: Settings) -> "KakaoRegionResolver":
        return cls(
            api_key=settings.KAKAO_REST_API_KEY,
            url=settings.KAKAO_REGION_URL,
            timeout=settings.GEOCODER_TIMEOUT_SECONDS,
        )

    async def aclose(self) -> None:
        await self.client.aclose()

    async def fetch_region_documents(
        self, longitude: float, latitude: float
    ) -> Optional[list[dict[str, Any]]]:
        """Return the provider's document list, or None when the call failed."""
        if not self.api_key:
            logger.error("Kakao REST API key (KAKAO_REST_API_KEY) is not configured")
            return None

        try:
            response = await self.client.get(
                self.url,
                headers={"Authorization": f"KakaoAK {self.api_key}"},
                params={"x": longitude, "y": latitude},
            )
            response.raise_for_status()
            documents = response.json()["documents"]
        except httpx.HTTPError as e:
            logger.error(f"Error calling Kakao API: {e!r}")
            return None
        except (ValueError, KeyError, TypeError) as e:
            logger.error(f"Malformed Kakao API response: {e!r}")
            return None

        if not isinstance(documents, list):
            logger.error("Malformed Kakao API response: documents is not a list")
            return None
        return documents

    async def resolve_admin_dong(self, longitude: float, latitude: float) -> RegionResolution:
        documents = await self.fetch_region_documents(longitude, latitude)
        resolution = select_admin_dong(documents)
        logger.debug(f"admin dong for ({longitude}, {latitude}): {resolution.status.value}")
        return resolution

    async def resolve_upper_admin_dong(
        self, longitude: float, latitude: float
    ) -> RegionResolution:
        documents = await self.fetch_region_documents(longitude, latitude)
        resolution = select_upper_admin_dong(documents)
        logger.debug(f"upper admin dong for ({longitude}, {latitude}): {resolution.status.value}")
        return resolution


def get_region_resolver(request: Request) -> KakaoRegionResolver:
    """FastAPI dependency returning the resolver created at startup."""
    return request.app.state.region_resolver
