"""Shared fixtures: a SQLite-backed app with a canned region resolver."""
import os
import tempfile

# Keep the module-level app in app.main from creating ./public/uploads
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="dongne-uploads-"))

import pytest
from fastapi.testclient import TestClient

from app.config import Settings
from app.main import create_app
from app.services.region_resolver import (
    get_region_resolver,
    select_admin_dong,
    select_upper_admin_dong,
)

# Bounding boxes (min_lat, max_lat, min_lon, max_lon) -> coord2regioncode documents
DAEJEON_JUNG_GU = (36.30, 36.40, 127.30, 127.45)
SEOUL_GANGNAM = (37.45, 37.55, 127.00, 127.10)

REGION_DOCUMENTS = {
    DAEJEON_JUNG_GU: [
        {
            "region_type": "B",
            "address_name": "대전광역시 중구 대흥동",
            "region_1depth_name": "대전광역시",
            "region_2depth_name": "중구",
            "region_3depth_name": "대흥동",
        },
        {
            "region_type": "H",
            "address_name": "대전광역시 중구 은행선화동",
            "region_1depth_name": "대전광역시",
            "region_2depth_name": "중구",
            "region_3depth_name": "은행선화동",
        },
    ],
    SEOUL_GANGNAM: [
        {
            "region_type": "H",
            "address_name": "서울특별시 강남구 역삼1동",
            "region_1depth_name": "서울특별시",
            "region_2depth_name": "강남구",
            "region_3depth_name": "역삼1동",
        },
    ],
}

DAEJEON_ADMIN_DONG = "대전광역시 중구 은행선화동"
DAEJEON_UPPER_ADMIN_DONG = "대전광역시 중구"
GANGNAM_ADMIN_DONG = "서울특별시 강남구 역삼1동"


class FakeRegionResolver:
    """Answers from REGION_DOCUMENTS instead of calling Kakao."""

    def __init__(self):
        self.fail = False
        self.calls = []

    async def fetch_region_documents(self, longitude, latitude):
        self.calls.append((longitude, latitude))
        if self.fail:
            return None
        for (min_lat, max_lat, min_lon, max_lon), documents in REGION_DOCUMENTS.items():
            if min_lat <= latitude <= max_lat and min_lon <= longitude <= max_lon:
                return documents
        return []

    async def resolve_admin_dong(self, longitude, latitude):
        return select_admin_dong(await self.fetch_region_documents(longitude, latitude))

    async def resolve_upper_admin_dong(self, longitude, latitude):
        return select_upper_admin_dong(await self.fetch_region_documents(longitude, latitude))


@pytest.fixture
def fake_resolver():
    return FakeRegionResolver()


@pytest.fixture
def settings(tmp_path):
    return Settings(
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        DB_CREATE_TABLES=True,
        UPLOAD_DIR=str(tmp_path / "uploads"),
        PUBLIC_BASE_URL="http://testserver",
        KAKAO_REST_API_KEY="",
        MAX_IMAGE_SIZE_BYTES=1024,
    )


@pytest.fixture
def client(settings, fake_resolver):
    app = create_app(settings)
    app.dependency_overrides[get_region_resolver] = lambda: fake_resolver
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def onboard(client):
    def _onboard(nickname, lat=36.3504, lon=127.3845):
        response = client.post(
            "/api/auth/onboard",
            json={"nickname": nickname, "lat": lat, "lon": lon},
        )
        assert response.status_code == 201, response.text
        return response.json()["userId"]

    return _onboard


@pytest.fixture
def create_post(client):
    def _create_post(user_id, title="T", content="본문", lat=36.3510, lon=127.3850, files=None):
        response = client.post(
            "/api/posts",
            data={"userId": user_id, "title": title, "content": content, "lat": lat, "lon": lon},
            files=files,
        )
        assert response.status_code == 201, response.text
        return response.json()["postId"]

    return _create_post
