"""Pytest configuration and shared fixtures."""

from typing import Any, Dict, List
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

from app.core.config import RegistrySettings, StorageSettings
from app.core.models.gemini_client import GeminiClient
from app.main import app
from app.models.title_deed_models import ImageFile
from app.services.resolution.reference_data import District, Province, ReferenceData


@pytest.fixture
def test_client() -> TestClient:
    """Create FastAPI test client.

    Returns:
        TestClient: FastAPI test client instance
    """
    return TestClient(app)


@pytest.fixture(autouse=True)
def clear_dependency_overrides():
    """Ensure FastAPI dependency overrides are reset between tests."""
    app.dependency_overrides = {}
    yield
    app.dependency_overrides = {}


@pytest.fixture
def provinces() -> List[Province]:
    return [
        Province(code="10", name_th="กรุงเทพมหานคร", name_en="Bangkok"),
        Province(code="20", name_th="ชลบุรี", name_en="Chon Buri"),
        Province(code="21", name_th="ระยอง", name_en="Rayong"),
        Province(code="50", name_th="เชียงใหม่", name_en="Chiang Mai"),
    ]


@pytest.fixture
def districts() -> List[District]:
    return [
        District(province_code="20", code="00", name_th="ไม่ระบุอำเภอ", name_en="Unspecified"),
        District(province_code="20", code="01", name_th="เมืองชลบุรี", name_en="Mueang Chon Buri"),
        District(province_code="20", code="04", name_th="บางละมุง", name_en="Bang Lamung"),
        District(province_code="20", code="08", name_th="ศรีราชา", name_en="Si Racha"),
        District(province_code="21", code="00", name_th="ไม่ระบุอำเภอ", name_en="Unspecified"),
        District(province_code="21", code="01", name_th="เมืองระยอง", name_en="Mueang Rayong"),
        District(province_code="21", code="08", name_th="นิคมพัฒนา", name_en="Nikhom Phatthana"),
        District(province_code="50", code="01", name_th="เมืองเชียงใหม่", name_en="Mueang Chiang Mai"),
    ]


@pytest.fixture
def reference_data(provinces: List[Province], districts: List[District]) -> ReferenceData:
    """Small reference tables covering the Chonburi scenarios."""
    return ReferenceData(provinces, districts)


@pytest.fixture
def mock_llm_client() -> Mock:
    """Create mock Gemini client.

    ``generate_json`` is an AsyncMock; set ``return_value`` or
    ``side_effect`` per test.
    """
    client = Mock(spec=GeminiClient)
    client.generate_json = AsyncMock(return_value={})
    client.image_part = Mock(side_effect=lambda data, mime_type: ("image", mime_type, len(data)))
    return client


@pytest.fixture
def registry_settings() -> RegistrySettings:
    return RegistrySettings(
        zenrows_api_key="test-zenrows-key",
        zenrows_api_url="https://proxy.test/v1/",
        base_url="https://landsmaps.test",
        max_retries=3,
        retry_delay=2.0,
        manual_lookup_timeout=5.0,
    )


@pytest.fixture
def storage_settings() -> StorageSettings:
    return StorageSettings(
        url="https://project.supabase.test",
        service_role_key="service-role-key",
        bucket="loan-documents",
        public_base_url="https://cdn.test",
    )


@pytest.fixture
def no_sleep() -> AsyncMock:
    """Replacement for asyncio.sleep that records requested delays."""
    return AsyncMock(return_value=None)


@pytest.fixture
def sample_registry_record() -> Dict[str, Any]:
    return {
        "error": False,
        "result": [
            {
                "parcelno": "56789",
                "provname": "ชลบุรี",
                "amphurname": "ศรีราชา",
                "tumbolname": "สุรศักดิ์",
                "rai": 1,
                "ngan": 2,
                "wa": 30.5,
                "owner_name": "นายทดสอบ ระบบ",
                "land_type": "โฉนดที่ดิน",
            }
        ],
    }


@pytest.fixture
def deed_image() -> ImageFile:
    return ImageFile(data=b"\xff\xd8\xff\xe0deed-image", mime_type="image/jpeg", file_name="deed.jpg")
