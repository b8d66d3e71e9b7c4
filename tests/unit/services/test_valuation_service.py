"""Tests for AI property valuation."""

import base64

import httpx
import pytest

from app.models.title_deed_models import ImageFile
from app.services.valuation_service import (
    EVALUATION_FAILED_REASONING,
    PropertyValuationService,
    decode_data_uri,
    has_registry_data,
)

SITE_PHOTO = ImageFile(data=b"site", mime_type="image/png", file_name="site.png")


@pytest.fixture
def service(mock_llm_client) -> PropertyValuationService:
    return PropertyValuationService(mock_llm_client)


class TestHasRegistryData:
    def test_record_with_rows(self, sample_registry_record):
        assert has_registry_data(sample_registry_record) is True

    @pytest.mark.parametrize("record", [None, {}, {"result": []}, {"error": False, "result": []}])
    def test_record_without_rows(self, record):
        assert has_registry_data(record) is False

    @pytest.mark.parametrize("record", [{"parcelno": "56789", "rai": 1}, {"result": "x"}, {"error": True}])
    def test_non_empty_record_without_result_list(self, record):
        assert has_registry_data(record) is True


@pytest.mark.asyncio
async def test_insufficient_data_makes_no_model_call(service, mock_llm_client, deed_image):
    result = await service.evaluate_property(deed_image, None, [])

    assert result.insufficient_data is True
    assert result.is_sentinel
    mock_llm_client.generate_json.assert_not_called()


@pytest.mark.asyncio
async def test_empty_registry_rows_count_as_missing(service, mock_llm_client, deed_image):
    result = await service.evaluate_property(deed_image, {"error": False, "result": []})

    assert result.insufficient_data is True
    mock_llm_client.generate_json.assert_not_called()


@pytest.mark.asyncio
async def test_flattened_record_without_images_calls_model(service, mock_llm_client, deed_image):
    mock_llm_client.generate_json.return_value = {"estimatedValue": 1200000, "reasoning": "", "confidence": 40}
    record = {"parcelno": "56789", "rai": 1, "amphurname": "ศรีราชา"}

    result = await service.evaluate_property(deed_image, record, [])

    assert result.insufficient_data is False
    assert result.estimated_value == 1200000
    mock_llm_client.generate_json.assert_called_once()
    assert "56789" in mock_llm_client.generate_json.call_args.kwargs["contents"][0]


@pytest.mark.asyncio
async def test_valuation_with_registry_data(service, mock_llm_client, deed_image, sample_registry_record):
    mock_llm_client.generate_json.return_value = {
        "estimatedValue": 2500000,
        "reasoning": "ทำเลใกล้นิคมอุตสาหกรรม",
        "confidence": 72,
    }

    result = await service.evaluate_property(deed_image, sample_registry_record, [SITE_PHOTO])

    assert result.estimated_value == 2500000
    assert result.confidence == 72
    assert result.reasoning == "ทำเลใกล้นิคมอุตสาหกรรม"
    assert result.degraded is False

    contents = mock_llm_client.generate_json.call_args.kwargs["contents"]
    # Prompt first, then the deed, then site photos in order
    assert "สุรศักดิ์" in contents[0]
    assert contents[1] == ("image", "image/jpeg", len(deed_image.data))
    assert contents[2] == ("image", "image/png", 4)


@pytest.mark.asyncio
async def test_supporting_images_alone_are_enough(service, mock_llm_client, deed_image):
    mock_llm_client.generate_json.return_value = {"estimatedValue": 900000, "reasoning": "", "confidence": 30}

    result = await service.evaluate_property(deed_image, None, [SITE_PHOTO])

    assert result.estimated_value == 900000
    assert "ไม่มีข้อมูลรายละเอียดจากกรมที่ดิน" in mock_llm_client.generate_json.call_args.kwargs["contents"][0]


@pytest.mark.asyncio
async def test_out_of_range_values_are_clamped(service, mock_llm_client, deed_image, sample_registry_record):
    mock_llm_client.generate_json.return_value = {"estimatedValue": -50, "reasoning": None, "confidence": 250}

    result = await service.evaluate_property(deed_image, sample_registry_record)

    assert result.estimated_value == 0
    assert result.confidence == 100
    assert result.reasoning == ""


@pytest.mark.asyncio
async def test_model_failure_returns_sentinel(service, mock_llm_client, deed_image, sample_registry_record):
    mock_llm_client.generate_json.side_effect = RuntimeError("quota exhausted")

    result = await service.evaluate_property(deed_image, sample_registry_record)

    assert result.is_sentinel
    assert result.degraded is True
    assert result.reasoning == EVALUATION_FAILED_REASONING


def test_decode_data_uri():
    image = decode_data_uri("data:image/png;base64," + base64.b64encode(b"\x89PNG").decode())

    assert image.data == b"\x89PNG"
    assert image.mime_type == "image/png"


class TestEvaluateFromUrls:
    @pytest.mark.asyncio
    async def test_missing_deed_url_returns_none(self, service, mock_llm_client, sample_registry_record):
        assert await service.evaluate_property_from_urls(None, sample_registry_record, []) is None
        mock_llm_client.generate_json.assert_not_called()

    @pytest.mark.asyncio
    async def test_downloads_images_and_skips_broken_ones(self, mock_llm_client, sample_registry_record):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("broken.jpg"):
                return httpx.Response(404)
            return httpx.Response(200, content=b"jpeg-bytes", headers={"content-type": "image/jpeg"})

        mock_llm_client.generate_json.return_value = {"estimatedValue": 1, "reasoning": "", "confidence": 1}
        service = PropertyValuationService(
            mock_llm_client, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler))
        )

        result = await service.evaluate_property_from_urls(
            "https://cdn.test/deed.jpg",
            sample_registry_record,
            ["https://cdn.test/broken.jpg", "https://cdn.test/site.jpg"],
        )

        assert result.estimated_value == 1
        contents = mock_llm_client.generate_json.call_args.kwargs["contents"]
        assert len(contents) == 3

    @pytest.mark.asyncio
    async def test_deed_download_failure_returns_none(self, mock_llm_client, sample_registry_record):
        service = PropertyValuationService(
            mock_llm_client,
            http_client=httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(500))),
        )

        result = await service.evaluate_property_from_urls("https://cdn.test/deed.jpg", sample_registry_record)

        assert result is None
        mock_llm_client.generate_json.assert_not_called()

    @pytest.mark.asyncio
    async def test_inline_deed_image_is_decoded(self, service, mock_llm_client, sample_registry_record):
        mock_llm_client.generate_json.return_value = {"estimatedValue": 5, "reasoning": "", "confidence": 5}
        deed_uri = "data:image/jpeg;base64," + base64.b64encode(b"inline-deed").decode()

        result = await service.evaluate_property_from_urls(deed_uri, sample_registry_record)

        assert result.estimated_value == 5
        mock_llm_client.image_part.assert_any_call(b"inline-deed", "image/jpeg")
