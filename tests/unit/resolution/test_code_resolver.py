"""Tests for AI-first code resolution with manual fallback."""

import pytest

from app.core.exceptions import APIClientError
from app.services.resolution.code_resolver import CodeResolver


@pytest.fixture
def resolver(mock_llm_client, reference_data) -> CodeResolver:
    return CodeResolver(mock_llm_client, reference_data)


@pytest.mark.asyncio
async def test_province_resolved_by_model(resolver, mock_llm_client):
    mock_llm_client.generate_json.return_value = {"pvCode": "20"}

    match = await resolver.resolve_province_code("ชลบุรี")

    assert match.pv_code == "20"
    assert match.degraded is False
    prompt = mock_llm_client.generate_json.call_args.kwargs["contents"]
    assert "ชลบุรี" in prompt
    assert '"pvcode": "20"' in prompt


@pytest.mark.asyncio
async def test_model_not_found_is_not_retried_manually(resolver, mock_llm_client):
    """A clean empty answer stands even if the manual matcher would find it."""
    mock_llm_client.generate_json.return_value = {"pvCode": ""}

    match = await resolver.resolve_province_code("ชลบุรี")

    assert match.pv_code == ""
    assert match.degraded is False


@pytest.mark.asyncio
async def test_model_failure_falls_back_to_manual_matcher(resolver, mock_llm_client):
    mock_llm_client.generate_json.side_effect = APIClientError("quota exceeded")

    match = await resolver.resolve_province_code("Chon Buri")

    assert match.pv_code == "20"
    assert match.degraded is True


@pytest.mark.asyncio
async def test_unknown_province_code_from_model_is_dropped(resolver, mock_llm_client):
    mock_llm_client.generate_json.return_value = {"pvCode": "99"}

    match = await resolver.resolve_province_code("ชลบุรี")

    assert match.pv_code == ""


@pytest.mark.asyncio
async def test_empty_province_name_skips_model(resolver, mock_llm_client):
    match = await resolver.resolve_province_code("  ")

    assert match.pv_code == ""
    mock_llm_client.generate_json.assert_not_called()


@pytest.mark.asyncio
async def test_district_resolved_within_province(resolver, mock_llm_client):
    mock_llm_client.generate_json.return_value = {"amCode": "08"}

    match = await resolver.resolve_district_code("ศรีราชา", "20", "56789")

    assert (match.pv_code, match.am_code, match.parcel_no) == ("20", "08", "56789")
    prompt = mock_llm_client.generate_json.call_args.kwargs["contents"]
    # Only the province's own districts, without the sentinel row
    assert "ศรีราชา" in prompt
    assert "นิคมพัฒนา" not in prompt
    assert "ไม่ระบุอำเภอ" not in prompt


@pytest.mark.asyncio
@pytest.mark.parametrize("district_name", ["ศรีราชา", "Si Racha", ""])
async def test_district_never_resolved_without_province(resolver, mock_llm_client, district_name):
    match = await resolver.resolve_district_code(district_name, "", "123")

    assert match.am_code == ""
    mock_llm_client.generate_json.assert_not_called()


@pytest.mark.asyncio
async def test_district_model_failure_uses_filtered_manual_matcher(resolver, mock_llm_client):
    mock_llm_client.generate_json.side_effect = RuntimeError("boom")

    match = await resolver.resolve_district_code("นิคมพัฒนา", "20", "1")

    # Exists only under province 21
    assert match.am_code == ""
    assert match.degraded is True

    match = await resolver.resolve_district_code("ศรีราชา", "20", "1")
    assert match.am_code == "08"


@pytest.mark.asyncio
async def test_district_code_outside_province_is_dropped(resolver, mock_llm_client):
    mock_llm_client.generate_json.return_value = {"amCode": "00"}

    match = await resolver.resolve_district_code("ไม่ระบุ", "20", "1")

    assert match.am_code == ""
