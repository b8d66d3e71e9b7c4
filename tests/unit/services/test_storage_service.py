"""Tests for the Supabase storage adapter."""

import base64
from typing import List

import httpx
import pytest

from app.core.config import StorageSettings
from app.core.exceptions import APIClientError, ConfigurationError
from app.models.title_deed_models import ImageFile
from app.services.storage_service import StorageService, base_file_name


def storage_with(settings: StorageSettings, handler) -> StorageService:
    return StorageService(settings, http_client=httpx.AsyncClient(transport=httpx.MockTransport(handler)))


@pytest.mark.asyncio
async def test_store_returns_public_url_from_configuration(storage_settings):
    requests: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={"Key": "ignored/provider/path"})

    storage = storage_with(storage_settings, handler)

    ref = await storage.store(b"bytes", "image/jpeg", folder="title-deeds", filename="deed.jpg")

    assert ref.url == "https://cdn.test/storage/v1/object/public/loan-documents/title-deeds/deed.jpg"
    assert ref.key == "title-deeds/deed.jpg"
    assert ref.degraded is False
    assert requests[0].method == "POST"
    assert requests[0].url.path == "/storage/v1/object/loan-documents/title-deeds/deed.jpg"
    assert requests[0].headers["Content-Type"] == "image/jpeg"
    assert requests[0].headers["Authorization"] == "Bearer service-role-key"
    assert requests[0].content == b"bytes"


def rejected(request: httpx.Request) -> httpx.Response:
    return httpx.Response(403, text="quota exceeded")


def unreachable(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("refused", request=request)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "handler",
    [rejected, unreachable],
    ids=["rejected", "unreachable"],
)
async def test_store_failure_degrades_to_data_uri(storage_settings, handler):
    storage = storage_with(storage_settings, handler)

    ref = await storage.store(b"\x89PNG", "image/png", folder="id-cards", filename="card.png")

    assert ref.degraded is True
    assert ref.url == "data:image/png;base64," + base64.b64encode(b"\x89PNG").decode()
    assert ref.key.startswith("temp_")
    assert ref.key.endswith("_card.png")


@pytest.mark.asyncio
async def test_store_without_configuration_degrades():
    storage = StorageService(StorageSettings(url="", service_role_key=""))

    ref = await storage.store(b"x", "image/jpeg", folder="title-deeds", filename="a.jpg")

    assert ref.url.startswith("data:image/jpeg;base64,")
    assert ref.key.startswith("temp_")


@pytest.mark.asyncio
async def test_public_url_falls_back_to_supabase_host():
    storage = StorageService(StorageSettings(url="https://project.supabase.test/", service_role_key="k"))

    assert storage.public_url("a/b.jpg") == (
        "https://project.supabase.test/storage/v1/object/public/loan-documents/a/b.jpg"
    )


def test_public_url_encodes_key(storage_settings):
    storage = StorageService(storage_settings)

    assert storage.public_url("title-deeds/a b.jpg") == (
        "https://cdn.test/storage/v1/object/public/loan-documents/title-deeds/a%20b.jpg"
    )


@pytest.mark.parametrize(
    "file_name, expected",
    [
        ("../../etc/โฉนด 1.jpg", "โฉนด 1.jpg"),
        ("C:\\Users\\me\\deed.jpg", "deed.jpg"),
        ("deed.jpg", "deed.jpg"),
        ("..", ""),
    ],
)
def test_base_file_name(file_name, expected):
    assert base_file_name(file_name) == expected


@pytest.mark.asyncio
async def test_upload_image_drops_client_directories(storage_settings):
    requests: List[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(200, json={})

    storage = storage_with(storage_settings, handler)

    ref = await storage.upload_image(
        ImageFile(data=b"x", mime_type="image/jpeg", file_name="../../etc/โฉนด 1.jpg"),
        folder="title-deeds",
        prefix="title_deed",
    )

    folder, name = ref.key.split("/", 1)
    assert folder == "title-deeds"
    assert "/" not in name
    assert name.endswith("_โฉนด 1.jpg")
    assert ref.url.endswith("_%E0%B9%82%E0%B8%89%E0%B8%99%E0%B8%94%201.jpg")
    assert b".." not in requests[0].url.raw_path
    assert requests[0].url.path.startswith("/storage/v1/object/loan-documents/title-deeds/title_deed_")


@pytest.mark.asyncio
async def test_upload_image_names_file(storage_settings):
    storage = storage_with(storage_settings, lambda r: httpx.Response(200, json={}))

    ref = await storage.upload_image(
        ImageFile(data=b"x", mime_type="image/jpeg", file_name="front.jpg"), folder="id-cards", prefix="id_card"
    )

    folder, name = ref.key.split("/", 1)
    assert folder == "id-cards"
    assert name.startswith("id_card_")
    assert name.endswith("_front.jpg")
    assert name[len("id_card_"):].split("_", 1)[0].isdigit()


@pytest.mark.asyncio
async def test_batch_upload_reports_partial_success(storage_settings):
    def handler(request: httpx.Request) -> httpx.Response:
        if "broken" in request.url.path:
            return httpx.Response(500, text="error")
        return httpx.Response(200, json={})

    storage = storage_with(storage_settings, handler)
    images = [
        ImageFile(data=b"1", mime_type="image/jpeg", file_name="one.jpg"),
        ImageFile(data=b"2", mime_type="image/jpeg", file_name="broken.jpg"),
        ImageFile(data=b"3", mime_type="image/jpeg", file_name="three.jpg"),
    ]

    result = await storage.upload_images(images, folder="supporting-images", prefix="supporting")

    assert result.success is True
    assert result.total_count == 3
    assert result.uploaded_count == 3
    assert [img.file_name for img in result.images] == ["one.jpg", "broken.jpg", "three.jpg"]
    # The rejected file is still usable, inline
    assert result.images[1].image_url.startswith("data:")
    assert result.images[0].image_key.startswith("supporting-images/supporting_0_")
    assert result.images[2].image_key.startswith("supporting-images/supporting_2_")


@pytest.mark.asyncio
async def test_batch_upload_skips_items_that_raise(storage_settings, monkeypatch):
    storage = storage_with(storage_settings, lambda r: httpx.Response(200, json={}))
    original = storage.upload_image

    async def flaky_upload(image, folder, prefix):
        if image.file_name == "bad.jpg":
            raise RuntimeError("unreadable")
        return await original(image, folder, prefix)

    monkeypatch.setattr(storage, "upload_image", flaky_upload)
    images = [
        ImageFile(data=b"1", mime_type="image/jpeg", file_name="good.jpg"),
        ImageFile(data=b"2", mime_type="image/jpeg", file_name="bad.jpg"),
    ]

    result = await storage.upload_images(images, folder="supporting-images", prefix="supporting")

    assert result.uploaded_count == 1
    assert result.total_count == 2
    assert result.images[0].file_name == "good.jpg"


@pytest.mark.asyncio
async def test_delete_temp_key_is_noop(storage_settings):
    calls: List[httpx.Request] = []
    storage = storage_with(storage_settings, lambda r: calls.append(r) or httpx.Response(200))

    await storage.delete("temp_1718000000000_deed.jpg")

    assert calls == []


@pytest.mark.asyncio
async def test_delete_sends_request(storage_settings):
    calls: List[httpx.Request] = []
    storage = storage_with(storage_settings, lambda r: calls.append(r) or httpx.Response(200, json={}))

    await storage.delete("title-deeds/deed.jpg")

    assert calls[0].method == "DELETE"
    assert calls[0].url.path == "/storage/v1/object/loan-documents/title-deeds/deed.jpg"


@pytest.mark.asyncio
async def test_delete_failure_raises(storage_settings):
    storage = storage_with(storage_settings, lambda r: httpx.Response(404, text="not found"))

    with pytest.raises(APIClientError):
        await storage.delete("title-deeds/missing.jpg")


@pytest.mark.asyncio
async def test_delete_without_configuration_raises():
    storage = StorageService(StorageSettings(url="", service_role_key=""))

    with pytest.raises(ConfigurationError):
        await storage.delete("title-deeds/deed.jpg")
