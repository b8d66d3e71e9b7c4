"""AI property valuation from a deed photo, registry data and site photos."""

import base64
import json
from typing import List, Optional, Sequence
from urllib.parse import unquote_to_bytes

import httpx

from app.core.models.gemini_client import GeminiClient
from app.models.title_deed_models import ImageFile, RegistryParcelRecord, ValuationResult
from app.prompts.system_prompts import (
    NO_REGISTRY_DATA_PLACEHOLDER,
    PROPERTY_VALUATION_PROMPT,
    PROPERTY_VALUATION_SCHEMA,
)
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

INSUFFICIENT_DATA_ERROR = "ข้อมูลไม่เพียงพอสำหรับการประเมิน"
INSUFFICIENT_DATA_REASONING = "ข้อมูลไม่เพียงพอสำหรับการประเมิน - ต้องมีข้อมูลโฉนดหรือรูปประกอบเพิ่มเติม"
EVALUATION_FAILED_REASONING = "ไม่สามารถประเมินมูลค่าได้ในขณะนี้ กรุณาระบุมูลค่าทรัพย์สินด้วยตนเอง"


def has_registry_data(record: Optional[RegistryParcelRecord]) -> bool:
    """True unless the record is absent, empty, or an empty ``result`` list.

    Flattened records without a ``result`` key still count as data.
    """
    if not record:
        return False
    if isinstance(record, dict) and "result" in record:
        result = record["result"]
        return not (isinstance(result, list) and len(result) == 0)
    return True


def _clamp(value, low: float, high: Optional[float] = None) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return low
    number = max(low, number)
    return min(high, number) if high is not None else number


def decode_data_uri(uri: str) -> ImageFile:
    """Decode a ``data:`` URI produced by the storage fallback."""
    header, _, payload = uri.partition(",")
    mime_type = header[len("data:"):].split(";")[0] or "application/octet-stream"
    if header.endswith(";base64"):
        data = base64.b64decode(payload)
    else:
        data = unquote_to_bytes(payload)
    return ImageFile(data=data, mime_type=mime_type, file_name="inline")


class PropertyValuationService:
    """Estimates a market value in baht.

    Never raises: a refusal or a failed model call both come back as the
    ``0``/``0`` sentinel so the form can fall back to manual value entry.
    """

    def __init__(self, llm_client: GeminiClient, http_client: Optional[httpx.AsyncClient] = None, timeout: int = 30):
        self.llm_client = llm_client
        self._http_client = http_client
        self.timeout = timeout

    async def evaluate_property(
        self,
        deed_image: ImageFile,
        registry_record: Optional[RegistryParcelRecord],
        supporting_images: Sequence[ImageFile] = (),
    ) -> ValuationResult:
        """Value a property.

        Args:
            deed_image: Title deed photo, always sent first
            registry_record: Registry payload, if the deed was resolved
            supporting_images: Site photos

        Returns:
            ValuationResult: The estimate, or the sentinel with
            ``insufficient_data`` or ``degraded`` set
        """
        if not has_registry_data(registry_record) and not supporting_images:
            LOGGER.info("Insufficient data for valuation, skipping model call")
            return ValuationResult(reasoning=INSUFFICIENT_DATA_REASONING, insufficient_data=True)

        registry_data = (
            json.dumps(registry_record, ensure_ascii=False, indent=2)
            if registry_record
            else NO_REGISTRY_DATA_PLACEHOLDER
        )
        prompt = PROPERTY_VALUATION_PROMPT.format(
            registry_data=registry_data,
            supporting_count=len(supporting_images),
        )
        contents = [prompt, self.llm_client.image_part(deed_image.data, deed_image.mime_type)]
        contents.extend(self.llm_client.image_part(image.data, image.mime_type) for image in supporting_images)

        LOGGER.info(
            "Starting property valuation",
            extra={"has_registry_data": has_registry_data(registry_record), "supporting_images": len(supporting_images)},
        )
        try:
            payload = await self.llm_client.generate_json(contents=contents, response_schema=PROPERTY_VALUATION_SCHEMA)
        except Exception as e:
            LOGGER.error("Property valuation failed", exc_info=True, extra={"error": str(e)})
            return ValuationResult(reasoning=EVALUATION_FAILED_REASONING, degraded=True)

        result = ValuationResult(
            estimated_value=_clamp(payload.get("estimatedValue"), 0),
            reasoning=str(payload.get("reasoning") or ""),
            confidence=_clamp(payload.get("confidence"), 0, 100),
        )
        LOGGER.info(
            "Property valuation finished",
            extra={"estimated_value": result.estimated_value, "confidence": result.confidence},
        )
        return result

    async def evaluate_property_from_urls(
        self,
        deed_image_url: Optional[str],
        registry_record: Optional[RegistryParcelRecord],
        supporting_image_urls: Sequence[str] = (),
    ) -> Optional[ValuationResult]:
        """Value a property from already uploaded images.

        Supporting images that cannot be downloaded are skipped.

        Returns:
            Optional[ValuationResult]: None when there is no deed image URL or
            the deed image cannot be downloaded
        """
        if not deed_image_url:
            LOGGER.info("No title deed image URL provided")
            return None
        if not has_registry_data(registry_record) and not supporting_image_urls:
            return ValuationResult(reasoning=INSUFFICIENT_DATA_REASONING, insufficient_data=True)

        if self._http_client is not None:
            return await self._evaluate_downloaded(
                self._http_client, deed_image_url, registry_record, supporting_image_urls
            )
        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            return await self._evaluate_downloaded(client, deed_image_url, registry_record, supporting_image_urls)

    async def _evaluate_downloaded(
        self,
        client: httpx.AsyncClient,
        deed_image_url: str,
        registry_record: Optional[RegistryParcelRecord],
        supporting_image_urls: Sequence[str],
    ) -> Optional[ValuationResult]:
        try:
            deed_image = await self._download(client, deed_image_url)
        except Exception as e:
            LOGGER.error("Failed to download title deed image", extra={"url": deed_image_url[:100], "error": str(e)})
            return None

        supporting: List[ImageFile] = []
        for url in supporting_image_urls:
            try:
                supporting.append(await self._download(client, url))
            except Exception as e:
                LOGGER.warning("Failed to download supporting image", extra={"url": url[:100], "error": str(e)})

        return await self.evaluate_property(deed_image, registry_record, supporting)

    async def _download(self, client: httpx.AsyncClient, url: str) -> ImageFile:
        if url.startswith("data:"):
            return decode_data_uri(url)
        response = await client.get(url)
        response.raise_for_status()
        mime_type = response.headers.get("content-type", "image/jpeg").split(";")[0]
        return ImageFile(data=response.content, mime_type=mime_type, file_name=url.rsplit("/", 1)[-1])
