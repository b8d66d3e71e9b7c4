"""Field extraction from title deed and ID card photos.

Both extractors share one contract: they never raise. Any failure talking to
the model is logged and turned into an all-empty result flagged ``degraded``,
which downstream logic treats exactly like a photo with nothing readable on it.
"""

from typing import Any, Dict

from app.core.models.gemini_client import GeminiClient
from app.models.title_deed_models import IdCardExtraction, TitleDeedExtraction
from app.prompts.system_prompts import (
    ID_CARD_EXTRACTION_PROMPT,
    ID_CARD_SCHEMA,
    TITLE_DEED_EXTRACTION_PROMPT,
    TITLE_DEED_SCHEMA,
)
from app.utils.logging import get_logger
from app.utils.thai_numerals import normalize_thai_digits

LOGGER = get_logger(__name__)


def _field(payload: Dict[str, Any], key: str) -> str:
    value = payload.get(key)
    if value is None:
        return ""
    return normalize_thai_digits(str(value))


class DocumentExtractionService:
    """Reads structured fields off document images with a vision model."""

    def __init__(self, llm_client: GeminiClient):
        self.llm_client = llm_client

    async def extract_title_deed_fields(self, image: bytes, mime_type: str) -> TitleDeedExtraction:
        """Extract province name, district name and parcel number.

        Args:
            image: Raw image bytes
            mime_type: Image MIME type

        Returns:
            TitleDeedExtraction: Extracted fields, Arabic digits only. All
            fields are empty (and ``degraded`` is set) if the call failed.
        """
        try:
            payload = await self.llm_client.generate_json(
                contents=[TITLE_DEED_EXTRACTION_PROMPT, self.llm_client.image_part(image, mime_type)],
                response_schema=TITLE_DEED_SCHEMA,
            )
        except Exception as e:
            LOGGER.warning(
                "Title deed extraction failed, falling back to manual input",
                exc_info=True,
                extra={"error": str(e), "mime_type": mime_type},
            )
            return TitleDeedExtraction(degraded=True)

        result = TitleDeedExtraction(
            pv_name=_field(payload, "pvName"),
            am_name=_field(payload, "amName"),
            parcel_no=_field(payload, "parcelNo"),
        )
        LOGGER.info(
            "Title deed fields extracted",
            extra={"pv_name": result.pv_name, "am_name": result.am_name, "parcel_no": result.parcel_no},
        )
        return result

    async def extract_id_card_fields(self, image: bytes, mime_type: str) -> IdCardExtraction:
        """Extract name, ID number, date of birth and address from an ID card."""
        try:
            payload = await self.llm_client.generate_json(
                contents=[ID_CARD_EXTRACTION_PROMPT, self.llm_client.image_part(image, mime_type)],
                response_schema=ID_CARD_SCHEMA,
            )
        except Exception as e:
            LOGGER.warning(
                "ID card extraction failed",
                exc_info=True,
                extra={"error": str(e), "mime_type": mime_type},
            )
            return IdCardExtraction(degraded=True)

        return IdCardExtraction(
            full_name=_field(payload, "fullName"),
            id_card_number=_field(payload, "idCardNumber").replace("-", "").replace(" ", ""),
            date_of_birth=_field(payload, "dateOfBirth"),
            address=_field(payload, "address"),
        )
