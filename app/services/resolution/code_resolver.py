"""Province and district name-to-code resolution.

The model does the fuzzy matching. The deterministic matcher in
``manual_search`` only takes over when the model call itself raises; a clean
empty answer from the model is a legitimate "not found" and is kept as-is.
"""

import json
from typing import List

from app.core.models.gemini_client import GeminiClient
from app.models.title_deed_models import DistrictMatch, ProvinceMatch
from app.prompts.system_prompts import (
    DISTRICT_MATCH_PROMPT,
    DISTRICT_MATCH_SCHEMA,
    PROVINCE_MATCH_PROMPT,
    PROVINCE_MATCH_SCHEMA,
)
from app.services.resolution.manual_search import find_district_code_manual, find_province_code_manual
from app.services.resolution.reference_data import District, Province, ReferenceData
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)


def _province_table(provinces: List[Province]) -> str:
    return json.dumps([p.model_dump(by_alias=True) for p in provinces], ensure_ascii=False)


def _district_table(districts: List[District]) -> str:
    return json.dumps([d.model_dump(by_alias=True) for d in districts], ensure_ascii=False)


class CodeResolver:
    """Resolves reference codes against the bundled province/district tables."""

    def __init__(self, llm_client: GeminiClient, reference_data: ReferenceData):
        self.llm_client = llm_client
        self.reference_data = reference_data

    async def resolve_province_code(self, province_name: str) -> ProvinceMatch:
        """Find the province code for a (possibly abbreviated) province name.

        Args:
            province_name: Province name as read off the deed

        Returns:
            ProvinceMatch: ``pv_code`` is "" when no province matches.
            ``degraded`` is set when the manual matcher had to stand in.
        """
        name = (province_name or "").strip()
        if not name:
            return ProvinceMatch()

        provinces = self.reference_data.provinces
        try:
            payload = await self.llm_client.generate_json(
                contents=PROVINCE_MATCH_PROMPT.format(
                    province_name=name,
                    province_table=_province_table(provinces),
                ),
                response_schema=PROVINCE_MATCH_SCHEMA,
            )
        except Exception as e:
            LOGGER.warning(
                "AI province matching failed, using manual matcher",
                exc_info=True,
                extra={"province_name": name, "error": str(e)},
            )
            return ProvinceMatch(pv_code=find_province_code_manual(name, provinces), degraded=True)

        code = str(payload.get("pvCode") or "").strip()
        # Codes outside the table are treated as no match
        if code and self.reference_data.province_by_code(code) is None:
            LOGGER.warning("AI returned unknown province code", extra={"province_name": name, "pv_code": code})
            code = ""

        LOGGER.info("Province code resolved", extra={"province_name": name, "pv_code": code})
        return ProvinceMatch(pv_code=code)

    async def resolve_district_code(
        self,
        district_name: str,
        province_code: str,
        parcel_no: str = "",
    ) -> DistrictMatch:
        """Find the district code within an already-resolved province.

        Never looks anything up when ``province_code`` is empty.

        Returns:
            DistrictMatch: echoes ``province_code`` and ``parcel_no``;
            ``am_code`` is "" when no district matches.
        """
        name = (district_name or "").strip()
        if not province_code or not name:
            return DistrictMatch(pv_code=province_code or "", parcel_no=parcel_no)

        districts = self.reference_data.districts_in(province_code)
        try:
            payload = await self.llm_client.generate_json(
                contents=DISTRICT_MATCH_PROMPT.format(
                    district_name=name,
                    province_code=province_code,
                    district_table=_district_table(districts),
                ),
                response_schema=DISTRICT_MATCH_SCHEMA,
            )
        except Exception as e:
            LOGGER.warning(
                "AI district matching failed, using manual matcher",
                exc_info=True,
                extra={"district_name": name, "pv_code": province_code, "error": str(e)},
            )
            return DistrictMatch(
                pv_code=province_code,
                am_code=find_district_code_manual(name, province_code, districts),
                parcel_no=parcel_no,
                degraded=True,
            )

        code = str(payload.get("amCode") or "").strip()
        if code and not any(d.code == code for d in districts):
            LOGGER.warning(
                "AI returned unknown district code",
                extra={"district_name": name, "pv_code": province_code, "am_code": code},
            )
            code = ""

        LOGGER.info(
            "District code resolved",
            extra={"district_name": name, "pv_code": province_code, "am_code": code},
        )
        return DistrictMatch(pv_code=province_code, am_code=code, parcel_no=parcel_no)
