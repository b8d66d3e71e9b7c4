"""Title deed resolution: photo to registry record, or to a pre-filled form.

``analyze_title_deed`` walks the stages in order (upload, field extraction,
province code, district code, registry lookup) and stops at the first one that
comes back empty. ``decide_manual_input`` then maps how far the run got onto
one of three outcomes:

* ``AUTO_RESOLVED``: registry record found, nothing to ask
* ``MANUAL_DISTRICT_ONLY``: province known, ask for the district
* ``MANUAL_FULL``: ask for everything, pre-filled with whatever was resolved

``manual_lookup`` is the second entry point, for users who type the codes in
themselves. It goes straight to the registry and lets failures through.
"""

import asyncio
import time
from dataclasses import dataclass
from typing import Optional

from app.core.exceptions import APITimeoutError
from app.models.title_deed_models import (
    DistrictMatch,
    ImageFile,
    ManualInputType,
    ProvinceMatch,
    ReferenceCode,
    RegistryParcelRecord,
    ResolutionDecision,
    ResolutionState,
    TitleDeedAnalysis,
    TitleDeedExtraction,
)
from app.services.extraction.document_extraction_service import DocumentExtractionService
from app.services.registry.landsmaps_client import LandsMapsClient
from app.services.resolution.code_resolver import CodeResolver
from app.services.storage_service import StorageService, base_file_name
from app.utils.logging import get_logger
from app.utils.thai_numerals import normalize_thai_digits

LOGGER = get_logger(__name__)

TITLE_DEED_FOLDER = "title-deeds"
REGISTRY_FAILURE_MESSAGE = (
    "ไม่สามารถค้นหาข้อมูลโฉนดจากระบบกรมที่ดินได้ กรุณาตรวจสอบข้อมูลและลองใหม่อีกครั้ง"
)
LOOKUP_TIMEOUT_MESSAGE = "การค้นหาข้อมูลใช้เวลานานเกินไป กรุณาลองใหม่อีกครั้ง"


@dataclass(frozen=True)
class ResolutionTrace:
    """How far one resolution run got.

    ``None`` for a stage means it was never reached. A stage that raised is
    recorded the same way as one that found nothing.
    """

    extraction: TitleDeedExtraction
    province: Optional[ProvinceMatch] = None
    district: Optional[DistrictMatch] = None
    registry_record: Optional[RegistryParcelRecord] = None
    registry_error: Optional[str] = None


def decide_manual_input(trace: ResolutionTrace) -> ResolutionDecision:
    """Map a resolution trace onto the manual-input decision."""
    parcel_no = normalize_thai_digits(trace.extraction.parcel_no)

    if not trace.extraction.pv_name:
        return _manual_full(ReferenceCode(parcel_no=parcel_no))

    pv_code = trace.province.pv_code if trace.province else ""
    if not pv_code:
        return _manual_full(ReferenceCode(parcel_no=parcel_no))

    am_code = trace.district.am_code if trace.district else ""
    if not am_code:
        return ResolutionDecision(
            state=ResolutionState.MANUAL_DISTRICT_ONLY,
            needs_manual_input=True,
            manual_input_type=ManualInputType.DISTRICT_ONLY,
            partial_codes=ReferenceCode(pv_code=pv_code, parcel_no=parcel_no),
        )

    codes = ReferenceCode(pv_code=pv_code, am_code=am_code, parcel_no=parcel_no)
    if trace.registry_error is not None or trace.registry_record is None:
        return _manual_full(codes, error_message=REGISTRY_FAILURE_MESSAGE)

    return ResolutionDecision(
        state=ResolutionState.AUTO_RESOLVED,
        needs_manual_input=False,
        partial_codes=codes,
        registry_record=trace.registry_record,
    )


def _manual_full(codes: ReferenceCode, error_message: Optional[str] = None) -> ResolutionDecision:
    return ResolutionDecision(
        state=ResolutionState.MANUAL_FULL,
        needs_manual_input=True,
        manual_input_type=ManualInputType.FULL,
        error_message=error_message,
        partial_codes=codes,
    )


def _retrieve_late_result(task: "asyncio.Task") -> None:
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        LOGGER.info("Registry lookup failed after timeout", extra={"error": str(error)})
    else:
        LOGGER.info("Registry lookup completed after timeout")


class TitleDeedService:
    """Runs the title deed pipeline with injected collaborators."""

    def __init__(
        self,
        storage: StorageService,
        extractor: DocumentExtractionService,
        resolver: CodeResolver,
        registry_client: LandsMapsClient,
        manual_lookup_timeout: float = 90.0,
    ):
        self.storage = storage
        self.extractor = extractor
        self.resolver = resolver
        self.registry_client = registry_client
        self.manual_lookup_timeout = manual_lookup_timeout

    async def analyze_title_deed(self, image: ImageFile) -> TitleDeedAnalysis:
        """Upload a deed photo and resolve it as far as possible.

        Never raises for third-party failures: every outcome is either a
        registry record or a manual-entry form pre-filled with what was found.
        """
        LOGGER.info("Starting title deed analysis", extra={"file_name": image.file_name})

        stored = await self.storage.store(
            image.data,
            image.mime_type,
            folder=TITLE_DEED_FOLDER,
            filename=f"title_deed_{int(time.time() * 1000)}_{base_file_name(image.file_name)}",
        )

        extraction = await self.extractor.extract_title_deed_fields(image.data, image.mime_type)
        trace = await self._resolve(extraction)
        decision = decide_manual_input(trace)

        LOGGER.info(
            "Title deed analysis finished",
            extra={
                "state": decision.state.value,
                "upload_degraded": stored.degraded,
                "extraction_degraded": extraction.degraded,
            },
        )

        analysis_result = extraction.model_dump(by_alias=True)
        analysis_result["parcelNo"] = decision.partial_codes.parcel_no
        if decision.partial_codes.pv_code:
            analysis_result["pvCode"] = decision.partial_codes.pv_code
        if decision.partial_codes.am_code:
            analysis_result["amCode"] = decision.partial_codes.am_code

        return TitleDeedAnalysis(
            image_url=stored.url,
            image_key=stored.key,
            analysis_result=analysis_result,
            title_deed_data=decision.registry_record,
            needs_manual_input=decision.needs_manual_input,
            manual_input_type=decision.manual_input_type,
            error_message=decision.error_message,
            state=decision.state,
        )

    async def _resolve(self, extraction: TitleDeedExtraction) -> ResolutionTrace:
        if not extraction.pv_name:
            return ResolutionTrace(extraction=extraction)

        try:
            province = await self.resolver.resolve_province_code(extraction.pv_name)
        except Exception as e:
            LOGGER.warning("Province resolution raised", exc_info=True, extra={"error": str(e)})
            province = ProvinceMatch(degraded=True)
        if not province.pv_code:
            return ResolutionTrace(extraction=extraction, province=province)

        parcel_no = normalize_thai_digits(extraction.parcel_no)
        try:
            district = await self.resolver.resolve_district_code(
                extraction.am_name, province.pv_code, parcel_no
            )
        except Exception as e:
            LOGGER.warning("District resolution raised", exc_info=True, extra={"error": str(e)})
            district = DistrictMatch(pv_code=province.pv_code, parcel_no=parcel_no, degraded=True)
        if not district.am_code:
            return ResolutionTrace(extraction=extraction, province=province, district=district)

        try:
            record = await self.registry_client.fetch_parcel_record(
                province.pv_code, district.am_code, parcel_no
            )
        except Exception as e:
            LOGGER.error(
                "Registry lookup failed during analysis",
                exc_info=True,
                extra={"pv_code": province.pv_code, "am_code": district.am_code, "error": str(e)},
            )
            return ResolutionTrace(
                extraction=extraction,
                province=province,
                district=district,
                registry_error=str(e) or type(e).__name__,
            )

        return ResolutionTrace(
            extraction=extraction,
            province=province,
            district=district,
            registry_record=record,
        )

    async def manual_lookup(self, pv_code: str, am_code: str, parcel_no: str) -> RegistryParcelRecord:
        """Look up user-supplied codes directly in the registry.

        The lookup is raced against ``manual_lookup_timeout``. Losing the race
        does not cancel the request; its late result is only logged.

        Raises:
            ParcelValidationError: If the codes are malformed
            APITimeoutError: If the lookup outlasts the timeout
            RegistryLookupError: If the registry lookup fails
        """
        task = asyncio.ensure_future(
            self.registry_client.fetch_parcel_record(pv_code, am_code, normalize_thai_digits(parcel_no))
        )
        try:
            return await asyncio.wait_for(asyncio.shield(task), timeout=self.manual_lookup_timeout)
        except asyncio.TimeoutError:
            LOGGER.warning(
                "Manual registry lookup timed out",
                extra={"pv_code": pv_code, "am_code": am_code, "timeout": self.manual_lookup_timeout},
            )
            task.add_done_callback(_retrieve_late_result)
            raise APITimeoutError(LOOKUP_TIMEOUT_MESSAGE)
