"""Title deed upload, analysis and manual lookup endpoints."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from app.core.exceptions import APITimeoutError, AppError, ParcelValidationError
from app.dependencies import get_storage_service, get_title_deed_service
from app.models.request.title_deed import ManualLookupRequest
from app.models.response.response import ErrorResponse, ImageUploadResponse, ManualLookupResponse
from app.models.title_deed_models import TitleDeedAnalysis
from app.services.registry.landsmaps_client import INVALID_DATA_MESSAGE
from app.services.storage_service import StorageService
from app.services.title_deed_service import (
    LOOKUP_TIMEOUT_MESSAGE,
    REGISTRY_FAILURE_MESSAGE,
    TITLE_DEED_FOLDER,
    TitleDeedService,
)
from app.utils.logging import get_logger
from app.utils.uploads import read_image

LOGGER = get_logger(__name__)

router = APIRouter()

NO_FILE_MESSAGE = "ไม่พบไฟล์ที่อัพโหลด"
MISSING_FIELDS_MESSAGE = "กรุณากรอกข้อมูลให้ครบถ้วน"


def _require_file(file: Optional[UploadFile]) -> UploadFile:
    if file is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "MissingFileError", "message": NO_FILE_MESSAGE, "detail": "file"},
        )
    return file


@router.post(
    "/upload",
    response_model=ImageUploadResponse,
    responses={400: {"description": "No file uploaded", "model": ErrorResponse}},
    summary="Upload a title deed image",
    operation_id="upload_title_deed_image",
)
async def upload_title_deed(
    storage: Annotated[StorageService, Depends(get_storage_service)],
    file: Optional[UploadFile] = File(None, description="Title deed photo"),
) -> ImageUploadResponse:
    """Store a title deed photo without analyzing it."""
    image = await read_image(_require_file(file))
    stored = await storage.upload_image(image, folder=TITLE_DEED_FOLDER, prefix="title_deed")
    return ImageUploadResponse(image_url=stored.url, image_key=stored.key)


@router.post(
    "/analyze",
    response_model=TitleDeedAnalysis,
    responses={
        200: {
            "description": "Analysis finished; check needsManualInput for the next step",
            "model": TitleDeedAnalysis,
        },
        400: {"description": "No file uploaded", "model": ErrorResponse},
    },
    summary="Analyze a title deed image",
    description=(
        "Uploads the photo, reads province, district and parcel number off it, "
        "resolves reference codes and looks the parcel up in the land registry. "
        "Anything that cannot be resolved is returned pre-filled for manual entry."
    ),
    operation_id="analyze_title_deed_image",
)
async def analyze_title_deed(
    title_deed_service: Annotated[TitleDeedService, Depends(get_title_deed_service)],
    file: Optional[UploadFile] = File(None, description="Title deed photo"),
) -> TitleDeedAnalysis:
    """Run the full deed resolution pipeline for one photo.

    Returns:
        TitleDeedAnalysis: Upload reference, extracted fields and either the
        registry record or the manual-input instructions
    """
    image = await read_image(_require_file(file))
    LOGGER.info("Received title deed analysis request", extra={"file_name": image.file_name})
    return await title_deed_service.analyze_title_deed(image)


@router.post(
    "/manual-lookup",
    response_model=ManualLookupResponse,
    responses={
        400: {"description": "Missing or invalid codes", "model": ErrorResponse},
        502: {"description": "Registry lookup failed", "model": ErrorResponse},
        504: {"description": "Registry lookup took too long", "model": ErrorResponse},
    },
    summary="Look up a parcel by codes",
    operation_id="manual_title_deed_lookup",
)
async def manual_lookup(
    request: ManualLookupRequest,
    title_deed_service: Annotated[TitleDeedService, Depends(get_title_deed_service)],
) -> ManualLookupResponse:
    """Look up user-entered province, district and parcel codes.

    Raises:
        HTTPException: 400 for missing or invalid codes, 504 when the lookup
            outlasts the timeout, 502 when the registry lookup fails
    """
    missing = request.missing_fields()
    if missing:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "ValidationError", "message": MISSING_FIELDS_MESSAGE, "detail": ", ".join(missing)},
        )

    LOGGER.info(
        "Received manual lookup request",
        extra={"pv_code": request.pv_code, "am_code": request.am_code, "parcel_no": request.parcel_no},
    )

    try:
        record = await title_deed_service.manual_lookup(request.pv_code, request.am_code, request.parcel_no)

    except ParcelValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "ParcelValidationError", "message": INVALID_DATA_MESSAGE, "detail": f"{e.field}: {e.message}"},
        )

    except APITimeoutError as e:
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail={"error": "LookupTimeoutError", "message": LOOKUP_TIMEOUT_MESSAGE, "detail": str(e)},
        )

    except AppError as e:
        LOGGER.error("Manual lookup failed", extra={"error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"error": type(e).__name__, "message": REGISTRY_FAILURE_MESSAGE, "detail": str(e)},
        )

    return ManualLookupResponse(title_deed_data=record)
