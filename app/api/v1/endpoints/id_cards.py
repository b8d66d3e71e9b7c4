"""ID card upload endpoint."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from app.dependencies import get_extraction_service, get_storage_service
from app.models.response.response import ErrorResponse, IdCardUploadResponse
from app.services.extraction.document_extraction_service import DocumentExtractionService
from app.services.storage_service import StorageService
from app.utils.logging import get_logger
from app.utils.uploads import read_image

LOGGER = get_logger(__name__)

router = APIRouter()

ID_CARD_FOLDER = "id-cards"


@router.post(
    "/upload",
    response_model=IdCardUploadResponse,
    responses={400: {"description": "No file uploaded", "model": ErrorResponse}},
    summary="Upload an ID card image",
    operation_id="upload_id_card_image",
)
async def upload_id_card(
    storage: Annotated[StorageService, Depends(get_storage_service)],
    extractor: Annotated[DocumentExtractionService, Depends(get_extraction_service)],
    file: Optional[UploadFile] = File(None, description="National ID card photo"),
    analyze: bool = Form(False, description="Also read the card's fields"),
) -> IdCardUploadResponse:
    """Store an ID card photo and optionally extract its fields."""
    if file is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "MissingFileError", "message": "ไม่พบไฟล์ที่อัพโหลด", "detail": "file"},
        )

    image = await read_image(file)
    stored = await storage.upload_image(image, folder=ID_CARD_FOLDER, prefix="id_card")

    extraction = None
    if analyze:
        extraction = await extractor.extract_id_card_fields(image.data, image.mime_type)

    return IdCardUploadResponse(image_url=stored.url, image_key=stored.key, extraction=extraction)
