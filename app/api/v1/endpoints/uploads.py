"""Supporting image and upload management endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.core.exceptions import AppError
from app.dependencies import get_storage_service
from app.models.response.response import DeleteResponse, ErrorResponse
from app.models.title_deed_models import BatchUploadResult
from app.services.storage_service import StorageService
from app.utils.logging import get_logger
from app.utils.uploads import read_indexed_images

LOGGER = get_logger(__name__)

router = APIRouter()

SUPPORTING_IMAGES_FOLDER = "supporting-images"
NO_FILES_MESSAGE = "ไม่พบไฟล์"


@router.post(
    "/supporting-images/upload",
    response_model=BatchUploadResult,
    responses={400: {"description": "No files uploaded", "model": ErrorResponse}},
    summary="Upload supporting images",
    description="Uploads form fields file_0, file_1, ... concurrently. Files that fail are left out.",
    operation_id="upload_supporting_images",
)
async def upload_supporting_images(
    request: Request,
    storage: Annotated[StorageService, Depends(get_storage_service)],
) -> BatchUploadResult:
    """Upload an indexed batch of supporting images."""
    form = await request.form()
    images = await read_indexed_images(form, "file_")
    if not images:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "MissingFileError", "message": NO_FILES_MESSAGE, "detail": "file_0"},
        )
    return await storage.upload_images(images, folder=SUPPORTING_IMAGES_FOLDER, prefix="supporting")


@router.delete(
    "/uploads/{key:path}",
    response_model=DeleteResponse,
    responses={502: {"description": "Storage rejected the delete", "model": ErrorResponse}},
    summary="Delete an uploaded image",
    operation_id="delete_uploaded_image",
)
async def delete_upload(
    key: str,
    storage: Annotated[StorageService, Depends(get_storage_service)],
) -> DeleteResponse:
    """Delete an uploaded image, e.g. when a deed photo is replaced."""
    try:
        await storage.delete(key)
    except AppError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"error": type(e).__name__, "message": "ไม่สามารถลบไฟล์ได้", "detail": str(e)},
        )
    return DeleteResponse(key=key)
