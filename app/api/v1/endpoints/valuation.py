"""Property valuation endpoint."""

import json
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Request, status

from app.dependencies import get_valuation_service
from app.models.response.response import ErrorResponse, ValuationResponse
from app.services.valuation_service import INSUFFICIENT_DATA_ERROR, PropertyValuationService
from app.utils.logging import get_logger
from app.utils.uploads import read_indexed_images, read_optional_image

LOGGER = get_logger(__name__)

router = APIRouter()

NO_TITLE_DEED_MESSAGE = "ไม่พบรูปโฉนดที่ดิน"


@router.post(
    "/valuation",
    response_model=ValuationResponse,
    responses={400: {"description": "Title deed image missing", "model": ErrorResponse}},
    summary="Estimate a property's value",
    description=(
        "Multipart form with titleDeedImage (required), titleDeedData (registry "
        "record as a JSON string, optional) and supportingImage_0, supportingImage_1, ..."
    ),
    operation_id="evaluate_property_value",
)
async def evaluate_property(
    request: Request,
    valuation_service: Annotated[PropertyValuationService, Depends(get_valuation_service)],
) -> ValuationResponse:
    """Value a property from its deed photo, registry data and site photos.

    A malformed ``titleDeedData`` string is ignored rather than rejected.
    """
    form = await request.form()

    deed_image = await read_optional_image(form.get("titleDeedImage"))
    if deed_image is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "MissingFileError", "message": NO_TITLE_DEED_MESSAGE, "detail": "titleDeedImage"},
        )

    registry_record = None
    raw_record = form.get("titleDeedData")
    if isinstance(raw_record, str) and raw_record.strip():
        try:
            registry_record = json.loads(raw_record)
        except ValueError as e:
            LOGGER.warning("Ignoring malformed titleDeedData", extra={"error": str(e)})
        if registry_record is not None and not isinstance(registry_record, dict):
            registry_record = None

    supporting_images = await read_indexed_images(form, "supportingImage_")

    LOGGER.info(
        "Received valuation request",
        extra={"has_registry_data": registry_record is not None, "supporting_images": len(supporting_images)},
    )

    valuation = await valuation_service.evaluate_property(deed_image, registry_record, supporting_images)
    if valuation.insufficient_data:
        return ValuationResponse(success=False, valuation=valuation, error=INSUFFICIENT_DATA_ERROR)
    return ValuationResponse(success=True, valuation=valuation)
