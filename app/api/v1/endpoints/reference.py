"""Province and district pickers for the manual-entry form."""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status

from app.dependencies import get_reference_data
from app.models.response.response import (
    DistrictListResponse,
    DistrictResponse,
    ErrorResponse,
    ProvinceListResponse,
    ProvinceResponse,
)
from app.services.resolution.reference_data import ReferenceData

router = APIRouter()


@router.get(
    "/provinces",
    response_model=ProvinceListResponse,
    summary="List provinces",
    operation_id="list_provinces",
)
async def list_provinces(
    reference_data: Annotated[ReferenceData, Depends(get_reference_data)],
) -> ProvinceListResponse:
    return ProvinceListResponse(
        provinces=[
            ProvinceResponse(code=p.code, name_th=p.name_th, name_en=p.name_en)
            for p in reference_data.provinces
        ]
    )


@router.get(
    "/provinces/{code}/districts",
    response_model=DistrictListResponse,
    responses={404: {"description": "Unknown province code", "model": ErrorResponse}},
    summary="List districts of a province",
    operation_id="list_province_districts",
)
async def list_districts(
    code: str,
    reference_data: Annotated[ReferenceData, Depends(get_reference_data)],
) -> DistrictListResponse:
    """List a province's districts, without the unspecified-district row."""
    if reference_data.province_by_code(code) is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"error": "NotFound", "message": "ไม่พบจังหวัดที่ระบุ", "detail": code},
        )
    return DistrictListResponse(
        districts=[
            DistrictResponse(province_code=d.province_code, code=d.code, name_th=d.name_th, name_en=d.name_en)
            for d in reference_data.districts_in(code)
        ]
    )
