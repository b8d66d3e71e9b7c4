from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.title_deed_models import IdCardExtraction, RegistryParcelRecord, ValuationResult


class HealthCheckResponse(BaseModel):
    """Health check response model.

    Attributes:
        status: Service status
        version: Application version
        service: Service name
    """

    status: str = Field(
        default="healthy",
        description="Service health status",
        examples=["healthy", "degraded"],
    )
    version: str = Field(
        ...,
        description="Application version",
        examples=["0.1.0"],
    )
    service: str = Field(
        ...,
        description="Service name",
        examples=["Infinitex Lending API"],
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "status": "healthy",
                    "version": "0.1.0",
                    "service": "Infinitex Lending API",
                }
            ]
        }
    }


class ErrorResponse(BaseModel):
    """Error response model.

    Attributes:
        error: Error type/category
        message: Human-readable (Thai) error message
        detail: Optional detailed error information
    """

    error: str = Field(
        ...,
        description="Error type or category",
        examples=["RegistryLookupError", "ParcelValidationError"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["ไม่สามารถค้นหาข้อมูลโฉนดจากระบบกรมที่ดินได้ กรุณาตรวจสอบข้อมูลและลองใหม่อีกครั้ง"],
    )
    detail: Optional[str] = Field(
        default=None,
        description="Detailed error information",
    )


class _CamelResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class ImageUploadResponse(_CamelResponse):
    """Single image upload result."""

    success: bool = True
    image_url: str = Field(
        ...,
        alias="imageUrl",
        description="Public URL, or a base64 data URI when storage was unavailable",
    )
    image_key: str = Field(
        ...,
        alias="imageKey",
        description="Storage key; keys starting with temp_ were not persisted",
        examples=["title-deeds/title_deed_1718000000000_deed.jpg"],
    )


class IdCardUploadResponse(ImageUploadResponse):
    extraction: Optional[IdCardExtraction] = Field(
        default=None,
        description="Fields read off the card, present when analysis was requested",
    )


class ManualLookupResponse(_CamelResponse):
    success: bool = True
    title_deed_data: RegistryParcelRecord = Field(
        ...,
        alias="titleDeedData",
        description="Registry record, unmodified",
    )


class ValuationResponse(_CamelResponse):
    success: bool = Field(..., description="False when the data was insufficient for a valuation")
    valuation: ValuationResult
    error: Optional[str] = None


class DeleteResponse(_CamelResponse):
    success: bool = True
    key: str


class ProvinceResponse(_CamelResponse):
    code: str = Field(..., examples=["20"])
    name_th: str = Field(..., alias="nameTh", examples=["ชลบุรี"])
    name_en: str = Field(default="", alias="nameEn", examples=["Chon Buri"])


class DistrictResponse(_CamelResponse):
    province_code: str = Field(..., alias="provinceCode", examples=["20"])
    code: str = Field(..., examples=["07"])
    name_th: str = Field(..., alias="nameTh", examples=["ศรีราชา"])
    name_en: str = Field(default="", alias="nameEn", examples=["Si Racha"])


class ProvinceListResponse(BaseModel):
    provinces: List[ProvinceResponse]


class DistrictListResponse(BaseModel):
    districts: List[DistrictResponse]


class NotificationResponse(_CamelResponse):
    success: bool
    error: Optional[str] = None
