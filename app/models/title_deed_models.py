"""Models flowing through the title-deed resolution and valuation pipeline.

Everything here is request-scoped: built during one call and thrown away.
Field names are snake_case in Python and camelCase on the wire (the manual
entry forms consume ``pvName``/``amCode``/``parcelNo`` directly).
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Authoritative parcel payload exactly as the registry returned it. It is only
# ever forwarded or discarded, never edited.
RegistryParcelRecord = Dict[str, Any]


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class StorageReference(_CamelModel):
    """Where an uploaded image ended up.

    ``url`` is always dereferenceable: a public bucket URL, or a base64 data
    URI when the upload failed (``degraded`` is then True and ``key`` starts
    with ``temp_``).
    """

    url: str
    key: str
    degraded: bool = False


class TitleDeedExtraction(_CamelModel):
    """Best-effort header fields read off a title deed photo."""

    pv_name: str = Field(default="", alias="pvName")
    am_name: str = Field(default="", alias="amName")
    parcel_no: str = Field(default="", alias="parcelNo")
    degraded: bool = Field(default=False, exclude=True)

    @property
    def is_empty(self) -> bool:
        return not (self.pv_name or self.am_name or self.parcel_no)


class IdCardExtraction(_CamelModel):
    """Best-effort fields read off a national ID card photo."""

    full_name: str = Field(default="", alias="fullName")
    id_card_number: str = Field(default="", alias="idCardNumber")
    date_of_birth: str = Field(default="", alias="dateOfBirth")
    address: str = ""
    degraded: bool = Field(default=False, exclude=True)


class ReferenceCode(_CamelModel):
    """Registry codes resolved so far.

    ``am_code`` is only meaningful together with ``pv_code``: district codes
    repeat across provinces.
    """

    pv_code: str = Field(default="", alias="pvCode")
    am_code: str = Field(default="", alias="amCode")
    parcel_no: str = Field(default="", alias="parcelNo")


class ProvinceMatch(_CamelModel):
    pv_code: str = Field(default="", alias="pvCode")
    degraded: bool = False


class DistrictMatch(_CamelModel):
    pv_code: str = Field(default="", alias="pvCode")
    am_code: str = Field(default="", alias="amCode")
    parcel_no: str = Field(default="", alias="parcelNo")
    degraded: bool = False


class ManualInputType(str, Enum):
    """What the manual-entry form has to ask for."""
    NONE = ""
    FULL = "full"
    DISTRICT_ONLY = "amphur_only"


class ResolutionState(str, Enum):
    AUTO_RESOLVED = "AUTO_RESOLVED"
    MANUAL_FULL = "MANUAL_FULL"
    MANUAL_DISTRICT_ONLY = "MANUAL_DISTRICT_ONLY"


class ResolutionDecision(_CamelModel):
    """Outcome of one title-deed resolution run."""

    state: ResolutionState
    needs_manual_input: bool = Field(alias="needsManualInput")
    manual_input_type: ManualInputType = Field(default=ManualInputType.NONE, alias="manualInputType")
    error_message: Optional[str] = Field(default=None, alias="errorMessage")
    partial_codes: ReferenceCode = Field(default_factory=ReferenceCode, alias="partialCodes")
    registry_record: Optional[RegistryParcelRecord] = Field(default=None, alias="registryRecord")


class ValuationResult(_CamelModel):
    """AI property valuation.

    ``estimated_value == 0 and confidence == 0`` is the "could not value"
    sentinel.
    """

    estimated_value: float = Field(default=0, ge=0, alias="estimatedValue")
    reasoning: str = ""
    confidence: float = Field(default=0, ge=0, le=100)
    degraded: bool = Field(default=False, exclude=True)
    # Refused up front: no registry data and no supporting images
    insufficient_data: bool = Field(default=False, exclude=True)

    @property
    def is_sentinel(self) -> bool:
        return self.estimated_value == 0 and self.confidence == 0


@dataclass(frozen=True)
class ParcelQuery:
    """Validated registry query."""

    province_id: int
    district_id: str
    parcel_id: int


@dataclass(frozen=True)
class RegistrySession:
    """Proxy session negotiated with the registry portal.

    Produced by the cookie bootstrap and threaded through the token exchange
    and the data query. Each lookup owns its session.
    """

    session_id: int
    cookies: Dict[str, str] = field(default_factory=dict)
    access_token: Optional[str] = None

    @property
    def cookie_header(self) -> str:
        return "; ".join(f"{name}={value}" for name, value in self.cookies.items())


@dataclass(frozen=True)
class ImageFile:
    """An uploaded image read fully into memory."""

    data: bytes
    mime_type: str
    file_name: str


class UploadedImage(_CamelModel):
    image_url: str = Field(alias="imageUrl")
    image_key: str = Field(alias="imageKey")
    file_name: str = Field(default="", alias="fileName")


class BatchUploadResult(_CamelModel):
    """Per-batch outcome; a partially uploaded batch still succeeds."""

    success: bool = True
    uploaded_count: int = Field(alias="uploadedCount")
    total_count: int = Field(alias="totalCount")
    images: List[UploadedImage] = Field(default_factory=list)


class TitleDeedAnalysis(_CamelModel):
    """What the deed analysis hands back to the manual-entry form."""

    image_url: str = Field(alias="imageUrl")
    image_key: str = Field(alias="imageKey")
    analysis_result: Dict[str, Any] = Field(default_factory=dict, alias="analysisResult")
    title_deed_data: Optional[RegistryParcelRecord] = Field(default=None, alias="titleDeedData")
    needs_manual_input: bool = Field(alias="needsManualInput")
    manual_input_type: ManualInputType = Field(default=ManualInputType.NONE, alias="manualInputType")
    error_message: Optional[str] = Field(default=None, alias="errorMessage")
    state: ResolutionState
