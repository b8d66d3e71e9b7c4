"""Pydantic request models for title deed endpoints."""

from typing import List

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.utils.thai_numerals import normalize_thai_digits


class ManualLookupRequest(BaseModel):
    """Codes typed into the manual-entry form.

    Attributes:
        pv_code: Province code
        am_code: District code
        parcel_no: Parcel (deed) number
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "pvCode": "20",
                    "amCode": "07",
                    "parcelNo": "56789",
                }
            ]
        },
    )

    pv_code: str = Field(default="", alias="pvCode", description="Province code", examples=["20"])
    am_code: str = Field(default="", alias="amCode", description="District code", examples=["07"])
    parcel_no: str = Field(default="", alias="parcelNo", description="Parcel number", examples=["56789"])

    @field_validator("pv_code", "am_code", "parcel_no", mode="before")
    @classmethod
    def normalize_code(cls, v) -> str:
        """Strip whitespace and convert Thai digits.

        Args:
            v: Raw value from the form

        Returns:
            str: Normalized value, empty when missing
        """
        if v is None:
            return ""
        return normalize_thai_digits(str(v))

    def missing_fields(self) -> List[str]:
        """Wire names of the fields left empty."""
        return [
            alias
            for alias, value in (("pvCode", self.pv_code), ("amCode", self.am_code), ("parcelNo", self.parcel_no))
            if not value
        ]
