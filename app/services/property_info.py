"""Summarize a resolved deed into the fields a loan application shows."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.title_deed_models import RegistryParcelRecord

DEFAULT_PROPERTY_TYPE = "ที่ดิน"


class PropertyInfo(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    property_location: str = Field(default="", alias="propertyLocation")
    property_area: str = Field(default="", alias="propertyArea")
    owner_name: str = Field(default="", alias="ownerName")
    property_type: str = Field(default="", alias="propertyType")
    land_number: str = Field(default="", alias="landNumber")


def _joined(*parts: Any) -> str:
    return " ".join(str(part) for part in parts if part).strip()


def extract_property_info(
    registry_record: Optional[RegistryParcelRecord],
    manual_data: Optional[Dict[str, Any]] = None,
    analysis: Optional[Dict[str, Any]] = None,
) -> PropertyInfo:
    """Merge registry, manually entered and AI-extracted deed data.

    Precedence:
        * location, area, owner and land type come from the registry record
        * a manually entered location or parcel number overrides the registry
        * AI-extracted values only fill fields that are still empty

    The registry's own parcel number is never used as the land number; the
    number the user typed (or confirmed) is.
    """
    info = PropertyInfo()

    rows = (registry_record or {}).get("result") if isinstance(registry_record, dict) else None
    if isinstance(rows, list) and rows and isinstance(rows[0], dict):
        deed = rows[0]
        info.property_location = _joined(deed.get("tumbolname"), deed.get("amphurname"), deed.get("provname"))
        info.property_area = (
            f"{deed.get('rai') or 0} ไร่ {deed.get('ngan') or 0} งาน {deed.get('wa') or 0} ตารางวา"
        )
        info.owner_name = deed.get("owner_name") or ""
        info.property_type = deed.get("land_type") or DEFAULT_PROPERTY_TYPE

    if manual_data:
        info.property_location = (
            _joined(manual_data.get("amName"), manual_data.get("pvName")) or info.property_location
        )
        info.land_number = str(manual_data.get("parcelNo") or info.land_number)

    if analysis:
        info.property_location = info.property_location or _joined(analysis.get("amName"), analysis.get("pvName"))
        info.land_number = info.land_number or str(analysis.get("parcelNo") or "")

    return info
