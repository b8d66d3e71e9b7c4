"""Province and district reference tables.

Loaded once from the bundled JSON files and never mutated. Codes stay strings
throughout because some carry meaningful leading zeros.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

# Catch-all row present in every province's district list
SENTINEL_DISTRICT_CODE = "00"


class Province(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    code: str = Field(alias="pvcode")
    name_th: str = Field(alias="pvnamethai")
    name_en: str = Field(default="", alias="pvnameeng")


class District(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    province_code: str = Field(alias="pvcode")
    code: str = Field(alias="amcode")
    name_th: str = Field(alias="amnamethai")
    name_en: str = Field(default="", alias="amnameeng")


def districts_in_province(districts: List[District], province_code: str) -> List[District]:
    """Districts of one province, without the ``"00"`` sentinel row."""
    return [
        district
        for district in districts
        if district.province_code == province_code and district.code != SENTINEL_DISTRICT_CODE
    ]


class ReferenceData:
    """Immutable view over the province and district tables."""

    def __init__(self, provinces: List[Province], districts: List[District]):
        self._provinces: Tuple[Province, ...] = tuple(provinces)
        self._districts: Tuple[District, ...] = tuple(districts)

    @classmethod
    def load(cls, province_path: Path, district_path: Path) -> "ReferenceData":
        """Load both tables from disk.

        Raises:
            FileNotFoundError: If either file is missing
            pydantic.ValidationError: If a row is malformed
        """
        provinces = [Province.model_validate(row) for row in _read_rows(province_path)]
        districts = [District.model_validate(row) for row in _read_rows(district_path)]
        LOGGER.info(
            "Loaded reference data",
            extra={"provinces": len(provinces), "districts": len(districts)},
        )
        return cls(provinces, districts)

    @property
    def provinces(self) -> List[Province]:
        return list(self._provinces)

    @property
    def districts(self) -> List[District]:
        return list(self._districts)

    def districts_in(self, province_code: str) -> List[District]:
        return districts_in_province(list(self._districts), province_code)

    def province_by_code(self, code: str) -> Optional[Province]:
        return next((p for p in self._provinces if p.code == code), None)

    def district_by_code(self, province_code: str, code: str) -> Optional[District]:
        return next(
            (d for d in self._districts if d.province_code == province_code and d.code == code),
            None,
        )


def _read_rows(path: Path) -> List[Dict[str, Any]]:
    with open(path, encoding="utf-8") as fh:
        rows = json.load(fh)
    if not isinstance(rows, list):
        raise ValueError(f"Reference file {path} must contain a JSON array")
    return rows


@lru_cache(maxsize=4)
def load_reference_data(province_path: str, district_path: str) -> ReferenceData:
    """Process-wide cached loader keyed by file paths."""
    return ReferenceData.load(Path(province_path), Path(district_path))
