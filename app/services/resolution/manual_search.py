"""Deterministic name-to-code matching.

Used when the AI matcher is unavailable. Matching runs in two passes over the
table, in table order, and returns the first hit:

1. exact Thai name, or English name ignoring case;
2. containment in either direction, Thai or English (English ignoring case).
"""

from typing import Iterable, Optional, Sequence, TypeVar, Union

from app.services.resolution.reference_data import District, Province, districts_in_province
from app.utils.logging import get_logger

LOGGER = get_logger(__name__)

Row = TypeVar("Row", bound=Union[Province, District])


def _exact(row: Union[Province, District], name: str) -> bool:
    return row.name_th == name or (bool(row.name_en) and row.name_en.lower() == name.lower())


def _contains(row: Union[Province, District], name: str) -> bool:
    lowered = name.lower()
    english = row.name_en.lower()
    return (
        name in row.name_th
        or row.name_th in name
        or (bool(english) and (lowered in english or english in lowered))
    )


def _first_match(rows: Sequence[Row], name: str) -> Optional[Row]:
    for predicate in (_exact, _contains):
        found = next((row for row in rows if predicate(row, name)), None)
        if found is not None:
            return found
    return None


def find_province_code_manual(province_name: str, provinces: Iterable[Province]) -> str:
    """Match a province name against the province table.

    Returns:
        str: The province code, or "" when nothing matches
    """
    name = (province_name or "").strip()
    if not name:
        return ""

    found = _first_match(list(provinces), name)
    if found is None:
        LOGGER.info("No province match found", extra={"province_name": name})
        return ""
    LOGGER.info("Province matched manually", extra={"province_name": name, "pv_code": found.code})
    return found.code


def find_district_code_manual(
    district_name: str,
    province_code: str,
    districts: Iterable[District],
) -> str:
    """Match a district name within one province.

    The table is narrowed to the province first and the ``"00"`` sentinel row
    is dropped, so codes from other provinces can never leak through.

    Returns:
        str: The district code, or "" when nothing matches or the province
        code is empty
    """
    name = (district_name or "").strip()
    if not name or not province_code:
        return ""

    candidates = districts_in_province(list(districts), province_code)
    found = _first_match(candidates, name)
    if found is None:
        LOGGER.info(
            "No district match found",
            extra={"district_name": name, "pv_code": province_code},
        )
        return ""
    LOGGER.info(
        "District matched manually",
        extra={"district_name": name, "pv_code": province_code, "am_code": found.code},
    )
    return found.code
