"""Thai numeral normalization."""

from typing import Optional

THAI_DIGITS = "๐๑๒๓๔๕๖๗๘๙"
_TO_ARABIC = str.maketrans(THAI_DIGITS, "0123456789")


def normalize_thai_digits(value: Optional[str]) -> str:
    """Replace Thai numeral glyphs with Arabic digits.

    Registry lookups and reference codes only understand Arabic digits, so
    every string coming out of an extraction goes through here.

    >>> normalize_thai_digits("โฉนดเลขที่ ๑๒๓๔")
    'โฉนดเลขที่ 1234'
    """
    if not value:
        return ""
    return str(value).translate(_TO_ARABIC).strip()


def contains_thai_digits(value: Optional[str]) -> bool:
    return bool(value) and any(ch in THAI_DIGITS for ch in value)
