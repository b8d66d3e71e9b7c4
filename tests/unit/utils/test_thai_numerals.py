import pytest

from app.utils.thai_numerals import contains_thai_digits, normalize_thai_digits


@pytest.mark.parametrize(
    "value, expected",
    [
        ("๐๑๒๓๔๕๖๗๘๙", "0123456789"),
        ("โฉนดเลขที่ ๑๒๓๔", "โฉนดเลขที่ 1234"),
        (" 56789 ", "56789"),
        ("๑2๓", "123"),
        (None, ""),
        ("", ""),
    ],
)
def test_normalize_thai_digits(value, expected):
    assert normalize_thai_digits(value) == expected


def test_contains_thai_digits():
    assert contains_thai_digits("เลข ๕")
    assert not contains_thai_digits("เลข 5")
    assert not contains_thai_digits(None)
