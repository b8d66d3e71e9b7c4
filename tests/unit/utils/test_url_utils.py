import pytest

from app.utils.url_utils import encode_image_url


@pytest.mark.parametrize(
    "url, expected",
    [
        ("https://cdn.test/a b.jpg", "https://cdn.test/a%20b.jpg"),
        ("https://cdn.test/a%20b.jpg", "https://cdn.test/a%20b.jpg"),
        ("https://cdn.test/ภาพ.jpg", "https://cdn.test/%E0%B8%A0%E0%B8%B2%E0%B8%9E.jpg"),
        ("https://cdn.test/folder/x.jpg?v=1", "https://cdn.test/folder/x.jpg?v=1"),
        ("not a url", "not a url"),
        ("data:image/png;base64,AAAA", "data:image/png;base64,AAAA"),
        ("", ""),
    ],
)
def test_encode_image_url(url, expected):
    assert encode_image_url(url) == expected


def test_encoding_is_idempotent():
    once = encode_image_url("https://cdn.test/title deeds/โฉนด.jpg")
    assert encode_image_url(once) == once
