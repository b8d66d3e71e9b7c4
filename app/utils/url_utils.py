"""URL helpers."""

from urllib.parse import quote, unquote, urlsplit, urlunsplit


def encode_image_url(url: str) -> str:
    """Percent-encode every path segment of an image URL.

    LINE's renderer rejects image URLs containing spaces or non-ASCII
    characters. Segments are decoded before re-encoding so an already encoded
    URL is not double-encoded. Anything that does not parse as an absolute URL
    is returned unchanged.
    """
    if not url:
        return ""

    try:
        parts = urlsplit(url)
    except ValueError:
        return url
    if not parts.scheme or not parts.netloc:
        return url

    segments = [quote(unquote(segment), safe="") for segment in parts.path.split("/")]
    return urlunsplit(
        (parts.scheme, parts.netloc, "/".join(segments), parts.query, parts.fragment)
    )
