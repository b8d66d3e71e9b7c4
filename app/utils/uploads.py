"""Helpers for multipart image uploads."""

from typing import Any, List, Optional

from starlette.datastructures import UploadFile

from app.models.title_deed_models import ImageFile

DEFAULT_MIME_TYPE = "application/octet-stream"


def is_upload(value: Any) -> bool:
    return isinstance(value, UploadFile)


async def read_image(upload: UploadFile) -> ImageFile:
    """Read an uploaded file fully into memory."""
    data = await upload.read()
    return ImageFile(
        data=data,
        mime_type=upload.content_type or DEFAULT_MIME_TYPE,
        file_name=upload.filename or "upload",
    )


async def read_optional_image(value: Any) -> Optional[ImageFile]:
    """Read a form value if it is a non-empty file upload."""
    if not is_upload(value):
        return None
    image = await read_image(value)
    return image if image.data else None


async def read_indexed_images(form: Any, prefix: str) -> List[ImageFile]:
    """Read ``{prefix}0``, ``{prefix}1``, ... until the first gap."""
    images: List[ImageFile] = []
    index = 0
    while True:
        value = form.get(f"{prefix}{index}")
        if not is_upload(value):
            break
        images.append(await read_image(value))
        index += 1
    return images
