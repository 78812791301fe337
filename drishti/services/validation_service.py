"""
Validation Service
Checks face-match uploads by decoding them, not by trusting the client's headers
"""

from io import BytesIO

from fastapi import HTTPException, status
from PIL import Image, UnidentifiedImageError

from drishti.config.settings import settings
from drishti.utils.logger import get_logger

logger = get_logger(__name__)

# PIL format name -> MIME type sent to the model
SUPPORTED_IMAGE_FORMATS = {
    "JPEG": "image/jpeg",
    "PNG": "image/png",
    "WEBP": "image/webp",
    "BMP": "image/bmp",
    "GIF": "image/gif",
}


def _reject(detail: str, code: int = status.HTTP_400_BAD_REQUEST):
    logger.warning(f"Upload rejected: {detail}")
    raise HTTPException(status_code=code, detail=detail)


def validate_image_upload(content: bytes, filename: str = "") -> str:
    """
    Decode an uploaded photo and return its real MIME type

    The declared content type and extension are ignored: the bytes must
    open as one of SUPPORTED_IMAGE_FORMATS.

    Raises:
        HTTPException: 400 for empty or undecodable files, 413 when too large
    """
    if not content:
        _reject("Empty file uploaded")

    if len(content) > settings.MAX_IMAGE_SIZE:
        max_size_mb = settings.MAX_IMAGE_SIZE / (1024 * 1024)
        _reject(
            f"File size exceeds maximum allowed size of {max_size_mb}MB",
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        )

    try:
        with Image.open(BytesIO(content)) as image:
            image_format = image.format
            image.verify()
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        logger.debug(f"Could not decode {filename or 'upload'}: {e}")
        _reject("Uploaded file is not a readable image")

    mime_type = SUPPORTED_IMAGE_FORMATS.get(image_format)
    if mime_type is None:
        _reject(
            f"Unsupported image format: {image_format}. "
            f"Allowed: {', '.join(sorted(SUPPORTED_IMAGE_FORMATS))}"
        )

    logger.info(f"Upload accepted: {filename or 'photo'} ({image_format}, {len(content)} bytes)")
    return mime_type
