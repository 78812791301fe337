"""
Frame and data-URI helpers
"""
import base64
import binascii
import re
from io import BytesIO
from typing import Optional, Tuple, Union
from urllib.parse import quote

import cv2
import numpy as np
import requests
from PIL import Image

from drishti.config.settings import settings
from drishti.utils.logger import get_logger

logger = get_logger(__name__)

# 1x1 PNG used when a frame cannot be obtained
PLACEHOLDER_DATA_URI = (
    "data:image/png;base64,iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAQAAAC1HAwCAAAAC0lEQVR42mNkYAAAAAYAAjCB0C8AAAAASUVORK5CYII="
)

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+);base64,(?P<data>.+)$", re.DOTALL)


def parse_data_uri(data_uri: str) -> Tuple[str, bytes]:
    """
    Split a base64 data URI into its MIME type and raw bytes

    Raises:
        ValueError: If the string is not a base64 data URI
    """
    match = _DATA_URI_RE.match(data_uri.strip()) if data_uri else None
    if not match:
        raise ValueError("Expected a data URI of the form 'data:<mimetype>;base64,<encoded_data>'")
    try:
        payload = base64.b64decode(match.group("data"), validate=True)
    except binascii.Error as e:
        raise ValueError(f"Invalid base64 payload in data URI: {e}") from e
    return match.group("mime"), payload


def bytes_to_data_uri(payload: bytes, mime_type: str = "image/jpeg") -> str:
    return f"data:{mime_type};base64,{base64.b64encode(payload).decode()}"


def image_to_data_uri(
    image: Union[Image.Image, np.ndarray, str],
    fmt: str = "JPEG",
    bgr: bool = False,
) -> str:
    """
    Encode an image as a base64 data URI

    Args:
        image: PIL Image, numpy array (RGB, or BGR when bgr=True), or path to image
        fmt: PIL output format
        bgr: Whether a numpy frame is in OpenCV's BGR channel order

    Returns:
        Data URI string
    """
    if isinstance(image, str):
        pil_image = Image.open(image).convert("RGB")
    elif isinstance(image, np.ndarray):
        if bgr and image.ndim == 3:
            image = cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
        pil_image = Image.fromarray(image).convert("RGB")
    elif isinstance(image, Image.Image):
        pil_image = image.convert("RGB")
    else:
        raise ValueError(f"Unsupported image type: {type(image)}")

    buffered = BytesIO()
    pil_image.save(buffered, format=fmt)
    mime_type = Image.MIME.get(fmt.upper(), "image/jpeg")
    return bytes_to_data_uri(buffered.getvalue(), mime_type)


def url_to_data_uri(
    url: str,
    timeout: float = None,
    fallback: Optional[str] = PLACEHOLDER_DATA_URI,
) -> Optional[str]:
    """
    Download an image and return it as a data URI

    Goes through MEDIA_PROXY_URL when configured.

    Args:
        url: Image or camera snapshot URL
        timeout: HTTP timeout in seconds (defaults to CAMERA_TIMEOUT)
        fallback: Returned on network failure or non-image content

    Returns:
        Data URI, or `fallback`
    """
    fetch_url = url
    if settings.MEDIA_PROXY_URL:
        fetch_url = f"{settings.MEDIA_PROXY_URL}{quote(url, safe='')}"

    try:
        response = requests.get(fetch_url, timeout=timeout or settings.CAMERA_TIMEOUT)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error(f"Failed to fetch image from {url}: {e}")
        return fallback

    mime_type = response.headers.get("Content-Type", "").split(";")[0].strip()
    if not mime_type.startswith("image/"):
        logger.error(f"{url} returned non-image content: {mime_type!r}")
        return fallback
    return bytes_to_data_uri(response.content, mime_type)


def capture_video_frame(
    capture: "cv2.VideoCapture",
    fallback: Optional[str] = PLACEHOLDER_DATA_URI,
) -> Optional[str]:
    """Read one frame from an open OpenCV capture as a JPEG data URI"""
    ret, frame = capture.read()
    if not ret or frame is None:
        logger.warning("Video capture returned no frame")
        return fallback

    logger.debug(f"Captured frame ({frame.shape[1]}x{frame.shape[0]})")
    return image_to_data_uri(frame, fmt="JPEG", bgr=True)
