"""
Live frame capture from webcams and IP cameras using OpenCV and HTTP snapshots
"""
import time
from typing import Optional

import cv2

from drishti.config.settings import settings
from drishti.state.models import Zone
from drishti.utils.logger import get_logger
from drishti.utils.media import capture_video_frame, url_to_data_uri

logger = get_logger(__name__)


class FrameGrabber:
    """
    Grab a single frame from a zone's camera as a JPEG data URI
    """

    def __init__(self, timeout: float = None):
        """
        Args:
            timeout: HTTP timeout in seconds for IP camera snapshots
        """
        self.timeout = timeout or settings.CAMERA_TIMEOUT

    def grab(self, zone: Zone) -> Optional[str]:
        """
        Capture a frame for the zone

        Returns:
            Data URI, or None if the camera could not be read
        """
        if zone.type == "webcam":
            return self._grab_webcam(zone)
        if zone.type == "ip-camera":
            return self._grab_ip_camera(zone)
        raise ValueError(f"Unknown zone type: {zone.type}")

    def can_grab(self, zone: Zone) -> bool:
        """Whether the server itself can read this zone's camera"""
        if zone.type == "ip-camera":
            return bool(zone.ip_address)
        return zone.device_index is not None

    def _grab_webcam(self, zone: Zone) -> Optional[str]:
        device_index = zone.device_index if zone.device_index is not None else 0
        cap = cv2.VideoCapture(device_index)
        try:
            if not cap.isOpened():
                logger.error(f"Webcam {device_index} for {zone.name} is not available")
                return None
            return capture_video_frame(cap, fallback=None)
        finally:
            cap.release()

    def _grab_ip_camera(self, zone: Zone) -> Optional[str]:
        if not zone.ip_address:
            logger.error(f"No IP address configured for {zone.name}")
            return None

        # MJPEG/RTSP streams open through OpenCV; plain snapshot URLs do not
        cap = cv2.VideoCapture(zone.ip_address)
        try:
            if cap.isOpened():
                frame = capture_video_frame(cap, fallback=None)
                if frame:
                    return frame
        finally:
            cap.release()

        return self._grab_snapshot(zone)

    def _grab_snapshot(self, zone: Zone) -> Optional[str]:
        # Timestamp parameter bypasses camera and proxy caches
        separator = "&" if "?" in zone.ip_address else "?"
        url = f"{zone.ip_address}{separator}timestamp={int(time.time() * 1000)}"

        frame = url_to_data_uri(url, timeout=self.timeout, fallback=None)
        if frame is None:
            logger.error(f"IP camera snapshot failed for {zone.name}")
        return frame
