"""
Configuration settings for Drishti Sentinel
"""

import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings"""

    # Project paths
    STATIC_DIR = Path(__file__).parent.parent / "web" / "static"

    # LLM settings
    GOOGLE_API_KEY = os.getenv("GOOGLE_API_KEY")
    GEMINI_MODEL = os.getenv("GEMINI_MODEL", "gemini-2.0-flash")
    LLM_TEMPERATURE = float(os.getenv("LLM_TEMPERATURE", "0.2"))
    LLM_MAX_OUTPUT_TOKENS = 1024

    # Emergency call settings (mock call service)
    EMERGENCY_NUMBER = os.getenv("EMERGENCY_NUMBER", "9597428005")
    EMERGENCY_CALL_DELAY = float(os.getenv("EMERGENCY_CALL_DELAY", "1.0"))

    # Camera settings
    WEBCAM_DEVICE_INDEX = int(os.getenv("WEBCAM_DEVICE_INDEX", "0"))
    ZONE_B_IP_ADDRESS = os.getenv(
        "ZONE_B_IP_ADDRESS", "http://192.168.137.161:8080/video"
    )
    CAMERA_TIMEOUT = 5  # seconds
    MEDIA_PROXY_URL = os.getenv("MEDIA_PROXY_URL", "")  # e.g. https://api.allorigins.win/raw?url=

    # Monitoring settings
    AUTO_SCAN_INTERVAL = float(os.getenv("AUTO_SCAN_INTERVAL", "0"))  # 0 disables
    SCAN_DEBOUNCE_SECONDS = float(os.getenv("SCAN_DEBOUNCE_SECONDS", "3"))
    BUZZER_INTERVAL = float(os.getenv("BUZZER_INTERVAL", "1.0"))

    # State limits
    ALERT_HISTORY_LIMIT = 50
    NOTIFICATION_LIMIT = 50
    CROWD_HISTORY_LIMIT = 10
    FACE_MATCH_THRESHOLD = 75  # percent

    # Upload validation
    MAX_IMAGE_SIZE = 10 * 1024 * 1024  # 10MB

    # Logging
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    @classmethod
    def default_zones(cls):
        """Zones monitored out of the box"""
        return [
            {
                "id": "zone-a",
                "name": "Zone A",
                "type": "webcam",
                "device_index": cls.WEBCAM_DEVICE_INDEX,
                "alarm_silenced": False,
                "configurable": False,
            },
            {
                "id": "zone-b",
                "name": "Zone B",
                "type": "ip-camera",
                "ip_address": cls.ZONE_B_IP_ADDRESS,
                "alarm_silenced": False,
                "configurable": True,
            },
        ]


settings = Settings()
