"""
Services Module
Contains the dashboard state, analysis services and validation
"""

from .sentinel_service import SentinelService
from .crowd_service import CrowdDensityService
from .face_service import FaceMatchService
from .alarm_service import BuzzerController, synthesize_alarm
from .validation_service import validate_image_upload

__all__ = [
    'SentinelService',
    'CrowdDensityService',
    'FaceMatchService',
    'BuzzerController',
    'synthesize_alarm',
    'validate_image_upload',
]
