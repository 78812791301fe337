"""
State definitions for the sentinel dashboard
"""
from drishti.state.models import (
    ALL_ZONES,
    SOS_ALERT_TYPE,
    Alert,
    Coordinates,
    CrowdDensityResult,
    FaceMatchResult,
    Notification,
    RiskLevel,
    Zone,
    ZoneStatus,
    is_high_risk,
)
from drishti.state.scan_state import ScanState

__all__ = [
    "ALL_ZONES",
    "SOS_ALERT_TYPE",
    "Alert",
    "Coordinates",
    "CrowdDensityResult",
    "FaceMatchResult",
    "Notification",
    "RiskLevel",
    "Zone",
    "ZoneStatus",
    "is_high_risk",
    "ScanState",
]
