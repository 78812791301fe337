"""
Domain models shared by the sentinel state, services and API
"""
import random
import time
from datetime import datetime, timezone
from typing import Literal, Optional
from urllib.parse import quote_plus

from pydantic import BaseModel, Field, computed_field

RiskLevel = Literal["Normal", "low", "medium", "high", "critical"]
ZoneType = Literal["webcam", "ip-camera"]
DensityLevel = Literal["low", "medium", "high"]

HIGH_RISK_LEVELS = ("high", "critical")
ALL_ZONES = "all-zones"
SOS_ALERT_TYPE = "SOS Signal"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def is_high_risk(risk_level: str) -> bool:
    return risk_level in HIGH_RISK_LEVELS


def new_alert_id() -> str:
    """alert-<epoch ms>-<random>"""
    return f"alert-{int(time.time() * 1000)}-{random.random()}"


class Coordinates(BaseModel):
    """Geolocation of an alert"""

    latitude: float
    longitude: float
    accuracy: Optional[float] = None


class Zone(BaseModel):
    """A monitored camera source"""

    id: str
    name: str
    type: ZoneType
    ip_address: Optional[str] = None
    device_index: Optional[int] = None
    alarm_silenced: bool = False
    configurable: bool = False


class Alert(BaseModel):
    """A timestamped record of a detected anomaly"""

    id: str = Field(default_factory=new_alert_id)
    type: str
    description: str
    risk_level: RiskLevel
    timestamp: str = Field(default_factory=utc_now_iso)
    zone_id: str
    location: str
    coordinates: Optional[Coordinates] = None

    @computed_field
    @property
    def maps_url(self) -> Optional[str]:
        if self.coordinates:
            query = f"{self.coordinates.latitude},{self.coordinates.longitude}"
        elif self.location:
            query = self.location
        else:
            return None
        return f"https://www.google.com/maps/search/?api=1&query={quote_plus(query)}"


class ZoneStatus(BaseModel):
    """One row of the zone status table"""

    zone_id: str
    zone_name: str
    status: str = "Monitoring..."
    risk_level: RiskLevel = "Normal"
    anomaly: str = "none"
    description: str = "Awaiting first scan."


class Notification(BaseModel):
    """Operator-facing toast"""

    title: str
    description: str = ""
    variant: Literal["default", "destructive"] = "default"
    timestamp: str = Field(default_factory=utc_now_iso)


class CrowdDensityResult(BaseModel):
    zone_id: str
    head_count: int
    density_level: DensityLevel
    report: str
    timestamp: str = Field(default_factory=utc_now_iso)
    frame_data_uri: Optional[str] = None


class FaceMatchResult(BaseModel):
    match_found: bool
    confidence_score: Optional[float] = None
    timestamp: Optional[str] = None
    frame_data_uri: Optional[str] = None
    person_photo_data_uri: Optional[str] = None
    zone_id: Optional[str] = None
    zone_name: Optional[str] = None
