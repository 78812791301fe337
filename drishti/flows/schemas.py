"""
Input/output schemas for every flow
"""
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from drishti.utils.media import parse_data_uri

AnomalyType = Literal[
    "panic_run", "loitering", "crowd_gathering", "fall_detected", "fight",
    "reverse_flow", "entry_breach", "object_abandon", "overcrowd",
    "rapid_dispersion", "hand_cover_face", "cover_eyes", "fire",
    "building_destruction", "flood", "other", "none", "head_covered",
]

DATA_URI_DESCRIPTION = (
    "An image as a data URI that must include a MIME type and use Base64 "
    "encoding. Expected format: 'data:<mimetype>;base64,<encoded_data>'"
)


def _check_data_uri(value: str) -> str:
    parse_data_uri(value)
    return value


class ZonePhotoInput(BaseModel):
    """A single frame captured in a zone"""

    photo_data_uri: str = Field(..., description=DATA_URI_DESCRIPTION)
    zone: str = Field(..., min_length=1, description="The zone where the image was captured (e.g., Zone A, Zone B).")

    @field_validator("photo_data_uri")
    @classmethod
    def photo_must_be_data_uri(cls, v):
        return _check_data_uri(v)


# ---- analyzeCameraFeedFlow ----

class AnalyzeCameraFeedInput(ZonePhotoInput):
    pass


class AnalyzeCameraFeedOutput(BaseModel):
    anomaly_type: AnomalyType = Field(..., description="The type of anomaly detected.")
    description: str = Field(..., description="A description of the detected anomaly or the scene if no anomaly is detected.")
    risk_level: Literal["Normal", "low", "medium", "high", "critical"] = Field(..., description="The assessed risk level.")
    is_anomaly: bool = Field(..., description="Whether any general anomaly was detected.")
    fire_detected: bool = Field(..., description="Whether fire or smoke is detected.")
    dominant_emotion: str = Field(..., description="The dominant emotion detected (e.g., anger, fear, neutral).")
    is_strong_emotion: bool = Field(..., description="Whether a strong emotion like anger or fear was detected.")


# ---- detectAnomaliesFlow ----

class DetectAnomaliesInput(BaseModel):
    camera_feed_data_uri: str = Field(..., description=DATA_URI_DESCRIPTION)
    zone: str = Field(..., min_length=1, description="The zone where the camera is located.")
    recent_activity: str = Field(default="", description="A summary of recent activity in the camera feed.")

    @field_validator("camera_feed_data_uri")
    @classmethod
    def feed_must_be_data_uri(cls, v):
        return _check_data_uri(v)


class Anomaly(BaseModel):
    type: str = Field(..., description="The type of anomaly detected (e.g., fire, loitering, fight, panic).")
    description: str = Field(..., description="A detailed description of the anomaly.")
    risk_level: Literal["low", "medium", "high", "critical"] = Field(..., description="The risk level of the anomaly.")
    timestamp: str = Field(..., description="The timestamp when the anomaly was detected (ISO format).")
    location: str = Field(..., description="The geographic location of the event.")


class DetectAnomaliesOutput(BaseModel):
    anomalies: List[Anomaly] = Field(default_factory=list, description="A list of detected anomalies.")


# ---- detectFireHazardsFlow ----

class DetectFireHazardsInput(ZonePhotoInput):
    pass


class DetectFireHazardsOutput(BaseModel):
    fire_detected: bool = Field(..., description="Whether fire is detected in the camera feed.")
    confidence: float = Field(..., ge=0, le=1, description="The confidence level of the fire detection (0-1).")


# ---- analyzeFacialExpressionsFlow ----

class AnalyzeFacialExpressionsInput(ZonePhotoInput):
    pass


class AnalyzeFacialExpressionsOutput(BaseModel):
    dominant_emotion: str = Field(..., description="The dominant emotion detected in the face (e.g., anger, fear, neutral).")
    emotion_intensity: float = Field(..., ge=0, le=1, description="Intensity (0-1) of the dominant emotion.")
    is_strong_emotion: bool = Field(..., description="Whether the detected emotion intensity exceeds a predefined threshold.")
    description: str = Field(..., description="Description of detected anomalies and risk level, or a brief description of the scene.")
    risk_level: str = Field(..., description="Risk level associated with the detected emotions (Normal, Medium, High)")


# ---- crowdDensityAnalysisFlow ----

class CrowdDensityAnalysisInput(ZonePhotoInput):
    pass


class CrowdDensityAnalysisOutput(BaseModel):
    head_count: int = Field(..., ge=0, description="The number of human heads detected in the image.")
    density_category: Literal["Low", "Medium", "High"] = Field(..., description="The categorized crowd density (Low, Medium, or High).")
    description: str = Field(..., description="A brief description of the crowd analysis findings.")


# ---- faceMatchFlow ----

class FaceMatchInput(BaseModel):
    target_photo_data_uri: str = Field(..., description=f"A photo of the target person. {DATA_URI_DESCRIPTION}")
    zone_a_data_uri: str = Field(..., description=f"A photo of zone A. {DATA_URI_DESCRIPTION}")
    zone_b_data_uri: str = Field(..., description=f"A photo of zone B. {DATA_URI_DESCRIPTION}")

    @field_validator("target_photo_data_uri", "zone_a_data_uri", "zone_b_data_uri")
    @classmethod
    def images_must_be_data_uris(cls, v):
        return _check_data_uri(v)


class FaceMatchOutput(BaseModel):
    match_confidence_zone_a: float = Field(..., ge=0, le=100, description="The confidence percentage (0-100) of a face match in Zone A.")
    match_confidence_zone_b: float = Field(..., ge=0, le=100, description="The confidence percentage (0-100) of a face match in Zone B.")
    first_seen_timestamp_zone_a: Optional[str] = Field(None, description="The timestamp when the face was first seen in Zone A.")
    last_seen_timestamp_zone_b: Optional[str] = Field(None, description="The timestamp when the face was last seen in Zone B.")


# ---- emergencyCallFlow ----

class EmergencyCallInput(BaseModel):
    event_description: str = Field(..., min_length=1, description="A summary of the event triggering the call.")


class EmergencyCallOutput(BaseModel):
    status: str = Field(..., description="The status of the emergency call attempt.")
    confirmation_number: Optional[str] = Field(None, description="A confirmation number for the call.")


class PhoneCallResult(BaseModel):
    call_sid: str
    status: Literal["queued", "failed", "initiated"]
