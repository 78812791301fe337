"""
Shared fixtures: the Gemini model and cameras are always mocked
"""

from io import BytesIO

import pytest
from PIL import Image
from unittest.mock import Mock

from drishti.config.settings import settings
from drishti.flows import EmergencyCallFlow
from drishti.models.llm_model import LLMWrapper
from drishti.services.sentinel_service import SentinelService
from drishti.utils.media import PLACEHOLDER_DATA_URI
from drishti.video.frame_grabber import FrameGrabber

FRAME_URI = "data:image/jpeg;base64,ZmFrZS1qcGVnLWZyYW1lIQ=="


@pytest.fixture(autouse=True)
def fast_emergency_calls(monkeypatch):
    """Mock call service answers immediately in tests"""
    monkeypatch.setattr(settings, "EMERGENCY_CALL_DELAY", 0)


@pytest.fixture
def frame_uri():
    return FRAME_URI


@pytest.fixture
def placeholder_uri():
    return PLACEHOLDER_DATA_URI


@pytest.fixture
def jpeg_bytes():
    """A real 16x16 JPEG, as a face-match upload"""
    buffer = BytesIO()
    Image.new("RGB", (16, 16), "gray").save(buffer, format="JPEG")
    return buffer.getvalue()


@pytest.fixture
def mock_llm():
    """LLMWrapper stand-in; set generate_json.return_value per test"""
    return Mock(spec=LLMWrapper)


@pytest.fixture
def emergency_flow():
    return EmergencyCallFlow(call_delay=0)


@pytest.fixture
def sentinel(emergency_flow):
    """Sentinel state with the default zones and inline side effects"""
    service = SentinelService(
        zones=settings.default_zones(),
        emergency_call_flow=emergency_flow,
        run_side_effects_async=False,
    )
    yield service
    service.shutdown()


@pytest.fixture
def mock_grabber():
    """Frame grabber that always returns a frame"""
    grabber = Mock(spec=FrameGrabber)
    grabber.grab.return_value = FRAME_URI
    grabber.can_grab.return_value = True
    return grabber


@pytest.fixture
def feed_reply():
    """Builder for a valid analyzeCameraFeedFlow model reply"""

    def build(**overrides):
        reply = {
            "anomaly_type": "none",
            "description": "Empty corridor, lights on.",
            "risk_level": "Normal",
            "is_anomaly": False,
            "fire_detected": False,
            "dominant_emotion": "neutral",
            "is_strong_emotion": False,
        }
        reply.update(overrides)
        return reply

    return build
