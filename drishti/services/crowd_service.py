"""
Crowd Density Service
Head-count analysis for a zone with a short result history
"""

import threading
from typing import List, Optional

from drishti.config.settings import settings
from drishti.flows import CrowdDensityAnalysisFlow, FlowError, density_level_for
from drishti.services.sentinel_service import SentinelService
from drishti.state.models import CrowdDensityResult
from drishti.utils.logger import get_logger
from drishti.utils.media import PLACEHOLDER_DATA_URI
from drishti.video.frame_grabber import FrameGrabber

logger = get_logger(__name__)


class CrowdDensityService:
    """Service for crowd density analysis"""

    def __init__(
        self,
        sentinel: SentinelService,
        flow: Optional[CrowdDensityAnalysisFlow] = None,
        frame_grabber: Optional[FrameGrabber] = None,
    ):
        self.sentinel = sentinel
        self.flow = flow or CrowdDensityAnalysisFlow()
        self.frame_grabber = frame_grabber or FrameGrabber()
        self._history: List[CrowdDensityResult] = []
        self._lock = threading.Lock()

    @property
    def history(self) -> List[CrowdDensityResult]:
        with self._lock:
            return list(self._history)

    def _frame_for_zone(self, zone) -> str:
        try:
            frame = self.frame_grabber.grab(zone)
        except Exception as e:
            logger.error(f"Frame capture failed for {zone.name}: {e}")
            frame = None
        return frame or PLACEHOLDER_DATA_URI

    def analyze(self, zone_id: str, frame_data_uri: Optional[str] = None) -> CrowdDensityResult:
        """
        Count heads in the zone and record a Crowd Report alert

        Args:
            zone_id: Zone to analyze
            frame_data_uri: Frame supplied by the caller (e.g. browser webcam)

        Returns:
            Crowd density result

        Raises:
            LookupError: If the zone does not exist
            FlowError: If the analysis fails
        """
        zone = self.sentinel.get_zone_by_id(zone_id)
        if zone is None:
            raise LookupError(f"Unknown zone: {zone_id}")

        self.sentinel.notify("Analyzing crowd density...", f"Scanning {zone.name}.")
        data_uri = frame_data_uri or self._frame_for_zone(zone)

        try:
            output = self.flow({"photo_data_uri": data_uri, "zone": zone.name})
        except (FlowError, ValueError) as e:
            logger.error(f"Crowd density analysis failed: {e}")
            self.sentinel.notify("Error", "Failed to analyze crowd density.", variant="destructive")
            raise

        # Density is derived from the head count, not the model's category
        density_level = density_level_for(output.head_count)
        result = CrowdDensityResult(
            zone_id=zone.id,
            head_count=output.head_count,
            density_level=density_level,
            report=output.description,
            frame_data_uri=data_uri,
        )

        with self._lock:
            self._history = (self._history + [result])[-settings.CROWD_HISTORY_LIMIT:]

        self.sentinel.add_alert(
            type="Crowd Report",
            description=f"Density is {density_level} with {output.head_count} people detected.",
            risk_level=density_level,
            zone_id=zone.id,
            location=zone.name,
        )
        self.sentinel.notify(
            "Crowd Analysis Complete",
            f"Found {output.head_count} people in {zone.name}.",
        )
        return result
