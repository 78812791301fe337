"""
Face Matching Service
Searches the Zone A and Zone B feeds for a person of interest
"""

from datetime import datetime, timezone
from typing import Dict, List, Optional

from drishti.config.settings import settings
from drishti.flows import FaceMatchFlow, FlowError
from drishti.services.sentinel_service import SentinelService
from drishti.state.models import FaceMatchResult
from drishti.utils.logger import get_logger
from drishti.utils.media import PLACEHOLDER_DATA_URI
from drishti.video.frame_grabber import FrameGrabber

logger = get_logger(__name__)


class FaceMatchService:
    """Service for face matching across the first two zones"""

    def __init__(
        self,
        sentinel: SentinelService,
        flow: Optional[FaceMatchFlow] = None,
        frame_grabber: Optional[FrameGrabber] = None,
        threshold: Optional[float] = None,
    ):
        self.sentinel = sentinel
        self.flow = flow or FaceMatchFlow()
        self.frame_grabber = frame_grabber or FrameGrabber()
        self.threshold = settings.FACE_MATCH_THRESHOLD if threshold is None else threshold

    def _frame_for_zone(self, zone, supplied: Dict[str, str]) -> str:
        if zone.id in supplied:
            return supplied[zone.id]
        try:
            frame = self.frame_grabber.grab(zone)
        except Exception as e:
            logger.error(f"Frame capture failed for {zone.name}: {e}")
            frame = None
        if not frame:
            logger.warning(f"No frame for {zone.name}, using placeholder")
        return frame or PLACEHOLDER_DATA_URI

    def match(
        self,
        person_photo_data_uri: str,
        zone_frames: Optional[Dict[str, str]] = None,
    ) -> List[FaceMatchResult]:
        """
        Look for the person in Zone A and Zone B

        Args:
            person_photo_data_uri: Photo of the person of interest
            zone_frames: Optional frames keyed by zone id

        Returns:
            One result per zone

        Raises:
            ValueError: If no photo is given or fewer than two zones exist
            FlowError: If the analysis fails
        """
        if not person_photo_data_uri:
            raise ValueError("Please upload a photo of the person of interest.")

        zones = self.sentinel.zones[:2]
        if len(zones) < 2:
            raise ValueError("Face matching needs two zones")

        supplied = zone_frames or {}
        frames = [self._frame_for_zone(zone, supplied) for zone in zones]

        self.sentinel.notify("Scanning zones for face match...")
        try:
            output = self.flow({
                "target_photo_data_uri": person_photo_data_uri,
                "zone_a_data_uri": frames[0],
                "zone_b_data_uri": frames[1],
            })
        except (FlowError, ValueError) as e:
            logger.error(f"Face matching failed: {e}")
            self.sentinel.notify(
                "Error", "Failed to perform face match analysis.", variant="destructive"
            )
            raise

        now = datetime.now(timezone.utc).isoformat()
        per_zone = [
            (output.match_confidence_zone_a, output.first_seen_timestamp_zone_a),
            (output.match_confidence_zone_b, output.last_seen_timestamp_zone_b),
        ]

        results = []
        for zone, frame, (confidence, seen_at) in zip(zones, frames, per_zone):
            match_found = confidence > self.threshold
            result = FaceMatchResult(
                match_found=match_found,
                confidence_score=confidence / 100,
                timestamp=seen_at or now,
                frame_data_uri=frame,
                person_photo_data_uri=person_photo_data_uri,
                zone_id=zone.id,
                zone_name=zone.name,
            )
            results.append(result)

            if match_found:
                self.sentinel.add_alert(
                    type="Face Match",
                    description=(
                        f"Person of interest detected in {zone.name} "
                        f"with {confidence:.0f}% confidence."
                    ),
                    risk_level="high",
                    zone_id=zone.id,
                    location=zone.name,
                )
                self.sentinel.notify(
                    "Match Found!",
                    f"Person of interest detected in {zone.name} with {confidence:.0f}% confidence.",
                )

        if not any(r.match_found for r in results):
            self.sentinel.notify(
                "No Match Found", "The person of interest was not detected in any zone."
            )
        return results
