"""
LangGraph workflow for a single "Scan for Anomalies" run on one zone
"""

from typing import Optional

from langgraph.graph import StateGraph, END

from drishti.flows import AnalyzeCameraFeedFlow, FlowError
from drishti.services.sentinel_service import SentinelService
from drishti.state import ScanState
from drishti.utils.logger import get_logger
from drishti.utils.media import parse_data_uri
from drishti.video.frame_grabber import FrameGrabber

logger = get_logger(__name__)


class ScanWorkflow:
    """Capture a frame, analyze it with Gemini and publish the outcome"""

    def __init__(
        self,
        sentinel: SentinelService,
        analyze_flow: Optional[AnalyzeCameraFeedFlow] = None,
        frame_grabber: Optional[FrameGrabber] = None,
    ):
        self.sentinel = sentinel
        self.analyze_flow = analyze_flow or AnalyzeCameraFeedFlow()
        self.frame_grabber = frame_grabber or FrameGrabber()

        self.graph = self._build_graph()

    def _build_graph(self):
        """Build the LangGraph workflow"""
        workflow = StateGraph(ScanState)

        # Add nodes
        workflow.add_node("mark_analyzing", self.mark_analyzing)
        workflow.add_node("capture_frame", self.capture_frame)
        workflow.add_node("capture_failed", self.capture_failed)
        workflow.add_node("analyze_frame", self.analyze_frame)
        workflow.add_node("analysis_failed", self.analysis_failed)
        workflow.add_node("publish_result", self.publish_result)

        # Define edges
        workflow.set_entry_point("mark_analyzing")
        workflow.add_edge("mark_analyzing", "capture_frame")
        workflow.add_conditional_edges(
            "capture_frame",
            self.after_capture,
            {"ok": "analyze_frame", "failed": "capture_failed"},
        )
        workflow.add_conditional_edges(
            "analyze_frame",
            self.after_analysis,
            {"ok": "publish_result", "failed": "analysis_failed"},
        )
        workflow.add_edge("capture_failed", END)
        workflow.add_edge("analysis_failed", END)
        workflow.add_edge("publish_result", END)

        return workflow.compile()

    def mark_analyzing(self, state: ScanState) -> ScanState:
        self.sentinel.update_zone_status(state["zone_id"], status="Analyzing...")
        return state

    def capture_frame(self, state: ScanState) -> ScanState:
        """Use the caller's frame when given, otherwise read the camera"""
        zone = self.sentinel.get_zone_by_id(state["zone_id"])
        frame = state.get("frame_data_uri")

        if frame:
            try:
                parse_data_uri(frame)
            except ValueError as e:
                logger.error(f"Supplied frame for {zone.name} is not a data URI: {e}")
                frame = None
        else:
            logger.info(f"Capturing frame from {zone.name} ({zone.type})")
            try:
                frame = self.frame_grabber.grab(zone)
            except Exception as e:
                logger.error(f"Error capturing frame from {zone.name}: {e}")
                frame = None

        state["frame_data_uri"] = frame
        return state

    def after_capture(self, state: ScanState) -> str:
        return "ok" if state.get("frame_data_uri") else "failed"

    def capture_failed(self, state: ScanState) -> ScanState:
        zone = self.sentinel.get_zone_by_id(state["zone_id"])
        alert = self.sentinel.add_alert(
            type="System Error",
            description="Failed to capture frame.",
            risk_level="medium",
            zone_id=zone.id,
            location=zone.name,
        )
        self.sentinel.update_zone_status(zone.id, status="Error capturing frame")
        state["status"] = "capture_failed"
        state["alert_id"] = alert.id
        state["error"] = "Failed to capture frame."
        return state

    def analyze_frame(self, state: ScanState) -> ScanState:
        zone = self.sentinel.get_zone_by_id(state["zone_id"])
        logger.info(f"Analyzing frame from {zone.name} with Gemini...")

        try:
            result = self.analyze_flow(
                {"photo_data_uri": state["frame_data_uri"], "zone": zone.name}
            )
            state["analysis"] = result.model_dump()
            logger.info(f"{zone.name}: risk={result.risk_level} anomaly={result.anomaly_type}")
        except (FlowError, ValueError) as e:
            logger.error(f"AI analysis failed for {zone.name}: {e}")
            state["error"] = str(e)

        return state

    def after_analysis(self, state: ScanState) -> str:
        return "ok" if state.get("analysis") else "failed"

    def analysis_failed(self, state: ScanState) -> ScanState:
        zone = self.sentinel.get_zone_by_id(state["zone_id"])
        alert = self.sentinel.add_alert(
            type="System Error",
            description="AI analysis failed.",
            risk_level="medium",
            zone_id=zone.id,
            location=zone.name,
        )
        self.sentinel.update_zone_status(zone.id, status="AI analysis failed")
        state["status"] = "analysis_failed"
        state["alert_id"] = alert.id
        return state

    def publish_result(self, state: ScanState) -> ScanState:
        """Update the zone row and raise an alert for anomalies"""
        zone = self.sentinel.get_zone_by_id(state["zone_id"])
        analysis = state["analysis"]

        self.sentinel.update_zone_status(
            zone.id,
            status="Anomaly Detected" if analysis["is_anomaly"] else "Monitoring...",
            risk_level=analysis["risk_level"],
            anomaly=analysis["anomaly_type"],
            description=analysis["description"],
        )

        if analysis["is_anomaly"]:
            # High/critical alerts sound the buzzer and call emergency services
            alert = self.sentinel.add_alert(
                type=analysis["anomaly_type"],
                description=analysis["description"],
                risk_level=analysis["risk_level"],
                zone_id=zone.id,
                location=zone.name,
            )
            state["alert_id"] = alert.id
        else:
            self.sentinel.notify("All Clear", f"No anomalies detected in {zone.name}.")

        state["status"] = "completed"
        return state

    def run(self, zone_id: str, frame_data_uri: Optional[str] = None) -> ScanState:
        """
        Run one scan

        Returns:
            Final scan state; status is 'skipped' when the zone is unknown
            or already being scanned

        Raises:
            LookupError: If the zone does not exist
        """
        zone = self.sentinel.get_zone_by_id(zone_id)
        if zone is None:
            raise LookupError(f"Unknown zone: {zone_id}")

        if not self.sentinel.try_begin_processing(zone_id):
            logger.info(f"Scan already in progress for {zone.name}, skipping")
            return {"zone_id": zone_id, "status": "skipped"}

        initial_state: ScanState = {
            "zone_id": zone_id,
            "frame_data_uri": frame_data_uri,
            "status": "pending",
            "analysis": {},
            "alert_id": None,
            "error": None,
        }

        try:
            final_state = self.graph.invoke(initial_state)
        finally:
            self.sentinel.set_processing(zone_id, False)

        logger.info(f"Scan for {zone.name} finished: {final_state.get('status')}")
        return final_state
