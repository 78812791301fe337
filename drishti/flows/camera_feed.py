"""
Frame analysis flows: consolidated feed analysis, anomaly list, fire and
facial expressions
"""
from datetime import datetime, timezone

from drishti.flows.base import Flow
from drishti.flows.schemas import (
    AnalyzeCameraFeedInput,
    AnalyzeCameraFeedOutput,
    AnalyzeFacialExpressionsInput,
    AnalyzeFacialExpressionsOutput,
    DetectAnomaliesInput,
    DetectAnomaliesOutput,
    DetectFireHazardsInput,
    DetectFireHazardsOutput,
)
from drishti.prompts import (
    ANALYZE_CAMERA_FEED_PROMPT_TEMPLATE,
    ANALYZE_FACIAL_EXPRESSIONS_PROMPT_TEMPLATE,
    DETECT_ANOMALIES_PROMPT_TEMPLATE,
    DETECT_FIRE_HAZARDS_PROMPT_TEMPLATE,
)
from drishti.utils.logger import get_logger

logger = get_logger(__name__)


class _ZonePhotoFlow(Flow):
    """Flows that send one zone photo"""

    def prompt_variables(self, data):
        return {"zone": data.zone}

    def image_data_uris(self, data):
        return [data.photo_data_uri]


class AnalyzeCameraFeedFlow(_ZonePhotoFlow):
    """Detect anomalies, fire and strong emotions in a single call"""

    name = "analyzeCameraFeedFlow"
    input_model = AnalyzeCameraFeedInput
    output_model = AnalyzeCameraFeedOutput
    prompt_template = ANALYZE_CAMERA_FEED_PROMPT_TEMPLATE

    def run(self, data):
        output = super().run(data)
        # Fire is always critical regardless of what the model assigned
        if output.fire_detected and (output.risk_level != "critical" or not output.is_anomaly):
            logger.warning(
                f"{self.name}: fire detected with risk '{output.risk_level}' "
                f"(anomaly={output.is_anomaly}), escalating to critical anomaly"
            )
            output = output.model_copy(update={"risk_level": "critical", "is_anomaly": True})
        return output


class DetectFireHazardsFlow(_ZonePhotoFlow):
    name = "detectFireHazardsFlow"
    input_model = DetectFireHazardsInput
    output_model = DetectFireHazardsOutput
    prompt_template = DETECT_FIRE_HAZARDS_PROMPT_TEMPLATE


class AnalyzeFacialExpressionsFlow(_ZonePhotoFlow):
    name = "analyzeFacialExpressionsFlow"
    input_model = AnalyzeFacialExpressionsInput
    output_model = AnalyzeFacialExpressionsOutput
    prompt_template = ANALYZE_FACIAL_EXPRESSIONS_PROMPT_TEMPLATE


class DetectAnomaliesFlow(Flow):
    """List every anomaly in a frame, gated by recent activity"""

    name = "detectAnomaliesFlow"
    input_model = DetectAnomaliesInput
    output_model = DetectAnomaliesOutput
    prompt_template = DETECT_ANOMALIES_PROMPT_TEMPLATE

    def should_analyze(self, recent_activity: str) -> bool:
        """Whether the frame needs analysis given recent activity"""
        # TODO: skip frames when recent activity shows an unchanged, empty scene
        return True

    def run(self, data):
        if not self.should_analyze(data.recent_activity):
            logger.info(f"{self.name}: analysis not needed for {data.zone}")
            return DetectAnomaliesOutput(anomalies=[])
        return super().run(data)

    def prompt_variables(self, data):
        return {
            "zone": data.zone,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    def image_data_uris(self, data):
        return [data.camera_feed_data_uri]
