"""
Flows package: one named Gemini request/response per analysis
"""
from typing import Dict, Optional

from drishti.flows.base import Flow, FlowError
from drishti.flows.camera_feed import (
    AnalyzeCameraFeedFlow,
    AnalyzeFacialExpressionsFlow,
    DetectAnomaliesFlow,
    DetectFireHazardsFlow,
)
from drishti.flows.crowd_density import CrowdDensityAnalysisFlow, density_level_for
from drishti.flows.emergency_call import EmergencyCallFlow
from drishti.flows.face_matching import FaceMatchFlow
from drishti.models.llm_model import LLMWrapper


def build_flow_registry(llm: Optional[LLMWrapper] = None) -> Dict[str, Flow]:
    """All flows keyed by name, sharing one LLM wrapper"""
    flows = [
        AnalyzeCameraFeedFlow(llm),
        DetectAnomaliesFlow(llm),
        DetectFireHazardsFlow(llm),
        AnalyzeFacialExpressionsFlow(llm),
        CrowdDensityAnalysisFlow(llm),
        FaceMatchFlow(llm),
        EmergencyCallFlow(llm),
    ]
    return {flow.name: flow for flow in flows}


__all__ = [
    "Flow",
    "FlowError",
    "AnalyzeCameraFeedFlow",
    "AnalyzeFacialExpressionsFlow",
    "DetectAnomaliesFlow",
    "DetectFireHazardsFlow",
    "CrowdDensityAnalysisFlow",
    "EmergencyCallFlow",
    "FaceMatchFlow",
    "build_flow_registry",
    "density_level_for",
]
