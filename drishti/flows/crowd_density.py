"""
Crowd density (head count) flow
"""
from drishti.flows.base import Flow
from drishti.flows.schemas import CrowdDensityAnalysisInput, CrowdDensityAnalysisOutput
from drishti.prompts import CROWD_DENSITY_PROMPT_TEMPLATE


def density_level_for(head_count: int) -> str:
    """Low: <=2 heads, Medium: 3-6, High: >6"""
    if head_count <= 2:
        return "low"
    if head_count <= 6:
        return "medium"
    return "high"


class CrowdDensityAnalysisFlow(Flow):
    name = "crowdDensityAnalysisFlow"
    input_model = CrowdDensityAnalysisInput
    output_model = CrowdDensityAnalysisOutput
    prompt_template = CROWD_DENSITY_PROMPT_TEMPLATE

    def prompt_variables(self, data):
        return {"zone": data.zone}

    def image_data_uris(self, data):
        return [data.photo_data_uri]
