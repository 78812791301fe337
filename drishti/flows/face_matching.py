"""
Face matching flow: look for a target face in the Zone A and Zone B snapshots
"""
from drishti.flows.base import Flow
from drishti.flows.schemas import FaceMatchInput, FaceMatchOutput
from drishti.prompts import FACE_MATCH_PROMPT_TEMPLATE


class FaceMatchFlow(Flow):
    name = "faceMatchFlow"
    input_model = FaceMatchInput
    output_model = FaceMatchOutput
    prompt_template = FACE_MATCH_PROMPT_TEMPLATE

    def image_data_uris(self, data):
        # Order matters: the prompt refers to target, Zone A, Zone B
        return [data.target_photo_data_uri, data.zone_a_data_uri, data.zone_b_data_uri]
