"""
Prompts package for LLM interactions
"""

from .camera_feed import ANALYZE_CAMERA_FEED_PROMPT_TEMPLATE
from .anomalies import DETECT_ANOMALIES_PROMPT_TEMPLATE
from .fire_hazards import DETECT_FIRE_HAZARDS_PROMPT_TEMPLATE
from .facial_expressions import ANALYZE_FACIAL_EXPRESSIONS_PROMPT_TEMPLATE
from .crowd_density import CROWD_DENSITY_PROMPT_TEMPLATE
from .face_matching import FACE_MATCH_PROMPT_TEMPLATE

__all__ = [
    "ANALYZE_CAMERA_FEED_PROMPT_TEMPLATE",
    "DETECT_ANOMALIES_PROMPT_TEMPLATE",
    "DETECT_FIRE_HAZARDS_PROMPT_TEMPLATE",
    "ANALYZE_FACIAL_EXPRESSIONS_PROMPT_TEMPLATE",
    "CROWD_DENSITY_PROMPT_TEMPLATE",
    "FACE_MATCH_PROMPT_TEMPLATE",
]
