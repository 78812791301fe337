"""
LangGraph State Definition for a single zone scan
"""
from typing import TypedDict, Optional, Dict, Any


class ScanState(TypedDict, total=False):
    """
    State for the scan workflow
    Tracks one "Scan for Anomalies" run for one zone
    """
    # Input
    zone_id: str
    frame_data_uri: Optional[str]

    # Outcome: pending, skipped, capture_failed, analysis_failed, completed
    status: str

    # Analyze-camera-feed output
    analysis: Dict[str, Any]

    # Alert raised by this scan, if any
    alert_id: Optional[str]

    error: Optional[str]
