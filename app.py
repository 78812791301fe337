"""
FastAPI Application for Drishti Sentinel
Provides the security dashboard REST API, the HTML dashboard and a CLI
"""

import argparse
import secrets
import time
from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

import uvicorn
from fastapi import FastAPI, File, HTTPException, Query, UploadFile, status
from fastapi.responses import FileResponse, Response
from pydantic import BaseModel, Field, ValidationError, field_validator

from drishti.config.settings import settings
from drishti.flows import FlowError, build_flow_registry
from drishti.models.llm_model import LLMWrapper
from drishti.services import (
    BuzzerController,
    CrowdDensityService,
    FaceMatchService,
    SentinelService,
    synthesize_alarm,
    validate_image_upload,
)
from drishti.services.monitor_service import MonitorService
from drishti.state import Alert, CrowdDensityResult, FaceMatchResult, Notification, Zone, ZoneStatus
from drishti.utils.logger import get_logger
from drishti.utils.media import bytes_to_data_uri
from drishti.video.frame_grabber import FrameGrabber
from drishti.workflows.scan_workflow import ScanWorkflow

logger = get_logger(__name__)


# Pydantic Models for Request/Response Validation
class LoginRequest(BaseModel):
    """Operator login (no credential check)"""

    email: str = Field(..., description="Operator email")
    password: str = Field(..., description="Operator password")

    @field_validator("email", "password")
    @classmethod
    def must_not_be_empty(cls, v):
        if not v or v.strip() == "":
            raise ValueError("Field cannot be empty or whitespace only")
        return v.strip()


class LoginResponse(BaseModel):
    token: str
    email: str


class SourceRequest(BaseModel):
    type: Literal["webcam", "ip-camera"]


class ScanRequest(BaseModel):
    """Optional browser-captured frame for the scan"""

    frame_data_uri: Optional[str] = Field(
        None, description="Frame as a data URI; captured server-side when omitted"
    )


class ScanResponse(BaseModel):
    zone_id: str
    status: str
    zone_status: Optional[ZoneStatus] = None
    alert: Optional[Alert] = None
    error: Optional[str] = None


class CrowdDensityRequest(BaseModel):
    zone_id: str = Field(..., description="Zone to analyze")
    frame_data_uri: Optional[str] = Field(None, description="Frame as a data URI")


class EmergencyCallRequest(BaseModel):
    event_description: str = Field(..., min_length=1, max_length=1000)


class EmergencyCallResponse(BaseModel):
    status: str
    confirmation_number: Optional[str] = None


class BuzzerResponse(BaseModel):
    zone_id: Optional[str]
    active: bool


class HealthResponse(BaseModel):
    """Health check response"""

    status: str
    llm_configured: bool
    auto_scan_running: bool
    timestamp: str


# Initialize FastAPI app
app = FastAPI(
    title="Drishti Sentinel API",
    description="AI-powered security monitoring dashboard for webcam and IP camera zones",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

# Global instances
flows: Dict[str, Any] = {}
sentinel: Optional[SentinelService] = None
scan_workflow: Optional[ScanWorkflow] = None
monitor: Optional[MonitorService] = None
crowd_service: Optional[CrowdDensityService] = None
face_service: Optional[FaceMatchService] = None
buzzer: Optional[BuzzerController] = None
sessions: Dict[str, str] = {}


def init_services(
    llm: Optional[LLMWrapper] = None,
    frame_grabber: Optional[FrameGrabber] = None,
    zones: Optional[List[Dict]] = None,
    run_side_effects_async: bool = True,
    buzzer_player=None,
):
    """Build every service and bind them to the module globals"""
    global flows, sentinel, scan_workflow, monitor, crowd_service, face_service, buzzer

    grabber = frame_grabber or FrameGrabber()
    flows = build_flow_registry(llm)

    sentinel = SentinelService(
        zones=zones,
        emergency_call_flow=flows["emergencyCallFlow"],
        run_side_effects_async=run_side_effects_async,
    )
    buzzer = BuzzerController(sentinel, player=buzzer_player)
    scan_workflow = ScanWorkflow(
        sentinel, analyze_flow=flows["analyzeCameraFeedFlow"], frame_grabber=grabber
    )
    monitor = MonitorService(sentinel, scan_workflow, frame_grabber=grabber)
    crowd_service = CrowdDensityService(
        sentinel, flow=flows["crowdDensityAnalysisFlow"], frame_grabber=grabber
    )
    face_service = FaceMatchService(
        sentinel, flow=flows["faceMatchFlow"], frame_grabber=grabber
    )
    sessions.clear()


def _require_zone(zone_id: str) -> Zone:
    zone = sentinel.get_zone_by_id(zone_id)
    if zone is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Zone not found: {zone_id}",
        )
    return zone


# FastAPI Event Handlers
@app.on_event("startup")
async def startup_event():
    """Initialize application on startup"""
    logger.info("=" * 80)
    logger.info("DRISHTI SENTINEL API - STARTING")
    logger.info("=" * 80)

    try:
        if sentinel is None:
            init_services()
        if not settings.GOOGLE_API_KEY:
            logger.warning(
                "GOOGLE_API_KEY not found. AI analysis will fail until it is set in .env."
            )
        monitor.start()
        logger.info("API initialized successfully")
    except Exception as e:
        logger.error(f"Failed to initialize API: {e}")
        raise


@app.on_event("shutdown")
async def shutdown_event():
    """Stop background workers"""
    if monitor is not None:
        monitor.stop()
    if buzzer is not None:
        buzzer.stop()
    if sentinel is not None:
        sentinel.shutdown()
    logger.info("API shut down")


# FastAPI Endpoints
@app.get("/", response_model=Dict[str, str])
async def root():
    """Root endpoint"""
    return {
        "message": "Drishti Sentinel API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health",
        "dashboard": "/dashboard",
    }


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint"""
    return HealthResponse(
        status="healthy",
        llm_configured=bool(settings.GOOGLE_API_KEY),
        auto_scan_running=bool(monitor and monitor.running),
        timestamp=datetime.now().isoformat(),
    )


@app.get("/dashboard")
async def dashboard():
    """Single-page security dashboard"""
    return FileResponse(settings.STATIC_DIR / "dashboard.html", media_type="text/html")


@app.post("/api/v1/login", response_model=LoginResponse)
async def login(request: LoginRequest):
    """
    Operator login

    Any non-empty email and password are accepted; no credential validation.
    """
    token = secrets.token_urlsafe(24)
    sessions[token] = request.email
    logger.info(f"Operator logged in: {request.email}")
    return LoginResponse(token=token, email=request.email)


@app.get("/api/v1/zones", response_model=List[Zone])
async def list_zones():
    return sentinel.zones


@app.get("/api/v1/zones/status", response_model=List[ZoneStatus])
async def zone_status_table():
    """Zone Status Overview table"""
    return sentinel.zone_statuses()


@app.post("/api/v1/zones/{zone_id}/silence", response_model=Zone)
async def toggle_alarm_silence(zone_id: str):
    _require_zone(zone_id)
    return sentinel.toggle_alarm_silence(zone_id)


@app.post("/api/v1/zones/{zone_id}/source", response_model=Zone)
async def toggle_zone_source(zone_id: str, request: SourceRequest):
    """Switch a configurable zone between webcam and IP camera"""
    _require_zone(zone_id)
    zone = sentinel.toggle_zone_source(zone_id, request.type)
    # The next scan reads the new camera, so it must not be debounced
    monitor.debouncer.reset(zone_id)
    return zone


@app.post("/api/v1/zones/{zone_id}/scan", response_model=ScanResponse)
def scan_zone(zone_id: str, request: Optional[ScanRequest] = None):
    """
    Scan a zone for anomalies

    - **frame_data_uri**: Browser-captured frame; the server reads the camera when omitted
    """
    _require_zone(zone_id)
    frame = request.frame_data_uri if request else None
    logger.info(f"Scan request for {zone_id} (frame supplied: {bool(frame)})")

    try:
        result = monitor.trigger_scan(zone_id, frame_data_uri=frame)
    except LookupError as e:
        logger.error(f"Scan error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except Exception as e:
        logger.error(f"Scan error: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Scan failed: {str(e)}",
        )

    alert = None
    if result.get("alert_id"):
        alert = next((a for a in sentinel.alerts if a.id == result["alert_id"]), None)

    return ScanResponse(
        zone_id=zone_id,
        status=result.get("status", "unknown"),
        zone_status=sentinel.get_zone_status(zone_id),
        alert=alert,
        error=result.get("error"),
    )


@app.get("/api/v1/alerts", response_model=List[Alert])
async def list_alerts(
    zone_id: Optional[str] = Query(None, description="Only alerts for this zone"),
    limit: int = Query(50, ge=1, le=50, description="Maximum alerts to return"),
):
    """Centralized alerts, newest first"""
    alerts = sentinel.alerts
    if zone_id:
        alerts = [a for a in alerts if a.zone_id == zone_id]
    return alerts[:limit]


@app.get("/api/v1/alerts/latest/{zone_id}", response_model=Alert)
async def latest_alert(zone_id: str):
    alert = sentinel.get_latest_alert_for_zone(zone_id)
    if alert is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No alerts for zone: {zone_id}",
        )
    return alert


@app.post("/api/v1/sos", response_model=Alert, status_code=status.HTTP_201_CREATED)
async def sos():
    """Manual SOS button"""
    logger.warning("SOS requested from dashboard")
    return sentinel.handle_sos()


@app.get("/api/v1/buzzer", response_model=BuzzerResponse)
async def buzzer_state():
    zone_id = sentinel.buzzer_zone
    return BuzzerResponse(zone_id=zone_id, active=zone_id is not None)


@app.delete("/api/v1/buzzer", response_model=BuzzerResponse)
async def stop_buzzer():
    """Stop Alarm"""
    sentinel.set_buzzer_zone(None)
    return BuzzerResponse(zone_id=None, active=False)


@app.get("/api/v1/alarm.wav")
async def alarm_sound():
    """Two-tone siren pulse played by the dashboard while the buzzer is on"""
    return Response(content=synthesize_alarm(), media_type="audio/wav")


@app.post("/api/v1/crowd-density", response_model=CrowdDensityResult)
def analyze_crowd_density(request: CrowdDensityRequest):
    """Count heads in a zone and report density"""
    _require_zone(request.zone_id)

    try:
        return crowd_service.analyze(request.zone_id, frame_data_uri=request.frame_data_uri)
    except ValidationError as e:
        logger.error(f"Crowd density input error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except FlowError as e:
        logger.error(f"Crowd density flow error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    except Exception as e:
        logger.error(f"Crowd density error: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Crowd density analysis failed: {str(e)}",
        )


@app.get("/api/v1/crowd-density/history", response_model=List[CrowdDensityResult])
async def crowd_density_history():
    """Last results, oldest first"""
    return crowd_service.history


@app.post("/api/v1/face-match", response_model=List[FaceMatchResult])
async def face_match(
    photo: UploadFile = File(..., description="Photo of the person of interest"),
):
    """
    Search Zone A and Zone B for a person of interest

    - **photo**: Image file (JPEG, PNG, WEBP, BMP, GIF), identified by its content
    - Max file size: 10MB
    """
    logger.info(f"Face match upload: {photo.filename}")

    content = await photo.read()
    mime_type = validate_image_upload(content, filename=photo.filename)
    person_photo = bytes_to_data_uri(content, mime_type)

    try:
        return face_service.match(person_photo)
    except ValidationError as e:
        logger.error(f"Face match input error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))
    except FlowError as e:
        logger.error(f"Face match flow error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    except ValueError as e:
        logger.error(f"Face match request error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"Face match error: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Face match failed: {str(e)}",
        )


@app.post("/api/v1/emergency-call", response_model=EmergencyCallResponse)
def emergency_call(request: EmergencyCallRequest):
    """Place a (mock) emergency call"""
    try:
        result = flows["emergencyCallFlow"]({"event_description": request.event_description})
    except FlowError as e:
        logger.error(f"Emergency call flow error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    except Exception as e:
        logger.error(f"Emergency call error: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Emergency call failed: {str(e)}",
        )

    sentinel.notify("Emergency Call Service", result.status)
    return EmergencyCallResponse(**result.model_dump())


@app.get("/api/v1/notifications", response_model=List[Notification])
async def list_notifications():
    return sentinel.notifications


@app.get("/api/v1/flows", response_model=List[str])
async def list_flows():
    return sorted(flows)


@app.post("/api/v1/flows/{flow_name}", response_model=Dict[str, Any])
def run_flow(flow_name: str, payload: Dict[str, Any]):
    """Run any registered flow with a JSON body matching its input schema"""
    flow = flows.get(flow_name)
    if flow is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Flow not found: {flow_name}",
        )

    try:
        return flow(payload).model_dump()
    except ValidationError as e:
        logger.error(f"Flow input error: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.errors(include_url=False, include_context=False),
        )
    except FlowError as e:
        logger.error(f"Flow error: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))


# CLI Support
def main_cli():
    """Command-line interface"""
    parser = argparse.ArgumentParser(
        description="Drishti Sentinel - CLI/API Mode"
    )
    parser.add_argument("--api", action="store_true", help="Run as API server")
    parser.add_argument("--host", type=str, default="0.0.0.0", help="API host")
    parser.add_argument("--port", type=int, default=8000, help="API port")
    parser.add_argument("--scan", type=str, metavar="ZONE_ID", help="Scan one zone for anomalies")
    parser.add_argument("--crowd", type=str, metavar="ZONE_ID", help="Run crowd density analysis on a zone")
    parser.add_argument("--monitor", action="store_true", help="Run the auto-scan loop in the foreground")

    args = parser.parse_args()

    # Mode 1: Run API server
    if args.api:
        logger.info(f"Starting API server at {args.host}:{args.port}")
        uvicorn.run(app, host=args.host, port=args.port)
        return

    if not (args.scan or args.crowd or args.monitor):
        parser.print_help()
        print("\n" + "=" * 70)
        print("TIP: Use --api to start the API server and open /dashboard")
        print("   python app.py --api")
        print("=" * 70)
        return

    init_services(run_side_effects_async=False)

    # Mode 2: Single zone scan
    if args.scan:
        try:
            result = scan_workflow.run(args.scan)
        except LookupError as e:
            print(f"\nERROR: {e}")
            return
        zone_status = sentinel.get_zone_status(args.scan)
        print("\n" + "=" * 70)
        print(f"SCAN RESULT: {zone_status.zone_name}")
        print("=" * 70)
        print(f"Outcome:     {result.get('status')}")
        print(f"Status:      {zone_status.status}")
        print(f"Risk Level:  {zone_status.risk_level}")
        print(f"Anomaly:     {zone_status.anomaly}")
        print(f"Description: {zone_status.description}")
        print("=" * 70 + "\n")

    # Mode 3: Crowd density
    if args.crowd:
        try:
            result = crowd_service.analyze(args.crowd)
        except (LookupError, FlowError) as e:
            print(f"\nERROR: {e}")
            return
        print("\n" + "=" * 70)
        print(f"Head Count:    {result.head_count}")
        print(f"Density Level: {result.density_level}")
        print(f"Report:        {result.report}")
        print("=" * 70 + "\n")

    # Mode 4: Foreground monitor
    if args.monitor:
        interval = settings.AUTO_SCAN_INTERVAL or 10.0
        monitor.interval = interval
        logger.info(f"Monitoring all zones every {interval}s (Ctrl+C to stop)")
        monitor.start()
        try:
            while monitor.running:
                time.sleep(1.0)
        except KeyboardInterrupt:
            monitor.stop()
            buzzer.stop()


if __name__ == "__main__":
    main_cli()
