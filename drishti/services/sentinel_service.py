"""
Sentinel Service
Holds the shared dashboard state (alerts, zones, zone statuses, buzzer,
notifications) and runs the new-alert side effects
"""

import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Dict, List, Optional

from drishti.config.settings import settings
from drishti.flows import EmergencyCallFlow, FlowError
from drishti.state.models import (
    ALL_ZONES,
    SOS_ALERT_TYPE,
    Alert,
    Coordinates,
    Notification,
    Zone,
    ZoneStatus,
    is_high_risk,
)
from drishti.utils.logger import get_logger

logger = get_logger(__name__)

BuzzerListener = Callable[[Optional[str]], None]


class SentinelService:
    """Thread-safe in-memory state for one dashboard"""

    def __init__(
        self,
        zones: Optional[List[Dict]] = None,
        emergency_call_flow: Optional[EmergencyCallFlow] = None,
        run_side_effects_async: bool = True,
    ):
        """
        Args:
            zones: Zone definitions (defaults to settings.default_zones())
            emergency_call_flow: Flow used for high-risk alerts
            run_side_effects_async: Place emergency calls on a worker thread
                so add_alert never blocks on the call service
        """
        zone_defs = zones if zones is not None else settings.default_zones()
        self._zones: List[Zone] = [Zone.model_validate(z) for z in zone_defs]
        self._original_ip_addresses = {z.id: z.ip_address for z in self._zones}
        self._statuses: Dict[str, ZoneStatus] = {
            z.id: ZoneStatus(zone_id=z.id, zone_name=z.name) for z in self._zones
        }
        self._alerts: List[Alert] = []
        self._notifications: List[Notification] = []
        self._processing: set = set()
        self._buzzer_zone: Optional[str] = None
        self._last_played_alert_id: Optional[str] = None
        self._buzzer_listeners: List[BuzzerListener] = []
        self._lock = threading.RLock()

        self.emergency_call_flow = emergency_call_flow or EmergencyCallFlow()
        self._executor = (
            ThreadPoolExecutor(max_workers=2, thread_name_prefix="emergency-call")
            if run_side_effects_async
            else None
        )

        # Hook for a single audible pulse (SOS); set by the buzzer controller
        self.on_alarm_pulse: Optional[Callable[[], None]] = None

        logger.info(f"Sentinel service initialized with {len(self._zones)} zones")

    # ------------------------------------------------------------------ zones

    @property
    def zones(self) -> List[Zone]:
        with self._lock:
            return [z.model_copy() for z in self._zones]

    def get_zone_by_id(self, zone_id: str) -> Optional[Zone]:
        with self._lock:
            zone = self._find_zone(zone_id)
            return zone.model_copy() if zone else None

    def _find_zone(self, zone_id: str) -> Optional[Zone]:
        for zone in self._zones:
            if zone.id == zone_id:
                return zone
        return None

    def toggle_alarm_silence(self, zone_id: str) -> Optional[Zone]:
        """Flip a zone's silence flag; silencing stops its buzzer"""
        stop_buzzer = False
        with self._lock:
            zone = self._find_zone(zone_id)
            if zone is None:
                return None
            zone.alarm_silenced = not zone.alarm_silenced
            stop_buzzer = self._buzzer_zone == zone_id
            logger.info(
                f"Alarm for {zone.name} {'silenced' if zone.alarm_silenced else 'armed'}"
            )
            result = zone.model_copy()

        if stop_buzzer:
            self.set_buzzer_zone(None)
        return result

    def toggle_zone_source(self, zone_id: str, new_type: str) -> Optional[Zone]:
        """
        Switch a configurable zone between webcam and IP camera

        Switching back to ip-camera restores the zone's original address.
        Non-configurable zones are returned unchanged.
        """
        if new_type not in ("webcam", "ip-camera"):
            raise ValueError(f"Unknown zone type: {new_type}")

        with self._lock:
            zone = self._find_zone(zone_id)
            if zone is None:
                return None
            if not zone.configurable:
                logger.warning(f"{zone.name} is not configurable, source unchanged")
                return zone.model_copy()

            zone.type = new_type
            zone.ip_address = (
                self._original_ip_addresses.get(zone_id) if new_type == "ip-camera" else None
            )
            if new_type == "webcam" and zone.device_index is None:
                zone.device_index = settings.WEBCAM_DEVICE_INDEX
            logger.info(f"{zone.name} source switched to {new_type}")
            return zone.model_copy()

    # ----------------------------------------------------------- zone status

    def zone_statuses(self) -> List[ZoneStatus]:
        with self._lock:
            return [self._statuses[z.id].model_copy() for z in self._zones]

    def get_zone_status(self, zone_id: str) -> Optional[ZoneStatus]:
        with self._lock:
            status = self._statuses.get(zone_id)
            return status.model_copy() if status else None

    def update_zone_status(self, zone_id: str, **fields) -> Optional[ZoneStatus]:
        with self._lock:
            current = self._statuses.get(zone_id)
            if current is None:
                return None
            updated = ZoneStatus.model_validate({**current.model_dump(), **fields})
            self._statuses[zone_id] = updated
            return updated.model_copy()

    # ------------------------------------------------------------ processing

    def is_processing(self, zone_id: str) -> bool:
        with self._lock:
            return zone_id in self._processing

    def set_processing(self, zone_id: str, status: bool):
        with self._lock:
            if status:
                self._processing.add(zone_id)
            else:
                self._processing.discard(zone_id)

    def try_begin_processing(self, zone_id: str) -> bool:
        """Mark the zone processing unless it already is; returns success"""
        with self._lock:
            if zone_id in self._processing:
                return False
            self._processing.add(zone_id)
            return True

    # ---------------------------------------------------------------- buzzer

    @property
    def buzzer_zone(self) -> Optional[str]:
        with self._lock:
            return self._buzzer_zone

    def set_buzzer_zone(self, zone_id: Optional[str]):
        with self._lock:
            if self._buzzer_zone == zone_id:
                return
            self._buzzer_zone = zone_id
            listeners = list(self._buzzer_listeners)

        if zone_id:
            logger.warning(f"Buzzer ON for {zone_id}")
        else:
            logger.info("Buzzer OFF")
        for listener in listeners:
            listener(zone_id)

    def add_buzzer_listener(self, listener: BuzzerListener):
        with self._lock:
            self._buzzer_listeners.append(listener)

    # ---------------------------------------------------------------- alerts

    @property
    def alerts(self) -> List[Alert]:
        with self._lock:
            return list(self._alerts)

    def get_latest_alert_for_zone(self, zone_id: str) -> Optional[Alert]:
        with self._lock:
            for alert in self._alerts:
                if alert.zone_id == zone_id:
                    return alert
            return None

    def add_alert(
        self,
        type: str,
        description: str,
        risk_level: str,
        zone_id: str,
        location: str,
        coordinates: Optional[Coordinates] = None,
    ) -> Alert:
        """
        Record a new alert (newest first, capped) and run its side effects

        Returns:
            The stored alert
        """
        alert = Alert(
            type=type,
            description=description,
            risk_level=risk_level,
            zone_id=zone_id,
            location=location,
            coordinates=coordinates,
        )

        with self._lock:
            self._alerts = [alert] + self._alerts[: settings.ALERT_HISTORY_LIMIT - 1]

        log = logger.warning if is_high_risk(alert.risk_level) else logger.info
        log(f"ALERT [{alert.risk_level}] {alert.type} in {alert.location}: {alert.description}")

        self._on_new_alert(alert)
        return alert

    def _on_new_alert(self, alert: Alert):
        if not is_high_risk(alert.risk_level):
            return

        sound_buzzer = False
        with self._lock:
            zone = self._find_zone(alert.zone_id)
            zone_name = zone.name if zone else None
            if (
                zone is not None
                and alert.id != self._last_played_alert_id
                and not zone.alarm_silenced
            ):
                self._last_played_alert_id = alert.id
                sound_buzzer = alert.type != SOS_ALERT_TYPE

        if sound_buzzer:
            self.set_buzzer_zone(alert.zone_id)

        self.handle_emergency_call(
            f"High risk event: {alert.type} detected in {zone_name or alert.location}. "
            f"Description: {alert.description}"
        )

    def handle_emergency_call(self, event_description: str):
        """Place an emergency call, on the worker pool when configured"""
        if self._executor is not None:
            self._executor.submit(self._place_emergency_call, event_description)
        else:
            self._place_emergency_call(event_description)

    def _place_emergency_call(self, event_description: str):
        try:
            response = self.emergency_call_flow({"event_description": event_description})
        except (FlowError, ValueError) as e:
            logger.error(f"Failed to initiate emergency call: {e}")
            self.notify(
                "Emergency Call Failed",
                "Could not contact emergency services.",
                variant="destructive",
            )
            return None

        logger.info(f"Emergency call initiated: {response.status}")
        self.notify("Emergency Call Service", response.status)
        return response

    def handle_sos(self) -> Alert:
        """Manual SOS: critical alert, un-silence every zone, one alarm pulse"""
        alert = self.add_alert(
            type=SOS_ALERT_TYPE,
            description="Manual SOS button activated. Immediate assistance required.",
            risk_level="critical",
            zone_id=ALL_ZONES,
            location="Command Center",
        )
        with self._lock:
            for zone in self._zones:
                zone.alarm_silenced = False

        self.notify(
            "SOS ACTIVATED",
            "Emergency alert broadcasted to all units.",
            variant="destructive",
        )
        if self.on_alarm_pulse is not None:
            self.on_alarm_pulse()
        return alert

    # --------------------------------------------------------- notifications

    def notify(self, title: str, description: str = "", variant: str = "default") -> Notification:
        notification = Notification(title=title, description=description, variant=variant)
        with self._lock:
            self._notifications = [notification] + self._notifications[
                : settings.NOTIFICATION_LIMIT - 1
            ]
        return notification

    @property
    def notifications(self) -> List[Notification]:
        with self._lock:
            return list(self._notifications)

    def shutdown(self):
        if self._executor is not None:
            self._executor.shutdown(wait=False)
