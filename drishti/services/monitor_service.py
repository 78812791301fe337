"""
Monitor Service
Debounced scan triggers and the optional periodic auto-scan loop
"""

import threading
import time
from typing import Callable, Dict, List, Optional

from drishti.config.settings import settings
from drishti.services.sentinel_service import SentinelService
from drishti.utils.logger import get_logger
from drishti.video.frame_grabber import FrameGrabber
from drishti.workflows.scan_workflow import ScanWorkflow

logger = get_logger(__name__)


class ScanDebouncer:
    """Drop per-zone triggers that arrive within `interval` of the last accepted one"""

    def __init__(self, interval: float, clock: Callable[[], float] = time.monotonic):
        self.interval = interval
        self._clock = clock
        self._last_accepted: Dict[str, float] = {}
        self._lock = threading.Lock()

    def accept(self, zone_id: str) -> bool:
        now = self._clock()
        with self._lock:
            last = self._last_accepted.get(zone_id)
            if last is not None and now - last < self.interval:
                return False
            self._last_accepted[zone_id] = now
            return True

    def reset(self, zone_id: Optional[str] = None):
        with self._lock:
            if zone_id is None:
                self._last_accepted.clear()
            else:
                self._last_accepted.pop(zone_id, None)


class MonitorService:
    """Runs scans for every server-capturable zone on a fixed period"""

    def __init__(
        self,
        sentinel: SentinelService,
        workflow: ScanWorkflow,
        interval: Optional[float] = None,
        debounce_seconds: Optional[float] = None,
        frame_grabber: Optional[FrameGrabber] = None,
    ):
        self.sentinel = sentinel
        self.workflow = workflow
        self.interval = settings.AUTO_SCAN_INTERVAL if interval is None else interval
        self.debouncer = ScanDebouncer(
            settings.SCAN_DEBOUNCE_SECONDS if debounce_seconds is None else debounce_seconds
        )
        self.frame_grabber = frame_grabber or workflow.frame_grabber
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def trigger_scan(self, zone_id: str, frame_data_uri: Optional[str] = None) -> Dict:
        """
        Debounced entry point for manual and automatic scans

        Returns:
            Final scan state, or {'status': 'debounced'} when dropped
        """
        if self.sentinel.get_zone_by_id(zone_id) is None:
            raise LookupError(f"Unknown zone: {zone_id}")

        if not self.debouncer.accept(zone_id):
            logger.info(f"Scan trigger for {zone_id} debounced")
            return {"zone_id": zone_id, "status": "debounced"}

        return self.workflow.run(zone_id, frame_data_uri=frame_data_uri)

    def scan_all(self) -> List[Dict]:
        """One pass over every zone the server can read itself"""
        results = []
        for zone in self.sentinel.zones:
            if not self.frame_grabber.can_grab(zone):
                continue
            try:
                results.append(self.trigger_scan(zone.id))
            except Exception as e:
                logger.error(f"Auto-scan failed for {zone.name}: {e}", exc_info=True)
        return results

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> bool:
        """Start the background loop; no-op when disabled or already running"""
        if self.interval <= 0:
            logger.info("Auto-scan disabled (AUTO_SCAN_INTERVAL=0)")
            return False
        if self.running:
            return True

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name="auto-scan", daemon=True)
        self._thread.start()
        logger.info(f"Auto-scan started every {self.interval}s")
        return True

    def stop(self, timeout: float = 5.0):
        if not self.running:
            return
        self._stop_event.set()
        self._thread.join(timeout=timeout)
        self._thread = None
        logger.info("Auto-scan stopped")

    def _loop(self):
        while not self._stop_event.is_set():
            self.scan_all()
            self._stop_event.wait(self.interval)
