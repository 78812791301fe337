"""
Alarm Service
Synthesizes the two-tone siren pulse and drives the buzzer while a zone is alarmed
"""

import io
import threading
import wave
from typing import Callable, Optional

import numpy as np

from drishti.config.settings import settings
from drishti.services.sentinel_service import SentinelService
from drishti.utils.logger import get_logger

logger = get_logger(__name__)

SAMPLE_RATE = 22050
A5_HZ = 880.0
C6_HZ = 1046.50
EIGHTH_NOTE_SECONDS = 0.25  # at 120 bpm
SECOND_TONE_OFFSET = 0.5


def _tone(frequency: float, duration: float, sample_rate: int) -> np.ndarray:
    """Sine tone with a short attack/release envelope to avoid clicks"""
    t = np.arange(int(duration * sample_rate)) / sample_rate
    wave_data = np.sin(2 * np.pi * frequency * t)

    ramp = max(1, int(0.01 * sample_rate))
    envelope = np.ones_like(wave_data)
    envelope[:ramp] = np.linspace(0.0, 1.0, ramp)
    envelope[-ramp:] = np.linspace(1.0, 0.0, ramp)
    return wave_data * envelope


def synthesize_alarm(sample_rate: int = SAMPLE_RATE, volume: float = 0.6) -> bytes:
    """
    Build one siren pulse: A5 at t=0, C6 at t=0.5s, eighth notes

    Returns:
        16-bit mono WAV file bytes
    """
    total = int((SECOND_TONE_OFFSET + EIGHTH_NOTE_SECONDS) * sample_rate)
    signal = np.zeros(total)

    first = _tone(A5_HZ, EIGHTH_NOTE_SECONDS, sample_rate)
    second = _tone(C6_HZ, EIGHTH_NOTE_SECONDS, sample_rate)
    offset = int(SECOND_TONE_OFFSET * sample_rate)
    signal[: len(first)] += first
    signal[offset: offset + len(second)] += second

    pcm = (np.clip(signal * volume, -1.0, 1.0) * 32767).astype(np.int16)

    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav_file:
        wav_file.setnchannels(1)
        wav_file.setsampwidth(2)
        wav_file.setframerate(sample_rate)
        wav_file.writeframes(pcm.tobytes())
    return buffer.getvalue()


class BuzzerController:
    """
    Plays a pulse immediately when the buzzer turns on and then every
    `interval` seconds until it turns off
    """

    def __init__(
        self,
        sentinel: SentinelService,
        player: Optional[Callable[[Optional[str]], None]] = None,
        interval: Optional[float] = None,
    ):
        self.sentinel = sentinel
        self.player = player or self._log_pulse
        self.interval = settings.BUZZER_INTERVAL if interval is None else interval
        self.pulse_count = 0
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

        sentinel.add_buzzer_listener(self.on_buzzer_change)
        sentinel.on_alarm_pulse = self.pulse

    @staticmethod
    def _log_pulse(zone_id: Optional[str]):
        logger.warning(f"ALARM PULSE ({zone_id or 'single'})")

    @property
    def active(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def pulse(self, zone_id: Optional[str] = None):
        """Play one pulse"""
        self.pulse_count += 1
        try:
            self.player(zone_id)
        except Exception as e:
            logger.error(f"Alarm playback failed: {e}")

    def on_buzzer_change(self, zone_id: Optional[str]):
        if zone_id:
            self.start(zone_id)
        else:
            self.stop()

    def start(self, zone_id: str):
        with self._lock:
            self._stop_thread()
            self._stop_event = threading.Event()
            self._thread = threading.Thread(
                target=self._loop, args=(zone_id, self._stop_event), name="buzzer", daemon=True
            )
            self._thread.start()

    def stop(self):
        with self._lock:
            self._stop_thread()

    def _stop_thread(self):
        if self._thread is not None:
            self._stop_event.set()
            if self._thread is not threading.current_thread():
                self._thread.join(timeout=self.interval + 1)
            self._thread = None

    def _loop(self, zone_id: str, stop_event: threading.Event):
        self.pulse(zone_id)
        while not stop_event.wait(self.interval):
            self.pulse(zone_id)
