"""
Emergency call flow

Mock implementation: logs the call instead of placing it. A real deployment
would swap initiate_phone_call for a telephony provider.
"""
import random
import string
import time
from typing import Optional

from drishti.config.settings import settings
from drishti.flows.base import Flow
from drishti.flows.schemas import EmergencyCallInput, EmergencyCallOutput, PhoneCallResult
from drishti.utils.logger import get_logger

logger = get_logger(__name__)

_BASE36 = string.digits + string.ascii_lowercase


def _random_base36(length: int = 11) -> str:
    return "".join(random.choice(_BASE36) for _ in range(length))


class EmergencyCallFlow(Flow):
    """Initiate a phone call to the configured emergency number"""

    name = "emergencyCallFlow"
    input_model = EmergencyCallInput
    output_model = EmergencyCallOutput

    def __init__(
        self,
        llm=None,
        emergency_number: Optional[str] = None,
        call_delay: Optional[float] = None,
    ):
        super().__init__(llm)
        self.emergency_number = emergency_number or settings.EMERGENCY_NUMBER
        self.call_delay = settings.EMERGENCY_CALL_DELAY if call_delay is None else call_delay

    def initiate_phone_call(self, reason: str) -> PhoneCallResult:
        """Mock call tool: simulates the provider round trip"""
        logger.warning(f"MOCK_CALL_SERVICE: Calling {self.emergency_number}. Reason: {reason}")
        if self.call_delay > 0:
            time.sleep(self.call_delay)
        call_sid = f"call_{_random_base36()}"
        logger.info(f"MOCK_CALL_SERVICE: Call initiated with SID: {call_sid}")
        return PhoneCallResult(call_sid=call_sid, status="initiated")

    def run(self, data):
        logger.info(f"Starting emergency call flow for event: {data.event_description}")

        call_result = self.initiate_phone_call(data.event_description)

        if call_result.status == "initiated":
            return EmergencyCallOutput(
                status=f"Successfully initiated emergency call to {self.emergency_number}.",
                confirmation_number=call_result.call_sid,
            )
        return EmergencyCallOutput(
            status=f"Failed to initiate emergency call. Status: {call_result.status}",
        )
