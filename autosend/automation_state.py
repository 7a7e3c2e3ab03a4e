from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional


class AutomationPhase(Enum):
    IDLE = "idle"
    AWAITING_TARGET_APP = "awaiting_target_app"
    SEARCHING = "searching"
    CONFIRMING = "confirming"
    GAVE_UP = "gave_up"


class SendOutcome(Enum):
    SENT = "sent"
    GAVE_UP = "gave_up"
    SERVICE_LOST = "service_lost"
    LAUNCH_FAILED = "launch_failed"


@dataclass
class SendRequest:
    phone: str
    message: str
    # Called with (request, SendOutcome) once the attempt is finished
    on_complete: Optional[Callable] = None


@dataclass
class AutomationState:
    """The one in-flight send attempt"""
    pending: Optional[SendRequest] = None
    awaiting_target_app: bool = False
    retry_count: int = 0
    phase: AutomationPhase = AutomationPhase.IDLE

    @property
    def busy(self):
        return self.phase is not AutomationPhase.IDLE

    def start(self, request):
        self.pending = request
        self.awaiting_target_app = True
        self.retry_count = 0
        self.phase = AutomationPhase.AWAITING_TARGET_APP

    def reset(self):
        self.pending = None
        self.awaiting_target_app = False
        self.retry_count = 0
        self.phase = AutomationPhase.IDLE
