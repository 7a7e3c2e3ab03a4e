import pytest

from autosend.automation_state import SendOutcome
from autosend.bridge import BridgeError, CapabilityBridge
from autosend.config import AUTOMATION_SERVICE_ID
from autosend.events import EventKind, UiChangeNotification
from tests.conftest import send_button_tree

OTHER_SERVICE = "com.google.android.marvin.talkback/.TalkBackService"


@pytest.fixture
def bridge(platform):
    return CapabilityBridge(platform)


def test_enabled_when_service_listed(bridge, platform):
    platform.enabled = f"{OTHER_SERVICE}:{AUTOMATION_SERVICE_ID}"
    assert bridge.handle("isAccessibilityEnabled") is True


def test_disabled_when_missing(bridge, platform):
    platform.enabled = OTHER_SERVICE
    assert bridge.is_accessibility_enabled() is False
    platform.enabled = ""
    assert bridge.is_accessibility_enabled() is False


def test_open_settings_always_succeeds(bridge, platform):
    assert bridge.handle("openAccessibilitySettings") is True
    assert platform.settings_opened == 1


def test_send_when_not_enabled(bridge, platform, service):
    with pytest.raises(BridgeError) as excinfo:
        bridge.handle("sendWhatsAppMessage", {"phone": "0750 1234567", "message": "hello"})
    assert excinfo.value.code == "NOT_ENABLED"
    assert excinfo.value.details is None
    assert platform.launches == []


def test_send_delegates_to_service(bridge, platform, service, scheduler):
    platform.enabled = AUTOMATION_SERVICE_ID
    assert bridge.handle("sendWhatsAppMessage", {"phone": "0750 1234567", "message": "hello"}) is True
    assert platform.launches == [("https://wa.me/9647501234567?text=hello", "com.whatsapp")]
    assert service.machine.state.pending.message == "hello"


def test_send_reports_false_without_service(bridge, platform):
    platform.enabled = AUTOMATION_SERVICE_ID
    assert bridge.handle("sendWhatsAppMessage", {"phone": "0750 1234567", "message": "hi"}) is False


def test_send_with_missing_arguments(bridge, platform, service):
    platform.enabled = AUTOMATION_SERVICE_ID
    assert bridge.handle("sendWhatsAppMessage", {"phone": None}) is True
    assert platform.launches == [("https://wa.me/964?text=", "com.whatsapp")]


def test_send_reports_outcome_callback(bridge, platform, service, scheduler):
    platform.enabled = AUTOMATION_SERVICE_ID
    platform.trees = [send_button_tree()]
    outcomes = []
    bridge.send_whatsapp_message("0750 1234567", "hello", lambda r, o: outcomes.append(o))
    platform.listener(UiChangeNotification("com.whatsapp", EventKind.WINDOW_CONTENT_CHANGED))
    scheduler.advance(2)
    assert outcomes == [SendOutcome.SENT]


def test_unknown_method(bridge):
    with pytest.raises(BridgeError) as excinfo:
        bridge.handle("sendTelegramMessage", {})
    assert excinfo.value.code == "NOT_IMPLEMENTED"
