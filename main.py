import sys

from autosend.accessibility_service import AutomationService
from autosend.automation_state import SendOutcome
from autosend.bridge import BridgeError, CapabilityBridge
from autosend.config import SEND_TIMEOUT
from autosend.device_manager import DevicePlatform, connect_to_device
from autosend.logger import logger
from autosend.scheduler import Scheduler


def main(argv=None):
    """Send one WhatsApp message by driving the connected device."""
    argv = sys.argv[1:] if argv is None else argv
    phone = argv[0] if len(argv) > 0 else input("📞 Phone number: ").strip()
    message = argv[1] if len(argv) > 1 else input("💬 Message: ").strip()

    scheduler = Scheduler()
    d = connect_to_device()
    platform = DevicePlatform(d, scheduler)
    bridge = CapabilityBridge(platform)
    service = AutomationService(platform, scheduler)
    service.connect()

    outcome = {}

    def on_complete(request, result):
        outcome["result"] = result

    try:
        try:
            launched = bridge.send_whatsapp_message(phone, message, on_complete)
        except BridgeError as e:
            logger.error(f"❌ {e.message}")
            answer = input("Open accessibility settings now? (y/n): ").strip().lower()
            if answer == "y":
                bridge.open_accessibility_settings()
            return 2

        if not launched:
            logger.error("❌ WhatsApp could not be launched")
            return 1

        if not scheduler.run_until(lambda: "result" in outcome and not service.machine.busy, timeout=SEND_TIMEOUT):
            logger.error(f"❌ No outcome after {SEND_TIMEOUT:.0f}s")
            return 1
        logger.info(f"🏁 Outcome: {outcome['result'].value}")
        return 0 if outcome["result"] is SendOutcome.SENT else 1
    finally:
        service.destroy()


if __name__ == "__main__":
    sys.exit(main())
