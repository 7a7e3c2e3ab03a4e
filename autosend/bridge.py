from autosend import accessibility_service
from autosend.config import AUTOMATION_SERVICE_ID, BRIDGE_CHANNEL
from autosend.logger import logger


class BridgeError(Exception):
    """Tagged error returned to the calling application."""

    def __init__(self, code, message, details=None):
        super().__init__(f"{code}: {message}")
        self.code = code
        self.message = message
        self.details = details


class CapabilityBridge:
    """Answers the calling application's method calls on the whatsapp channel."""

    channel = BRIDGE_CHANNEL

    def __init__(self, platform, service_id=AUTOMATION_SERVICE_ID):
        self.platform = platform
        self.service_id = service_id

    def is_accessibility_enabled(self):
        enabled = self.platform.enabled_services()
        return self.service_id in [s.strip() for s in enabled.split(":") if s.strip()]

    def open_accessibility_settings(self):
        # Fire and forget, the caller always sees success
        if not self.platform.open_accessibility_settings():
            logger.warning("⚠️ Accessibility settings did not open")
        return True

    def send_whatsapp_message(self, phone, message, on_complete=None):
        if not self.is_accessibility_enabled():
            raise BridgeError("NOT_ENABLED", "Accessibility service not enabled")
        return accessibility_service.send_message(phone, message, on_complete)

    def handle(self, method, arguments=None):
        """Dispatch one method call by name, as the call bridge delivers it."""
        arguments = arguments or {}
        logger.debug(f"Bridge call {method} on {self.channel}")
        if method == "isAccessibilityEnabled":
            return self.is_accessibility_enabled()
        if method == "openAccessibilitySettings":
            return self.open_accessibility_settings()
        if method == "sendWhatsAppMessage":
            return self.send_whatsapp_message(
                arguments.get("phone") or "",
                arguments.get("message") or "",
            )
        raise BridgeError("NOT_IMPLEMENTED", f"Method {method} is not implemented")
