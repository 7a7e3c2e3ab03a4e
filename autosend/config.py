import os
from dotenv import load_dotenv

# === Setup ===
load_dotenv(override=True)


def get_bool(name, default=False):
    """Read a boolean flag from the environment."""
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def get_float(name, default):
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return float(value)


def get_int(name, default):
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    return int(value)


# === Target App Configuration ===
TARGET_PACKAGE = os.getenv("AUTOSEND_TARGET_PACKAGE", "com.whatsapp")
LINK_HOST = os.getenv("AUTOSEND_LINK_HOST", "wa.me")
COUNTRY_CODE = os.getenv("AUTOSEND_COUNTRY_CODE", "964")

# === Send Control Heuristics ===
SEND_RESOURCE_ID = os.getenv("AUTOSEND_SEND_RESOURCE_ID", f"{TARGET_PACKAGE}:id/send")
SEND_LABEL = os.getenv("AUTOSEND_SEND_LABEL", "Send")
IMAGE_BUTTON_CLASS = "android.widget.ImageButton"
RIGHT_EDGE_RATIO = get_float("AUTOSEND_RIGHT_EDGE_RATIO", 0.7)

# === Timing (seconds) ===
SEARCH_DELAY = get_float("AUTOSEND_SEARCH_DELAY", 0.5)
BACK_DELAY = get_float("AUTOSEND_BACK_DELAY", 0.3)
NOTIFICATION_TIMEOUT = get_float("AUTOSEND_NOTIFICATION_TIMEOUT", 0.1)
POLL_INTERVAL = get_float("AUTOSEND_POLL_INTERVAL", 0.25)
SEND_TIMEOUT = get_float("AUTOSEND_SEND_TIMEOUT", 30.0)
MAX_RETRIES = get_int("AUTOSEND_MAX_RETRIES", 10)
# Without a target-app event, start searching anyway after this long;
# unset means SEARCH_DELAY * MAX_RETRIES
AWAIT_TIMEOUT = get_float("AUTOSEND_AWAIT_TIMEOUT", None)

# === Host Application ===
HOST_PACKAGE = os.getenv("AUTOSEND_HOST_PACKAGE", "com.example.autosend")
AUTOMATION_SERVICE_ID = os.getenv(
    "AUTOSEND_SERVICE_ID",
    f"{HOST_PACKAGE}/{HOST_PACKAGE}.WhatsAppAccessibilityService"
)
BRIDGE_CHANNEL = f"{HOST_PACKAGE}/whatsapp"

# === Behaviour ===
# "queue" holds one waiting request, "reject" refuses anything while busy
OVERLAP_POLICY = os.getenv("AUTOSEND_OVERLAP_POLICY", "queue").strip().lower()
SCREENSHOT_ON_GIVE_UP = get_bool("AUTOSEND_SCREENSHOT_ON_GIVE_UP", False)
DEVICE_SERIAL = os.getenv("AUTOSEND_DEVICE_SERIAL") or None
