from urllib.parse import quote
from autosend.config import LINK_HOST, TARGET_PACKAGE
from autosend.logger import logger
from autosend.phone import format_phone_number

# Same unescaped set as android.net.Uri.encode
_URI_SAFE = "!*'()"


def build_deep_link(phone, message, host=LINK_HOST):
    """Build the click-to-chat link for an already normalized number."""
    return f"https://{host}/{phone}?text={quote(message or '', safe=_URI_SAFE)}"


def request_launch(service, phone, message, package=TARGET_PACKAGE):
    """Open the target app on a prefilled chat screen.

    Returns False when there is no connected service to issue the request
    through, or when the platform refused to start the activity.
    """
    if service is None:
        logger.warning("⚠️ No automation service connected, cannot launch chat")
        return False

    formatted = format_phone_number(phone)
    url = build_deep_link(formatted, message)
    logger.info(f"🚀 Opening {package} chat for {formatted}")
    return service.open_uri(url, package)
