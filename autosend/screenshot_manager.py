import os
from datetime import datetime
from autosend.logger import logger

SCREENSHOT_DIR = os.getenv("AUTOSEND_SCREENSHOT_DIR", "screenshots")


def take_screenshot(d, label="give_up"):
    """Take a screenshot and save it to the screenshots directory."""
    os.makedirs(SCREENSHOT_DIR, exist_ok=True)
    timestamp = datetime.now().strftime("%H%M%S")
    path = os.path.join(SCREENSHOT_DIR, f"{label}_{timestamp}.png")
    d.screenshot(path)
    logger.info(f"📸 Screenshot saved: {path}")
    return path
