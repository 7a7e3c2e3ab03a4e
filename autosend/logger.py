import os
import logging

LOG_DIR = os.getenv("AUTOSEND_LOG_DIR", "logs")
os.makedirs(LOG_DIR, exist_ok=True)

logger = logging.getLogger("autosend")
logger.setLevel(logging.DEBUG if os.getenv("AUTOSEND_DEBUG") else logging.INFO)

# Prevent adding handlers multiple times
if not logger.handlers:
    # File handler
    file_handler = logging.FileHandler(os.path.join(LOG_DIR, "autosend.log"), mode="a")
    file_handler.setFormatter(logging.Formatter("%(asctime)s | %(levelname)s | %(message)s"))
    logger.addHandler(file_handler)

    # Console handler
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(logging.Formatter("%(levelname)s | %(message)s"))
    logger.addHandler(console_handler)
