"""
Logging utilities for the tool server.
All output goes to stderr; stdout carries the JSON-RPC stream.
"""
import logging
import json
from .config import config

# Configure logger
logger = logging.getLogger('mturk_human')
logger.setLevel(logging.DEBUG if config.LOGGING_ENABLED else logging.INFO)

# Add handlers if not already configured
if not logger.handlers:
    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    handler = logging.StreamHandler()
    handler.setFormatter(formatter)
    logger.addHandler(handler)

    if config.LOGGING_ENABLED:
        try:
            file_handler = logging.FileHandler(config.LOG_FILE, mode='a')
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)
        except OSError as e:
            logger.warning(f"Could not open log file {config.LOG_FILE}: {e}")


def log_payload(label: str, payload) -> None:
    """Log a marketplace request or response for debugging."""
    if not logger.isEnabledFor(logging.DEBUG):
        return
    try:
        logger.debug(f"{label}: {json.dumps(payload, indent=2, default=str)}")
    except (TypeError, ValueError) as e:
        logger.warning(f"Could not log {label}: {e}")
