"""
config.py
- Defines global configuration values derived from environment variables.
- Configures loguru once for every runner and logic module.
"""

import os
import sys

from loguru import logger

# --- Runtime Behavior Flags ---
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
DRY_RUN = os.getenv("DRY_RUN", "false").lower() == "true"
RUN_ONCE = os.getenv("RUN_ONCE", "false").lower() == "true"

# --- Logging ---
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "false").lower() == "true"
LOG_FILE = os.getenv("LOG_FILE", "/var/log/routing-flow/routing-flow.log")
LOG_LEVEL = "DEBUG" if DEBUG else "INFO"
LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - "
    "<level>{message}</level>"
)

# --- Config Paths ---
CONFIG_PATH = os.getenv("ROUTING_FLOW_CONFIG", "/etc/routing-flow/config.yml")
NIC_CONFIG_PATH = os.getenv("NIC_CONFIG", "nic.json")

# --- HTTP API ---
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "6060"))

# --- Error Reporting ---
SENTRY_DSN = os.getenv("SENTRY_DSN")


def configure_logging(level=None):
    """Replace loguru's default sink with the project's stderr (and optional file) sinks."""
    level = level or LOG_LEVEL
    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT, colorize=True)
    if LOG_TO_FILE:
        logger.add(LOG_FILE, level=level, rotation="10 MB", retention=5)
