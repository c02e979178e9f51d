"""Bootstrap configuration read from environment variables.

These values are needed before the settings registry is available (where to
find config files, where to log), so they are plain module constants.
"""

import os
from pathlib import Path


def string_to_bool(value: str) -> bool:
    return value.strip().lower() in ("true", "1", "yes", "y", "on")


CONFIG_DIR = Path(os.getenv("CONFIG_DIR", "/config"))
LOG_DIR = Path(os.getenv("LOG_DIR", "/var/log/dorexport"))

DEBUG = string_to_bool(os.getenv("DEBUG", "false"))
ENABLE_LOGGING = string_to_bool(os.getenv("ENABLE_LOGGING", "false"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")


def _is_config_dir_writable() -> bool:
    """Check whether CONFIG_DIR exists and accepts writes."""
    if not CONFIG_DIR.is_dir():
        return False
    return os.access(CONFIG_DIR, os.W_OK)
