"""
Vectorizer Platform Helpers
---------------------------
Cross-platform data directory resolution.

Priority for every directory: environment override > platformdirs.
"""

import logging
import os
import sys
from pathlib import Path

import platformdirs

logger = logging.getLogger("Vectorizer.Platform")

IS_WINDOWS = sys.platform == "win32"

_APP_NAME = "vectorizer"
_APP_AUTHOR = "Vectorizer"


def is_running_in_docker() -> bool:
    """Detect if we're running inside a Docker container."""
    if os.environ.get("VECTORIZER_DOCKER") == "1":
        return True
    return Path("/.dockerenv").exists()


def get_data_dir() -> Path:
    """
    Get the vectorizer data directory (holds the qdrant collection).

    Priority: VECTORIZER_DATA_DIR env var > platformdirs user data dir.
    Docker override: /data when running in a container.
    """
    env_val = os.environ.get("VECTORIZER_DATA_DIR")
    if env_val:
        return Path(env_val)
    if is_running_in_docker():
        return Path("/data")
    return Path(platformdirs.user_data_dir(_APP_NAME, _APP_AUTHOR))


def home_dir() -> Path:
    """User home used for tilde expansion of git config paths."""
    return Path.home()
