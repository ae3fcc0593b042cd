"""Version detection for installed and development builds."""

from __future__ import annotations

import os
from importlib.metadata import PackageNotFoundError, version

_FALLBACK_VERSION = "unknown"


def get_version() -> str:
    """Get the current version string.

    Priority:
    1. BUILD_VERSION environment variable (set during CI/CD)
    2. Installed distribution metadata
    3. Fallback to "unknown"
    """
    build_version = os.environ.get("BUILD_VERSION")
    if build_version:
        return build_version.strip()
    try:
        return version("dingbridge")
    except PackageNotFoundError:
        return _FALLBACK_VERSION


__version__ = get_version()
