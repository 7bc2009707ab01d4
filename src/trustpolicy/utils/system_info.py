"""Host platform detection."""
from __future__ import annotations

import logging
import os
import platform
from enum import Enum
from functools import lru_cache

logger = logging.getLogger(__name__)


class PlatformFamily(Enum):
    """Host platform families that differ in how browser policy is applied."""
    WINDOWS = "windows"   # registry-backed alternate marker
    MAC = "mac"           # preference-domain alternate marker, bundle layout
    LINUX = "linux"       # everything else with a posix layout


@lru_cache(maxsize=1)
def get_platform_family() -> PlatformFamily:
    """Detect the platform performing the installation."""
    system = platform.system().lower()
    if system == "windows" or os.name == "nt":
        family = PlatformFamily.WINDOWS
    elif system == "darwin":
        family = PlatformFamily.MAC
    else:
        family = PlatformFamily.LINUX
    logger.debug("Detected platform family %s (%s)", family.value, system)
    return family


def clear_cached_info() -> None:
    """Clear cached platform detection (used by tests)."""
    get_platform_family.cache_clear()
