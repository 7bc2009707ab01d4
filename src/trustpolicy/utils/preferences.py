"""macOS preference domain access through the ``defaults`` tool."""
from __future__ import annotations

import logging
from typing import Optional

from ..core.resilience import with_graceful_degradation
from .commands import run_command

logger = logging.getLogger(__name__)

DEFAULTS = "/usr/bin/defaults"


class DefaultsPreferenceStore:
    """Reads and writes preference keys with ``defaults read``/``defaults write``.

    ``domain`` may be a bundle identifier or an absolute plist path without
    the ``.plist`` suffix (e.g. ``/Library/Preferences/org.mozilla.firefox``).
    """

    def __init__(self, executable: str = DEFAULTS) -> None:
        self.executable = executable

    @with_graceful_degradation(default_return=None, error_message="Preference read failed")
    def read_string(self, domain: str, key: str) -> Optional[str]:
        result = run_command([self.executable, "read", domain, key], raise_on_timeout=False)
        if result.returncode != 0:
            logger.debug("defaults read %s %s: %s", domain, key, result.stderr)
            return None
        return result.stdout

    @with_graceful_degradation(default_return=False, error_message="Preference write failed")
    def write_bool(self, domain: str, key: str, value: bool) -> bool:
        result = run_command(
            [self.executable, "write", domain, key, "-bool", "TRUE" if value else "FALSE"],
            raise_on_timeout=False,
        )
        if result.returncode != 0:
            logger.warning("defaults write %s %s failed: %s", domain, key, result.stderr)
            return False
        return True
