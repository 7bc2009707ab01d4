"""Windows registry access for the alternate policy marker."""
from __future__ import annotations

import logging
from enum import Enum
from typing import Optional

try:
    import winreg  # type: ignore
except ImportError:  # pragma: no cover - non-Windows
    winreg = None  # type: ignore

from ..core.resilience import with_graceful_degradation

logger = logging.getLogger(__name__)


class RegistryScope(str, Enum):
    """Registry hive a value is read from or written to."""

    CURRENT_USER = "HKCU"
    LOCAL_MACHINE = "HKLM"


def _hive(scope: RegistryScope):
    if winreg is None:
        raise RuntimeError("winreg not available on this platform")
    return {
        RegistryScope.CURRENT_USER: winreg.HKEY_CURRENT_USER,
        RegistryScope.LOCAL_MACHINE: winreg.HKEY_LOCAL_MACHINE,
    }[scope]


class WindowsRegistry:
    """Minimal registry helper backed by winreg.

    Reads and writes never raise: a missing key, a value of the wrong type or
    an access error all read as absent / report failure.
    """

    @with_graceful_degradation(default_return=None, error_message="Registry read failed")
    def read_int(self, scope: RegistryScope, key: str, value_name: str) -> Optional[int]:
        hive = _hive(scope)
        try:
            with winreg.OpenKey(hive, key) as handle:
                value, value_type = winreg.QueryValueEx(handle, value_name)
        except FileNotFoundError:
            return None
        if value_type not in (winreg.REG_DWORD, winreg.REG_QWORD):
            logger.debug("%s\\%s\\%s is not an integer value", scope.value, key, value_name)
            return None
        return int(value)

    @with_graceful_degradation(default_return=False, error_message="Registry write failed")
    def write_int(self, scope: RegistryScope, key: str, value_name: str, value: int) -> bool:
        hive = _hive(scope)
        with winreg.CreateKeyEx(hive, key, 0, winreg.KEY_WRITE) as handle:
            winreg.SetValueEx(handle, value_name, 0, winreg.REG_DWORD, int(value))
        logger.info("Set %s\\%s\\%s = %d", scope.value, key, value_name, value)
        return True
