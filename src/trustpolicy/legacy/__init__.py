"""Auto-config fallback for Firefox releases without policy support."""
from __future__ import annotations

from .autoconfig import AutoConfigInstaller

__all__ = ["AutoConfigInstaller"]
