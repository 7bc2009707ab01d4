"""trustpolicy - make Firefox trust a locally generated root CA."""
from __future__ import annotations

from .policy.installer import FirefoxPolicyInstaller

__version__ = "1.0.0"

__all__ = ["FirefoxPolicyInstaller", "__version__"]
