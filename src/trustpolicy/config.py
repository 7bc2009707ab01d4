"""Installer configuration."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

APP_NAME = "trustpolicy"
CERTIFICATE_EXTENSION = ".crt"

# Firefox on Linux resolves bare certificate names in the Install policy
# against this directory.
LINUX_CERT_DIR = Path("/usr/lib/mozilla/certificates")

RESTART_PAGE = "about:restartrequired"

CERT_DIR_ENV = "TRUSTPOLICY_CERT_DIR"


@dataclass(frozen=True)
class InstallerConfig:
    """Read-only settings shared by every component of one run."""

    app_name: str = APP_NAME
    linux_cert_dir: Path = LINUX_CERT_DIR
    restart_page: str = RESTART_PAGE

    @property
    def certificate_name(self) -> str:
        """File name of the certificate installed for the Install policy."""
        return self.app_name + CERTIFICATE_EXTENSION

    @property
    def certificate_path(self) -> Path:
        return self.linux_cert_dir / self.certificate_name

    @property
    def stale_certificate_path(self) -> str:
        """Location used by older releases, removed before each install."""
        return f"/opt/{self.app_name}/auth/root-ca.crt"

    @property
    def autoconfig_pref_name(self) -> str:
        return f"{self.app_name}-prefs.js"

    @property
    def autoconfig_cfg_name(self) -> str:
        return f"{self.app_name}-config.cfg"

    def with_overrides(self, **changes) -> "InstallerConfig":
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


def load_config(**overrides) -> InstallerConfig:
    """Build the configuration from defaults, the environment and overrides."""
    env_dir = os.environ.get(CERT_DIR_ENV)
    config = InstallerConfig(linux_cert_dir=Path(env_dir)) if env_dir else InstallerConfig()
    return config.with_overrides(**overrides)


DEFAULT_CONFIG = InstallerConfig()
