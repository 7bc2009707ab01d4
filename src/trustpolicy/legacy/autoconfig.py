"""Legacy Firefox auto-config installer.

Firefox releases older than enterprise policy support still execute an
"auto-config" script at startup when ``defaults/pref/*.js`` points
``general.config.filename`` at a file in the install root. The script
imports our certificate as a trusted authority.

Both files carry a marker line so uninstall only removes what we wrote.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Sequence

from ..config import DEFAULT_CONFIG, InstallerConfig
from ..core.interfaces import ApplicationInstance
from ..utils.files import ensure_traversable_dir, make_world_readable
from ..utils.system_info import PlatformFamily, get_platform_family

logger = logging.getLogger(__name__)

PREFS_TEMPLATE = """\
// {marker}
pref("general.config.filename", "{cfg_name}");
pref("general.config.obscure_value", 0);
"""

# The first line of an auto-config file is always skipped by Firefox
CFG_TEMPLATE = """\
// {marker}
var certData = {cert_data};
var hostNames = {host_names};
try {{
    var certdb = Components.classes["@mozilla.org/security/x509certdb;1"]
        .getService(Components.interfaces.nsIX509CertDB);
    certdb.addCertFromBase64(certData, "C,C,C");
}} catch (e) {{}}
pref("{pref_prefix}.trusted_hosts", hostNames.join(","));
"""


class AutoConfigInstaller:
    """Writes and removes the auto-config pref and script files."""

    def __init__(
        self,
        config: InstallerConfig = DEFAULT_CONFIG,
        family: PlatformFamily | None = None,
    ) -> None:
        self.config = config
        self.family = family or get_platform_family()

    @property
    def marker(self) -> str:
        return f"{self.config.app_name} auto-config"

    def _resources(self, instance: ApplicationInstance) -> Path:
        if self.family is PlatformFamily.MAC:
            return instance.path / "Contents" / "Resources"
        return instance.path

    def prefs_path(self, instance: ApplicationInstance) -> Path:
        return self._resources(instance) / "defaults" / "pref" / self.config.autoconfig_pref_name

    def cfg_path(self, instance: ApplicationInstance) -> Path:
        return self._resources(instance) / self.config.autoconfig_cfg_name

    def render_cfg(self, certificate_b64: str, host_names: Sequence[str]) -> str:
        return CFG_TEMPLATE.format(
            marker=self.marker,
            cert_data=json.dumps(certificate_b64),
            host_names=json.dumps(list(host_names)),
            pref_prefix=self.config.app_name,
        )

    def install_auto_config_script(
        self, instance: ApplicationInstance, certificate_b64: str, *host_names: str
    ) -> None:
        """Write the pref and script files.

        Raises:
            ValueError: If no certificate data is given.
            OSError: If the files cannot be written.
        """
        if not certificate_b64:
            raise ValueError("Certificate data is empty")
        prefs = self.prefs_path(instance)
        cfg = self.cfg_path(instance)

        ensure_traversable_dir(prefs.parent)
        prefs.write_text(
            PREFS_TEMPLATE.format(marker=self.marker, cfg_name=self.config.autoconfig_cfg_name),
            encoding="utf-8",
        )
        make_world_readable(prefs)

        cfg.write_text(self.render_cfg(certificate_b64, host_names), encoding="utf-8")
        make_world_readable(cfg)
        logger.info("Installed auto-config script %s (%d host names)", cfg, len(host_names))

    def _is_ours(self, path: Path) -> bool:
        try:
            with path.open("r", encoding="utf-8", errors="replace") as handle:
                return self.marker in handle.readline()
        except OSError:
            return False

    def has_auto_config_script(self, instance: ApplicationInstance) -> bool:
        return self._is_ours(self.prefs_path(instance)) and self._is_ours(self.cfg_path(instance))

    def uninstall_auto_config_script(self, instance: ApplicationInstance) -> None:
        """Remove the files written by :meth:`install_auto_config_script`.

        Files without our marker are left alone.

        Raises:
            OSError: If a file cannot be removed.
        """
        for path in (self.prefs_path(instance), self.cfg_path(instance)):
            if not path.exists():
                continue
            if not self._is_ours(path):
                logger.warning("Leaving %s in place, it was not written by %s", path, self.config.app_name)
                continue
            path.unlink()
            logger.info("Removed %s", path)
