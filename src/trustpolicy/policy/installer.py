"""Installs the Firefox enterprise root policy, or the legacy auto-config
script for releases too old to honor policies."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

from ..config import DEFAULT_CONFIG, InstallerConfig
from ..core.injection import DependencyContainer, get_container
from ..core.interfaces import ApplicationInstance, InstanceOutcome, SpawnResult, Strategy
from ..core.resilience import attempt_spawn
from ..locator import AppAlias
from ..utils.certificates import Certificate, CertificateEncodingError
from ..utils.files import ensure_traversable_dir, make_world_readable
from ..utils.json_store import DocumentStoreError
from .documents import DocumentShape
from .providers import PlatformPolicyProvider, select_provider
from .versions import RESTART_VERSION

logger = logging.getLogger(__name__)

PRIVATE_FLAG = "-private"


class FirefoxPolicyInstaller:
    """Chooses and applies a trust strategy for every located Firefox install."""

    def __init__(
        self,
        container: Optional[DependencyContainer] = None,
        provider: Optional[PlatformPolicyProvider] = None,
        config: InstallerConfig = DEFAULT_CONFIG,
    ) -> None:
        self.container = container or get_container()
        self.config = config
        self.provider = provider or select_provider(self.container, config=config)

    # ------------------------------------------------------------------
    # Strategy selection and inspection
    # ------------------------------------------------------------------

    def honors_policy(self, instance: ApplicationInstance) -> bool:
        """True if the instance is new enough for native enterprise policy."""
        if instance.version is None:
            logger.warning(
                "Firefox-compatible browser was found %s, but no version information is available",
                instance.path,
            )
            return False
        return instance.version >= self.provider.min_version

    def has_policy(self, instance: ApplicationInstance) -> bool:
        """True if the policy file or an alternate marker already grants trust."""
        document = self.provider.policy_document()
        path = self.provider.policy_path(instance)
        return (
            self.container.document_store.contains(path, document.to_dict())
            or self.has_alt_policy(instance)
        )

    def has_alt_policy(self, instance: ApplicationInstance) -> bool:
        """True if an alternative policy (registry value, plist key) is set."""
        return self.provider.has_alt_policy(instance)

    # ------------------------------------------------------------------
    # Policy writer
    # ------------------------------------------------------------------

    def install_policy(self, instance: ApplicationInstance, certificate: Certificate) -> bool:
        """Write the native policy file for ``instance``.

        Returns False (after logging) on any filesystem or document fault.
        """
        store = self.container.document_store
        json_path = self.provider.policy_path(instance)
        document = self.provider.policy_document()
        try:
            if document.shape is DocumentShape.INSTALL_CERT:
                self.provider.prepare_certificate(certificate)

            ensure_traversable_dir(json_path.parent)

            stale = self.provider.stale_document()
            if stale is not None:
                # Drop entries a previous release may have left behind
                store.write(json_path, stale.to_dict(), overwrite=False, delete=True)

            store.write(json_path, document.to_dict(), overwrite=False, delete=False)
            make_world_readable(json_path)
        except (OSError, ValueError, DocumentStoreError):
            logger.warning(
                "Could not install enterprise policy %s to %s", document, json_path, exc_info=True
            )
            return False
        return True

    def install_alt_policy(self, instance: ApplicationInstance) -> bool:
        """Set the user-scope platform-native marker."""
        return self.provider.install_alt_policy(instance)

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------

    def install(
        self,
        certificate: Certificate,
        *host_names: str,
        alt_policy: bool = False,
    ) -> List[InstanceOutcome]:
        """Install trust for ``certificate`` into every located instance."""
        locator = self.container.locator
        instances = locator.locate(AppAlias.FIREFOX)
        running = locator.get_running_paths(instances)
        outcomes: List[InstanceOutcome] = []

        for instance in instances:
            if self.honors_policy(instance):
                logger.info(
                    "Installing Firefox (%s) enterprise root certificate policy %s",
                    instance.name, instance.path,
                )
                outcome = InstanceOutcome(
                    instance, Strategy.NATIVE_POLICY, self.install_policy(instance, certificate)
                )
                if alt_policy:
                    outcome.details["alt_policy"] = self.install_alt_policy(instance)
            else:
                logger.info("Installing Firefox (%s) auto-config script %s", instance.name, instance.path)
                outcome = self._install_auto_config(instance, certificate, host_names)

            if instance.exe_path in running:
                outcome.restart = self._prompt_restart(instance)
            outcomes.append(outcome)

        return outcomes

    def _install_auto_config(
        self,
        instance: ApplicationInstance,
        certificate: Certificate,
        host_names: Sequence[str],
    ) -> InstanceOutcome:
        try:
            cert_data = certificate.to_base64()
            self.container.legacy.install_auto_config_script(instance, cert_data, *host_names)
        except (CertificateEncodingError, ValueError, OSError) as exc:
            logger.warning("Unable to install auto-config script to %s", instance.path, exc_info=True)
            return InstanceOutcome(instance, Strategy.AUTO_CONFIG, False, str(exc))
        return InstanceOutcome(instance, Strategy.AUTO_CONFIG, True)

    def _prompt_restart(self, instance: ApplicationInstance) -> SpawnResult:
        result = SpawnResult.SKIPPED
        if instance.version is not None and instance.version >= RESTART_VERSION:
            result = attempt_spawn(
                self.container.spawner,
                str(instance.exe_path),
                PRIVATE_FLAG,
                self.config.restart_page,
            )
        if result is not SpawnResult.SPAWNED:
            logger.warning("%s must be restarted for changes to take effect", instance.name)
        return result

    def uninstall(self) -> List[InstanceOutcome]:
        """Remove what :meth:`install` added, where the platform allows it."""
        outcomes: List[InstanceOutcome] = []
        for instance in self.container.locator.locate(AppAlias.FIREFOX):
            if self.honors_policy(instance):
                outcome = self._uninstall_policy(instance)
            else:
                logger.info("Uninstalling Firefox auto-config script %s", instance.path)
                outcome = InstanceOutcome(instance, Strategy.AUTO_CONFIG, True)
                try:
                    self.container.legacy.uninstall_auto_config_script(instance)
                except OSError as exc:
                    logger.warning(
                        "Unable to remove Firefox (%s) auto-config script %s: %s",
                        instance.name, instance.path, exc,
                    )
                    outcome.success = False
                    outcome.message = str(exc)
            outcomes.append(outcome)
        return outcomes

    def _uninstall_policy(self, instance: ApplicationInstance) -> InstanceOutcome:
        outcome = InstanceOutcome(instance, Strategy.NATIVE_POLICY, True)
        if not self.provider.supports_uninstall:
            # Enterprise root trust cannot be retracted without side effects
            logger.info("Skipping uninstall of Firefox enterprise root certificate policy %s", instance.path)
            outcome.message = "skipped"
            return outcome

        json_path = self.provider.policy_path(instance)
        try:
            if json_path.exists():
                self.container.document_store.write(
                    json_path,
                    self.provider.policy_document().to_dict(),
                    overwrite=False,
                    delete=True,
                )
            else:
                outcome.message = "no policy file"
        except (OSError, ValueError, DocumentStoreError) as exc:
            logger.warning("Unable to remove Firefox (%s) policy %s: %s", instance.name, json_path, exc)
            outcome.success = False
            outcome.message = str(exc)
        return outcome

    def status(self) -> List[Dict[str, Any]]:
        """Describe every located instance without changing anything."""
        report: List[Dict[str, Any]] = []
        for instance in self.container.locator.locate(AppAlias.FIREFOX):
            honors = self.honors_policy(instance)
            report.append({
                "name": instance.name,
                "path": str(instance.path),
                "version": str(instance.version) if instance.version else None,
                "strategy": (Strategy.NATIVE_POLICY if honors else Strategy.AUTO_CONFIG).value,
                "has_policy": (
                    self.has_policy(instance) if honors
                    else self.container.legacy.has_auto_config_script(instance)
                ),
            })
        return report
