"""Platform policy providers.

Each host platform family applies Firefox enterprise policy a little
differently. One provider per family captures those differences and is
selected once per run by :func:`select_provider`.

=========  =======================  ========================  ==================
platform   policy file              document                  alternate marker
=========  =======================  ========================  ==================
Windows    distribution/            ImportEnterpriseRoots     registry DWORD
macOS      Contents/Resources/...   ImportEnterpriseRoots     preference domain
Linux      distribution/            Install <cert name>       none
=========  =======================  ========================  ==================
"""
from __future__ import annotations

import abc
import logging
from pathlib import Path
from typing import ClassVar, Optional

from ..config import DEFAULT_CONFIG, InstallerConfig
from ..core.interfaces import ApplicationInstance, PreferenceStore, RegistryAccessor
from ..utils.certificates import Certificate
from ..utils.files import ensure_traversable_dir, make_world_readable
from ..utils.registry import RegistryScope
from ..utils.system_info import PlatformFamily, get_platform_family
from .documents import (
    ENTERPRISE_ROOT_POLICY,
    MAC_POLICY_LOCATION,
    POLICY_LOCATION,
    PolicyDocument,
    install_cert_policy,
    remove_cert_policy,
)
from .versions import Version, min_policy_version

logger = logging.getLogger(__name__)

ALT_POLICY_NAME = "ImportEnterpriseRoots"
WINDOWS_ALT_POLICY = "Software\\Policies\\%s\\%s\\Certificates"
MAC_ALT_POLICY = "%s/Library/Preferences/%s"


class PlatformPolicyProvider(abc.ABC):
    """Platform-specific half of the policy engine."""

    family: ClassVar[PlatformFamily]
    # Whether uninstall may retract the native policy on this platform
    supports_uninstall: ClassVar[bool] = False

    def __init__(self, config: InstallerConfig = DEFAULT_CONFIG) -> None:
        self.config = config

    @property
    def min_version(self) -> Version:
        return min_policy_version(self.family)

    def policy_path(self, instance: ApplicationInstance) -> Path:
        return instance.path / POLICY_LOCATION

    def policy_document(self) -> PolicyDocument:
        return ENTERPRISE_ROOT_POLICY

    def stale_document(self) -> Optional[PolicyDocument]:
        """Document whose entries are removed before the policy is written."""
        return None

    def prepare_certificate(self, certificate: Certificate) -> None:
        """Place the certificate where the policy document expects it."""

    @abc.abstractmethod
    def has_alt_policy(self, instance: ApplicationInstance) -> bool:
        """True if a platform-native marker grants enterprise-root trust."""

    @abc.abstractmethod
    def install_alt_policy(self, instance: ApplicationInstance) -> bool:
        """Set the user-scope platform-native marker."""


class WindowsPolicyProvider(PlatformPolicyProvider):
    family = PlatformFamily.WINDOWS

    def __init__(self, registry: RegistryAccessor, config: InstallerConfig = DEFAULT_CONFIG) -> None:
        super().__init__(config)
        self.registry = registry

    @staticmethod
    def alt_policy_key(instance: ApplicationInstance) -> str:
        return WINDOWS_ALT_POLICY % (instance.vendor, instance.vendorless_name)

    def has_alt_policy(self, instance: ApplicationInstance) -> bool:
        key = self.alt_policy_key(instance)
        # User preference takes precedence
        for scope in (RegistryScope.CURRENT_USER, RegistryScope.LOCAL_MACHINE):
            found = self.registry.read_int(scope, key, ALT_POLICY_NAME)
            if found is not None:
                logger.debug("%s found in %s\\%s: %s", ALT_POLICY_NAME, scope.value, key, found)
                return found != 0
        return False

    def install_alt_policy(self, instance: ApplicationInstance) -> bool:
        key = self.alt_policy_key(instance)
        return self.registry.write_int(RegistryScope.CURRENT_USER, key, ALT_POLICY_NAME, 1)


class MacPolicyProvider(PlatformPolicyProvider):
    family = PlatformFamily.MAC

    def __init__(
        self,
        preferences: PreferenceStore,
        home: Path,
        config: InstallerConfig = DEFAULT_CONFIG,
    ) -> None:
        super().__init__(config)
        self.preferences = preferences
        self.home = home

    def policy_path(self, instance: ApplicationInstance) -> Path:
        return instance.path / MAC_POLICY_LOCATION

    def user_domain(self, instance: ApplicationInstance) -> str:
        return MAC_ALT_POLICY % (self.home, instance.bundle_id)

    @staticmethod
    def system_domain(instance: ApplicationInstance) -> str:
        return MAC_ALT_POLICY % ("", instance.bundle_id)

    def has_alt_policy(self, instance: ApplicationInstance) -> bool:
        if not instance.bundle_id:
            logger.debug("%s has no bundle identifier, skipping preference lookup", instance.name)
            return False
        # User preference takes precedence
        for domain in (self.user_domain(instance), self.system_domain(instance)):
            found = self.preferences.read_string(domain, ALT_POLICY_NAME)
            if found is not None:
                logger.debug("%s found in %s: %s", ALT_POLICY_NAME, domain, found.strip())
                return found.strip() == "1"
        return False

    def install_alt_policy(self, instance: ApplicationInstance) -> bool:
        if not instance.bundle_id:
            logger.warning("Cannot write %s for %s: no bundle identifier", ALT_POLICY_NAME, instance.name)
            return False
        return self.preferences.write_bool(self.user_domain(instance), ALT_POLICY_NAME, True)


class LinuxPolicyProvider(PlatformPolicyProvider):
    """Linux lacks the concept of "enterprise roots"; the certificate is
    written to a well-known directory and installed by name instead."""

    family = PlatformFamily.LINUX
    supports_uninstall = True

    def policy_document(self) -> PolicyDocument:
        return install_cert_policy(self.config)

    def stale_document(self) -> Optional[PolicyDocument]:
        return remove_cert_policy(self.config)

    def prepare_certificate(self, certificate: Certificate) -> None:
        cert_dir = ensure_traversable_dir(self.config.linux_cert_dir)
        make_world_readable(cert_dir.parent, traversable=True)
        cert_file = self.config.certificate_path
        cert_file.write_text(certificate.to_pem(), encoding="ascii")
        make_world_readable(cert_file)
        logger.debug("Wrote certificate %s", cert_file)

    def has_alt_policy(self, instance: ApplicationInstance) -> bool:
        return False

    def install_alt_policy(self, instance: ApplicationInstance) -> bool:
        return False


def select_provider(
    container,
    family: Optional[PlatformFamily] = None,
    config: InstallerConfig = DEFAULT_CONFIG,
) -> PlatformPolicyProvider:
    """Build the provider for the host platform (or ``family`` when given)."""
    family = family or get_platform_family()
    if family is PlatformFamily.WINDOWS:
        provider: PlatformPolicyProvider = WindowsPolicyProvider(container.registry, config)
    elif family is PlatformFamily.MAC:
        provider = MacPolicyProvider(container.preferences, container.home, config)
    else:
        provider = LinuxPolicyProvider(config)
    logger.debug("Using %s for platform %s", type(provider).__name__, family.value)
    return provider
