"""Pytest configuration and shared fixtures for the policy installer tests."""
from __future__ import annotations

import sys
from pathlib import Path
from typing import List, Optional, Tuple

import pytest

# Add src/ to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from trustpolicy.config import InstallerConfig  # noqa: E402
from trustpolicy.core.injection import (  # noqa: E402
    DependencyContainer,
    MockLocator,
    MockPreferenceStore,
    MockRegistry,
    RecordingSpawner,
    reset_container,
)
from trustpolicy.core.interfaces import ApplicationInstance  # noqa: E402
from trustpolicy.policy.versions import Version  # noqa: E402
from trustpolicy.utils.certificates import Certificate  # noqa: E402
from trustpolicy.utils.json_store import JsonDocumentStore  # noqa: E402
from trustpolicy.utils.system_info import clear_cached_info  # noqa: E402

# Not a real certificate; the engine never parses DER.
FAKE_DER = bytes.fromhex("3082010a0282010100") + bytes(range(48))


class RecordingLegacyInstaller:
    """Legacy installer double recording every call."""

    def __init__(self, error: Optional[Exception] = None) -> None:
        self.installed: List[Tuple[ApplicationInstance, str, Tuple[str, ...]]] = []
        self.uninstalled: List[ApplicationInstance] = []
        self.error = error

    def install_auto_config_script(self, instance, certificate_b64, *host_names):
        if self.error is not None:
            raise self.error
        self.installed.append((instance, certificate_b64, host_names))

    def uninstall_auto_config_script(self, instance):
        if self.error is not None:
            raise self.error
        self.uninstalled.append(instance)

    def has_auto_config_script(self, instance):
        return any(i == instance for i, _, _ in self.installed)


@pytest.fixture(autouse=True)
def _isolate_globals():
    """Reset the global container and cached platform detection."""
    reset_container()
    clear_cached_info()
    yield
    reset_container()
    clear_cached_info()


@pytest.fixture
def certificate() -> Certificate:
    return Certificate(der=FAKE_DER)


@pytest.fixture
def make_instance(tmp_path):
    """Factory fixture for application instances rooted under tmp_path."""

    def _create(
        version: Optional[str] = "70.0.0",
        name: str = "Mozilla Firefox",
        root: Optional[Path] = None,
        bundle_id: Optional[str] = "org.mozilla.firefox",
    ) -> ApplicationInstance:
        root = root or tmp_path / name.replace(" ", "_")
        root.mkdir(parents=True, exist_ok=True)
        return ApplicationInstance(
            name=name,
            path=root,
            exe_path=root / "firefox",
            version=Version.parse(version) if version else None,
            vendor="Mozilla",
            vendorless_name="Firefox",
            bundle_id=bundle_id,
        )

    return _create


@pytest.fixture
def installer_config(tmp_path) -> InstallerConfig:
    return InstallerConfig(app_name="trustpolicy", linux_cert_dir=tmp_path / "mozilla" / "certificates")


@pytest.fixture
def legacy() -> RecordingLegacyInstaller:
    return RecordingLegacyInstaller()


@pytest.fixture
def make_container(legacy):
    """Factory fixture for containers wired to in-memory doubles."""

    def _create(instances=(), running=(), spawner=None, home=Path("/Users/tester")):
        return DependencyContainer(
            locator=MockLocator(instances, running),
            document_store=JsonDocumentStore(),
            registry=MockRegistry(),
            preferences=MockPreferenceStore(),
            legacy=legacy,
            spawner=spawner or RecordingSpawner(),
            home=home,
        )

    return _create
