"""Dependency injection container for OS interactions.

All registry, preference, filesystem-document, discovery and process
operations go through the container, making them mockable for testing.
The real implementations wrap actual system calls, while tests can inject
the in-memory doubles defined here.

Usage:
    # Production code
    container = get_container()
    container.registry.read_int(RegistryScope.CURRENT_USER, key, name)

    # Test code
    container = DependencyContainer(registry=MockRegistry(), ...)
    set_container(container)
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Set, Tuple

from .interfaces import (
    ApplicationInstance,
    DocumentStore,
    LegacyInstaller,
    Locator,
    PreferenceStore,
    ProcessSpawner,
    RegistryAccessor,
)

logger = logging.getLogger(__name__)

# Global container instance (singleton pattern)
_container: Optional["DependencyContainer"] = None


class PopenSpawner:
    """Production spawner: fire-and-forget subprocess."""

    def spawn(self, executable: str, *args: str) -> None:
        from ..utils.commands import spawn_detached

        spawn_detached(executable, *args)


class MockRegistry:
    """In-memory registry keyed by (scope, key, value name)."""

    def __init__(self) -> None:
        self.values: Dict[Tuple[str, str, str], int] = {}
        self.fail_writes = False

    def set_value(self, scope, key: str, value_name: str, value: int) -> None:
        self.values[(str(getattr(scope, "value", scope)), key, value_name)] = value

    def read_int(self, scope, key: str, value_name: str) -> Optional[int]:
        return self.values.get((str(getattr(scope, "value", scope)), key, value_name))

    def write_int(self, scope, key: str, value_name: str, value: int) -> bool:
        if self.fail_writes:
            return False
        self.set_value(scope, key, value_name, value)
        return True


class MockPreferenceStore:
    """In-memory preference domains; values are stored as ``defaults read`` prints them."""

    def __init__(self) -> None:
        self.values: Dict[Tuple[str, str], str] = {}
        self.reads: List[Tuple[str, str]] = []

    def set_value(self, domain: str, key: str, value: str) -> None:
        self.values[(domain, key)] = value

    def read_string(self, domain: str, key: str) -> Optional[str]:
        self.reads.append((domain, key))
        return self.values.get((domain, key))

    def write_bool(self, domain: str, key: str, value: bool) -> bool:
        self.values[(domain, key)] = "1\n" if value else "0\n"
        return True


class RecordingSpawner:
    """Records spawn requests; optionally fails them."""

    def __init__(self, error: Optional[Exception] = None) -> None:
        self.calls: List[Tuple[str, ...]] = []
        self.error = error

    def spawn(self, executable: str, *args: str) -> None:
        self.calls.append((executable, *args))
        if self.error is not None:
            raise self.error


class MockLocator:
    """Returns a fixed set of instances and running executables."""

    def __init__(
        self,
        instances: Sequence[ApplicationInstance] = (),
        running: Sequence[Path] = (),
    ) -> None:
        self.instances = list(instances)
        self.running: Set[Path] = set(running)

    def locate(self, alias) -> List[ApplicationInstance]:
        return list(self.instances)

    def get_running_paths(self, instances: Sequence[ApplicationInstance]) -> Set[Path]:
        return {i.exe_path for i in instances if i.exe_path in self.running}


@dataclass
class DependencyContainer:
    """Container for all injectable dependencies.

    Attributes:
        locator: Finds installed browsers and running executables
        document_store: Reads/merges JSON policy documents
        registry: Windows registry accessor
        preferences: macOS preference domain accessor
        legacy: Auto-config script installer
        spawner: Fire-and-forget process starter
        home: Home directory of the user whose preferences are written
    """

    locator: Locator
    document_store: DocumentStore
    registry: RegistryAccessor
    preferences: PreferenceStore
    legacy: LegacyInstaller
    spawner: ProcessSpawner = field(default_factory=PopenSpawner)
    home: Path = field(default_factory=Path.home)


def create_default_container(config=None) -> DependencyContainer:
    """Build a container wired to the real system."""
    # Late imports to avoid circular dependency with the utils package
    from ..config import load_config
    from ..legacy.autoconfig import AutoConfigInstaller
    from ..locator import FirefoxLocator
    from ..utils.json_store import JsonDocumentStore
    from ..utils.preferences import DefaultsPreferenceStore
    from ..utils.registry import WindowsRegistry

    return DependencyContainer(
        locator=FirefoxLocator(),
        document_store=JsonDocumentStore(),
        registry=WindowsRegistry(),
        preferences=DefaultsPreferenceStore(),
        legacy=AutoConfigInstaller(config=config or load_config()),
    )


def get_container() -> DependencyContainer:
    """Get the global dependency container.

    Returns the singleton container instance, creating it with
    the real implementations if it doesn't exist.
    """
    global _container
    if _container is None:
        _container = create_default_container()
    return _container


def set_container(container: DependencyContainer) -> None:
    """Set the global dependency container.

    Used primarily for testing to inject mock dependencies.
    """
    global _container
    _container = container


def reset_container() -> None:
    """Reset the global container to None.

    Forces recreation with real implementations on next get_container().
    """
    global _container
    _container = None
