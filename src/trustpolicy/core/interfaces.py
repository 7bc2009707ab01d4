"""Data types and collaborator protocols for the policy engine.

Architecture:
┌─────────────────────────────────────────────────────────────────┐
│                        ORCHESTRATOR                              │
│  - Iterates located application instances                        │
│  - Chooses native policy or legacy auto-config per instance      │
│  - Prompts a restart for running instances                       │
└─────────────────────────────────────────────────────────────────┘
                              │
                              ▼
┌─────────────────────────────────────────────────────────────────┐
│                   PLATFORM POLICY PROVIDER                       │
│  - One variant per platform family, selected once                │
│  - Policy file location, document shape, alternate marker        │
└─────────────────────────────────────────────────────────────────┘
                              │
                              ▼
┌─────────────────────────────────────────────────────────────────┐
│                       COLLABORATORS                              │
│  - Locator, document store, registry, preference store           │
│  - Legacy auto-config installer, process spawner                 │
└─────────────────────────────────────────────────────────────────┘
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Mapping, Optional, Protocol, Sequence, Set

if TYPE_CHECKING:
    from ..policy.versions import Version
    from ..utils.registry import RegistryScope


@dataclass(frozen=True)
class ApplicationInstance:
    """Snapshot of one discovered browser installation."""

    name: str
    path: Path
    exe_path: Path
    version: Optional["Version"] = None
    vendor: str = "Mozilla"
    vendorless_name: str = "Firefox"
    bundle_id: Optional[str] = None


class Strategy(str, Enum):
    """Trust injection mechanism chosen for an instance."""

    NATIVE_POLICY = "native-policy"
    AUTO_CONFIG = "auto-config"


class SpawnResult(str, Enum):
    """Outcome of the best-effort restart prompt."""

    NOT_RUNNING = "not-running"   # instance was not running, nothing to do
    SKIPPED = "skipped"           # too old for the restart page
    SPAWNED = "spawned"
    FAILED = "failed"


@dataclass
class InstanceOutcome:
    """Result of installing or uninstalling for one application instance."""

    instance: ApplicationInstance
    strategy: Strategy
    success: bool
    message: str = ""
    restart: SpawnResult = SpawnResult.NOT_RUNNING
    details: Dict[str, Any] = field(default_factory=dict)


# =============================================================================
# COLLABORATORS
# =============================================================================


class Locator(Protocol):
    """Discovers installed browsers and the ones currently running."""

    def locate(self, alias: Any) -> List[ApplicationInstance]:
        ...

    def get_running_paths(self, instances: Sequence[ApplicationInstance]) -> Set[Path]:
        ...


class DocumentStore(Protocol):
    """Reads and merges structured JSON documents."""

    def write(
        self,
        path: Path,
        document: Mapping[str, Any],
        overwrite: bool = False,
        delete: bool = False,
    ) -> Mapping[str, Any]:
        ...

    def contains(self, path: Path, document: Mapping[str, Any]) -> bool:
        ...


class RegistryAccessor(Protocol):
    """Integer values in the Windows registry. Never raises."""

    def read_int(self, scope: "RegistryScope", key: str, value_name: str) -> Optional[int]:
        ...

    def write_int(self, scope: "RegistryScope", key: str, value_name: str, value: int) -> bool:
        ...


class PreferenceStore(Protocol):
    """macOS preference domains. Never raises."""

    def read_string(self, domain: str, key: str) -> Optional[str]:
        ...

    def write_bool(self, domain: str, key: str, value: bool) -> bool:
        ...


class LegacyInstaller(Protocol):
    """Auto-config script installer for browsers without policy support."""

    def install_auto_config_script(
        self, instance: ApplicationInstance, certificate_b64: str, *host_names: str
    ) -> None:
        ...

    def uninstall_auto_config_script(self, instance: ApplicationInstance) -> None:
        ...

    def has_auto_config_script(self, instance: ApplicationInstance) -> bool:
        ...


class ProcessSpawner(Protocol):
    """Starts a process without waiting for it. Raises OSError on failure."""

    def spawn(self, executable: str, *args: str) -> None:
        ...
