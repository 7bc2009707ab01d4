"""Discovery of installed Firefox-family browsers."""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from .core.interfaces import ApplicationInstance
from .policy.versions import Version
from .utils.commands import run_command_graceful
from .utils.parsers import load_ini_section, load_plist
from .utils.system_info import PlatformFamily, get_platform_family

logger = logging.getLogger(__name__)

_LINUX_BASES: Tuple[Path, ...] = (
    Path("/usr/lib"),
    Path("/usr/lib64"),
    Path("/usr/local/lib"),
    Path("/opt"),
)


@dataclass(frozen=True)
class AppVariant:
    """One distribution of a Firefox-family browser."""

    name: str
    vendor: str
    vendorless_name: str
    exe_name: str
    windows_dir: str
    mac_bundle: str
    linux_dirs: Tuple[str, ...]
    bundle_id: Optional[str] = None


class AppAlias(Enum):
    """Families of applications the installer knows how to find."""

    FIREFOX = (
        AppVariant("Mozilla Firefox", "Mozilla", "Firefox", "firefox",
                   "Mozilla Firefox", "Firefox.app", ("firefox", "firefox-esr"),
                   "org.mozilla.firefox"),
        AppVariant("Firefox Developer Edition", "Mozilla", "Firefox", "firefox",
                   "Firefox Developer Edition", "Firefox Developer Edition.app",
                   ("firefox-developer-edition",), "org.mozilla.firefoxdeveloperedition"),
        AppVariant("Firefox Nightly", "Mozilla", "Firefox", "firefox",
                   "Firefox Nightly", "Firefox Nightly.app", ("firefox-nightly",),
                   "org.mozilla.nightly"),
        AppVariant("Waterfox", "Waterfox", "Waterfox", "waterfox",
                   "Waterfox", "Waterfox.app", ("waterfox",), "net.waterfox.waterfox"),
    )

    @property
    def variants(self) -> Tuple[AppVariant, ...]:
        return self.value


class FirefoxLocator:
    """Finds installs in the well-known locations of the host platform.

    ``search_dirs`` replaces the platform's default base directories
    (Program Files, /Applications, /usr/lib, ...).
    """

    def __init__(
        self,
        family: Optional[PlatformFamily] = None,
        search_dirs: Optional[Sequence[Path]] = None,
    ) -> None:
        self.family = family or get_platform_family()
        self.search_dirs = list(search_dirs) if search_dirs is not None else None

    def _bases(self) -> List[Path]:
        if self.search_dirs is not None:
            return self.search_dirs
        if self.family is PlatformFamily.WINDOWS:
            names = ("ProgramFiles", "ProgramFiles(x86)", "ProgramW6432")
            return [Path(os.environ[n]) for n in names if os.environ.get(n)]
        if self.family is PlatformFamily.MAC:
            return [Path("/Applications"), Path.home() / "Applications"]
        return list(_LINUX_BASES)

    def _candidates(self, variant: AppVariant) -> Iterable[Tuple[Path, Path]]:
        """Yield (install root, executable) pairs for ``variant``."""
        for base in self._bases():
            if self.family is PlatformFamily.WINDOWS:
                root = base / variant.windows_dir
                yield root, root / f"{variant.exe_name}.exe"
            elif self.family is PlatformFamily.MAC:
                root = base / variant.mac_bundle
                yield root, root / "Contents" / "MacOS" / variant.exe_name
            else:
                for dir_name in variant.linux_dirs:
                    root = base / dir_name
                    yield root, root / variant.exe_name

    def _read_instance(self, variant: AppVariant, root: Path, exe: Path) -> ApplicationInstance:
        resources = root / "Contents" / "Resources" if self.family is PlatformFamily.MAC else root
        app_info = load_ini_section(resources / "application.ini", "App")
        bundle_id = variant.bundle_id
        if self.family is PlatformFamily.MAC:
            info = load_plist(root / "Contents" / "Info.plist") or {}
            bundle_id = info.get("CFBundleIdentifier", bundle_id)

        version = Version.try_parse(app_info.get("Version"))
        if version is None:
            logger.debug("No readable version for %s", root)
        return ApplicationInstance(
            name=variant.name,
            path=root,
            exe_path=exe,
            version=version,
            vendor=app_info.get("Vendor", variant.vendor),
            vendorless_name=app_info.get("Name", variant.vendorless_name),
            bundle_id=bundle_id,
        )

    def locate(self, alias: AppAlias) -> List[ApplicationInstance]:
        found: List[ApplicationInstance] = []
        seen: Set[Path] = set()
        for variant in alias.variants:
            for root, exe in self._candidates(variant):
                if not exe.is_file():
                    continue
                real_root = root.resolve()
                if real_root in seen:
                    continue
                seen.add(real_root)
                instance = self._read_instance(variant, root, exe)
                logger.info("Found %s %s at %s", instance.name, instance.version or "(unknown version)", root)
                found.append(instance)
        return found

    def _running_executables(self) -> Set[Path]:
        if self.family is PlatformFamily.LINUX:
            running: Set[Path] = set()
            for proc in Path("/proc").glob("[0-9]*"):
                try:
                    running.add(Path(os.readlink(proc / "exe")))
                except OSError:
                    continue
            return running
        if self.family is PlatformFamily.MAC:
            command = ["/bin/ps", "-axo", "comm="]
        else:
            command = [
                "powershell", "-NoProfile", "-Command",
                "Get-Process | Select-Object -ExpandProperty Path",
            ]
        result = run_command_graceful(command)
        return {Path(line.strip()) for line in result.stdout.splitlines() if line.strip()}

    def get_running_paths(self, instances: Sequence[ApplicationInstance]) -> Set[Path]:
        """Executable paths of ``instances`` that are currently running."""
        if not instances:
            return set()
        running = {_resolve(p) for p in self._running_executables()}
        return {i.exe_path for i in instances if _resolve(i.exe_path) in running}


def _resolve(path: Path) -> Path:
    try:
        return path.resolve()
    except OSError:
        return path
