"""Tests for browser discovery."""
from __future__ import annotations

import plistlib
from pathlib import Path
from unittest.mock import patch

from trustpolicy.locator import AppAlias, FirefoxLocator
from trustpolicy.policy.versions import Version
from trustpolicy.utils.system_info import PlatformFamily


def make_linux_install(base: Path, dir_name: str = "firefox", exe: str = "firefox", ini: str | None = None) -> Path:
    root = base / dir_name
    root.mkdir(parents=True)
    (root / exe).write_text("#!/bin/sh\n")
    if ini is not None:
        (root / "application.ini").write_text(ini)
    return root


APPLICATION_INI = """\
[App]
Vendor=Mozilla
Name=Firefox
Version=115.3.1
BuildID=20230925
"""


class TestLinuxDiscovery:
    def test_finds_install_with_version(self, tmp_path):
        root = make_linux_install(tmp_path, ini=APPLICATION_INI)
        locator = FirefoxLocator(PlatformFamily.LINUX, search_dirs=[tmp_path])

        instance, = locator.locate(AppAlias.FIREFOX)

        assert instance.name == "Mozilla Firefox"
        assert instance.path == root
        assert instance.exe_path == root / "firefox"
        assert instance.version == Version(115, 3, 1)
        assert instance.vendor == "Mozilla"
        assert instance.vendorless_name == "Firefox"

    def test_missing_application_ini(self, tmp_path):
        make_linux_install(tmp_path)
        instance, = FirefoxLocator(PlatformFamily.LINUX, search_dirs=[tmp_path]).locate(AppAlias.FIREFOX)
        assert instance.version is None

    def test_directory_without_executable_is_ignored(self, tmp_path):
        (tmp_path / "firefox").mkdir()
        assert FirefoxLocator(PlatformFamily.LINUX, search_dirs=[tmp_path]).locate(AppAlias.FIREFOX) == []

    def test_vendor_from_application_ini(self, tmp_path):
        ini = "[App]\nVendor=Waterfox\nName=Waterfox\nVersion=56.2.0\n"
        make_linux_install(tmp_path, "waterfox", "waterfox", ini)

        instance, = FirefoxLocator(PlatformFamily.LINUX, search_dirs=[tmp_path]).locate(AppAlias.FIREFOX)

        assert instance.name == "Waterfox"
        assert instance.vendor == "Waterfox"
        assert instance.version == Version(56, 2, 0)

    def test_symlinked_install_reported_once(self, tmp_path):
        make_linux_install(tmp_path, ini=APPLICATION_INI)
        (tmp_path / "firefox-esr").symlink_to(tmp_path / "firefox")

        found = FirefoxLocator(PlatformFamily.LINUX, search_dirs=[tmp_path]).locate(AppAlias.FIREFOX)

        assert len(found) == 1

    def test_multiple_variants(self, tmp_path):
        make_linux_install(tmp_path, ini=APPLICATION_INI)
        make_linux_install(tmp_path, "firefox-nightly", ini=APPLICATION_INI.replace("115.3.1", "120.0a1"))

        found = FirefoxLocator(PlatformFamily.LINUX, search_dirs=[tmp_path]).locate(AppAlias.FIREFOX)

        assert [i.name for i in found] == ["Mozilla Firefox", "Firefox Nightly"]
        assert found[1].version == Version(120, 0, 0)


def test_mac_bundle_layout(tmp_path):
    root = tmp_path / "Firefox.app"
    (root / "Contents" / "MacOS").mkdir(parents=True)
    (root / "Contents" / "MacOS" / "firefox").write_text("")
    (root / "Contents" / "Resources").mkdir()
    (root / "Contents" / "Resources" / "application.ini").write_text(APPLICATION_INI)
    with (root / "Contents" / "Info.plist").open("wb") as handle:
        plistlib.dump({"CFBundleIdentifier": "org.mozilla.firefox.esr"}, handle)

    instance, = FirefoxLocator(PlatformFamily.MAC, search_dirs=[tmp_path]).locate(AppAlias.FIREFOX)

    assert instance.exe_path == root / "Contents" / "MacOS" / "firefox"
    assert instance.bundle_id == "org.mozilla.firefox.esr"
    assert instance.version == Version(115, 3, 1)


def test_windows_layout(tmp_path):
    root = tmp_path / "Mozilla Firefox"
    root.mkdir()
    (root / "firefox.exe").write_text("")

    instance, = FirefoxLocator(PlatformFamily.WINDOWS, search_dirs=[tmp_path]).locate(AppAlias.FIREFOX)

    assert instance.exe_path == root / "firefox.exe"


class TestRunningPaths:
    def test_matches_running_executables(self, tmp_path):
        root = make_linux_install(tmp_path, ini=APPLICATION_INI)
        locator = FirefoxLocator(PlatformFamily.LINUX, search_dirs=[tmp_path])
        instances = locator.locate(AppAlias.FIREFOX)

        with patch.object(locator, "_running_executables", return_value={root / "firefox", Path("/usr/bin/bash")}):
            assert locator.get_running_paths(instances) == {root / "firefox"}

    def test_nothing_running(self, tmp_path):
        make_linux_install(tmp_path, ini=APPLICATION_INI)
        locator = FirefoxLocator(PlatformFamily.LINUX, search_dirs=[tmp_path])
        instances = locator.locate(AppAlias.FIREFOX)

        with patch.object(locator, "_running_executables", return_value=set()):
            assert locator.get_running_paths(instances) == set()

    def test_no_instances_skips_process_scan(self):
        locator = FirefoxLocator(PlatformFamily.LINUX, search_dirs=[])
        with patch.object(locator, "_running_executables") as scan:
            assert locator.get_running_paths([]) == set()
        scan.assert_not_called()

    @patch("trustpolicy.locator.run_command_graceful")
    def test_mac_uses_ps(self, mock_run):
        mock_run.return_value.stdout = "/Applications/Firefox.app/Contents/MacOS/firefox\n/sbin/launchd\n"
        locator = FirefoxLocator(PlatformFamily.MAC, search_dirs=[])

        running = locator._running_executables()

        assert Path("/Applications/Firefox.app/Contents/MacOS/firefox") in running
        assert mock_run.call_args[0][0][0] == "/bin/ps"
