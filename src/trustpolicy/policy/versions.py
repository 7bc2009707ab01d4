"""Semantic versions and the native policy support table.

Versions are for Mozilla's official Firefox release. Third-party builds may
adopt enterprise policy support under different version numbers.
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Mapping, Optional

from ..utils.system_info import PlatformFamily

_VERSION_PATTERN = re.compile(r"^\s*v?(\d+)(?:\.(\d+))?(?:\.(\d+))?")


@dataclass(frozen=True, order=True)
class Version:
    """major.minor.patch version; anything after the numeric part is ignored."""

    major: int
    minor: int = 0
    patch: int = 0

    @classmethod
    def parse(cls, text: str) -> "Version":
        """Parse strings such as ``"70.0"``, ``"115.3.1esr"`` or ``"121.0b4"``.

        Raises:
            ValueError: If the string does not start with a number.
        """
        match = _VERSION_PATTERN.match(text or "")
        if not match:
            raise ValueError(f"Invalid version string: {text!r}")
        major, minor, patch = (int(part) if part else 0 for part in match.groups())
        return cls(major, minor, patch)

    @classmethod
    def try_parse(cls, text: Optional[str]) -> Optional["Version"]:
        if not text:
            return None
        try:
            return cls.parse(text)
        except ValueError:
            return None

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"


@dataclass(frozen=True)
class PlatformPolicyRule:
    """Minimum application version honoring native enterprise-root policy."""

    platform: PlatformFamily
    min_version: Version


def build_rule_table(rules: Iterable[PlatformPolicyRule]) -> Mapping[PlatformFamily, PlatformPolicyRule]:
    """Index rules by platform, rejecting duplicates. The result is read-only."""
    table: dict[PlatformFamily, PlatformPolicyRule] = {}
    for rule in rules:
        if rule.platform in table:
            raise ValueError(f"Duplicate policy rule for platform {rule.platform.value}")
        table[rule.platform] = rule
    return MappingProxyType(table)


POLICY_RULES = build_rule_table((
    PlatformPolicyRule(PlatformFamily.WINDOWS, Version(62, 0, 0)),
    PlatformPolicyRule(PlatformFamily.MAC, Version(63, 0, 0)),
    PlatformPolicyRule(PlatformFamily.LINUX, Version(65, 0, 0)),
))

# about:restartrequired and -private are understood from this release on
RESTART_VERSION = Version(60, 0, 0)


def min_policy_version(platform: PlatformFamily) -> Version:
    return POLICY_RULES[platform].min_version
