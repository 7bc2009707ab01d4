"""Firefox enterprise policy selection and documents."""
from __future__ import annotations

from .documents import ENTERPRISE_ROOT_POLICY, DocumentShape, PolicyDocument
from .providers import (
    LinuxPolicyProvider,
    MacPolicyProvider,
    PlatformPolicyProvider,
    WindowsPolicyProvider,
    select_provider,
)
from .versions import POLICY_RULES, RESTART_VERSION, PlatformPolicyRule, Version

__all__ = [
    "ENTERPRISE_ROOT_POLICY",
    "DocumentShape",
    "PolicyDocument",
    "LinuxPolicyProvider",
    "MacPolicyProvider",
    "PlatformPolicyProvider",
    "WindowsPolicyProvider",
    "select_provider",
    "POLICY_RULES",
    "RESTART_VERSION",
    "PlatformPolicyRule",
    "Version",
]
