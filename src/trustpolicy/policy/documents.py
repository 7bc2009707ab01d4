"""Canonical Firefox enterprise policy documents."""
from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from ..config import InstallerConfig

POLICY_LOCATION = "distribution/policies.json"
MAC_POLICY_LOCATION = "Contents/Resources/" + POLICY_LOCATION


class DocumentShape(str, Enum):
    ENTERPRISE_ROOTS = "enterprise-root-trust"
    INSTALL_CERT = "install-named-certificate"
    REMOVE_CERT = "remove-named-certificate"


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, list):
        return tuple(_freeze(v) for v in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(v) for v in value]
    return value


@dataclass(frozen=True)
class PolicyDocument:
    """One fixed-shape policy document. Content is immutable."""

    shape: DocumentShape
    content: Mapping[str, Any]

    @classmethod
    def create(cls, shape: DocumentShape, content: Mapping[str, Any]) -> "PolicyDocument":
        return cls(shape, _freeze(content))

    def to_dict(self) -> dict:
        """Mutable copy suitable for JSON serialization or merging."""
        return _thaw(self.content)

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    def __str__(self) -> str:
        return self.to_json()


def _certificates(policy: Mapping[str, Any]) -> dict:
    return {"policies": {"Certificates": dict(policy)}}


ENTERPRISE_ROOT_POLICY = PolicyDocument.create(
    DocumentShape.ENTERPRISE_ROOTS, _certificates({"ImportEnterpriseRoots": True})
)


def install_cert_policy(config: InstallerConfig) -> PolicyDocument:
    return PolicyDocument.create(
        DocumentShape.INSTALL_CERT, _certificates({"Install": [config.certificate_name]})
    )


def remove_cert_policy(config: InstallerConfig) -> PolicyDocument:
    return PolicyDocument.create(
        DocumentShape.REMOVE_CERT, _certificates({"Install": [config.stale_certificate_path]})
    )
