"""Utility helpers for trustpolicy."""
from __future__ import annotations

from .certificates import Certificate, CertificateEncodingError, load_certificate
from .commands import (
    CommandTimeoutError,
    CommandResult,
    run_command,
    run_command_graceful,
    spawn_detached,
)
from .json_store import DocumentStoreError, JsonDocumentStore
from .system_info import PlatformFamily, get_platform_family

__all__ = [
    # Certificates
    "Certificate",
    "CertificateEncodingError",
    "load_certificate",
    # Commands
    "CommandTimeoutError",
    "CommandResult",
    "run_command",
    "run_command_graceful",
    "spawn_detached",
    # Documents
    "DocumentStoreError",
    "JsonDocumentStore",
    # System info
    "PlatformFamily",
    "get_platform_family",
]
