"""Core architectural components for trustpolicy.

This module provides:
- Data types and collaborator protocols
- Dependency injection for OS interactions
- Graceful degradation patterns
"""

from .interfaces import (
    ApplicationInstance,
    InstanceOutcome,
    SpawnResult,
    Strategy,
)
from .injection import DependencyContainer, get_container, reset_container, set_container
from .resilience import attempt_spawn, summarize, with_graceful_degradation

__all__ = [
    # Interfaces
    "ApplicationInstance",
    "InstanceOutcome",
    "SpawnResult",
    "Strategy",
    # Dependency Injection
    "DependencyContainer",
    "get_container",
    "set_container",
    "reset_container",
    # Resilience
    "attempt_spawn",
    "summarize",
    "with_graceful_degradation",
]
