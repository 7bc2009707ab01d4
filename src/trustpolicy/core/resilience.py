"""Resilience patterns for graceful degradation.

The installer keeps going when an individual browser install fails. Key
principles:

1. No single instance failure should abort the whole install/uninstall pass
2. Errors are captured and reported, not propagated
3. Best-effort side effects (restart prompts) report what happened instead of
   raising

Usage:
    @with_graceful_degradation(default_return=None)
    def read_marker(...): ...

    outcome.restart = attempt_spawn(spawner, exe, "-private", page)
"""
from __future__ import annotations

import functools
import logging
import traceback
from typing import Any, Callable, Dict, Iterable, TypeVar

from .interfaces import InstanceOutcome, ProcessSpawner, SpawnResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


def with_graceful_degradation(
    default_return: T,
    log_errors: bool = True,
    error_message: str = "Operation failed",
) -> Callable[[Callable[..., T]], Callable[..., T]]:
    """Decorator for graceful degradation on errors.

    Wraps a function to catch all exceptions and return a default
    value instead of propagating the error.

    Args:
        default_return: Value to return on error
        log_errors: Whether to log caught errors
        error_message: Message to log with errors

    Returns:
        Decorated function that won't raise exceptions
    """

    def decorator(func: Callable[..., T]) -> Callable[..., T]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> T:
            try:
                return func(*args, **kwargs)
            except Exception as exc:
                if log_errors:
                    logger.warning(
                        "%s: %s - %s",
                        error_message,
                        type(exc).__name__,
                        str(exc),
                    )
                    logger.debug("Traceback: %s", traceback.format_exc())
                return default_return

        return wrapper

    return decorator


def attempt_spawn(spawner: ProcessSpawner, executable: str, *args: str) -> SpawnResult:
    """Start a process, reporting failure as a result instead of raising."""
    try:
        spawner.spawn(executable, *args)
    except Exception as exc:
        logger.debug("Could not spawn %s: %s", executable, exc)
        return SpawnResult.FAILED
    return SpawnResult.SPAWNED


def summarize(outcomes: Iterable[InstanceOutcome]) -> Dict[str, Any]:
    """Get summary statistics for a pass over application instances."""
    outcomes = list(outcomes)
    return {
        "total": len(outcomes),
        "succeeded": sum(1 for o in outcomes if o.success),
        "failed": sum(1 for o in outcomes if not o.success),
        "by_strategy": {
            strategy: sum(1 for o in outcomes if o.strategy.value == strategy)
            for strategy in sorted({o.strategy.value for o in outcomes})
        },
        "restart_prompted": sum(1 for o in outcomes if o.restart is SpawnResult.SPAWNED),
        "restart_required": sum(
            1 for o in outcomes if o.restart in (SpawnResult.SKIPPED, SpawnResult.FAILED)
        ),
    }
