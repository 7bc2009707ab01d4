"""Filesystem permission helpers."""
from __future__ import annotations

import logging
import stat
from pathlib import Path

logger = logging.getLogger(__name__)

_READ_ALL = stat.S_IRUSR | stat.S_IRGRP | stat.S_IROTH
_EXEC_ALL = stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH


def make_world_readable(path: Path, traversable: bool = False) -> None:
    """Add read (and optionally execute) permission for everyone.

    Raises:
        OSError: If the mode cannot be changed.
    """
    mode = path.stat().st_mode
    wanted = mode | _READ_ALL | (_EXEC_ALL if traversable else 0)
    if wanted != mode:
        path.chmod(stat.S_IMODE(wanted))
        logger.debug("chmod %o %s", stat.S_IMODE(wanted), path)


def ensure_traversable_dir(path: Path) -> Path:
    """Create ``path`` if needed and let every user list and enter it."""
    path.mkdir(parents=True, exist_ok=True)
    make_world_readable(path, traversable=True)
    return path
