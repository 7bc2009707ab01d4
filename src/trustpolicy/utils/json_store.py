"""JSON document store used for browser policy files.

Documents are merged into (or removed from) whatever is already on disk so
settings placed there by administrators or other tools survive:

* objects merge key by key, recursively
* arrays are treated as sets: merging appends missing items, removing
  drops matching items
* scalars are replaced on merge and deleted on remove when equal

Containers emptied by a removal are pruned.
"""
from __future__ import annotations

import copy
import json
import logging
import os
import stat
import tempfile
from pathlib import Path
from typing import Any, Dict, Mapping

logger = logging.getLogger(__name__)

_MISSING = object()

# Mode given to newly created documents; existing files keep theirs
_NEW_FILE_MODE = 0o644


class DocumentStoreError(RuntimeError):
    """Raised when a JSON document cannot be read or written."""

    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


def merge_document(target: Dict[str, Any], source: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge ``source`` into ``target`` in place and return ``target``."""
    for key, value in source.items():
        current = target.get(key, _MISSING)
        if isinstance(current, dict) and isinstance(value, Mapping):
            merge_document(current, value)
        elif isinstance(current, list) and isinstance(value, list):
            for item in value:
                if item not in current:
                    current.append(copy.deepcopy(item))
        else:
            target[key] = copy.deepcopy(value)
    return target


def remove_document(target: Dict[str, Any], source: Mapping[str, Any]) -> Dict[str, Any]:
    """Remove every entry of ``source`` from ``target`` in place and return ``target``."""
    for key, value in source.items():
        current = target.get(key, _MISSING)
        if current is _MISSING:
            continue
        if isinstance(current, dict) and isinstance(value, Mapping):
            remove_document(current, value)
            if not current:
                del target[key]
        elif isinstance(current, list) and isinstance(value, list):
            remaining = [item for item in current if item not in value]
            if remaining:
                target[key] = remaining
            else:
                del target[key]
        elif current == value:
            del target[key]
    return target


def contains_document(target: Any, source: Any) -> bool:
    """Return True if every entry of ``source`` is present in ``target``."""
    if isinstance(source, Mapping):
        if not isinstance(target, Mapping):
            return False
        return all(
            key in target and contains_document(target[key], value)
            for key, value in source.items()
        )
    if isinstance(source, list):
        if not isinstance(target, list):
            return False
        return all(item in target for item in source)
    return target == source


class JsonDocumentStore:
    """Reads, merges and writes JSON documents on the local filesystem."""

    def __init__(self, indent: int = 2) -> None:
        self.indent = indent

    def read(self, path: Path) -> Dict[str, Any]:
        """Load a JSON object from ``path``.

        Raises:
            DocumentStoreError: If the file is not a JSON object.
            OSError: If the file cannot be read.
        """
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            raise DocumentStoreError(path, f"not valid UTF-8 ({exc.reason})") from exc
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise DocumentStoreError(path, f"malformed JSON ({exc})") from exc
        if not isinstance(data, dict):
            raise DocumentStoreError(path, "top-level value is not an object")
        return data

    def write(
        self,
        path: Path,
        document: Mapping[str, Any],
        overwrite: bool = False,
        delete: bool = False,
    ) -> Dict[str, Any]:
        """Merge (or remove) ``document`` into the JSON file at ``path``.

        Args:
            path: Target file. Its parent directory must already exist.
            document: Document to merge or remove.
            overwrite: Ignore existing file content instead of combining with it.
            delete: Remove the document's entries instead of merging them.

        Returns:
            The content that was written.

        Raises:
            DocumentStoreError: Missing parent directory or malformed existing file.
            OSError: On filesystem errors.
        """
        path = Path(path)
        if not path.parent.is_dir():
            raise DocumentStoreError(path, "parent directory does not exist")

        existing: Dict[str, Any] = {}
        if path.exists() and not overwrite:
            existing = self.read(path)

        if delete:
            content = remove_document(existing, document)
        else:
            content = merge_document(existing, document)

        self._atomic_write(path, json.dumps(content, indent=self.indent) + "\n")
        logger.debug("Wrote %s (delete=%s, overwrite=%s)", path, delete, overwrite)
        return content

    def contains(self, path: Path, document: Mapping[str, Any]) -> bool:
        """Check whether ``document`` is already present in the file at ``path``."""
        path = Path(path)
        if not path.is_file():
            return False
        try:
            return contains_document(self.read(path), document)
        except (OSError, DocumentStoreError) as exc:
            logger.debug("Cannot inspect %s: %s", path, exc)
            return False

    @staticmethod
    def _atomic_write(path: Path, text: str) -> None:
        mode = stat.S_IMODE(path.stat().st_mode) if path.exists() else _NEW_FILE_MODE
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                os.chmod(tmp_name, mode)
                handle.write(text)
            os.replace(tmp_name, path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise
