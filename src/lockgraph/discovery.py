"""Locate lockfiles below a project directory for batch scans."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .detection import LockfileFormat

logger = logging.getLogger(__name__)

# Installed packages ship their own lockfiles; those are not part of the project.
SKIPPED_DIRS = frozenset({"node_modules", ".git", ".venv"})

_FORMATS_BY_NAME = {fmt.value: fmt for fmt in LockfileFormat}


def discover_lockfiles(root: Path) -> list[tuple[Path, LockfileFormat]]:
    """Return ``(path, format)`` for every lockfile under ``root``, sorted by path.

    The format comes from the file name alone. Skipped directories are pruned
    from the walk rather than filtered afterwards, so large ``node_modules``
    trees are never descended into.
    """
    found: list[tuple[Path, LockfileFormat]] = []
    for dirpath, dirnames, filenames in os.walk(root.resolve()):
        dirnames[:] = [d for d in dirnames if d not in SKIPPED_DIRS]
        for filename in filenames:
            fmt = _FORMATS_BY_NAME.get(filename)
            if fmt is None:
                continue
            path = Path(dirpath) / filename
            if path.is_file():
                found.append((path, fmt))

    logger.debug("Found %d lockfiles under %s", len(found), root)
    return sorted(found)
