"""Core parsing entrypoints.

This module MUST NOT perform any I/O beyond reading local files handed to it,
so it can be used by the CLI, batch scans and tests alike. Remote lockfiles
are fetched by :mod:`lockgraph.fetch` before they reach this module.
"""

from __future__ import annotations

import logging
from pathlib import Path
from collections.abc import Callable
from typing import TypeAlias

from .detection import LockfileFormat, detect_format, resolve_format
from .discovery import discover_lockfiles
from .errors import LockfileError
from .models import DependencyGraph
from .parsers.package_lock import parse as parse_package_lock
from .parsers.pnpm_lock import parse as parse_pnpm_lock
from .parsers.yarn_lock import parse as parse_yarn_lock

logger = logging.getLogger(__name__)

ParseFunction: TypeAlias = Callable[[str], DependencyGraph]

PARSERS: dict[LockfileFormat, ParseFunction] = {
    LockfileFormat.PACKAGE_LOCK: parse_package_lock,
    LockfileFormat.YARN: parse_yarn_lock,
    LockfileFormat.PNPM: parse_pnpm_lock,
}


def parse_lockfile(
    content: str,
    filename: str | None = None,
    *,
    lockfile_type: str | None = None,
) -> DependencyGraph:
    """Parse lockfile ``content`` into a normalized dependency graph.

    Params:
        content: the full lockfile text
        filename: optional file name or path used as a format hint; when it
            does not name a known lockfile the content is sniffed instead
        lockfile_type: explicit format selector (``package-lock``, ``yarn``,
            ``pnpm`` or a lockfile name); takes precedence over ``filename``

    Raises:
        UnsupportedFormat: if ``lockfile_type`` names an unknown format.
        MalformedInput: if the document cannot be decoded.
        NoDependenciesFound: if the lockfile lists no dependencies (npm/yarn).
    """
    if lockfile_type is not None:
        fmt = resolve_format(lockfile_type)
    else:
        fmt = detect_format(content, filename)
    logger.debug("Parsing %s as %s", filename or "<content>", fmt.value)
    return PARSERS[fmt](content)


def read_lockfile(path: Path) -> str:
    # utf-8-sig drops a leading BOM that some editors write into lockfiles.
    return path.read_text(encoding="utf-8-sig")


def parse_lockfile_path(path: Path, lockfile_type: str | None = None) -> DependencyGraph:
    """Read ``path`` and parse it, using its file name as the format hint."""
    return parse_lockfile(read_lockfile(path), path.name, lockfile_type=lockfile_type)


def scan_directory(root: Path) -> list[tuple[Path, DependencyGraph | LockfileError]]:
    """Parse every lockfile found under ``root``.

    Each entry pairs the lockfile path with either its graph or the error it
    raised, so one broken lockfile does not hide the others.
    """
    root = root.resolve()
    results: list[tuple[Path, DependencyGraph | LockfileError]] = []
    for path, fmt in discover_lockfiles(root):
        try:
            results.append((path, parse_lockfile_path(path, fmt.value)))
        except LockfileError as exc:
            logger.warning("Skipping %s: %s", path, exc)
            results.append((path, exc))
    return results
