"""Version conflict detection shared by every lockfile parser."""

from __future__ import annotations

import logging
from dataclasses import replace
from collections.abc import Iterable, Mapping

from packaging.version import InvalidVersion, Version

from .models import Node

logger = logging.getLogger(__name__)


def _version_key(version: str) -> tuple[int, Version | str]:
    try:
        return (0, Version(version))
    except InvalidVersion:
        return (1, version)


def sorted_versions(versions: Iterable[str]) -> list[str]:
    """Return unique versions in release order; unparsable strings sort last."""
    return sorted(set(versions), key=_version_key)


def find_conflicts(index: Mapping[str, Iterable[str]]) -> set[str]:
    """Return the package names that resolve to more than one version."""
    return {name for name, versions in index.items() if len(set(versions)) > 1}


def flag_conflicts(nodes: Iterable[Node], index: Mapping[str, Iterable[str]]) -> list[Node]:
    """Return ``nodes`` with ``has_version_conflict`` set from the name index.

    Every node whose name has several versions is flagged, whichever version it
    carries. Nodes for names with a single version are left unflagged.
    """
    conflicting = find_conflicts(index)
    if conflicting:
        logger.debug("Version conflicts detected for: %s", ", ".join(sorted(conflicting)))
    return [
        replace(node, has_version_conflict=node.name in conflicting) for node in nodes
    ]
