"""Final validation step shared by all lockfile families."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .errors import NoDependenciesFound
from .models import DependencyGraph, Edge, Node

logger = logging.getLogger(__name__)


def assemble(
    nodes: Iterable[Node],
    edges: Iterable[Edge],
    *,
    root_id: str,
    lockfile_format: str,
    require_dependencies: bool = True,
) -> DependencyGraph:
    """Deduplicate nodes by id, drop dangling edges and build the graph.

    Raises:
        NoDependenciesFound: if ``require_dependencies`` is set and nothing but
            the root node remains.
    """
    unique: dict[str, Node] = {}
    for node in nodes:
        unique.setdefault(node.id, node)

    kept: list[Edge] = []
    dropped = 0
    for edge in edges:
        if edge.source_id in unique and edge.target_id in unique:
            kept.append(edge)
        else:
            dropped += 1
    if dropped:
        logger.debug("Dropped %d edge(s) pointing at unknown nodes", dropped)

    dependencies = [node_id for node_id in unique if node_id != root_id]
    if require_dependencies and not dependencies:
        raise NoDependenciesFound(f"No dependencies found in the {lockfile_format} file.")

    return DependencyGraph(
        nodes=tuple(unique.values()),
        edges=tuple(kept),
        lockfile_format=lockfile_format,
        root_id=root_id,
    )
