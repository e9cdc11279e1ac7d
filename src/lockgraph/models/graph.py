"""Normalized dependency graph returned by every lockfile parser."""

from __future__ import annotations

from dataclasses import dataclass

from .edge import Edge
from .node import Node


@dataclass(frozen=True)
class DependencyGraph:
    """Immutable parse result: resolved packages and their depends-on edges."""

    nodes: tuple[Node, ...]
    edges: tuple[Edge, ...]
    lockfile_format: str
    root_id: str

    @property
    def root(self) -> Node:
        return self.node_by_id()[self.root_id]

    def node_by_id(self) -> dict[str, Node]:
        return {node.id: node for node in self.nodes}

    def conflicting_names(self) -> list[str]:
        """Return sorted package names flagged with a version conflict."""
        return sorted({node.name for node in self.nodes if node.has_version_conflict})

    def to_dict(self) -> dict[str, object]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
        }
