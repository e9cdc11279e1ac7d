"""Data models for the normalized dependency graph."""

from __future__ import annotations

from .edge import Edge
from .graph import DependencyGraph
from .node import DependencyKind, Node, make_node_id

__all__ = [
    "DependencyGraph",
    "DependencyKind",
    "Edge",
    "Node",
    "make_node_id",
]
