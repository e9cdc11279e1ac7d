"""Per-parse accumulator for nodes, edges and the name -> versions index."""

from __future__ import annotations

from dataclasses import replace

from .assembler import assemble
from .conflicts import flag_conflicts
from .models import DependencyGraph, DependencyKind, Edge, Node, make_node_id


class GraphBuilder:
    """Collect graph pieces for a single parse call.

    A builder is created by a parser, handed down its helper functions and
    consumed by :meth:`build`. It is never shared between parses.
    """

    def __init__(self, lockfile_format: str) -> None:
        self.lockfile_format = lockfile_format
        self.root_id: str | None = None
        self._nodes: dict[str, Node] = {}
        self._edges: list[Edge] = []
        self._versions: dict[str, set[str]] = {}
        self._first_by_name: dict[str, str] = {}

    def add_root(self, name: str, version: str, graph_distance: int | None = None) -> Node:
        node = self.add_node(name, version, DependencyKind.PRODUCTION, graph_distance)
        self.root_id = node.id
        return node

    def add_node(
        self,
        name: str,
        version: str,
        dependency_kind: DependencyKind | str | None = None,
        graph_distance: int | None = None,
    ) -> Node:
        """Create ``name@version`` unless it exists; return the stored node."""
        node_id = make_node_id(name, version)
        existing = self._nodes.get(node_id)
        if existing is not None:
            return existing
        node = Node.make(name, version, dependency_kind, graph_distance)
        self._nodes[node_id] = node
        self._versions.setdefault(name, set()).add(version)
        self._first_by_name.setdefault(name, node_id)
        return node

    def has_node(self, node_id: str) -> bool:
        return node_id in self._nodes

    def first_node_named(self, name: str) -> Node | None:
        """Return the earliest added node carrying ``name``."""
        node_id = self._first_by_name.get(name)
        return self._nodes[node_id] if node_id is not None else None

    def set_distance(self, node_id: str, distance: int) -> None:
        self._nodes[node_id] = replace(self._nodes[node_id], graph_distance=distance)

    def add_edge(
        self,
        source_id: str,
        target_id: str,
        dependency_kind: DependencyKind | str | None = None,
    ) -> Edge:
        edge = Edge(source_id, target_id, DependencyKind.coerce(dependency_kind))
        self._edges.append(edge)
        return edge

    @property
    def nodes(self) -> list[Node]:
        return list(self._nodes.values())

    @property
    def edges(self) -> list[Edge]:
        return list(self._edges)

    @property
    def versions_by_name(self) -> dict[str, set[str]]:
        return {name: set(versions) for name, versions in self._versions.items()}

    def build(self, *, require_dependencies: bool = True) -> DependencyGraph:
        if self.root_id is None:
            raise RuntimeError("GraphBuilder.build() called before add_root()")
        nodes = flag_conflicts(self._nodes.values(), self.versions_by_name)
        return assemble(
            nodes,
            self._edges,
            root_id=self.root_id,
            lockfile_format=self.lockfile_format,
            require_dependencies=require_dependencies,
        )
